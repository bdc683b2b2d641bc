"""Immutable reference data for one simulator process."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from mwisim.errors import ConfigurationError
from .ability import Ability
from .house import Achievement, AchievementTier, HouseRoom
from .item import Item
from .monster import Monster
from .zone import CombatZone


class GameData(BaseModel):
    """Detail maps keyed by hrid, validated on load.

    ``action_detail_map`` only holds combat actions; the loaders drop
    non-combat actions before validation.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    action_detail_map: dict[str, CombatZone] = Field(default_factory=dict)
    combat_monster_detail_map: dict[str, Monster] = Field(default_factory=dict)
    item_detail_map: dict[str, Item] = Field(default_factory=dict)
    ability_detail_map: dict[str, Ability] = Field(default_factory=dict)
    house_room_detail_map: dict[str, HouseRoom] = Field(default_factory=dict)
    achievement_detail_map: dict[str, Achievement] = Field(default_factory=dict)
    achievement_tier_detail_map: dict[str, AchievementTier] = Field(default_factory=dict)
    enhancement_level_total_bonus_multiplier_table: list[float] = Field(default_factory=list)

    def get_zone(self, hrid: str) -> CombatZone:
        zone = self.action_detail_map.get(hrid)
        if zone is None:
            raise ConfigurationError(f"Unknown zone: {hrid}")
        return zone

    def get_monster(self, hrid: str) -> Monster:
        monster = self.combat_monster_detail_map.get(hrid)
        if monster is None:
            raise ConfigurationError(f"Unknown monster: {hrid}")
        return monster

    def get_item(self, hrid: str) -> Item:
        item = self.item_detail_map.get(hrid)
        if item is None:
            raise ConfigurationError(f"Unknown item: {hrid}")
        return item

    def get_ability(self, hrid: str) -> Ability:
        ability = self.ability_detail_map.get(hrid)
        if ability is None:
            raise ConfigurationError(f"Unknown ability: {hrid}")
        return ability

    def enhancement_multiplier(self, level: int) -> float:
        """Total bonus multiplier for an enhancement level (0 when not enhanced)."""
        if level <= 0:
            return 0.0
        table = self.enhancement_level_total_bonus_multiplier_table
        if level < len(table):
            return table[level]
        return table[-1] if table else 0.0

    def zones(self, include_dungeons: bool = True) -> list[CombatZone]:
        return [
            zone for zone in self.action_detail_map.values()
            if include_dungeons or not zone.is_dungeon
        ]

    def item_name(self, hrid: str) -> str:
        item: Optional[Item] = self.item_detail_map.get(hrid)
        if item is not None and item.name:
            return item.name
        return hrid.rsplit("/", 1)[-1].replace("_", " ").title()
