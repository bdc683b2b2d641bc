"""Item data models: equipment and consumables."""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from mwisim.core.constants import (
    DEFAULT_ATTACK_INTERVAL,
    CombatStyle,
    DamageType,
    EquipmentType,
    Skill,
)
from .buff import Buff
from .common import Seconds
from .trigger import Trigger


_camel = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class CombatStats(BaseModel):
    """Combat stat block shared by equipment and monsters.

    Numeric stats live in ``values`` keyed by their camelCase name
    (``stabAccuracy``, ``armor``, ``criticalRate`` ...). Exported data mixes
    the style, damage type and attack interval into the same mapping; they
    are lifted out into typed fields on load.
    """

    model_config = _camel

    combat_style_hrids: list[CombatStyle] = Field(default_factory=list)
    damage_type: Optional[DamageType] = None
    attack_interval: Optional[Seconds] = None
    values: dict[str, float] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _split_typed_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "values" in data:
            return data
        typed = {"combatStyleHrids", "damageType", "attackInterval",
                 "combat_style_hrids", "damage_type", "attack_interval"}
        result = {key: value for key, value in data.items() if key in typed}
        result["values"] = {
            key: value for key, value in data.items()
            if key not in typed and isinstance(value, (int, float))
        }
        return result

    def get(self, stat: str) -> float:
        return self.values.get(stat, 0.0)

    @property
    def combat_style(self) -> Optional[CombatStyle]:
        return self.combat_style_hrids[0] if self.combat_style_hrids else None

    @property
    def interval_seconds(self) -> float:
        return self.attack_interval or DEFAULT_ATTACK_INTERVAL


class EquipmentDetail(BaseModel):
    model_config = _camel

    type: EquipmentType
    combat_stats: CombatStats = Field(default_factory=CombatStats)
    combat_enhancement_bonuses: dict[str, float] = Field(default_factory=dict)
    buffs: list[Buff] = Field(default_factory=list)
    focus_skill_hrid: Optional[Skill] = None

    def stat_at(self, stat: str, enhancement_multiplier: float) -> float:
        """Stat value after applying the enhancement bonus multiplier."""
        bonus = self.combat_enhancement_bonuses.get(stat, 0.0)
        return self.combat_stats.get(stat) + enhancement_multiplier * bonus


class ConsumableDetail(BaseModel):
    model_config = _camel

    cooldown_duration: Seconds = 0.0
    hitpoint_restore: float = 0.0
    manapoint_restore: float = 0.0
    recovery_duration: Seconds = 0.0
    buffs: list[Buff] = Field(default_factory=list)
    default_combat_triggers: list[Trigger] = Field(default_factory=list)


class Item(BaseModel):
    """Any item: equipment, food, drink or loot."""

    model_config = _camel

    hrid: str
    name: str = ""
    category_hrid: str = "/item_categories/resource"
    sell_price: float = 0.0
    equipment_detail: Optional[EquipmentDetail] = None
    consumable_detail: Optional[ConsumableDetail] = None
