"""Combat zone (action) data model: spawn tables and dungeon waves."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .buff import Buff
from .monster import DropTableEntry


_camel = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class MonsterSpawn(BaseModel):
    """A monster that can appear in an encounter."""

    model_config = _camel

    combat_monster_hrid: str
    rate: float = Field(default=1.0, ge=0.0, description="Relative spawn weight")
    strength: float = Field(default=1.0, ge=0.0)
    difficulty_tier: int = 0


class RandomSpawnInfo(BaseModel):
    """Weighted spawn table for a single encounter."""

    model_config = _camel

    max_spawn_count: int = Field(default=1, ge=1)
    max_total_strength: float = Field(default=1.0, ge=0.0)
    spawns: list[MonsterSpawn] = Field(default_factory=list)


class FightInfo(BaseModel):
    model_config = _camel

    random_spawn_info: RandomSpawnInfo = Field(default_factory=RandomSpawnInfo)
    boss_spawns: list[MonsterSpawn] = Field(default_factory=list)
    battles_per_boss: int = Field(default=0, ge=0, description="0 = no boss encounters")


class DungeonInfo(BaseModel):
    """Wave layout of a dungeon.

    Map keys are wave numbers starting at 1 (string keys are accepted as
    exported). A wave listed in ``fixed_spawns_map`` always spawns exactly
    those monsters; otherwise the spawn table with the greatest key not
    above the wave is used.
    """

    model_config = _camel

    max_waves: int = Field(default=1, ge=1)
    fixed_spawns_map: dict[int, list[MonsterSpawn]] = Field(default_factory=dict)
    random_spawn_info_map: dict[int, RandomSpawnInfo] = Field(default_factory=dict)
    reward_drop_table: list[DropTableEntry] = Field(default_factory=list)
    key_item_hrid: Optional[str] = None

    def spawn_table_for(self, wave: int) -> Optional[RandomSpawnInfo]:
        keys = [key for key in self.random_spawn_info_map if key <= wave]
        if not keys:
            return None
        return self.random_spawn_info_map[max(keys)]


class CombatZoneInfo(BaseModel):
    model_config = _camel

    is_dungeon: bool = False
    fight_info: FightInfo = Field(default_factory=FightInfo)
    dungeon_info: Optional[DungeonInfo] = None


class CombatZone(BaseModel):
    """A combat action: either an open zone or a dungeon."""

    model_config = _camel

    hrid: str
    name: str = ""
    type: str = "/action_types/combat"
    category_hrid: str = ""
    combat_zone_info: CombatZoneInfo = Field(default_factory=CombatZoneInfo)
    buffs: list[Buff] = Field(default_factory=list)

    @property
    def is_dungeon(self) -> bool:
        return self.combat_zone_info.is_dungeon

    @property
    def monster_hrids(self) -> set[str]:
        """Every monster that can spawn in this zone."""
        info = self.combat_zone_info
        spawns = list(info.fight_info.random_spawn_info.spawns) + list(info.fight_info.boss_spawns)
        if info.dungeon_info is not None:
            for wave_spawns in info.dungeon_info.fixed_spawns_map.values():
                spawns.extend(wave_spawns)
            for table in info.dungeon_info.random_spawn_info_map.values():
                spawns.extend(table.spawns)
        return {spawn.combat_monster_hrid for spawn in spawns}
