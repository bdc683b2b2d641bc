"""Monster data model."""

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .item import CombatStats


_camel = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class DropTableEntry(BaseModel):
    """One line of a monster's (rare) drop table."""

    model_config = _camel

    item_hrid: str
    drop_rate: float = Field(..., ge=0.0)
    min_count: float = Field(default=1.0, ge=0.0)
    max_count: float = Field(default=1.0, ge=0.0)
    drop_rate_per_difficulty_tier: float = 0.0
    min_difficulty_tier: int = 0

    @property
    def average_count(self) -> float:
        return (self.min_count + self.max_count) / 2


class MonsterAbility(BaseModel):
    model_config = _camel

    ability_hrid: str
    level: int = 1


class CombatDetails(BaseModel):
    """Levels and combat stats of a monster."""

    model_config = _camel

    stamina_level: int = 1
    intelligence_level: int = 1
    attack_level: int = 1
    # Older exports call the melee level "power"
    melee_level: int = Field(default=1, validation_alias=AliasChoices("meleeLevel", "powerLevel", "melee_level"))
    defense_level: int = 1
    ranged_level: int = 1
    magic_level: int = 1
    combat_stats: CombatStats = Field(default_factory=CombatStats)


class Monster(BaseModel):
    """Static definition of a combat monster."""

    model_config = _camel

    hrid: str
    name: str = ""
    combat_details: CombatDetails = Field(default_factory=CombatDetails)
    abilities: list[MonsterAbility] = Field(default_factory=list)
    drop_table: list[DropTableEntry] = Field(default_factory=list)
    rare_drop_table: list[DropTableEntry] = Field(default_factory=list)
    experience: float = 0.0
    is_boss: Optional[bool] = None
