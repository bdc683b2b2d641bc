"""Run configuration models.

A :class:`SimulationConfig` is the immutable input snapshot of one run. Range
checks that depend on game data (known hrids, slot counts, tiers, duration)
are done by :func:`mwisim.combat.simulation.validate_config` so they surface
as :class:`~mwisim.errors.ConfigurationError` before the first tick.
"""

from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from mwisim.core.constants import EquipmentType
from .trigger import Trigger


_camel = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class RngMode(StrEnum):
    """Which loot tracks a run accumulates."""

    STOCHASTIC = "stochastic"
    EXPECTED = "expected"
    BOTH = "both"


class EquipmentSlot(BaseModel):
    model_config = _camel

    item_hrid: str
    enhancement_level: int = Field(default=0, ge=0)


class ConsumableSlot(BaseModel):
    """A food or drink slot. ``triggers=None`` uses the item's defaults."""

    model_config = _camel

    item_hrid: str
    triggers: Optional[list[Trigger]] = None


class AbilitySlot(BaseModel):
    model_config = _camel

    ability_hrid: str
    level: int = Field(default=1, ge=1)
    triggers: Optional[list[Trigger]] = None


class PlayerConfig(BaseModel):
    """One party member."""

    model_config = _camel

    hrid: str = "player1"
    name: str = ""
    stamina_level: int = Field(default=1, ge=1)
    intelligence_level: int = Field(default=1, ge=1)
    attack_level: int = Field(default=1, ge=1)
    melee_level: int = Field(default=1, ge=1)
    defense_level: int = Field(default=1, ge=1)
    ranged_level: int = Field(default=1, ge=1)
    magic_level: int = Field(default=1, ge=1)
    equipment: dict[EquipmentType, EquipmentSlot] = Field(default_factory=dict)
    food: list[Optional[ConsumableSlot]] = Field(default_factory=list)
    drinks: list[Optional[ConsumableSlot]] = Field(default_factory=list)
    abilities: list[Optional[AbilitySlot]] = Field(default_factory=list)
    house_rooms: dict[str, int] = Field(default_factory=dict)
    achievements: list[str] = Field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.name or self.hrid


class SimulationSettings(BaseModel):
    """Global toggles. Community tiers run 0-10; 0 disables the buff."""

    model_config = _camel

    moo_pass: bool = False
    community_exp_tier: int = 0
    community_drop_tier: int = 0


class SimulationConfig(BaseModel):
    """Input snapshot of a simulation run."""

    model_config = _camel

    players: list[PlayerConfig] = Field(default_factory=list)
    zone_hrid: str
    difficulty_tier: int = 0
    duration_hours: int = 1
    settings: SimulationSettings = Field(default_factory=SimulationSettings)
    rng_mode: RngMode = RngMode.BOTH
    seed: Optional[int] = None
