"""Buff data model."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .common import Seconds


class BuffType(StrEnum):
    """Closed set of buff channels.

    Each member feeds exactly one effective stat. ``COMBAT_DROP_QUANTITY``
    scales how many items drop, ``COMBAT_DROP_RATE`` scales the chance that
    they drop at all; the two are never interchangeable.
    """

    # Experience & loot
    WISDOM = "/buff_types/wisdom"
    COMBAT_DROP_QUANTITY = "/buff_types/combat_drop_quantity"
    COMBAT_DROP_RATE = "/buff_types/combat_drop_rate"
    COMBAT_RARE_FIND = "/buff_types/combat_rare_find"

    # Offense
    ACCURACY = "/buff_types/accuracy"
    DAMAGE = "/buff_types/damage"
    ATTACK_SPEED = "/buff_types/attack_speed"
    CAST_SPEED = "/buff_types/cast_speed"
    CRITICAL_RATE = "/buff_types/critical_rate"
    CRITICAL_DAMAGE = "/buff_types/critical_damage"
    ARMOR_PENETRATION = "/buff_types/armor_penetration"
    WATER_PENETRATION = "/buff_types/water_penetration"
    NATURE_PENETRATION = "/buff_types/nature_penetration"
    FIRE_PENETRATION = "/buff_types/fire_penetration"
    PHYSICAL_AMPLIFY = "/buff_types/physical_amplify"
    WATER_AMPLIFY = "/buff_types/water_amplify"
    NATURE_AMPLIFY = "/buff_types/nature_amplify"
    FIRE_AMPLIFY = "/buff_types/fire_amplify"
    HEALING_AMPLIFY = "/buff_types/healing_amplify"
    LIFE_STEAL = "/buff_types/life_steal"
    MANA_LEECH = "/buff_types/mana_leech"
    ABILITY_HASTE = "/buff_types/ability_haste"

    # Defense
    EVASION = "/buff_types/evasion"
    ARMOR = "/buff_types/armor"
    WATER_RESISTANCE = "/buff_types/water_resistance"
    NATURE_RESISTANCE = "/buff_types/nature_resistance"
    FIRE_RESISTANCE = "/buff_types/fire_resistance"
    PHYSICAL_THORNS = "/buff_types/physical_thorns"
    ELEMENTAL_THORNS = "/buff_types/elemental_thorns"
    RETALIATION = "/buff_types/retaliation"
    THREAT = "/buff_types/threat"

    # Resources
    MAX_HITPOINTS = "/buff_types/max_hitpoints"
    MAX_MANAPOINTS = "/buff_types/max_manapoints"
    HP_REGEN = "/buff_types/hp_regen"
    MP_REGEN = "/buff_types/mp_regen"
    FOOD_HASTE = "/buff_types/food_haste"
    DRINK_CONCENTRATION = "/buff_types/drink_concentration"

    # Engine-internal: party level-gap penalty on loot and experience
    LEVEL_GAP = "/buff_types/level_gap"


class Buff(BaseModel):
    """A stat modifier.

    ``duration`` is in seconds; ``0`` means active until removed, which for
    the engine means for the rest of the run.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    unique_hrid: str
    type_hrid: BuffType
    ratio_boost: float = 0.0
    ratio_boost_level_bonus: float = 0.0
    flat_boost: float = 0.0
    flat_boost_level_bonus: float = 0.0
    start_time: Seconds = Field(default=0.0, description="Seconds since run start")
    duration: Seconds = Field(default=0.0, ge=0.0, description="Seconds; 0 = permanent")

    @property
    def is_permanent(self) -> bool:
        return self.duration == 0

    def ratio_at(self, level: int = 1) -> float:
        """Ratio boost at an ability/room level."""
        return self.ratio_boost + self.ratio_boost_level_bonus * (level - 1)

    def flat_at(self, level: int = 1) -> float:
        """Flat boost at an ability/room level."""
        return self.flat_boost + self.flat_boost_level_bonus * (level - 1)
