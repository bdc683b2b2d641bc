"""Ability data model."""

from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from mwisim.core.constants import CombatStyle, DamageType
from .buff import Buff
from .common import Seconds
from .trigger import Trigger


_camel = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class AbilityEffectType(StrEnum):
    DAMAGE = "/ability_effect_types/damage"
    HEAL = "/ability_effect_types/heal"
    BUFF = "/ability_effect_types/buff"


class AbilityTarget(StrEnum):
    """Who an ability effect lands on."""

    ENEMY = "enemy"
    ALL_ENEMIES = "allEnemies"
    SELF = "self"
    ALL_ALLIES = "allAllies"
    LOWEST_HP_ALLY = "lowestHpAlly"


class AbilityEffect(BaseModel):
    """A single effect of an ability.

    Damage and heal amounts are ``flat + ratio * caster max damage``, each
    term growing with the ability level.
    """

    model_config = _camel

    target_type: AbilityTarget = AbilityTarget.ENEMY
    effect_type: AbilityEffectType = AbilityEffectType.DAMAGE
    combat_style_hrid: Optional[CombatStyle] = None
    damage_type: Optional[DamageType] = None
    base_damage_flat: float = 0.0
    base_damage_flat_level_bonus: float = 0.0
    base_damage_ratio: float = 0.0
    base_damage_ratio_level_bonus: float = 0.0
    buffs: list[Buff] = Field(default_factory=list)

    def base_amount(self, max_damage: float, level: int = 1) -> float:
        flat = self.base_damage_flat + self.base_damage_flat_level_bonus * (level - 1)
        ratio = self.base_damage_ratio + self.base_damage_ratio_level_bonus * (level - 1)
        return flat + ratio * max_damage


class Ability(BaseModel):
    model_config = _camel

    hrid: str
    name: str = ""
    mana_cost: float = Field(default=0.0, ge=0.0)
    cooldown_duration: Seconds = 0.0
    ability_effects: list[AbilityEffect] = Field(default_factory=list)
    default_combat_triggers: list[Trigger] = Field(default_factory=list)
