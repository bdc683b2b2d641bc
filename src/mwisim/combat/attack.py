"""Attack resolution.

One attack exchange: hit roll, damage pipeline, critical hits, damage type
amplification and mitigation, plus the side effects that flow back to the
attacker (thorns, retaliation, life steal, mana leech).

Damage pipeline, in this order:

1. ``max_damage * (1 + style_bonus)``
2. ``* crit_multiplier`` on a critical hit
3. ``* (1 + amplify)`` for the damage type
4. ``/ (1 + resistance * (1 - penetration) * 0.01)``
"""

import random
from dataclasses import dataclass, field
from typing import Optional

from mwisim.core.constants import (
    BASE_CRITICAL_MULTIPLIER,
    MITIGATION_PER_POINT,
    CombatStyle,
    DamageType,
)
from mwisim.core.stat_calculator import UnitStats


AUTO_ATTACK = "autoAttack"


@dataclass
class SideEffects:
    """Effects triggered by a landed hit, all derived from its final damage."""

    thorns: float = 0.0  # Damage back to the attacker
    retaliation: float = 0.0  # Damage back to the attacker
    life_steal: float = 0.0  # HP healed on the attacker
    mana_leech: float = 0.0  # MP restored to the attacker

    @property
    def reflected(self) -> float:
        return self.thorns + self.retaliation


@dataclass
class AttackOutcome:
    """Result of a single attack."""

    hit: bool
    damage: float = 0.0
    crit: bool = False
    damage_type: DamageType = DamageType.PHYSICAL
    side_effects: SideEffects = field(default_factory=SideEffects)


def hit_chance(accuracy: float, evasion: float) -> float:
    """Chance to hit: ``accuracy / (accuracy + evasion)``, 0 when both are 0."""
    total = accuracy + evasion
    if total <= 0:
        return 0.0
    return accuracy / total


def critical_multiplier(attacker: UnitStats) -> float:
    return BASE_CRITICAL_MULTIPLIER + attacker.get("criticalDamage")


def compute_damage(
    base: float,
    style_bonus: float,
    is_crit: bool,
    crit_multiplier: float,
    amplify: float,
    resistance: float,
    penetration: float,
) -> float:
    """
    Damage of a landed hit.

    Args:
        base: Max damage of the attack before bonuses.
        style_bonus: Auto attack or ability damage bonus.
        is_crit: Whether the hit is critical.
        crit_multiplier: Damage multiplier on a critical hit.
        amplify: Amplify of the damage type.
        resistance: Defender armor or elemental resistance.
        penetration: Attacker penetration for the damage type.

    Returns:
        Final damage.
    """
    damage = base * (1 + style_bonus)
    if is_crit:
        damage *= crit_multiplier
    damage *= 1 + amplify
    effective_resistance = resistance * (1 - penetration)
    return damage / (1 + effective_resistance * MITIGATION_PER_POINT)


def resolve_attack(
    attacker: UnitStats,
    defender: UnitStats,
    style: Optional[CombatStyle] = None,
    rng: Optional[random.Random] = None,
    *,
    base_damage: Optional[float] = None,
    damage_type: Optional[DamageType] = None,
    is_ability: bool = False,
) -> AttackOutcome:
    """
    Resolve an attack between two stat blocks.

    Draws one uniform number for the hit roll and, on a hit, one for the
    critical roll.

    Args:
        attacker: Effective stats of the attacker.
        defender: Effective stats of the defender.
        style: Combat style; defaults to the attacker's.
        rng: Random source.
        base_damage: Overrides the attacker's max damage (abilities).
        damage_type: Overrides the attacker's damage type (abilities).
        is_ability: Use the ability damage bonus instead of auto attack damage.

    Returns:
        The outcome, with side effects computed from the final damage.
    """
    rng = rng or random.Random()
    style = style or attacker.combat_style
    damage_type = damage_type or attacker.damage_type

    chance = hit_chance(attacker.accuracy.get(style, 0.0), defender.evasion.get(style, 0.0))
    if rng.random() >= chance:
        return AttackOutcome(hit=False, damage_type=damage_type)

    is_crit = rng.random() < attacker.get("criticalRate")
    base = attacker.max_damage.get(style, 0.0) if base_damage is None else base_damage
    style_bonus = attacker.get("abilityDamage") if is_ability else attacker.get("autoAttackDamage")

    damage = compute_damage(
        base,
        style_bonus,
        is_crit,
        critical_multiplier(attacker),
        attacker.amplify(damage_type),
        defender.resistance(damage_type),
        attacker.penetration(damage_type),
    )

    side_effects = SideEffects(
        thorns=damage * defender.thorns(damage_type),
        retaliation=damage * defender.get("retaliation"),
        life_steal=damage * attacker.get("lifeSteal"),
        mana_leech=damage * attacker.get("manaLeech"),
    )
    return AttackOutcome(hit=True, damage=damage, crit=is_crit, damage_type=damage_type, side_effects=side_effects)
