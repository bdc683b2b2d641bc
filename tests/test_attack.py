"""Tests for attack resolution."""

import random

import pytest

from mwisim.combat.attack import compute_damage, hit_chance, resolve_attack
from mwisim.core.constants import CombatStyle, DamageType
from mwisim.core.stat_calculator import UnitStats


class FixedRandom(random.Random):
    """Returns queued values from ``random()``."""

    def __init__(self, *values):
        super().__init__(0)
        self.values = list(values)

    def random(self):
        return self.values.pop(0)


def make_stats(accuracy=100.0, max_damage=100.0, evasion=100.0, **values) -> UnitStats:
    return UnitStats(
        combat_style=CombatStyle.STAB,
        damage_type=DamageType.PHYSICAL,
        accuracy={style: accuracy for style in CombatStyle},
        max_damage={style: max_damage for style in CombatStyle},
        evasion={style: evasion for style in CombatStyle},
        values=dict(values),
    )


class TestHitChance:
    """Hit chance formula."""

    def test_equal_ratings(self):
        assert hit_chance(50, 50) == 0.5

    @pytest.mark.parametrize("accuracy,evasion", [(1, 1000), (10, 3), (999, 1), (0.5, 0.25)])
    def test_bounded(self, accuracy, evasion):
        chance = hit_chance(accuracy, evasion)
        assert 0 < chance < 1
        assert chance == pytest.approx(accuracy / (accuracy + evasion))

    def test_both_zero(self):
        assert hit_chance(0, 0) == 0.0


class TestDamagePipeline:
    """Order: style bonus, crit, amplify, mitigation."""

    def test_reference_values(self):
        damage = compute_damage(
            base=100,
            style_bonus=0.2,
            is_crit=True,
            crit_multiplier=1.5,
            amplify=0.25,
            resistance=50,
            penetration=0.2,
        )
        assert damage == pytest.approx(160.714, abs=1e-3)

    def test_no_crit_no_armor(self):
        assert compute_damage(100, 0, False, 1.5, 0, 0, 0) == pytest.approx(100)

    def test_full_penetration_ignores_armor(self):
        assert compute_damage(100, 0, False, 1.5, 0, 500, 1.0) == pytest.approx(100)


class TestResolveAttack:
    """resolve_attack with controlled draws."""

    def test_miss(self):
        outcome = resolve_attack(make_stats(), make_stats(), rng=FixedRandom(0.5))
        assert not outcome.hit
        assert outcome.damage == 0

    def test_hit(self):
        outcome = resolve_attack(make_stats(), make_stats(), rng=FixedRandom(0.49, 0.99))
        assert outcome.hit
        assert not outcome.crit
        assert outcome.damage == pytest.approx(100)

    def test_crit(self):
        attacker = make_stats(criticalRate=0.5, criticalDamage=0.5)
        outcome = resolve_attack(attacker, make_stats(), rng=FixedRandom(0.1, 0.2))
        assert outcome.crit
        assert outcome.damage == pytest.approx(200)

    def test_armor_mitigation(self):
        defender = make_stats(armor=100)
        outcome = resolve_attack(make_stats(), defender, rng=FixedRandom(0.0, 0.99))
        assert outcome.damage == pytest.approx(50)

    def test_elemental_uses_resistance(self):
        defender = make_stats(armor=100, fireResistance=0)
        outcome = resolve_attack(
            make_stats(), defender, rng=FixedRandom(0.0, 0.99), damage_type=DamageType.FIRE
        )
        assert outcome.damage_type is DamageType.FIRE
        assert outcome.damage == pytest.approx(100)

    def test_ability_damage_bonus(self):
        attacker = make_stats(abilityDamage=0.5, autoAttackDamage=0.1)
        outcome = resolve_attack(
            attacker, make_stats(), rng=FixedRandom(0.0, 0.99), base_damage=20, is_ability=True
        )
        assert outcome.damage == pytest.approx(30)

    def test_side_effects_scale_with_damage(self):
        attacker = make_stats(lifeSteal=0.1, manaLeech=0.05)
        defender = make_stats(physicalThorns=0.2, retaliation=0.1)
        outcome = resolve_attack(attacker, defender, rng=FixedRandom(0.0, 0.99))
        effects = outcome.side_effects
        assert effects.thorns == pytest.approx(20)
        assert effects.retaliation == pytest.approx(10)
        assert effects.reflected == pytest.approx(30)
        assert effects.life_steal == pytest.approx(10)
        assert effects.mana_leech == pytest.approx(5)

    def test_miss_has_no_side_effects(self):
        defender = make_stats(physicalThorns=1.0)
        outcome = resolve_attack(make_stats(), defender, rng=FixedRandom(0.99))
        assert outcome.side_effects.reflected == 0
