"""Tests for the buff resolver."""

import pytest

from mwisim.core.buffs import (
    AppliedBuff,
    BuffTotals,
    CommunityBuff,
    combat_level,
    community_buff_boost,
    global_buffs,
    level_gap_debuff,
    make_community_buff,
    party_level_gap_debuffs,
    sum_buffs,
)
from mwisim.data.models.buff import Buff, BuffType
from mwisim.data.models.config import SimulationSettings
from mwisim.errors import ConfigurationError


def wisdom(flat: float = 0.0, ratio: float = 0.0, unique: str = "/buff_uniques/test") -> Buff:
    return Buff(unique_hrid=unique, type_hrid=BuffType.WISDOM, flat_boost=flat, ratio_boost=ratio)


class TestCommunityBuffs:
    """Community buff tiers."""

    def test_tier_one_is_base(self):
        assert community_buff_boost(1) == 0.2

    def test_tier_ten(self):
        assert community_buff_boost(10) == pytest.approx(0.245)

    def test_monotonic_in_tier(self):
        boosts = [community_buff_boost(tier) for tier in range(1, 11)]
        assert boosts == sorted(boosts)

    @pytest.mark.parametrize("kind", list(CommunityBuff))
    def test_both_variants_share_boost(self, kind):
        buff = make_community_buff(kind, 10)
        assert buff.flat_boost == pytest.approx(0.245)

    def test_drop_buff_scales_quantity(self):
        buff = make_community_buff(CommunityBuff.DROP, 3)
        assert buff.type_hrid is BuffType.COMBAT_DROP_QUANTITY
        assert buff.type_hrid is not BuffType.COMBAT_DROP_RATE

    def test_experience_buff_is_wisdom(self):
        assert make_community_buff(CommunityBuff.EXPERIENCE, 1).type_hrid is BuffType.WISDOM

    def test_tier_zero_disables(self):
        assert make_community_buff(CommunityBuff.DROP, 0) is None

    @pytest.mark.parametrize("tier", [-1, 11])
    def test_tier_out_of_range(self, tier):
        with pytest.raises(ConfigurationError):
            make_community_buff(CommunityBuff.EXPERIENCE, tier)


class TestGlobalBuffs:
    """Settings-driven buffs."""

    def test_nothing_enabled(self):
        assert global_buffs(SimulationSettings()) == []

    def test_moo_pass_and_community(self):
        settings = SimulationSettings(moo_pass=True, community_exp_tier=1, community_drop_tier=2)
        types = [buff.type_hrid for buff in global_buffs(settings)]
        assert types == [BuffType.WISDOM, BuffType.WISDOM, BuffType.COMBAT_DROP_QUANTITY]


class TestLevelGap:
    """Party level-gap debuff."""

    def test_ratio_at_threshold(self):
        assert level_gap_debuff(120, 100) == 0.0

    def test_ratio_below_threshold(self):
        assert level_gap_debuff(100, 100) == 0.0

    def test_ratio_one_point_five(self):
        assert level_gap_debuff(150, 100) == pytest.approx(-0.9)

    def test_partial_penalty(self):
        assert level_gap_debuff(130, 100) == pytest.approx(-0.3)

    def test_clamped(self):
        assert level_gap_debuff(1000, 100) == pytest.approx(-0.9)

    def test_party(self):
        debuffs = party_level_gap_debuffs({"strong": 150, "weak": 100})
        assert debuffs["strong"] == 0.0
        assert debuffs["weak"] == pytest.approx(-0.9)

    def test_combat_level(self):
        assert combat_level(1, 1, 1, 1, 1, 1, 1) == pytest.approx(1.0)
        assert combat_level(50, 50, 50, 50, 50, 50, 50) == pytest.approx(50.0)
        # Only the best of melee, ranged and magic counts
        assert combat_level(50, 50, 50, 50, 100, 1, 1) == pytest.approx(80.0)


class TestSumBuffs:
    """Same-type buffs add up."""

    def test_additive(self):
        totals = sum_buffs([
            AppliedBuff(wisdom(flat=0.1, unique="/a")),
            AppliedBuff(wisdom(flat=0.2, ratio=0.5, unique="/b")),
        ])
        assert totals[BuffType.WISDOM].flat_boost == pytest.approx(0.3)
        assert totals[BuffType.WISDOM].ratio_boost == pytest.approx(0.5)

    def test_level_scaling(self):
        buff = Buff(
            unique_hrid="/buff_uniques/leveled",
            type_hrid=BuffType.ARMOR,
            ratio_boost=0.2,
            ratio_boost_level_bonus=0.01,
        )
        totals = sum_buffs([AppliedBuff(buff, level=11)])
        assert totals[BuffType.ARMOR].ratio_boost == pytest.approx(0.3)

    def test_apply(self):
        totals = BuffTotals(ratio_boost=0.5, flat_boost=2)
        assert totals.apply(10) == pytest.approx(17)
