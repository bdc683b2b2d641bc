"""Tests for Status Effects System."""

import pytest

from mwisim.combat.status_effects import StatusEffectSystem
from mwisim.data.models.buff import Buff, BuffType


def armor_buff(duration: float = 10.0, ratio: float = 0.2, unique: str = "/buff_uniques/toughness") -> Buff:
    return Buff(unique_hrid=unique, type_hrid=BuffType.ARMOR, ratio_boost=ratio, duration=duration)


class TestStatusEffectSystem:
    """StatusEffectSystem tests."""

    @pytest.fixture
    def system(self):
        return StatusEffectSystem()

    def test_apply_buff(self, system):
        system.apply_buff(armor_buff(), level=1, source="/abilities/toughness", tick=0)
        assert system.has_buff("/buff_uniques/toughness")
        assert len(system) == 1

    def test_duration_in_ticks(self, system):
        active = system.apply_buff(armor_buff(duration=10), level=1, source="", tick=5)
        assert active.expires_at == 105
        assert active.is_active(104)
        assert not active.is_active(105)

    def test_expire(self, system):
        system.apply_buff(armor_buff(duration=1), level=1, source="", tick=0)
        assert system.expire(9) == []
        assert system.expire(10) == ["/buff_uniques/toughness"]
        assert len(system) == 0

    def test_permanent_never_expires(self, system):
        system.apply_buff(armor_buff(duration=0), level=1, source="", tick=0)
        assert system.expire(10**9) == []

    def test_reapply_replaces(self, system):
        system.apply_buff(armor_buff(ratio=0.2), level=1, source="", tick=0)
        system.apply_buff(armor_buff(ratio=0.5), level=3, source="", tick=20)
        active = list(system.active_buffs(20))
        assert len(active) == 1
        assert active[0].buff.ratio_boost == 0.5
        assert active[0].level == 3

    def test_distinct_uniques_stack(self, system):
        system.apply_buff(armor_buff(unique="/a"), level=1, source="", tick=0)
        system.apply_buff(armor_buff(unique="/b"), level=1, source="", tick=0)
        assert len(list(system.active_buffs(0))) == 2

    def test_remove_buff(self, system):
        system.apply_buff(armor_buff(), level=1, source="", tick=0)
        assert system.remove_buff("/buff_uniques/toughness")
        assert not system.remove_buff("/buff_uniques/toughness")

    def test_recovery_spread_over_ticks(self, system):
        system.add_recovery("/items/cheese", hitpoints=100, manapoints=0, duration_ticks=4)
        restores = [system.tick_recoveries() for _ in range(5)]
        assert [len(r) for r in restores] == [1, 1, 1, 1, 0]
        assert sum(r[0][1] for r in restores if r) == pytest.approx(100)

    def test_clear(self, system):
        system.apply_buff(armor_buff(), level=1, source="", tick=0)
        system.add_recovery("/items/cheese", 10, 0, 10)
        system.clear()
        assert len(system) == 0
        assert system.tick_recoveries() == []
