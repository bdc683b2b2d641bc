"""Status Effects System.

Tracks the timed buffs and recovery-over-time effects active on one combat
unit. Buffs are keyed by their unique hrid: re-applying a buff replaces the
previous instance (last write wins). A buff with duration 0 stays active for
the rest of the run.
"""

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple

from mwisim.core.buffs import AppliedBuff
from mwisim.core.constants import seconds_to_ticks
from mwisim.data.models.buff import Buff


@dataclass
class ActiveBuff:
    """
    A buff applied to a unit at a given tick.

    Attributes:
        buff: The buff definition.
        level: Level of the ability that granted it.
        source: Hrid of the granting ability or consumable.
        start_tick: Tick the buff was applied.
        expires_at: First tick the buff is no longer active (None = permanent).
    """

    buff: Buff
    level: int
    source: str
    start_tick: int
    expires_at: Optional[int] = None

    def is_active(self, tick: int) -> bool:
        if tick < self.start_tick:
            return False
        return self.expires_at is None or tick < self.expires_at


@dataclass
class RecoveryEffect:
    """HP/MP restored evenly over a number of ticks."""

    source: str
    hitpoints_per_tick: float
    manapoints_per_tick: float
    remaining_ticks: int


class StatusEffectSystem:
    """
    Manages timed effects on a single combat unit.

    Usage:
        effects = StatusEffectSystem()
        effects.apply_buff(buff, level=1, source=ability_hrid, tick=tick)
        expired = effects.expire(tick)
    """

    def __init__(self):
        self._buffs: Dict[str, ActiveBuff] = {}
        self._recoveries: List[RecoveryEffect] = []

    def apply_buff(self, buff: Buff, level: int, source: str, tick: int) -> ActiveBuff:
        """Apply ``buff`` at ``tick``, replacing any buff with the same unique hrid."""
        expires_at = None if buff.is_permanent else tick + seconds_to_ticks(buff.duration)
        active = ActiveBuff(buff=buff, level=level, source=source, start_tick=tick, expires_at=expires_at)
        self._buffs[buff.unique_hrid] = active
        return active

    def remove_buff(self, unique_hrid: str) -> bool:
        return self._buffs.pop(unique_hrid, None) is not None

    def active_buffs(self, tick: int) -> Iterator[AppliedBuff]:
        """Buffs active at ``tick``, as resolver input."""
        for active in self._buffs.values():
            if active.is_active(tick):
                yield AppliedBuff(active.buff, active.level, active.source)

    def expire(self, tick: int) -> List[str]:
        """
        Drop buffs that are no longer active at ``tick``.

        Returns:
            Unique hrids of the expired buffs.
        """
        expired = [
            hrid for hrid, active in self._buffs.items()
            if active.expires_at is not None and tick >= active.expires_at
        ]
        for hrid in expired:
            del self._buffs[hrid]
        return expired

    def has_buff(self, unique_hrid: str) -> bool:
        return unique_hrid in self._buffs

    def add_recovery(self, source: str, hitpoints: float, manapoints: float, duration_ticks: int) -> None:
        """Spread a restore over ``duration_ticks`` ticks."""
        ticks = max(1, duration_ticks)
        self._recoveries.append(RecoveryEffect(
            source=source,
            hitpoints_per_tick=hitpoints / ticks,
            manapoints_per_tick=manapoints / ticks,
            remaining_ticks=ticks,
        ))

    def tick_recoveries(self) -> List[Tuple[str, float, float]]:
        """
        Advance recovery effects by one tick.

        Returns:
            ``(source, hitpoints, manapoints)`` to restore this tick.
        """
        restores = []
        for recovery in self._recoveries:
            restores.append((recovery.source, recovery.hitpoints_per_tick, recovery.manapoints_per_tick))
            recovery.remaining_ticks -= 1
        self._recoveries = [r for r in self._recoveries if r.remaining_ticks > 0]
        return restores

    def clear(self) -> None:
        """Remove every effect (on death)."""
        self._buffs.clear()
        self._recoveries.clear()

    def __len__(self) -> int:
        return len(self._buffs)
