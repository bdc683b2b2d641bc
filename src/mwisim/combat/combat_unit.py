"""Combat Unit.

Runtime state of a player or monster during a simulation: HP/MP pools, timers,
active buffs and the effective stats derived from them.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, List, Optional, TYPE_CHECKING

from mwisim.core.buffs import AppliedBuff, BuffTotals, compute_effective_buffs
from mwisim.core.stat_calculator import UnitStats, apply_buffs
from mwisim.data.models.buff import BuffType
from mwisim.data.models.config import SimulationSettings
from mwisim.combat.status_effects import StatusEffectSystem

if TYPE_CHECKING:
    from mwisim.combat.ability import ActionSlot


class UnitSide(Enum):
    """Which side a unit fights on."""

    PLAYER = auto()
    MONSTER = auto()


@dataclass
class CombatUnit:
    """
    A combatant.

    Attributes:
        id: Unique runtime id (player hrid, or monster hrid plus spawn index).
        hrid: Definition hrid used as the key of result tables.
        name: Display name.
        side: Player or monster.
        base_stats: Unbuffed stats.
        settings: Global toggles; monsters get an all-off instance.
        permanent_buffs: Buffs active for the whole run.
        debuff_on_level_gap: Party level-gap penalty (players only).
    """

    id: str
    hrid: str
    name: str
    side: UnitSide
    base_stats: UnitStats
    settings: SimulationSettings = field(default_factory=SimulationSettings)
    permanent_buffs: List[AppliedBuff] = field(default_factory=list)
    debuff_on_level_gap: float = 0.0

    # Runtime state
    current_hp: float = 0.0
    current_mp: float = 0.0
    is_alive: bool = True
    attack_cooldown: int = 0  # Ticks until the next auto attack
    respawn_timer: int = 0  # Ticks until a dead player revives
    ran_out_of_mana: bool = False
    spawn_index: int = 0
    slots: List["ActionSlot"] = field(default_factory=list)
    status_effects: StatusEffectSystem = field(default_factory=StatusEffectSystem)

    _stats: Optional[UnitStats] = field(default=None, init=False, repr=False)
    _totals: Dict[BuffType, BuffTotals] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self):
        if self.current_hp == 0.0:
            self.current_hp = self.base_stats.max_hitpoints
        if self.current_mp == 0.0:
            self.current_mp = self.base_stats.max_manapoints

    @property
    def is_player(self) -> bool:
        return self.side is UnitSide.PLAYER

    # =========================================================================
    # STATS
    # =========================================================================

    def stats(self, tick: int) -> UnitStats:
        """Effective stats, recomputed only after the buff set changed."""
        if self._stats is None:
            self._totals = compute_effective_buffs(self, self.settings, tick)
            self._stats = apply_buffs(self.base_stats, self._totals)
            self._clamp_pools()
        return self._stats

    def buff_total(self, buff_type: BuffType, tick: int) -> BuffTotals:
        """Summed boosts of one buff channel."""
        self.stats(tick)
        return self._totals.get(buff_type, BuffTotals())

    def mark_dirty(self) -> None:
        self._stats = None

    @property
    def max_hp(self) -> float:
        return (self._stats or self.base_stats).max_hitpoints

    @property
    def max_mp(self) -> float:
        return (self._stats or self.base_stats).max_manapoints

    def _clamp_pools(self) -> None:
        self.current_hp = min(self.current_hp, self.max_hp)
        self.current_mp = min(self.current_mp, self.max_mp)

    # =========================================================================
    # POOLS
    # =========================================================================

    def take_damage(self, amount: float) -> float:
        """
        Apply damage and return the HP actually lost.

        HP never drops below zero; reaching zero kills the unit.
        """
        if not self.is_alive or amount <= 0:
            return 0.0
        lost = min(self.current_hp, amount)
        self.current_hp -= lost
        if self.current_hp <= 0:
            self.current_hp = 0.0
            self.is_alive = False
        return lost

    def heal(self, amount: float) -> float:
        """Restore HP up to max. Returns HP actually gained."""
        if not self.is_alive or amount <= 0:
            return 0.0
        gained = min(amount, self.max_hp - self.current_hp)
        gained = max(0.0, gained)
        self.current_hp += gained
        return gained

    def restore_mana(self, amount: float) -> float:
        if not self.is_alive or amount <= 0:
            return 0.0
        gained = max(0.0, min(amount, self.max_mp - self.current_mp))
        self.current_mp += gained
        return gained

    def spend_mana(self, amount: float) -> bool:
        """Pay ``amount`` MP; flags the unit and returns False if it cannot."""
        if self.current_mp < amount:
            self.ran_out_of_mana = True
            return False
        self.current_mp -= amount
        return True

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def die(self) -> None:
        self.is_alive = False
        self.current_hp = 0.0
        self.status_effects.clear()
        self.mark_dirty()

    def revive(self, tick: int) -> None:
        """Bring the unit back at full HP/MP with no timed buffs."""
        self.is_alive = True
        self.respawn_timer = 0
        self.status_effects.clear()
        self.mark_dirty()
        stats = self.stats(tick)
        self.current_hp = stats.max_hitpoints
        self.current_mp = stats.max_manapoints

    def __repr__(self) -> str:
        return (
            f"CombatUnit({self.id}, hp={self.current_hp:.0f}/{self.max_hp:.0f}, "
            f"mp={self.current_mp:.0f}/{self.max_mp:.0f}, alive={self.is_alive})"
        )
