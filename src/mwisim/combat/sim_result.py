"""Raw counters accumulated during a simulation run.

Counters are append-only while the engine runs; per-hour figures are derived
once at the end by :func:`mwisim.combat.simulation.transform_result`.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import DefaultDict, Dict, Set


def _nested() -> DefaultDict[str, DefaultDict[str, float]]:
    return defaultdict(lambda: defaultdict(float))


@dataclass
class AttackTally:
    """Hits, misses and damage of one (source, target, ability) combination."""

    hits: int = 0
    misses: int = 0
    damage: float = 0.0

    @property
    def attempts(self) -> int:
        return self.hits + self.misses


@dataclass
class SimResult:
    """Everything counted during one run."""

    zone_hrid: str = ""
    is_dungeon: bool = False
    difficulty_tier: int = 0
    number_of_players: int = 1

    simulated_ticks: int = 0
    encounters: int = 0
    deaths: DefaultDict[str, int] = field(default_factory=lambda: defaultdict(int))
    experience_gained: DefaultDict[str, DefaultDict[str, float]] = field(default_factory=_nested)
    consumables_used: DefaultDict[str, DefaultDict[str, float]] = field(default_factory=_nested)
    mana_used: DefaultDict[str, DefaultDict[str, float]] = field(default_factory=_nested)
    casts: DefaultDict[str, DefaultDict[str, float]] = field(default_factory=_nested)
    hitpoints_gained: DefaultDict[str, DefaultDict[str, float]] = field(default_factory=_nested)
    manapoints_gained: DefaultDict[str, DefaultDict[str, float]] = field(default_factory=_nested)
    # (source, target, ability) -> tally; sources and targets are player hrids or monster hrids
    attacks: Dict[tuple, AttackTally] = field(default_factory=dict)

    # Loot, per-player share
    drops: DefaultDict[str, float] = field(default_factory=lambda: defaultdict(float))
    expected_drops: DefaultDict[str, float] = field(default_factory=lambda: defaultdict(float))
    rare_items: Set[str] = field(default_factory=set)

    player_ran_out_of_mana: Dict[str, bool] = field(default_factory=dict)
    player_names: Dict[str, str] = field(default_factory=dict)

    dungeons_completed: int = 0
    dungeons_failed: int = 0
    max_wave_reached: int = 0

    def record_attack(self, source: str, target: str, ability: str, hit: bool, damage: float = 0.0) -> None:
        tally = self.attacks.setdefault((source, target, ability), AttackTally())
        if hit:
            tally.hits += 1
            tally.damage += damage
        else:
            tally.misses += 1

    def record_death(self, hrid: str) -> None:
        self.deaths[hrid] += 1

    def record_experience(self, player: str, skill: str, amount: float) -> None:
        self.experience_gained[player][skill] += amount

    def record_consumable(self, player: str, item_hrid: str) -> None:
        self.consumables_used[player][item_hrid] += 1

    def record_mana(self, player: str, ability_hrid: str, amount: float) -> None:
        self.mana_used[player][ability_hrid] += amount
        self.casts[player][ability_hrid] += 1

    def record_hitpoints(self, unit: str, source: str, amount: float) -> None:
        if amount > 0:
            self.hitpoints_gained[unit][source] += amount

    def record_manapoints(self, unit: str, source: str, amount: float) -> None:
        if amount > 0:
            self.manapoints_gained[unit][source] += amount

    def record_drop(self, item_hrid: str, count: float, expected: bool, is_rare: bool = False) -> None:
        if expected:
            self.expected_drops[item_hrid] += count
        else:
            self.drops[item_hrid] += count
        if is_rare:
            self.rare_items.add(item_hrid)
