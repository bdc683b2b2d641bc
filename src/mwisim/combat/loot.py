"""Loot Engine.

Resolves a monster's drop tables into two tracks per kill:

- **stochastic**: one independent draw per entry, integer counts
- **expected**: ``average count * drop probability`` per entry, never rounded

The expected ("no-RNG") track gives stable profit estimates without repeated
runs.
"""

import math
import random
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from mwisim.core.constants import DIFFICULTY_DROP_RATE_STEP
from mwisim.data.models.config import RngMode
from mwisim.data.models.monster import DropTableEntry, Monster


@dataclass
class DropResult:
    """Quantity of one item from one kill."""

    item_hrid: str
    count: float
    is_rare: bool = False


@dataclass
class LootResult:
    stochastic: List[DropResult] = field(default_factory=list)
    expected: List[DropResult] = field(default_factory=list)


def regular_drop_rate(entry: DropTableEntry, difficulty_tier: int = 0, drop_rate_bonus: float = 0.0) -> float:
    """Drop probability of a regular entry at a difficulty tier."""
    multiplier = 1.0 + DIFFICULTY_DROP_RATE_STEP * difficulty_tier
    rate = min(1.0, multiplier * (entry.drop_rate + entry.drop_rate_per_difficulty_tier * difficulty_tier))
    if rate <= 0:
        return 0.0
    return min(1.0, rate * (1 + drop_rate_bonus))


def rare_drop_rate(entry: DropTableEntry, rare_find_bonus: float = 0.0) -> float:
    """Drop probability of a rare entry. Rare find only boosts rare entries."""
    return entry.drop_rate * (1 + rare_find_bonus)


def expected_count(entry: DropTableEntry, probability: float, quantity_factor: float) -> float:
    return entry.average_count * probability * quantity_factor


class LootEngine:
    """
    Resolve drop tables.

    Usage:
        engine = LootEngine(rng)
        loot = engine.resolve_drops(monster, rare_find_bonus, drop_quantity_bonus)
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def resolve_drops(
        self,
        monster: Monster,
        rare_find_bonus: float = 0.0,
        drop_quantity_bonus: float = 0.0,
        rng_mode: RngMode = RngMode.BOTH,
        *,
        drop_rate_bonus: float = 0.0,
        level_gap: float = 0.0,
        difficulty_tier: int = 0,
    ) -> LootResult:
        """
        Resolve one kill of ``monster``.

        Args:
            monster: The killed monster.
            rare_find_bonus: Boost to rare drop probability.
            drop_quantity_bonus: Boost to dropped quantity.
            rng_mode: Which tracks to compute.
            drop_rate_bonus: Boost to regular drop probability.
            level_gap: Level-gap debuff (0 to -0.9), scales quantity.
            difficulty_tier: Zone difficulty tier.

        Returns:
            Drops on both requested tracks; the other track stays empty.
        """
        quantity_factor = (1 + drop_quantity_bonus) * (1 + level_gap)
        entries = [
            (entry, regular_drop_rate(entry, difficulty_tier, drop_rate_bonus), False)
            for entry in monster.drop_table
        ] + [
            (entry, rare_drop_rate(entry, rare_find_bonus), True)
            for entry in monster.rare_drop_table
        ]
        return self._resolve_entries(entries, quantity_factor, rng_mode, difficulty_tier)

    def resolve_rewards(
        self,
        reward_table: List[DropTableEntry],
        rng_mode: RngMode = RngMode.BOTH,
        difficulty_tier: int = 0,
    ) -> LootResult:
        """Resolve a dungeon completion reward table. Player bonuses do not apply."""
        entries = [(entry, regular_drop_rate(entry, difficulty_tier), False) for entry in reward_table]
        return self._resolve_entries(entries, 1.0, rng_mode, difficulty_tier)

    def _resolve_entries(
        self,
        entries: List[Tuple[DropTableEntry, float, bool]],
        quantity_factor: float,
        rng_mode: RngMode,
        difficulty_tier: int,
    ) -> LootResult:
        result = LootResult()
        for entry, probability, is_rare in entries:
            if entry.min_difficulty_tier > difficulty_tier or probability <= 0:
                continue

            if rng_mode in (RngMode.EXPECTED, RngMode.BOTH):
                result.expected.append(DropResult(
                    entry.item_hrid,
                    expected_count(entry, probability, quantity_factor),
                    is_rare,
                ))

            if rng_mode in (RngMode.STOCHASTIC, RngMode.BOTH):
                count = self._roll(entry, probability, quantity_factor)
                if count > 0:
                    result.stochastic.append(DropResult(entry.item_hrid, count, is_rare))

        return result

    def _roll(self, entry: DropTableEntry, probability: float, quantity_factor: float) -> int:
        """One independent draw; fractional quantities resolve by a second draw."""
        if self.rng.random() >= probability:
            return 0
        base = self.rng.randint(int(entry.min_count), int(max(entry.min_count, entry.max_count)))
        scaled = base * quantity_factor
        whole = math.floor(scaled)
        if self.rng.random() < scaled - whole:
            whole += 1
        return whole
