"""Zone Optimizer.

Simulates the same party against several targets (zone + difficulty tier) and
ranks the outcomes by a goal.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from mwisim.data.loaders.market_loader import MarketData
from mwisim.data.models.config import PlayerConfig, RngMode, SimulationConfig, SimulationSettings
from mwisim.data.models.game_data import GameData
from mwisim.data.models.results import SimulationResults
from mwisim.errors import ConfigurationError, SimulationCancelled, SimulatorError
from mwisim.combat.combat_engine import CancelToken
from mwisim.combat.simulation import run_simulation


logger = logging.getLogger(__name__)

# Parties larger than one cannot fight single-spawn zones
MAX_PARTY_SIZE = 3
SINGLE_SPAWN_PARTY_SIZE = 1


class OptimizationGoal(str, Enum):
    PROFIT = "profit"
    REVENUE = "revenue"
    EXPENSE = "expense"  # Lower is better
    XP = "xp"
    GOLD_PER_HOUR = "gold_per_hour"


@dataclass
class OptimizationTarget:
    zone_hrid: str
    difficulty_tier: int = 0


@dataclass
class TargetScore:
    """Summary of one target's simulation."""

    zone_hrid: str
    name: str
    difficulty_tier: int = 0
    kills_per_hour: float = 0.0
    deaths_per_hour: float = 0.0
    xp_per_hour: float = 0.0
    profit: float = 0.0
    revenue: float = 0.0
    expense: float = 0.0
    gold_per_hour: float = 0.0
    mana_ran_out: bool = False
    error: Optional[str] = None
    results: Optional[SimulationResults] = field(default=None, repr=False)

    @classmethod
    def from_results(cls, target: OptimizationTarget, results: SimulationResults) -> "TargetScore":
        return cls(
            zone_hrid=target.zone_hrid,
            name=results.encounter_name,
            difficulty_tier=target.difficulty_tier,
            kills_per_hour=results.kills_per_hour.encounters,
            deaths_per_hour=sum(results.deaths_per_hour.values()),
            xp_per_hour=sum(sum(skills.values()) for skills in results.xp_per_hour.values()),
            profit=results.profit,
            revenue=results.revenue,
            expense=results.expense,
            gold_per_hour=results.no_rng_profit,
            mana_ran_out=results.mana_ran_out,
            results=results,
        )

    def goal_value(self, goal: OptimizationGoal) -> float:
        if goal is OptimizationGoal.XP:
            return self.xp_per_hour
        return getattr(self, goal.value)


def max_party_size(game_data: GameData, zone_hrids: Sequence[str]) -> int:
    """Largest party allowed against every target."""
    for hrid in zone_hrids:
        zone = game_data.action_detail_map.get(hrid)
        if zone is None:
            continue
        info = zone.combat_zone_info
        if not info.is_dungeon and info.fight_info.random_spawn_info.max_spawn_count == 1:
            return SINGLE_SPAWN_PARTY_SIZE
    return MAX_PARTY_SIZE


def rank(scores: Sequence[TargetScore], goal: OptimizationGoal) -> List[TargetScore]:
    """Best first; failed targets last."""
    ok = [score for score in scores if score.error is None]
    failed = [score for score in scores if score.error is not None]
    lower_is_better = goal is OptimizationGoal.EXPENSE
    ok.sort(key=lambda score: score.goal_value(goal), reverse=not lower_is_better)
    return ok + failed


class ZoneOptimizer:
    """
    Rank combat targets for a party.

    Usage:
        optimizer = ZoneOptimizer(game_data, market)
        ranking = optimizer.optimize(players, targets, goal=OptimizationGoal.PROFIT)
    """

    def __init__(self, game_data: GameData, market: Optional[MarketData] = None, max_workers: Optional[int] = None):
        self.game_data = game_data
        self.market = market
        self.max_workers = max_workers

    def optimize(
        self,
        players: Sequence[PlayerConfig],
        targets: Sequence[OptimizationTarget],
        goal: OptimizationGoal = OptimizationGoal.PROFIT,
        duration_hours: int = 1,
        settings: Optional[SimulationSettings] = None,
        seed: Optional[int] = None,
        cancel_event: Optional[CancelToken] = None,
    ) -> List[TargetScore]:
        """
        Simulate every target and rank the results.

        A target whose simulation fails is kept in the ranking with its
        error message rather than aborting the whole run.

        Raises:
            ConfigurationError: If there are no targets, or the party is too
                large for one of them.
            SimulationCancelled: If ``cancel_event`` was set.
        """
        if not targets:
            raise ConfigurationError("At least one target is required")
        limit = max_party_size(self.game_data, [target.zone_hrid for target in targets])
        if len(players) > limit:
            raise ConfigurationError(f"Party of {len(players)} exceeds the limit of {limit} for these targets")

        settings = settings or SimulationSettings()
        configs = [
            SimulationConfig(
                players=list(players),
                zone_hrid=target.zone_hrid,
                difficulty_tier=target.difficulty_tier,
                duration_hours=duration_hours,
                settings=settings,
                rng_mode=RngMode.BOTH,
                seed=seed,
            )
            for target in targets
        ]

        logger.info("Optimizing %d targets for %s", len(targets), goal.value)
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = [
                executor.submit(run_simulation, config, self.game_data, self.market, None, cancel_event)
                for config in configs
            ]
            scores = [
                self._score(target, future)
                for target, future in zip(targets, futures)
            ]
        return rank(scores, goal)

    def _score(self, target: OptimizationTarget, future) -> TargetScore:
        try:
            return TargetScore.from_results(target, future.result())
        except SimulationCancelled:
            raise
        except SimulatorError as e:
            logger.warning("Simulation of %s failed: %s", target.zone_hrid, e)
            zone = self.game_data.action_detail_map.get(target.zone_hrid)
            return TargetScore(
                zone_hrid=target.zone_hrid,
                name=zone.name if zone is not None else target.zone_hrid,
                difficulty_tier=target.difficulty_tier,
                error=str(e),
            )
