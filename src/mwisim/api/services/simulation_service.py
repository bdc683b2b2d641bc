"""
Simulation run service.

Runs simulations on worker threads, never on the event loop. Each background
run owns a cancellation event and a message queue that the WebSocket stream
drains: progress messages followed by exactly one terminal message.
"""

import logging
import queue
import threading
import time
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from mwisim.combat.simulation import run_simulation, validate_config
from mwisim.data.loaders.market_loader import MarketData
from mwisim.data.models.config import PlayerConfig, SimulationConfig, SimulationSettings
from mwisim.data.models.game_data import GameData
from mwisim.data.models.results import SimulationResults
from mwisim.errors import SimulationCancelled, SimulatorError
from mwisim.optimizer import OptimizationGoal, OptimizationTarget, TargetScore, ZoneOptimizer

from ..schemas.simulation import (
    RunStatus,
    cancelled_message,
    complete_message,
    error_message,
    progress_message,
)


logger = logging.getLogger(__name__)


class RunLimitReached(Exception):
    """Too many runs are active at once."""


@dataclass
class SimulationRun:
    """State of one background run."""

    run_id: str
    config: SimulationConfig
    status: RunStatus = RunStatus.PENDING
    progress: float = 0.0
    result: Optional[SimulationResults] = None
    error: Optional[str] = None
    cancel_event: threading.Event = field(default_factory=threading.Event)
    messages: "queue.Queue[Dict[str, Any]]" = field(default_factory=queue.Queue)
    finished_at: Optional[float] = None

    def terminal_message(self) -> Optional[Dict[str, Any]]:
        """The final stream message, or None while the run is in flight."""
        if self.status is RunStatus.COMPLETE and self.result is not None:
            return complete_message(self.result)
        if self.status is RunStatus.ERROR:
            return error_message(self.error or "")
        if self.status is RunStatus.CANCELLED:
            return cancelled_message()
        return None

    def _finish(self, status: RunStatus, message: Dict[str, Any]) -> None:
        self.status = status
        self.finished_at = time.monotonic()
        self.messages.put(message)


class SimulationService:
    """
    Blocking and background simulation runs.

    Usage:
        service = SimulationService(max_workers=4)
        run = service.start(config, game_data, market)
        service.cancel(run.run_id)
    """

    def __init__(self, max_workers: int = 4, max_runs: int = 16, retention_seconds: float = 3600):
        self.max_workers = max_workers
        self.max_runs = max_runs
        self.retention_seconds = retention_seconds
        self.executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="simulation")
        self._runs: Dict[str, SimulationRun] = {}
        self._lock = threading.Lock()

    # =========================================================================
    # BLOCKING
    # =========================================================================

    def submit(
        self,
        config: SimulationConfig,
        game_data: GameData,
        market: Optional[MarketData] = None,
    ) -> "Future[SimulationResults]":
        """Run one simulation on a worker thread."""
        return self.executor.submit(run_simulation, config, game_data, market)

    def optimize(
        self,
        players: List[PlayerConfig],
        targets: List[OptimizationTarget],
        goal: OptimizationGoal,
        game_data: GameData,
        market: Optional[MarketData] = None,
        duration_hours: int = 1,
        settings: Optional[SimulationSettings] = None,
        seed: Optional[int] = None,
    ) -> "Future[List[TargetScore]]":
        """Rank targets on a worker thread."""
        optimizer = ZoneOptimizer(game_data, market, max_workers=self.max_workers)
        return self.executor.submit(
            optimizer.optimize,
            players,
            targets,
            goal,
            duration_hours,
            settings,
            seed,
        )

    # =========================================================================
    # BACKGROUND RUNS
    # =========================================================================

    def start(
        self,
        config: SimulationConfig,
        game_data: GameData,
        market: Optional[MarketData] = None,
    ) -> SimulationRun:
        """
        Validate ``config`` and start it in the background.

        Raises:
            ConfigurationError: If the configuration is invalid.
            RunLimitReached: If ``max_runs`` runs are already in flight.
        """
        validate_config(config, game_data)
        with self._lock:
            self._prune()
            active = sum(1 for run in self._runs.values() if not run.status.is_finished)
            if active >= self.max_runs:
                raise RunLimitReached(f"{active} runs already active")
            run = SimulationRun(run_id=uuid.uuid4().hex, config=config)
            self._runs[run.run_id] = run

        logger.info("Starting run %s for %s", run.run_id, config.zone_hrid)
        self.executor.submit(self._execute, run, game_data, market)
        return run

    def get(self, run_id: str) -> Optional[SimulationRun]:
        with self._lock:
            return self._runs.get(run_id)

    def cancel(self, run_id: str) -> bool:
        """Request cancellation. Returns False for unknown runs."""
        run = self.get(run_id)
        if run is None:
            return False
        if not run.status.is_finished:
            logger.info("Cancelling run %s", run_id)
            run.cancel_event.set()
        return True

    def shutdown(self) -> None:
        with self._lock:
            for run in self._runs.values():
                run.cancel_event.set()
        self.executor.shutdown(wait=True)

    def _execute(self, run: SimulationRun, game_data: GameData, market: Optional[MarketData]) -> None:
        run.status = RunStatus.RUNNING

        def on_progress(progress: float) -> None:
            run.progress = progress
            run.messages.put(progress_message(progress))

        try:
            result = run_simulation(
                run.config,
                game_data,
                market,
                progress_callback=on_progress,
                cancel_event=run.cancel_event,
            )
        except SimulationCancelled as e:
            logger.info("Run %s cancelled at tick %d", run.run_id, e.tick)
            run._finish(RunStatus.CANCELLED, cancelled_message())
        except SimulatorError as e:
            logger.warning("Run %s failed: %s", run.run_id, e)
            run.error = str(e)
            run._finish(RunStatus.ERROR, error_message(run.error))
        except Exception as e:
            logger.exception("Run %s crashed", run.run_id)
            run.error = f"Internal error: {e}"
            run._finish(RunStatus.ERROR, error_message(run.error))
            raise
        else:
            run.result = result
            run.progress = 1.0
            run._finish(RunStatus.COMPLETE, complete_message(result))
            logger.info("Run %s complete", run.run_id)

    def _prune(self) -> None:
        """Forget finished runs past the retention window. Caller holds the lock."""
        now = time.monotonic()
        expired = [
            run_id for run_id, run in self._runs.items()
            if run.finished_at is not None and now - run.finished_at > self.retention_seconds
        ]
        for run_id in expired:
            del self._runs[run_id]
