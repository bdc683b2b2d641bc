"""API services."""

from .simulation_service import RunLimitReached, SimulationRun, SimulationService

__all__ = [
    "RunLimitReached",
    "SimulationRun",
    "SimulationService",
]
