"""Exception hierarchy for the combat simulator.

Configuration and data problems are raised before the first tick runs.
Faults raised during a run carry the tick index at which the invariant
broke. Running out of mana is not an error and has no exception here.
"""

from typing import Optional


class SimulatorError(Exception):
    """Base class for all simulator errors."""


class ConfigurationError(SimulatorError):
    """Malformed or missing required input (no players, bad duration, unknown hrid)."""


class DataUnavailable(SimulatorError):
    """Required reference data (game definitions or marketplace) is missing."""


class SimulationFault(SimulatorError):
    """An invariant was violated while the simulation was running."""

    def __init__(self, message: str, tick: Optional[int] = None):
        self.tick = tick
        if tick is not None:
            message = f"{message} (tick {tick})"
        super().__init__(message)


class SimulationCancelled(SimulatorError):
    """The host requested cancellation; no result is produced."""

    def __init__(self, tick: int):
        self.tick = tick
        super().__init__(f"Simulation cancelled at tick {tick}")
