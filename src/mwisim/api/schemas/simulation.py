"""
Simulation run API schemas.
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from mwisim.data.models.results import SimulationResults


class RunStatus(str, Enum):
    """Lifecycle of a background run."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETE = "complete"
    ERROR = "error"
    CANCELLED = "cancelled"

    @property
    def is_finished(self) -> bool:
        return self in (RunStatus.COMPLETE, RunStatus.ERROR, RunStatus.CANCELLED)


class StartRunResponse(BaseModel):
    """Response to starting a background run."""

    run_id: str
    status: RunStatus


class RunStatusResponse(BaseModel):
    """Snapshot of a background run."""

    run_id: str
    status: RunStatus
    progress: float = Field(default=0.0, ge=0.0, le=1.0)
    result: Optional[SimulationResults] = None
    error: Optional[str] = None


class StreamMessageType(str, Enum):
    PROGRESS = "progress"
    COMPLETE = "complete"
    ERROR = "error"
    CANCELLED = "cancelled"


def progress_message(progress: float) -> Dict[str, Any]:
    return {"type": StreamMessageType.PROGRESS.value, "progress": progress}


def complete_message(result: SimulationResults) -> Dict[str, Any]:
    return {"type": StreamMessageType.COMPLETE.value, "result": result.to_dict()}


def error_message(error: str) -> Dict[str, Any]:
    return {"type": StreamMessageType.ERROR.value, "error": error}


def cancelled_message() -> Dict[str, Any]:
    return {"type": StreamMessageType.CANCELLED.value}
