"""
Zone optimizer API schemas.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from mwisim.core.constants import MAX_DIFFICULTY_TIER, MAX_DURATION_HOURS, MIN_DURATION_HOURS
from mwisim.data.models.config import PlayerConfig, SimulationSettings
from mwisim.optimizer import OptimizationGoal


class TargetSchema(BaseModel):
    """A zone at a difficulty tier."""

    zone_hrid: str
    difficulty_tier: int = Field(default=0, ge=0, le=MAX_DIFFICULTY_TIER)


class OptimizeRequest(BaseModel):
    """Zone optimizer request."""

    players: List[PlayerConfig] = Field(min_length=1)
    targets: List[TargetSchema] = Field(min_length=1)
    goal: OptimizationGoal = OptimizationGoal.PROFIT
    duration_hours: int = Field(default=1, ge=MIN_DURATION_HOURS, le=MAX_DURATION_HOURS)
    settings: SimulationSettings = Field(default_factory=SimulationSettings)
    seed: Optional[int] = None


class TargetScoreSchema(BaseModel):
    """One ranked target."""

    rank: int
    zone_hrid: str
    name: str
    difficulty_tier: int
    kills_per_hour: float
    deaths_per_hour: float
    xp_per_hour: float
    profit: float
    revenue: float
    expense: float
    gold_per_hour: float
    mana_ran_out: bool
    error: Optional[str] = None


class OptimizeResponse(BaseModel):
    """Zone optimizer response, best target first."""

    goal: OptimizationGoal
    results: List[TargetScoreSchema]
