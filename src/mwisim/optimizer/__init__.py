# Optimization tools
from .zone_optimizer import (
    OptimizationGoal,
    OptimizationTarget,
    TargetScore,
    ZoneOptimizer,
    max_party_size,
    rank,
)

__all__ = [
    "OptimizationGoal",
    "OptimizationTarget",
    "TargetScore",
    "ZoneOptimizer",
    "max_party_size",
    "rank",
]
