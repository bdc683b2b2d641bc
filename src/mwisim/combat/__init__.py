# Combat simulation
from .attack import AttackOutcome, SideEffects, compute_damage, hit_chance, resolve_attack
from .combat_engine import CombatEngine, RunState
from .loot import DropResult, LootEngine, LootResult
from .simulation import run_simulation, simulate_many, transform_result, validate_config

__all__ = [
    "AttackOutcome",
    "SideEffects",
    "compute_damage",
    "hit_chance",
    "resolve_attack",
    "CombatEngine",
    "RunState",
    "DropResult",
    "LootEngine",
    "LootResult",
    "run_simulation",
    "simulate_many",
    "transform_result",
    "validate_config",
]
