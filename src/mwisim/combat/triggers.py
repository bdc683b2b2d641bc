"""Trigger evaluation.

A trigger compares one measured value of some unit(s) against a threshold.
For group dependencies (all allies, all enemies) a condition holds when any
living member satisfies it; ``number_of_active_units`` counts the living
members instead.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from mwisim.core.constants import TICK_RATE
from mwisim.data.models.trigger import Trigger, TriggerCondition, TriggerDependency
from mwisim.errors import SimulationFault
from mwisim.combat.combat_unit import CombatUnit


@dataclass
class TriggerContext:
    """Everything a trigger can look at on a given tick."""

    source: CombatUnit
    target: Optional[CombatUnit]
    allies: Sequence[CombatUnit] = field(default_factory=list)
    enemies: Sequence[CombatUnit] = field(default_factory=list)
    tick: int = 0
    encounter_start_tick: int = 0

    @property
    def elapsed_seconds(self) -> float:
        return (self.tick - self.encounter_start_tick) / TICK_RATE


def _measure(unit: CombatUnit, condition: TriggerCondition) -> float:
    if condition is TriggerCondition.CURRENT_HP:
        return unit.current_hp
    if condition is TriggerCondition.CURRENT_HP_PERCENTAGE:
        return unit.current_hp / unit.max_hp * 100
    if condition is TriggerCondition.MISSING_HP:
        return unit.max_hp - unit.current_hp
    if condition is TriggerCondition.CURRENT_MP:
        return unit.current_mp
    if condition is TriggerCondition.CURRENT_MP_PERCENTAGE:
        return unit.current_mp / unit.max_mp * 100
    if condition is TriggerCondition.MISSING_MP:
        return unit.max_mp - unit.current_mp
    raise ValueError(f"Condition {condition} is not measured per unit")


def _units_for(dependency: TriggerDependency, ctx: TriggerContext) -> List[CombatUnit]:
    if dependency is TriggerDependency.SELF:
        units = [ctx.source]
    elif dependency is TriggerDependency.TARGETED_ENEMY:
        units = [ctx.target] if ctx.target is not None else []
    elif dependency is TriggerDependency.ALL_ALLIES:
        units = list(ctx.allies)
    else:
        units = list(ctx.enemies)
    return [unit for unit in units if unit.is_alive]


def evaluate_trigger(trigger: Trigger, ctx: TriggerContext) -> bool:
    """
    Check a single trigger.

    Raises:
        SimulationFault: If the measured value cannot be computed.
    """
    condition = trigger.condition_hrid
    if condition is TriggerCondition.ALWAYS:
        return True

    try:
        units = _units_for(trigger.dependency_hrid, ctx)
        if condition is TriggerCondition.NUMBER_OF_ACTIVE_UNITS:
            return trigger.comparator_hrid.compare(len(units), trigger.value)
        if condition is TriggerCondition.ELAPSED_SECONDS:
            return trigger.comparator_hrid.compare(ctx.elapsed_seconds, trigger.value)
        return any(
            trigger.comparator_hrid.compare(_measure(unit, condition), trigger.value)
            for unit in units
        )
    except (ArithmeticError, ValueError) as e:
        raise SimulationFault(
            f"Trigger {condition} failed for {ctx.source.id}: {e}", tick=ctx.tick
        ) from e


def triggers_hold(triggers: Sequence[Trigger], ctx: TriggerContext) -> bool:
    """True when every trigger holds (vacuously true for no triggers)."""
    return all(evaluate_trigger(trigger, ctx) for trigger in triggers)
