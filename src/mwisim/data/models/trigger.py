"""Combat trigger data model."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class TriggerDependency(StrEnum):
    """Whose state a trigger looks at."""

    SELF = "/combat_trigger_dependencies/self"
    TARGETED_ENEMY = "/combat_trigger_dependencies/targeted_enemy"
    ALL_ALLIES = "/combat_trigger_dependencies/all_allies"
    ALL_ENEMIES = "/combat_trigger_dependencies/all_enemies"


class TriggerCondition(StrEnum):
    """What a trigger measures."""

    ALWAYS = "/combat_trigger_conditions/always"
    CURRENT_HP = "/combat_trigger_conditions/current_hp"
    CURRENT_HP_PERCENTAGE = "/combat_trigger_conditions/current_hp_percentage"
    MISSING_HP = "/combat_trigger_conditions/missing_hp"
    CURRENT_MP = "/combat_trigger_conditions/current_mp"
    CURRENT_MP_PERCENTAGE = "/combat_trigger_conditions/current_mp_percentage"
    MISSING_MP = "/combat_trigger_conditions/missing_mp"
    ELAPSED_SECONDS = "/combat_trigger_conditions/elapsed_seconds"
    NUMBER_OF_ACTIVE_UNITS = "/combat_trigger_conditions/number_of_active_units"


class TriggerComparator(StrEnum):
    GREATER_THAN_EQUAL = "/combat_trigger_comparators/greater_than_equal"
    LESS_THAN_EQUAL = "/combat_trigger_comparators/less_than_equal"
    EQUAL = "/combat_trigger_comparators/equal"
    GREATER_THAN = "/combat_trigger_comparators/greater_than"
    LESS_THAN = "/combat_trigger_comparators/less_than"

    def compare(self, left: float, right: float) -> bool:
        if self is TriggerComparator.GREATER_THAN_EQUAL:
            return left >= right
        if self is TriggerComparator.LESS_THAN_EQUAL:
            return left <= right
        if self is TriggerComparator.EQUAL:
            return left == right
        if self is TriggerComparator.GREATER_THAN:
            return left > right
        return left < right


class Trigger(BaseModel):
    """A single trigger condition. A slot fires when all of its triggers hold.

    Percentage conditions take ``value`` in percent (``50`` = half the pool).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    dependency_hrid: TriggerDependency = TriggerDependency.SELF
    condition_hrid: TriggerCondition = TriggerCondition.ALWAYS
    comparator_hrid: TriggerComparator = TriggerComparator.GREATER_THAN_EQUAL
    value: float = 0.0
