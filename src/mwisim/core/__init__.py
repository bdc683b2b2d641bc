# Core simulation modules
from .constants import (
    TICK_RATE,
    SECONDS_PER_HOUR,
    MIN_DURATION_HOURS,
    MAX_DURATION_HOURS,
    CombatStyle,
    DamageType,
    Skill,
    EquipmentType,
    seconds_to_ticks,
    ticks_to_seconds,
)
