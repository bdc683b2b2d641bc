"""Shared field types for reference data models."""

from typing import Annotated, Any

from pydantic import BeforeValidator

# Exported game data stores durations in nanoseconds; anything this large
# cannot be a duration in seconds.
_NANOSECOND_THRESHOLD = 1e6
_NANOSECONDS_PER_SECOND = 1e9


def _to_seconds(value: Any) -> Any:
    if isinstance(value, str):
        # Wall-clock timestamps carry no run-relative offset
        return 0.0
    if isinstance(value, (int, float)) and value >= _NANOSECOND_THRESHOLD:
        return value / _NANOSECONDS_PER_SECOND
    return value


Seconds = Annotated[float, BeforeValidator(_to_seconds)]
