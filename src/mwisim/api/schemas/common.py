"""
Common API schemas.
"""

from typing import Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Body returned for simulator errors."""

    error: str
    detail: Optional[str] = None
    tick: Optional[int] = None  # Set for faults raised mid-run
