"""
Reference data API schemas.
"""

from typing import List, Optional

from pydantic import BaseModel


class ZoneSummary(BaseModel):
    """A combat zone or dungeon as listed to clients."""

    hrid: str
    name: str
    category_hrid: str
    is_dungeon: bool
    max_waves: Optional[int] = None
    monster_hrids: List[str]
