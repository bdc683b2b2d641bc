"""
Reference data API routes.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from mwisim.data.models.game_data import GameData
from mwisim.data.models.zone import CombatZone

from ..dependencies import get_game_data
from ..schemas.data import ZoneSummary

router = APIRouter()


def _summary(zone: CombatZone) -> ZoneSummary:
    dungeon_info = zone.combat_zone_info.dungeon_info
    return ZoneSummary(
        hrid=zone.hrid,
        name=zone.name,
        category_hrid=zone.category_hrid,
        is_dungeon=zone.is_dungeon,
        max_waves=dungeon_info.max_waves if zone.is_dungeon and dungeon_info else None,
        monster_hrids=sorted(zone.monster_hrids),
    )


@router.get("/zones", response_model=List[ZoneSummary])
async def get_zones(
    include_dungeons: bool = True,
    game_data: GameData = Depends(get_game_data),
):
    """List combat zones, optionally without dungeons."""
    return [_summary(zone) for zone in game_data.zones(include_dungeons)]


@router.get("/zones/{zone_hrid:path}", response_model=ZoneSummary)
async def get_zone(
    zone_hrid: str,
    game_data: GameData = Depends(get_game_data),
):
    """Get one zone. Hrids contain slashes, e.g. /actions/combat/fly."""
    if not zone_hrid.startswith("/"):
        zone_hrid = "/" + zone_hrid
    zone = game_data.action_detail_map.get(zone_hrid)
    if zone is None:
        raise HTTPException(status_code=404, detail="Zone not found")
    return _summary(zone)
