"""
Zone optimizer API routes.
"""

import asyncio
from typing import Optional

from fastapi import APIRouter, Depends

from mwisim.data.loaders.market_loader import MarketData
from mwisim.data.models.game_data import GameData
from mwisim.optimizer import OptimizationTarget

from ..dependencies import get_game_data, get_market, get_simulation_service
from ..schemas.optimizer import OptimizeRequest, OptimizeResponse, TargetScoreSchema
from ..services.simulation_service import SimulationService

router = APIRouter()


@router.post("/run", response_model=OptimizeResponse)
async def run_optimizer(
    request: OptimizeRequest,
    game_data: GameData = Depends(get_game_data),
    market: Optional[MarketData] = Depends(get_market),
    service: SimulationService = Depends(get_simulation_service),
):
    """
    Simulate the party against every target and rank them by the goal.

    Failed targets are listed last with their error.
    """
    targets = [
        OptimizationTarget(zone_hrid=target.zone_hrid, difficulty_tier=target.difficulty_tier)
        for target in request.targets
    ]
    future = service.optimize(
        players=request.players,
        targets=targets,
        goal=request.goal,
        game_data=game_data,
        market=market,
        duration_hours=request.duration_hours,
        settings=request.settings,
        seed=request.seed,
    )
    scores = await asyncio.wrap_future(future)
    return OptimizeResponse(
        goal=request.goal,
        results=[
            TargetScoreSchema(
                rank=index + 1,
                zone_hrid=score.zone_hrid,
                name=score.name,
                difficulty_tier=score.difficulty_tier,
                kills_per_hour=score.kills_per_hour,
                deaths_per_hour=score.deaths_per_hour,
                xp_per_hour=score.xp_per_hour,
                profit=score.profit,
                revenue=score.revenue,
                expense=score.expense,
                gold_per_hour=score.gold_per_hour,
                mana_ran_out=score.mana_ran_out,
                error=score.error,
            )
            for index, score in enumerate(scores)
        ],
    )
