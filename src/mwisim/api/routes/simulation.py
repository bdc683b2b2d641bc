"""
Simulation API routes.
"""

import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect

from mwisim.data.loaders.market_loader import MarketData
from mwisim.data.models.config import SimulationConfig
from mwisim.data.models.game_data import GameData
from mwisim.data.models.results import SimulationResults

from ..dependencies import get_game_data, get_market, get_simulation_service
from ..schemas.simulation import RunStatusResponse, StartRunResponse
from ..services.simulation_service import RunLimitReached, SimulationRun, SimulationService
from ..websocket.handlers import manager

router = APIRouter()


def _status(run: SimulationRun) -> RunStatusResponse:
    return RunStatusResponse(
        run_id=run.run_id,
        status=run.status,
        progress=run.progress,
        result=run.result,
        error=run.error,
    )


@router.post("/run", response_model=SimulationResults)
async def run_simulation(
    config: SimulationConfig,
    game_data: GameData = Depends(get_game_data),
    market: Optional[MarketData] = Depends(get_market),
    service: SimulationService = Depends(get_simulation_service),
):
    """
    Run one simulation and wait for its results.

    The engine runs on a worker thread; the request waits for it.
    """
    return await asyncio.wrap_future(service.submit(config, game_data, market))


@router.post("/start", response_model=StartRunResponse, status_code=202)
async def start_simulation(
    config: SimulationConfig,
    game_data: GameData = Depends(get_game_data),
    market: Optional[MarketData] = Depends(get_market),
    service: SimulationService = Depends(get_simulation_service),
):
    """Start a background run. Progress is available on the stream."""
    try:
        run = service.start(config, game_data, market)
    except RunLimitReached as e:
        raise HTTPException(status_code=429, detail=str(e))
    return StartRunResponse(run_id=run.run_id, status=run.status)


@router.get("/{run_id}", response_model=RunStatusResponse)
async def get_simulation(
    run_id: str,
    service: SimulationService = Depends(get_simulation_service),
):
    """Get the status, and the results once complete, of a run."""
    run = service.get(run_id)
    if run is None:
        raise HTTPException(status_code=404, detail="Run not found")
    return _status(run)


@router.delete("/{run_id}", response_model=RunStatusResponse)
async def cancel_simulation(
    run_id: str,
    service: SimulationService = Depends(get_simulation_service),
):
    """Request cancellation. A cancelled run never produces results."""
    if not service.cancel(run_id):
        raise HTTPException(status_code=404, detail="Run not found")
    return _status(service.get(run_id))


@router.websocket("/{run_id}/stream")
async def stream_simulation(
    websocket: WebSocket,
    run_id: str,
    service: SimulationService = Depends(get_simulation_service),
):
    """Stream progress messages followed by one terminal message."""
    run = service.get(run_id)
    if run is None:
        await websocket.close(code=4404)
        return

    await manager.connect(websocket, run_id)
    try:
        await manager.stream(websocket, run)
        await websocket.close()
    except WebSocketDisconnect:
        pass
    finally:
        manager.disconnect(websocket, run_id)
