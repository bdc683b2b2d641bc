"""
Dependency injection for API services.
"""

from functools import lru_cache
from typing import Optional

from mwisim.data.loaders import load_game_data, load_marketplace
from mwisim.data.loaders.market_loader import MarketData
from mwisim.data.models.game_data import GameData

from .config import settings
from .services.simulation_service import SimulationService


def get_game_data() -> GameData:
    """Reference data, loaded once per path."""
    return load_game_data(settings.GAME_DATA_PATH)


@lru_cache()
def get_market() -> Optional[MarketData]:
    """Marketplace prices, or None when no price file is configured."""
    if settings.MARKETPLACE_PATH is None:
        return None
    return load_marketplace(settings.MARKETPLACE_PATH)


@lru_cache()
def get_simulation_service() -> SimulationService:
    """Get SimulationService singleton."""
    return SimulationService(
        max_workers=settings.WORKER_COUNT,
        max_runs=settings.MAX_CONCURRENT_RUNS,
        retention_seconds=settings.RUN_RETENTION,
    )
