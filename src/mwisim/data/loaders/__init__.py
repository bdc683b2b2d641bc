# Data Loaders
from .game_data_loader import game_data_from_dict, load_game_data
from .market_loader import get_item_price, load_marketplace

__all__ = [
    "game_data_from_dict",
    "load_game_data",
    "get_item_price",
    "load_marketplace",
]
