"""Marketplace price loader.

Prices are stored as ``{itemHrid: {enhancementLevel: {"a": ask, "b": bid}}}``,
optionally wrapped in a ``{"marketData": ...}`` envelope. A plain number per
item is accepted as a fixed price.
"""

import json
import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from mwisim.errors import DataUnavailable


logger = logging.getLogger(__name__)

MarketData = Mapping[str, Any]


def load_marketplace(path: Union[str, Path]) -> dict[str, Any]:
    """Read a marketplace price file."""
    path = Path(path)
    if not path.exists():
        raise DataUnavailable(f"Marketplace data not found: {path}")
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise DataUnavailable(f"Cannot read marketplace data {path}: {e}") from e

    if isinstance(data, dict) and isinstance(data.get("marketData"), dict):
        data = data["marketData"]
    if not isinstance(data, dict):
        raise DataUnavailable(f"Marketplace data in {path} is not a JSON object")

    logger.info("Loaded marketplace prices for %d items from %s", len(data), path)
    return data


def get_item_price(market: Optional[MarketData], item_hrid: str, enhancement_level: int = 0) -> float:
    """Ask price if positive, else bid price if positive, else 0."""
    if not market or item_hrid not in market:
        return 0.0
    entry = market[item_hrid]
    if isinstance(entry, (int, float)):
        return float(entry)
    if not isinstance(entry, dict):
        return 0.0

    level_data = entry.get(str(enhancement_level)) or entry.get("0")
    if not isinstance(level_data, dict):
        return 0.0
    ask = level_data.get("a") or 0
    bid = level_data.get("b") or 0
    if ask > 0:
        return float(ask)
    if bid > 0:
        return float(bid)
    return 0.0
