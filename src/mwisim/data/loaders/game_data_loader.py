"""Reference game data loader.

Game data is accepted either as a single JSON document holding every detail
map, or as a directory with one ``<mapName>.json`` file per map.
"""

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from mwisim.errors import DataUnavailable
from ..models.game_data import GameData


logger = logging.getLogger(__name__)

# Get the data directory path
DATA_DIR = Path(__file__).parent.parent.parent.parent.parent / "data"
GAME_DATA_FILE = DATA_DIR / "game_data.json"

REQUIRED_MAPS = ("actionDetailMap", "combatMonsterDetailMap", "itemDetailMap")
OPTIONAL_MAPS = (
    "abilityDetailMap",
    "houseRoomDetailMap",
    "achievementDetailMap",
    "achievementTierDetailMap",
    "enhancementLevelTotalBonusMultiplierTable",
)


def _combat_actions(actions: dict[str, Any]) -> dict[str, Any]:
    """Keep only combat actions; everything else in the action map is skilling."""
    return {
        hrid: action for hrid, action in actions.items()
        if "combatZoneInfo" in action or action.get("type") == "/action_types/combat"
    }


def game_data_from_dict(raw: dict[str, Any]) -> GameData:
    """Validate raw detail maps into a :class:`GameData`.

    Raises:
        DataUnavailable: If a required map is missing or the data does not
            validate (for instance an unknown buff type).
    """
    missing = [name for name in REQUIRED_MAPS if name not in raw]
    if missing:
        raise DataUnavailable(f"Game data is missing: {', '.join(missing)}")

    payload = {name: raw[name] for name in REQUIRED_MAPS + OPTIONAL_MAPS if name in raw}
    payload["actionDetailMap"] = _combat_actions(raw["actionDetailMap"])
    try:
        return GameData.model_validate(payload)
    except ValidationError as e:
        raise DataUnavailable(f"Invalid game data: {e}") from e


def _read_json(path: Path) -> Any:
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise DataUnavailable(f"Cannot read {path}: {e}") from e


def _read_directory(path: Path) -> dict[str, Any]:
    raw = {}
    for name in REQUIRED_MAPS + OPTIONAL_MAPS:
        map_file = path / f"{name}.json"
        if map_file.exists():
            raw[name] = _read_json(map_file)
    return raw


@lru_cache(maxsize=4)
def load_game_data(path: Optional[Path] = None) -> GameData:
    """Load and cache game data from a JSON file or a directory of map files."""
    path = Path(path) if path is not None else GAME_DATA_FILE
    if not path.exists():
        raise DataUnavailable(f"Game data not found: {path}")

    raw = _read_directory(path) if path.is_dir() else _read_json(path)
    if not isinstance(raw, dict):
        raise DataUnavailable(f"Game data in {path} is not a JSON object")

    game_data = game_data_from_dict(raw)
    logger.info(
        "Loaded game data from %s: %d zones, %d monsters, %d items, %d abilities",
        path,
        len(game_data.action_detail_map),
        len(game_data.combat_monster_detail_map),
        len(game_data.item_detail_map),
        len(game_data.ability_detail_map),
    )
    return game_data
