"""
API configuration settings.
"""

from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """API settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[Path] = None

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

    # Data
    GAME_DATA_PATH: Optional[Path] = None  # Defaults to data/game_data.json
    MARKETPLACE_PATH: Optional[Path] = None

    # Simulation
    WORKER_COUNT: int = 4
    MAX_CONCURRENT_RUNS: int = 16
    RUN_RETENTION: int = 3600  # Seconds a finished run stays queryable


settings = Settings()
