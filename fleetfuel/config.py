"""
Configuration for the fleet fuel service.

Settings are read from environment variables prefixed with FLEETFUEL_
(for example FLEETFUEL_DATA_DIR) or from a `.env` file in the working
directory. Defaults are suitable for a single local installation.
"""

from __future__ import annotations

from typing import List, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    # Where collections are kept: one JSON file per collection, or process memory only.
    storage_backend: Literal["json", "memory"] = "json"
    data_dir: str = "./data"
    log_level: str = "INFO"
    # Mileage (km/l) that counts as a 100% performance rate on the dashboard ranking.
    mileage_benchmark: float = 15.0
    top_performers: int = 5
    cors_origins: List[str] = ["*"]

    model_config = SettingsConfigDict(
        env_prefix="FLEETFUEL_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )
