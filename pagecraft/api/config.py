"""
config.py — Environment configuration for the API.

Uses pydantic-settings for type-safe environment variable handling.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from pagecraft.engine.units import DEFAULT_SNAP_THRESHOLD_PX


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="PAGECRAFT_",
        extra="ignore",
    )

    app_name: str = "Pagecraft"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    api_prefix: str = "/api"
    allowed_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://localhost:5173",
            "http://127.0.0.1:3000",
            "http://127.0.0.1:5173",
        ]
    )

    # Alignment snapping distance on screen, converted per gesture to
    # normalized units using the canvas size
    snap_threshold_px: float = Field(default=DEFAULT_SNAP_THRESHOLD_PX, ge=0)


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
