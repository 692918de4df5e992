"""Library settings using Pydantic BaseSettings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Detection defaults loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CHARTPATTERNS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    LOG_LEVEL: str = "INFO"

    # Detection defaults
    DEFAULT_LOOKBACK_PERIOD: int = Field(default=60, gt=0)
    DEFAULT_MIN_CONFIDENCE: float = Field(default=0.6, ge=0.0, le=1.0)

    # Extrema window half-width, in candles
    EXTREMA_RADIUS: int = Field(default=5, gt=0)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
