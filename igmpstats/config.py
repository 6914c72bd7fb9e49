"""Runtime configuration loading via Pydantic settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Publisher configuration sourced from environment variables."""

    # Kept as the raw string: an unparseable period must fall back to the
    # default at reconfiguration time instead of failing startup.
    statistics_generation_period: str | None = Field(
        default=None, alias="STATISTICS_GENERATION_PERIOD"
    )
    stats_cancel_timeout_seconds: float = Field(
        default=5.0, gt=0, alias="STATS_CANCEL_TIMEOUT_SECONDS"
    )
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()  # type: ignore[call-arg]
