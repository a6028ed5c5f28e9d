"""Application settings with environment variable support.

Uses pydantic-settings for typed configuration validation.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

from mimmoza.core.exceptions import ConfigurationError


class AppSettings(BaseSettings):
    """Application configuration loaded from environment variables."""

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    json_logs: bool = Field(default=False, description="Render logs as JSON lines")

    # Credit defaults
    default_rate_pct: float = Field(default=3.5, ge=0, le=25, description="Fallback annual rate %")

    # SmartScore verdict ladder
    verdict_go: float = Field(default=75.0, ge=0, le=100)
    verdict_go_with_reserves: float = Field(default=60.0, ge=0, le=100)
    verdict_deepen: float = Field(default=45.0, ge=0, le=100)

    model_config = {
        "env_prefix": "MIMMOZA_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @model_validator(mode="after")
    def check_verdict_ladder(self) -> "AppSettings":
        """Thresholds must be strictly decreasing."""
        if not (self.verdict_go > self.verdict_go_with_reserves > self.verdict_deepen):
            raise ConfigurationError(
                "verdict thresholds must satisfy go > go_with_reserves > deepen, got "
                f"{self.verdict_go}/{self.verdict_go_with_reserves}/{self.verdict_deepen}"
            )
        return self


@lru_cache
def get_settings() -> AppSettings:
    """Get cached application settings."""
    return AppSettings()
