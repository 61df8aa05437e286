"""
Library configuration management using Pydantic Settings.

Loads configuration from environment variables (prefixed ``PYFORMULA_``)
and an optional .env file.
"""

import logging
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Settings(BaseSettings):
    """Library settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PYFORMULA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Logging
    # ==========================================================================
    log_level: str = Field(default="INFO", description="Logging level")
    json_logs: bool = Field(default=False, description="Emit JSON log records")

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and check the logging level name."""
        level = str(v).strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}, got {v!r}")
        return level

    @property
    def log_level_number(self) -> int:
        """Numeric logging level."""
        return logging.getLevelName(self.log_level)

    # ==========================================================================
    # Engine Defaults
    # ==========================================================================
    register_builtins: bool = Field(
        default=True,
        description="Seed new function registries with the built-in math catalog",
    )
    seed_constants: bool = Field(
        default=True,
        description="Seed every evaluation with pi, phi, e and nan",
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


settings = get_settings()
