"""
Configuration for recordkit.

Settings are read from the environment with the ``RECORDKIT_`` prefix:

    RECORDKIT_LANG=ru               language of error messages
    RECORDKIT_MAX_VALUE_LENGTH=80   longest rendering of an invalid value
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """recordkit configuration."""

    # Error messages
    lang: Literal["en", "ru"] = Field(default="en")
    max_value_length: int = Field(
        default=50,
        ge=4,
        description="Invalid values longer than this are truncated with '...'",
    )

    model_config = {"env_prefix": "RECORDKIT_"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the process-wide settings instance."""
    return Settings()


def reset_settings() -> None:
    """Drop the cached settings (for testing only)."""
    get_settings.cache_clear()
