"""Process settings read from TAGCALL_* environment variables.

Each concern has its own prefix (TAGCALL_LOG_, TAGCALL_HEALTH_, TAGCALL_SPEED_).
The root settings also read a local .env file, with nested keys such as
TAGCALL_LOGGING__LEVEL. Per-model and per-provider configuration lives in
models.py instead.

Example:
    >>> from tagcall.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.health.timeout
    10.0
    >>> settings.logging.level
    'INFO'

    # Overridable from the environment:
    # TAGCALL_LOG_LEVEL=DEBUG
    # TAGCALL_HEALTH_TIMEOUT=5
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, PositiveFloat, PositiveInt
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingSettings(BaseSettings):
    """Renderer and minimum level for structured logs."""

    model_config = SettingsConfigDict(
        env_prefix="TAGCALL_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json", "none"] = "console"
    colors: bool | None = None


class HealthSettings(BaseSettings):
    """Provider health probe defaults."""

    model_config = SettingsConfigDict(
        env_prefix="TAGCALL_HEALTH_",
        extra="ignore",
    )

    timeout: PositiveFloat = Field(default=10.0, description="Per-request timeout in seconds")
    default_endpoint: str = "/health"
    fallback_endpoint: str = "/v1/models"
    interval_seconds: PositiveFloat = Field(default=60.0, description="Upper bound on the probe interval")


class SpeedSettings(BaseSettings):
    """Inference speed tracking."""

    model_config = SettingsConfigDict(
        env_prefix="TAGCALL_SPEED_",
        extra="ignore",
    )

    max_history: Annotated[PositiveInt, Field(le=1000)] = 10


class TagcallSettings(BaseSettings):
    """Root settings for tagcall.

    Sub-settings read their own prefixes; for example:
        TAGCALL_LOG_LEVEL=DEBUG
        TAGCALL_LOG_FORMAT=json
        TAGCALL_HEALTH_TIMEOUT=5
        TAGCALL_SPEED_MAX_HISTORY=20
    """

    model_config = SettingsConfigDict(
        env_prefix="TAGCALL_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    health: HealthSettings = Field(default_factory=HealthSettings)
    speed: SpeedSettings = Field(default_factory=SpeedSettings)


@lru_cache(maxsize=1)
def get_settings() -> TagcallSettings:
    """Get the global settings instance (cached)."""
    return TagcallSettings()


def clear_settings_cache() -> None:
    """Forget the cached settings so the next get_settings() re-reads the environment."""
    get_settings.cache_clear()
