"""Configuration: environment settings (pydantic-settings) and config-file models."""

from .models import HealthCheckConfig, ModelCompatConfig, ProviderConfig
from .settings import (
    HealthSettings,
    LoggingSettings,
    SpeedSettings,
    TagcallSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "ModelCompatConfig", "ProviderConfig", "HealthCheckConfig",
    "TagcallSettings", "LoggingSettings", "HealthSettings", "SpeedSettings",
    "get_settings", "clear_settings_cache",
]
