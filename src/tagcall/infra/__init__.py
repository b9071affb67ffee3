"""Infra - inference speed tracking and provider health probes."""

from .health import ProviderHealthMonitor, ProviderHealthSnapshot, ProviderHealthStatus
from .speed import InferenceSpeedSnapshot, InferenceSpeedTracker, get_speed_tracker, reset_speed_tracker

__all__ = [
    "InferenceSpeedTracker", "InferenceSpeedSnapshot", "get_speed_tracker", "reset_speed_tracker",
    "ProviderHealthMonitor", "ProviderHealthStatus", "ProviderHealthSnapshot",
]
