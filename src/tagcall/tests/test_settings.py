"""Tests for environment settings and config models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from tagcall.foundation.config import (
    ModelCompatConfig,
    ProviderConfig,
    TagcallSettings,
    get_settings,
)


def test_defaults() -> None:
    settings = TagcallSettings()
    assert settings.logging.level == "INFO"
    assert settings.logging.format == "console"
    assert settings.health.timeout == 10.0
    assert settings.health.default_endpoint == "/health"
    assert settings.health.fallback_endpoint == "/v1/models"
    assert settings.speed.max_history == 10


def test_env_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TAGCALL_LOG_LEVEL", "DEBUG")
    monkeypatch.setenv("TAGCALL_HEALTH_TIMEOUT", "2.5")
    monkeypatch.setenv("TAGCALL_SPEED_MAX_HISTORY", "20")

    settings = get_settings()

    assert settings.logging.level == "DEBUG"
    assert settings.health.timeout == 2.5
    assert settings.speed.max_history == 20


def test_settings_are_cached() -> None:
    assert get_settings() is get_settings()


def test_invalid_env_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TAGCALL_HEALTH_TIMEOUT", "-1")
    with pytest.raises(ValidationError):
        get_settings()


# ─────────────────────────────────────────────────────────────────────────────
# Config models
# ─────────────────────────────────────────────────────────────────────────────


def test_compat_accepts_camel_and_snake_case() -> None:
    camel = ModelCompatConfig.model_validate({"toolCallPatterns": [{"tag": "my_tool"}], "supportsStore": False})
    snake = ModelCompatConfig(tool_call_patterns=[{"tag": "my_tool"}])  # type: ignore[list-item]

    assert camel == snake
    assert camel.tool_call_patterns is not None
    assert camel.tool_call_patterns[0].tag == "my_tool"


def test_compat_absent_vs_empty_patterns() -> None:
    assert ModelCompatConfig().tool_call_patterns is None
    assert ModelCompatConfig.model_validate({"toolCallPatterns": []}).tool_call_patterns == []


def test_provider_config() -> None:
    config = ProviderConfig.model_validate({
        "baseUrl": "http://127.0.0.1:8000/",
        "apiKey": "sk-secret",
        "healthCheck": {"intervalSeconds": 15},
    })

    assert config.base_url == "http://127.0.0.1:8000"
    assert config.api_key is not None
    assert config.api_key.get_secret_value() == "sk-secret"
    assert "sk-secret" not in repr(config)
    assert config.health_check is not None
    assert config.health_check.enabled
    assert config.health_check.interval_seconds == 15


def test_provider_config_requires_base_url() -> None:
    with pytest.raises(ValidationError):
        ProviderConfig.model_validate({"baseUrl": ""})
