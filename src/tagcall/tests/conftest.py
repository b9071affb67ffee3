"""Shared fixtures."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from tagcall.foundation.config import clear_settings_cache
from tagcall.runtime.observability import CaptureRenderer, set_renderer


@pytest.fixture
def captured_logs() -> Iterator[CaptureRenderer]:
    """Route structured logs into memory at DEBUG level."""
    capture = CaptureRenderer()
    previous = set_renderer(capture, level="DEBUG")
    yield capture
    set_renderer(previous, level="INFO")


@pytest.fixture(autouse=True)
def clean_settings() -> Iterator[None]:
    """Reload settings from the environment for every test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
