"""Inference speed tracking.

The agent loop calls `record()` after each completion with the output token
count and wall-clock duration; dashboards read `snapshot()`.
"""

from __future__ import annotations

import math
import time
from collections import deque
from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class InferenceSpeedSnapshot:
    """Point-in-time view of recent inference speed.

    Attributes:
        tokens_per_second: Speed of the most recent completion
        average_tok_per_sec: Rolling average over the retained history
        completion_count: Completions recorded since the last reset
        last_measured_at: Epoch ms of the most recent measurement
    """
    tokens_per_second: float
    average_tok_per_sec: float
    completion_count: int
    last_measured_at: int


@dataclass(slots=True, frozen=True)
class _Sample:
    tok_per_sec: float
    at: int


def _round1(value: float) -> float:
    """Round half up to one decimal."""
    return math.floor(value * 10 + 0.5) / 10


class InferenceSpeedTracker:
    """Bounded history of completion speeds."""

    __slots__ = ("_history", "_completions")

    def __init__(self, max_history: int = 10) -> None:
        if max_history < 1:
            raise ValueError("max_history must be >= 1")
        self._history: deque[_Sample] = deque(maxlen=max_history)
        self._completions = 0

    @property
    def max_history(self) -> int:
        return self._history.maxlen or 0

    def record(self, output_tokens: int, duration_ms: float, *, now_ms: int | None = None) -> None:
        """Record one completion. Non-positive tokens or durations are ignored."""
        if output_tokens <= 0 or duration_ms <= 0:
            return
        at = now_ms if now_ms is not None else time.time_ns() // 1_000_000
        self._history.append(_Sample(_round1(output_tokens / (duration_ms / 1000)), at))
        self._completions += 1

    def snapshot(self) -> InferenceSpeedSnapshot | None:
        """Current speed, or None before the first completion."""
        if not self._history:
            return None
        latest = self._history[-1]
        avg = _round1(sum(s.tok_per_sec for s in self._history) / len(self._history))
        return InferenceSpeedSnapshot(
            tokens_per_second=latest.tok_per_sec,
            average_tok_per_sec=avg,
            completion_count=self._completions,
            last_measured_at=latest.at,
        )

    def reset(self) -> None:
        self._history.clear()
        self._completions = 0


_tracker: InferenceSpeedTracker | None = None


def get_speed_tracker() -> InferenceSpeedTracker:
    """Process-wide tracker, sized from TAGCALL_SPEED_MAX_HISTORY."""
    global _tracker
    if _tracker is None:
        from tagcall.foundation.config import get_settings
        _tracker = InferenceSpeedTracker(get_settings().speed.max_history)
    return _tracker


def reset_speed_tracker() -> None:
    """Drop the process-wide tracker; the next get_speed_tracker() builds a fresh one."""
    global _tracker
    _tracker = None
