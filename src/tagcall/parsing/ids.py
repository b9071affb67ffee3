"""Identifiers for synthesized tool-call blocks.

Ids only need to correlate a call with its result inside one message;
collisions across messages are tolerated.
"""

from __future__ import annotations

import time

_MODULUS = 1_000_000


def _int32(value: int) -> int:
    """Wrap to a signed 32-bit integer."""
    value &= 0xFFFFFFFF
    return value - 0x1_0000_0000 if value & 0x8000_0000 else value


def rolling_hash(text: str) -> int:
    """31-multiplier rolling hash with 32-bit wraparound."""
    h = 0
    for ch in text:
        h = _int32((h << 5) - h + ord(ch))
    return h


def generate_tool_call_id(name: str, index: int, *, now_ms: int | None = None) -> str:
    """Build `call_<hash>_<index>` from tool name, ordinal and wall-clock ms."""
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    return f"call_{abs(rolling_hash(f'{name}_{index}_{now_ms}')) % _MODULUS}_{index}"
