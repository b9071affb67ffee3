"""Streaming - interception of inference event streams."""

from .stream import (
    DONE_EVENT,
    CancellableSource,
    EventSource,
    ThrowableSource,
    ToolCallStream,
    is_done_event,
    wrap_stream,
)

__all__ = [
    "ToolCallStream", "wrap_stream",
    "EventSource", "CancellableSource", "ThrowableSource",
    "DONE_EVENT", "is_done_event",
]
