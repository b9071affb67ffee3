"""Stream interceptor for inference event streams.

Wraps the async event sequence of one inference call. Every event is relayed
as is, except `done` events carrying a message: the message runs through
transform_done_message and, when it changed, the event `reason` is set to
TOOL_USE_REASON as well.

The interceptor adds no tasks, no buffering and no retries. Each pull awaits
the wrapped source directly, so errors and cancellation reach the consumer
unchanged.

Example:
    >>> stream = wrap_stream(provider_events(), DEFAULT_TOOL_CALL_PATTERNS)
    >>> async for event in stream:
    ...     handle(event)
"""

from __future__ import annotations

from collections.abc import AsyncIterable, AsyncIterator, Awaitable, Sequence
from typing import Protocol, TypeVar, runtime_checkable

from tagcall.foundation.errors import JsonDict
from tagcall.parsing import TOOL_USE_REASON, ToolCallPattern, transform_done_message

T_co = TypeVar("T_co", covariant=True)

DONE_EVENT = "done"


# ─────────────────────────────────────────────────────────────────────────────
# Source Protocols
# ─────────────────────────────────────────────────────────────────────────────


@runtime_checkable
class EventSource(Protocol[T_co]):
    """Anything that yields events one pull at a time."""

    def __anext__(self) -> Awaitable[T_co]: ...


@runtime_checkable
class CancellableSource(Protocol):
    """Source that can be told the consumer stopped early."""

    def aclose(self) -> Awaitable[object]: ...


@runtime_checkable
class ThrowableSource(Protocol[T_co]):
    """Source that accepts an exception raised into it."""

    def athrow(self, exc: BaseException, /) -> Awaitable[T_co]: ...


def is_done_event(event: object) -> bool:
    return isinstance(event, dict) and event.get("type") == DONE_EVENT


# ─────────────────────────────────────────────────────────────────────────────
# Interceptor
# ─────────────────────────────────────────────────────────────────────────────


class ToolCallStream:
    """Async iterator that rewrites the terminal event of a wrapped stream.

    Supports the async generator surface a consumer may use:
    `__anext__`, `aclose()` and `athrow()`. Other public attributes are looked
    up on the wrapped stream, so producer specific helpers stay reachable.
    """

    __slots__ = ("_stream", "_source", "_patterns", "_exhausted")

    def __init__(self, stream: AsyncIterable[object], patterns: Sequence[ToolCallPattern]) -> None:
        self._stream = stream
        self._source: AsyncIterator[object] = aiter(stream)
        self._patterns = tuple(patterns)
        self._exhausted = False

    @property
    def patterns(self) -> tuple[ToolCallPattern, ...]:
        return self._patterns

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def __aiter__(self) -> ToolCallStream:
        return self

    async def __anext__(self) -> object:
        if self._exhausted:
            raise StopAsyncIteration
        try:
            event = await anext(self._source)
        except StopAsyncIteration:
            self._exhausted = True
            raise
        return self._intercept(event)

    async def aclose(self) -> None:
        """Stop early. Forwards to the source when it can be closed."""
        self._exhausted = True
        if isinstance(self._source, CancellableSource):
            await self._source.aclose()

    async def athrow(self, exc: BaseException) -> object:
        """Raise `exc` inside the source, or re-raise it here if unsupported."""
        if not isinstance(self._source, ThrowableSource):
            raise exc
        try:
            event = await self._source.athrow(exc)
        except StopAsyncIteration:
            self._exhausted = True
            raise
        return self._intercept(event)

    def _intercept(self, event: object) -> object:
        if is_done_event(event):
            message = event.get("message")  # type: ignore[union-attr]
            if isinstance(message, dict) and transform_done_message(message, self._patterns):
                event["reason"] = TOOL_USE_REASON  # type: ignore[index]
        return event

    def __getattr__(self, name: str) -> object:
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self._stream, name)

    def __repr__(self) -> str:
        tags = ", ".join(p.tag for p in self._patterns)
        return f"ToolCallStream(tags=[{tags}], exhausted={self._exhausted})"


def wrap_stream(stream: AsyncIterable[JsonDict], patterns: Sequence[ToolCallPattern]) -> ToolCallStream:
    """Wrap an event stream so its `done` message gets tool calls extracted."""
    return ToolCallStream(stream, patterns)
