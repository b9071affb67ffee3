"""Drop-in wrapper for inference stream functions.

A stream function takes `(model, context, options=None)` and returns an
async event stream, or an awaitable resolving to one. The wrapper has the
same signature and return contract, with the `done` event rewritten so tool
calls written as tagged text show up as toolCall blocks.

Example:
    >>> stream_fn = create_tool_call_parser_wrapper(provider.stream, compat) or provider.stream
    >>> async for event in await stream_fn(model, context):
    ...     ...
"""

from __future__ import annotations

import inspect
from collections.abc import AsyncIterable, Awaitable, Callable, Mapping
from functools import wraps
from typing import Any, TypeAlias

from pydantic import ValidationError

from tagcall.foundation.config import ModelCompatConfig
from tagcall.foundation.errors import ErrorCode, TagcallException
from tagcall.io.streaming import ToolCallStream, wrap_stream
from tagcall.parsing import ToolCallPattern, resolve_patterns
from tagcall.runtime.observability import get_logger

log = get_logger("tagcall.wrapper")

EventStream: TypeAlias = AsyncIterable[Any]
StreamFn: TypeAlias = Callable[..., EventStream | Awaitable[EventStream]]


def create_tool_call_parser_wrapper(
    stream_fn: StreamFn,
    compat: ModelCompatConfig | Mapping[str, Any] | None = None,
) -> StreamFn | None:
    """Wrap `stream_fn` so tagged tool calls in the final message are parsed.

    Patterns come from `compat.tool_call_patterns`; unset means the built-in
    defaults. An explicit empty list disables parsing and returns None, in
    which case callers use `stream_fn` as is.

    Raises:
        TagcallException: INVALID_CONFIG when a compat mapping fails validation
    """
    if isinstance(compat, Mapping):
        try:
            compat = ModelCompatConfig.model_validate(compat)
        except ValidationError as e:
            raise TagcallException.create("wrapper", f"invalid compat config: {e}", ErrorCode.INVALID_CONFIG) from e
    patterns = resolve_patterns(compat.tool_call_patterns if compat is not None else None)
    if not patterns:
        log.debug("tool call parsing disabled")
        return None

    @wraps(stream_fn)
    def wrapped(model: Any, context: Any, options: Any = None) -> EventStream | Awaitable[EventStream]:
        result = stream_fn(model, context, options)
        if inspect.isawaitable(result):
            return _wrap_pending(result, patterns)
        return wrap_stream(result, patterns)

    return wrapped


async def _wrap_pending(pending: Awaitable[EventStream], patterns: tuple[ToolCallPattern, ...]) -> ToolCallStream:
    return wrap_stream(await pending, patterns)
