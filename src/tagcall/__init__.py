"""tagcall - recover tool calls that models write as tagged text.

Many local and open-weight models emit tool invocations as free text such as
`<tool_call>{"name": "web_search", "arguments": {...}}</tool_call>` instead
of using the provider's structured tool-call channel. tagcall wraps an
inference stream function and rewrites the terminal `done` event so those
invocations arrive as ordinary `toolCall` content blocks.

Quick Start:
    >>> from tagcall import create_tool_call_parser_wrapper
    >>>
    >>> stream_fn = create_tool_call_parser_wrapper(provider_stream)
    >>> async for event in stream_fn(model, context):
    ...     if event["type"] == "done":
    ...         print(event["reason"])  # "toolUse" when calls were recovered

Custom tags:
    >>> stream_fn = create_tool_call_parser_wrapper(
    ...     provider_stream, {"toolCallPatterns": [{"tag": "my_tool"}]},
    ... )

Disable parsing for a model (returns None, call the stream function directly):
    >>> create_tool_call_parser_wrapper(provider_stream, {"toolCallPatterns": []}) is None
    True
"""

from __future__ import annotations

__version__ = "0.1.0"

# Config
from .foundation.config import ModelCompatConfig, ProviderConfig, TagcallSettings, get_settings

# Errors
from .foundation.errors import ErrorCode, TagcallError, TagcallException

# Streaming
from .io.streaming import ToolCallStream, wrap_stream

# Parsing
from .parsing import (
    DEFAULT_TOOL_CALL_PATTERNS,
    TOOL_USE_REASON,
    ExtractionResult,
    ParsedToolCall,
    PatternFormat,
    ToolCallPattern,
    extract_tool_calls,
    generate_tool_call_id,
    parse_tool_call_json,
    resolve_patterns,
    transform_done_message,
)

# Logging
from .runtime.observability import configure_logging, get_logger

# Wrapper
from .wrapper import StreamFn, create_tool_call_parser_wrapper

__all__ = [
    "__version__",
    # Wrapper
    "create_tool_call_parser_wrapper", "StreamFn",
    # Streaming
    "ToolCallStream", "wrap_stream",
    # Parsing
    "ToolCallPattern", "PatternFormat", "DEFAULT_TOOL_CALL_PATTERNS", "resolve_patterns",
    "ParsedToolCall", "parse_tool_call_json", "ExtractionResult", "extract_tool_calls",
    "generate_tool_call_id", "transform_done_message", "TOOL_USE_REASON",
    # Config
    "ModelCompatConfig", "ProviderConfig", "TagcallSettings", "get_settings",
    # Errors
    "ErrorCode", "TagcallError", "TagcallException",
    # Logging
    "configure_logging", "get_logger",
]
