"""Parsing - tagged tool-call extraction and message rewriting.

- ToolCallPattern / resolve_patterns: which tags to look for
- parse_tool_call_json: normalize a tag body to a ParsedToolCall
- extract_tool_calls: find and strip tags in one text
- transform_done_message: rewrite a terminal message in place
"""

from .extract import ExtractionResult, extract_tool_calls, has_tool_call_tags
from .ids import generate_tool_call_id
from .patterns import DEFAULT_TOOL_CALL_PATTERNS, PatternFormat, PatternSpec, ToolCallPattern, resolve_patterns
from .payload import ParsedToolCall, parse_tool_call_json
from .transform import (
    TEXT_BLOCK,
    TOOL_CALL_BLOCK,
    TOOL_USE_REASON,
    has_native_tool_calls,
    transform_done_message,
)

__all__ = [
    # Patterns
    "ToolCallPattern", "PatternFormat", "PatternSpec", "DEFAULT_TOOL_CALL_PATTERNS", "resolve_patterns",
    # Payload
    "ParsedToolCall", "parse_tool_call_json",
    # Extraction
    "ExtractionResult", "extract_tool_calls", "has_tool_call_tags",
    # Ids
    "generate_tool_call_id",
    # Transform
    "transform_done_message", "has_native_tool_calls", "TOOL_USE_REASON", "TEXT_BLOCK", "TOOL_CALL_BLOCK",
]
