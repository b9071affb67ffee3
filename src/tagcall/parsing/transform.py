"""Rewrite a terminal message so tagged tool calls become toolCall blocks.

The message is mutated in place. A message that already carries a native
toolCall block is left alone: native calls are authoritative and never mixed
with calls recovered from text.
"""

from __future__ import annotations

from collections.abc import Sequence

from tagcall.foundation.errors import JsonDict
from tagcall.runtime.observability import get_logger

from .extract import extract_tool_calls, has_tool_call_tags
from .ids import generate_tool_call_id
from .patterns import ToolCallPattern

log = get_logger("tagcall.parsing")

TOOL_USE_REASON = "toolUse"
TEXT_BLOCK = "text"
TOOL_CALL_BLOCK = "toolCall"


def has_native_tool_calls(content: Sequence[JsonDict]) -> bool:
    return any(_block_type(b) == TOOL_CALL_BLOCK for b in content)


def transform_done_message(message: JsonDict, patterns: Sequence[ToolCallPattern]) -> bool:
    """Move tagged tool calls out of text blocks into toolCall blocks.

    Synthesized blocks are appended after the existing content in discovery
    order. When anything was extracted, blank text blocks are removed and
    `stopReason` becomes TOOL_USE_REASON.

    Returns:
        True if the message was modified
    """
    content = message.get("content") if isinstance(message, dict) else None
    if not isinstance(content, list) or has_native_tool_calls(content):
        return False

    text_blocks = [b for b in content if _block_type(b) == TEXT_BLOCK]
    ordinal = 0
    modified = False

    for block in text_blocks:
        text = block.get("text")
        if not isinstance(text, str) or not has_tool_call_tags(text, patterns):
            continue

        result = extract_tool_calls(text, patterns)
        if not result:
            continue

        log.info("transformed tool calls from text content", count=len(result.tool_calls))
        block["text"] = result.remaining_text
        for call in result.tool_calls:
            content.append({
                "type": TOOL_CALL_BLOCK,
                "id": generate_tool_call_id(call.name, ordinal),
                "name": call.name,
                "arguments": call.arguments,
            })
            ordinal += 1
        modified = True

    if modified:
        message["content"] = [b for b in content if not _is_blank_text(b)]
        message["stopReason"] = TOOL_USE_REASON
    return modified


def _block_type(block: object) -> object:
    return block.get("type") if isinstance(block, dict) else None


def _is_blank_text(block: object) -> bool:
    if _block_type(block) != TEXT_BLOCK:
        return False
    text = block.get("text")  # type: ignore[union-attr]
    return not isinstance(text, str) or not text.strip()
