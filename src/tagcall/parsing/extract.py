"""Find tagged tool calls in free text.

Extraction is best effort: a tag whose body is not a recognizable tool call
is logged and skipped, never raised.

Stripping rule: once any tool call has been extracted from the text, every
match of the pattern just processed is removed from the remaining text,
including matches that failed to parse. A malformed `<tool_call>` next to a
well-formed one therefore disappears from the visible text.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from tagcall.runtime.observability import get_logger

from .patterns import ToolCallPattern
from .payload import ParsedToolCall, parse_tool_call_json

log = get_logger("tagcall.parsing")

# Longest payload excerpt included in a warning
_EXCERPT_CHARS = 100


@dataclass(slots=True)
class ExtractionResult:
    """Tool calls found in a text plus the text left once their tags are stripped."""
    tool_calls: list[ParsedToolCall] = field(default_factory=list)
    remaining_text: str = ""

    def __bool__(self) -> bool:
        return bool(self.tool_calls)


def has_tool_call_tags(text: str, patterns: Sequence[ToolCallPattern]) -> bool:
    """Cheap check for any opening tag literal."""
    return any(p.open_tag in text for p in patterns)


def extract_tool_calls(text: str, patterns: Sequence[ToolCallPattern]) -> ExtractionResult:
    """Extract tool calls for every pattern, in pattern order then text order."""
    tool_calls: list[ParsedToolCall] = []
    remaining = text

    for pattern in patterns:
        regex = pattern.regex
        for match in regex.finditer(text):
            body = match.group(1).strip()
            parsed = parse_tool_call_json(body)
            if parsed is None:
                log.warning("dropped unparseable tool call", tag=pattern.tag, payload=body[:_EXCERPT_CHARS])
                continue
            tool_calls.append(parsed)
            log.debug("parsed tool call", tag=pattern.tag, tool=parsed.name)

        if tool_calls:
            remaining = regex.sub("", remaining).strip()

    return ExtractionResult(tool_calls=tool_calls, remaining_text=remaining)
