"""Normalize the JSON body of a tag into a tool call.

Two payload schemas are accepted:

    {"name": "web_search", "arguments": {"query": "test"}}   # name/arguments
    {"tool": "bash", "command": "ls -la"}                     # flat legacy

Anything else, including invalid JSON, yields None.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import orjson

from tagcall.foundation.errors import JsonDict

# Keys that carry the tool name in the flat schema, in lookup order
_LEGACY_NAME_KEYS = ("tool", "action")
_LEGACY_DROP_KEYS = frozenset({"tool", "action", "name"})


@dataclass(slots=True, frozen=True)
class ParsedToolCall:
    """Canonical tool call extracted from text.

    Attributes:
        name: Tool name, never empty
        arguments: Tool arguments, possibly empty
    """
    name: str
    arguments: JsonDict = field(default_factory=dict)

    def to_dict(self) -> JsonDict:
        return {"name": self.name, "arguments": self.arguments}


def parse_tool_call_json(text: str) -> ParsedToolCall | None:
    """Parse one JSON object into a ParsedToolCall, or None if it is not one."""
    try:
        obj = orjson.loads(text)
    except orjson.JSONDecodeError:
        return None
    if not isinstance(obj, dict):
        return None

    name = obj.get("name")
    if isinstance(name, str) and "arguments" in obj:
        if not name:
            return None
        args = obj["arguments"]
        return ParsedToolCall(name=name, arguments=args if isinstance(args, dict) else {})

    # First non-null key wins, and it must hold a string
    tool_name = next((obj[k] for k in _LEGACY_NAME_KEYS if obj.get(k) is not None), None)
    if isinstance(tool_name, str) and tool_name:
        return ParsedToolCall(
            name=tool_name,
            arguments={k: v for k, v in obj.items() if k not in _LEGACY_DROP_KEYS},
        )
    return None
