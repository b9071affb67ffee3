"""Tag patterns used to find tool calls embedded in model text.

A pattern names an XML-like element (`<tool_call>...</tool_call>`) whose
body holds one JSON tool invocation. Patterns are applied in the order they
are given and are frozen once resolved.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from enum import StrEnum
from functools import lru_cache
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from tagcall.foundation.errors import ErrorCode, TagcallException


@lru_cache(maxsize=128)
def _compile_tag(tag: str) -> re.Pattern[str]:
    # Tag is literal text, never a regex
    return re.compile(f"<{re.escape(tag)}>(.*?)</{re.escape(tag)}>", re.DOTALL)


class PatternFormat(StrEnum):
    """Payload format hint for a tag. Informational; both schemas are always accepted."""
    JSON = "json"
    NAME_ARGUMENTS = "name-arguments"


class ToolCallPattern(BaseModel):
    """One extraction rule: a literal tag name plus an optional format hint.

    Surrounding whitespace in `tag` is stripped; inner characters are kept
    and matched literally.
    """

    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        extra="forbid",
    )

    tag: Annotated[str, Field(min_length=1, description="Element name, matched literally")]
    format: PatternFormat | None = None

    @property
    def open_tag(self) -> str:
        return f"<{self.tag}>"

    @property
    def close_tag(self) -> str:
        return f"</{self.tag}>"

    @property
    def regex(self) -> re.Pattern[str]:
        """Non-greedy match over `<tag>...</tag>`, spanning newlines."""
        return _compile_tag(self.tag)

    def __str__(self) -> str:
        return self.open_tag


PatternSpec = ToolCallPattern | Mapping[str, object]

DEFAULT_TOOL_CALL_PATTERNS: tuple[ToolCallPattern, ...] = (
    ToolCallPattern(tag="tool_call", format=PatternFormat.NAME_ARGUMENTS),
    ToolCallPattern(tag="tools", format=PatternFormat.NAME_ARGUMENTS),
)


def resolve_patterns(configured: Iterable[PatternSpec] | None) -> tuple[ToolCallPattern, ...]:
    """Resolve the effective pattern list.

    None means "not configured" and yields the defaults. An explicit empty
    iterable yields an empty tuple, which callers treat as "disabled".

    Raises:
        TagcallException: INVALID_PATTERN if an entry fails validation
    """
    if configured is None:
        return DEFAULT_TOOL_CALL_PATTERNS

    resolved: list[ToolCallPattern] = []
    for i, spec in enumerate(configured):
        if isinstance(spec, ToolCallPattern):
            resolved.append(spec)
            continue
        try:
            resolved.append(ToolCallPattern.model_validate(spec))
        except ValidationError as e:
            raise TagcallException.create(
                "patterns", f"invalid tool call pattern at index {i}: {e.errors()[0]['msg']}",
                ErrorCode.INVALID_PATTERN,
            ) from e
    return tuple(resolved)
