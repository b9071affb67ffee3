"""Shared JSON type aliases.

Events, messages and content blocks arrive as plain decoded JSON, so the
parser works on these aliases rather than on models it does not own.
"""

from __future__ import annotations

from typing import Any, Union

# Any for recursive slots, avoids Pydantic resolution issues
JsonPrimitive = Union[str, int, float, bool, None]
JsonValue = Union[JsonPrimitive, list[Any], dict[str, Any]]
JsonDict = dict[str, Any]
