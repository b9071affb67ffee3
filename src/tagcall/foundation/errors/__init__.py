"""Error handling for tagcall.

- ErrorCode: Standard error codes
- TagcallError/TagcallException: Structured errors and exceptions
- JsonDict/JsonValue: JSON type aliases shared across the package
"""

from .errors import ErrorCode, TagcallError, TagcallException, classify_exception
from .types import JsonDict, JsonPrimitive, JsonValue

__all__ = [
    "ErrorCode", "TagcallError", "TagcallException", "classify_exception",
    "JsonDict", "JsonPrimitive", "JsonValue",
]
