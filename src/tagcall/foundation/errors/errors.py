"""Standardized error handling for tagcall.

Provides error codes and a structured error record for configuration and
probe failures. Parsing failures inside a model response are not errors:
they are logged and the offending match is skipped.
"""

from __future__ import annotations

from enum import StrEnum
from functools import lru_cache
from typing import Annotated, Self

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


class ErrorCode(StrEnum):
    """Standard error codes.

    Used for programmatic handling and for the error strings stored on
    health status records.
    """
    INVALID_PATTERN = "INVALID_PATTERN"
    INVALID_CONFIG = "INVALID_CONFIG"
    PARSE_ERROR = "PARSE_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    UNKNOWN = "UNKNOWN"


# Checked in order against "<ExcType> <message>", lowercased
_HINTS: tuple[tuple[str, ErrorCode], ...] = (
    ("timeout", ErrorCode.TIMEOUT),
    ("timed out", ErrorCode.TIMEOUT),
    ("connect", ErrorCode.NETWORK_ERROR),
    ("network", ErrorCode.NETWORK_ERROR),
    ("transport", ErrorCode.NETWORK_ERROR),
    ("json", ErrorCode.PARSE_ERROR),
    ("decode", ErrorCode.PARSE_ERROR),
    ("validation", ErrorCode.INVALID_CONFIG),
)


@lru_cache(maxsize=512)
def _code_for(summary: str) -> ErrorCode:
    lowered = summary.lower()
    return next((code for hint, code in _HINTS if hint in lowered), ErrorCode.UNKNOWN)


def classify_exception(exc: BaseException) -> ErrorCode:
    """Best-effort ErrorCode for an exception, from its type name and message."""
    return _code_for(f"{type(exc).__name__} {exc}")


class TagcallError(BaseModel):
    """Structured error record.

    Attributes:
        source: Component that produced the error (e.g. "patterns", "health")
        message: What went wrong, for humans
        code: Machine-readable error code
        details: Optional extra information
    """

    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        validate_default=True,
        json_schema_extra={
            "title": "Tagcall Error",
            "examples": [{
                "source": "patterns",
                "message": "tag must not be empty",
                "code": "INVALID_PATTERN",
            }],
        },
    )

    source: Annotated[str, Field(min_length=1)]
    message: Annotated[str, Field(min_length=1)]
    code: ErrorCode = ErrorCode.UNKNOWN
    details: str | None = Field(default=None, repr=False)

    @field_validator("message", mode="before")
    @classmethod
    def _coerce_message(cls, value: object) -> object:
        """Allow passing the exception itself as the message."""
        return str(value) if isinstance(value, BaseException) else value

    @computed_field
    @property
    def is_retryable(self) -> bool:
        return self.code in _RETRYABLE_CODES

    @classmethod
    def from_exception(cls, source: str, exc: BaseException, context: str = "") -> Self:
        """Record for a caught exception, classified by classify_exception."""
        return cls(
            source=source,
            message=f"{context}: {exc}" if context else (str(exc) or type(exc).__name__),
            code=classify_exception(exc),
        )

    def render(self) -> str:
        return f"[{self.code}] {self.source}: {self.message}"

    __str__ = render


_RETRYABLE_CODES: frozenset[ErrorCode] = frozenset({ErrorCode.TIMEOUT, ErrorCode.NETWORK_ERROR})


class TagcallException(Exception):
    """Exception wrapping a TagcallError for raising."""

    __slots__ = ("error",)

    def __init__(self, error: TagcallError) -> None:
        self.error = error
        super().__init__(error.message)

    @property
    def code(self) -> ErrorCode:
        return self.error.code

    @classmethod
    def create(cls, source: str, message: str, code: ErrorCode = ErrorCode.UNKNOWN) -> Self:
        return cls(TagcallError(source=source, message=message, code=code))
