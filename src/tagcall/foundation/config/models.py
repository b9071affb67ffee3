"""Per-model and per-provider configuration.

Both models accept the camelCase keys used in JSON config files as well as
snake_case field names.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PositiveFloat, SecretStr, field_validator
from pydantic.alias_generators import to_camel

from tagcall.parsing.patterns import ToolCallPattern


class ModelCompatConfig(BaseModel):
    """Compatibility switches for a model that emits non-standard tool calls.

    Example:
        >>> ModelCompatConfig.model_validate({"toolCallPatterns": [{"tag": "my_tool"}]})
        ModelCompatConfig(tool_call_patterns=[ToolCallPattern(tag='my_tool', format=None)])
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    # None = built-in defaults, [] = extraction disabled
    tool_call_patterns: list[ToolCallPattern] | None = Field(
        default=None,
        description="Tags to scan for tool calls, applied in order",
    )


class HealthCheckConfig(BaseModel):
    """Health probe settings for one provider."""

    model_config = ConfigDict(frozen=True, extra="ignore", alias_generator=to_camel, populate_by_name=True)

    enabled: bool = True
    endpoint: str | None = Field(default=None, description="Path to probe, defaults to /health")
    interval_seconds: PositiveFloat | None = None


class ProviderConfig(BaseModel):
    """Inference provider endpoint."""

    model_config = ConfigDict(frozen=True, extra="ignore", alias_generator=to_camel, populate_by_name=True)

    base_url: Annotated[str, Field(min_length=1)]
    api_key: SecretStr | None = None
    health_check: HealthCheckConfig | None = None

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")
