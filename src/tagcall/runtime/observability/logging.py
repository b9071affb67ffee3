"""Structured key-value logging for tagcall.

Parsing and health code report what they did as an event name plus fields:

    dropped unparseable tool call  tag="tool_call" payload="{nope"
    provider unhealthy             provider="local" consecutive_failures=2

Loggers are cheap immutable values. Output goes through one process-wide
renderer (console for humans, JSON lines for collectors) and the minimum
level is checked when a line is emitted, so `configure_logging` also applies
to loggers created at import time.

Example:
    >>> from tagcall.runtime.observability import configure_logging, get_logger
    >>> configure_logging(format="json", level="DEBUG")
    >>> log = get_logger("tagcall.parsing").bind(model="qwen2.5")
    >>> log.debug("parsed tool call", tool="web_search")
"""

from __future__ import annotations

import logging
import sys
import time
import traceback
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Literal, Protocol, TextIO, runtime_checkable

import orjson

from tagcall.foundation.errors import JsonDict, JsonValue

if TYPE_CHECKING:
    from types import TracebackType

    from tagcall.foundation.config import LoggingSettings

LogFormat = Literal["console", "json", "none"]

# Fields scoped to the current task via log_context
_scoped: ContextVar[JsonDict] = ContextVar("tagcall_log_scope", default={})


def _parse_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


# ─────────────────────────────────────────────────────────────────────────────
# Entries & Loggers
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(slots=True)
class LogEntry:
    """One emitted line before rendering."""

    timestamp: float
    level: str
    event: str
    context: JsonDict

    def _dt(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp, tz=UTC)

    @property
    def ts_iso(self) -> str:
        return self._dt().isoformat()

    @property
    def ts_human(self) -> str:
        return self._dt().strftime("%H:%M:%S.%f")[:-3]


@dataclass(slots=True)
class BoundLogger:
    """Logger carrying fields that are attached to every entry it emits.

    `bind`/`unbind` return new loggers; the receiver never changes. Field
    precedence on emit: scoped (log_context) < bound < call-site keywords.
    A logger built with an explicit `level` ignores the global level.
    """

    context: JsonDict = field(default_factory=dict)
    level: int | None = None

    def bind(self, **fields: JsonValue) -> BoundLogger:
        return BoundLogger(context=self.context | fields, level=self.level)

    def unbind(self, *keys: str) -> BoundLogger:
        kept = {k: v for k, v in self.context.items() if k not in keys}
        return BoundLogger(context=kept, level=self.level)

    def is_enabled_for(self, level: int) -> bool:
        threshold = _state.level if self.level is None else self.level
        return level >= threshold

    def _emit(self, level: int, event: str, fields: JsonDict) -> None:
        if not self.is_enabled_for(level):
            return
        _state.renderer.render(LogEntry(
            timestamp=time.time(),
            level=logging.getLevelName(level).lower(),
            event=event,
            context=_scoped.get() | self.context | fields,
        ))

    def debug(self, event: str, **fields: JsonValue) -> None:
        self._emit(logging.DEBUG, event, fields)

    def info(self, event: str, **fields: JsonValue) -> None:
        self._emit(logging.INFO, event, fields)

    def warning(self, event: str, **fields: JsonValue) -> None:
        self._emit(logging.WARNING, event, fields)

    def error(self, event: str, **fields: JsonValue) -> None:
        self._emit(logging.ERROR, event, fields)

    def exception(self, event: str, **fields: JsonValue) -> None:
        """Error-level entry with the active traceback under `exc_info`."""
        fields["exc_info"] = traceback.format_exc()
        self._emit(logging.ERROR, event, fields)


# ─────────────────────────────────────────────────────────────────────────────
# Renderers
# ─────────────────────────────────────────────────────────────────────────────


@runtime_checkable
class LogRenderer(Protocol):
    def render(self, entry: LogEntry) -> None: ...


_ANSI = {
    "reset": "\033[0m", "bold": "\033[1m", "dim": "\033[2m",
    "red": "\033[31m", "green": "\033[32m", "yellow": "\033[33m",
    "blue": "\033[34m", "cyan": "\033[36m",
}
_PLAIN = dict.fromkeys(_ANSI, "")
_LEVEL_STYLE = {"debug": "dim", "info": "green", "warning": "yellow", "error": "red", "critical": "red"}


def _style(text: str, style: str, palette: dict[str, str]) -> str:
    return f"{palette[style]}{text}{palette['reset']}"


def _render_field(value: object, palette: dict[str, str]) -> str:
    match value:
        case str():
            return _style(f'"{value}"', "yellow", palette)
        case bool():
            return _style("true" if value else "false", "blue", palette)
        case int() | float():
            return _style(str(value), "blue", palette)
        case dict():
            return _style(f"{{{len(value)} items}}", "dim", palette)
        case list() | tuple():
            return _style(f"[{len(value)} items]", "dim", palette)
        case _:
            return repr(value)


@dataclass(slots=True)
class ConsoleRenderer:
    """`HH:MM:SS.mmm [level] event key=value ...` with sorted keys.

    Colors follow the output's TTY status unless forced with `colors`.
    """

    output: TextIO = field(default_factory=lambda: sys.stderr)
    colors: bool | None = None
    show_timestamp: bool = True

    def __post_init__(self) -> None:
        if self.colors is None:
            isatty = getattr(self.output, "isatty", None)
            self.colors = bool(isatty and isatty())

    def render(self, entry: LogEntry) -> None:
        palette = _ANSI if self.colors else _PLAIN
        head = [_style(entry.ts_human, "dim", palette)] if self.show_timestamp else []
        head.append(_style(f"[{entry.level}]", _LEVEL_STYLE.get(entry.level, "dim"), palette))
        head.append(_style(entry.event, "bold", palette))
        tail = [
            f"{_style(key, 'cyan', palette)}={_render_field(value, palette)}"
            for key, value in sorted(entry.context.items())
            if key != "exc_info"
        ]
        self.output.write(" ".join(head + tail) + "\n")
        if tb := entry.context.get("exc_info"):
            self.output.write(_style(str(tb), "red", palette) + "\n")


@dataclass(slots=True)
class JsonRenderer:
    """One JSON object per line: timestamp, level, event, then the fields."""

    output: TextIO = field(default_factory=lambda: sys.stdout)

    def render(self, entry: LogEntry) -> None:
        record = {"timestamp": entry.ts_iso, "level": entry.level, "event": entry.event, **entry.context}
        line = orjson.dumps(record, default=str, option=orjson.OPT_NON_STR_KEYS | orjson.OPT_APPEND_NEWLINE)
        self.output.write(line.decode())


@dataclass(slots=True)
class NoOpRenderer:
    def render(self, entry: LogEntry) -> None:
        pass


@dataclass(slots=True)
class CaptureRenderer:
    """Keeps entries in memory so callers can assert on what was logged."""

    entries: list[LogEntry] = field(default_factory=list)

    def render(self, entry: LogEntry) -> None:
        self.entries.append(entry)

    def events(self, level: str | None = None) -> list[str]:
        return [e.event for e in self.entries if level in (None, e.level)]

    def clear(self) -> None:
        self.entries.clear()


# ─────────────────────────────────────────────────────────────────────────────
# Process-wide Setup
# ─────────────────────────────────────────────────────────────────────────────


@dataclass(slots=True)
class _LoggingState:
    renderer: LogRenderer = field(default_factory=ConsoleRenderer)
    level: int = logging.INFO


_state = _LoggingState()


def configure_logging(
    format: LogFormat | str = "console",  # noqa: A002
    level: str = "INFO",
    *,
    output: TextIO | None = None,
    colors: bool | None = None,
) -> LogRenderer:
    """Install the renderer for `format` and set the minimum level.

    Console output defaults to stderr, JSON lines to stdout. Unknown level
    names fall back to INFO.

    Raises:
        ValueError: format is not console, json or none
    """
    renderer: LogRenderer
    match format:
        case "console":
            renderer = ConsoleRenderer(output=output or sys.stderr, colors=colors)
        case "json":
            renderer = JsonRenderer(output=output or sys.stdout)
        case "none":
            renderer = NoOpRenderer()
        case _:
            raise ValueError(f"Unknown format: {format!r} (expected console, json or none)")

    _state.renderer = renderer
    _state.level = _parse_level(level)
    return renderer


def configure_from_settings(settings: LoggingSettings | None = None) -> LogRenderer:
    """Apply TAGCALL_LOG_FORMAT / TAGCALL_LOG_LEVEL / TAGCALL_LOG_COLORS."""
    if settings is None:
        from tagcall.foundation.config import get_settings
        settings = get_settings().logging
    return configure_logging(settings.format, settings.level, colors=settings.colors)


def set_renderer(renderer: LogRenderer, level: str | None = None) -> LogRenderer:
    """Swap the active renderer, optionally resetting the level. Returns the old renderer."""
    previous, _state.renderer = _state.renderer, renderer
    if level is not None:
        _state.level = _parse_level(level)
    return previous


def get_logger(name: str | None = None, **fields: JsonValue) -> BoundLogger:
    """Logger with `name` bound as the `logger` field."""
    if name:
        fields["logger"] = name
    return BoundLogger(context=fields)


class log_context:
    """Attach fields to every entry emitted inside the block, on this task only.

    Example:
        >>> with log_context(provider="local"):
        ...     log.warning("provider unhealthy")  # carries provider="local"
    """

    __slots__ = ("_fields", "_token")

    def __init__(self, **fields: JsonValue) -> None:
        self._fields: JsonDict = fields
        self._token: object | None = None

    def __enter__(self) -> log_context:
        self._token = _scoped.set(_scoped.get() | self._fields)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._token is not None:
            _scoped.reset(self._token)  # type: ignore[arg-type]
            self._token = None
