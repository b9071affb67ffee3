"""Tests for the stream interceptor."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

import pytest

from tagcall.io.streaming import CancellableSource, ThrowableSource, ToolCallStream, wrap_stream
from tagcall.parsing import DEFAULT_TOOL_CALL_PATTERNS, TOOL_USE_REASON


# ─────────────────────────────────────────────────────────────────────────────
# Test Fixtures: Event Producers
# ─────────────────────────────────────────────────────────────────────────────


def done_event(text: str, reason: str = "stop") -> dict[str, object]:
    return {
        "type": "done",
        "reason": reason,
        "message": {"content": [{"type": "text", "text": text}], "stopReason": reason},
    }


class PlainIterator:
    """Bare async iterator: no aclose, no athrow."""

    def __init__(self, events: list[dict[str, object]]) -> None:
        self._events = list(events)
        self.pulls = 0

    def __aiter__(self) -> PlainIterator:
        return self

    async def __anext__(self) -> dict[str, object]:
        self.pulls += 1
        if not self._events:
            raise StopAsyncIteration
        return self._events.pop(0)


class EventChannel:
    """Producer with extra public methods alongside the iteration protocol."""

    def __init__(self, events: list[dict[str, object]]) -> None:
        self.events = events
        self.ended = False

    def end(self) -> None:
        self.ended = True

    async def __aiter__(self) -> AsyncIterator[dict[str, object]]:
        for event in self.events:
            yield event


async def generator(events: list[dict[str, object]], log: list[str]) -> AsyncIterator[dict[str, object]]:
    try:
        for event in events:
            try:
                yield event
            except ValueError as e:
                log.append(f"caught {e}")
                yield done_event('<tool_call>{"name": "recover", "arguments": {}}</tool_call>')
    finally:
        log.append("closed")


async def collect(stream: AsyncIterator[object]) -> list[object]:
    return [event async for event in stream]


# ─────────────────────────────────────────────────────────────────────────────
# Relay
# ─────────────────────────────────────────────────────────────────────────────


class TestRelay:
    """Events pass through in order; only done messages change."""

    @pytest.mark.asyncio
    async def test_non_done_events_are_same_objects(self) -> None:
        delta = {"type": "text_delta", "contentIndex": 0, "delta": "<tool_call>"}
        start = {"type": "start", "partial": {}}
        stream = wrap_stream(PlainIterator([start, delta]), DEFAULT_TOOL_CALL_PATTERNS)

        collected = await collect(stream)

        assert collected[0] is start
        assert collected[1] is delta
        assert delta == {"type": "text_delta", "contentIndex": 0, "delta": "<tool_call>"}

    @pytest.mark.asyncio
    async def test_done_without_tags_untouched(self) -> None:
        events = [{"type": "start"}, done_event("Hello world")]
        collected = await collect(wrap_stream(PlainIterator(events), DEFAULT_TOOL_CALL_PATTERNS))

        assert len(collected) == 2
        assert collected[1] == done_event("Hello world")

    @pytest.mark.asyncio
    async def test_done_with_tags_rewritten(self) -> None:
        text = 'I will search.\n<tool_call>{"name": "web_search", "arguments": {"query": "test"}}</tool_call>'
        collected = await collect(wrap_stream(PlainIterator([done_event(text)]), DEFAULT_TOOL_CALL_PATTERNS))

        done = collected[0]
        assert done["reason"] == TOOL_USE_REASON
        assert done["message"]["stopReason"] == TOOL_USE_REASON
        assert [b["type"] for b in done["message"]["content"]] == ["text", "toolCall"]

    @pytest.mark.asyncio
    async def test_done_without_message_relayed(self) -> None:
        event = {"type": "done", "reason": "stop"}
        collected = await collect(wrap_stream(PlainIterator([event]), DEFAULT_TOOL_CALL_PATTERNS))
        assert collected == [{"type": "done", "reason": "stop"}]

    @pytest.mark.asyncio
    async def test_non_dict_events_relayed(self) -> None:
        sentinel = object()
        collected = await collect(wrap_stream(PlainIterator([sentinel, "raw"]), DEFAULT_TOOL_CALL_PATTERNS))  # type: ignore[list-item]
        assert collected == [sentinel, "raw"]

    @pytest.mark.asyncio
    async def test_exhausted_stream_stays_exhausted(self) -> None:
        source = PlainIterator([])
        stream = wrap_stream(source, DEFAULT_TOOL_CALL_PATTERNS)

        with pytest.raises(StopAsyncIteration):
            await anext(stream)
        with pytest.raises(StopAsyncIteration):
            await anext(stream)

        assert stream.exhausted
        assert source.pulls == 1


# ─────────────────────────────────────────────────────────────────────────────
# Errors & Cancellation
# ─────────────────────────────────────────────────────────────────────────────


class TestControl:
    """aclose/athrow forwarding and error propagation."""

    @pytest.mark.asyncio
    async def test_source_error_propagates(self) -> None:
        async def failing() -> AsyncIterator[dict[str, object]]:
            yield {"type": "start"}
            raise ConnectionError("socket closed")

        stream = wrap_stream(failing(), DEFAULT_TOOL_CALL_PATTERNS)
        assert await anext(stream) == {"type": "start"}
        with pytest.raises(ConnectionError, match="socket closed"):
            await anext(stream)

    @pytest.mark.asyncio
    async def test_aclose_forwards_to_generator(self) -> None:
        log: list[str] = []
        stream = wrap_stream(generator([{"type": "start"}, done_event("x")], log), DEFAULT_TOOL_CALL_PATTERNS)
        assert isinstance(stream._source, CancellableSource)

        await anext(stream)
        await stream.aclose()

        assert log == ["closed"]
        assert stream.exhausted
        with pytest.raises(StopAsyncIteration):
            await anext(stream)

    @pytest.mark.asyncio
    async def test_aclose_without_hook_marks_exhausted(self) -> None:
        source = PlainIterator([{"type": "start"}, {"type": "end"}])
        stream = wrap_stream(source, DEFAULT_TOOL_CALL_PATTERNS)
        assert not isinstance(source, CancellableSource)

        await anext(stream)
        await stream.aclose()

        with pytest.raises(StopAsyncIteration):
            await anext(stream)
        assert source.pulls == 1

    @pytest.mark.asyncio
    async def test_athrow_forwards_and_intercepts_yielded_event(self) -> None:
        log: list[str] = []
        stream = wrap_stream(generator([{"type": "start"}], log), DEFAULT_TOOL_CALL_PATTERNS)

        await anext(stream)
        event = await stream.athrow(ValueError("retry"))

        assert log == ["caught retry"]
        assert event["reason"] == TOOL_USE_REASON
        assert event["message"]["content"][0]["name"] == "recover"
        await stream.aclose()

    @pytest.mark.asyncio
    async def test_athrow_without_hook_reraises(self) -> None:
        source = PlainIterator([{"type": "start"}])
        stream = wrap_stream(source, DEFAULT_TOOL_CALL_PATTERNS)
        assert not isinstance(source, ThrowableSource)

        with pytest.raises(KeyError):
            await stream.athrow(KeyError("boom"))

    @pytest.mark.asyncio
    async def test_athrow_unhandled_propagates(self) -> None:
        log: list[str] = []
        stream = wrap_stream(generator([{"type": "start"}], log), DEFAULT_TOOL_CALL_PATTERNS)
        await anext(stream)

        with pytest.raises(RuntimeError, match="fatal"):
            await stream.athrow(RuntimeError("fatal"))
        assert log == ["closed"]

    @pytest.mark.asyncio
    async def test_cancellation_not_swallowed(self) -> None:
        started = asyncio.Event()

        async def slow() -> AsyncIterator[dict[str, object]]:
            started.set()
            await asyncio.sleep(10)
            yield {"type": "start"}

        stream = wrap_stream(slow(), DEFAULT_TOOL_CALL_PATTERNS)
        task = asyncio.create_task(collect(stream))
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task


# ─────────────────────────────────────────────────────────────────────────────
# Wrapper Surface
# ─────────────────────────────────────────────────────────────────────────────


class TestSurface:
    @pytest.mark.asyncio
    async def test_producer_methods_delegated(self) -> None:
        channel = EventChannel([{"type": "start"}])
        stream = wrap_stream(channel, DEFAULT_TOOL_CALL_PATTERNS)

        stream.end()  # type: ignore[attr-defined]

        assert channel.ended
        assert stream.events is channel.events  # type: ignore[attr-defined]
        assert await collect(stream) == [{"type": "start"}]

    def test_missing_attribute_raises(self) -> None:
        stream = wrap_stream(PlainIterator([]), DEFAULT_TOOL_CALL_PATTERNS)
        with pytest.raises(AttributeError):
            stream.does_not_exist  # type: ignore[attr-defined]  # noqa: B018
        with pytest.raises(AttributeError):
            stream._private  # type: ignore[attr-defined]  # noqa: B018

    def test_patterns_frozen_at_construction(self) -> None:
        patterns = list(DEFAULT_TOOL_CALL_PATTERNS)
        stream = ToolCallStream(PlainIterator([]), patterns)
        patterns.clear()
        assert stream.patterns == DEFAULT_TOOL_CALL_PATTERNS
        assert "tool_call" in repr(stream)
