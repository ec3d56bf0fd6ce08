"""Tests for NDJSON chat stream framing and client-side folding."""

from __future__ import annotations

import pytest

from idea2app.chat.events import (
    collect_events,
    collect_stream,
    decode_event,
    decode_events,
    encode_event,
)
from idea2app.schemas.chat import (
    ChatMessage,
    ChatRole,
    ConversationStatus,
    DoneEvent,
    ErrorEvent,
    StartEvent,
    TokenEvent,
)

USER = ChatMessage(id="u1", project_id="p", role=ChatRole.USER, content="Dog walking app")
ASSISTANT = ChatMessage(id="a1", project_id="p", role=ChatRole.ASSISTANT, content="Hello there")


async def _chunks(*parts: str):
    for part in parts:
        yield part


async def _events(*events):
    for event in events:
        yield event


class TestFraming:
    def test_encode_is_one_line(self) -> None:
        line = encode_event(TokenEvent(content="a\nb"))
        assert line.endswith("\n")
        assert line.count("\n") == 1

    def test_decode_round_trips_type(self) -> None:
        event = decode_event(encode_event(StartEvent(user_message=USER)))
        assert isinstance(event, StartEvent)
        assert event.user_message.id == "u1"

    def test_decode_ignores_blank_and_garbage(self) -> None:
        assert decode_event("   ") is None
        assert decode_event('{"type": "nope"}') is None
        assert decode_event("not json") is None

    @pytest.mark.asyncio
    async def test_decode_events_handles_split_chunks(self) -> None:
        text = encode_event(TokenEvent(content="Hel")) + encode_event(TokenEvent(content="lo"))
        cut = len(text) // 2 + 3
        events = [e async for e in decode_events(_chunks(text[:cut], text[cut:]))]
        assert [e.content for e in events] == ["Hel", "lo"]

    @pytest.mark.asyncio
    async def test_trailing_line_without_newline(self) -> None:
        text = encode_event(TokenEvent(content="x")).rstrip("\n")
        events = [e async for e in decode_events(_chunks(text))]
        assert len(events) == 1


class TestCollect:
    @pytest.mark.asyncio
    async def test_done_sets_final_content(self) -> None:
        outcome = await collect_stream(_events(
            StartEvent(user_message=USER),
            TokenEvent(content="Hello "),
            TokenEvent(content="the"),
            DoneEvent(user_message=USER, assistant_message=ASSISTANT,
                      stage=ConversationStatus.REFINING),
        ))
        assert outcome.finished
        assert outcome.content == "Hello there"
        assert outcome.status is ConversationStatus.REFINING
        assert outcome.error is None

    @pytest.mark.asyncio
    async def test_stops_at_error(self) -> None:
        outcome = await collect_stream(_events(
            StartEvent(user_message=USER),
            TokenEvent(content="partial"),
            ErrorEvent(error="model failed", kind="ai_model_error"),
            TokenEvent(content="ignored"),
        ))
        assert outcome.error == "model failed"
        assert outcome.content == "partial"
        assert outcome.user_message.id == "u1"

    def test_sync_collect(self) -> None:
        outcome = collect_events([TokenEvent(content="a"), TokenEvent(content="b")])
        assert outcome.content == "ab"
        assert not outcome.finished
