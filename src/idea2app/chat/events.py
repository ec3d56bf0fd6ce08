"""Newline-delimited JSON framing for streamed chat turns."""

from __future__ import annotations

import logging
from typing import AsyncIterable, AsyncIterator, Iterable

from pydantic import TypeAdapter, ValidationError

from idea2app.schemas.chat import (
    ChatStreamEvent,
    DoneEvent,
    ErrorEvent,
    StartEvent,
    StreamOutcome,
    TokenEvent,
)

logger = logging.getLogger(__name__)

_event_adapter: TypeAdapter[ChatStreamEvent] = TypeAdapter(ChatStreamEvent)


def encode_event(event: ChatStreamEvent) -> str:
    """One NDJSON line, newline included."""
    return event.model_dump_json() + "\n"


def decode_event(line: str) -> ChatStreamEvent | None:
    line = line.strip()
    if not line:
        return None
    try:
        return _event_adapter.validate_json(line)
    except ValidationError as exc:
        logger.warning("Ignoring malformed stream event %r: %s", line[:120], exc)
        return None


async def decode_events(lines: AsyncIterable[str]) -> AsyncIterator[ChatStreamEvent]:
    """Typed events from an async source of NDJSON text.

    Chunks may split or join lines arbitrarily; a trailing partial line is
    decoded once the source is exhausted.
    """
    buffer = ""
    async for chunk in lines:
        buffer += chunk
        while "\n" in buffer:
            line, buffer = buffer.split("\n", 1)
            event = decode_event(line)
            if event is not None:
                yield event
    event = decode_event(buffer)
    if event is not None:
        yield event


def apply_event(outcome: StreamOutcome, event: ChatStreamEvent) -> StreamOutcome:
    """Fold one event into the running outcome."""
    match event:
        case StartEvent():
            outcome.user_message = event.user_message
        case TokenEvent():
            outcome.content += event.content
        case DoneEvent():
            outcome.finished = True
            outcome.user_message = event.user_message
            outcome.assistant_message = event.assistant_message
            outcome.status = event.stage
            outcome.summary = event.summary
            # The persisted message is authoritative over the token buffer.
            outcome.content = event.assistant_message.content
        case ErrorEvent():
            outcome.finished = True
            outcome.error = event.error
    return outcome


async def collect_stream(events: AsyncIterable[ChatStreamEvent]) -> StreamOutcome:
    """Consume a stream in one pass, stopping at the first ``done`` or ``error``.

    Stopping early abandons the producer; it is not notified.
    """
    outcome = StreamOutcome()
    async for event in events:
        apply_event(outcome, event)
        if outcome.finished:
            break
    return outcome


def collect_events(events: Iterable[ChatStreamEvent]) -> StreamOutcome:
    """Synchronous counterpart of :func:`collect_stream` for already-buffered events."""
    outcome = StreamOutcome()
    for event in events:
        apply_event(outcome, event)
        if outcome.finished:
            break
    return outcome
