"""Duplicate removal for chat message lists.

Both strategies keep the first occurrence and preserve order.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from idea2app.schemas.chat import ChatMessage

DUPLICATE_WINDOW = timedelta(seconds=5)


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps are taken to be UTC.
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


def dedupe_by_id(messages: list[ChatMessage]) -> list[ChatMessage]:
    seen: set[str] = set()
    out: list[ChatMessage] = []
    for message in messages:
        if message.id in seen:
            continue
        seen.add(message.id)
        out.append(message)
    return out


def dedupe_fuzzy(
    messages: list[ChatMessage], window: timedelta = DUPLICATE_WINDOW
) -> list[ChatMessage]:
    """Drop repeats of the same role and trimmed content within ``window``.

    The window is measured from the last sighting of the same key, dropped
    repeats included, so a burst of retries collapses to one message.
    Messages without a timestamp are never treated as duplicates.
    """
    last_seen: dict[tuple[str, str], datetime] = {}
    out: list[ChatMessage] = []
    for message in messages:
        key = (message.role.value, message.content.strip())
        previous = last_seen.get(key)
        current = _as_utc(message.created_at) if message.created_at else None
        duplicate = (
            previous is not None and current is not None
            and abs(current - previous) <= window
        )
        if not duplicate:
            out.append(message)
        if current is not None:
            last_seen[key] = current
    return out


def merge_messages(existing: list[ChatMessage], incoming: list[ChatMessage]) -> list[ChatMessage]:
    """Append ``incoming`` to ``existing``; entries already present by id are dropped."""
    return dedupe_by_id([*existing, *incoming])
