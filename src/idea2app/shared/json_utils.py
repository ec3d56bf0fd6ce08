"""Helpers for pulling JSON objects out of model text.

Models wrap JSON in prose, code fences, or emit several objects back to back
with no delimiter.  The scanner here walks braces while respecting string
quoting and backslash escapes, so a ``}`` inside a string value never closes
an object early.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Iterator

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?```", re.DOTALL)


def scan_object(text: str, pos: int = 0) -> tuple[int, int] | None:
    """Locate the next top-level ``{...}`` span at or after ``pos``.

    Returns ``(start, end)`` with ``end`` exclusive.  If the object is never
    closed (truncated stream) ``end`` is ``len(text)``.  Returns None when no
    ``{`` remains.
    """
    start = text.find("{", pos)
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return start, i + 1
    return start, len(text)


def iter_json_objects(text: str) -> Iterator[dict[str, Any]]:
    """Yield every parseable JSON object from concatenated object text.

    A span that fails to parse (truncated, unterminated string, garbage) is
    logged and skipped; scanning resumes at the next ``{`` after the start of
    the bad span so valid objects that follow are still recovered.
    """
    pos = 0
    while True:
        span = scan_object(text, pos)
        if span is None:
            return
        start, end = span
        fragment = text[start:end]
        try:
            obj = json.loads(fragment)
        except json.JSONDecodeError as exc:
            logger.debug(
                "Skipping unparseable JSON fragment at offset %d (%s): %r",
                start, exc.msg, fragment[:120],
            )
            pos = start + 1
            continue
        if isinstance(obj, dict):
            yield obj
        pos = end


def first_balanced_object(text: str) -> dict[str, Any] | None:
    """Parse the first balanced ``{...}`` span in ``text``.

    Returns None when there is no span or it does not parse.  Unlike
    :func:`iter_json_objects` this does not look past a bad first span.
    """
    span = scan_object(text)
    if span is None:
        return None
    try:
        obj = json.loads(text[span[0]:span[1]])
    except json.JSONDecodeError:
        return None
    return obj if isinstance(obj, dict) else None


def extract_json(text: str) -> dict[str, Any]:
    """Extract a JSON object from text that may contain markdown fences."""
    text = text.strip()

    # 1. Clean JSON response
    if text.startswith("{"):
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            # Might have trailing text
            obj = first_balanced_object(text)
            if obj is not None:
                return obj

    # 2. ```json ... ``` or ``` ... ``` fenced blocks
    match = _FENCE_RE.search(text)
    if match:
        return json.loads(match.group(1).strip())

    # 3. First balanced object anywhere in the prose
    obj = first_balanced_object(text)
    if obj is not None:
        return obj

    raise ValueError(
        f"Could not extract JSON from model response (length={len(text)}). "
        f"First 300 chars: {text[:300]!r}"
    )
