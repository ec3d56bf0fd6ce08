"""Tests for the JSON scanning helpers."""

from __future__ import annotations

import pytest

from idea2app.shared.json_utils import (
    extract_json,
    first_balanced_object,
    iter_json_objects,
    scan_object,
)


class TestScanObject:
    def test_braces_inside_strings_ignored(self) -> None:
        text = '{"a": "}{"} tail'
        assert scan_object(text) == (0, len('{"a": "}{"}'))

    def test_escaped_quote_does_not_end_string(self) -> None:
        text = '{"a": "say \\"}\\" ok"}'
        start, end = scan_object(text)
        assert text[start:end] == text

    def test_truncated_object_runs_to_end(self) -> None:
        text = '{"a": {"b": 1'
        assert scan_object(text) == (0, len(text))

    def test_no_object(self) -> None:
        assert scan_object("no braces here") is None


class TestIterJsonObjects:
    def test_concatenated_objects(self) -> None:
        objs = list(iter_json_objects('{"a":1}{"b":2}\n{"c":3}'))
        assert objs == [{"a": 1}, {"b": 2}, {"c": 3}]

    def test_skips_broken_object_and_recovers(self) -> None:
        text = '{"a":1}{"b": nope}{"c":3}'
        assert list(iter_json_objects(text)) == [{"a": 1}, {"c": 3}]

    def test_truncated_tail_dropped(self) -> None:
        assert list(iter_json_objects('{"a":1}{"b": "unfinish')) == [{"a": 1}]


class TestFirstBalancedObject:
    def test_in_prose(self) -> None:
        assert first_balanced_object('Sure! {"x": [1, 2]} Hope that helps {"y": 1}') == {"x": [1, 2]}

    def test_unparseable(self) -> None:
        assert first_balanced_object("{not json}") is None


class TestExtractJson:
    def test_clean(self) -> None:
        assert extract_json('{"a": 1}') == {"a": 1}

    def test_trailing_text(self) -> None:
        assert extract_json('{"a": 1}\nThat is all.') == {"a": 1}

    def test_fenced(self) -> None:
        assert extract_json('Here:\n```json\n{"a": 2}\n```') == {"a": 2}

    def test_failure_message(self) -> None:
        with pytest.raises(ValueError, match="Could not extract JSON"):
            extract_json("nothing to see")
