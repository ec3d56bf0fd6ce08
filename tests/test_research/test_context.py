"""Tests for research context assembly."""

from __future__ import annotations

from idea2app.research.context import (
    BLOCK_SEPARATOR,
    NO_COMPETITOR_DATA,
    build_context,
)
from idea2app.schemas.research import Competitor, ExtractedPage


def _competitor(name: str, url: str) -> Competitor:
    return Competitor(
        name=name, description=f"{name} description", why_competes=f"{name} overlaps", url=url,
    )


class TestBuildContext:
    def test_no_competitors_gives_sentinel(self) -> None:
        assert build_context([], []) == NO_COMPETITOR_DATA
        assert build_context([], [ExtractedPage(url="https://a.com", content="x")]) == NO_COMPETITOR_DATA

    def test_one_block_per_competitor_in_order(self) -> None:
        competitors = [_competitor("A", "https://a.com"), _competitor("B", "https://b.com")]
        context = build_context(competitors, [])

        blocks = context.split(BLOCK_SEPARATOR)
        assert len(blocks) == 2
        assert blocks[0].startswith("## A\nDescription: A description\nWhy they compete: A overlaps")
        assert blocks[1].startswith("## B\n")

    def test_excerpt_truncated_to_1500_chars(self) -> None:
        content = "x" * 1500 + "TAIL"
        context = build_context(
            [_competitor("A", "https://a.com")],
            [ExtractedPage(url="https://a.com", content=content)],
        )
        assert "URL Content (from https://a.com):\n" + "x" * 1500 in context
        assert "TAIL" not in context

    def test_missing_page_marked_unavailable(self) -> None:
        context = build_context(
            [_competitor("A", "https://a.com"), _competitor("B", "https://b.com")],
            [ExtractedPage(url="https://a.com", content="Walk your dog")],
        )
        a_block, b_block = context.split(BLOCK_SEPARATOR)
        assert "Walk your dog" in a_block
        assert "URL: https://b.com (content extraction not available)" in b_block

    def test_url_match_is_exact(self) -> None:
        context = build_context(
            [_competitor("A", "http://a.com")],
            [ExtractedPage(url="http://a.com/", content="trailing slash page")],
        )
        assert "trailing slash page" not in context
        assert "content extraction not available" in context

    def test_first_page_for_url_wins(self) -> None:
        context = build_context(
            [_competitor("A", "https://a.com")],
            [
                ExtractedPage(url="https://a.com", content="first"),
                ExtractedPage(url="https://a.com", content="second"),
            ],
        )
        assert "first" in context
        assert "second" not in context
