"""Tests for legacy ASCII-art mockup sectioning."""

from __future__ import annotations

from idea2app.mockups.legacy import is_ascii_art_line, parse_legacy_sections


class TestIsAsciiArtLine:
    def test_box_drawing(self) -> None:
        assert is_ascii_art_line("  ┌────┐")

    def test_plus_border_and_pipes(self) -> None:
        assert is_ascii_art_line("+----+----+")
        assert is_ascii_art_line("| Logo |  Menu |")

    def test_plain_text(self) -> None:
        assert not is_ascii_art_line("Just words")
        assert not is_ascii_art_line("   ")


class TestParseLegacySections:
    def test_label_between_art_stays_in_block(self) -> None:
        content = "\n".join([
            "## Home",
            "Intro text",
            "┌──────┐",
            "│ Nav  │",
            "└──────┘",
            "Hero",
            "┌──────┐",
            "└──────┘",
            "Closing text",
        ])
        sections = parse_legacy_sections(content)

        assert [s.type for s in sections] == ["header", "text", "code", "text"]
        assert sections[0].level == 2
        assert sections[2].content.splitlines()[3] == "Hero"
        assert sections[3].content == "Closing text"

    def test_long_blank_gap_splits_blocks(self) -> None:
        content = "┌─┐\n\n\n\n\n└─┘"
        sections = parse_legacy_sections(content)
        assert [s.type for s in sections] == ["code", "code"]

    def test_heading_ends_art_lookahead(self) -> None:
        content = "┌─┐\n\n# Next\n┌─┐"
        sections = parse_legacy_sections(content)
        assert [s.type for s in sections] == ["code", "header", "code"]

    def test_fenced_block_is_code(self) -> None:
        sections = parse_legacy_sections("Before\n```\nraw layout\n```\nAfter")
        assert [(s.type, s.content) for s in sections] == [
            ("text", "Before"), ("code", "raw layout"), ("text", "After"),
        ]
