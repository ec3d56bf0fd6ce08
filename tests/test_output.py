"""Tests for Markdown mockup rendering."""

from __future__ import annotations

from idea2app.output.markdown import (
    PLACEHOLDER,
    render_legacy_sections,
    render_mockup_outline,
)
from idea2app.schemas.mockup import LegacySection, MockupPage, UISpecTree


def _make_page() -> MockupPage:
    """Build a sample page with a known, an unknown and a missing element."""
    return MockupPage(
        title="Home",
        description="Landing page",
        spec=UISpecTree.model_validate({
            "root": "page",
            "elements": {
                "page": {"type": "Stack", "props": {"direction": "vertical"},
                         "children": ["title", "carousel", "ghost"]},
                "title": {"type": "Heading", "props": {"text": "Find a walker"}},
                "carousel": {"type": "Carousel", "props": {}},
            },
        }),
    )


class TestRenderMockupOutline:
    def test_structure(self) -> None:
        md = render_mockup_outline([_make_page()])
        lines = md.splitlines()

        assert lines[0] == "## Home"
        assert "*Landing page*" in md
        assert "- **Stack** (direction=vertical)" in lines
        assert '  - **Heading** "Find a walker"' in lines

    def test_unknown_type_placeholder(self) -> None:
        md = render_mockup_outline([_make_page()])
        assert f"  - {PLACEHOLDER} `Carousel` (carousel)" in md.splitlines()

    def test_missing_child_placeholder(self) -> None:
        md = render_mockup_outline([_make_page()])
        assert f"  - {PLACEHOLDER} missing `ghost`" in md.splitlines()

    def test_long_labels_truncated(self) -> None:
        page = MockupPage(title="P", spec=UISpecTree.model_validate({
            "root": "t", "elements": {"t": {"type": "Text", "props": {"text": "x" * 100}}},
        }))
        md = render_mockup_outline([page])
        assert '"' + "x" * 57 + '..."' in md


class TestRenderLegacySections:
    def test_sections(self) -> None:
        md = render_legacy_sections([
            LegacySection(type="header", content="Home", level=3),
            LegacySection(type="code", content="┌─┐\n└─┘"),
            LegacySection(type="text", content="Notes"),
        ])
        assert md.startswith("### Home\n")
        assert "```\n┌─┐\n└─┘\n```" in md
        assert md.rstrip().endswith("Notes")
