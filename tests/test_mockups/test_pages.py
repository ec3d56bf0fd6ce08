"""Tests for page splitting and title derivation."""

from __future__ import annotations

from idea2app.mockups.pages import derive_title, humanize_id, split_into_pages
from idea2app.schemas.mockup import UISpecTree


def _tree(root: str, elements: dict) -> UISpecTree:
    return UISpecTree.model_validate({"root": root, "elements": elements})


MULTI_PAGE = _tree("app", {
    "app": {"type": "Stack", "props": {"direction": "vertical"}, "children": ["home", "pricing"]},
    "home": {"type": "Stack", "props": {"direction": "vertical", "description": "Landing"},
             "children": ["home-title", "hero"]},
    "home-title": {"type": "Heading", "props": {"text": "Welcome"}},
    "hero": {"type": "Card", "props": {"title": "Hero"}, "children": ["hero-img"]},
    "hero-img": {"type": "Skeleton", "props": {"height": "200px"}},
    "pricing": {"type": "Card", "props": {"title": "Plans"}, "children": ["table"]},
    "table": {"type": "Table", "props": {"columns": ["Plan", "Price"]}},
    "orphan": {"type": "Text", "props": {"text": "unreachable"}},
})


class TestSplitIntoPages:
    def test_one_page_per_root_child(self) -> None:
        pages = split_into_pages(MULTI_PAGE)

        assert [p.spec.root for p in pages] == ["home", "pricing"]
        assert set(pages[0].spec.elements) == {"home", "home-title", "hero", "hero-img"}
        assert set(pages[1].spec.elements) == {"pricing", "table"}
        assert all(p.spec.is_renderable() for p in pages)

    def test_titles_and_descriptions(self) -> None:
        pages = split_into_pages(MULTI_PAGE)
        assert [p.title for p in pages] == ["Welcome", "Plans"]
        assert pages[0].description == "Landing"

    def test_input_tree_unchanged(self) -> None:
        before = MULTI_PAGE.model_dump()
        pages = split_into_pages(MULTI_PAGE)
        pages[0].spec.elements["home"].children.append("mutated")
        assert MULTI_PAGE.model_dump() == before

    def test_single_child_not_split(self) -> None:
        tree = _tree("app", {
            "app": {"type": "Stack", "children": ["only"]},
            "only": {"type": "Card"},
        })
        assert split_into_pages(tree) == []

    def test_non_container_child_blocks_split(self) -> None:
        tree = _tree("app", {
            "app": {"type": "Stack", "children": ["nav", "body"]},
            "nav": {"type": "Stack", "props": {"direction": "horizontal"}, "children": []},
            "body": {"type": "Card"},
        })
        assert split_into_pages(tree) == []

    def test_heading_child_blocks_split(self) -> None:
        tree = _tree("app", {
            "app": {"type": "Stack", "children": ["title", "body"]},
            "title": {"type": "Heading", "props": {"text": "Hi"}},
            "body": {"type": "Card"},
        })
        assert split_into_pages(tree) == []

    def test_dangling_child_blocks_split(self) -> None:
        tree = _tree("app", {
            "app": {"type": "Stack", "children": ["a", "ghost"]},
            "a": {"type": "Card"},
        })
        assert split_into_pages(tree) == []


class TestDeriveTitle:
    def test_root_title_prop_first(self) -> None:
        tree = _tree("p", {
            "p": {"type": "Card", "props": {"title": "Dashboard"}, "children": ["h"]},
            "h": {"type": "Heading", "props": {"text": "Other"}},
        })
        assert derive_title(tree, 1) == "Dashboard"

    def test_heading_grandchild(self) -> None:
        tree = _tree("p", {
            "p": {"type": "Stack", "children": ["section"]},
            "section": {"type": "Card", "children": ["h"]},
            "h": {"type": "Heading", "props": {"text": "Settings"}},
        })
        assert derive_title(tree, 1) == "Settings"

    def test_humanized_root_id(self) -> None:
        tree = _tree("pricing-page", {"pricing-page": {"type": "Stack"}})
        assert derive_title(tree, 3) == "Pricing Page"

    def test_position_fallback(self) -> None:
        tree = _tree("--", {"--": {"type": "Stack"}})
        assert derive_title(tree, 4) == "Page 4"


class TestHumanizeId:
    def test_separators(self) -> None:
        assert humanize_id("walker_profile page") == "Walker Profile Page"
        assert humanize_id("") == ""
