"""Tests for the component catalog and tree validation."""

from __future__ import annotations

from idea2app.mockups.catalog import (
    COMPONENT_CATALOG,
    build_mockup_system_prompt,
    catalog_listing,
    validate_tree,
)
from idea2app.schemas.mockup import UISpecTree


class TestCatalog:
    def test_core_types_present(self) -> None:
        for name in ("Stack", "Grid", "Card", "Heading", "Text", "Button", "Table", "Skeleton"):
            assert name in COMPONENT_CATALOG

    def test_listing_marks_required_props(self) -> None:
        listing = catalog_listing()
        assert "- Button: Clickable button. Props: label* (string)" in listing
        assert "### Layout" in listing

    def test_system_prompt_names_project(self) -> None:
        prompt = build_mockup_system_prompt("WalkBuddy")
        assert '"WalkBuddy"' in prompt
        assert "Skeleton" in prompt


class TestValidateTree:
    def test_valid_tree(self) -> None:
        tree = UISpecTree.model_validate({
            "root": "p",
            "elements": {
                "p": {"type": "Stack", "children": ["b"]},
                "b": {"type": "Button", "props": {"label": "Go"}},
            },
        })
        assert validate_tree(tree) == []

    def test_reports_every_problem(self) -> None:
        tree = UISpecTree.model_validate({
            "root": "p",
            "elements": {
                "p": {"type": "Stack", "children": ["b", "ghost", "x"]},
                "b": {"type": "Button"},
                "x": {"type": "Carousel"},
            },
        })
        problems = {(i.element_id, i.problem, i.detail) for i in validate_tree(tree)}
        assert problems == {
            ("b", "missing_prop", "Button.label"),
            ("p", "dangling_child", "ghost"),
            ("x", "unknown_type", "Carousel"),
        }

    def test_missing_root(self) -> None:
        tree = UISpecTree(root="nope", elements={})
        assert [i.problem for i in validate_tree(tree)] == ["dangling_child"]
