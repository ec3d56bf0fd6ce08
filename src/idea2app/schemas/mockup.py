"""Pydantic models for reconstructed UI specifications."""

from __future__ import annotations

from collections import deque
from typing import Any

from pydantic import BaseModel


class UIElement(BaseModel):
    """One node of a UI spec tree."""

    type: str
    props: dict[str, Any] = {}
    children: list[str] = []


class UISpecTree(BaseModel):
    """A renderable mockup page: a root id plus a flat id → element map."""

    root: str
    elements: dict[str, UIElement]

    def missing_references(self) -> list[str]:
        """Ids referenced as root or child that have no element."""
        missing: list[str] = []
        if self.root not in self.elements:
            missing.append(self.root)
        for element in self.elements.values():
            for child in element.children:
                if child not in self.elements and child not in missing:
                    missing.append(child)
        return missing

    def is_renderable(self) -> bool:
        return not self.missing_references()

    def reachable_from(self, start: str) -> list[str]:
        """Breadth-first closure of ids reachable from ``start`` (inclusive).

        Dangling child ids are skipped; cycles are visited once.
        """
        if start not in self.elements:
            return []
        seen = {start}
        order = [start]
        queue = deque([start])
        while queue:
            node = self.elements[queue.popleft()]
            for child in node.children:
                if child in self.elements and child not in seen:
                    seen.add(child)
                    order.append(child)
                    queue.append(child)
        return order

    def subtree(self, start: str) -> "UISpecTree":
        """A new tree rooted at ``start`` restricted to its reachable ids."""
        ids = self.reachable_from(start)
        return UISpecTree(
            root=start,
            elements={i: self.elements[i].model_copy(deep=True) for i in ids},
        )


class MockupPage(BaseModel):
    """A named, described view onto one reconstructed tree."""

    title: str
    description: str = ""
    spec: UISpecTree


class LegacySection(BaseModel):
    """A block of legacy (non-JSON) mockup content."""

    type: str  # "header", "code" or "text"
    content: str
    level: int | None = None
