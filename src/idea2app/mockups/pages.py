"""Splitting one spec tree into several pages, and page titles."""

from __future__ import annotations

import logging
import re

from idea2app.mockups.catalog import PAGE_CONTAINER_TYPES
from idea2app.schemas.mockup import MockupPage, UIElement, UISpecTree

logger = logging.getLogger(__name__)

_ID_SEPARATORS = re.compile(r"[-_\s]+")


def _text_prop(element: UIElement, *keys: str) -> str | None:
    for key in keys:
        value = element.props.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def _heading_text(tree: UISpecTree, element_ids: list[str]) -> str | None:
    for element_id in element_ids:
        element = tree.elements.get(element_id)
        if element is not None and element.type == "Heading":
            text = _text_prop(element, "text", "title")
            if text:
                return text
    return None


def humanize_id(element_id: str) -> str:
    """``"pricing-page"`` → ``"Pricing Page"``."""
    words = [w for w in _ID_SEPARATORS.split(element_id) if w]
    return " ".join(w[0].upper() + w[1:] for w in words)


def derive_title(tree: UISpecTree, position: int) -> str:
    """Title for a page with no markdown heading.

    Priority: the root's ``title`` prop, a ``Heading`` child, a ``Heading``
    grandchild, the humanized root id, then ``"Page {position}"``.
    """
    root = tree.elements.get(tree.root)
    if root is not None:
        title = _text_prop(root, "title")
        if title:
            return title

        title = _heading_text(tree, root.children)
        if title:
            return title

        for child_id in root.children:
            child = tree.elements.get(child_id)
            if child is None:
                continue
            title = _heading_text(tree, child.children)
            if title:
                return title

    humanized = humanize_id(tree.root)
    return humanized or f"Page {position}"


def is_page_container(element: UIElement) -> bool:
    if element.type not in PAGE_CONTAINER_TYPES:
        return False
    # A horizontal Stack is a toolbar or nav row, not a page.
    return not (element.type == "Stack" and element.props.get("direction") == "horizontal")


def split_into_pages(tree: UISpecTree) -> list[MockupPage]:
    """One page per root child, when every root child is a page container.

    Returns ``[]`` (leave the tree as a single page) when the root has fewer
    than two children or any child is not a page-level container.  The input
    tree is not modified.
    """
    root = tree.elements.get(tree.root)
    if root is None or len(root.children) < 2:
        return []

    for child_id in root.children:
        child = tree.elements.get(child_id)
        if child is None or not is_page_container(child):
            return []

    pages: list[MockupPage] = []
    for position, child_id in enumerate(root.children, start=1):
        sub = tree.subtree(child_id)
        description = _text_prop(sub.elements[child_id], "description") or ""
        pages.append(
            MockupPage(title=derive_title(sub, position), description=description, spec=sub)
        )
    logger.debug("Split tree rooted at %r into %d pages", tree.root, len(pages))
    return pages
