"""Markdown renderers for reconstructed mockups."""

from __future__ import annotations

from idea2app.mockups.catalog import COMPONENT_CATALOG
from idea2app.schemas.mockup import LegacySection, MockupPage, UISpecTree

PLACEHOLDER = "[Component placeholder]"

# Props worth showing inline, in order of preference
_LABEL_PROPS = ("text", "label", "title", "placeholder", "content", "alt")


def _element_line(tree: UISpecTree, element_id: str) -> str:
    element = tree.elements[element_id]
    if element.type not in COMPONENT_CATALOG:
        return f"{PLACEHOLDER} `{element.type}` ({element_id})"
    label = next(
        (str(element.props[p]) for p in _LABEL_PROPS if element.props.get(p) not in (None, "")),
        "",
    )
    extras = []
    if element.type in ("Stack", "Grid"):
        for prop in ("direction", "columns"):
            if prop in element.props:
                extras.append(f"{prop}={element.props[prop]}")
    line = f"**{element.type}**"
    if label:
        if len(label) > 60:
            label = label[:57] + "..."
        line += f' "{label}"'
    if extras:
        line += f" ({', '.join(extras)})"
    return line


def _render_tree(tree: UISpecTree) -> list[str]:
    lines: list[str] = []
    visited: set[str] = set()

    def walk(element_id: str, depth: int) -> None:
        indent = "  " * depth
        if element_id not in tree.elements:
            lines.append(f"{indent}- {PLACEHOLDER} missing `{element_id}`")
            return
        if element_id in visited:
            return
        visited.add(element_id)
        lines.append(f"{indent}- {_element_line(tree, element_id)}")
        for child in tree.elements[element_id].children:
            walk(child, depth + 1)

    walk(tree.root, 0)
    return lines


def render_mockup_outline(pages: list[MockupPage]) -> str:
    """Render pages as headed, indented component outlines."""
    sections: list[str] = []
    for page in pages:
        sections.append(f"## {page.title}\n")
        if page.description:
            sections.append(f"*{page.description}*\n")
        sections.extend(_render_tree(page.spec))
        sections.append("")
    return "\n".join(sections)


def render_legacy_sections(sections: list[LegacySection]) -> str:
    """Render legacy sections back to markdown with art kept in fences."""
    out: list[str] = []
    for section in sections:
        if section.type == "header":
            out.append(f"{'#' * (section.level or 2)} {section.content}\n")
        elif section.type == "code":
            out.append(f"```\n{section.content}\n```\n")
        else:
            out.append(f"{section.content}\n")
    return "\n".join(out)
