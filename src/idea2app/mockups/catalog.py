"""The closed set of UI components a mockup spec may use.

The catalog drives two things: the component listing in the mockup system
prompt, and :func:`validate_tree`, which reports elements a renderer could
not draw faithfully.
"""

from __future__ import annotations

from pydantic import BaseModel

from idea2app.schemas.mockup import UISpecTree


class ComponentSchema(BaseModel):
    """Prop schema for one component type: prop name → value kind."""

    category: str
    description: str
    required: dict[str, str] = {}
    optional: dict[str, str] = {}
    accepts_children: bool = False


def _c(category: str, description: str, *, required=None, optional=None, children=False):
    return ComponentSchema(
        category=category,
        description=description,
        required=required or {},
        optional=optional or {},
        accepts_children=children,
    )


COMPONENT_CATALOG: dict[str, ComponentSchema] = {
    # Layout
    "Stack": _c("layout", "Flex container stacking children",
                optional={"direction": "vertical|horizontal", "gap": "sm|md|lg",
                          "align": "start|center|end|stretch", "justify": "start|center|end|between",
                          "title": "string"},
                children=True),
    "Grid": _c("layout", "Multi-column grid", optional={"columns": "number", "gap": "sm|md|lg"},
               children=True),
    "Separator": _c("layout", "Horizontal or vertical rule",
                    optional={"orientation": "horizontal|vertical"}),
    # Containers
    "Card": _c("containers", "Bordered content group",
               optional={"title": "string", "description": "string"}, children=True),
    "Tabs": _c("containers", "Tabbed panels", required={"tabs": "string[]"},
               optional={"defaultValue": "string"}, children=True),
    "Accordion": _c("containers", "Expandable item list", required={"items": "{title, content}[]"}),
    "Collapsible": _c("containers", "Single expandable section",
                      required={"title": "string"}, optional={"defaultOpen": "boolean"},
                      children=True),
    # Typography
    "Heading": _c("typography", "Section title", required={"text": "string"},
                  optional={"level": "1|2|3|4"}),
    "Text": _c("typography", "Short body text", required={"text": "string"},
               optional={"variant": "body|muted|small|lead"}),
    # Data display
    "Table": _c("data", "Tabular data", required={"columns": "string[]"},
                optional={"rows": "string[][]", "caption": "string"}),
    "Badge": _c("data", "Status label", required={"text": "string"},
                optional={"variant": "default|secondary|outline|destructive"}),
    "Avatar": _c("data", "User picture or initials", optional={"name": "string", "src": "string",
                                                               "size": "sm|md|lg"}),
    "Progress": _c("data", "Progress bar", optional={"value": "number", "max": "number",
                                                     "label": "string"}),
    "Alert": _c("data", "Callout message", required={"title": "string"},
                optional={"message": "string", "variant": "default|destructive"}),
    # Forms
    "Input": _c("forms", "Single-line field", optional={"label": "string", "placeholder": "string",
                                                        "type": "string", "name": "string"}),
    "Textarea": _c("forms", "Multi-line field", optional={"label": "string", "placeholder": "string",
                                                          "rows": "number"}),
    "Select": _c("forms", "Dropdown field", required={"options": "string[]"},
                 optional={"label": "string", "placeholder": "string"}),
    "Checkbox": _c("forms", "Checkbox with label", required={"label": "string"},
                   optional={"checked": "boolean"}),
    "Radio": _c("forms", "Radio group", required={"options": "string[]"},
                optional={"label": "string", "value": "string"}),
    "Switch": _c("forms", "On/off toggle", optional={"label": "string", "checked": "boolean"}),
    "Slider": _c("forms", "Range slider", optional={"label": "string", "min": "number",
                                                    "max": "number", "value": "number"}),
    # Actions
    "Button": _c("actions", "Clickable button", required={"label": "string"},
                 optional={"variant": "default|secondary|outline|ghost|destructive",
                           "size": "sm|md|lg"}),
    "Link": _c("actions", "Text link", required={"label": "string"}, optional={"href": "string"}),
    "DropdownMenu": _c("actions", "Button opening a menu", required={"label": "string"},
                       optional={"items": "string[]"}),
    "ButtonGroup": _c("actions", "Row of related buttons",
                      optional={"orientation": "horizontal|vertical"}, children=True),
    # Navigation
    "Pagination": _c("navigation", "Page switcher", optional={"totalPages": "number",
                                                              "currentPage": "number"}),
    # Media
    "Image": _c("media", "Image placeholder", optional={"src": "string", "alt": "string",
                                                        "width": "number", "height": "number"}),
    # Feedback
    "Skeleton": _c("feedback", "Grey placeholder block for media or content",
                   optional={"width": "string", "height": "string", "rounded": "boolean"}),
    "Spinner": _c("feedback", "Loading indicator", optional={"size": "sm|md|lg", "label": "string"}),
    "Tooltip": _c("feedback", "Hover hint", required={"content": "string"},
                  optional={"text": "string"}),
}

# Types a page-level view may be rooted at
PAGE_CONTAINER_TYPES = frozenset({"Stack", "Card"})

MOCKUP_LAYOUT_RULES = [
    "CRITICAL LAYOUT RULE: every page uses FULL-WIDTH layouts; never leave components "
    "floating narrow",
    "Use Stack with direction='vertical' as the root layout of each page",
    "Use Stack with direction='horizontal' and align='center' for navigation bars and toolbars",
    "Use Grid with columns=2 or columns=3 for side-by-side layouts",
    "Group related items into Cards, then arrange Cards in a Grid",
    "Use Separator between major page sections",
    "Pages have clear sections: top nav bar, hero/header, content sections, footer",
    "Dashboards: a Grid of 3-4 stat Cards on top, then a 2-column Grid for content + sidebar",
    "WIREFRAME STYLE: short labels (1-3 words), not paragraphs of text",
    "Use Skeleton for images, banners and media placeholders",
    "Use Table with 3-4 columns inside full-width Cards for data-heavy sections",
    "Keep pages focused: 15-30 elements per page",
    "Every id listed in children must exist in elements; the root id must exist in elements",
]


def catalog_listing() -> str:
    """Human-readable component list for prompts; required props are starred."""
    lines: list[str] = []
    current = None
    for name, schema in COMPONENT_CATALOG.items():
        if schema.category != current:
            current = schema.category
            lines.append(f"\n### {current.title()}")
        props = [f"{p}* ({kind})" for p, kind in schema.required.items()]
        props += [f"{p} ({kind})" for p, kind in schema.optional.items()]
        suffix = "; accepts children" if schema.accepts_children else ""
        prop_text = ", ".join(props) if props else "no props"
        lines.append(f"- {name}: {schema.description}. Props: {prop_text}{suffix}")
    return "\n".join(lines).lstrip()


def build_mockup_system_prompt(project_name: str) -> str:
    rules = "\n".join(f"- {rule}" for rule in MOCKUP_LAYOUT_RULES)
    return (
        f'You are a UI/UX wireframe designer creating low-fidelity wireframes for "{project_name}". '
        "Generate JSON specs that show PAGE STRUCTURE and LAYOUT, not detailed content. "
        "Think like a whiteboard sketch: show where things go, not what they say.\n\n"
        "## Available components\n"
        "Only these component types are allowed. Props marked * are required.\n\n"
        f"{catalog_listing()}\n\n"
        "## Rules\n"
        f"{rules}"
    )


class TreeIssue(BaseModel):
    element_id: str
    problem: str  # "unknown_type", "missing_prop" or "dangling_child"
    detail: str = ""


def validate_tree(tree: UISpecTree) -> list[TreeIssue]:
    """Check every element against the catalog.

    Returns an empty list for a fully valid tree.  Elements are kept either
    way; renderers draw unknown types as placeholders.
    """
    issues: list[TreeIssue] = []
    if tree.root not in tree.elements:
        issues.append(TreeIssue(element_id=tree.root, problem="dangling_child",
                                detail="root id has no element"))
    for element_id, element in tree.elements.items():
        schema = COMPONENT_CATALOG.get(element.type)
        if schema is None:
            issues.append(TreeIssue(element_id=element_id, problem="unknown_type",
                                    detail=element.type))
        else:
            for prop in schema.required:
                if prop not in element.props:
                    issues.append(TreeIssue(element_id=element_id, problem="missing_prop",
                                            detail=f"{element.type}.{prop}"))
        for child in element.children:
            if child not in tree.elements:
                issues.append(TreeIssue(element_id=element_id, problem="dangling_child",
                                        detail=child))
    return issues
