"""Rebuild renderable UI spec trees from stored mockup content.

Mockup content comes in one of two textual shapes:

- markdown with a ```json fenced block per page, each holding a complete
  ``{"root": ..., "elements": ...}`` object;
- a patch stream: ``{"op": "add", "path": "/a/b", "value": ...}`` objects
  concatenated with no delimiter, possibly truncated mid-object.

Anything that yields no spec falls back to the legacy plain-text sections.
"""

from __future__ import annotations

import copy
import json
import logging
import re
from typing import Any, Iterable

from pydantic import BaseModel, ValidationError

from idea2app.mockups.legacy import parse_legacy_sections
from idea2app.mockups.pages import derive_title, split_into_pages
from idea2app.schemas.mockup import LegacySection, MockupPage, UISpecTree
from idea2app.shared.errors import ReconstructionError
from idea2app.shared.json_utils import iter_json_objects

logger = logging.getLogger(__name__)

_PATCH_START = re.compile(r'^\{\s*"op"\s*:')
_HEADING = re.compile(r"^#{1,6}\s+(.+?)\s*#*$")


# ── Patch stream ────────────────────────────────────────────────────


def is_patch_stream(content: str) -> bool:
    return bool(_PATCH_START.match(content.strip()))


def split_patch_stream(content: str) -> list[dict[str, Any]]:
    """Every parseable object in the stream, in order."""
    return list(iter_json_objects(content))


def _pointer_tokens(path: str) -> list[str]:
    tokens = path.split("/")
    if tokens and tokens[0] == "":
        tokens = tokens[1:]
    return [t.replace("~1", "/").replace("~0", "~") for t in tokens]


def _list_index(container: list, token: str, *, allow_end: bool) -> int | None:
    if token == "-" and allow_end:
        return len(container)
    if not token.isdigit():
        return None
    index = int(token)
    limit = len(container) if allow_end else len(container) - 1
    return index if index <= limit else None


def apply_patch(document: dict[str, Any], patch: dict[str, Any]) -> bool:
    """Apply one ``add`` patch in place, creating intermediate objects.

    Returns False (leaving ``document`` untouched) for other ops, patches
    without ``path``/``value`` and paths that walk through a list badly.
    """
    if patch.get("op") != "add":
        return False
    path = patch.get("path")
    if not isinstance(path, str) or "value" not in patch:
        logger.debug("Skipping patch without path/value: %r", str(patch)[:120])
        return False

    value = copy.deepcopy(patch["value"])
    tokens = _pointer_tokens(path)
    if not tokens:
        if not isinstance(value, dict):
            return False
        document.clear()
        document.update(value)
        return True

    target: Any = document
    for token in tokens[:-1]:
        if isinstance(target, dict):
            nxt = target.get(token)
            if not isinstance(nxt, (dict, list)):
                nxt = {}
                target[token] = nxt
            target = nxt
        else:
            index = _list_index(target, token, allow_end=False)
            if index is None:
                logger.debug("Skipping patch with bad list index in %r", path)
                return False
            if not isinstance(target[index], (dict, list)):
                target[index] = {}
            target = target[index]

    last = tokens[-1]
    if isinstance(target, dict):
        target[last] = value
        return True
    index = _list_index(target, last, allow_end=True)
    if index is None:
        logger.debug("Skipping patch with bad list index in %r", path)
        return False
    target.insert(index, value)
    return True


def apply_patches(patches: Iterable[dict[str, Any]]) -> dict[str, Any]:
    document: dict[str, Any] = {}
    applied = skipped = 0
    for patch in patches:
        if apply_patch(document, patch):
            applied += 1
        else:
            skipped += 1
    logger.debug("Applied %d patches, skipped %d", applied, skipped)
    return document


def reconstruct_from_patches(content: str) -> UISpecTree | None:
    """The tree described by a patch stream, or None if it never got one."""
    document = apply_patches(split_patch_stream(content))
    if "root" not in document or "elements" not in document:
        logger.warning("Patch stream produced no root/elements (keys: %s)", sorted(document))
        return None
    try:
        return UISpecTree.model_validate(document)
    except ValidationError as exc:
        logger.warning("Patch stream produced an invalid spec tree: %s", exc)
        return None


# ── Complete blocks ─────────────────────────────────────────────────


def _parse_block(block: str) -> UISpecTree | None:
    try:
        data = json.loads(block)
    except json.JSONDecodeError as exc:
        logger.warning("Skipping unparseable JSON block (%s): %r", exc.msg, block[:120])
        return None
    if not isinstance(data, dict) or "root" not in data or "elements" not in data:
        logger.debug("Skipping fenced block without root/elements: %r", block[:120])
        return None
    try:
        return UISpecTree.model_validate(data)
    except ValidationError as exc:
        logger.warning("Skipping malformed spec block: %s", exc)
        return None


def parse_markdown_specs(content: str) -> list[MockupPage]:
    """One page per fenced JSON spec block.

    A page takes the most recent heading as its title and the prose between
    that heading and the fence as its description.  Blocks that do not
    parse are skipped; the rest of the document still counts.
    """
    pages: list[MockupPage] = []
    heading: str | None = None
    description: list[str] = []
    block: list[str] = []
    in_fence = False

    for line in content.splitlines():
        stripped = line.strip()
        if stripped.startswith("```"):
            if not in_fence:
                in_fence = True
                continue
            in_fence = False
            tree = _parse_block("\n".join(block))
            block = []
            if tree is None:
                continue
            title = heading or derive_title(tree, len(pages) + 1)
            pages.append(
                MockupPage(title=title, description=" ".join(description), spec=tree)
            )
            heading = None
            description = []
            continue

        if in_fence:
            block.append(line)
            continue

        match = _HEADING.match(stripped)
        if match:
            heading = match.group(1)
            description = []
        elif stripped:
            description.append(stripped)

    return pages


# ── Entry points ────────────────────────────────────────────────────


def parse_mockup_content(content: str) -> list[MockupPage] | None:
    """Renderable pages for stored mockup content, or None to use the legacy path."""
    if not content.strip():
        return None

    if is_patch_stream(content):
        tree = reconstruct_from_patches(content)
        if tree is None:
            return None
        return split_into_pages(tree) or [MockupPage(title=derive_title(tree, 1), spec=tree)]

    pages = parse_markdown_specs(content)
    if not pages:
        return None
    if len(pages) == 1:
        split = split_into_pages(pages[0].spec)
        if split:
            return split
    return pages


class ReconstructedMockup(BaseModel):
    """Either spec pages or, when none could be rebuilt, legacy sections."""

    pages: list[MockupPage] = []
    legacy: list[LegacySection] = []

    @property
    def is_legacy(self) -> bool:
        return not self.pages


def reconstruct_mockup(content: str) -> ReconstructedMockup:
    """Pages if possible, legacy sections otherwise.

    Raises ``ReconstructionError`` when neither path yields anything: an
    empty document, or a patch stream that never set ``root`` and
    ``elements`` (raw patch JSON is not worth showing as text).
    """
    pages = parse_mockup_content(content)
    if pages:
        return ReconstructedMockup(pages=pages)
    if is_patch_stream(content):
        raise ReconstructionError("Patch stream did not produce a spec with root and elements")
    legacy = parse_legacy_sections(content)
    if not legacy:
        raise ReconstructionError("Mockup content is empty")
    return ReconstructedMockup(legacy=legacy)
