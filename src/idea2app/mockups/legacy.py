"""Sectioning for plain-text (ASCII art) mockups with no JSON spec."""

from __future__ import annotations

import re

from idea2app.schemas.mockup import LegacySection

_BOX_CHARS = re.compile(r"[┌┐└┘├┤┬┴┼─│═║╔╗╚╝╠╣╦╩╬]")
_PLUS_BORDER = re.compile(r"^\+[-+]+\+$")
_HEADING = re.compile(r"^(#{1,6})\s+(.+)$")

# How far past a blank line / a label line to look for more art
_BLANK_LOOKAHEAD = 3
_LABEL_LOOKAHEAD = 4


def is_ascii_art_line(line: str) -> bool:
    stripped = line.strip()
    if not stripped:
        return False
    return bool(
        _BOX_CHARS.search(stripped)
        or _PLUS_BORDER.match(stripped)
        or (stripped.startswith("|") and stripped.endswith("|"))
    )


def _art_follows(lines: list[str], index: int, lookahead: int) -> bool:
    for line in lines[index + 1:index + 1 + lookahead]:
        if is_ascii_art_line(line):
            return True
        if re.match(r"^#{1,6}\s", line.strip()):
            return False
    return False


def parse_legacy_sections(content: str) -> list[LegacySection]:
    """Split mockup markdown into header, code and text sections.

    Fenced blocks become code sections.  Unfenced box-drawing art is also
    collected into code sections, including blank lines and short labels
    that sit between art lines.
    """
    lines = content.split("\n")
    sections: list[LegacySection] = []
    code: list[str] = []
    text: list[str] = []
    in_fence = False

    def flush_text() -> None:
        joined = "\n".join(text).strip()
        if joined:
            sections.append(LegacySection(type="text", content=joined))
        text.clear()

    def flush_code() -> None:
        while code and not code[-1].strip():
            code.pop()
        if code:
            sections.append(LegacySection(type="code", content="\n".join(code)))
        code.clear()

    for i, line in enumerate(lines):
        stripped = line.strip()

        if stripped.startswith("```"):
            if in_fence:
                flush_code()
            else:
                flush_text()
            in_fence = not in_fence
            continue

        if in_fence:
            code.append(line)
            continue

        heading = _HEADING.match(stripped)
        if heading:
            flush_text()
            flush_code()
            sections.append(
                LegacySection(type="header", content=heading.group(2), level=len(heading.group(1)))
            )
            continue

        if is_ascii_art_line(line):
            flush_text()
            code.append(line)
            continue

        if code:
            lookahead = _BLANK_LOOKAHEAD if not stripped else _LABEL_LOOKAHEAD
            if _art_follows(lines, i, lookahead):
                code.append(line)
            else:
                flush_code()
                text.append(line)
            continue

        text.append(line)

    flush_text()
    flush_code()
    return sections
