"""Assemble competitor research into the synthesis prompt context."""

from __future__ import annotations

from idea2app.schemas.research import Competitor, ExtractedPage

NO_COMPETITOR_DATA = "No competitor data gathered from external search."
EXCERPT_CHARS = 1500
BLOCK_SEPARATOR = "\n\n---\n\n"


def build_context(competitors: list[Competitor], extracted: list[ExtractedPage]) -> str:
    """One block per competitor, with page text attached by exact URL match.

    ``http://a.com`` and ``http://a.com/`` are different URLs here.
    """
    if not competitors:
        return NO_COMPETITOR_DATA

    pages: dict[str, ExtractedPage] = {}
    for page in extracted:
        pages.setdefault(page.url, page)
    blocks: list[str] = []
    for competitor in competitors:
        block = (
            f"## {competitor.name}\n"
            f"Description: {competitor.description}\n"
            f"Why they compete: {competitor.why_competes}"
        )
        page = pages.get(competitor.url)
        if page is not None:
            block += f"\nURL Content (from {competitor.url}):\n{page.content[:EXCERPT_CHARS]}"
        else:
            block += f"\nURL: {competitor.url} (content extraction not available)"
        blocks.append(block)

    return BLOCK_SEPARATOR.join(blocks)
