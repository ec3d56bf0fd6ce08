"""Competitor search and page extraction.

``SourceFetcher`` is the only component that talks to the research
providers: an OpenAI-compatible reasoning-search model for competitor
discovery and an HTTP extraction API for raw page text.  Both calls raise
typed errors; deciding whether a failure is fatal belongs to the caller.
"""

from __future__ import annotations

import json
import logging

import httpx
from pydantic import ValidationError

from idea2app.research.prompts import SEARCH_SYSTEM_PROMPT, build_search_prompt
from idea2app.schemas.config import ProviderSettings
from idea2app.schemas.research import (
    Competitor,
    CompetitorSearchResult,
    ExtractionResult,
)
from idea2app.shared.errors import ExtractionError, ModelError, SearchError
from idea2app.shared.json_utils import first_balanced_object
from idea2app.shared.llm_client import LLMClient

logger = logging.getLogger(__name__)

MAX_EXTRACT_URLS = 5
SEARCH_MAX_TOKENS = 2048
SEARCH_TEMPERATURE = 0.2


def clean_urls(urls: list[str], limit: int = MAX_EXTRACT_URLS) -> list[str]:
    """Keep well-formed absolute http(s) URLs, in order, capped at ``limit``."""
    kept: list[str] = []
    for raw in urls:
        if not raw or not isinstance(raw, str):
            continue
        try:
            url = httpx.URL(raw.strip())
        except (httpx.InvalidURL, TypeError, ValueError):
            logger.debug("Dropping malformed URL: %r", raw)
            continue
        if url.scheme not in ("http", "https") or not url.host:
            logger.debug("Dropping non-http URL: %r", raw)
            continue
        kept.append(raw.strip())
        if len(kept) >= limit:
            break
    return kept


def parse_competitors(raw: str) -> list[Competitor]:
    """Competitors from the first balanced JSON object in a search reply.

    Returns an empty list when nothing parses; malformed entries are skipped.
    """
    data = first_balanced_object(raw)
    if data is None:
        logger.warning("Search reply had no parseable JSON object; using raw text only")
        return []

    items = data.get("competitors") or []
    if not isinstance(items, list):
        return []

    competitors: list[Competitor] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        try:
            competitors.append(Competitor.model_validate(item))
        except ValidationError as exc:
            logger.debug("Skipping malformed competitor entry %r: %s", item, exc)
    return competitors


class SourceFetcher:
    """Gathers raw competitor research for one idea.

    ``search_client`` and ``http_client`` default to clients built from
    ``settings``; tests and dry runs pass their own.
    """

    def __init__(
        self,
        settings: ProviderSettings,
        *,
        search_client: LLMClient | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings
        self._search_client = search_client
        self._http_client = http_client

    def _get_search_client(self) -> LLMClient:
        if self._search_client is None:
            if not self.settings.perplexity_api_key:
                raise SearchError("Perplexity API key not configured")
            self._search_client = LLMClient(
                self.settings.perplexity_api_key,
                base_url=self.settings.perplexity_base_url,
                default_model=self.settings.perplexity_model,
            )
        return self._search_client

    async def search_competitors(self, idea: str, name: str) -> CompetitorSearchResult:
        """Ask the search model for 3-5 close competitors.

        Raises ``SearchError`` if the provider is unavailable.  An unparseable
        reply is not an error: it yields no competitors plus the raw text.
        """
        client = self._get_search_client()
        try:
            completion = await client.complete(
                system=SEARCH_SYSTEM_PROMPT,
                user_message=build_search_prompt(idea, name),
                max_tokens=SEARCH_MAX_TOKENS,
                temperature=SEARCH_TEMPERATURE,
            )
        except ModelError as exc:
            raise SearchError(f"Competitor search failed: {exc}") from exc

        competitors = parse_competitors(completion.content)
        logger.info("Competitor search returned %d competitors", len(competitors))
        return CompetitorSearchResult(
            competitors=competitors, raw_response=completion.content,
        )

    async def extract_pages(self, urls: list[str]) -> ExtractionResult:
        """Fetch raw page text for up to five competitor URLs.

        Returns an empty result without any network call when no usable URL
        remains.  Raises ``ExtractionError`` on timeout, transport failure or
        a non-2xx response; the request is never retried.
        """
        cleaned = clean_urls(urls)
        if not cleaned:
            return ExtractionResult()
        if not self.settings.tavily_api_key and self._http_client is None:
            raise ExtractionError("Tavily API key not configured")

        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.settings.tavily_api_key}",
        }
        timeout = self.settings.extraction_timeout

        try:
            if self._http_client is not None:
                response = await self._http_client.post(
                    self.settings.tavily_extract_url,
                    json={"urls": cleaned}, headers=headers, timeout=timeout,
                )
            else:
                async with httpx.AsyncClient(timeout=timeout) as client:
                    response = await client.post(
                        self.settings.tavily_extract_url,
                        json={"urls": cleaned}, headers=headers,
                    )
        except httpx.TimeoutException as exc:
            raise ExtractionError(
                f"Tavily extract timed out after {timeout:.0f}s"
            ) from exc
        except httpx.HTTPError as exc:
            raise ExtractionError(f"Tavily extract failed: {exc}") from exc

        if not response.is_success:
            raise ExtractionError(
                f"Tavily extract failed: {response.status_code} - {response.text}"
            )

        try:
            result = ExtractionResult.model_validate(response.json())
        except (json.JSONDecodeError, ValidationError) as exc:
            raise ExtractionError(f"Tavily extract returned an invalid body: {exc}") from exc

        logger.info(
            "Extracted %d pages (%d failed) from %d URLs",
            len(result.results), len(result.failed), len(cleaned),
        )
        return result


# ── Dry run ─────────────────────────────────────────────────────────


def _dry_run_extract(request: httpx.Request) -> httpx.Response:
    urls = json.loads(request.content).get("urls", [])
    # Fail the last URL so the degraded path shows up in dry runs too.
    ok, failed = urls[:-1] or urls, urls[-1:] if len(urls) > 1 else []
    return httpx.Response(
        200,
        json={
            "results": [
                {
                    "url": url,
                    "raw_content": f"[dry-run] Landing page text for {url}. "
                    "Pricing, features and testimonials would appear here.",
                }
                for url in ok
            ],
            "failed_results": [{"url": url, "error": "dry-run failure"} for url in failed],
        },
    )


def dry_run_http_client() -> httpx.AsyncClient:
    """An HTTP client that answers extraction requests locally."""
    return httpx.AsyncClient(transport=httpx.MockTransport(_dry_run_extract))
