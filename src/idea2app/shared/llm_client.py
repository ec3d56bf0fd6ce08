"""Async wrapper around OpenAI-compatible chat completion APIs.

The same client class talks to OpenRouter (synthesis and chat) and to
Perplexity (competitor search); only ``base_url``, the key and the default
model differ.
"""

from __future__ import annotations

import asyncio
import json
import logging
import random
import re
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable

from openai import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    AsyncOpenAI,
    RateLimitError,
)

from idea2app.shared.errors import ModelError

logger = logging.getLogger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "anthropic/claude-sonnet-4"
MAX_TOKENS = 8192

# Retry settings for 429s and transient connection errors
_RATE_LIMIT_MAX_RETRIES = 6
_RATE_LIMIT_BASE_DELAY = 2  # seconds

TokensCallback = Callable[[int, int], None]
"""Called with (input_tokens, output_tokens) when a completion finishes."""


@dataclass
class Completion:
    """Text returned by a completion plus the model that produced it."""

    content: str
    model: str
    input_tokens: int = 0
    output_tokens: int = 0


def _parse_retry_after(exc: RateLimitError) -> float | None:
    """Extract the suggested retry delay from a rate limit error.

    Checks the ``Retry-After`` header first, then the "try again in Xs / Xms"
    substring some providers put in the message.
    """
    try:
        headers = exc.response.headers  # type: ignore[union-attr]
        if retry_after := headers.get("retry-after"):
            return float(retry_after)
    except (AttributeError, TypeError, ValueError):
        pass

    m = re.search(r"try again in (\d+(?:\.\d+)?)\s*(ms|s)\b", str(exc), re.IGNORECASE)
    if m:
        value = float(m.group(1))
        return value / 1000 if m.group(2).lower() == "ms" else value

    return None


def _build_messages(
    system: str | None,
    user_message: str | None,
    messages: list[dict[str, Any]] | None,
) -> list[dict[str, Any]]:
    if (user_message is None) == (messages is None):
        raise ValueError("Pass exactly one of user_message or messages")
    out: list[dict[str, Any]] = []
    if system:
        out.append({"role": "system", "content": system})
    if messages is not None:
        out.extend(messages)
    else:
        out.append({"role": "user", "content": user_message})
    return out


class LLMClient:
    """Thin async wrapper around the OpenAI SDK.

    - ``complete``: single request/response, raises ``ModelError`` when the
      provider fails or the reply is empty.
    - ``stream_completion``: yields content tokens as they arrive.
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str | None = OPENROUTER_BASE_URL,
        default_model: str = DEFAULT_MODEL,
        timeout: float | None = None,
    ) -> None:
        self._client = AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout)
        self.default_model = default_model

    async def _call_with_retry(self, **kwargs: Any) -> Any:
        """Call chat.completions.create with exponential backoff on 429s.

        Waits at least as long as the provider's suggested retry-after, uses
        exponential backoff as a floor and adds ±25% jitter.  Fails immediately
        when the payload itself is too large.
        """
        for attempt in range(_RATE_LIMIT_MAX_RETRIES):
            try:
                return await self._client.chat.completions.create(**kwargs)
            except RateLimitError as exc:
                msg = str(exc).lower()
                if "request too large" in msg or "context_length_exceeded" in msg:
                    logger.error("Request exceeds token limit (not retryable): %s", exc)
                    raise
                if attempt == _RATE_LIMIT_MAX_RETRIES - 1:
                    raise

                backoff = _RATE_LIMIT_BASE_DELAY * (2 ** attempt)
                suggested = _parse_retry_after(exc)
                base_delay = max(suggested or 0.0, backoff)
                jitter = random.uniform(-0.25 * base_delay, 0.25 * base_delay)
                delay = max(1.0, base_delay + jitter)

                logger.warning(
                    "Rate limited (429), retrying in %.1fs (attempt %d/%d, "
                    "suggested=%.1fs, backoff=%ds): %s",
                    delay, attempt + 1, _RATE_LIMIT_MAX_RETRIES,
                    suggested or 0.0, backoff, exc,
                )
                await asyncio.sleep(delay)
            except (APIConnectionError, APITimeoutError) as exc:
                if attempt == _RATE_LIMIT_MAX_RETRIES - 1:
                    raise
                backoff = _RATE_LIMIT_BASE_DELAY * (2 ** min(attempt, 3))
                jitter = random.uniform(-0.25 * backoff, 0.25 * backoff)
                delay = max(1.0, backoff + jitter)
                logger.warning(
                    "Connection error, retrying in %.1fs (attempt %d/%d): %s",
                    delay, attempt + 1, _RATE_LIMIT_MAX_RETRIES, exc,
                )
                await asyncio.sleep(delay)

    async def complete(
        self,
        *,
        system: str | None = None,
        user_message: str | None = None,
        messages: list[dict[str, Any]] | None = None,
        model: str | None = None,
        max_tokens: int = MAX_TOKENS,
        temperature: float | None = None,
        on_tokens: TokensCallback | None = None,
    ) -> Completion:
        """Single request/response with no tools.

        Pass either ``user_message`` (one user turn) or ``messages`` (a full
        role/content history).  ``system`` is prepended when given.
        """
        model = model or self.default_model
        kwargs: dict[str, Any] = {
            "model": model,
            "max_tokens": max_tokens,
            "messages": _build_messages(system, user_message, messages),
        }
        if temperature is not None:
            kwargs["temperature"] = temperature

        try:
            response = await self._call_with_retry(**kwargs)
        except (APIStatusError, APIConnectionError, APITimeoutError) as exc:
            raise ModelError(f"Completion request to {model} failed: {exc}") from exc

        choices = getattr(response, "choices", None) or []
        content = (choices[0].message.content if choices else None) or ""
        if not content.strip():
            raise ModelError(f"No content returned from {model}")

        usage = getattr(response, "usage", None)
        input_tokens = getattr(usage, "prompt_tokens", 0) if usage else 0
        output_tokens = getattr(usage, "completion_tokens", 0) if usage else 0
        if on_tokens and usage:
            on_tokens(input_tokens, output_tokens)
        return Completion(
            content=content,
            model=model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )

    async def stream_completion(
        self,
        *,
        system: str | None = None,
        user_message: str | None = None,
        messages: list[dict[str, Any]] | None = None,
        model: str | None = None,
        max_tokens: int = MAX_TOKENS,
        temperature: float | None = None,
    ) -> AsyncIterator[str]:
        """Yield content tokens from a streamed completion.

        The consumer can stop iterating at any time; the provider is not
        told, the underlying response is simply abandoned.
        """
        model = model or self.default_model
        kwargs: dict[str, Any] = {
            "model": model,
            "max_tokens": max_tokens,
            "messages": _build_messages(system, user_message, messages),
            "stream": True,
        }
        if temperature is not None:
            kwargs["temperature"] = temperature

        try:
            stream = await self._call_with_retry(**kwargs)
        except (APIStatusError, APIConnectionError, APITimeoutError) as exc:
            raise ModelError(f"Streaming request to {model} failed: {exc}") from exc

        async for chunk in stream:
            choices = getattr(chunk, "choices", None) or []
            if not choices:
                continue
            token = getattr(choices[0].delta, "content", None)
            if token:
                yield token


# ── Dry run ─────────────────────────────────────────────────────────

_DRY_RUN_COMPETITORS = json.dumps({
    "competitors": [
        {
            "name": "DryRun Rival",
            "description": "Placeholder competitor returned in dry-run mode",
            "whyCompetes": "Serves the same users with a similar core offering",
            "url": "https://rival.example.com",
        },
        {
            "name": "Adjacent Tool",
            "description": "A partial match covering part of the workflow",
            "whyCompetes": "Partial match: overlaps on the main use case",
            "url": "https://adjacent.example.com",
        },
    ]
})

_DRY_RUN_PAGE = {
    "root": "home",
    "elements": {
        "home": {"type": "Stack", "props": {"direction": "vertical"},
                 "children": ["nav", "hero", "features"]},
        "nav": {"type": "Stack", "props": {"direction": "horizontal", "align": "center"},
                "children": ["logo", "cta"]},
        "logo": {"type": "Heading", "props": {"text": "Logo", "level": 3}, "children": []},
        "cta": {"type": "Button", "props": {"label": "Sign Up"}, "children": []},
        "hero": {"type": "Card", "props": {"title": "Hero"}, "children": ["hero-title", "banner"]},
        "hero-title": {"type": "Heading", "props": {"text": "Welcome", "level": 1}, "children": []},
        "banner": {"type": "Skeleton", "props": {"height": "200px"}, "children": []},
        "features": {"type": "Grid", "props": {"columns": 3}, "children": ["f1", "f2", "f3"]},
        "f1": {"type": "Card", "props": {"title": "Feature"}, "children": []},
        "f2": {"type": "Card", "props": {"title": "Feature"}, "children": []},
        "f3": {"type": "Card", "props": {"title": "Feature"}, "children": []},
    },
}

_DRY_RUN_DOCUMENTS: dict[str, str] = {
    "search": _DRY_RUN_COMPETITORS,
    "competitive-analysis": (
        "## Executive Summary\n[dry-run] The market has two relevant players.\n\n"
        "## Direct Competitors\n### DryRun Rival\n- **Overview**: Placeholder\n\n"
        "## Gap Analysis\n- Placeholder gap\n\n"
        "## Suggested Product Name\nDryRunner"
    ),
    "prd": "# PRD: DryRunner\n\n### I. Introduction\n[dry-run] Placeholder PRD.",
    "mvp-plan": "# MVP Plan: DryRunner\n\n## I. MVP Overview\n[dry-run] Placeholder plan.",
    "tech-spec": "# Technical Specification: DryRunner\n\n## 1. Overview\n[dry-run] Placeholder.",
    "mockup": (
        "## Home\nLanding page with hero and features.\n\n"
        f"```json\n{json.dumps(_DRY_RUN_PAGE, indent=2)}\n```\n"
    ),
    "summary": (
        "# Business Idea Summary\n\n## Core Concept\n[dry-run] Placeholder summary.\n\n"
        "## Problem Statement\n...\n\n## Target Audience\n...\n\n## Value Proposition\n...\n\n"
        "## Key Features/Offerings\n...\n\n## Business Model\n...\n\n"
        "## Market Positioning\n...\n\n## Success Metrics\n...\n\n"
        "Feel free to continue refining your idea or ask any questions!"
    ),
    "chat": "[dry-run] Thanks, noted. Tell me more about how you plan to reach customers.",
}

_LEAD_IN_RE = re.compile(r'Begin your reply with exactly this line: "([^"]+)"')


class DryRunClient:
    """Drop-in replacement for LLMClient that makes zero API calls.

    Picks a canned reply by recognising the system prompt, so the whole
    pipeline and the chat can run offline.
    """

    default_model = "dry-run"

    async def complete(
        self,
        *,
        system: str | None = None,
        user_message: str | None = None,
        messages: list[dict[str, Any]] | None = None,
        model: str | None = None,
        on_tokens: TokensCallback | None = None,
        **_: Any,
    ) -> Completion:
        msgs = _build_messages(system, user_message, messages)
        content = self._reply(system or "", msgs)
        logger.info("[dry-run] Completion (%d chars)", len(content))
        if on_tokens:
            on_tokens(0, 0)
        return Completion(content=content, model=model or self.default_model)

    async def stream_completion(
        self,
        *,
        system: str | None = None,
        user_message: str | None = None,
        messages: list[dict[str, Any]] | None = None,
        model: str | None = None,
        **_: Any,
    ) -> AsyncIterator[str]:
        content = self._reply(system or "", _build_messages(system, user_message, messages))
        for i in range(0, len(content), 24):
            yield content[i:i + 24]

    @staticmethod
    def _reply(system: str, messages: list[dict[str, Any]]) -> str:
        """Choose canned content from the prompts.

        Order matters: the mockup prompt lists components whose names also
        appear in other prompts.
        """
        if "competitive intelligence analyst" in system:
            return _DRY_RUN_DOCUMENTS["search"]
        if "wireframe designer" in system:
            return _DRY_RUN_DOCUMENTS["mockup"]
        if "Competitive Analysis Agent" in system:
            return _DRY_RUN_DOCUMENTS["competitive-analysis"]
        if "PRD Agent" in system:
            return _DRY_RUN_DOCUMENTS["prd"]
        if "MVP Planning agent" in system:
            return _DRY_RUN_DOCUMENTS["mvp-plan"]
        if "Spec-Driven Development" in system:
            return _DRY_RUN_DOCUMENTS["tech-spec"]
        if match := _LEAD_IN_RE.search(system):
            return (
                f"{match.group(1)}\n"
                "1. Who is your target audience?\n"
                "2. What problem are you solving for them?\n"
                "3. How will you make money?"
            )
        trailing = messages[-1] if messages else {}
        if trailing.get("role") == "system" and "# Business Idea Summary" in trailing.get("content", ""):
            return _DRY_RUN_DOCUMENTS["summary"]
        return _DRY_RUN_DOCUMENTS["chat"]
