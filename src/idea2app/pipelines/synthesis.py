"""The single model call that turns assembled context into a document."""

from __future__ import annotations

import logging

from idea2app.schemas.artifacts import AnalysisResult
from idea2app.shared.errors import ModelError
from idea2app.shared.llm_client import MAX_TOKENS, LLMClient, TokensCallback

logger = logging.getLogger(__name__)

SYNTHESIS_TEMPERATURE = 0.3


class SynthesisEngine:
    def __init__(self, client: LLMClient, *, default_model: str | None = None) -> None:
        self.client = client
        self.default_model = default_model or client.default_model

    async def synthesize(
        self,
        label: str,
        system_prompt: str,
        user_prompt: str,
        *,
        model: str | None = None,
        on_tokens: TokensCallback | None = None,
    ) -> AnalysisResult:
        """Run one synthesis call.

        Raises ``ModelError`` on provider failure or empty content; there is
        no degraded result for this step.
        """
        model = model or self.default_model
        logger.info("Synthesizing %s with %s (%d prompt chars)", label, model, len(user_prompt))
        completion = await self.client.complete(
            system=system_prompt,
            user_message=user_prompt,
            model=model,
            max_tokens=MAX_TOKENS,
            temperature=SYNTHESIS_TEMPERATURE,
            on_tokens=on_tokens,
        )
        if not completion.content.strip():
            raise ModelError(f"No content returned from {model} for {label}")
        return AnalysisResult(content=completion.content, model=model)
