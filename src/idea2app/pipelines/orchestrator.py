"""Pipeline orchestrator: research → context → synthesis for each document type."""

from __future__ import annotations

import logging

from idea2app.mockups.catalog import build_mockup_system_prompt
from idea2app.pipelines.prompts import (
    COMPETITIVE_ANALYSIS_SYSTEM_PROMPT,
    MVP_PLAN_SYSTEM_PROMPT,
    PRD_SYSTEM_PROMPT,
    TECH_SPEC_SYSTEM_PROMPT,
    build_competitive_analysis_prompt,
    build_mockup_prompt,
    build_mvp_plan_prompt,
    build_prd_prompt,
    build_tech_spec_prompt,
)
from idea2app.pipelines.synthesis import SynthesisEngine
from idea2app.research.context import build_context
from idea2app.research.fetcher import SourceFetcher
from idea2app.schemas.artifacts import AnalysisResult, ArtifactType
from idea2app.schemas.research import CompetitorSearchResult, ExtractionResult
from idea2app.shared.errors import ExtractionError, SearchError
from idea2app.shared.progress import PipelineProgress

logger = logging.getLogger(__name__)

STEP_SEARCH = "Competitor search"
STEP_EXTRACT = "Page extraction"
STEP_SYNTHESIS = "Synthesis"


class PipelineOrchestrator:
    """Runs one document pipeline per call.

    Competitive analysis fans out to the research providers first; every
    other document is a single synthesis call over the idea plus the prior
    document, when one is given.  Prerequisite enforcement belongs to
    :class:`~idea2app.pipelines.service.ArtifactService`; here a missing
    prior document only shrinks the prompt.

    Pipeline flow (competitive analysis):
        search → extraction (only with competitors) → context → synthesis
    """

    def __init__(
        self,
        fetcher: SourceFetcher,
        engine: SynthesisEngine,
        progress: PipelineProgress | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.engine = engine
        self.progress = progress or PipelineProgress.quiet()

    # ------------------------------------------------------------------
    # Research
    # ------------------------------------------------------------------

    async def _search(self, idea: str, name: str) -> CompetitorSearchResult:
        self.progress.start_step(STEP_SEARCH)
        try:
            result = await self.fetcher.search_competitors(idea, name)
        except SearchError as exc:
            logger.warning("Competitor search failed, continuing without: %s", exc)
            self.progress.skip_step(STEP_SEARCH, str(exc))
            return CompetitorSearchResult()
        self.progress.log_event(STEP_SEARCH, f"Found {len(result.competitors)} competitors")
        self.progress.finish_step(STEP_SEARCH)
        return result

    async def _extract(self, search: CompetitorSearchResult) -> ExtractionResult:
        urls = [c.url for c in search.competitors if c.url]
        self.progress.start_step(STEP_EXTRACT)
        self.progress.update_step(STEP_EXTRACT, f"{len(urls)} URLs")
        try:
            result = await self.fetcher.extract_pages(urls)
        except ExtractionError as exc:
            logger.warning("Page extraction failed for %s, continuing without: %s", urls, exc)
            self.progress.skip_step(STEP_EXTRACT, str(exc))
            return ExtractionResult()
        for failed in result.failed:
            logger.warning("No content extracted from %s: %s", failed.url, failed.error)
        self.progress.log_event(STEP_EXTRACT, f"Extracted {len(result.results)}/{len(urls)} URLs")
        self.progress.finish_step(STEP_EXTRACT)
        return result

    # ------------------------------------------------------------------
    # Synthesis
    # ------------------------------------------------------------------

    async def _synthesize(
        self, doc_type: ArtifactType, system_prompt: str, user_prompt: str, model: str | None,
    ) -> AnalysisResult:
        step = f"{STEP_SYNTHESIS} ({doc_type.value})"
        self.progress.start_step(step)
        try:
            result = await self.engine.synthesize(
                doc_type.value, system_prompt, user_prompt, model=model,
                on_tokens=lambda inp, out: self.progress.record_tokens(step, inp, out),
            )
        except Exception as exc:
            self.progress.fail_step(step, str(exc))
            raise
        self.progress.finish_step(step)
        return result

    async def run_competitive_analysis(
        self, idea: str, name: str, *, model: str | None = None
    ) -> AnalysisResult:
        search = await self._search(idea, name)
        extracted = ExtractionResult()
        # Extraction depends on search output, so it never starts earlier.
        if search.competitors:
            extracted = await self._extract(search)
        context = build_context(search.competitors, extracted.results)
        return await self._synthesize(
            ArtifactType.COMPETITIVE_ANALYSIS,
            COMPETITIVE_ANALYSIS_SYSTEM_PROMPT,
            build_competitive_analysis_prompt(idea, name, context),
            model,
        )

    async def run_prd(
        self, idea: str, name: str, *, competitive_analysis: str | None = None,
        model: str | None = None,
    ) -> AnalysisResult:
        return await self._synthesize(
            ArtifactType.PRD, PRD_SYSTEM_PROMPT,
            build_prd_prompt(idea, name, competitive_analysis), model,
        )

    async def run_mvp_plan(
        self, idea: str, name: str, *, prd: str | None = None, model: str | None = None,
    ) -> AnalysisResult:
        return await self._synthesize(
            ArtifactType.MVP_PLAN, MVP_PLAN_SYSTEM_PROMPT,
            build_mvp_plan_prompt(idea, name, prd), model,
        )

    async def run_tech_spec(
        self, idea: str, name: str, *, prd: str | None = None, model: str | None = None,
    ) -> AnalysisResult:
        return await self._synthesize(
            ArtifactType.TECH_SPEC, TECH_SPEC_SYSTEM_PROMPT,
            build_tech_spec_prompt(idea, name, prd), model,
        )

    async def run_mockup(
        self, name: str, *, mvp_plan: str | None = None, model: str | None = None,
    ) -> AnalysisResult:
        return await self._synthesize(
            ArtifactType.MOCKUP, build_mockup_system_prompt(name),
            build_mockup_prompt(name, mvp_plan), model,
        )

    async def run(
        self,
        doc_type: ArtifactType,
        idea: str,
        name: str,
        *,
        prior: str | None = None,
        model: str | None = None,
    ) -> AnalysisResult:
        """Dispatch to the pipeline for ``doc_type``.

        ``prior`` is the content of the latest prerequisite document
        (competitive analysis for a PRD, PRD for an MVP plan or tech spec,
        MVP plan for a mockup) and is ignored for a competitive analysis.
        """
        match doc_type:
            case ArtifactType.COMPETITIVE_ANALYSIS:
                return await self.run_competitive_analysis(idea, name, model=model)
            case ArtifactType.PRD:
                return await self.run_prd(idea, name, competitive_analysis=prior, model=model)
            case ArtifactType.MVP_PLAN:
                return await self.run_mvp_plan(idea, name, prd=prior, model=model)
            case ArtifactType.TECH_SPEC:
                return await self.run_tech_spec(idea, name, prd=prior, model=model)
            case ArtifactType.MOCKUP:
                return await self.run_mockup(name, mvp_plan=prior, model=model)
        raise ValueError(f"Unknown artifact type: {doc_type!r}")
