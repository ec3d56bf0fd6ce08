"""Request-boundary coordination for artifact generation."""

from __future__ import annotations

import asyncio
import logging
import time

from idea2app.pipelines.orchestrator import PipelineOrchestrator
from idea2app.ports import ArtifactStore, CreditLedger, ProjectStore
from idea2app.schemas.artifacts import (
    CREDIT_COSTS,
    PREREQUISITES,
    AnalysisArtifact,
    ArtifactMetadata,
    ArtifactType,
)
from idea2app.shared.errors import (
    GenerationInProgressError,
    Idea2AppError,
    InsufficientCreditsError,
    MissingInputError,
    MissingPrerequisiteError,
    PipelineTimeoutError,
    ProjectNotFoundError,
)

logger = logging.getLogger(__name__)

DEFAULT_PIPELINE_TIMEOUT = 300.0


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def _log_failure(
    doc_type: ArtifactType, project_id: str, error: Idea2AppError, cost: int, started: float
) -> None:
    logger.warning(
        "[%s] project=%s error=%s credits=%d response_ms=%d: %s",
        doc_type.value, project_id, error.kind, cost, _elapsed_ms(started), error,
    )


class ArtifactService:
    """Generates, persists and edits artifacts for one project at a time.

    Order of checks for :meth:`generate`: project, inputs, prerequisite,
    in-flight guard, credits.  Nothing is charged for a request that fails
    one of them.  Credits consumed before a failed or timed-out synthesis
    are not refunded.
    """

    def __init__(
        self,
        *,
        orchestrator: PipelineOrchestrator,
        artifacts: ArtifactStore,
        projects: ProjectStore,
        credits: CreditLedger,
        timeout: float = DEFAULT_PIPELINE_TIMEOUT,
    ) -> None:
        self.orchestrator = orchestrator
        self.artifacts = artifacts
        self.projects = projects
        self.credits = credits
        self.timeout = timeout
        self._in_flight: set[tuple[str, ArtifactType]] = set()

    async def generate(
        self,
        project_id: str,
        doc_type: ArtifactType | str,
        *,
        model: str | None = None,
    ) -> AnalysisArtifact:
        doc_type = ArtifactType(doc_type)
        project = await self.projects.get(project_id)
        if project is None:
            raise ProjectNotFoundError(f"Project not found: {project_id}")
        if not project.idea.strip() or not project.name.strip():
            raise MissingInputError("Project idea and name are required")

        prior: str | None = None
        prerequisite = PREREQUISITES.get(doc_type)
        if prerequisite is not None:
            latest = await self.artifacts.latest(project_id, prerequisite)
            if latest is None or not latest.content.strip():
                raise MissingPrerequisiteError(doc_type.value, prerequisite.value)
            prior = latest.content

        key = (project_id, doc_type)
        if key in self._in_flight:
            raise GenerationInProgressError(project_id, doc_type.value)
        self._in_flight.add(key)
        started = time.monotonic()
        cost = CREDIT_COSTS[doc_type]
        try:
            if not await self.credits.try_consume(
                project.user_id, cost, doc_type.value,
                f'{doc_type.value} generation for "{project.name}"',
            ):
                raise InsufficientCreditsError(project.user_id, cost, doc_type.value)

            try:
                result = await asyncio.wait_for(
                    self.orchestrator.run(
                        doc_type, project.idea, project.name, prior=prior, model=model,
                    ),
                    timeout=self.timeout,
                )
            except asyncio.TimeoutError as exc:
                error = PipelineTimeoutError(
                    f"{doc_type.value} generation exceeded {self.timeout:.0f}s"
                )
                _log_failure(doc_type, project_id, error, cost, started)
                raise error from exc
            except Idea2AppError as exc:
                _log_failure(doc_type, project_id, exc, cost, started)
                raise

            artifact = await self.artifacts.create(
                doc_type, project_id, result.content,
                ArtifactMetadata(source=result.source, model=result.model),
            )
            await self.projects.mark_active(project_id)
        finally:
            self._in_flight.discard(key)

        logger.info(
            "[%s] project=%s model=%s credits=%d chars=%d response_ms=%d",
            doc_type.value, project_id, result.model, cost, len(result.content),
            _elapsed_ms(started),
        )
        return artifact

    async def update_artifact(self, artifact_id: str, content: str) -> AnalysisArtifact:
        """Explicit user edit of a stored artifact."""
        if not content or not content.strip():
            raise MissingInputError("Artifact content must not be empty")
        return await self.artifacts.update(artifact_id, content)
