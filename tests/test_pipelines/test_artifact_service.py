"""Tests for ArtifactService: gating, charging and persistence."""

from __future__ import annotations

import asyncio
import logging
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from idea2app.pipelines.service import ArtifactService
from idea2app.schemas.artifacts import AnalysisResult, ArtifactMetadata, ArtifactType, Project
from idea2app.shared.errors import (
    ArtifactNotFoundError,
    GenerationInProgressError,
    InsufficientCreditsError,
    MissingInputError,
    MissingPrerequisiteError,
    ModelError,
    PipelineTimeoutError,
    ProjectNotFoundError,
)
from idea2app.storage.local import LocalStore


def _orchestrator(content: str = "# Doc") -> SimpleNamespace:
    return SimpleNamespace(
        run=AsyncMock(return_value=AnalysisResult(content=content, model="test/model"))
    )


def _service(store: LocalStore, orchestrator, timeout: float = 300.0) -> ArtifactService:
    return ArtifactService(
        orchestrator=orchestrator, artifacts=store, projects=store, credits=store, timeout=timeout,
    )


class TestGenerate:
    @pytest.mark.asyncio
    async def test_competitive_analysis_persists_and_charges(self, store: LocalStore) -> None:
        orchestrator = _orchestrator("# CA")
        service = _service(store, orchestrator)

        artifact = await service.generate("proj-1", "competitive-analysis", model="m")

        assert artifact.type == ArtifactType.COMPETITIVE_ANALYSIS
        assert artifact.content == "# CA"
        assert artifact.metadata.model == "test/model"
        assert store.balance("user-1") == 95
        assert store.state.credit_log[-1].action == "competitive-analysis"
        assert (await store.get("proj-1")).status == "active"
        orchestrator.run.assert_awaited_once_with(
            ArtifactType.COMPETITIVE_ANALYSIS, "A marketplace for dog walkers", "WalkBuddy",
            prior=None, model="m",
        )

    @pytest.mark.asyncio
    async def test_prd_receives_latest_competitive_analysis(self, store: LocalStore) -> None:
        await store.create(ArtifactType.COMPETITIVE_ANALYSIS, "proj-1", "old CA", ArtifactMetadata())
        await store.create(ArtifactType.COMPETITIVE_ANALYSIS, "proj-1", "new CA", ArtifactMetadata())
        orchestrator = _orchestrator()

        await _service(store, orchestrator).generate("proj-1", ArtifactType.PRD)

        assert orchestrator.run.call_args.kwargs["prior"] == "new CA"
        assert store.balance("user-1") == 90

    @pytest.mark.asyncio
    async def test_missing_prerequisite_charges_nothing(self, store: LocalStore) -> None:
        orchestrator = _orchestrator()
        with pytest.raises(MissingPrerequisiteError) as info:
            await _service(store, orchestrator).generate("proj-1", ArtifactType.MOCKUP)

        assert info.value.prerequisite == "mvp-plan"
        assert store.balance("user-1") == 100
        orchestrator.run.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_insufficient_credits(self, project: Project) -> None:
        store = LocalStore()
        store.ensure_project(project, credits=3)
        orchestrator = _orchestrator()

        with pytest.raises(InsufficientCreditsError):
            await _service(store, orchestrator).generate("proj-1", ArtifactType.COMPETITIVE_ANALYSIS)

        assert store.balance("user-1") == 3
        orchestrator.run.assert_not_awaited()
        assert await store.list_by_project("proj-1") == []

    @pytest.mark.asyncio
    async def test_unknown_project(self, store: LocalStore) -> None:
        with pytest.raises(ProjectNotFoundError):
            await _service(store, _orchestrator()).generate("nope", ArtifactType.PRD)

    @pytest.mark.asyncio
    async def test_blank_idea_rejected(self) -> None:
        store = LocalStore()
        store.ensure_project(Project(id="p", user_id="u", name="X", idea="   "), credits=50)
        with pytest.raises(MissingInputError):
            await _service(store, _orchestrator()).generate("p", ArtifactType.COMPETITIVE_ANALYSIS)
        assert store.balance("u") == 50

    @pytest.mark.asyncio
    async def test_model_failure_not_refunded(self, store: LocalStore) -> None:
        orchestrator = SimpleNamespace(run=AsyncMock(side_effect=ModelError("empty")))
        with pytest.raises(ModelError):
            await _service(store, orchestrator).generate("proj-1", ArtifactType.COMPETITIVE_ANALYSIS)

        assert store.balance("user-1") == 95
        assert await store.list_by_project("proj-1") == []

    @pytest.mark.asyncio
    async def test_timeout(self, store: LocalStore) -> None:
        async def slow_run(*args, **kwargs):
            await asyncio.sleep(5)

        service = _service(store, SimpleNamespace(run=slow_run), timeout=0.01)
        with pytest.raises(PipelineTimeoutError):
            await service.generate("proj-1", ArtifactType.COMPETITIVE_ANALYSIS)
        assert service._in_flight == set()

    @pytest.mark.asyncio
    async def test_generation_logs_model_credits_and_timing(
        self, store: LocalStore, caplog: pytest.LogCaptureFixture
    ) -> None:
        caplog.set_level(logging.INFO, logger="idea2app.pipelines.service")
        await _service(store, _orchestrator()).generate("proj-1", ArtifactType.COMPETITIVE_ANALYSIS)

        messages = [r.getMessage() for r in caplog.records]
        lines = [m for m in messages if m.startswith("[competitive-analysis]")]
        assert len(lines) == 1
        assert "model=test/model" in lines[0]
        assert "credits=5" in lines[0]
        assert "response_ms=" in lines[0]

    @pytest.mark.asyncio
    async def test_timeout_logs_error_kind(
        self, store: LocalStore, caplog: pytest.LogCaptureFixture
    ) -> None:
        async def slow_run(*args, **kwargs):
            await asyncio.sleep(5)

        service = _service(store, SimpleNamespace(run=slow_run), timeout=0.01)
        with pytest.raises(PipelineTimeoutError):
            await service.generate("proj-1", ArtifactType.COMPETITIVE_ANALYSIS)

        warnings = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
        assert any("error=api_timeout" in m and "credits=5" in m for m in warnings)

    @pytest.mark.asyncio
    async def test_concurrent_same_type_rejected(self, store: LocalStore) -> None:
        release = asyncio.Event()

        async def gated_run(*args, **kwargs):
            await release.wait()
            return AnalysisResult(content="# CA", model="test/model")

        service = _service(store, SimpleNamespace(run=gated_run))
        first = asyncio.create_task(service.generate("proj-1", ArtifactType.COMPETITIVE_ANALYSIS))
        await asyncio.sleep(0)

        with pytest.raises(GenerationInProgressError):
            await service.generate("proj-1", ArtifactType.COMPETITIVE_ANALYSIS)

        release.set()
        artifact = await first
        assert artifact.content == "# CA"
        # Only the first request was charged
        assert store.balance("user-1") == 95


class TestUpdateArtifact:
    @pytest.mark.asyncio
    async def test_edit_replaces_content(self, store: LocalStore) -> None:
        created = await store.create(ArtifactType.PRD, "proj-1", "draft", ArtifactMetadata())
        updated = await _service(store, _orchestrator()).update_artifact(created.id, "edited")
        assert updated.content == "edited"
        assert updated.updated_at is not None
        assert (await store.latest("proj-1", ArtifactType.PRD)).content == "edited"

    @pytest.mark.asyncio
    async def test_empty_edit_rejected(self, store: LocalStore) -> None:
        with pytest.raises(MissingInputError):
            await _service(store, _orchestrator()).update_artifact("any", "  ")

    @pytest.mark.asyncio
    async def test_unknown_artifact_is_typed_not_found(self, store: LocalStore) -> None:
        with pytest.raises(ArtifactNotFoundError) as info:
            await _service(store, _orchestrator()).update_artifact("missing", "edited")
        assert info.value.kind == "not_found"
