"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from idea2app.schemas.artifacts import Project
from idea2app.schemas.config import ProviderSettings
from idea2app.shared.llm_client import LLMClient
from idea2app.storage.local import LocalStore


@pytest.fixture
def tmp_config(tmp_path: Path) -> Path:
    """Write a minimal valid project YAML and return its path."""
    cfg = tmp_path / "project.yml"
    cfg.write_text(
        """\
name: "WalkBuddy"
idea: "A marketplace for dog walkers"
data_file: "{data}"
output_directory: "{out}"
""".format(data=str(tmp_path / "data.json"), out=str(tmp_path / "output"))
    )
    return cfg


@pytest.fixture
def mock_llm_client() -> LLMClient:
    """Return an LLMClient with a mocked OpenAI SDK underneath."""
    client = LLMClient.__new__(LLMClient)
    client._client = AsyncMock()
    client.default_model = "test/model"
    return client


@pytest.fixture
def settings() -> ProviderSettings:
    return ProviderSettings(
        openrouter_api_key="or-key",
        perplexity_api_key="pplx-key",
        tavily_api_key="tvly-key",
    )


@pytest.fixture
def project() -> Project:
    return Project(
        id="proj-1", user_id="user-1", name="WalkBuddy", idea="A marketplace for dog walkers",
    )


@pytest.fixture
def store(project: Project) -> LocalStore:
    """In-memory store holding ``project`` with 100 credits."""
    s = LocalStore()
    s.ensure_project(project, credits=100)
    return s
