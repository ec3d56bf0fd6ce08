"""Artifact and project models persisted through the store ports."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class ArtifactType(str, Enum):
    """Document types the pipeline can generate."""

    COMPETITIVE_ANALYSIS = "competitive-analysis"
    PRD = "prd"
    MVP_PLAN = "mvp-plan"
    TECH_SPEC = "tech-spec"
    MOCKUP = "mockup"


# Credits consumed per generation
CREDIT_COSTS: dict[ArtifactType, int] = {
    ArtifactType.COMPETITIVE_ANALYSIS: 5,
    ArtifactType.PRD: 10,
    ArtifactType.MVP_PLAN: 10,
    ArtifactType.TECH_SPEC: 10,
    ArtifactType.MOCKUP: 15,
}

# The artifact that must already exist before each type may be generated
PREREQUISITES: dict[ArtifactType, ArtifactType] = {
    ArtifactType.PRD: ArtifactType.COMPETITIVE_ANALYSIS,
    ArtifactType.MVP_PLAN: ArtifactType.PRD,
    ArtifactType.TECH_SPEC: ArtifactType.PRD,
    ArtifactType.MOCKUP: ArtifactType.MVP_PLAN,
}


class AnalysisResult(BaseModel):
    """Content produced by one synthesis call."""

    content: str
    source: str = "inhouse"
    model: str


class ArtifactMetadata(BaseModel):
    source: str = "inhouse"
    model: str = ""
    generated_at: datetime = Field(default_factory=_now)


class AnalysisArtifact(BaseModel):
    """One persisted version of a generated document."""

    id: str = Field(default_factory=_new_id)
    project_id: str
    type: ArtifactType
    content: str
    metadata: ArtifactMetadata = Field(default_factory=ArtifactMetadata)
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime | None = None


class Project(BaseModel):
    """The slice of a project the core reads and writes."""

    id: str = Field(default_factory=_new_id)
    user_id: str
    name: str
    idea: str
    # Canonical description; overwritten by each chat summary.
    description: str = ""
    status: str = "draft"
    updated_at: datetime = Field(default_factory=_now)
