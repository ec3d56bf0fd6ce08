"""Single-file JSON implementation of every store port.

Used by the CLI and the tests.  Without a path the state only lives in
memory.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel

from idea2app.ports import ArtifactStore, ChatStore, CreditLedger, ProjectStore
from idea2app.schemas.artifacts import AnalysisArtifact, ArtifactMetadata, ArtifactType, Project
from idea2app.schemas.chat import ChatMessage, ChatRole, MessageMetadata
from idea2app.shared.errors import ArtifactNotFoundError

logger = logging.getLogger(__name__)


class CreditEntry(BaseModel):
    user_id: str
    amount: int
    action: str
    description: str = ""
    at: datetime


class LocalState(BaseModel):
    """Everything the local store persists."""

    projects: dict[str, Project] = {}
    artifacts: list[AnalysisArtifact] = []
    messages: list[ChatMessage] = []
    balances: dict[str, int] = {}
    credit_log: list[CreditEntry] = []


class LocalStore(ArtifactStore, ChatStore, ProjectStore, CreditLedger):
    """In-process store, optionally mirrored to a JSON file after each write."""

    def __init__(self, path: str | Path | None = None) -> None:
        self.path = Path(path) if path else None
        if self.path and self.path.exists():
            self.state = LocalState.model_validate_json(self.path.read_text())
            logger.debug("Loaded local state from %s", self.path)
        else:
            self.state = LocalState()

    def _save(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(self.state.model_dump_json(indent=2))

    # ── seeding ──────────────────────────────────────────────────────

    def ensure_project(self, project: Project, *, credits: int = 0) -> Project:
        """Insert the project (and the owner's balance) unless already present."""
        existing = self.state.projects.get(project.id)
        if existing is not None:
            return existing
        self.state.projects[project.id] = project
        self.state.balances.setdefault(project.user_id, credits)
        self._save()
        return project

    def balance(self, user_id: str) -> int:
        return self.state.balances.get(user_id, 0)

    # ── ArtifactStore ────────────────────────────────────────────────

    async def create(
        self,
        type: ArtifactType,
        project_id: str,
        content: str,
        metadata: ArtifactMetadata,
    ) -> AnalysisArtifact:
        artifact = AnalysisArtifact(
            project_id=project_id, type=type, content=content, metadata=metadata,
        )
        self.state.artifacts.append(artifact)
        self._save()
        return artifact

    async def list_by_project(
        self, project_id: str, type: ArtifactType | None = None
    ) -> list[AnalysisArtifact]:
        matching = [
            a for a in self.state.artifacts
            if a.project_id == project_id and (type is None or a.type == type)
        ]
        # Stable on equal timestamps: later insertion counts as newer.
        indexed = list(enumerate(matching))
        indexed.sort(key=lambda pair: (pair[1].created_at, pair[0]), reverse=True)
        return [a for _, a in indexed]

    async def update(self, artifact_id: str, content: str) -> AnalysisArtifact:
        for i, artifact in enumerate(self.state.artifacts):
            if artifact.id == artifact_id:
                updated = artifact.model_copy(
                    update={"content": content, "updated_at": datetime.now(timezone.utc)}
                )
                self.state.artifacts[i] = updated
                self._save()
                return updated
        raise ArtifactNotFoundError(f"Artifact not found: {artifact_id}")

    # ── ChatStore ────────────────────────────────────────────────────

    async def append(
        self,
        project_id: str,
        role: ChatRole,
        content: str,
        metadata: MessageMetadata | None = None,
    ) -> ChatMessage:
        message = ChatMessage(
            project_id=project_id, role=role, content=content, metadata=metadata,
        )
        self.state.messages.append(message)
        self._save()
        return message

    async def list_messages(
        self,
        project_id: str,
        *,
        before: datetime | None = None,
        limit: int | None = None,
    ) -> list[ChatMessage]:
        messages = [m for m in self.state.messages if m.project_id == project_id]
        if before is not None:
            messages = [m for m in messages if m.created_at and m.created_at < before]
        if limit is not None:
            messages = messages[-limit:] if limit > 0 else []
        return messages

    # ── ProjectStore ─────────────────────────────────────────────────

    async def get(self, project_id: str) -> Project | None:
        return self.state.projects.get(project_id)

    async def update_description(self, project_id: str, description: str) -> None:
        project = self.state.projects[project_id]
        self.state.projects[project_id] = project.model_copy(
            update={"description": description, "updated_at": datetime.now(timezone.utc)}
        )
        self._save()

    async def mark_active(self, project_id: str) -> None:
        project = self.state.projects[project_id]
        self.state.projects[project_id] = project.model_copy(
            update={"status": "active", "updated_at": datetime.now(timezone.utc)}
        )
        self._save()

    # ── CreditLedger ─────────────────────────────────────────────────

    async def try_consume(
        self, user_id: str, amount: int, action: str, description: str
    ) -> bool:
        balance = self.state.balances.get(user_id, 0)
        if balance < amount:
            logger.info("Credit check failed: user=%s balance=%d needed=%d", user_id, balance, amount)
            return False
        self.state.balances[user_id] = balance - amount
        self.state.credit_log.append(
            CreditEntry(
                user_id=user_id, amount=amount, action=action,
                description=description, at=datetime.now(timezone.utc),
            )
        )
        self._save()
        return True
