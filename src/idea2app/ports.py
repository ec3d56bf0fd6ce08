"""Abstract collaborator interfaces consumed by the generation core.

Concrete transports (SQL, HTTP, a JSON file) live elsewhere; ownership
scoping is the caller's responsibility.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from idea2app.schemas.artifacts import AnalysisArtifact, ArtifactMetadata, ArtifactType, Project
from idea2app.schemas.chat import ChatMessage, ChatRole, MessageMetadata


class ArtifactStore(ABC):
    """Persists generated documents."""

    @abstractmethod
    async def create(
        self,
        type: ArtifactType,
        project_id: str,
        content: str,
        metadata: ArtifactMetadata,
    ) -> AnalysisArtifact:
        """Store a new artifact version."""

    @abstractmethod
    async def list_by_project(
        self, project_id: str, type: ArtifactType | None = None
    ) -> list[AnalysisArtifact]:
        """Return artifacts for a project, newest first."""

    @abstractmethod
    async def update(self, artifact_id: str, content: str) -> AnalysisArtifact:
        """Replace an artifact's content (explicit user edit).

        Raises ``ArtifactNotFoundError`` for an unknown id.
        """

    async def latest(self, project_id: str, type: ArtifactType) -> AnalysisArtifact | None:
        """The current (most recently created) artifact of a type, if any."""
        artifacts = await self.list_by_project(project_id, type)
        return artifacts[0] if artifacts else None


class ChatStore(ABC):
    """Append-only store of refinement chat messages."""

    @abstractmethod
    async def append(
        self,
        project_id: str,
        role: ChatRole,
        content: str,
        metadata: MessageMetadata | None = None,
    ) -> ChatMessage:
        """Persist one message and return it with id and timestamp."""

    @abstractmethod
    async def list_messages(
        self,
        project_id: str,
        *,
        before: datetime | None = None,
        limit: int | None = None,
    ) -> list[ChatMessage]:
        """Messages oldest first.

        With ``limit``, returns the most recent ``limit`` messages created
        strictly before ``before`` (when given), still oldest first.
        """


class ProjectStore(ABC):
    """Reads projects and writes the fields the core owns."""

    @abstractmethod
    async def get(self, project_id: str) -> Project | None:
        """Return the project or None."""

    @abstractmethod
    async def update_description(self, project_id: str, description: str) -> None:
        """Overwrite the canonical idea description."""

    @abstractmethod
    async def mark_active(self, project_id: str) -> None:
        """Flag the project as having generated content."""


class CreditLedger(ABC):
    """External credit balance; consumption is atomic."""

    @abstractmethod
    async def try_consume(
        self, user_id: str, amount: int, action: str, description: str
    ) -> bool:
        """Deduct ``amount`` and return True, or return False if insufficient."""
