"""Typed errors raised by the generation core.

Every error carries a ``kind`` string so the request boundary (CLI, web
handler) can map it to a status and user-facing copy without inspecting
messages.
"""

from __future__ import annotations


class Idea2AppError(Exception):
    """Base class for all errors the core surfaces to its callers."""

    kind = "server_error"


class ModelError(Idea2AppError):
    """A language-model call failed or returned no content."""

    kind = "ai_model_error"


class SearchError(Idea2AppError):
    """The competitor search provider failed or is not configured."""

    kind = "ai_model_error"


class ExtractionError(Idea2AppError):
    """The page extraction provider failed, timed out or is not configured."""

    kind = "api_timeout"


class InsufficientCreditsError(Idea2AppError):
    """The credit ledger refused to consume the requested amount."""

    kind = "insufficient_credits"

    def __init__(self, user_id: str, amount: int, action: str) -> None:
        super().__init__(
            f"Insufficient credits for {action!r}: user {user_id} needs {amount}"
        )
        self.user_id = user_id
        self.amount = amount
        self.action = action


class MissingInputError(Idea2AppError):
    """A required input (idea, name, message, …) was empty."""

    kind = "validation_error"


class MissingPrerequisiteError(Idea2AppError):
    """A dependent artifact was requested before its prerequisite exists."""

    kind = "validation_error"

    def __init__(self, artifact_type: str, prerequisite: str) -> None:
        super().__init__(
            f"Cannot generate {artifact_type} before a {prerequisite} exists"
        )
        self.artifact_type = artifact_type
        self.prerequisite = prerequisite


class ReconstructionError(Idea2AppError):
    """No usable UI spec could be rebuilt from mockup content."""

    kind = "validation_error"


class GenerationInProgressError(Idea2AppError):
    """Another generation of the same artifact type is already running."""

    kind = "conflict"

    def __init__(self, project_id: str, artifact_type: str) -> None:
        super().__init__(
            f"A {artifact_type} generation is already running for project {project_id}"
        )
        self.project_id = project_id
        self.artifact_type = artifact_type


class PipelineTimeoutError(Idea2AppError):
    """The outer generation deadline elapsed."""

    kind = "api_timeout"


class ProjectNotFoundError(Idea2AppError):
    """The referenced project does not exist in the project store."""

    kind = "not_found"


class ArtifactNotFoundError(Idea2AppError):
    """An artifact id did not match any stored artifact."""

    kind = "not_found"
