"""Pydantic models for the prompt-refinement chat."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class ChatRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ConversationStage(str, Enum):
    """Phase of the refinement conversation that drives the next model call."""

    INITIAL = "initial"
    QUESTIONS = "questions"
    GATHERING = "gathering"
    SUMMARY = "summary"
    POST_SUMMARY = "post_summary"


class ConversationStatus(str, Enum):
    """Coarse status shown alongside a history page."""

    INITIAL = "initial"
    REFINING = "refining"
    SUMMARIZED = "summarized"


class MessageMetadata(BaseModel):
    model: str | None = None
    stage: str | None = None
    responded_at: datetime | None = None


class ChatMessage(BaseModel):
    """One append-only chat message."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    project_id: str
    role: ChatRole
    content: str
    metadata: MessageMetadata | None = None
    created_at: datetime | None = Field(default_factory=lambda: datetime.now(timezone.utc))


class StageDecision(BaseModel):
    """Which stage governs the next turn and the prompts to send for it."""

    stage: ConversationStage
    system_prompt: str
    # Extra system message appended after the history (summary template).
    instruction: str | None = None

    @property
    def overwrites_description(self) -> bool:
        return self.stage is ConversationStage.SUMMARY


class ChatTurnResult(BaseModel):
    """Outcome of one answered chat turn."""

    user_message: ChatMessage
    assistant_message: ChatMessage
    stage: ConversationStage
    status: ConversationStatus
    summary: str | None = None


class ChatHistoryPage(BaseModel):
    messages: list[ChatMessage] = []
    has_more: bool = False
    cursor: datetime | None = None
    status: ConversationStatus = ConversationStatus.INITIAL


# ── Streaming events ─────────────────────────────────────────────────


class StartEvent(BaseModel):
    type: Literal["start"] = "start"
    user_message: ChatMessage


class TokenEvent(BaseModel):
    type: Literal["token"] = "token"
    content: str


class DoneEvent(BaseModel):
    type: Literal["done"] = "done"
    user_message: ChatMessage
    assistant_message: ChatMessage
    stage: ConversationStatus
    summary: str | None = None


class ErrorEvent(BaseModel):
    type: Literal["error"] = "error"
    error: str
    kind: str = "server_error"


ChatStreamEvent = Annotated[
    Union[StartEvent, TokenEvent, DoneEvent, ErrorEvent],
    Field(discriminator="type"),
]


class StreamOutcome(BaseModel):
    """What a client ends up with after consuming a chat event stream."""

    content: str = ""
    finished: bool = False
    error: str | None = None
    user_message: ChatMessage | None = None
    assistant_message: ChatMessage | None = None
    status: ConversationStatus | None = None
    summary: str | None = None
