"""The idea-refinement chat: one turn per user message.

Each turn consumes a credit, persists the user's message, classifies the
stage from the stored history, asks the model and persists the reply.  A
``summary`` reply also becomes the project's canonical description.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, AsyncIterator

from idea2app.chat.dedupe import dedupe_fuzzy
from idea2app.chat.stages import classify_stage, conversation_status
from idea2app.ports import ChatStore, CreditLedger, ProjectStore
from idea2app.schemas.artifacts import Project
from idea2app.schemas.chat import (
    ChatHistoryPage,
    ChatMessage,
    ChatRole,
    ChatStreamEvent,
    ChatTurnResult,
    ConversationStage,
    ConversationStatus,
    DoneEvent,
    ErrorEvent,
    MessageMetadata,
    StageDecision,
    StartEvent,
    TokenEvent,
)
from idea2app.shared.errors import (
    Idea2AppError,
    InsufficientCreditsError,
    MissingInputError,
    ModelError,
    ProjectNotFoundError,
)
from idea2app.shared.llm_client import DEFAULT_MODEL, LLMClient

logger = logging.getLogger(__name__)

CHAT_CREDIT_COST = 1
CHAT_ACTION = "prompt_chat"
CHAT_MAX_TOKENS = 2048

DEFAULT_PAGE_SIZE = 40
MIN_PAGE_SIZE = 10
MAX_PAGE_SIZE = 200


def clamp_page_size(value: int | str | None) -> int:
    try:
        size = int(value) if value is not None else DEFAULT_PAGE_SIZE
    except (TypeError, ValueError):
        return DEFAULT_PAGE_SIZE
    return min(max(size, MIN_PAGE_SIZE), MAX_PAGE_SIZE)


@dataclass
class _Turn:
    project: Project
    user_message: ChatMessage
    decision: StageDecision
    messages: list[dict[str, Any]]
    model: str
    started: float

    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self.started) * 1000)


def _log_failure(turn: _Turn, error: Idea2AppError) -> None:
    logger.warning(
        "[PromptChat] project=%s model=%s error=%s credits=%d response_ms=%d: %s",
        turn.project.id, turn.model, error.kind, CHAT_CREDIT_COST, turn.elapsed_ms(), error,
    )


def _model_messages(history: list[ChatMessage], decision: StageDecision) -> list[dict[str, Any]]:
    messages: list[dict[str, Any]] = [
        {"role": m.role.value, "content": m.content}
        for m in history
        if m.role in (ChatRole.USER, ChatRole.ASSISTANT)
    ]
    if decision.instruction:
        messages.append({"role": "system", "content": decision.instruction})
    return messages


class PromptChatService:
    """Runs refinement chat turns against the stores and one model client."""

    def __init__(
        self,
        *,
        projects: ProjectStore,
        chats: ChatStore,
        credits: CreditLedger,
        client: LLMClient,
        model: str = DEFAULT_MODEL,
    ) -> None:
        self.projects = projects
        self.chats = chats
        self.credits = credits
        self.client = client
        self.model = model

    async def _get_project(self, project_id: str) -> Project:
        project = await self.projects.get(project_id)
        if project is None:
            raise ProjectNotFoundError(f"Project not found: {project_id}")
        return project

    async def _prepare(
        self, project_id: str, message: str, is_initial: bool, model: str | None
    ) -> _Turn:
        started = time.monotonic()
        if not project_id or not message or not message.strip():
            raise MissingInputError("projectId and message are required")

        project = await self._get_project(project_id)

        if not await self.credits.try_consume(
            project.user_id, CHAT_CREDIT_COST, CHAT_ACTION, "Prompt chat message"
        ):
            raise InsufficientCreditsError(project.user_id, CHAT_CREDIT_COST, CHAT_ACTION)

        # Persisted before the history read so the classifier counts it.
        user_message = await self.chats.append(project_id, ChatRole.USER, message)
        history = await self.chats.list_messages(project_id)
        decision = classify_stage(history, is_initial, message)
        logger.debug(
            "Chat turn project=%s history=%d stage=%s",
            project_id, len(history), decision.stage.value,
        )
        return _Turn(
            project=project,
            user_message=user_message,
            decision=decision,
            messages=_model_messages(history, decision),
            model=model or self.model,
            started=started,
        )

    async def _finish(self, turn: _Turn, content: str) -> ChatTurnResult:
        stage = turn.decision.stage
        assistant_message = await self.chats.append(
            turn.project.id,
            ChatRole.ASSISTANT,
            content,
            MessageMetadata(
                model=turn.model, stage=stage.value, responded_at=datetime.now(timezone.utc),
            ),
        )
        summary: str | None = None
        if turn.decision.overwrites_description and content:
            await self.projects.update_description(turn.project.id, content)
            summary = content

        logger.info(
            "[PromptChat] project=%s model=%s stage=%s credits=%d response_ms=%d",
            turn.project.id, turn.model, stage.value, CHAT_CREDIT_COST, turn.elapsed_ms(),
        )
        return ChatTurnResult(
            user_message=turn.user_message,
            assistant_message=assistant_message,
            stage=stage,
            status=(
                ConversationStatus.SUMMARIZED
                if stage is ConversationStage.SUMMARY
                else ConversationStatus.REFINING
            ),
            summary=summary,
        )

    async def send(
        self,
        project_id: str,
        message: str,
        *,
        is_initial: bool = False,
        model: str | None = None,
    ) -> ChatTurnResult:
        """Run one turn and return both persisted messages.

        Raises ``ModelError`` if the model fails; the credit and the user's
        message are not rolled back.
        """
        turn = await self._prepare(project_id, message, is_initial, model)
        try:
            completion = await self.client.complete(
                system=turn.decision.system_prompt,
                messages=turn.messages,
                model=turn.model,
                max_tokens=CHAT_MAX_TOKENS,
            )
        except Idea2AppError as exc:
            _log_failure(turn, exc)
            raise
        return await self._finish(turn, completion.content)

    async def stream(
        self,
        project_id: str,
        message: str,
        *,
        is_initial: bool = False,
        model: str | None = None,
    ) -> AsyncIterator[ChatStreamEvent]:
        """Run one turn as a stream of ``start``/``token``/``done``/``error`` events.

        Validation, project and credit failures raise here, before any event.
        Failures after ``start`` arrive as a final ``error`` event.
        """
        turn = await self._prepare(project_id, message, is_initial, model)
        return self._stream_turn(turn)

    async def _stream_turn(self, turn: _Turn) -> AsyncIterator[ChatStreamEvent]:
        yield StartEvent(user_message=turn.user_message)
        content = ""
        try:
            async for token in self.client.stream_completion(
                system=turn.decision.system_prompt,
                messages=turn.messages,
                model=turn.model,
                max_tokens=CHAT_MAX_TOKENS,
            ):
                content += token
                yield TokenEvent(content=token)
            if not content.strip():
                raise ModelError(f"No content returned from {turn.model}")
            result = await self._finish(turn, content)
        except Idea2AppError as exc:
            _log_failure(turn, exc)
            yield ErrorEvent(error=str(exc), kind=exc.kind)
            return
        except Exception as exc:
            logger.exception("Prompt chat stream error")
            yield ErrorEvent(error=str(exc) or "Failed to generate chat response")
            return

        yield DoneEvent(
            user_message=result.user_message,
            assistant_message=result.assistant_message,
            stage=result.status,
            summary=result.summary,
        )

    async def history(
        self,
        project_id: str,
        *,
        limit: int | str | None = None,
        before: datetime | None = None,
    ) -> ChatHistoryPage:
        """One page of history, oldest first, with fuzzy duplicates removed.

        ``cursor`` is the timestamp to pass as ``before`` for the next
        (older) page.
        """
        if not project_id:
            raise MissingInputError("projectId is required")
        await self._get_project(project_id)

        page_size = clamp_page_size(limit)
        rows = await self.chats.list_messages(project_id, before=before, limit=page_size + 1)
        has_more = len(rows) > page_size
        if has_more:
            rows = rows[1:]

        messages = dedupe_fuzzy(rows)
        return ChatHistoryPage(
            messages=messages,
            has_more=has_more,
            cursor=messages[0].created_at if messages else None,
            status=conversation_status(messages),
        )
