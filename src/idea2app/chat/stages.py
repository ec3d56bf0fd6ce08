"""Decide which conversation stage drives the next chat turn."""

from __future__ import annotations

from idea2app.chat.prompts import (
    IDEA_SUMMARY_PROMPT,
    POST_SUMMARY_SYSTEM,
    PROMPT_CHAT_SYSTEM,
    QUESTIONS_SYSTEM_PROMPT,
)
from idea2app.schemas.chat import (
    ChatMessage,
    ChatRole,
    ConversationStage,
    ConversationStatus,
    StageDecision,
)

IDEA_REVISION_KEYWORDS = (
    "change", "update", "modify", "different", "instead", "actually", "rather",
    "target", "audience", "feature", "problem", "solution", "model", "pricing",
    "price", "market", "customer", "user", "business", "revenue", "competitor",
)

# Messages longer than this are treated as idea revisions
REVISION_LENGTH_THRESHOLD = 50


def has_summary(history: list[ChatMessage]) -> bool:
    return any(
        m.role is ChatRole.ASSISTANT and m.metadata is not None
        and m.metadata.stage == ConversationStage.SUMMARY.value
        for m in history
    )


def is_idea_revision(message: str) -> bool:
    """True for long messages or when any word contains a revision keyword."""
    if len(message) > REVISION_LENGTH_THRESHOLD:
        return True
    words = message.lower().split()
    return any(keyword in word for keyword in IDEA_REVISION_KEYWORDS for word in words)


def classify_stage(
    history: list[ChatMessage], is_initial: bool, message: str
) -> StageDecision:
    """Pick the stage and prompts for the next assistant reply.

    ``history`` includes the just-persisted user message.
    """
    if is_initial:
        return StageDecision(stage=ConversationStage.QUESTIONS, system_prompt=QUESTIONS_SYSTEM_PROMPT)

    summarized = has_summary(history)
    if not summarized and len(history) >= 2:
        return StageDecision(
            stage=ConversationStage.SUMMARY,
            system_prompt=PROMPT_CHAT_SYSTEM,
            instruction=IDEA_SUMMARY_PROMPT,
        )

    if summarized:
        if is_idea_revision(message):
            return StageDecision(
                stage=ConversationStage.SUMMARY,
                system_prompt=POST_SUMMARY_SYSTEM,
                instruction=IDEA_SUMMARY_PROMPT,
            )
        return StageDecision(stage=ConversationStage.POST_SUMMARY, system_prompt=POST_SUMMARY_SYSTEM)

    return StageDecision(stage=ConversationStage.GATHERING, system_prompt=PROMPT_CHAT_SYSTEM)


def conversation_status(messages: list[ChatMessage]) -> ConversationStatus:
    """Status shown with a history page, from its most recent assistant message."""
    if not messages:
        return ConversationStatus.INITIAL
    for message in reversed(messages):
        if message.role is ChatRole.ASSISTANT:
            stage = message.metadata.stage if message.metadata else None
            if stage == ConversationStage.SUMMARY.value:
                return ConversationStatus.SUMMARIZED
            break
    return ConversationStatus.REFINING
