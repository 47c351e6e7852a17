"""
Conversation lifecycle: start, continue and finalize a reflective conversation.

Every free-form user message goes through the size check and the danger filter
before anything else happens, so a rejected message never reaches the AI
provider or the entry store.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from failseed.conversation.ai_providers.base import ConversationAI, truncate_lines
from failseed.conversation.prompts.openai_prompts_templates import GROWTH_MAX_LINES
from failseed.conversation.safety import is_dangerous
from failseed.conversation.schemas import (
    ContinuationResult,
    ConversationReply,
    FinalizationReply,
    FinalizationResult,
)
from failseed.core.config import MAX_CONVERSATION_TURNS, MAX_INPUT_CHARS
from failseed.core.errors import (
    AlreadyCompleted,
    GenerationFailed,
    InputTooLarge,
    SafetyConcern,
)
from failseed.entries.db import append_turn, create_entry, finalize_entry, get_owned_entry
from failseed.entries.service import categorize_entry

logger = logging.getLogger(__name__)


# Helpers
def _message(role: str, content: str) -> Dict[str, Any]:
    return {
        "role": role,
        "content": content,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


def render_history(messages: List[Dict[str, Any]]) -> str:
    """Render history as "role: content" lines for the provider prompt."""
    return "\n".join(f"{m['role']}: {m['content']}" for m in messages)


def count_user_turns(messages: List[Dict[str, Any]]) -> int:
    return sum(1 for m in messages if m.get("role") == "user")


def screen_user_text(text: str, max_chars: Optional[int] = None) -> None:
    """
    Validates a user-supplied message before any side effect.

    Raises:
        InputTooLarge: If the text exceeds the configured cap.
        SafetyConcern: If the text contains a crisis phrase.
    """
    limit = MAX_INPUT_CHARS if max_chars is None else max_chars
    if limit and len(text) > limit:
        raise InputTooLarge(f"Messages are limited to {limit} characters.")
    if is_dangerous(text):
        logger.warning("Danger-content filter matched; skipping generation")
        raise SafetyConcern()


def _apply_turn_cap(result: ContinuationResult, turn: int, max_turns: int) -> bool:
    if max_turns and turn >= max_turns:
        return True
    return result.should_finalize


def _generate_reply(ai_service: ConversationAI, context: str, message: str, turn: int) -> ContinuationResult:
    try:
        return ai_service.continue_conversation(context, message, turn)
    except GenerationFailed:
        raise
    except Exception as e:
        logger.error(f"Conversation provider failed on turn {turn}: {e}")
        raise GenerationFailed() from e


def _generate_growth(ai_service: ConversationAI, context: str) -> FinalizationResult:
    try:
        return ai_service.finalize_conversation(context)
    except GenerationFailed:
        raise
    except Exception as e:
        logger.error(f"Finalization provider failed: {e}")
        raise GenerationFailed() from e


# Lifecycle
def start_conversation(
    db: Session,
    owner: str,
    text: str,
    ai_service: ConversationAI,
    max_turns: int = MAX_CONVERSATION_TURNS,
) -> ConversationReply:
    """
    Opens a new conversation from the user's first message.

    Args:
        db (Session): SQLAlchemy session.
        owner (str): Opaque owner identifier.
        text (str): The event the user wants to reflect on.
        ai_service (ConversationAI): Provider used for the reply.
        max_turns (int): Soft turn cap; 0 disables it.

    Returns:
        ConversationReply: The assistant reply and the new entry's ID.

    Raises:
        InputTooLarge, SafetyConcern: Before any side effect.
        GenerationFailed: If the provider fails; no entry is created.
    """
    screen_user_text(text)

    result = _generate_reply(ai_service, "", text, 1)
    entry = create_entry(
        db,
        text=text,
        owner=owner,
        messages=[_message("user", text), _message("assistant", result.message)],
    )
    logger.info(f"Started conversation {entry.id}")

    return ConversationReply(
        message=result.message,
        should_finalize=_apply_turn_cap(result, 1, max_turns),
        entry_id=entry.id,
    )


def continue_conversation(
    db: Session,
    owner: str,
    entry_id: UUID,
    message: str,
    ai_service: ConversationAI,
    max_turns: int = MAX_CONVERSATION_TURNS,
) -> ConversationReply:
    """
    Appends one turn to an ongoing conversation.

    Raises:
        InputTooLarge, SafetyConcern: Before any lookup or side effect.
        NotFound: If the entry does not exist for the owner.
        AlreadyCompleted: If the conversation was finalized.
        GenerationFailed: If the provider fails; the entry is unchanged.
        ConcurrentUpdate: If another request appended to the entry first.
    """
    screen_user_text(message)

    entry = get_owned_entry(db, entry_id, owner)
    if entry.is_completed:
        raise AlreadyCompleted()

    history = list(entry.conversation_history or [])
    turn = count_user_turns(history) + 1

    result = _generate_reply(ai_service, render_history(history), message, turn)
    append_turn(
        db,
        entry_id,
        owner,
        new_messages=[_message("user", message), _message("assistant", result.message)],
        turn_count=turn,
    )
    logger.info(f"Conversation {entry_id} advanced to turn {turn}")

    return ConversationReply(
        message=result.message,
        should_finalize=_apply_turn_cap(result, turn, max_turns),
        entry_id=entry_id,
    )


def finalize_conversation(
    db: Session,
    owner: str,
    entry_id: UUID,
    ai_service: ConversationAI,
) -> FinalizationReply:
    """
    Distills the conversation into growth/hint and completes the entry.

    Raises:
        NotFound: If the entry does not exist for the owner.
        AlreadyCompleted: If the conversation was finalized before.
        GenerationFailed: If the provider fails; the entry stays ongoing.
    """
    entry = get_owned_entry(db, entry_id, owner)
    if entry.is_completed:
        raise AlreadyCompleted()

    result = _generate_growth(ai_service, render_history(entry.conversation_history or []))
    growth = truncate_lines(result.growth or "", GROWTH_MAX_LINES)
    if not growth:
        logger.error(f"Finalization provider returned an empty growth for {entry_id}")
        raise GenerationFailed()
    hint: Optional[str] = result.hint or None
    category = categorize_entry(entry.text, growth)

    finalize_entry(db, entry_id, owner, growth=growth, hint=hint, category=category)
    logger.info(f"Finalized conversation {entry_id} in category {category}")

    return FinalizationReply(growth=growth, hint=hint, entry_id=entry_id)
