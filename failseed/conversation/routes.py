import logging

from fastapi import APIRouter, Depends, Security
from sqlalchemy.orm import Session

from failseed.auth.service import get_current_owner
from failseed.conversation.ai_providers.base import ConversationAI
from failseed.conversation.schemas import (
    ContinueConversationRequest,
    ConversationReply,
    ErrorResponse,
    FinalizationReply,
    FinalizeConversationRequest,
    SafetyConcernResponse,
    StartConversationRequest,
)
from failseed.conversation.service import (
    continue_conversation,
    finalize_conversation,
    start_conversation,
)
from failseed.core.database import get_db
from failseed.core.dependency import get_ai_service
from failseed.core.errors import FailSeedError, GenerationFailed

router = APIRouter(prefix="/api/conversation", tags=["Conversation"])
logger = logging.getLogger(__name__)


@router.post(
    "/start",
    response_model=ConversationReply,
    summary="Start a conversation",
    description="Open a reflective conversation from the user's first message and return the assistant's reply.",
    responses={
        200: {"description": "Conversation started."},
        400: {"model": SafetyConcernResponse, "description": "Message matched the danger-content filter."},
        401: {"model": ErrorResponse, "description": "Unauthorized."},
        413: {"model": ErrorResponse, "description": "Message too long."},
        500: {"model": ErrorResponse, "description": "Failed to generate a reply."},
    },
)
def start_conversation_route(
    body: StartConversationRequest,
    db: Session = Depends(get_db),
    owner: str = Security(get_current_owner),
    ai_service: ConversationAI = Depends(get_ai_service),
) -> ConversationReply:
    try:
        return start_conversation(db, owner, body.text, ai_service)
    except FailSeedError:
        raise
    except Exception as e:
        logger.exception(f"Error starting conversation: {e}")
        raise GenerationFailed()


@router.post(
    "/continue",
    response_model=ConversationReply,
    summary="Continue a conversation",
    description="Append the user's message to an ongoing conversation and return the assistant's reply.",
    responses={
        200: {"description": "Turn appended."},
        400: {"model": SafetyConcernResponse, "description": "Message matched the danger-content filter."},
        401: {"model": ErrorResponse, "description": "Unauthorized."},
        404: {"model": ErrorResponse, "description": "Conversation not found."},
        409: {"model": ErrorResponse, "description": "Conversation already finalized or updated concurrently."},
        413: {"model": ErrorResponse, "description": "Message too long."},
        500: {"model": ErrorResponse, "description": "Failed to generate a reply."},
    },
)
def continue_conversation_route(
    body: ContinueConversationRequest,
    db: Session = Depends(get_db),
    owner: str = Security(get_current_owner),
    ai_service: ConversationAI = Depends(get_ai_service),
) -> ConversationReply:
    try:
        return continue_conversation(db, owner, body.entry_id, body.message, ai_service)
    except FailSeedError:
        raise
    except Exception as e:
        logger.exception(f"Error continuing conversation {body.entry_id}: {e}")
        raise GenerationFailed()


@router.post(
    "/finalize",
    response_model=FinalizationReply,
    summary="Finalize a conversation",
    description="Distill the conversation into a growth insight and an optional hint, and complete the entry.",
    responses={
        200: {"description": "Conversation finalized."},
        401: {"model": ErrorResponse, "description": "Unauthorized."},
        404: {"model": ErrorResponse, "description": "Conversation not found."},
        409: {"model": ErrorResponse, "description": "Conversation already finalized."},
        500: {"model": ErrorResponse, "description": "Failed to extract the learning."},
    },
)
def finalize_conversation_route(
    body: FinalizeConversationRequest,
    db: Session = Depends(get_db),
    owner: str = Security(get_current_owner),
    ai_service: ConversationAI = Depends(get_ai_service),
) -> FinalizationReply:
    try:
        return finalize_conversation(db, owner, body.entry_id, ai_service)
    except FailSeedError:
        raise
    except Exception as e:
        logger.exception(f"Error finalizing conversation {body.entry_id}: {e}")
        raise GenerationFailed("Failed to extract the learning. Please wait a moment and try again.")
