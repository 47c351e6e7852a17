from functools import lru_cache
import logging

from failseed.conversation.ai_providers.base import ConversationAI, PromptPolicy
from failseed.conversation.ai_providers.openai import OpenAIConversationAI

logger = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def _chatgpt() -> ConversationAI:
    logger.info("Initializing OpenAI conversation provider")
    return OpenAIConversationAI(policy=PromptPolicy())


def get_ai_service() -> ConversationAI:
    """
    FastAPI dependency that returns the conversation AI provider.
    """
    return _chatgpt()
