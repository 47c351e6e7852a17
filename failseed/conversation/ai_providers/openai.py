from __future__ import annotations

import json
import logging
from typing import Any, List, Optional

from openai import OpenAI
from pydantic import ValidationError

from failseed.conversation.ai_providers.base import ConversationAI, PromptPolicy, truncate_lines
from failseed.conversation.schemas import ContinuationResult, FinalizationResult
from failseed.core.config import OPENAI_API_KEY, OPENAI_CHAT_MODEL, OPENAI_TIMEOUT_SECONDS
from failseed.core.errors import GenerationFailed

logger = logging.getLogger(__name__)


def _parse_json_object(raw: Optional[str]) -> dict[str, Any]:
    """Parse a JSON object from model output, tolerating code fences and surrounding prose."""
    if not raw or not raw.strip():
        raise ValueError("Empty content")
    s = raw.strip()
    if s.startswith("```"):
        s = s.strip("`\n ")
        if s.startswith("json"):
            s = s[4:]
    try:
        data = json.loads(s)
    except json.JSONDecodeError:
        start = s.find("{")
        end = s.rfind("}")
        if start == -1 or end <= start:
            raise
        data = json.loads(s[start : end + 1])
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data


class OpenAIConversationAI(ConversationAI):
    """Chat Completions backed gateway that speaks Pydantic schemas."""

    model_tag = "chatgpt"

    def __init__(
        self,
        policy: Optional[PromptPolicy] = None,
        client: Optional[OpenAI] = None,
        model: Optional[str] = None,
    ):
        self.policy = policy or PromptPolicy()
        self.model = model or OPENAI_CHAT_MODEL
        if client is None:
            if not OPENAI_API_KEY:
                raise RuntimeError("Missing OPENAI_API_KEY in environment")
            # Retries belong to the caller
            client = OpenAI(api_key=OPENAI_API_KEY, timeout=OPENAI_TIMEOUT_SECONDS, max_retries=0)
        self.client = client

    def _chat_json(self, messages: List[dict[str, Any]], *, temperature: float, max_tokens: int) -> dict[str, Any]:
        """Run one chat completion in JSON mode and parse the first choice."""
        try:
            resp = self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                response_format={"type": "json_object"},
                temperature=temperature,
                max_tokens=max_tokens,
            )
            content = resp.choices[0].message.content
            return _parse_json_object(content)
        except Exception as e:
            logger.error(f"OpenAI chat completion failed: {e}")
            raise GenerationFailed() from e

    def continue_conversation(self, context: str, message: str, turn: int) -> ContinuationResult:
        messages = [
            {"role": "system", "content": self.policy.conversation_system_prompt},
            {"role": "user", "content": self.policy.conversation_prompt(context, message, turn)},
        ]
        raw = self._chat_json(
            messages,
            temperature=self.policy.conversation_temperature,
            max_tokens=self.policy.conversation_max_tokens,
        )
        try:
            return ContinuationResult.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Continuation response did not match schema: {e}")
            raise GenerationFailed() from e

    def finalize_conversation(self, context: str) -> FinalizationResult:
        messages = [
            {"role": "system", "content": self.policy.finalization_system_prompt},
            {"role": "user", "content": self.policy.finalization_prompt(context)},
        ]
        raw = self._chat_json(
            messages,
            temperature=self.policy.finalization_temperature,
            max_tokens=self.policy.finalization_max_tokens,
        )
        try:
            result = FinalizationResult.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Finalization response did not match schema: {e}")
            raise GenerationFailed() from e

        result.growth = truncate_lines(result.growth, self.policy.growth_max_lines)
        return result
