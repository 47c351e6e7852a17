from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Mapping

import failseed.conversation.prompts.openai_prompts_templates as prompts
from failseed.conversation.schemas import ContinuationResult, FinalizationResult


@dataclass(frozen=True)
class PromptPolicy:
    """Prompt wording and sampling settings handed to a provider at construction."""

    conversation_system_prompt: str = prompts.CONVERSATION_SYSTEM_PROMPT
    first_turn_template: str = prompts.CONVERSATION_FIRST_TURN_TEMPLATE
    conversation_template: str = prompts.CONVERSATION_USER_TEMPLATE
    turn_guidance: Mapping[int, str] = field(default_factory=lambda: dict(prompts.TURN_GUIDANCE))
    late_turn_guidance: str = prompts.LATE_TURN_GUIDANCE
    finalization_system_prompt: str = prompts.FINALIZATION_SYSTEM_PROMPT
    finalization_template: str = prompts.FINALIZATION_USER_TEMPLATE
    growth_max_lines: int = prompts.GROWTH_MAX_LINES
    conversation_temperature: float = 0.8
    finalization_temperature: float = 0.8
    conversation_max_tokens: int = 800
    finalization_max_tokens: int = 900

    def guidance_for(self, turn: int) -> str:
        if turn in self.turn_guidance:
            return self.turn_guidance[turn]
        return self.late_turn_guidance.format(turn=turn)

    def conversation_prompt(self, context: str, message: str, turn: int) -> str:
        guidance = self.guidance_for(turn)
        if not context:
            return self.first_turn_template.format(message=message, guidance=guidance)
        return self.conversation_template.format(context=context, message=message, guidance=guidance)

    def finalization_prompt(self, context: str) -> str:
        return self.finalization_template.format(context=context)


def truncate_lines(text: str, max_lines: int) -> str:
    """Keep at most `max_lines` lines of text."""
    lines = text.strip().split("\n")
    return "\n".join(lines[:max_lines])


class ConversationAI(ABC):
    """Gateway to a generative-text provider for the two conversation modes."""

    model_tag: str

    @abstractmethod
    def continue_conversation(self, context: str, message: str, turn: int) -> ContinuationResult:
        """
        Produce the assistant's next reply.

        Args:
            context (str): Prior history rendered as "role: content" lines; empty on the first turn.
            message (str): The new user message.
            turn (int): The turn number this message starts.

        Raises:
            GenerationFailed: On any provider or parsing failure.
        """

    @abstractmethod
    def finalize_conversation(self, context: str) -> FinalizationResult:
        """
        Distill the whole conversation into growth and an optional hint.

        Raises:
            GenerationFailed: On any provider or parsing failure.
        """
