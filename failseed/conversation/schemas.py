from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


# Requests
class StartConversationRequest(BaseSchema):
    text: str = Field(..., min_length=1)


class ContinueConversationRequest(BaseSchema):
    entry_id: UUID
    message: str = Field(..., min_length=1)


class FinalizeConversationRequest(BaseSchema):
    entry_id: UUID


# Responses
class ConversationReply(BaseSchema):
    message: str
    should_finalize: bool
    entry_id: UUID


class FinalizationReply(BaseSchema):
    growth: str
    hint: Optional[str] = None
    entry_id: UUID


class SafetyConcernResponse(BaseModel):
    error: str = "safety_concern"
    message: str
    resources: List[str]


class ErrorResponse(BaseModel):
    error: str
    message: str


# Raw model output, validated right after the provider call
class ContinuationResult(BaseModel):
    message: str = Field(..., min_length=1)
    should_finalize: bool = Field(False, alias="shouldFinalize")

    class Config:
        populate_by_name = True

    @field_validator("message")
    @classmethod
    def _message_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("message must not be blank")
        return value


class FinalizationResult(BaseModel):
    growth: str = Field(..., min_length=1)
    hint: Optional[str] = None

    @field_validator("growth")
    @classmethod
    def _growth_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("growth must not be blank")
        return value

    @field_validator("hint")
    @classmethod
    def _blank_hint_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()
