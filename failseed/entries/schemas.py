from typing import Dict, List, Literal, Optional
from uuid import UUID
from datetime import datetime
from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

HintStatus = Literal["none", "tried", "skipped"]


class BaseSchema(BaseModel):
    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class ConversationMessage(BaseSchema):
    role: Literal["user", "assistant"]
    content: str
    timestamp: str


class EntryBase(BaseSchema):
    id: UUID
    text: str
    conversation_history: List[ConversationMessage] = []
    turn_count: int
    growth: Optional[str] = None
    hint: Optional[str] = None
    hint_status: HintStatus = "none"
    category: Optional[str] = None
    is_completed: bool = False
    created_at: datetime


class HintStatusUpdate(BaseSchema):
    hint_status: HintStatus


class DeleteResponse(BaseSchema):
    success: bool


class GrowthStats(BaseSchema):
    total: int
    hint_status_counts: Dict[str, int]
    category_counts: Dict[str, int]
    top_category: Optional[str] = None
    hint_try_rate: float = Field(0.0, ge=0.0, le=1.0)
