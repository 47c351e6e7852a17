import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, String, Text, Integer, Boolean, DateTime, JSON, Uuid
from failseed.core.database import Base


class Entry(Base):
    __tablename__ = "entries"

    id = Column(Uuid(as_uuid=True), primary_key=True, index=True, default=uuid.uuid4)
    owner = Column(String, index=True, nullable=False)  # "user:<uuid>" or "guest:<token>"

    text = Column(Text, nullable=False)
    conversation_history = Column(JSON, nullable=False, default=list)  # [{role, content, timestamp}]
    turn_count = Column(Integer, nullable=False, default=1)

    growth = Column(Text, nullable=True)
    hint = Column(Text, nullable=True)
    hint_status = Column(String, nullable=False, default="none")  # none, tried, skipped
    category = Column(String, nullable=True)
    is_completed = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}
