import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from failseed.conversation.ai_providers.base import ConversationAI  # noqa: E402
from failseed.conversation.schemas import ContinuationResult, FinalizationResult  # noqa: E402
from failseed.core.database import Base, get_db  # noqa: E402
from failseed.core.dependency import get_ai_service  # noqa: E402
from failseed.core.errors import GenerationFailed  # noqa: E402


class FakeConversationAI(ConversationAI):
    """Scripted provider that records every call it receives."""

    model_tag = "fake"

    def __init__(self):
        self.replies = []
        self.finalization = FinalizationResult(
            growth="Learned to ask for help.\nRecognized early warning signs.",
            hint="Try setting a daily check-in reminder.",
        )
        self.fail = False
        self.calls = []

    def continue_conversation(self, context, message, turn):
        self.calls.append({"mode": "continue", "context": context, "message": message, "turn": turn})
        if self.fail:
            raise GenerationFailed()
        if self.replies:
            return self.replies.pop(0)
        return ContinuationResult(message=f"reply to turn {turn}", should_finalize=False)

    def finalize_conversation(self, context):
        self.calls.append({"mode": "finalize", "context": context})
        if self.fail:
            raise GenerationFailed()
        return self.finalization


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'failseed-test.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def fake_ai():
    return FakeConversationAI()


@pytest.fixture
def make_fake_ai():
    return FakeConversationAI


@pytest.fixture
def client(session_factory, fake_ai):
    from main import app

    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_ai_service] = lambda: fake_ai
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
