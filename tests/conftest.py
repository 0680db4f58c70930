import os

# Must be set before app modules read settings
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"

import uuid
from datetime import datetime
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.db import Base, get_db
from app.models.user import User
from app.routes.analysis import get_text_generator
from app.services.auth import get_current_user
from app.services import wellness_chat
from app.services.llm import reset_llm_service
from tests.fakes import FakeLLMService, FakeTextGenerator

# Use SQLite in-memory for test DB
TEST_DATABASE_URL = "sqlite+pysqlite:///:memory:"
# StaticPool keeps one shared connection so the TestClient's sessions and the
# test's own session see the same in-memory database.
engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Dependency override
def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()

app.dependency_overrides[get_db] = override_get_db

@pytest.fixture(autouse=True)
def setup_test_db():
    # recreate schema for each test to ensure isolation
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture(autouse=True)
def clean_overrides():
    yield
    app.dependency_overrides.pop(get_current_user, None)
    app.dependency_overrides.pop(get_text_generator, None)
    reset_llm_service()

@pytest.fixture(autouse=True)
def no_llm_credentials(monkeypatch):
    """Tests never reach a real provider."""
    for var in ("OPENROUTER_API_KEY", "OPENAI_API_KEY", "GOOGLE_CLOUD_PROJECT"):
        monkeypatch.delenv(var, raising=False)

@pytest.fixture
def client():
    return TestClient(app)

@pytest.fixture
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        db.close()


def _make_user(db_session, name: str):
    user = User(
        id=str(uuid.uuid4()),
        email=f"{name.lower().replace(' ', '.')}+{uuid.uuid4().hex[:6]}@example.com",
        display_name=name,
        created_at=datetime.utcnow(),
    )
    db_session.add(user)
    db_session.commit()
    # Detached copy so the dependency does not depend on this session's state
    return SimpleNamespace(
        id=user.id,
        email=user.email,
        display_name=user.display_name,
        photo_url=user.photo_url,
        created_at=user.created_at,
    )

@pytest.fixture
def mock_user(db_session):
    user = _make_user(db_session, "Test User")
    app.dependency_overrides[get_current_user] = lambda: user
    return user

@pytest.fixture
def other_user(db_session):
    """A second persisted user; does not change who is authenticated."""
    return _make_user(db_session, "Other User")

@pytest.fixture
def login_as():
    def _login(user):
        app.dependency_overrides[get_current_user] = lambda: user
        return user
    return _login


@pytest.fixture
def fake_generator():
    gen = FakeTextGenerator()
    app.dependency_overrides[get_text_generator] = lambda: gen
    return gen

@pytest.fixture
def fake_llm_service(monkeypatch):
    service = FakeLLMService()
    monkeypatch.setattr(wellness_chat, "get_llm_service", lambda: service)
    return service
