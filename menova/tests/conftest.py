import os
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Ensure tests use an in-memory SQLite DB
os.environ.setdefault("DATABASE_URL", "sqlite://")

# Ensure the project root is on sys.path so `import menova` works when running
# pytest from the repository root.
ROOT_DIR = Path(__file__).resolve().parents[2]  # repository root
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from menova.app import app
from menova.db.session import Base, get_db
from menova.auth.deps import get_current_user
from menova.models.user import User

TEST_USER_ID = "user-1"

# In-memory SQLite shared across connections
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def create_schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clean_tables():
    with TestingSessionLocal() as s:
        s.add(User(id=TEST_USER_ID, email="u@example.com", hashed_password="x"))
        s.commit()
    yield
    with TestingSessionLocal() as s:
        for table in reversed(Base.metadata.sorted_tables):
            s.execute(table.delete())
        s.commit()


def _override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


def _fake_user():
    return SimpleNamespace(id=TEST_USER_ID, email="u@example.com")


@pytest.fixture(autouse=True)
def override_dependencies():
    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_current_user] = _fake_user
    yield
    app.dependency_overrides.pop(get_db, None)
    app.dependency_overrides.pop(get_current_user, None)


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    # ensure limiter state fresh each test
    app.state.limiter.reset()
    yield


@pytest.fixture
def db():
    s = TestingSessionLocal()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def fake_assistant(monkeypatch):
    """Deterministic assistant reply; records every call."""
    calls = []

    async def fake_reply(system, messages, timeout_s=20):
        calls.append({"system": system, "messages": messages})
        return "I hear you."

    monkeypatch.setattr("menova.services.assistant.generate_reply", fake_reply)
    return calls
