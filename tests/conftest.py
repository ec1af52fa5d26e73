import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from backend import app
from mockprep.database import Base, get_db, init_db
from mockprep.dependencies import get_llm_client
from mockprep.models.user import User
from mockprep.services.auth import create_tokens, get_password_hash
from mockprep.services.question_bank import create_question


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


class FakeResponse:
    def __init__(self, text):
        self.text = text


class FakeModels:
    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []

    def generate_content(self, model, contents):
        self.calls.append({"model": model, "contents": contents})
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return FakeResponse(reply)


class FakeLLMClient:
    """Stands in for genai.Client; replies are returned (or raised) in order."""

    def __init__(self, *replies):
        self.models = FakeModels(replies)


@pytest.fixture
def fake_llm():
    return FakeLLMClient


@pytest.fixture
def client(engine):
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    # No context manager: the lifespan would create tables on the configured database
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def llm_override():
    """Install a fake LLM client for the app; returns a setter."""
    def install(fake):
        app.dependency_overrides[get_llm_client] = lambda: fake
        return fake
    return install


def _make_user(db, email, role="user"):
    user = User(
        email=email,
        hashed_password=get_password_hash("password123"),
        username=email.split("@", 1)[0],
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def user(db):
    return _make_user(db, "alice@example.com")


@pytest.fixture
def other_user(db):
    return _make_user(db, "bob@example.com")


@pytest.fixture
def admin(db):
    return _make_user(db, "admin@example.com", role="admin")


def headers_for(user):
    return {"Authorization": f"Bearer {create_tokens(user.id)['access_token']}"}


@pytest.fixture
def auth_headers(user):
    return headers_for(user)


@pytest.fixture
def admin_headers(admin):
    return headers_for(admin)


@pytest.fixture
def questions(db):
    """Three single choice questions and one multiple choice question."""
    created = []
    for n in range(3):
        created.append(create_question(db, {
            "type": "single_choice",
            "stem": f"Question {n}",
            "category": "backend",
            "level": "junior",
            "topics": ["python"],
            "tags": ["basics"],
            "explanation": f"Because {n}",
            "options": [
                {"text": f"Q{n} wrong A", "is_correct": False},
                {"text": f"Q{n} right", "is_correct": True},
                {"text": f"Q{n} wrong B", "is_correct": False},
            ],
        }))
    created.append(create_question(db, {
        "type": "multiple_choice",
        "stem": "Which are HTTP methods?",
        "category": "backend",
        "level": "junior",
        "topics": ["http"],
        "options": [
            {"text": "GET", "is_correct": True},
            {"text": "FETCH", "is_correct": False},
            {"text": "POST", "is_correct": True},
            {"text": "SEND", "is_correct": False},
        ],
    }))
    return created
