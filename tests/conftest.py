"""Shared pytest fixtures for quiz engine tests."""

import copy
import uuid
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from quiz_engine.config import settings
from quiz_engine.db.models import Quiz
from quiz_engine.db.session import Base, get_db
from quiz_engine.main import app


# Use an in-memory SQLite database for testing with static pool
SQLALCHEMY_TEST_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_TEST_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,  # Use StaticPool to keep connection alive
    echo=False,
)
TestSession = sessionmaker(bind=engine, autocommit=False, autoflush=False)

# Create all tables once at startup
Base.metadata.create_all(bind=engine)


# Three questions in two sections; canonical answers A, B, C.
SAMPLE_QUESTIONS = [
    {
        "id": "q1",
        "type": "sequence",
        "prompt": "2, 4, 8, 16, ?",
        "choices": {"A": "32", "B": "24", "C": "30", "D": "20"},
        "answer": "A",
    },
    {
        "id": "q2",
        "type": "matrix",
        "prompt": [[1, 2, 3], [4, 5, 6], [7, 8, None]],
        "choices": {"A": "10", "B": "9", "C": "12", "D": "0"},
        "answer": "B",
    },
    {
        "id": "q3",
        "type": "logic_puzzle",
        "prompt": {
            "setup": "Exactly one of three friends is lying.",
            "statements": {"Ana": "Budi lies.", "Budi": "Citra lies.", "Citra": "Ana tells the truth."},
            "constraint": "Only one statement is false.",
        },
        "choices": {"A": "Ana", "B": "Budi", "C": "Citra"},
        "answer": "C",
    },
]

SAMPLE_SECTIONS = [
    {"id": "s1", "name": "Numeric", "question_ids": ["q1", "q2"]},
    {"id": "s2", "name": "Logic", "question_ids": ["q3"]},
]


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Sign a token the way the identity service does."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=60))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def sample_questions() -> list[dict]:
    return copy.deepcopy(SAMPLE_QUESTIONS)


def sample_sections() -> list[dict]:
    return copy.deepcopy(SAMPLE_SECTIONS)


@pytest.fixture(scope="function")
def db():
    """Get a fresh DB session for each test."""
    session = TestSession()
    try:
        yield session
    finally:
        session.rollback()  # Rollback changes after each test
        session.close()


@pytest.fixture(scope="function")
def client(db: Session):
    """FastAPI test client with overridden DB dependency."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    # Remove TrustedHostMiddleware for tests to allow 'testserver' host
    app.user_middleware = [m for m in app.user_middleware if "TrustedHost" not in str(m)]

    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def user_id() -> str:
    """A fresh user per test; committed rows outlive the test session."""
    return f"user-{uuid.uuid4()}"


@pytest.fixture
def auth_headers():
    def _headers(uid: str) -> dict:
        token = create_access_token(data={"sub": uid})
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def make_quiz(db: Session):
    """Insert a quiz row directly, bypassing the import endpoint's checks."""

    def _make(
        owner: str,
        *,
        questions: list[dict] | None = None,
        sections: list[dict] | None = None,
        total_questions: int | None = None,
        correct_points: float = 1.0,
        wrong_points: float = 0.0,
        max_score: float = 3.0,
        title: str = "Logic drills",
    ) -> Quiz:
        questions = sample_questions() if questions is None else questions
        quiz = Quiz(
            user_id=owner,
            title=title,
            total_questions=len(questions) if total_questions is None else total_questions,
            recommended_time_min=15,
            correct_points=correct_points,
            wrong_points=wrong_points,
            max_score=max_score,
            sections_json=sample_sections() if sections is None else sections,
            questions_json=questions,
        )
        db.add(quiz)
        db.commit()
        db.refresh(quiz)
        return quiz

    return _make
