"""Attempt schemas."""

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel

from quiz_engine.schemas.common import Pagination
from quiz_engine.schemas.question import Question
from quiz_engine.schemas.quiz import Section


class AttemptMode(str, Enum):
    PRACTICE = "practice"
    TEST = "test"


class AttemptStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


# ── Requests ──────────────────────────────────────────────────────────────────


class AttemptStartRequest(BaseModel):
    """POST /api/quizzes/{quiz_id}/start

    ``mode`` is a plain string so that an unknown mode surfaces as the
    engine's InvalidArgument error rather than a schema error.
    """

    mode: str | None = None
    randomize: bool = False


class AnswerSubmit(BaseModel):
    """PUT /api/quizzes/attempts/{attempt_id}/answer"""

    question_id: str | None = None
    answer: str | None = None


class ProgressSave(BaseModel):
    """PUT /api/quizzes/attempts/{attempt_id}/save"""

    current_question_index: int


# ── Engine value objects ──────────────────────────────────────────────────────


class RandomizedOrder(BaseModel):
    """Per-attempt question order, fixed at start and never recomputed."""

    order: list[str]
    sections: list[Section]


class QuestionResult(BaseModel):
    correct: bool
    user_answer: str | None = None
    correct_answer: str


# ── Responses ─────────────────────────────────────────────────────────────────


class AnswerFeedback(BaseModel):
    """Result of a submitted answer.

    ``correct`` / ``correct_answer`` are only set for practice attempts.
    """

    accepted: bool = True
    correct: bool | None = None
    correct_answer: str | None = None


class ProgressSaved(BaseModel):
    accepted: bool = True
    current_question_index: int
    last_saved_at: datetime


class AttemptRead(BaseModel):
    id: uuid.UUID
    quiz_id: uuid.UUID
    user_id: str
    mode: AttemptMode
    status: AttemptStatus
    is_randomized: bool
    randomized_order: RandomizedOrder | None = None
    answers: dict[str, str] = {}
    current_question_index: int
    score: float | None = None
    max_score: float
    percentage: float | None = None
    time_spent_seconds: int | None = None
    results: dict[str, QuestionResult] | None = None
    started_at: datetime
    last_saved_at: datetime | None = None
    completed_at: datetime | None = None


class QuizRenderData(BaseModel):
    """Quiz content a client needs to render an attempt."""

    title: str
    total_questions: int
    recommended_time_min: int
    sections: list[Section]
    questions: list[Question]


class AttemptStartRead(AttemptRead):
    quiz: QuizRenderData


class AttemptResultsRead(BaseModel):
    """Results-only view of a completed attempt."""

    id: uuid.UUID
    quiz_id: uuid.UUID
    mode: AttemptMode
    status: AttemptStatus
    score: float
    max_score: float
    percentage: float
    time_spent_seconds: int
    completed_at: datetime
    results: dict[str, QuestionResult]


class AttemptListResponse(BaseModel):
    data: list[AttemptRead]
    pagination: Pagination
