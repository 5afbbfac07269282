"""SQLAlchemy ORM models for the quiz attempt engine.

Tables
------
- quizzes        – imported quiz definitions (sections + questions as JSON)
- quiz_attempts  – one row per user run through a quiz
"""

import enum
import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from quiz_engine.db.session import Base


# ── helpers ───────────────────────────────────────────────────────────────────


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _uuid() -> uuid.UUID:
    return uuid.uuid4()


# ── Enums (stored as VARCHAR via SQLAlchemy Enum) ─────────────────────────────


class AttemptModeEnum(str, enum.Enum):
    PRACTICE = "practice"
    TEST = "test"


class AttemptStatusEnum(str, enum.Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


# ── Quizzes ───────────────────────────────────────────────────────────────────


class Quiz(Base):
    __tablename__ = "quizzes"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=_uuid
    )
    user_id: Mapped[str] = mapped_column(String(255), index=True)
    title: Mapped[str] = mapped_column(String(500))
    language: Mapped[str] = mapped_column(String(20), default="id")
    difficulty: Mapped[str] = mapped_column(String(20), default="medium")
    version: Mapped[str] = mapped_column(String(20), default="1.0.0")
    total_questions: Mapped[int] = mapped_column(Integer)
    recommended_time_min: Mapped[int] = mapped_column(Integer)
    correct_points: Mapped[float] = mapped_column(Float)
    wrong_points: Mapped[float] = mapped_column(Float, default=0.0)
    max_score: Mapped[float] = mapped_column(Float)
    sections_json: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    questions_json: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, onupdate=_utcnow
    )

    attempts: Mapped[list["QuizAttempt"]] = relationship(back_populates="quiz")


# ── Attempts ──────────────────────────────────────────────────────────────────


class QuizAttempt(Base):
    """A single user's run through a quiz.

    ``answers_json`` and ``results_json`` are JSON columns; they must be
    reassigned (not mutated in place) for the change to be flushed.
    """

    __tablename__ = "quiz_attempts"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=_uuid
    )
    quiz_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("quizzes.id")
    )
    user_id: Mapped[str] = mapped_column(String(255))
    mode: Mapped[AttemptModeEnum] = mapped_column(
        Enum(AttemptModeEnum, name="attempt_mode_enum")
    )
    status: Mapped[AttemptStatusEnum] = mapped_column(
        Enum(AttemptStatusEnum, name="attempt_status_enum"),
        default=AttemptStatusEnum.IN_PROGRESS,
    )
    is_randomized: Mapped[bool] = mapped_column(Boolean, default=False)
    randomized_order_json: Mapped[dict[str, Any] | None] = mapped_column(
        JSON, nullable=True
    )
    answers_json: Mapped[dict[str, str]] = mapped_column(JSON, default=dict)
    results_json: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    current_question_index: Mapped[int] = mapped_column(Integer, default=0)
    score: Mapped[float | None] = mapped_column(Float, nullable=True)
    max_score: Mapped[float] = mapped_column(Float)
    percentage: Mapped[float | None] = mapped_column(Float, nullable=True)
    time_spent_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    started_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )
    last_saved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    quiz: Mapped["Quiz"] = relationship(back_populates="attempts")

    __table_args__ = (
        Index("ix_quiz_attempts_user_quiz_status", "user_id", "quiz_id", "status"),
    )
