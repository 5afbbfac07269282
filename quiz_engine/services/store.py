"""Attempt store: durable keyed storage for quizzes and attempts.

``AttemptStore`` is the contract the lifecycle manager depends on;
``SqlAttemptStore`` implements it on a SQLAlchemy session. Every lookup is
scoped to the owning user, so "absent" and "not yours" look the same.
"""

from __future__ import annotations

import logging
import uuid
from typing import Protocol

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from quiz_engine.db.models import (
    AttemptModeEnum,
    AttemptStatusEnum,
    Quiz,
    QuizAttempt,
)
from quiz_engine.schemas.quiz import QuizDefinition, ScoringPolicy

logger = logging.getLogger(__name__)


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


# history sort key → column
_HISTORY_SORT_COLUMNS = {
    "date": QuizAttempt.completed_at,
    "score": QuizAttempt.score,
    "percentage": QuizAttempt.percentage,
    "time": QuizAttempt.time_spent_seconds,
}


class AttemptStore(Protocol):
    def get_quiz(self, quiz_id: uuid.UUID, user_id: str) -> Quiz | None: ...

    def get_attempt(
        self, attempt_id: uuid.UUID, user_id: str, *, for_update: bool = False
    ) -> QuizAttempt | None: ...

    def find_in_progress(
        self, user_id: str, quiz_id: uuid.UUID, *, for_update: bool = False
    ) -> list[QuizAttempt]: ...

    def add(self, record: Quiz | QuizAttempt) -> None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


def quiz_definition(quiz: Quiz) -> QuizDefinition:
    """Build the engine's read-only view of a stored quiz.

    Raises pydantic.ValidationError when the stored JSON does not match the
    question/section schema.
    """
    return QuizDefinition.model_validate(
        {
            "id": quiz.id,
            "title": quiz.title,
            "total_questions": quiz.total_questions,
            "sections": quiz.sections_json or [],
            "questions": quiz.questions_json or [],
            "scoring": ScoringPolicy(
                correct_points=quiz.correct_points,
                wrong_points=quiz.wrong_points,
                max_score=quiz.max_score,
            ),
        }
    )


class SqlAttemptStore:
    """AttemptStore backed by a request-scoped SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    # ── Single-record access ──────────────────────────────────────────────

    def get_quiz(self, quiz_id: uuid.UUID, user_id: str) -> Quiz | None:
        return (
            self.db.query(Quiz)
            .filter(Quiz.id == quiz_id, Quiz.user_id == user_id)
            .first()
        )

    def get_attempt(
        self, attempt_id: uuid.UUID, user_id: str, *, for_update: bool = False
    ) -> QuizAttempt | None:
        q = self.db.query(QuizAttempt).filter(
            QuizAttempt.id == attempt_id,
            QuizAttempt.user_id == user_id,
        )
        if for_update:
            q = q.with_for_update()
        return q.first()

    def find_in_progress(
        self, user_id: str, quiz_id: uuid.UUID, *, for_update: bool = False
    ) -> list[QuizAttempt]:
        q = self.db.query(QuizAttempt).filter(
            QuizAttempt.user_id == user_id,
            QuizAttempt.quiz_id == quiz_id,
            QuizAttempt.status == AttemptStatusEnum.IN_PROGRESS,
        )
        if for_update:
            q = q.with_for_update()
        return q.all()

    def add(self, record: Quiz | QuizAttempt) -> None:
        self.db.add(record)
        self.db.flush()

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()

    # ── Listings & aggregates ─────────────────────────────────────────────

    def list_quizzes(
        self,
        user_id: str,
        *,
        offset: int,
        limit: int,
        search: str | None = None,
        difficulty: str | None = None,
    ) -> tuple[list[Quiz], int]:
        q = self.db.query(Quiz).filter(Quiz.user_id == user_id)
        if search:
            q = q.filter(Quiz.title.ilike(f"%{_escape_like(search)}%", escape="\\"))
        if difficulty:
            q = q.filter(Quiz.difficulty == difficulty)
        total = q.count()
        rows = q.order_by(Quiz.created_at.desc()).offset(offset).limit(limit).all()
        return rows, total

    def count_quizzes(self, user_id: str) -> int:
        return self.db.query(func.count(Quiz.id)).filter(Quiz.user_id == user_id).scalar() or 0

    def attempt_rollups(self, quiz_ids: list[uuid.UUID], user_id: str) -> dict[uuid.UUID, dict]:
        """Per-quiz attempt aggregates for a page of quizzes, in one grouped query.

        Quizzes without attempts are absent from the result. Averages and the
        best score cover completed attempts only (NULL when there are none).
        """
        if not quiz_ids:
            return {}
        done = QuizAttempt.status == AttemptStatusEnum.COMPLETED

        def completed(column):
            return case((done, func.coalesce(column, 0)))

        rows = (
            self.db.query(
                QuizAttempt.quiz_id,
                func.count(QuizAttempt.id).label("total_attempts"),
                func.coalesce(func.sum(case((done, 1), else_=0)), 0).label("completed_attempts"),
                func.avg(completed(QuizAttempt.score)).label("average_score"),
                func.max(completed(QuizAttempt.score)).label("best_score"),
                func.avg(completed(QuizAttempt.percentage)).label("average_percentage"),
                func.avg(completed(QuizAttempt.time_spent_seconds)).label("average_time"),
            )
            .filter(QuizAttempt.quiz_id.in_(quiz_ids), QuizAttempt.user_id == user_id)
            .group_by(QuizAttempt.quiz_id)
            .all()
        )
        return {row.quiz_id: row._asdict() for row in rows}

    def list_attempts(
        self,
        user_id: str,
        *,
        offset: int,
        limit: int,
        status: AttemptStatusEnum | None = None,
        mode: AttemptModeEnum | None = None,
    ) -> tuple[list[QuizAttempt], int]:
        q = self.db.query(QuizAttempt).filter(QuizAttempt.user_id == user_id)
        if status is not None:
            q = q.filter(QuizAttempt.status == status)
        if mode is not None:
            q = q.filter(QuizAttempt.mode == mode)
        total = q.count()
        rows = q.order_by(QuizAttempt.started_at.desc()).offset(offset).limit(limit).all()
        return rows, total

    def completed_attempts(
        self,
        quiz_id: uuid.UUID,
        user_id: str,
        *,
        mode: AttemptModeEnum | None = None,
        sort_by: str = "date",
        descending: bool = True,
    ) -> list[QuizAttempt]:
        q = self.db.query(QuizAttempt).filter(
            QuizAttempt.quiz_id == quiz_id,
            QuizAttempt.user_id == user_id,
            QuizAttempt.status == AttemptStatusEnum.COMPLETED,
        )
        if mode is not None:
            q = q.filter(QuizAttempt.mode == mode)
        column = _HISTORY_SORT_COLUMNS.get(sort_by, QuizAttempt.completed_at)
        return q.order_by(column.desc() if descending else column.asc()).all()

    def user_completed_attempts(self, user_id: str) -> list[QuizAttempt]:
        return (
            self.db.query(QuizAttempt)
            .filter(
                QuizAttempt.user_id == user_id,
                QuizAttempt.status == AttemptStatusEnum.COMPLETED,
            )
            .all()
        )
