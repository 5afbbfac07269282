"""Read-side rollups over a user's attempts: listings, history, stats."""

from __future__ import annotations

import uuid

from quiz_engine.core.errors import InvalidArgumentError, NotFoundError
from quiz_engine.db.models import AttemptModeEnum, AttemptStatusEnum, Quiz, QuizAttempt
from quiz_engine.schemas.quiz import OverallStats, QuizListStats, QuizStats
from quiz_engine.services.store import SqlAttemptStore

HISTORY_SORT_KEYS = ("date", "score", "percentage", "time")


def _mean(values: list[float]) -> float | None:
    return sum(values) / len(values) if values else None


def _parse_enum(enum_cls, value: str | None, field: str):
    if value is None:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise InvalidArgumentError(
            f"Invalid {field}. Must be one of: {allowed}", details={field: value}
        ) from None


def parse_status(value: str | None) -> AttemptStatusEnum | None:
    return _parse_enum(AttemptStatusEnum, value, "status")


def parse_mode_filter(value: str | None) -> AttemptModeEnum | None:
    return _parse_enum(AttemptModeEnum, value, "mode")


def get_owned_quiz(store: SqlAttemptStore, quiz_id: uuid.UUID, user_id: str) -> Quiz:
    quiz = store.get_quiz(quiz_id, user_id)
    if quiz is None:
        raise NotFoundError("Quiz not found")
    return quiz


def quiz_stats(store: SqlAttemptStore, quiz_id: uuid.UUID, user_id: str) -> QuizStats:
    """Aggregate the completed attempts of one quiz, newest first."""
    attempts = store.completed_attempts(quiz_id, user_id, sort_by="date", descending=True)
    scores = [a.score or 0.0 for a in attempts]
    return QuizStats(
        total_attempts=len(attempts),
        average_score=_mean(scores),
        best_score=max(scores) if scores else None,
        average_percentage=_mean([a.percentage or 0.0 for a in attempts]),
        average_time=_mean([float(a.time_spent_seconds or 0) for a in attempts]),
        last_attempt=attempts[0].completed_at if attempts else None,
    )


def list_stats(
    store: SqlAttemptStore, quiz_ids: list[uuid.UUID], user_id: str
) -> dict[uuid.UUID, QuizListStats]:
    """Listing rollup for each quiz id; quizzes never attempted get empty stats."""
    rollups = store.attempt_rollups(quiz_ids, user_id)
    return {qid: QuizListStats(**rollups.get(qid, {})) for qid in quiz_ids}


def in_progress_attempt(
    store: SqlAttemptStore, quiz_id: uuid.UUID, user_id: str
) -> QuizAttempt | None:
    """The resumable attempt for (user, quiz), if one exists."""
    active = store.find_in_progress(user_id, quiz_id)
    return max(active, key=lambda a: a.started_at) if active else None


def quiz_history(
    store: SqlAttemptStore,
    quiz_id: uuid.UUID,
    user_id: str,
    *,
    mode: str | None = None,
    sort_by: str = "date",
    order: str = "desc",
) -> tuple[Quiz, list[QuizAttempt]]:
    """Completed attempts of one quiz, sorted by date, score, percentage or time."""
    if sort_by not in HISTORY_SORT_KEYS:
        raise InvalidArgumentError(
            f"Invalid sort_by. Must be one of: {', '.join(HISTORY_SORT_KEYS)}",
            details={"sort_by": sort_by},
        )
    if order not in ("asc", "desc"):
        raise InvalidArgumentError('Invalid order. Must be "asc" or "desc"', details={"order": order})

    quiz = get_owned_quiz(store, quiz_id, user_id)
    attempts = store.completed_attempts(
        quiz_id,
        user_id,
        mode=parse_mode_filter(mode),
        sort_by=sort_by,
        descending=order == "desc",
    )
    return quiz, attempts


def overall_stats(store: SqlAttemptStore, user_id: str) -> OverallStats:
    completed = store.user_completed_attempts(user_id)
    total_seconds = sum(a.time_spent_seconds or 0 for a in completed)
    return OverallStats(
        total_quizzes=store.count_quizzes(user_id),
        total_attempts=len(completed),
        average_percentage=_mean([a.percentage or 0.0 for a in completed]),
        total_study_time_minutes=total_seconds / 60,
    )
