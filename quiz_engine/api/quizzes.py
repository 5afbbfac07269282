"""Quiz import and reporting routes."""

import logging
import uuid

from fastapi import APIRouter, Depends, Query, status

from quiz_engine.api.deps import get_current_user_id, get_store
from quiz_engine.config import settings
from quiz_engine.db.models import Quiz
from quiz_engine.schemas.common import Pagination
from quiz_engine.schemas.quiz import (
    OverallStats,
    QuizCreate,
    QuizHistoryEntry,
    QuizHistoryRead,
    QuizListItem,
    QuizListResponse,
    QuizRead,
    QuizSummary,
)
from quiz_engine.services import history
from quiz_engine.services.store import SqlAttemptStore

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("", response_model=QuizSummary, status_code=status.HTTP_201_CREATED)
def import_quiz(
    body: QuizCreate,
    user_id: str = Depends(get_current_user_id),
    store: SqlAttemptStore = Depends(get_store),
):
    """Store an authored quiz document for the caller.

    Only the document's shape is checked here; attempts re-check the quiz's
    structure when they start.
    """
    meta = body.meta
    quiz = Quiz(
        user_id=user_id,
        title=meta.title,
        language=meta.language,
        difficulty=meta.difficulty,
        version=meta.version,
        total_questions=meta.total_questions,
        recommended_time_min=meta.recommended_time_minutes,
        correct_points=meta.scoring.correct_points,
        wrong_points=meta.scoring.wrong_points,
        max_score=meta.scoring.max_score,
        sections_json=[s.model_dump() for s in body.sections],
        questions_json=[q.model_dump() for q in body.questions],
    )
    store.add(quiz)
    store.commit()
    logger.info("Imported quiz %s (%d questions) for user %s", quiz.id, meta.total_questions, user_id)
    return quiz


@router.get("", response_model=QuizListResponse)
def list_quizzes(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1),
    search: str | None = None,
    difficulty: str | None = None,
    user_id: str = Depends(get_current_user_id),
    store: SqlAttemptStore = Depends(get_store),
):
    """List the caller's quizzes, newest first, each with its attempt rollup."""
    limit = min(limit, settings.ATTEMPTS_PAGE_SIZE_MAX)
    rows, total = store.list_quizzes(
        user_id,
        offset=(page - 1) * limit,
        limit=limit,
        search=search,
        difficulty=difficulty,
    )
    stats = history.list_stats(store, [q.id for q in rows], user_id)
    return QuizListResponse(
        data=[
            QuizListItem(**QuizSummary.model_validate(q).model_dump(), stats=stats[q.id])
            for q in rows
        ],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/stats", response_model=OverallStats)
def get_overall_stats(
    user_id: str = Depends(get_current_user_id),
    store: SqlAttemptStore = Depends(get_store),
):
    """Totals across all of the caller's quizzes."""
    return history.overall_stats(store, user_id)


@router.get("/{quiz_id}", response_model=QuizRead)
def get_quiz(
    quiz_id: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    store: SqlAttemptStore = Depends(get_store),
):
    """Quiz content plus completed-attempt stats and any resumable attempt."""
    quiz = history.get_owned_quiz(store, quiz_id, user_id)
    active = history.in_progress_attempt(store, quiz_id, user_id)
    return QuizRead(
        **QuizSummary.model_validate(quiz).model_dump(),
        sections=quiz.sections_json or [],
        questions=quiz.questions_json or [],
        stats=history.quiz_stats(store, quiz_id, user_id),
        has_in_progress_attempt=active is not None,
        in_progress_attempt_id=active.id if active else None,
    )


@router.get("/{quiz_id}/history", response_model=QuizHistoryRead)
def get_quiz_history(
    quiz_id: uuid.UUID,
    mode: str | None = None,
    sort_by: str = "date",
    order: str = "desc",
    user_id: str = Depends(get_current_user_id),
    store: SqlAttemptStore = Depends(get_store),
):
    """Completed attempts of one quiz."""
    quiz, attempts = history.quiz_history(
        store, quiz_id, user_id, mode=mode, sort_by=sort_by, order=order
    )
    return QuizHistoryRead(
        quiz_id=quiz.id,
        quiz_title=quiz.title,
        attempts=[QuizHistoryEntry.model_validate(a) for a in attempts],
        total_attempts=len(attempts),
    )
