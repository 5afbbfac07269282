"""Quiz attempt routes.

Flow:
  1. POST /api/quizzes/{quiz_id}/start               → new attempt (abandons any in-progress one)
  2. PUT  /api/quizzes/attempts/{id}/answer          → record an answer (practice: instant feedback)
  3. PUT  /api/quizzes/attempts/{id}/save            → checkpoint current question index
  4. POST /api/quizzes/attempts/{id}/complete        → score and close the attempt
  5. GET  /api/quizzes/attempts/{id}/results         → results of a completed attempt
  6. GET  /api/quizzes/attempts/{id}                 → full attempt
  7. GET  /api/quizzes/attempts/all                  → caller's attempts, paginated
"""

import logging
import uuid

from fastapi import APIRouter, Depends, Query, status

from quiz_engine.api.deps import get_current_user_id, get_lifecycle, get_store
from quiz_engine.config import settings
from quiz_engine.db.models import QuizAttempt
from quiz_engine.schemas.attempt import (
    AnswerFeedback,
    AnswerSubmit,
    AttemptListResponse,
    AttemptRead,
    AttemptResultsRead,
    AttemptStartRead,
    AttemptStartRequest,
    ProgressSave,
    ProgressSaved,
    QuizRenderData,
)
from quiz_engine.schemas.common import Pagination
from quiz_engine.services.attempts import AttemptLifecycle
from quiz_engine.services.history import parse_mode_filter, parse_status
from quiz_engine.services.store import SqlAttemptStore

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "/{quiz_id}/start",
    response_model=AttemptStartRead,
    status_code=status.HTTP_201_CREATED,
)
def start_attempt(
    quiz_id: uuid.UUID,
    body: AttemptStartRequest,
    user_id: str = Depends(get_current_user_id),
    lifecycle: AttemptLifecycle = Depends(get_lifecycle),
):
    """Start a new attempt at a quiz.

    Any attempt the caller still has in progress for this quiz is marked
    abandoned first, so at most one attempt per (user, quiz) is ever active.
    """
    started = lifecycle.start(user_id, quiz_id, body.mode, randomize=body.randomize)
    quiz_row = started.attempt.quiz
    return AttemptStartRead(
        **_attempt_to_read(started.attempt).model_dump(),
        quiz=QuizRenderData(
            title=started.quiz.title,
            total_questions=started.quiz.total_questions,
            recommended_time_min=quiz_row.recommended_time_min,
            sections=started.quiz.sections,
            questions=started.quiz.questions,
        ),
    )


@router.get("/attempts/all", response_model=AttemptListResponse)
def list_attempts(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1),
    status_filter: str | None = Query(None, alias="status"),
    mode: str | None = None,
    user_id: str = Depends(get_current_user_id),
    store: SqlAttemptStore = Depends(get_store),
):
    """List the caller's attempts, newest first."""
    limit = min(limit, settings.ATTEMPTS_PAGE_SIZE_MAX)
    rows, total = store.list_attempts(
        user_id,
        offset=(page - 1) * limit,
        limit=limit,
        status=parse_status(status_filter),
        mode=parse_mode_filter(mode),
    )
    return AttemptListResponse(
        data=[_attempt_to_read(a) for a in rows],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/attempts/{attempt_id}", response_model=AttemptRead)
def get_attempt(
    attempt_id: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    lifecycle: AttemptLifecycle = Depends(get_lifecycle),
):
    return _attempt_to_read(lifecycle.get_attempt(attempt_id, user_id))


@router.put(
    "/attempts/{attempt_id}/answer",
    response_model=AnswerFeedback,
    response_model_exclude_none=True,
)
def submit_answer(
    attempt_id: uuid.UUID,
    body: AnswerSubmit,
    user_id: str = Depends(get_current_user_id),
    lifecycle: AttemptLifecycle = Depends(get_lifecycle),
):
    """Record an answer. Practice attempts also get ``correct`` / ``correct_answer``."""
    return lifecycle.submit_answer(attempt_id, user_id, body.question_id, body.answer)


@router.put("/attempts/{attempt_id}/save", response_model=ProgressSaved)
def save_progress(
    attempt_id: uuid.UUID,
    body: ProgressSave,
    user_id: str = Depends(get_current_user_id),
    lifecycle: AttemptLifecycle = Depends(get_lifecycle),
):
    attempt = lifecycle.save_progress(attempt_id, user_id, body.current_question_index)
    return ProgressSaved(
        current_question_index=attempt.current_question_index,
        last_saved_at=attempt.last_saved_at,
    )


@router.post("/attempts/{attempt_id}/complete", response_model=AttemptRead)
def complete_attempt(
    attempt_id: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    lifecycle: AttemptLifecycle = Depends(get_lifecycle),
):
    """Score every question (unanswered ones count as wrong) and close the attempt."""
    return _attempt_to_read(lifecycle.complete(attempt_id, user_id))


@router.get("/attempts/{attempt_id}/results", response_model=AttemptResultsRead)
def get_results(
    attempt_id: uuid.UUID,
    user_id: str = Depends(get_current_user_id),
    lifecycle: AttemptLifecycle = Depends(get_lifecycle),
):
    attempt = lifecycle.get_results(attempt_id, user_id)
    return AttemptResultsRead(
        id=attempt.id,
        quiz_id=attempt.quiz_id,
        mode=attempt.mode.value,
        status=attempt.status.value,
        score=attempt.score,
        max_score=attempt.max_score,
        percentage=attempt.percentage,
        time_spent_seconds=attempt.time_spent_seconds,
        completed_at=attempt.completed_at,
        results=attempt.results_json or {},
    )


# ── Helpers ───────────────────────────────────────────────────────────────────


def _attempt_to_read(attempt: QuizAttempt) -> AttemptRead:
    return AttemptRead(
        id=attempt.id,
        quiz_id=attempt.quiz_id,
        user_id=attempt.user_id,
        mode=attempt.mode.value,
        status=attempt.status.value,
        is_randomized=attempt.is_randomized,
        randomized_order=attempt.randomized_order_json,
        answers=attempt.answers_json or {},
        current_question_index=attempt.current_question_index,
        score=attempt.score,
        max_score=attempt.max_score,
        percentage=attempt.percentage,
        time_spent_seconds=attempt.time_spent_seconds,
        results=attempt.results_json,
        started_at=attempt.started_at,
        last_saved_at=attempt.last_saved_at,
        completed_at=attempt.completed_at,
    )
