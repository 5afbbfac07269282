"""Scoring for quiz attempts.

Every question type is graded the same way: the submitted choice key is
compared with the canonical answer key, ignoring case and surrounding
whitespace. There is no partial credit and no type-specific comparison.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Mapping

from pydantic import BaseModel

from quiz_engine.config import settings
from quiz_engine.schemas.attempt import QuestionResult
from quiz_engine.schemas.question import Question
from quiz_engine.schemas.quiz import QuizDefinition

logger = logging.getLogger(__name__)


class ScoreReport(BaseModel):
    per_question: dict[str, QuestionResult]
    score: float
    percentage: float

    @property
    def correct_count(self) -> int:
        return sum(1 for r in self.per_question.values() if r.correct)


def _choice_key(value: str) -> str:
    return value.strip().lower()


def is_correct(question: Question, answer: str | None) -> bool:
    """Grade a single answer against the question's canonical choice key."""
    if answer is None:
        return False
    return _choice_key(answer) == _choice_key(question.answer)


def score_quiz(
    quiz: QuizDefinition,
    answers: Mapping[str, str],
    max_score: float | None = None,
) -> ScoreReport:
    """Grade every question in *quiz* against *answers*.

    Unanswered questions count as wrong and earn ``wrong_points``.

    Args:
        quiz: Quiz whose question list and scoring policy apply.
        answers: Question id → submitted choice key.
        max_score: Denominator for the percentage; defaults to the quiz's
            ``max_score``. Attempts pass the value they copied at start.

    Returns:
        A ScoreReport. A ``max_score`` of zero yields a percentage of 0.0;
        negative scores produce negative percentages and are not clamped.
    """
    policy = quiz.scoring
    denominator = policy.max_score if max_score is None else max_score

    per_question: dict[str, QuestionResult] = {}
    score = 0.0
    for question in quiz.questions:
        user_answer = answers.get(question.id)
        correct = is_correct(question, user_answer)
        score += policy.correct_points if correct else policy.wrong_points
        per_question[question.id] = QuestionResult(
            correct=correct,
            user_answer=user_answer,
            correct_answer=question.answer,
        )

    percentage = (
        round(score / denominator * 100, settings.PERCENTAGE_DECIMALS) if denominator else 0.0
    )
    report = ScoreReport(per_question=per_question, score=score, percentage=percentage)
    logger.debug(
        "Scored quiz %s: %d/%d correct, score=%s (%s%%)",
        quiz.id, report.correct_count, len(quiz.questions), score, percentage,
    )
    return report


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


def elapsed_seconds(started_at: datetime, finished_at: datetime) -> int:
    """Whole seconds between two instants, floored."""
    return math.floor((_as_utc(finished_at) - _as_utc(started_at)).total_seconds())
