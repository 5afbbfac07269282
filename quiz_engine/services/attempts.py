"""Attempt lifecycle: start, answer, checkpoint, complete.

State machine::

    in_progress ──complete──▶ completed
         │
         └──new start for same (user, quiz)──▶ abandoned

Both terminal states are final. Each operation runs inside one store
transaction: it either applies its whole state change or none of it.

Concurrent writes against the same attempt are last-write-wins per field.
Answers to different questions interleave safely; two submissions for the
same question race and either may win.
"""

from __future__ import annotations

import logging
import random
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Iterator, NamedTuple

from pydantic import ValidationError

from quiz_engine.core.errors import InvalidArgumentError, InvalidStateError, NotFoundError
from quiz_engine.db.models import AttemptModeEnum, AttemptStatusEnum, Quiz, QuizAttempt
from quiz_engine.schemas.attempt import AnswerFeedback
from quiz_engine.schemas.quiz import QuizDefinition
from quiz_engine.services.randomizer import randomize as randomize_quiz
from quiz_engine.services.scoring import elapsed_seconds, is_correct, score_quiz
from quiz_engine.services.store import AttemptStore, quiz_definition

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StartedAttempt(NamedTuple):
    attempt: QuizAttempt
    quiz: QuizDefinition


def parse_mode(mode: str | None) -> AttemptModeEnum:
    """Validate an attempt mode string."""
    try:
        return AttemptModeEnum(mode)
    except ValueError:
        raise InvalidArgumentError(
            'Invalid mode. Must be "practice" or "test"', details={"mode": mode}
        ) from None


class AttemptLifecycle:
    """Owns every state transition of a quiz attempt.

    Args:
        store: Durable storage for quizzes and attempts.
        clock: Returns the current aware datetime; injectable for tests.
        rng: Random source handed to the randomizer.
    """

    def __init__(
        self,
        store: AttemptStore,
        clock: Callable[[], datetime] = _utcnow,
        rng: random.Random | None = None,
    ):
        self.store = store
        self.clock = clock
        self.rng = rng

    @contextmanager
    def _transaction(self) -> Iterator[None]:
        try:
            yield
            self.store.commit()
        except Exception:
            self.store.rollback()
            raise

    # ── Loading helpers ───────────────────────────────────────────────────

    def _load_quiz(self, quiz_id: uuid.UUID, user_id: str) -> tuple[Quiz, QuizDefinition]:
        row = self.store.get_quiz(quiz_id, user_id)
        if row is None:
            raise NotFoundError("Quiz not found")
        try:
            quiz = quiz_definition(row)
        except ValidationError as e:
            logger.warning("Quiz %s has malformed content: %s", quiz_id, e)
            errors = [
                f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
            ]
            raise InvalidArgumentError(
                "Quiz definition is malformed", details={"errors": errors}
            ) from e
        problems = quiz.integrity_errors()
        if problems:
            logger.warning("Quiz %s failed integrity checks: %s", quiz_id, problems)
            raise InvalidArgumentError(
                "Quiz definition is structurally invalid", details={"errors": problems}
            )
        return row, quiz

    def _load_attempt(
        self, attempt_id: uuid.UUID, user_id: str, *, for_update: bool = False
    ) -> QuizAttempt:
        attempt = self.store.get_attempt(attempt_id, user_id, for_update=for_update)
        if attempt is None:
            raise NotFoundError("Quiz attempt not found")
        return attempt

    def _load_active(self, attempt_id: uuid.UUID, user_id: str) -> QuizAttempt:
        attempt = self._load_attempt(attempt_id, user_id, for_update=True)
        if attempt.status != AttemptStatusEnum.IN_PROGRESS:
            logger.info(
                "Rejected write to attempt %s in status %s", attempt_id, attempt.status.value
            )
            raise InvalidStateError(
                "Quiz attempt is not in progress", details={"status": attempt.status.value}
            )
        return attempt

    # ── Operations ────────────────────────────────────────────────────────

    def start(
        self,
        user_id: str,
        quiz_id: uuid.UUID,
        mode: str | None,
        randomize: bool = False,
    ) -> StartedAttempt:
        """Begin a new attempt, abandoning any in-progress one for the same quiz."""
        attempt_mode = parse_mode(mode)

        with self._transaction():
            quiz_row, quiz = self._load_quiz(quiz_id, user_id)

            for previous in self.store.find_in_progress(user_id, quiz_id, for_update=True):
                previous.status = AttemptStatusEnum.ABANDONED
                logger.info("Abandoned attempt %s (user=%s quiz=%s)", previous.id, user_id, quiz_id)

            attempt = QuizAttempt(
                quiz_id=quiz_id,
                user_id=user_id,
                mode=attempt_mode,
                status=AttemptStatusEnum.IN_PROGRESS,
                is_randomized=randomize,
                answers_json={},
                current_question_index=0,
                max_score=quiz_row.max_score,
                started_at=self.clock(),
            )
            if randomize:
                attempt.randomized_order_json = randomize_quiz(quiz, self.rng).model_dump()
            self.store.add(attempt)

        logger.info(
            "Started %s attempt %s (user=%s quiz=%s randomized=%s)",
            attempt_mode.value, attempt.id, user_id, quiz_id, randomize,
        )
        return StartedAttempt(attempt=attempt, quiz=quiz)

    def submit_answer(
        self,
        attempt_id: uuid.UUID,
        user_id: str,
        question_id: str | None,
        answer: str | None,
    ) -> AnswerFeedback:
        """Record (or overwrite) the answer to one question.

        Practice attempts get immediate correctness feedback; the durable
        results map is still only written on completion.
        """
        if not question_id or answer is None or not answer.strip():
            raise InvalidArgumentError("Question ID and answer are required")

        with self._transaction():
            attempt = self._load_active(attempt_id, user_id)
            question = quiz_definition(attempt.quiz).get_question(question_id)
            if question is None:
                raise InvalidArgumentError(
                    "Question is not part of this quiz", details={"question_id": question_id}
                )
            # reassign so the JSON column is flagged dirty
            attempt.answers_json = {**(attempt.answers_json or {}), question_id: answer}

        if attempt.mode == AttemptModeEnum.PRACTICE:
            return AnswerFeedback(
                correct=is_correct(question, answer),
                correct_answer=question.answer,
            )
        return AnswerFeedback()

    def save_progress(
        self, attempt_id: uuid.UUID, user_id: str, current_question_index: int
    ) -> QuizAttempt:
        """Checkpoint the attempt's position; has no effect on scoring."""
        with self._transaction():
            attempt = self._load_active(attempt_id, user_id)
            total = attempt.quiz.total_questions
            if not 0 <= current_question_index < total:
                raise InvalidArgumentError(
                    f"current_question_index must be between 0 and {total - 1}",
                    details={"current_question_index": current_question_index},
                )
            attempt.current_question_index = current_question_index
            attempt.last_saved_at = self.clock()
        return attempt

    def complete(self, attempt_id: uuid.UUID, user_id: str) -> QuizAttempt:
        """Score every question and freeze the attempt as completed."""
        with self._transaction():
            attempt = self._load_active(attempt_id, user_id)
            quiz = quiz_definition(attempt.quiz)
            report = score_quiz(quiz, attempt.answers_json or {}, max_score=attempt.max_score)

            now = self.clock()
            attempt.status = AttemptStatusEnum.COMPLETED
            attempt.completed_at = now
            attempt.time_spent_seconds = elapsed_seconds(attempt.started_at, now)
            attempt.score = report.score
            attempt.percentage = report.percentage
            attempt.results_json = {
                qid: result.model_dump() for qid, result in report.per_question.items()
            }

        logger.info(
            "Completed attempt %s: score=%s/%s (%s%%) in %ss",
            attempt.id, attempt.score, attempt.max_score, attempt.percentage,
            attempt.time_spent_seconds,
        )
        return attempt

    def get_attempt(self, attempt_id: uuid.UUID, user_id: str) -> QuizAttempt:
        return self._load_attempt(attempt_id, user_id)

    def get_results(self, attempt_id: uuid.UUID, user_id: str) -> QuizAttempt:
        attempt = self._load_attempt(attempt_id, user_id)
        if attempt.status != AttemptStatusEnum.COMPLETED:
            raise InvalidStateError(
                "Quiz attempt is not completed yet", details={"status": attempt.status.value}
            )
        return attempt
