"""Quiz definition schemas.

``QuizDefinition`` is the immutable aggregate the engine works against; the
``QuizCreate`` family mirrors the authoring document accepted by the import
endpoint.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from quiz_engine.schemas.common import Pagination
from quiz_engine.schemas.question import Question


class Section(BaseModel):
    id: str
    name: str
    question_ids: list[str]

    model_config = {"frozen": True}


class ScoringPolicy(BaseModel):
    correct_points: float
    wrong_points: float = 0.0  # zero or negative for penalty schemes
    max_score: float

    model_config = {"frozen": True}


class QuizDefinition(BaseModel):
    """Read-only view of a quiz, shared by every attempt that references it."""

    id: uuid.UUID
    title: str
    total_questions: int
    sections: list[Section]
    questions: list[Question]
    scoring: ScoringPolicy

    model_config = {"frozen": True}

    def question_map(self) -> dict[str, Question]:
        return {q.id: q for q in self.questions}

    def get_question(self, question_id: str) -> Question | None:
        return self.question_map().get(question_id)

    def integrity_errors(self) -> list[str]:
        """Structural problems that make the quiz unsafe to attempt."""
        errors = []
        if len(self.questions) != self.total_questions:
            errors.append(
                f"quiz declares {self.total_questions} questions but contains {len(self.questions)}"
            )
        known = self.question_map()
        if len(known) != len(self.questions):
            errors.append("question ids are not unique")
        # sections must partition the question bank
        placed: set[str] = set()
        for section in self.sections:
            missing = [qid for qid in section.question_ids if qid not in known]
            if missing:
                errors.append(
                    f"section {section.id!r} references unknown questions: {', '.join(missing)}"
                )
            repeated = []
            for qid in section.question_ids:
                if qid in placed:
                    repeated.append(qid)
                placed.add(qid)
            if repeated:
                errors.append(
                    f"section {section.id!r} repeats questions already placed: {', '.join(repeated)}"
                )
        unplaced = [qid for qid in known if qid not in placed]
        if unplaced:
            errors.append(f"questions not in any section: {', '.join(unplaced)}")
        return errors


# ── Import (authoring document) ───────────────────────────────────────────────


class QuizScoringIn(BaseModel):
    correct_points: float = Field(gt=0)
    wrong_points: float = 0.0
    max_score: float = Field(gt=0)


class QuizMeta(BaseModel):
    title: str = Field(min_length=1)
    language: str = "id"
    difficulty: str = "medium"
    version: str = "1.0.0"
    total_questions: int = Field(gt=0)
    recommended_time_minutes: int = Field(gt=0)
    scoring: QuizScoringIn


class QuizCreate(BaseModel):
    """POST /api/quizzes: import an authored quiz document."""

    meta: QuizMeta
    sections: list[Section]
    questions: list[Question]

    @model_validator(mode="after")
    def _question_count_matches(self):
        if len(self.questions) != self.meta.total_questions:
            raise ValueError("Question count mismatch")
        return self


# ── Read models ───────────────────────────────────────────────────────────────


class QuizStats(BaseModel):
    """Aggregates over the completed attempts of one quiz."""

    total_attempts: int = 0
    average_score: float | None = None
    best_score: float | None = None
    average_percentage: float | None = None
    average_time: float | None = None
    last_attempt: datetime | None = None


class QuizSummary(BaseModel):
    id: uuid.UUID
    title: str
    language: str
    difficulty: str
    version: str
    total_questions: int
    recommended_time_min: int
    correct_points: float
    wrong_points: float
    max_score: float
    created_at: datetime

    model_config = {"from_attributes": True}


class QuizRead(QuizSummary):
    """Full quiz with its question bank, stats and any resumable attempt."""

    sections: list[Section]
    questions: list[Question]
    stats: QuizStats
    has_in_progress_attempt: bool = False
    in_progress_attempt_id: uuid.UUID | None = None


class QuizListStats(BaseModel):
    """Per-quiz attempt rollup shown in quiz listings.

    ``total_attempts`` counts every status; the averages cover completed
    attempts only.
    """

    total_attempts: int = 0
    completed_attempts: int = 0
    average_score: float | None = None
    best_score: float | None = None
    average_percentage: float | None = None
    average_time: float | None = None


class QuizListItem(QuizSummary):
    stats: QuizListStats


class QuizListResponse(BaseModel):
    data: list[QuizListItem]
    pagination: Pagination


class QuizHistoryEntry(BaseModel):
    id: uuid.UUID
    mode: str
    score: float | None = None
    max_score: float
    percentage: float | None = None
    time_spent_seconds: int | None = None
    completed_at: datetime | None = None
    is_randomized: bool

    model_config = {"from_attributes": True}


class QuizHistoryRead(BaseModel):
    quiz_id: uuid.UUID
    quiz_title: str
    attempts: list[QuizHistoryEntry]
    total_attempts: int


class OverallStats(BaseModel):
    total_quizzes: int
    total_attempts: int
    average_percentage: float | None = None
    total_study_time_minutes: float = 0.0
