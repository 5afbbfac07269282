"""Pydantic schemas, re-exported for convenience."""

from quiz_engine.schemas.common import ErrorResponse, Pagination  # noqa: F401
from quiz_engine.schemas.question import Question, QuestionType  # noqa: F401
from quiz_engine.schemas.quiz import (  # noqa: F401
    QuizCreate,
    QuizDefinition,
    QuizRead,
    QuizSummary,
    ScoringPolicy,
    Section,
)
from quiz_engine.schemas.attempt import (  # noqa: F401
    AnswerFeedback,
    AttemptMode,
    AttemptRead,
    AttemptStatus,
    QuestionResult,
    RandomizedOrder,
)
