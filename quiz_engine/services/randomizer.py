"""Per-attempt question ordering.

Questions are shuffled within their own section only; section membership and
the order of sections are preserved. The result is stored on the attempt once
at start so a reload never reshuffles.
"""

from __future__ import annotations

import logging
import random

from quiz_engine.schemas.attempt import RandomizedOrder
from quiz_engine.schemas.quiz import QuizDefinition

logger = logging.getLogger(__name__)


def randomize(quiz: QuizDefinition, rng: random.Random | None = None) -> RandomizedOrder:
    """Shuffle each section of *quiz* independently.

    Args:
        quiz: The quiz to order. Never mutated.
        rng: Optional random source; the module-level generator is used when omitted.

    Returns:
        The flattened question order plus a copy of every section carrying its
        shuffled id list. Ids a section references that are not in the quiz's
        question list are left out.
    """
    shuffle = rng.shuffle if rng is not None else random.shuffle
    known = quiz.question_map()

    order: list[str] = []
    sections = []
    for section in quiz.sections:
        ids = [qid for qid in section.question_ids if qid in known]
        shuffle(ids)
        order.extend(ids)
        sections.append(section.model_copy(update={"question_ids": ids}))

    logger.debug("Randomized %d questions across %d sections for quiz %s", len(order), len(sections), quiz.id)
    return RandomizedOrder(order=order, sections=sections)
