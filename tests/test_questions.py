"""Tests for the question variants and quiz integrity checks."""

import uuid

import pytest
from pydantic import ValidationError

from conftest import sample_questions, sample_sections
from quiz_engine.schemas.question import (
    LogicPuzzleQuestion,
    MatrixQuestion,
    QuantifiedLogicQuestion,
    QuestionType,
    TextQuestion,
)
from quiz_engine.schemas.quiz import QuizDefinition

CHOICES = {"A": "first", "B": "second"}

PROMPTS_BY_TYPE = {
    "sequence": "1, 1, 2, 3, 5, ?",
    "mapping": "cat → kitten, dog → ?",
    "custom_operator": "3 ◇ 4 = ?",
    "recurrence": "a(n) = a(n-1) + 2, a(1) = 1; a(5) = ?",
    "arithmetic_word": "A train travels 60 km in 40 minutes. Speed in km/h?",
    "analogy": "Hand is to glove as foot is to ?",
    "classification": "Which one does not belong?",
    "matrix": [[2, 4], [8, None]],
    "quantified_logic": {
        "premises": [
            {"quantifier": "all", "subject": "cats", "predicate": "animals"},
            {"quantifier": "some", "subject": "animals", "predicate": "pets"},
        ],
        "conclusion": {"quantifier": "some", "subject": "cats", "predicate": "pets"},
    },
    "propositional_logic": {"premises": ["If P then Q", "P"], "question": "Does Q hold?"},
    "logic_puzzle": {
        "setup": "Three boxes, one prize.",
        "statements": {"1": "The prize is here.", "2": "The prize is not in box 1."},
        "constraint": "Exactly one label is true.",
    },
    "symbol_encoding": {
        "example": "CAT → DBU",
        "rule_hint": "shift each letter",
        "question": "DOG → ?",
    },
}


def _definition(questions: list[dict], sections: list[dict], total: int | None = None) -> QuizDefinition:
    return QuizDefinition.model_validate(
        {
            "id": uuid.uuid4(),
            "title": "Variants",
            "total_questions": len(questions) if total is None else total,
            "sections": sections,
            "questions": questions,
            "scoring": {"correct_points": 1, "max_score": len(questions)},
        }
    )


class TestQuestionVariants:
    def test_every_tag_has_a_prompt_fixture(self):
        assert set(PROMPTS_BY_TYPE) == {t.value for t in QuestionType}

    def test_all_twelve_types_parse(self):
        questions = [
            {"id": f"q-{qtype}", "type": qtype, "prompt": prompt, "choices": CHOICES, "answer": "A"}
            for qtype, prompt in PROMPTS_BY_TYPE.items()
        ]
        quiz = _definition(questions, [{"id": "all", "name": "All", "question_ids": [q["id"] for q in questions]}])
        by_type = {q.type: q for q in quiz.questions}
        assert isinstance(by_type["sequence"], TextQuestion)
        assert isinstance(by_type["matrix"], MatrixQuestion)
        assert isinstance(by_type["quantified_logic"], QuantifiedLogicQuestion)
        assert isinstance(by_type["logic_puzzle"], LogicPuzzleQuestion)
        assert by_type["quantified_logic"].prompt.conclusion.quantifier == "some"

    def test_custom_operator_keeps_definition(self):
        quiz = _definition(
            [
                {
                    "id": "op",
                    "type": "custom_operator",
                    "prompt": "3 ◇ 4 = ?",
                    "definition": "a ◇ b = 2a + b",
                    "choices": {"A": "10", "B": "11"},
                    "answer": "A",
                }
            ],
            [{"id": "s", "name": "Ops", "question_ids": ["op"]}],
        )
        assert quiz.questions[0].definition == "a ◇ b = 2a + b"

    @pytest.mark.parametrize("grid", [[[1, 2], [3, 4]], [[1, None], [None, 4]]])
    def test_matrix_requires_exactly_one_blank(self, grid):
        with pytest.raises(ValidationError):
            MatrixQuestion(id="m", type="matrix", prompt=grid, choices=CHOICES, answer="A")

    def test_unknown_type_is_rejected(self):
        with pytest.raises(ValidationError):
            _definition(
                [{"id": "x", "type": "free_text", "prompt": "?", "choices": CHOICES, "answer": "A"}],
                [],
            )

    def test_structured_prompt_shape_is_enforced(self):
        with pytest.raises(ValidationError):
            _definition(
                [{"id": "x", "type": "symbol_encoding", "prompt": "just text", "choices": CHOICES, "answer": "A"}],
                [],
            )

    def test_questions_are_immutable(self):
        quiz = _definition(sample_questions(), sample_sections())
        with pytest.raises(ValidationError):
            quiz.questions[0].answer = "B"


class TestIntegrity:
    def test_valid_quiz_has_no_errors(self):
        assert _definition(sample_questions(), sample_sections()).integrity_errors() == []

    def test_declared_total_mismatch(self):
        errors = _definition(sample_questions(), sample_sections(), total=5).integrity_errors()
        assert any("declares 5" in e for e in errors)

    def test_unknown_section_reference(self):
        sections = sample_sections()
        sections[1]["question_ids"].append("q99")
        errors = _definition(sample_questions(), sections).integrity_errors()
        assert errors == ["section 's2' references unknown questions: q99"]

    def test_duplicate_question_ids(self):
        questions = sample_questions()
        questions[1]["id"] = "q1"
        errors = _definition(questions, [{"id": "s", "name": "S", "question_ids": ["q1", "q3"]}]).integrity_errors()
        assert "question ids are not unique" in errors

    def test_question_outside_every_section(self):
        sections = [{"id": "s1", "name": "Numeric", "question_ids": ["q1", "q2"]}]
        errors = _definition(sample_questions(), sections).integrity_errors()
        assert errors == ["questions not in any section: q3"]

    def test_question_in_two_sections(self):
        sections = [
            {"id": "s1", "name": "Numeric", "question_ids": ["q1", "q2"]},
            {"id": "s2", "name": "Logic", "question_ids": ["q2", "q3"]},
        ]
        errors = _definition(sample_questions(), sections).integrity_errors()
        assert errors == ["section 's2' repeats questions already placed: q2"]

    def test_question_twice_in_one_section(self):
        sections = sample_sections()
        sections[0]["question_ids"].append("q1")
        errors = _definition(sample_questions(), sections).integrity_errors()
        assert errors == ["section 's1' repeats questions already placed: q1"]

    def test_no_sections_leaves_every_question_unplaced(self):
        errors = _definition(sample_questions(), []).integrity_errors()
        assert errors == ["questions not in any section: q1, q2, q3"]
