"""Question model: a tagged union keyed on ``type``.

Every variant shares ``id``, ``choices`` and ``answer``; only the ``prompt``
payload differs. Correctness checks never look past the shared fields, so
the rendering layer is the only consumer that needs to branch on the tag.
"""

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field, field_validator


class QuestionType(str, Enum):
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    MATRIX = "matrix"
    CUSTOM_OPERATOR = "custom_operator"
    RECURRENCE = "recurrence"
    ARITHMETIC_WORD = "arithmetic_word"
    QUANTIFIED_LOGIC = "quantified_logic"
    PROPOSITIONAL_LOGIC = "propositional_logic"
    LOGIC_PUZZLE = "logic_puzzle"
    ANALOGY = "analogy"
    CLASSIFICATION = "classification"
    SYMBOL_ENCODING = "symbol_encoding"


class _QuestionBase(BaseModel):
    id: str = Field(min_length=1)
    choices: dict[str, str]  # choice key (case-sensitive) → display text
    answer: str = Field(min_length=1)  # canonical choice key

    model_config = {"frozen": True}


# ── Plain-text prompts ────────────────────────────────────────────────────────


class TextQuestion(_QuestionBase):
    type: Literal[
        "sequence",
        "mapping",
        "custom_operator",
        "recurrence",
        "arithmetic_word",
        "analogy",
        "classification",
    ]
    prompt: str
    definition: str | None = None  # operator definition for custom_operator


# ── Grid prompt ───────────────────────────────────────────────────────────────


class MatrixQuestion(_QuestionBase):
    type: Literal["matrix"]
    prompt: list[list[int | float | None]]

    @field_validator("prompt")
    @classmethod
    def _exactly_one_blank(cls, grid: list[list[int | float | None]]):
        blanks = sum(1 for row in grid for cell in row if cell is None)
        if blanks != 1:
            raise ValueError(f"matrix prompt must have exactly one empty cell, found {blanks}")
        return grid


# ── Structured prompts ────────────────────────────────────────────────────────


class QuantifiedStatement(BaseModel):
    quantifier: Literal["all", "some", "none"]
    subject: str
    predicate: str

    model_config = {"frozen": True}


class QuantifiedLogicPrompt(BaseModel):
    premises: list[QuantifiedStatement]
    conclusion: QuantifiedStatement

    model_config = {"frozen": True}


class QuantifiedLogicQuestion(_QuestionBase):
    type: Literal["quantified_logic"]
    prompt: QuantifiedLogicPrompt


class PropositionalLogicPrompt(BaseModel):
    premises: list[str]
    question: str

    model_config = {"frozen": True}


class PropositionalLogicQuestion(_QuestionBase):
    type: Literal["propositional_logic"]
    prompt: PropositionalLogicPrompt


class LogicPuzzlePrompt(BaseModel):
    setup: str
    statements: dict[str, str]
    constraint: str

    model_config = {"frozen": True}


class LogicPuzzleQuestion(_QuestionBase):
    type: Literal["logic_puzzle"]
    prompt: LogicPuzzlePrompt


class SymbolEncodingPrompt(BaseModel):
    example: str
    rule_hint: str
    question: str

    model_config = {"frozen": True}


class SymbolEncodingQuestion(_QuestionBase):
    type: Literal["symbol_encoding"]
    prompt: SymbolEncodingPrompt


Question = Annotated[
    Union[
        TextQuestion,
        MatrixQuestion,
        QuantifiedLogicQuestion,
        PropositionalLogicQuestion,
        LogicPuzzleQuestion,
        SymbolEncodingQuestion,
    ],
    Field(discriminator="type"),
]
