"""
Pydantic schemas shared by the API and the generation pipeline.

`MCQItem` is the unit returned to callers and has the same shape whichever
path (primary model or fallback engine) produced it.
"""
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from mcqgen import config

Difficulty = Literal["easy", "medium", "hard"]
Source = Literal["primary", "fallback"]

OPTION_COUNT = 4
OPTION_IDS = ("A", "B", "C", "D")


# ─── MCQ items ────────────────────────────────────────────────────────────────

class MCQOption(BaseModel):
    """One answer option."""
    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    correct: bool = False


class MCQItem(BaseModel):
    """A question with exactly four options, one of them correct."""
    model_config = ConfigDict(frozen=True)

    id: str
    question: str
    options: List[MCQOption] = Field(..., min_length=OPTION_COUNT, max_length=OPTION_COUNT)
    explanation: Optional[str] = None
    difficulty: Difficulty = "medium"

    @model_validator(mode="after")
    def _check_options(self):
        if sum(1 for o in self.options if o.correct) != 1:
            raise ValueError("exactly one option must be marked correct")
        if len({o.id for o in self.options}) != len(self.options):
            raise ValueError("option ids must be unique")
        return self

    @property
    def correct_option(self) -> MCQOption:
        return next(o for o in self.options if o.correct)


class GenerationConfig(BaseModel):
    """Requested count and difficulty for one generation call."""
    model_config = ConfigDict(frozen=True)

    count: int = Field(config.DEFAULT_QUESTIONS, ge=1, le=config.MAX_QUESTIONS)
    difficulty: Difficulty = "medium"


# ─── API request / response ───────────────────────────────────────────────────

class GenerateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str = Field(..., max_length=config.MAX_TEXT_LENGTH)
    num_questions: int = Field(
        config.DEFAULT_QUESTIONS, ge=1, le=config.MAX_QUESTIONS, alias="numQuestions"
    )
    difficulty: Difficulty = "medium"

    @field_validator("text")
    @classmethod
    def _text_long_enough(cls, value: str) -> str:
        if len(value.strip()) < config.MIN_TEXT_LENGTH:
            raise ValueError(f"text must be at least {config.MIN_TEXT_LENGTH} characters")
        return value

    def to_config(self) -> GenerationConfig:
        return GenerationConfig(count=self.num_questions, difficulty=self.difficulty)


class GenerateResponse(BaseModel):
    source: Source
    count: int
    mcqs: List[MCQItem]


class ScoreRequest(BaseModel):
    items: List[MCQItem]
    answers: Dict[str, str] = Field(default_factory=dict, description="item id -> chosen option id")


class QuestionResult(BaseModel):
    id: str
    chosen: Optional[str] = None
    correct_option: str
    is_correct: bool


class ScoreResult(BaseModel):
    correct: int
    total: int
    results: List[QuestionResult]


class ExportRequest(BaseModel):
    items: List[MCQItem]
    difficulty: Difficulty = "medium"
