"""Pydantic schemas for question views."""

from pydantic import BaseModel, Field

from examsim.models.question import Difficulty, Domain, QuestionType


class OptionView(BaseModel):
    """Answer option as shown to the learner."""

    id: int
    label: str
    text: str
    is_correct: bool | None = Field(None, description="Only populated in PRACTICE mode")


class QuestionView(BaseModel):
    """Question content joined with the learner's slot state."""

    id: int
    domain: Domain
    difficulty: Difficulty
    qtype: QuestionType
    stem: str
    explanation: str | None = Field(None, description="Only populated in PRACTICE mode")
    options: list[OptionView]
    tags: list[str] = Field(default_factory=list)
    position: int | None = None

    # Slot state (attempt views only)
    selected_option_ids: list[int] = Field(default_factory=list)
    marked: bool = False
    answered: bool = False
