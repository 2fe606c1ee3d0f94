"""Pydantic schemas for graded results and attempt history."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, computed_field

from examsim.models.question import Difficulty, Domain, QuestionType
from examsim.models.session import ExamMode
from examsim.schemas.question import OptionView

# ============================================================================
# Result Schemas
# ============================================================================


class DomainBreakdown(BaseModel):
    """Per-domain grading aggregate."""

    domain: Domain
    correct: int = 0
    total: int = 0
    percentage: float = 0.0


class QuestionResult(BaseModel):
    """Grading outcome of one slot."""

    question_id: int
    position: int
    domain: Domain
    stem: str
    explanation: str
    correct_option_ids: list[int]
    selected_option_ids: list[int]
    is_correct: bool
    options: list[OptionView]


class ResultSummary(BaseModel):
    """Graded result of a completed attempt."""

    attempt_id: UUID
    total_questions: int
    correct_answers: int
    incorrect_answers: int
    score: int = Field(..., description="Rounded half-up percentage")
    duration_seconds: int | None = None
    average_time_per_question: float | None = None
    domain_breakdowns: dict[Domain, DomainBreakdown]
    question_results: list[QuestionResult]


# ============================================================================
# History Schemas
# ============================================================================


class AttemptHistoryItem(BaseModel):
    """Summary row of a completed attempt."""

    id: UUID
    mode: ExamMode
    started_at: datetime
    completed_at: datetime | None
    duration_seconds: int | None
    total_questions: int
    correct_count: int
    incorrect_count: int
    unanswered_count: int
    marked_count: int
    score_percentage: int
    locale: str

    @computed_field  # type: ignore[misc]
    @property
    def formatted_duration(self) -> str:
        if self.duration_seconds is None:
            return "--"
        minutes, seconds = divmod(self.duration_seconds, 60)
        return f"{minutes}:{seconds:02d}"


class OptionReview(BaseModel):
    """Option with correctness and the learner's choice."""

    id: int
    label: str
    text: str
    is_correct: bool
    is_selected: bool


class QuestionReview(BaseModel):
    """Per-question review of a completed attempt."""

    question_id: int
    position: int  # 1-based for display
    domain: Domain
    difficulty: Difficulty
    qtype: QuestionType
    stem: str
    explanation: str
    options: list[OptionReview]
    selected_option_ids: list[int]
    correct_option_ids: list[int]
    is_correct: bool
    is_answered: bool
    marked: bool


class AttemptDetailOut(BaseModel):
    """Summary of a completed attempt plus its per-question review."""

    attempt: AttemptHistoryItem
    questions: dict[int, QuestionReview]
