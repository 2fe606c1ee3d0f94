"""Pydantic schemas for exam sessions and exam configuration."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from examsim.core.config import settings
from examsim.models.question import Domain
from examsim.models.session import ExamMode
from examsim.schemas.question import QuestionView

Percentage = Annotated[int, Field(ge=0, le=100)]


def _default_percentages() -> dict[Domain, int]:
    return {Domain(key): value for key, value in settings.DEFAULT_DOMAIN_PERCENTAGES.items()}


def _check_locale(value: str) -> str:
    value = value.lower()
    if value not in settings.SUPPORTED_LOCALES:
        raise ValueError(f"locale must be one of {settings.SUPPORTED_LOCALES}")
    return value


def _check_unique_domains(value: list[Domain]) -> list[Domain]:
    if len(set(value)) != len(value):
        raise ValueError("domains must not repeat")
    return value


# ============================================================================
# Exam configuration
# ============================================================================


class ExamConfig(BaseModel):
    """Typed exam configuration, validated once at the boundary."""

    mode: ExamMode = Field(..., description="EXAM or PRACTICE")
    number_of_questions: int = Field(
        default=settings.DEFAULT_QUESTION_COUNT,
        ge=1,
        le=settings.MAX_QUESTION_COUNT,
    )
    time_limit_minutes: int = Field(default=settings.DEFAULT_TIME_LIMIT_MINUTES, ge=1)
    locale: str = Field(default=settings.DEFAULT_LOCALE)
    selected_domains: list[Domain] = Field(
        default_factory=list, description="Empty means every domain, in declaration order"
    )
    show_explanations_immediately: bool = False
    domain_percentages: dict[Domain, Percentage] | None = Field(
        default_factory=_default_percentages,
        description="Per-domain share of the exam; null draws uniformly",
    )
    seed: int | None = Field(None, ge=0, description="Reproduce a previous draw")

    @field_validator("locale")
    @classmethod
    def validate_locale(cls, v: str) -> str:
        """Normalize and check the locale tag."""
        return _check_locale(v)

    @field_validator("selected_domains")
    @classmethod
    def validate_domains(cls, v: list[Domain]) -> list[Domain]:
        """Reject repeated domains."""
        return _check_unique_domains(v)

    def domains(self) -> list[Domain]:
        """Domains to draw from, falling back to all of them."""
        return list(self.selected_domains) or list(Domain)


# ============================================================================
# Session Schemas
# ============================================================================


class SessionCreate(BaseModel):
    """Request to create an exam session."""

    mode: ExamMode
    total_questions: int = Field(..., ge=1, le=settings.MAX_QUESTION_COUNT)
    locale: str = Field(default=settings.DEFAULT_LOCALE)
    domains: list[Domain] = Field(..., min_length=1)
    percentages: dict[Domain, Percentage] | None = None
    seed: int | None = Field(None, ge=0)

    @field_validator("locale")
    @classmethod
    def validate_locale(cls, v: str) -> str:
        """Normalize and check the locale tag."""
        return _check_locale(v)

    @field_validator("domains")
    @classmethod
    def validate_domains(cls, v: list[Domain]) -> list[Domain]:
        """Reject repeated domains."""
        return _check_unique_domains(v)


class SessionCreateResponse(BaseModel):
    """Response after creating a session."""

    session_id: UUID
    mode: ExamMode
    total_questions: int
    locale: str
    message: str = "Session created successfully"


class SessionOut(BaseModel):
    """Session response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    mode: ExamMode
    total_questions: int
    locale: str
    seed: int
    domains_json: list[Domain]
    percentages_json: dict[Domain, int] | None
    created_at: datetime
    completed_at: datetime | None


class SessionQuestionIdsOut(BaseModel):
    """Ordered question ids of a session."""

    session_id: UUID
    question_ids: list[int]


class SessionSummaryOut(BaseModel):
    """All session questions keyed by 1-based position."""

    session_id: UUID
    total_questions: int
    mode: ExamMode
    questions: dict[int, QuestionView]


class SessionCompleteResponse(BaseModel):
    """Response after completing a session."""

    session_id: UUID
    completed_at: datetime
