"""Pydantic schemas for attempts and answer slots."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from examsim.models.session import ExamMode
from examsim.schemas.session import ExamConfig


class AttemptCreate(BaseModel):
    """Start an attempt from a config, optionally reusing an existing session."""

    config: ExamConfig
    session_id: UUID | None = Field(None, description="Deliver an existing session again")


class AttemptCreateResponse(BaseModel):
    """Response after creating an attempt."""

    attempt_id: UUID
    session_id: UUID | None
    mode: ExamMode
    total_questions: int
    started_at: datetime


class AnswerSubmit(BaseModel):
    """Submit (or clear) the selection for one question."""

    question_id: int
    selected_option_ids: list[int] = Field(
        default_factory=list, description="Empty clears the slot back to unanswered"
    )
    marked: bool | None = Field(None, description="Mark for review; null leaves it unchanged")


class AnswerAck(BaseModel):
    """Acknowledgement of an answer submission."""

    attempt_id: UUID
    question_id: int
    answered: bool
    marked: bool


class NavigateRequest(BaseModel):
    """Move the current-position pointer."""

    index: int


class NavigateResponse(BaseModel):
    """Stored pointer after navigation."""

    attempt_id: UUID
    current_index: int


class AttemptStatus(BaseModel):
    """Slot counts and navigation pointer."""

    total: int
    answered: int
    unanswered: int
    marked: int
    current_index: int
