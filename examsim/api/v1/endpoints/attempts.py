"""Attempt endpoints: answering, navigation, completion and results."""

from uuid import UUID

from fastapi import APIRouter, Query

from examsim.core.dependencies import DbSession, StudentId
from examsim.schemas.attempt import (
    AnswerAck,
    AnswerSubmit,
    AttemptCreate,
    AttemptCreateResponse,
    AttemptStatus,
    NavigateRequest,
    NavigateResponse,
)
from examsim.schemas.question import QuestionView
from examsim.schemas.result import ResultSummary
from examsim.schemas.session import ExamConfig
from examsim.services import attempt_tracker

router = APIRouter()


@router.post("", response_model=AttemptCreateResponse)
async def create_attempt(payload: AttemptCreate, db: DbSession, student_id: StudentId):
    """
    Start an attempt.

    Reuses session_id's question list when given, otherwise draws a new
    session from the config.
    """
    attempt = attempt_tracker.create_attempt(
        db, payload.config, student_id, session_id=payload.session_id
    )
    return AttemptCreateResponse(
        attempt_id=attempt.id,
        session_id=attempt.session_id,
        mode=attempt.mode,
        total_questions=attempt.total_questions,
        started_at=attempt.started_at,
    )


@router.get("/{attempt_id}/config", response_model=ExamConfig)
async def get_attempt_config(attempt_id: UUID, db: DbSession):
    return attempt_tracker.get_attempt_config(db, attempt_id)


@router.get("/{attempt_id}/questions/{index}", response_model=QuestionView)
async def get_attempt_question(
    attempt_id: UUID,
    index: int,
    db: DbSession,
    lang: str | None = Query(None),
):
    """Question at a 0-based index with the learner's current selection."""
    return attempt_tracker.get_question_view(db, attempt_id, index, lang=lang)


@router.get("/{attempt_id}/question-states", response_model=dict[int, str])
async def get_question_states(attempt_id: UUID, db: DbSession):
    return attempt_tracker.get_question_states(db, attempt_id)


@router.post("/{attempt_id}/answers", response_model=AnswerAck)
async def submit_answer(attempt_id: UUID, payload: AnswerSubmit, db: DbSession):
    """Record a selection. An empty selection clears the answer."""
    slot = attempt_tracker.submit_answer(
        db,
        attempt_id,
        payload.question_id,
        payload.selected_option_ids,
        marked=payload.marked,
    )
    return AnswerAck(
        attempt_id=attempt_id,
        question_id=slot.question_id,
        answered=slot.selected_option_ids_json is not None,
        marked=slot.marked,
    )


@router.post("/{attempt_id}/navigate", response_model=NavigateResponse)
async def navigate(attempt_id: UUID, payload: NavigateRequest, db: DbSession):
    current_index = attempt_tracker.navigate(db, attempt_id, payload.index)
    return NavigateResponse(attempt_id=attempt_id, current_index=current_index)


@router.get("/{attempt_id}/status", response_model=AttemptStatus)
async def get_status(attempt_id: UUID, db: DbSession):
    return attempt_tracker.get_status(db, attempt_id)


@router.post("/{attempt_id}/complete", response_model=ResultSummary)
async def complete_attempt(attempt_id: UUID, db: DbSession):
    """Finish and grade the attempt. A second call returns 400."""
    return attempt_tracker.complete_attempt(db, attempt_id)


@router.get("/{attempt_id}/result", response_model=ResultSummary)
async def get_result(attempt_id: UUID, db: DbSession):
    return attempt_tracker.get_results(db, attempt_id)
