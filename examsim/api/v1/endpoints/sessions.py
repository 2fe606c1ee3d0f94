"""Exam session endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query

from examsim.core.dependencies import DbSession
from examsim.schemas.question import QuestionView
from examsim.schemas.session import (
    SessionCompleteResponse,
    SessionCreate,
    SessionCreateResponse,
    SessionOut,
    SessionQuestionIdsOut,
    SessionSummaryOut,
)
from examsim.services import session_store

router = APIRouter()


@router.post("", response_model=SessionCreateResponse)
async def create_session(payload: SessionCreate, db: DbSession):
    """
    Create an exam session.

    Draws the questions once and stores them by position. Returns 409 when
    the bank cannot supply enough unique questions.
    """
    session_id = session_store.start_session(
        db,
        mode=payload.mode,
        total_questions=payload.total_questions,
        locale=payload.locale,
        domains=payload.domains,
        percentages=payload.percentages,
        seed=payload.seed,
    )
    return SessionCreateResponse(
        session_id=session_id,
        mode=payload.mode,
        total_questions=payload.total_questions,
        locale=payload.locale,
    )


@router.get("/{session_id}", response_model=SessionOut)
async def get_session(session_id: UUID, db: DbSession):
    return session_store.get_session(db, session_id)


@router.get("/{session_id}/questions/{position}", response_model=QuestionView)
async def get_session_question(
    session_id: UUID,
    position: int,
    db: DbSession,
    lang: str | None = Query(None, description="Content language, defaults to the session locale"),
):
    """Question at a 1-based position. Correct answers are shown in PRACTICE only."""
    return session_store.get_question_at_position(db, session_id, position, lang=lang)


@router.get("/{session_id}/question-ids", response_model=SessionQuestionIdsOut)
async def get_session_question_ids(session_id: UUID, db: DbSession):
    return SessionQuestionIdsOut(
        session_id=session_id,
        question_ids=session_store.get_ordered_question_ids(db, session_id),
    )


@router.get("/{session_id}/summary", response_model=SessionSummaryOut)
async def get_session_summary(
    session_id: UUID,
    db: DbSession,
    lang: str | None = Query(None),
):
    session = session_store.get_session(db, session_id)
    return SessionSummaryOut(
        session_id=session.id,
        total_questions=session.total_questions,
        mode=session.mode,
        questions=session_store.get_session_summary(db, session_id, lang=lang),
    )


@router.post("/{session_id}/complete", response_model=SessionCompleteResponse)
async def complete_session(session_id: UUID, db: DbSession):
    """Mark the session completed. Repeating the call keeps the first timestamp."""
    completed_at = session_store.complete_session(db, session_id)
    return SessionCompleteResponse(session_id=session_id, completed_at=completed_at)
