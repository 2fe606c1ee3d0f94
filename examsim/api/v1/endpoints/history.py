"""Attempt history endpoints, scoped to the calling student."""

from uuid import UUID

from fastapi import APIRouter, Query

from examsim.core.config import settings
from examsim.core.dependencies import DbSession, StudentId
from examsim.models.session import ExamMode
from examsim.schemas.result import AttemptDetailOut, AttemptHistoryItem
from examsim.services import history

router = APIRouter()


@router.get("", response_model=list[AttemptHistoryItem])
async def list_history(
    db: DbSession,
    student_id: StudentId,
    mode: ExamMode | None = Query(None),
    limit: int = Query(settings.HISTORY_DEFAULT_LIMIT, ge=1, le=100),
):
    """Completed attempts, newest first."""
    return history.get_attempt_history(db, student_id, mode=mode, limit=limit)


@router.get("/{attempt_id}", response_model=AttemptDetailOut)
async def get_history_detail(
    attempt_id: UUID,
    db: DbSession,
    student_id: StudentId,
    lang: str | None = Query(None),
):
    """Per-question review. Attempts of other students are reported as 404."""
    questions = history.get_attempt_detail(db, attempt_id, student_id, lang=lang)
    return AttemptDetailOut(
        attempt=history.get_attempt_summary(db, attempt_id, student_id),
        questions=questions,
    )
