"""Exam session store: write-once, position-ordered question assignments."""

import random
import secrets
import uuid
from collections.abc import Mapping, Sequence
from datetime import datetime
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from examsim.common.timestamps import as_utc, utcnow
from examsim.core.app_exceptions import NotFoundError, SessionCreationError
from examsim.core.logging import get_logger
from examsim.models.question import Domain
from examsim.models.session import ExamMode, ExamSession, ExamSessionQuestion
from examsim.schemas.question import QuestionView
from examsim.services import question_bank
from examsim.services.selector import select_questions

logger = get_logger(__name__)

SEED_BITS = 31


def new_seed() -> int:
    """Fresh seed for a session draw."""
    return secrets.randbits(SEED_BITS)


def start_session(
    db: Session,
    mode: ExamMode,
    total_questions: int,
    locale: str,
    domains: Sequence[Domain],
    percentages: Mapping[Domain, int] | None = None,
    seed: int | None = None,
    commit: bool = True,
) -> UUID:
    """
    Start a new exam session with guaranteed unique questions.

    The session row and all position rows are committed together; on a
    constraint violation everything is rolled back and nothing is visible.

    Args:
        db: Database session
        mode: EXAM or PRACTICE
        total_questions: Number of questions to include
        locale: Language preference
        domains: Domains to select from (order meaningful)
        percentages: Optional distribution by domain
        seed: Seed for the draw; generated and stored when omitted
        commit: When False the rows are only flushed and the caller commits

    Returns:
        Session ID

    Raises:
        InsufficientQuestionsError: Not enough unique questions (nothing persisted)
        SessionCreationError: Uniqueness violated while persisting
    """
    if seed is None:
        seed = new_seed()
    domains = list(domains)

    logger.info(
        f"Starting new {mode.value} session with {total_questions} questions",
        extra={
            "locale": locale,
            "domains": [d.value for d in domains],
            "seed": seed,
        },
    )

    pools = question_bank.find_by_domains(db, domains)
    selected = select_questions(pools, total_questions, domains, percentages, random.Random(seed))

    session_id = uuid.uuid4()
    now = utcnow()
    session = ExamSession(
        id=session_id,
        mode=mode,
        total_questions=total_questions,
        locale=locale,
        seed=seed,
        domains_json=[d.value for d in domains],
        percentages_json={d.value: p for d, p in percentages.items()} if percentages else None,
        created_at=now,
    )
    db.add(session)
    db.add_all(
        ExamSessionQuestion(
            session_id=session_id,
            position=position,
            question_id=question.id,
            served_at=now,
        )
        for position, question in enumerate(selected, start=1)
    )

    try:
        if commit:
            db.commit()
        else:
            db.flush()
    except IntegrityError as e:
        db.rollback()
        logger.error(
            f"Failed to save session questions for session {session_id}: {e.orig}",
            extra={"session_id": str(session_id), "seed": seed},
        )
        raise SessionCreationError(
            "Failed to create session due to database constraint violation",
            details={"session_id": str(session_id)},
        ) from e

    logger.info(
        f"Created session {session_id} with {len(selected)} unique questions",
        extra={"session_id": str(session_id)},
    )
    return session_id


def get_session(db: Session, session_id: UUID) -> ExamSession:
    """Fetch a session or raise NotFoundError."""
    session = db.get(ExamSession, session_id)
    if session is None:
        raise NotFoundError("Session", session_id)
    return session


def _ordered_rows(db: Session, session_id: UUID) -> list[ExamSessionQuestion]:
    stmt = (
        select(ExamSessionQuestion)
        .where(ExamSessionQuestion.session_id == session_id)
        .order_by(ExamSessionQuestion.position)
    )
    return list(db.execute(stmt).scalars().all())


def get_ordered_question_ids(db: Session, session_id: UUID) -> list[int]:
    """All question IDs of a session in position order."""
    get_session(db, session_id)
    return [row.question_id for row in _ordered_rows(db, session_id)]


def get_question_at_position(
    db: Session,
    session_id: UUID,
    position: int,
    lang: str | None = None,
) -> QuestionView:
    """
    Resolve a 1-based position to its question view.

    Correct answers are flagged only for PRACTICE sessions.
    """
    session = get_session(db, session_id)
    stmt = select(ExamSessionQuestion).where(
        ExamSessionQuestion.session_id == session_id,
        ExamSessionQuestion.position == position,
    )
    row = db.execute(stmt).scalar_one_or_none()
    if row is None:
        logger.warning(f"No question found at position {position} for session {session_id}")
        raise NotFoundError("Position", position)

    question = question_bank.find_by_id(db, row.question_id)
    view = question_bank.to_view(
        question,
        include_correct_answers=session.mode == ExamMode.PRACTICE,
        lang=lang or session.locale,
    )
    view.position = row.position
    return view


def get_session_summary(
    db: Session,
    session_id: UUID,
    lang: str | None = None,
) -> dict[int, QuestionView]:
    """Position -> question view for every question; never includes correct answers."""
    session = get_session(db, session_id)
    rows = _ordered_rows(db, session_id)
    questions = question_bank.find_by_ids(db, [row.question_id for row in rows])

    summary: dict[int, QuestionView] = {}
    for row in rows:
        view = question_bank.to_view(
            questions[row.question_id],
            include_correct_answers=False,
            lang=lang or session.locale,
        )
        view.position = row.position
        summary[row.position] = view
    return summary


def complete_session(db: Session, session_id: UUID) -> datetime:
    """
    Mark a session completed.

    Idempotent: a completed session keeps its first timestamp.
    """
    session = get_session(db, session_id)
    if session.completed_at is not None:
        return as_utc(session.completed_at)

    session.completed_at = utcnow()
    db.commit()
    logger.info(f"Completed session {session_id}")
    return session.completed_at


def is_session_active(db: Session, session_id: UUID) -> bool:
    """True if the session exists and is not completed."""
    session = db.get(ExamSession, session_id)
    return session is not None and session.completed_at is None


def count_session_questions(db: Session, session_id: UUID) -> int:
    stmt = select(func.count(ExamSessionQuestion.id)).where(
        ExamSessionQuestion.session_id == session_id
    )
    return db.execute(stmt).scalar_one()


def validate_session_uniqueness(db: Session, session_id: UUID) -> bool:
    """Audit that no question repeats within a session."""
    question_ids = [row.question_id for row in _ordered_rows(db, session_id)]
    unique = len(question_ids) == len(set(question_ids))
    if not unique:
        logger.error(
            f"Session {session_id} has duplicate questions! "
            f"Total: {len(question_ids)}, Unique: {len(set(question_ids))}"
        )
    return unique
