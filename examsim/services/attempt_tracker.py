"""Attempt tracking: answer slots, navigation, completion and results."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from examsim.common.timestamps import as_utc, utcnow
from examsim.core.app_exceptions import (
    InvalidStateError,
    NotFoundError,
    SessionCreationError,
)
from examsim.core.logging import get_logger
from examsim.models.attempt import Attempt, AttemptAnswer
from examsim.models.session import ExamMode
from examsim.schemas.attempt import AttemptStatus
from examsim.schemas.question import QuestionView
from examsim.schemas.result import ResultSummary
from examsim.schemas.session import ExamConfig
from examsim.services import question_bank, session_store
from examsim.services.answer_codec import encode_config, encode_selection, read_config, read_selection
from examsim.services.scoring import grade_attempt

logger = get_logger(__name__)


def create_attempt(
    db: Session,
    config: ExamConfig,
    student_id: str,
    session_id: UUID | None = None,
) -> Attempt:
    """
    Create an attempt with one empty slot per session question.

    When session_id is given the existing session's question list is reused;
    otherwise a new session is drawn from config.

    Raises:
        NotFoundError: Unknown session_id
        InsufficientQuestionsError: New session cannot be filled
        SessionCreationError: Slot uniqueness violated while persisting
    """
    if session_id is None:
        session_id = session_store.start_session(
            db,
            mode=config.mode,
            total_questions=config.number_of_questions,
            locale=config.locale,
            domains=config.domains(),
            percentages=config.domain_percentages,
            seed=config.seed,
            commit=False,
        )
    question_ids = session_store.get_ordered_question_ids(db, session_id)

    attempt = Attempt(
        session_id=session_id,
        student_id=student_id,
        mode=config.mode,
        started_at=utcnow(),
        total_questions=len(question_ids),
        config_json=encode_config(config),
        is_completed=False,
        current_question_index=0,
    )
    db.add(attempt)
    db.flush()

    db.add_all(
        AttemptAnswer(
            attempt_id=attempt.id,
            question_id=question_id,
            position=position,
            marked=False,
        )
        for position, question_id in enumerate(question_ids)
    )

    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Failed to create answer slots for session {session_id}: {e.orig}")
        raise SessionCreationError(
            "Failed to create attempt due to database constraint violation",
            details={"session_id": str(session_id)},
        ) from e

    logger.info(
        f"Created attempt {attempt.id} for student {student_id}",
        extra={"session_id": str(session_id), "total_questions": len(question_ids)},
    )
    return attempt


def get_attempt(db: Session, attempt_id: UUID) -> Attempt:
    """Fetch an attempt or raise NotFoundError."""
    attempt = db.get(Attempt, attempt_id)
    if attempt is None:
        raise NotFoundError("Attempt", attempt_id)
    return attempt


def get_slots(db: Session, attempt_id: UUID) -> list[AttemptAnswer]:
    """Answer slots of an attempt in position order."""
    stmt = (
        select(AttemptAnswer)
        .where(AttemptAnswer.attempt_id == attempt_id)
        .order_by(AttemptAnswer.position)
    )
    return list(db.execute(stmt).scalars().all())


def get_question_ids(db: Session, attempt_id: UUID) -> list[int]:
    """Question ids of an attempt in slot order."""
    get_attempt(db, attempt_id)
    return [slot.question_id for slot in get_slots(db, attempt_id)]


def get_attempt_config(db: Session, attempt_id: UUID) -> ExamConfig:
    """Stored config, or a default one when missing or unreadable."""
    attempt = get_attempt(db, attempt_id)
    return read_config(
        attempt.config_json,
        mode=attempt.mode,
        total_questions=attempt.total_questions,
        attempt_id=str(attempt.id),
    )


def get_question_view(
    db: Session,
    attempt_id: UUID,
    position: int,
    lang: str | None = None,
) -> QuestionView:
    """
    Question at a 0-based slot position with the learner's current state.

    Correct answers (and the explanation) are only included when the
    attempt itself is in PRACTICE mode.
    """
    attempt = get_attempt(db, attempt_id)
    stmt = select(AttemptAnswer).where(
        AttemptAnswer.attempt_id == attempt_id,
        AttemptAnswer.position == position,
    )
    slot = db.execute(stmt).scalar_one_or_none()
    if slot is None:
        raise NotFoundError("Position", position)

    if lang is None:
        lang = get_attempt_config(db, attempt_id).locale
    question = question_bank.find_by_id(db, slot.question_id)
    view = question_bank.to_view(
        question,
        include_correct_answers=attempt.mode == ExamMode.PRACTICE,
        lang=lang,
    )
    selected = read_selection(
        slot.selected_option_ids_json,
        attempt_id=str(attempt_id),
        question_id=slot.question_id,
    )
    view.position = slot.position
    view.selected_option_ids = selected
    view.marked = slot.marked
    view.answered = bool(selected)
    return view


def submit_answer(
    db: Session,
    attempt_id: UUID,
    question_id: int,
    selected_option_ids: list[int],
    marked: bool | None = None,
) -> AttemptAnswer:
    """
    Record the selection for one question, replacing any previous one.

    An empty selection reverts the slot to unanswered. marked only changes
    when provided. Concurrent writes to the same slot: last write wins.

    Raises:
        InvalidStateError: Attempt already completed
        NotFoundError: Question not part of the attempt
    """
    attempt = get_attempt(db, attempt_id)
    if attempt.is_completed:
        raise InvalidStateError(
            "Cannot submit answers to a completed attempt",
            details={"attempt_id": str(attempt_id)},
        )

    stmt = select(AttemptAnswer).where(
        AttemptAnswer.attempt_id == attempt_id,
        AttemptAnswer.question_id == question_id,
    )
    slot = db.execute(stmt).scalar_one_or_none()
    if slot is None:
        raise NotFoundError("Question in attempt", question_id)

    slot.selected_option_ids_json = encode_selection(selected_option_ids)
    slot.answered_at = utcnow() if selected_option_ids else None
    if marked is not None:
        slot.marked = marked

    db.commit()
    logger.debug(
        f"Answer recorded for question {question_id}",
        extra={"attempt_id": str(attempt_id), "answered": bool(selected_option_ids)},
    )
    return slot


def navigate(db: Session, attempt_id: UUID, index: int) -> int:
    """Store the current 0-based index; out-of-range indices store 0."""
    attempt = get_attempt(db, attempt_id)
    if not 0 <= index < attempt.total_questions:
        index = 0
    attempt.current_question_index = index
    db.commit()
    return index


def get_status(db: Session, attempt_id: UUID) -> AttemptStatus:
    """Answered/unanswered/marked counts and the navigation pointer."""
    attempt = get_attempt(db, attempt_id)
    slots = get_slots(db, attempt_id)
    answered = sum(
        1
        for slot in slots
        if read_selection(slot.selected_option_ids_json, attempt_id=str(attempt_id))
    )
    return AttemptStatus(
        total=len(slots),
        answered=answered,
        unanswered=len(slots) - answered,
        marked=sum(1 for slot in slots if slot.marked),
        current_index=attempt.current_question_index,
    )


def get_question_states(db: Session, attempt_id: UUID) -> dict[int, str]:
    """0-based position -> navigator state class."""
    get_attempt(db, attempt_id)
    states: dict[int, str] = {}
    for slot in get_slots(db, attempt_id):
        answered = bool(read_selection(slot.selected_option_ids_json, attempt_id=str(attempt_id)))
        if answered and slot.marked:
            states[slot.position] = "q-answered q-marked"
        elif answered:
            states[slot.position] = "q-answered"
        elif slot.marked:
            states[slot.position] = "q-marked"
        else:
            states[slot.position] = "q-unanswered"
    return states


def _grade(db: Session, attempt: Attempt) -> ResultSummary:
    slots = get_slots(db, attempt.id)
    questions = question_bank.find_by_ids(db, [slot.question_id for slot in slots])
    lang = read_config(
        attempt.config_json,
        mode=attempt.mode,
        total_questions=attempt.total_questions,
        attempt_id=str(attempt.id),
    ).locale
    return grade_attempt(attempt, slots, questions, lang=lang)


def complete_attempt(db: Session, attempt_id: UUID) -> ResultSummary:
    """
    Finish an attempt and grade it once.

    Raises:
        InvalidStateError: Attempt already completed
    """
    attempt = get_attempt(db, attempt_id)
    if attempt.is_completed:
        raise InvalidStateError(
            "Attempt already completed",
            details={"attempt_id": str(attempt_id)},
        )

    ended_at = utcnow()
    attempt.ended_at = ended_at
    attempt.duration_seconds = max(0, int((ended_at - as_utc(attempt.started_at)).total_seconds()))

    result = _grade(db, attempt)
    attempt.score_percentage = result.score
    attempt.is_completed = True
    db.commit()

    logger.info(
        f"Completed attempt {attempt_id}",
        extra={
            "score": result.score,
            "correct": result.correct_answers,
            "total": result.total_questions,
        },
    )
    return result


def get_results(db: Session, attempt_id: UUID) -> ResultSummary:
    """
    Graded result of a completed attempt.

    Raises:
        InvalidStateError: Attempt not completed yet
    """
    attempt = get_attempt(db, attempt_id)
    if not attempt.is_completed:
        raise InvalidStateError(
            "Attempt must be completed before viewing results",
            details={"attempt_id": str(attempt_id)},
        )
    return _grade(db, attempt)
