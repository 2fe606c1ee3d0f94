"""Completed-attempt history and per-question review."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from examsim.core.app_exceptions import InvalidStateError, NotFoundError
from examsim.core.config import settings
from examsim.core.logging import get_logger
from examsim.models.attempt import Attempt, AttemptAnswer
from examsim.models.question import Question
from examsim.models.session import ExamMode
from examsim.schemas.result import AttemptHistoryItem, OptionReview, QuestionReview
from examsim.services import question_bank
from examsim.services.attempt_tracker import get_slots
from examsim.services.answer_codec import read_config, read_selection
from examsim.services.scoring import is_answer_correct, score_percentage

logger = get_logger(__name__)


def _owned_attempt(db: Session, attempt_id: UUID, student_id: str) -> Attempt:
    """Attempts of another student are reported as not found."""
    attempt = db.get(Attempt, attempt_id)
    if attempt is None:
        raise NotFoundError("Attempt", attempt_id)
    if attempt.student_id != student_id:
        logger.warning(f"Attempt {attempt_id} does not belong to student {student_id}")
        raise NotFoundError("Attempt", attempt_id)
    return attempt


def _history_item(db: Session, attempt: Attempt) -> AttemptHistoryItem:
    slots = get_slots(db, attempt.id)
    questions = question_bank.find_by_ids(db, [slot.question_id for slot in slots])

    correct = incorrect = unanswered = marked = 0
    for slot in slots:
        selected = read_selection(
            slot.selected_option_ids_json,
            attempt_id=str(attempt.id),
            question_id=slot.question_id,
        )
        if is_answer_correct(selected, question_bank.correct_option_ids(questions[slot.question_id])):
            correct += 1
        elif not selected:
            unanswered += 1
        else:
            incorrect += 1
        if slot.marked:
            marked += 1

    score = attempt.score_percentage
    if score is None:
        score = score_percentage(correct, attempt.total_questions)

    config = read_config(
        attempt.config_json,
        mode=attempt.mode,
        total_questions=attempt.total_questions,
        attempt_id=str(attempt.id),
    )

    return AttemptHistoryItem(
        id=attempt.id,
        mode=attempt.mode,
        started_at=attempt.started_at,
        completed_at=attempt.ended_at,
        duration_seconds=attempt.duration_seconds,
        total_questions=attempt.total_questions,
        correct_count=correct,
        incorrect_count=incorrect,
        unanswered_count=unanswered,
        marked_count=marked,
        score_percentage=score,
        locale=config.locale,
    )


def get_attempt_history(
    db: Session,
    student_id: str,
    mode: ExamMode | None = None,
    limit: int | None = None,
) -> list[AttemptHistoryItem]:
    """Completed attempts of a student, newest first."""
    if limit is None:
        limit = settings.HISTORY_DEFAULT_LIMIT
    logger.info(
        f"Getting attempt history for student {student_id}",
        extra={"mode": mode.value if mode else None, "limit": limit},
    )

    stmt = select(Attempt).where(
        Attempt.student_id == student_id,
        Attempt.is_completed.is_(True),
    )
    if mode is not None:
        stmt = stmt.where(Attempt.mode == mode)
    stmt = stmt.order_by(Attempt.started_at.desc()).limit(limit)

    return [_history_item(db, attempt) for attempt in db.execute(stmt).scalars().all()]


def get_attempt_summary(db: Session, attempt_id: UUID, student_id: str) -> AttemptHistoryItem:
    """History row for a single attempt owned by student_id."""
    return _history_item(db, _owned_attempt(db, attempt_id, student_id))


def _review(question: Question, slot: AttemptAnswer, selected: list[int], lang: str | None) -> QuestionReview:
    correct_ids = question_bank.correct_option_ids(question)
    return QuestionReview(
        question_id=question.id,
        position=slot.position + 1,
        domain=question.domain,
        difficulty=question.difficulty,
        qtype=question.qtype,
        stem=question_bank.question_stem(question, lang),
        explanation=question_bank.question_explanation(question, lang),
        options=[
            OptionReview(
                id=option.id,
                label=option.label,
                text=question_bank.option_text(option, lang),
                is_correct=option.is_correct,
                is_selected=option.id in selected,
            )
            for option in question.options
        ],
        selected_option_ids=selected,
        correct_option_ids=correct_ids,
        is_correct=is_answer_correct(selected, correct_ids),
        is_answered=bool(selected),
        marked=slot.marked,
    )


def get_attempt_detail(
    db: Session,
    attempt_id: UUID,
    student_id: str,
    lang: str | None = None,
) -> dict[int, QuestionReview]:
    """
    Review of every question of a completed attempt, keyed by 1-based position.

    Raises:
        NotFoundError: Unknown attempt or owned by another student
        InvalidStateError: Attempt not completed yet
    """
    attempt = _owned_attempt(db, attempt_id, student_id)
    if not attempt.is_completed:
        raise InvalidStateError(
            "Attempt is not completed yet",
            details={"attempt_id": str(attempt_id)},
        )

    slots = get_slots(db, attempt.id)
    questions = question_bank.find_by_ids(db, [slot.question_id for slot in slots])
    reviews: dict[int, QuestionReview] = {}
    for slot in slots:
        selected = read_selection(
            slot.selected_option_ids_json,
            attempt_id=str(attempt.id),
            question_id=slot.question_id,
        )
        review = _review(questions[slot.question_id], slot, selected, lang)
        reviews[review.position] = review
    return reviews
