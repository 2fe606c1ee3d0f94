"""Tests for completed-attempt history and review."""

import uuid
from datetime import UTC, datetime, timedelta

import pytest

from examsim.core.app_exceptions import InvalidStateError, NotFoundError
from examsim.models.question import Domain
from examsim.models.session import ExamMode
from examsim.schemas.result import AttemptHistoryItem
from examsim.schemas.session import ExamConfig
from examsim.services import attempt_tracker, history, question_bank
from tests.conftest import STUDENT_ID
from tests.helpers.seed import create_bank, create_question


def _start_attempt(db, student_id=STUDENT_ID, mode=ExamMode.EXAM, started_minutes_ago=0, locale="es"):
    config = ExamConfig(
        mode=mode,
        number_of_questions=4,
        locale=locale,
        selected_domains=[Domain.COMPUTE],
        domain_percentages=None,
    )
    attempt = attempt_tracker.create_attempt(db, config, student_id)
    attempt.started_at = datetime.now(UTC) - timedelta(minutes=started_minutes_ago)
    db.commit()
    return attempt


def _answer_first_two(db, attempt):
    ids = attempt_tracker.get_question_ids(db, attempt.id)
    first = question_bank.find_by_id(db, ids[0])
    second = question_bank.find_by_id(db, ids[1])
    attempt_tracker.submit_answer(db, attempt.id, ids[0], question_bank.correct_option_ids(first))
    wrong = [option.id for option in second.options if not option.is_correct][:1]
    attempt_tracker.submit_answer(db, attempt.id, ids[1], wrong, marked=True)


@pytest.fixture
def bank(db):
    return create_bank(db, {Domain.COMPUTE: 6})


class TestAttemptHistory:
    def test_lists_completed_attempts_newest_first(self, db, bank):
        older = _start_attempt(db, started_minutes_ago=30)
        newer = _start_attempt(db, started_minutes_ago=5)
        in_progress = _start_attempt(db, started_minutes_ago=1)
        attempt_tracker.complete_attempt(db, older.id)
        attempt_tracker.complete_attempt(db, newer.id)

        items = history.get_attempt_history(db, STUDENT_ID)

        assert [item.id for item in items] == [newer.id, older.id]
        assert in_progress.id not in {item.id for item in items}

    def test_counts_and_score(self, db, bank):
        attempt = _start_attempt(db, started_minutes_ago=2)
        _answer_first_two(db, attempt)
        attempt_tracker.complete_attempt(db, attempt.id)

        (item,) = history.get_attempt_history(db, STUDENT_ID)

        assert item.correct_count == 1
        assert item.incorrect_count == 1
        assert item.unanswered_count == 2
        assert item.marked_count == 1
        assert item.score_percentage == 25
        assert item.locale == "es"
        assert item.duration_seconds >= 119

    def test_filters_by_mode_and_student(self, db, bank):
        exam = _start_attempt(db)
        practice = _start_attempt(db, mode=ExamMode.PRACTICE)
        other = _start_attempt(db, student_id="someone-else")
        for attempt in (exam, practice, other):
            attempt_tracker.complete_attempt(db, attempt.id)

        items = history.get_attempt_history(db, STUDENT_ID, mode=ExamMode.PRACTICE)

        assert [item.id for item in items] == [practice.id]

    def test_limit(self, db, bank):
        for minutes in range(3):
            attempt = _start_attempt(db, started_minutes_ago=minutes)
            attempt_tracker.complete_attempt(db, attempt.id)

        assert len(history.get_attempt_history(db, STUDENT_ID, limit=2)) == 2


class TestAttemptDetail:
    def test_review_uses_one_based_positions(self, db, bank):
        attempt = _start_attempt(db, locale="en")
        _answer_first_two(db, attempt)
        attempt_tracker.complete_attempt(db, attempt.id)

        detail = history.get_attempt_detail(db, attempt.id, STUDENT_ID, lang="en")

        assert list(detail) == [1, 2, 3, 4]
        assert detail[1].is_correct and detail[1].is_answered
        assert not detail[2].is_correct and detail[2].marked
        assert not detail[3].is_answered and not detail[3].is_correct
        selected = [option.id for option in detail[1].options if option.is_selected]
        assert selected == detail[1].correct_option_ids

    def test_other_students_attempt_is_not_found(self, db, bank):
        attempt = _start_attempt(db)
        attempt_tracker.complete_attempt(db, attempt.id)

        with pytest.raises(NotFoundError):
            history.get_attempt_detail(db, attempt.id, "intruder")
        with pytest.raises(NotFoundError):
            history.get_attempt_summary(db, attempt.id, "intruder")

    def test_incomplete_attempt_is_rejected(self, db, bank):
        attempt = _start_attempt(db)

        with pytest.raises(InvalidStateError):
            history.get_attempt_detail(db, attempt.id, STUDENT_ID)

    def test_unknown_attempt(self, db):
        with pytest.raises(NotFoundError):
            history.get_attempt_detail(db, uuid.uuid4(), STUDENT_ID)

    def test_review_agrees_with_graded_result(self, db):
        create_question(db, domain=Domain.COMPUTE, correct=())
        create_bank(db, {Domain.COMPUTE: 3})
        attempt = _start_attempt(db)
        _answer_first_two(db, attempt)
        result = attempt_tracker.complete_attempt(db, attempt.id)

        detail = history.get_attempt_detail(db, attempt.id, STUDENT_ID)
        summary = history.get_attempt_summary(db, attempt.id, STUDENT_ID)

        graded = {item.position + 1: item.is_correct for item in result.question_results}
        assert {position: review.is_correct for position, review in detail.items()} == graded
        assert summary.correct_count == result.correct_answers
        assert summary.correct_count + summary.incorrect_count + summary.unanswered_count == 4


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [(None, "--"), (0, "0:00"), (59, "0:59"), (125, "2:05"), (3600, "60:00")],
)
def test_formatted_duration(seconds, expected):
    item = AttemptHistoryItem(
        id=uuid.uuid4(),
        mode=ExamMode.EXAM,
        started_at=datetime.now(UTC),
        completed_at=None,
        duration_seconds=seconds,
        total_questions=0,
        correct_count=0,
        incorrect_count=0,
        unanswered_count=0,
        marked_count=0,
        score_percentage=0,
        locale="es",
    )

    assert item.formatted_duration == expected
