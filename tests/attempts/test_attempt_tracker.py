"""Tests for attempt slots, answering, navigation and completion."""

import uuid
from datetime import UTC, datetime, timedelta

import pytest

from examsim.core.app_exceptions import InvalidStateError, NotFoundError, SessionCreationError
from examsim.models.attempt import Attempt, AttemptAnswer
from examsim.models.question import Domain
from examsim.models.session import ExamMode, ExamSession, ExamSessionQuestion
from examsim.schemas.session import ExamConfig
from examsim.services import attempt_tracker, question_bank, session_store
from tests.conftest import STUDENT_ID
from tests.helpers.seed import create_bank


def _config(total=5, mode=ExamMode.EXAM, **kwargs) -> ExamConfig:
    kwargs.setdefault("selected_domains", [Domain.COMPUTE])
    kwargs.setdefault("domain_percentages", None)
    return ExamConfig(mode=mode, number_of_questions=total, **kwargs)


@pytest.fixture
def attempt(db):
    create_bank(db, {Domain.COMPUTE: 5})
    return attempt_tracker.create_attempt(db, _config(), STUDENT_ID)


def _correct_ids(db, question_id: int) -> list[int]:
    return question_bank.correct_option_ids(question_bank.find_by_id(db, question_id))


def _wrong_ids(db, question_id: int) -> list[int]:
    question = question_bank.find_by_id(db, question_id)
    return [option.id for option in question.options if not option.is_correct][:1]


class TestCreateAttempt:
    def test_slots_follow_session_order(self, db, attempt):
        session_ids = session_store.get_ordered_question_ids(db, attempt.session_id)

        assert attempt_tracker.get_question_ids(db, attempt.id) == session_ids
        slots = (
            db.query(AttemptAnswer)
            .filter_by(attempt_id=attempt.id)
            .order_by(AttemptAnswer.position)
            .all()
        )
        assert [slot.position for slot in slots] == [0, 1, 2, 3, 4]
        assert all(slot.selected_option_ids_json is None for slot in slots)
        assert not any(slot.marked for slot in slots)
        assert attempt.current_question_index == 0
        assert not attempt.is_completed

    def test_reuses_existing_session(self, db, attempt):
        again = attempt_tracker.create_attempt(
            db, _config(), "another-student", session_id=attempt.session_id
        )

        assert again.session_id == attempt.session_id
        assert attempt_tracker.get_question_ids(db, again.id) == attempt_tracker.get_question_ids(
            db, attempt.id
        )

    def test_unknown_session(self, db):
        with pytest.raises(NotFoundError):
            attempt_tracker.create_attempt(db, _config(), STUDENT_ID, session_id=uuid.uuid4())

    def test_failed_slots_leave_no_session_behind(self, db, monkeypatch):
        bank = create_bank(db, {Domain.COMPUTE: 5})
        question_id = bank[Domain.COMPUTE][0].id
        monkeypatch.setattr(
            session_store, "get_ordered_question_ids", lambda *args: [question_id, question_id]
        )

        with pytest.raises(SessionCreationError):
            attempt_tracker.create_attempt(db, _config(), STUDENT_ID)

        assert db.query(ExamSession).count() == 0
        assert db.query(ExamSessionQuestion).count() == 0
        assert db.query(Attempt).count() == 0

    def test_config_is_stored(self, db, attempt):
        config = attempt_tracker.get_attempt_config(db, attempt.id)

        assert config.number_of_questions == 5
        assert config.selected_domains == [Domain.COMPUTE]
        assert config.locale == "es"


class TestSubmitAnswer:
    def test_selection_replaces_previous_one(self, db, attempt):
        question_id = attempt_tracker.get_question_ids(db, attempt.id)[0]

        attempt_tracker.submit_answer(db, attempt.id, question_id, [3, 1])
        slot = attempt_tracker.submit_answer(db, attempt.id, question_id, [2])

        assert slot.selected_option_ids_json == "[2]"
        assert slot.answered_at is not None
        view = attempt_tracker.get_question_view(db, attempt.id, 0)
        assert view.selected_option_ids == [2]
        assert view.answered

    def test_empty_selection_reverts_to_unanswered(self, db, attempt):
        question_id = attempt_tracker.get_question_ids(db, attempt.id)[1]
        attempt_tracker.submit_answer(db, attempt.id, question_id, [5])

        slot = attempt_tracker.submit_answer(db, attempt.id, question_id, [])

        assert slot.selected_option_ids_json is None
        assert slot.answered_at is None
        assert attempt_tracker.get_status(db, attempt.id).answered == 0

    def test_marked_changes_only_when_provided(self, db, attempt):
        question_id = attempt_tracker.get_question_ids(db, attempt.id)[2]

        slot = attempt_tracker.submit_answer(db, attempt.id, question_id, [], marked=True)
        assert slot.marked
        slot = attempt_tracker.submit_answer(db, attempt.id, question_id, [7])
        assert slot.marked
        slot = attempt_tracker.submit_answer(db, attempt.id, question_id, [7], marked=False)
        assert not slot.marked

    def test_question_outside_attempt(self, db, attempt):
        with pytest.raises(NotFoundError):
            attempt_tracker.submit_answer(db, attempt.id, 999_999, [1])

    def test_completed_attempt_rejects_answers(self, db, attempt):
        question_id = attempt_tracker.get_question_ids(db, attempt.id)[0]
        attempt_tracker.complete_attempt(db, attempt.id)

        with pytest.raises(InvalidStateError):
            attempt_tracker.submit_answer(db, attempt.id, question_id, [1])


class TestQuestionView:
    def test_exam_mode_hides_answers(self, db, attempt):
        view = attempt_tracker.get_question_view(db, attempt.id, 0)

        assert view.position == 0
        assert view.explanation is None
        assert all(option.is_correct is None for option in view.options)

    def test_practice_attempt_shows_answers(self, db):
        create_bank(db, {Domain.COMPUTE: 5})
        practice = attempt_tracker.create_attempt(db, _config(mode=ExamMode.PRACTICE), STUDENT_ID)

        view = attempt_tracker.get_question_view(db, practice.id, 0)

        assert view.explanation
        assert any(option.is_correct for option in view.options)

    def test_repeated_reads_are_identical(self, db, attempt):
        ids = attempt_tracker.get_question_ids(db, attempt.id)
        before = attempt_tracker.get_question_view(db, attempt.id, 1)
        assert before == attempt_tracker.get_question_view(db, attempt.id, 1)

        attempt_tracker.submit_answer(db, attempt.id, ids[1], [2, 1], marked=True)

        first = attempt_tracker.get_question_view(db, attempt.id, 1)
        second = attempt_tracker.get_question_view(db, attempt.id, 1)
        assert first == second
        assert first.selected_option_ids == [1, 2]
        assert first.marked

    @pytest.mark.parametrize("position", [-1, 5])
    def test_out_of_range(self, db, attempt, position):
        with pytest.raises(NotFoundError):
            attempt_tracker.get_question_view(db, attempt.id, position)


class TestNavigationAndStatus:
    def test_navigate_stores_index(self, db, attempt):
        assert attempt_tracker.navigate(db, attempt.id, 3) == 3
        assert attempt_tracker.get_status(db, attempt.id).current_index == 3

    @pytest.mark.parametrize("index", [-1, 5, 100])
    def test_out_of_range_index_resets_to_zero(self, db, attempt, index):
        attempt_tracker.navigate(db, attempt.id, 2)

        assert attempt_tracker.navigate(db, attempt.id, index) == 0
        assert attempt_tracker.get_status(db, attempt.id).current_index == 0

    def test_status_counts(self, db, attempt):
        ids = attempt_tracker.get_question_ids(db, attempt.id)
        attempt_tracker.submit_answer(db, attempt.id, ids[0], [1])
        attempt_tracker.submit_answer(db, attempt.id, ids[1], [2], marked=True)
        attempt_tracker.submit_answer(db, attempt.id, ids[2], [], marked=True)

        status = attempt_tracker.get_status(db, attempt.id)

        assert status.total == 5
        assert status.answered == 2
        assert status.unanswered == 3
        assert status.marked == 2

    def test_status_is_stable_between_changes(self, db, attempt):
        assert attempt_tracker.get_status(db, attempt.id) == attempt_tracker.get_status(db, attempt.id)

        ids = attempt_tracker.get_question_ids(db, attempt.id)
        attempt_tracker.submit_answer(db, attempt.id, ids[0], [1], marked=True)
        attempt_tracker.submit_answer(db, attempt.id, ids[3], [], marked=True)
        attempt_tracker.navigate(db, attempt.id, 3)

        first = attempt_tracker.get_status(db, attempt.id)
        assert first == attempt_tracker.get_status(db, attempt.id)
        assert (first.answered, first.marked, first.current_index) == (1, 2, 3)

    def test_question_states(self, db, attempt):
        ids = attempt_tracker.get_question_ids(db, attempt.id)
        attempt_tracker.submit_answer(db, attempt.id, ids[0], [1])
        attempt_tracker.submit_answer(db, attempt.id, ids[1], [2], marked=True)
        attempt_tracker.submit_answer(db, attempt.id, ids[2], [], marked=True)

        assert attempt_tracker.get_question_states(db, attempt.id) == {
            0: "q-answered",
            1: "q-answered q-marked",
            2: "q-marked",
            3: "q-unanswered",
            4: "q-unanswered",
        }


class TestCompletion:
    def test_complete_grades_and_stores_score(self, db, attempt):
        ids = attempt_tracker.get_question_ids(db, attempt.id)
        attempt_tracker.submit_answer(db, attempt.id, ids[0], _correct_ids(db, ids[0]))
        attempt_tracker.submit_answer(db, attempt.id, ids[1], _correct_ids(db, ids[1]))
        attempt_tracker.submit_answer(db, attempt.id, ids[2], _wrong_ids(db, ids[2]))

        result = attempt_tracker.complete_attempt(db, attempt.id)

        assert result.correct_answers == 2
        assert result.incorrect_answers == 3
        assert result.score == 40
        stored = attempt_tracker.get_attempt(db, attempt.id)
        assert stored.is_completed
        assert stored.score_percentage == 40
        assert stored.ended_at is not None
        assert stored.duration_seconds >= 0

    def test_duration_uses_start_time(self, db, attempt):
        attempt.started_at = datetime.now(UTC) - timedelta(minutes=3)
        db.commit()

        result = attempt_tracker.complete_attempt(db, attempt.id)

        assert 179 <= result.duration_seconds <= 185
        assert result.average_time_per_question == pytest.approx(result.duration_seconds / 5)

    def test_naive_start_time_is_treated_as_utc(self, db, attempt):
        attempt.started_at = datetime.now(UTC).replace(tzinfo=None) - timedelta(seconds=30)
        db.commit()

        result = attempt_tracker.complete_attempt(db, attempt.id)

        assert 29 <= result.duration_seconds <= 35

    def test_complete_twice_is_rejected(self, db, attempt):
        attempt_tracker.complete_attempt(db, attempt.id)

        with pytest.raises(InvalidStateError):
            attempt_tracker.complete_attempt(db, attempt.id)

    def test_results_require_completion(self, db, attempt):
        with pytest.raises(InvalidStateError):
            attempt_tracker.get_results(db, attempt.id)

        completed = attempt_tracker.complete_attempt(db, attempt.id)
        assert attempt_tracker.get_results(db, attempt.id) == completed

    def test_unknown_attempt(self, db):
        with pytest.raises(NotFoundError):
            attempt_tracker.complete_attempt(db, uuid.uuid4())


class TestMalformedPayloads:
    def test_malformed_selection_reads_as_unanswered(self, db, attempt, caplog):
        slot = db.query(AttemptAnswer).filter_by(attempt_id=attempt.id, position=0).one()
        slot.selected_option_ids_json = "not json"
        db.commit()

        view = attempt_tracker.get_question_view(db, attempt.id, 0)

        assert view.selected_option_ids == []
        assert not view.answered
        assert attempt_tracker.get_question_states(db, attempt.id)[0] == "q-unanswered"
        assert "Failed to parse selected options" in caplog.text

    def test_malformed_config_falls_back_to_default(self, db, attempt, caplog):
        attempt.config_json = "{broken"
        db.commit()

        config = attempt_tracker.get_attempt_config(db, attempt.id)

        assert config.mode == ExamMode.EXAM
        assert config.number_of_questions == 5
        assert "Failed to parse config JSON" in caplog.text

    def test_missing_config_falls_back_to_default(self, db, attempt):
        attempt.config_json = None
        db.commit()

        assert attempt_tracker.get_attempt_config(db, attempt.id).number_of_questions == 5
