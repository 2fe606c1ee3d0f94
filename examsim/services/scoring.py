"""Grading of attempts.

Pure functions over already-loaded rows: nothing here touches the database,
so identical inputs always produce identical results.
"""

from collections.abc import Mapping, Sequence

from examsim.models.attempt import Attempt, AttemptAnswer
from examsim.models.question import Domain, Question
from examsim.schemas.question import OptionView
from examsim.schemas.result import DomainBreakdown, QuestionResult, ResultSummary
from examsim.services import question_bank
from examsim.services.answer_codec import read_selection
from examsim.services.selector import round_half_up


def is_answer_correct(selected: Sequence[int], correct: Sequence[int]) -> bool:
    """Exact set match; an empty selection is never correct unless nothing is correct."""
    return set(selected) == set(correct)


def score_percentage(correct: int, total: int) -> int:
    """Overall score, rounded half-up; 0 for an empty attempt."""
    if total <= 0:
        return 0
    return round_half_up(correct * 100, total)


def _domain_percentage(correct: int, total: int) -> float:
    if total == 0:
        return 0.0
    return round(correct * 100 / total, 2)


def grade_attempt(
    attempt: Attempt,
    slots: Sequence[AttemptAnswer],
    questions: Mapping[int, Question],
    lang: str | None = None,
) -> ResultSummary:
    """
    Grade an attempt.

    Unanswered slots count as incorrect. The domain breakdown lists every
    Domain, including those with no questions in this attempt.

    Args:
        attempt: Attempt being graded (id, duration)
        slots: Answer slots in position order
        questions: Bank questions keyed by id
        lang: Language for stems and option texts

    Returns:
        ResultSummary
    """
    breakdown = {domain: DomainBreakdown(domain=domain) for domain in Domain}
    results: list[QuestionResult] = []
    correct_count = 0

    for slot in slots:
        question = questions[slot.question_id]
        selected = read_selection(
            slot.selected_option_ids_json,
            attempt_id=str(attempt.id),
            question_id=slot.question_id,
        )
        correct_ids = question_bank.correct_option_ids(question)
        is_correct = is_answer_correct(selected, correct_ids)

        entry = breakdown[question.domain]
        entry.total += 1
        if is_correct:
            entry.correct += 1
            correct_count += 1

        results.append(
            QuestionResult(
                question_id=question.id,
                position=slot.position,
                domain=question.domain,
                stem=question_bank.question_stem(question, lang),
                explanation=question_bank.question_explanation(question, lang),
                correct_option_ids=correct_ids,
                selected_option_ids=selected,
                is_correct=is_correct,
                options=[
                    OptionView(
                        id=option.id,
                        label=option.label,
                        text=question_bank.option_text(option, lang),
                        is_correct=option.is_correct,
                    )
                    for option in question.options
                ],
            )
        )

    for entry in breakdown.values():
        entry.percentage = _domain_percentage(entry.correct, entry.total)

    total = len(slots)
    duration = attempt.duration_seconds
    average = duration / total if duration is not None and total > 0 else None

    return ResultSummary(
        attempt_id=attempt.id,
        total_questions=total,
        correct_answers=correct_count,
        incorrect_answers=total - correct_count,
        score=score_percentage(correct_count, total),
        duration_seconds=duration,
        average_time_per_question=average,
        domain_breakdowns=breakdown,
        question_results=results,
    )
