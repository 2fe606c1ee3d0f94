"""Read-only access to the question bank."""

from collections.abc import Iterable

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from examsim.core.app_exceptions import NotFoundError
from examsim.core.config import settings
from examsim.models.question import Domain, OptionItem, Question
from examsim.schemas.question import OptionView, QuestionView
from examsim.services.answer_codec import read_tags


def find_by_domain(db: Session, domain: Domain) -> list[Question]:
    """All questions of one domain, ordered by id."""
    stmt = select(Question).where(Question.domain == domain).order_by(Question.id)
    return list(db.execute(stmt).scalars().all())


def find_by_domains(db: Session, domains: Iterable[Domain]) -> dict[Domain, list[Question]]:
    """Questions grouped into one pool per requested domain, each ordered by id."""
    domains = list(domains)
    pools: dict[Domain, list[Question]] = {domain: [] for domain in domains}
    if not domains:
        return pools
    stmt = select(Question).where(Question.domain.in_(domains)).order_by(Question.id)
    for question in db.execute(stmt).scalars().all():
        pools[question.domain].append(question)
    return pools


def find_by_id(db: Session, question_id: int) -> Question:
    """Fetch one question or raise NotFoundError."""
    question = db.get(Question, question_id)
    if question is None:
        raise NotFoundError("Question", question_id)
    return question


def find_by_ids(db: Session, question_ids: Iterable[int]) -> dict[int, Question]:
    """Fetch many questions keyed by id. Unknown ids are absent from the result."""
    ids = list(set(question_ids))
    if not ids:
        return {}
    stmt = select(Question).where(Question.id.in_(ids))
    return {q.id: q for q in db.execute(stmt).scalars().all()}


def count_by_domain(db: Session) -> dict[Domain, int]:
    """Question counts for every domain (zero when empty)."""
    counts = {domain: 0 for domain in Domain}
    stmt = select(Question.domain, func.count(Question.id)).group_by(Question.domain)
    for domain, count in db.execute(stmt).all():
        counts[domain] = count
    return counts


def count_all(db: Session) -> int:
    """Total number of questions in the bank."""
    return db.execute(select(func.count(Question.id))).scalar_one()


def normalize_lang(lang: str | None) -> str:
    """Map a language tag ("en-US", "ES", None) onto a supported locale."""
    if not lang:
        return settings.DEFAULT_LOCALE
    primary = lang.split("-")[0].split("_")[0].lower()
    return primary if primary in settings.SUPPORTED_LOCALES else settings.DEFAULT_LOCALE


def localize(default: str | None, variants: dict[str, str | None], lang: str | None) -> str:
    """Pick the variant for lang, falling back to the default-language text."""
    text = variants.get(normalize_lang(lang))
    return text if text else (default or "")


def question_stem(question: Question, lang: str | None) -> str:
    return localize(question.stem, {"en": question.stem_en, "es": question.stem_es}, lang)


def question_explanation(question: Question, lang: str | None) -> str:
    return localize(
        question.explanation,
        {"en": question.explanation_en, "es": question.explanation_es},
        lang,
    )


def option_text(option: OptionItem, lang: str | None) -> str:
    return localize(option.text, {"en": option.text_en, "es": option.text_es}, lang)


def correct_option_ids(question: Question) -> list[int]:
    """Ids of the options flagged correct, ascending."""
    return sorted(option.id for option in question.options if option.is_correct)


def to_view(
    question: Question,
    include_correct_answers: bool,
    lang: str | None = None,
) -> QuestionView:
    """
    Convert a question to its learner-facing view.

    Correct flags and explanation are only included when
    include_correct_answers is set (PRACTICE mode).
    """
    options = [
        OptionView(
            id=option.id,
            label=option.label,
            text=option_text(option, lang),
            is_correct=option.is_correct if include_correct_answers else None,
        )
        for option in question.options
    ]
    return QuestionView(
        id=question.id,
        domain=question.domain,
        difficulty=question.difficulty,
        qtype=question.qtype,
        stem=question_stem(question, lang),
        explanation=question_explanation(question, lang) if include_correct_answers else None,
        options=options,
        tags=read_tags(question.tags_json, question_id=question.id),
    )
