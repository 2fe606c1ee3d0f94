"""Database models."""

# Import all models here so metadata.create_all sees every table
from examsim.models.attempt import Attempt, AttemptAnswer
from examsim.models.question import Difficulty, Domain, OptionItem, Question, QuestionType
from examsim.models.session import ExamMode, ExamSession, ExamSessionQuestion

__all__ = [
    "Attempt",
    "AttemptAnswer",
    "Difficulty",
    "Domain",
    "ExamMode",
    "ExamSession",
    "ExamSessionQuestion",
    "OptionItem",
    "Question",
    "QuestionType",
]
