"""Question bank models (read-only from the engine's point of view)."""

from enum import Enum as PyEnum

from sqlalchemy import Boolean, Column, Enum, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship

from examsim.db.base import Base


class Domain(str, PyEnum):
    """Subject-matter domain used for content grouping and quota sampling."""

    IDENTITY_GOVERNANCE = "IDENTITY_GOVERNANCE"
    STORAGE = "STORAGE"
    COMPUTE = "COMPUTE"
    NETWORKING = "NETWORKING"
    MONITOR_MAINTAIN = "MONITOR_MAINTAIN"

    @property
    def display_name(self) -> str:
        return _DOMAIN_DISPLAY_NAMES[self]


_DOMAIN_DISPLAY_NAMES = {
    Domain.IDENTITY_GOVERNANCE: "Identity & Governance",
    Domain.STORAGE: "Storage",
    Domain.COMPUTE: "Compute",
    Domain.NETWORKING: "Networking",
    Domain.MONITOR_MAINTAIN: "Monitor & Maintain",
}


class Difficulty(str, PyEnum):
    """Question difficulty."""

    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"


class QuestionType(str, PyEnum):
    """Question type. All types are graded as option-id sets."""

    SINGLE = "SINGLE"
    MULTI = "MULTI"
    YESNO = "YESNO"
    MATCHING = "MATCHING"  # not yet delivered
    ORDERING = "ORDERING"  # not yet delivered


class Question(Base):
    """A question record. Belongs to exactly one domain."""

    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    domain = Column(Enum(Domain, name="question_domain"), nullable=False)
    difficulty = Column(
        Enum(Difficulty, name="question_difficulty"),
        nullable=False,
        default=Difficulty.MEDIUM,
    )
    qtype = Column(
        Enum(QuestionType, name="question_type"),
        nullable=False,
        default=QuestionType.SINGLE,
    )

    # Default-language content, used when a localized variant is missing
    stem = Column(Text, nullable=False)
    explanation = Column(Text, nullable=False, default="")

    stem_es = Column(Text, nullable=True)
    stem_en = Column(Text, nullable=True)
    explanation_es = Column(Text, nullable=True)
    explanation_en = Column(Text, nullable=True)

    tags_json = Column(Text, nullable=True)  # '["vnet", "nsg"]'

    options = relationship(
        "OptionItem",
        back_populates="question",
        cascade="all, delete-orphan",
        order_by="OptionItem.id",
        lazy="selectin",
    )

    __table_args__ = (Index("ix_questions_domain", "domain"),)


class OptionItem(Base):
    """An answer option of a question."""

    __tablename__ = "option_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    question_id = Column(
        Integer,
        ForeignKey("questions.id", ondelete="CASCADE"),
        nullable=False,
    )
    label = Column(String(10), nullable=False)  # "A", "B", ...
    text = Column(Text, nullable=False)
    text_es = Column(Text, nullable=True)
    text_en = Column(Text, nullable=True)
    is_correct = Column(Boolean, nullable=False, default=False)

    question = relationship("Question", back_populates="options")

    __table_args__ = (Index("ix_option_items_question_id", "question_id"),)
