"""Attempt models: a learner's one-shot, gradable pass over a question list."""

import uuid

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from examsim.db.base import Base
from examsim.models.session import ExamMode


class Attempt(Base):
    """A learner's attempt at a session's questions."""

    __tablename__ = "attempts"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    session_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("exam_sessions.id"),
        nullable=True,
    )
    student_id = Column(String(64), nullable=False)
    mode = Column(Enum(ExamMode, name="exam_mode"), nullable=False)

    started_at = Column(DateTime(timezone=True), nullable=False)
    ended_at = Column(DateTime(timezone=True), nullable=True)
    duration_seconds = Column(Integer, nullable=True)

    total_questions = Column(Integer, nullable=False)
    config_json = Column(Text, nullable=True)  # serialized ExamConfig

    # Set once at completion
    score_percentage = Column(Integer, nullable=True)
    is_completed = Column(Boolean, nullable=False, default=False)

    current_question_index = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now(), nullable=True)

    answers = relationship(
        "AttemptAnswer",
        back_populates="attempt",
        cascade="all, delete-orphan",
        order_by="AttemptAnswer.position",
    )

    __table_args__ = (
        Index("ix_attempts_student_started", "student_id", "started_at"),
    )


class AttemptAnswer(Base):
    """Answer slot for one question of an attempt (0-based position)."""

    __tablename__ = "attempt_answers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    attempt_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("attempts.id", ondelete="CASCADE"),
        nullable=False,
    )
    question_id = Column(Integer, ForeignKey("questions.id"), nullable=False)
    position = Column(Integer, nullable=False)

    selected_option_ids_json = Column(Text, nullable=True)  # "[2, 4]", null if unanswered
    marked = Column(Boolean, nullable=False, default=False)
    answered_at = Column(DateTime(timezone=True), nullable=True)

    attempt = relationship("Attempt", back_populates="answers")

    __table_args__ = (
        UniqueConstraint("attempt_id", "question_id", name="uq_attempt_answer_question"),
        UniqueConstraint("attempt_id", "position", name="uq_attempt_answer_position"),
        Index("ix_attempt_answers_attempt_id", "attempt_id"),
    )
