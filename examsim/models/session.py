"""Exam session models: write-once, position-ordered question assignments."""

import uuid
from enum import Enum as PyEnum

from sqlalchemy import (
    JSON,
    BigInteger,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from examsim.db.base import Base


class ExamMode(str, PyEnum):
    """Delivery mode. PRACTICE reveals correct answers while answering."""

    EXAM = "EXAM"
    PRACTICE = "PRACTICE"


class ExamSession(Base):
    """Exam session - an immutable, reusable question list."""

    __tablename__ = "exam_sessions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    mode = Column(Enum(ExamMode, name="exam_mode"), nullable=False, default=ExamMode.EXAM)
    total_questions = Column(Integer, nullable=False)
    locale = Column(String(5), nullable=False)

    # Selection inputs, kept so any session can be reproduced
    seed = Column(BigInteger, nullable=False)
    domains_json = Column(JSON, nullable=False)  # ["COMPUTE", "STORAGE", ...]
    percentages_json = Column(JSON, nullable=True)  # {"COMPUTE": 60, ...} or null

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    questions = relationship(
        "ExamSessionQuestion",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="ExamSessionQuestion.position",
    )


class ExamSessionQuestion(Base):
    """Question assigned to a session position (1-based)."""

    __tablename__ = "exam_session_questions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("exam_sessions.id", ondelete="CASCADE"),
        nullable=False,
    )
    position = Column(Integer, nullable=False)
    question_id = Column(Integer, ForeignKey("questions.id"), nullable=False)
    served_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    session = relationship("ExamSession", back_populates="questions")
    question = relationship("Question")

    __table_args__ = (
        UniqueConstraint("session_id", "position", name="uq_session_question_position"),
        UniqueConstraint("session_id", "question_id", name="uq_session_question_id"),
        Index("ix_exam_session_questions_session_id", "session_id"),
    )
