"""Question and option ORM models."""
from __future__ import annotations

import enum

from sqlalchemy import Enum, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pollster.models.base import Base, TimestampMixin, VersionedMixin


class QuestionType(str, enum.Enum):
    SINGLE = "SINGLE"
    MULTI = "MULTI"


class Question(VersionedMixin, TimestampMixin, Base):
    __tablename__ = "questions"
    __table_args__ = (Index("ix_questions_vote_id", "vote_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    description: Mapped[str] = mapped_column(String(1024), nullable=False)
    type: Mapped[QuestionType] = mapped_column(
        Enum(QuestionType, name="question_type"), nullable=False, default=QuestionType.SINGLE
    )
    vote_id: Mapped[int] = mapped_column(ForeignKey("votes.id", ondelete="CASCADE"), nullable=False)
    owner_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    vote = relationship("Vote", back_populates="questions")
    options = relationship(
        "Option", back_populates="question", cascade="all, delete-orphan", order_by="Option.id"
    )
    read_marks = relationship("QuestionReadMark", back_populates="question", cascade="all, delete-orphan")


class Option(Base):
    """A selectable answer; never edited, only added or deleted."""

    __tablename__ = "options"
    __table_args__ = (Index("ix_options_question_id", "question_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    text: Mapped[str] = mapped_column(String(512), nullable=False)
    question_id: Mapped[int] = mapped_column(
        ForeignKey("questions.id", ondelete="CASCADE"), nullable=False
    )

    question = relationship("Question", back_populates="options")
    answers = relationship("Answer", back_populates="option", cascade="all, delete-orphan")


__all__ = ["Option", "Question", "QuestionType"]
