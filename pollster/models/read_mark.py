"""Per-user read marks, one family per versioned entity kind."""
from __future__ import annotations

from sqlalchemy import BigInteger, ForeignKey, Index, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pollster.models.base import Base


class OrganizationReadMark(Base):
    __tablename__ = "organization_read_marks"
    __table_args__ = (
        UniqueConstraint("organization_id", "user_id", name="uq_organization_read_marks_org_user"),
        Index("ix_organization_read_marks_user_id", "user_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    organization_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    version_seen: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    organization = relationship("Organization", back_populates="read_marks")


class VoteReadMark(Base):
    __tablename__ = "vote_read_marks"
    __table_args__ = (
        UniqueConstraint("vote_id", "user_id", name="uq_vote_read_marks_vote_user"),
        Index("ix_vote_read_marks_user_id", "user_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    vote_id: Mapped[int] = mapped_column(ForeignKey("votes.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    version_seen: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    vote = relationship("Vote", back_populates="read_marks")


class QuestionReadMark(Base):
    __tablename__ = "question_read_marks"
    __table_args__ = (
        UniqueConstraint("question_id", "user_id", name="uq_question_read_marks_question_user"),
        Index("ix_question_read_marks_user_id", "user_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    question_id: Mapped[int] = mapped_column(
        ForeignKey("questions.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    version_seen: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    question = relationship("Question", back_populates="read_marks")


__all__ = ["OrganizationReadMark", "QuestionReadMark", "VoteReadMark"]
