"""Vote ORM model."""
from __future__ import annotations

import enum
from datetime import date

from sqlalchemy import Date, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pollster.models.base import Base, TimestampMixin, VersionedMixin


class VoteStatus(str, enum.Enum):
    COLLECTING = "COLLECTING"
    CLOSED = "CLOSED"


class Vote(VersionedMixin, TimestampMixin, Base):
    """A survey published inside one organization."""

    __tablename__ = "votes"
    __table_args__ = (Index("ix_votes_organization_id", "organization_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    deadline: Mapped[date | None] = mapped_column(Date)
    organization_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )

    organization = relationship("Organization", back_populates="votes")
    questions = relationship("Question", back_populates="vote", cascade="all, delete-orphan")
    read_marks = relationship("VoteReadMark", back_populates="vote", cascade="all, delete-orphan")


__all__ = ["Vote", "VoteStatus"]
