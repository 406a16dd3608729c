"""Answer ORM model."""
from __future__ import annotations

from sqlalchemy import ForeignKey, Index, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pollster.models.base import Base, TimestampMixin


class Answer(TimestampMixin, Base):
    """One chosen option; a user's answers to a question are replaced as a set."""

    __tablename__ = "answers"
    __table_args__ = (
        UniqueConstraint("user_id", "option_id", name="uq_answers_user_option"),
        Index("ix_answers_option_id", "option_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    option_id: Mapped[int] = mapped_column(ForeignKey("options.id", ondelete="CASCADE"), nullable=False)

    option = relationship("Option", back_populates="answers")


__all__ = ["Answer"]
