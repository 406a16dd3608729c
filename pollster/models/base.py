"""Declarative base and mixins for ORM models."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""


class TimestampMixin:
    """Mixin adding created/updated timestamp columns."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class VersionedMixin:
    """Aggregate roots whose changes surface as "new" to other members.

    ``version`` starts at 1 and is only ever raised by one, through
    :func:`pollster.services.versioning.bump_version`, inside the transaction
    that performs the structural change.
    """

    version: Mapped[int] = mapped_column(BigInteger, nullable=False, default=1, server_default="1")


__all__ = ["Base", "TimestampMixin", "VersionedMixin"]
