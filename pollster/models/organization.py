"""Organization ORM models."""
from __future__ import annotations

from sqlalchemy import ForeignKey, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pollster.models.base import Base, TimestampMixin, VersionedMixin


class Organization(VersionedMixin, TimestampMixin, Base):
    """A group of users; members read, managers write."""

    __tablename__ = "organizations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(Text)

    members = relationship("OrganizationMember", back_populates="organization", cascade="all, delete-orphan")
    managers = relationship("OrganizationManager", back_populates="organization", cascade="all, delete-orphan")
    votes = relationship("Vote", back_populates="organization", cascade="all, delete-orphan")
    read_marks = relationship("OrganizationReadMark", back_populates="organization", cascade="all, delete-orphan")


class OrganizationMember(Base):
    __tablename__ = "organization_members"
    __table_args__ = (
        UniqueConstraint("organization_id", "user_id", name="uq_organization_members_org_user"),
        Index("ix_organization_members_user_id", "user_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    organization_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    organization = relationship("Organization", back_populates="members")
    user = relationship("User")


class OrganizationManager(Base):
    __tablename__ = "organization_managers"
    __table_args__ = (
        UniqueConstraint("organization_id", "user_id", name="uq_organization_managers_org_user"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    organization_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    organization = relationship("Organization", back_populates="managers")


__all__ = ["Organization", "OrganizationManager", "OrganizationMember"]
