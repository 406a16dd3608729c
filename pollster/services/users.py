"""User accounts and lookup."""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pollster.core.errors import ConflictError, NotFoundError
from pollster.core.security import hash_password, verify_password
from pollster.db.transaction import atomic
from pollster.models import User
from pollster.services.authorization import is_organization_manager, is_organization_member

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class UserLookup:
    id: int
    nickname: str
    phone: str
    email: str
    is_member: bool | None = None
    is_manager: bool | None = None


def create_user(session: Session, *, nickname: str, phone: str, email: str, password: str) -> User:
    with atomic(session):
        clash = session.scalar(select(User.id).where(or_(User.phone == phone, User.email == email)))
        if clash is not None:
            raise ConflictError("Phone or email already registered")
        user = User(nickname=nickname, phone=phone, email=email, hashed_password=hash_password(password))
        session.add(user)
        try:
            session.flush()
        except IntegrityError as exc:
            raise ConflictError("Phone or email already registered") from exc

    logger.info("registered user %s", user.id)
    return user


def authenticate(session: Session, *, username: str, password: str) -> User | None:
    """Match ``username`` against phone or email and check the password."""

    user = session.scalar(select(User).where(or_(User.phone == username, User.email == username)))
    if user is None or not verify_password(password, user.hashed_password):
        return None
    return user


def find_user_by_phone(session: Session, *, phone: str, organization_id: int | None = None) -> UserLookup:
    user = session.scalar(select(User).where(User.phone == phone))
    if user is None:
        raise NotFoundError(f"No user with phone {phone}")
    lookup = UserLookup(id=user.id, nickname=user.nickname, phone=user.phone, email=user.email)
    if organization_id is None:
        return lookup
    return replace(
        lookup,
        is_member=is_organization_member(session, user.id, organization_id),
        is_manager=is_organization_manager(session, user.id, organization_id),
    )


__all__ = ["UserLookup", "authenticate", "create_user", "find_user_by_phone"]
