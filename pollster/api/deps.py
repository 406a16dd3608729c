"""Common dependencies for API routes."""
from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from fastapi import Depends, HTTPException, Query, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from pollster.core.config import get_settings
from pollster.core.security import InvalidTokenError, Tokener
from pollster.db.session import SessionLocal
from pollster.services.authorization import Authorizer, SqlAuthorizer

bearer_scheme = HTTPBearer(auto_error=False)


def get_db_session() -> Iterator[Session]:
    """Yield a database session for FastAPI dependencies."""

    session: Session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


def get_tokener() -> Tokener:
    return Tokener.from_settings()


def resolve_identity(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    tokener: Tokener = Depends(get_tokener),
) -> int | None:
    """Verify the bearer token, if any, and record the caller on ``request.state``.

    Returns ``None`` instead of raising so gates can count the rejection.
    """
    if credentials is None:
        return None
    try:
        user_id = tokener.verify(credentials.credentials)
    except InvalidTokenError:
        return None
    request.state.user_id = user_id
    return user_id


def get_current_user_id(user_id: int | None = Depends(resolve_identity)) -> int:
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user_id


def get_authorizer(session: Session = Depends(get_db_session)) -> Authorizer:
    return SqlAuthorizer(session)


@dataclass(frozen=True, slots=True)
class PageParams:
    page: int
    size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.size


def page_params(
    page: int = Query(default=1, ge=1),
    size: int | None = Query(default=None, ge=1),
) -> PageParams:
    settings = get_settings()
    size = size or settings.default_page_size
    if size > settings.max_page_size:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"size must be at most {settings.max_page_size}",
        )
    return PageParams(page=page, size=size)


__all__ = [
    "PageParams",
    "bearer_scheme",
    "get_authorizer",
    "get_current_user_id",
    "get_db_session",
    "get_tokener",
    "page_params",
    "resolve_identity",
]
