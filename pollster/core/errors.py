"""Domain error taxonomy shared by services and the HTTP layer."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class PollsterError(RuntimeError):
    """Base exception for business-logic failures."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(PollsterError):
    """Raised when a referenced entity does not exist or is out of scope."""

    status_code = status.HTTP_404_NOT_FOUND


class PermissionDeniedError(PollsterError):
    """Raised when the caller is identified but lacks the required capability."""

    status_code = status.HTTP_403_FORBIDDEN


class ConflictError(PollsterError):
    """Raised when an operation collides with existing state."""

    status_code = status.HTTP_409_CONFLICT


class InvalidAnswerError(PollsterError):
    """Raised when submitted options violate the question's constraints."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class VoteClosedError(PollsterError):
    """Raised when answering a vote whose deadline has passed."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


async def pollster_error_handler(request: Request, exc: PollsterError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("database failure while handling %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def register_exception_handlers(application: FastAPI) -> None:
    """Map domain and store failures onto HTTP responses."""
    application.add_exception_handler(PollsterError, pollster_error_handler)  # type: ignore[arg-type]
    application.add_exception_handler(SQLAlchemyError, database_error_handler)  # type: ignore[arg-type]


__all__ = [
    "ConflictError",
    "InvalidAnswerError",
    "NotFoundError",
    "PermissionDeniedError",
    "PollsterError",
    "VoteClosedError",
    "register_exception_handlers",
]
