"""Token issuance and password hashing."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from uuid import uuid4

import bcrypt
from jose import JWTError, jwt  # type: ignore[import-untyped]
from pydantic import BaseModel, ValidationError, field_validator

from pollster.core.config import Settings, get_settings


class InvalidTokenError(ValueError):
    """Raised when a bearer token cannot be verified."""


class TokenPayload(BaseModel):
    sub: str
    iat: datetime
    exp: datetime
    jti: str

    @field_validator("sub")
    @classmethod
    def _numeric_subject(cls, value: str) -> str:
        if not value.isdigit():
            raise ValueError("subject must be a numeric user id")
        return value


@dataclass(frozen=True, slots=True)
class Tokener:
    """Issues and verifies HS256 access tokens carrying a numeric user id."""

    secret: str
    algorithm: str
    expires_delta: timedelta

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "Tokener":
        settings = settings or get_settings()
        return cls(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            expires_delta=timedelta(minutes=settings.access_token_expire_minutes),
        )

    def issue(self, user_id: int) -> str:
        now = datetime.now(UTC)
        payload = {
            "sub": str(user_id),
            "iat": int(now.timestamp()),
            "exp": int((now + self.expires_delta).timestamp()),
            "jti": uuid4().hex,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> int:
        try:
            raw = jwt.decode(token, self.secret, algorithms=[self.algorithm])
            payload = TokenPayload(**raw)
        except (JWTError, ValidationError) as exc:
            raise InvalidTokenError("Invalid token") from exc
        return int(payload.sub)


def hash_password(raw_password: str) -> str:
    return bcrypt.hashpw(raw_password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(raw_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(raw_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:  # pragma: no cover - invalid hash format
        return False


__all__ = [
    "InvalidTokenError",
    "TokenPayload",
    "Tokener",
    "hash_password",
    "verify_password",
]
