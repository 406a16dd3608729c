"""Pydantic schemas for accounts and tokens."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class SignupRequest(BaseModel):
    nickname: str = Field(..., min_length=1, max_length=64)
    phone: str = Field(..., min_length=3, max_length=32)
    email: str = Field(..., max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=6, max_length=128)


class LoginRequest(BaseModel):
    username: str
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    nickname: str
    phone: str
    email: str


class UserLookupRead(UserRead):
    is_member: bool | None = None
    is_manager: bool | None = None


__all__ = ["LoginRequest", "SignupRequest", "TokenResponse", "UserLookupRead", "UserRead"]
