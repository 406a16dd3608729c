"""Account registration and token issuance."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from pollster.api.deps import get_db_session, get_tokener
from pollster.core.security import Tokener
from pollster.schemas.user import LoginRequest, SignupRequest, TokenResponse, UserRead
from pollster.services import users

router = APIRouter()


@router.post("/signup", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def signup(payload: SignupRequest, session: Session = Depends(get_db_session)) -> UserRead:
    user = users.create_user(
        session,
        nickname=payload.nickname,
        phone=payload.phone,
        email=payload.email,
        password=payload.password,
    )
    return UserRead.model_validate(user)


@router.post("/login", response_model=TokenResponse, summary="Issue a bearer access token")
def login(
    payload: LoginRequest,
    session: Session = Depends(get_db_session),
    tokener: Tokener = Depends(get_tokener),
) -> TokenResponse:
    user = users.authenticate(session, username=payload.username, password=payload.password)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return TokenResponse(
        access_token=tokener.issue(user.id),
        expires_in=int(tokener.expires_delta.total_seconds()),
    )
