"""User lookup endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pollster.api.deps import get_authorizer, get_current_user_id, get_db_session
from pollster.core.errors import PermissionDeniedError
from pollster.schemas.user import UserLookupRead
from pollster.services import users
from pollster.services.authorization import Authorizer

router = APIRouter()


@router.get("", response_model=UserLookupRead, summary="Find a user by phone")
def find_user(
    phone: str = Query(..., min_length=1),
    organization_id: int | None = Query(default=None),
    session: Session = Depends(get_db_session),
    user_id: int = Depends(get_current_user_id),
    authorizer: Authorizer = Depends(get_authorizer),
) -> UserLookupRead:
    if organization_id is not None and not authorizer.check_organization_read(user_id, organization_id):
        raise PermissionDeniedError("Not a member of this organization")
    lookup = users.find_user_by_phone(session, phone=phone, organization_id=organization_id)
    return UserLookupRead.model_validate(lookup)
