"""Organization endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from pollster.api.deps import PageParams, get_authorizer, get_current_user_id, get_db_session, page_params
from pollster.api.gate import GateConfig, authorization_gate
from pollster.schemas.common import Page
from pollster.schemas.organization import (
    ManagerAdd,
    MemberRead,
    MembersAdd,
    MembersAdded,
    OrganizationCreate,
    OrganizationDetailRead,
    OrganizationListItemRead,
    OrganizationRead,
    OrganizationUpdate,
)
from pollster.schemas.vote import VoteCreate, VoteListItemRead, VoteRead
from pollster.services import organizations, votes
from pollster.services.authorization import Authorizer, is_organization_member
from pollster.services.votes import QuestionDraft

organization_member_gate = authorization_gate(GateConfig(is_organization_member, "organization_id"))

router = APIRouter(prefix="/organizations")
organization_router = APIRouter(
    prefix="/organizations/{organization_id}",
    dependencies=[Depends(organization_member_gate)],
)


@router.get("", response_model=Page[OrganizationListItemRead])
def list_organizations(
    page: PageParams = Depends(page_params),
    session: Session = Depends(get_db_session),
    user_id: int = Depends(get_current_user_id),
) -> Page[OrganizationListItemRead]:
    items, total = organizations.list_organizations(
        session, user_id=user_id, offset=page.offset, limit=page.size
    )
    return Page[OrganizationListItemRead](
        items=[OrganizationListItemRead.model_validate(item) for item in items],
        total=total,
    )


@router.post("", response_model=OrganizationRead, status_code=status.HTTP_201_CREATED)
def create_organization(
    payload: OrganizationCreate,
    session: Session = Depends(get_db_session),
    user_id: int = Depends(get_current_user_id),
) -> OrganizationRead:
    organization = organizations.create_organization(
        session, user_id=user_id, name=payload.name, description=payload.description
    )
    return OrganizationRead.model_validate(organization)


@organization_router.get("", response_model=OrganizationDetailRead)
def get_organization(
    organization_id: int,
    session: Session = Depends(get_db_session),
    user_id: int = Depends(get_current_user_id),
    authorizer: Authorizer = Depends(get_authorizer),
) -> OrganizationDetailRead:
    detail = organizations.get_organization_detail(
        session, user_id=user_id, organization_id=organization_id, authorizer=authorizer
    )
    return OrganizationDetailRead.model_validate(detail)


@organization_router.put("", response_model=OrganizationRead)
def update_organization(
    organization_id: int,
    payload: OrganizationUpdate,
    session: Session = Depends(get_db_session),
    user_id: int = Depends(get_current_user_id),
    authorizer: Authorizer = Depends(get_authorizer),
) -> OrganizationRead:
    organization = organizations.update_organization(
        session,
        user_id=user_id,
        organization_id=organization_id,
        name=payload.name,
        description=payload.description,
        authorizer=authorizer,
    )
    return OrganizationRead.model_validate(organization)


@organization_router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def delete_organization(
    organization_id: int,
    session: Session = Depends(get_db_session),
    user_id: int = Depends(get_current_user_id),
    authorizer: Authorizer = Depends(get_authorizer),
) -> Response:
    organizations.delete_organization(
        session, user_id=user_id, organization_id=organization_id, authorizer=authorizer
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@organization_router.get("/members", response_model=Page[MemberRead])
def list_members(
    organization_id: int,
    page: PageParams = Depends(page_params),
    session: Session = Depends(get_db_session),
) -> Page[MemberRead]:
    items, total = organizations.list_members(
        session, organization_id=organization_id, offset=page.offset, limit=page.size
    )
    return Page[MemberRead](items=[MemberRead.model_validate(item) for item in items], total=total)


@organization_router.post("/members", response_model=MembersAdded, status_code=status.HTTP_201_CREATED)
def add_members(
    organization_id: int,
    payload: MembersAdd,
    session: Session = Depends(get_db_session),
    user_id: int = Depends(get_current_user_id),
    authorizer: Authorizer = Depends(get_authorizer),
) -> MembersAdded:
    added = organizations.add_members(
        session,
        user_id=user_id,
        organization_id=organization_id,
        member_ids=payload.user_ids,
        authorizer=authorizer,
    )
    return MembersAdded(added=added)


@organization_router.post("/managers", status_code=status.HTTP_204_NO_CONTENT)
def add_manager(
    organization_id: int,
    payload: ManagerAdd,
    session: Session = Depends(get_db_session),
    user_id: int = Depends(get_current_user_id),
    authorizer: Authorizer = Depends(get_authorizer),
) -> Response:
    organizations.add_manager(
        session,
        user_id=user_id,
        organization_id=organization_id,
        manager_id=payload.user_id,
        authorizer=authorizer,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@organization_router.get("/votes", response_model=Page[VoteListItemRead])
def list_votes(
    organization_id: int,
    page: PageParams = Depends(page_params),
    session: Session = Depends(get_db_session),
    user_id: int = Depends(get_current_user_id),
) -> Page[VoteListItemRead]:
    items, total = votes.list_votes(
        session, user_id=user_id, organization_id=organization_id, offset=page.offset, limit=page.size
    )
    return Page[VoteListItemRead](items=[VoteListItemRead.model_validate(item) for item in items], total=total)


@organization_router.post("/votes", response_model=VoteRead, status_code=status.HTTP_201_CREATED)
def create_vote(
    organization_id: int,
    payload: VoteCreate,
    session: Session = Depends(get_db_session),
    user_id: int = Depends(get_current_user_id),
) -> VoteRead:
    vote = votes.create_vote(
        session,
        user_id=user_id,
        organization_id=organization_id,
        name=payload.name,
        deadline=payload.deadline,
        questions=[
            QuestionDraft(description=item.description, type=item.type, options=item.options)
            for item in payload.questions
        ],
    )
    return VoteRead.model_validate(vote)
