"""Business logic for organizations and their membership."""
from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy import exists, func, insert, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pollster.core.errors import ConflictError, NotFoundError, PermissionDeniedError
from pollster.db.transaction import atomic
from pollster.models import (
    Organization,
    OrganizationManager,
    OrganizationMember,
    User,
    Vote,
)
from pollster.services.authorization import Authorizer, is_organization_manager
from pollster.services.versioning import (
    EntityKind,
    EntityRef,
    advance_read_mark,
    bump_version,
    has_updated_expression,
    resolve_has_updated,
    seed_member_subtree,
    seed_read_marks,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class OrganizationListItem:
    id: int
    name: str
    description: str | None
    version: int
    vote_count: int
    has_updated: bool


@dataclass(slots=True, frozen=True)
class OrganizationDetail:
    id: int
    name: str
    description: str | None
    version: int
    has_updated: bool
    is_manager: bool


@dataclass(slots=True, frozen=True)
class MemberItem:
    id: int
    nickname: str
    phone: str
    email: str
    is_manager: bool


def _get_organization(session: Session, organization_id: int, *, for_update: bool = False) -> Organization:
    stmt = select(Organization).where(Organization.id == organization_id)
    if for_update:
        stmt = stmt.with_for_update()
    organization = session.scalar(stmt)
    if organization is None:
        raise NotFoundError(f"Organization {organization_id} not found")
    return organization


def _ensure_manager(authorizer: Authorizer, user_id: int, organization_id: int) -> None:
    if not authorizer.check_organization_write(user_id, organization_id):
        raise PermissionDeniedError("Only organization managers may do this")


def _name_taken(session: Session, name: str, *, exclude_id: int | None = None) -> bool:
    condition = Organization.name == name
    if exclude_id is not None:
        condition = condition & (Organization.id != exclude_id)
    return bool(session.scalar(select(exists().where(condition))))


def create_organization(
    session: Session,
    *,
    user_id: int,
    name: str,
    description: str | None = None,
) -> Organization:
    """Create an organization; the creator becomes its first member and manager."""

    with atomic(session):
        if _name_taken(session, name):
            raise ConflictError(f"Organization '{name}' already exists")
        organization = Organization(name=name, description=description, version=1)
        session.add(organization)
        try:
            session.flush()
        except IntegrityError as exc:
            raise ConflictError(f"Organization '{name}' already exists") from exc

        session.add_all(
            [
                OrganizationMember(organization_id=organization.id, user_id=user_id),
                OrganizationManager(organization_id=organization.id, user_id=user_id),
            ]
        )
        session.flush()
        seed_read_marks(
            session,
            EntityKind.ORGANIZATION,
            entity_ids=[organization.id],
            user_ids=[user_id],
            version_seen=organization.version,
        )

    logger.info("user %s created organization %s", user_id, organization.id)
    return organization


def list_organizations(
    session: Session,
    *,
    user_id: int,
    offset: int,
    limit: int,
) -> tuple[list[OrganizationListItem], int]:
    """Organizations the caller belongs to, each with its ``has_updated`` flag."""

    vote_count = (
        select(func.count(Vote.id)).where(Vote.organization_id == Organization.id).scalar_subquery()
    )
    stmt = (
        select(
            Organization.id,
            Organization.name,
            Organization.description,
            Organization.version,
            vote_count.label("vote_count"),
            has_updated_expression(EntityKind.ORGANIZATION, user_id).label("has_updated"),
        )
        .join(OrganizationMember, OrganizationMember.organization_id == Organization.id)
        .where(OrganizationMember.user_id == user_id)
        .order_by(Organization.id)
        .offset(offset)
        .limit(limit)
    )
    items = [
        OrganizationListItem(
            id=row.id,
            name=row.name,
            description=row.description,
            version=row.version,
            vote_count=row.vote_count,
            has_updated=bool(row.has_updated),
        )
        for row in session.execute(stmt)
    ]
    total = session.scalar(
        select(func.count()).select_from(OrganizationMember).where(OrganizationMember.user_id == user_id)
    )
    return items, int(total or 0)


def get_organization_detail(
    session: Session,
    *,
    user_id: int,
    organization_id: int,
    authorizer: Authorizer,
) -> OrganizationDetail:
    """Return the organization and mark it seen by the caller."""

    ref = EntityRef.organization(organization_id)
    with atomic(session):
        organization = _get_organization(session, organization_id)
        observed = advance_read_mark(session, user_id, ref)
        detail = OrganizationDetail(
            id=organization.id,
            name=organization.name,
            description=organization.description,
            version=observed,
            has_updated=resolve_has_updated(session, user_id, ref),
            is_manager=authorizer.check_organization_write(user_id, organization_id),
        )
    return detail


def update_organization(
    session: Session,
    *,
    user_id: int,
    organization_id: int,
    name: str | None,
    description: str | None,
    authorizer: Authorizer,
) -> Organization:
    _ensure_manager(authorizer, user_id, organization_id)

    with atomic(session):
        organization = _get_organization(session, organization_id, for_update=True)
        changed = False
        if name is not None and name != organization.name:
            if _name_taken(session, name, exclude_id=organization_id):
                raise ConflictError(f"Organization '{name}' already exists")
            organization.name = name
            changed = True
        if description is not None and description != organization.description:
            organization.description = description
            changed = True
        if changed:
            bump_version(session, EntityRef.organization(organization_id))

    session.refresh(organization)
    return organization


def delete_organization(
    session: Session,
    *,
    user_id: int,
    organization_id: int,
    authorizer: Authorizer,
) -> None:
    """Delete the organization and, by cascade, everything beneath it."""

    _ensure_manager(authorizer, user_id, organization_id)
    with atomic(session):
        session.delete(_get_organization(session, organization_id))
    logger.info("user %s deleted organization %s", user_id, organization_id)


def list_members(
    session: Session,
    *,
    organization_id: int,
    offset: int,
    limit: int,
) -> tuple[list[MemberItem], int]:
    is_manager = exists().where(
        OrganizationManager.organization_id == organization_id,
        OrganizationManager.user_id == User.id,
    )
    stmt = (
        select(User.id, User.nickname, User.phone, User.email, is_manager.label("is_manager"))
        .join(OrganizationMember, OrganizationMember.user_id == User.id)
        .where(OrganizationMember.organization_id == organization_id)
        .order_by(User.id)
        .offset(offset)
        .limit(limit)
    )
    items = [
        MemberItem(
            id=row.id,
            nickname=row.nickname,
            phone=row.phone,
            email=row.email,
            is_manager=bool(row.is_manager),
        )
        for row in session.execute(stmt)
    ]
    total = session.scalar(
        select(func.count())
        .select_from(OrganizationMember)
        .where(OrganizationMember.organization_id == organization_id)
    )
    return items, int(total or 0)


def _missing_users(session: Session, user_ids: Sequence[int]) -> list[int]:
    found = set(session.scalars(select(User.id).where(User.id.in_(user_ids))))
    return [uid for uid in user_ids if uid not in found]


def _grant_membership(session: Session, organization_id: int, user_ids: Sequence[int]) -> list[int]:
    existing = set(
        session.scalars(
            select(OrganizationMember.user_id).where(
                OrganizationMember.organization_id == organization_id,
                OrganizationMember.user_id.in_(user_ids),
            )
        )
    )
    new_ids = [uid for uid in dict.fromkeys(user_ids) if uid not in existing]
    if new_ids:
        session.execute(
            insert(OrganizationMember),
            [{"organization_id": organization_id, "user_id": uid} for uid in new_ids],
        )
        seed_member_subtree(session, organization_id, new_ids)
    return new_ids


def add_members(
    session: Session,
    *,
    user_id: int,
    organization_id: int,
    member_ids: Sequence[int],
    authorizer: Authorizer,
) -> list[int]:
    """Grant membership to ``member_ids``; returns the ids that were newly added.

    New members get read marks at 0 across the organization's existing
    votes and questions, so everything already there reads as new to them.
    """

    _ensure_manager(authorizer, user_id, organization_id)
    with atomic(session):
        _get_organization(session, organization_id)
        missing = _missing_users(session, member_ids)
        if missing:
            raise NotFoundError(f"Users not found: {', '.join(map(str, missing))}")
        added = _grant_membership(session, organization_id, member_ids)

    logger.info("organization %s gained %d members", organization_id, len(added))
    return added


def add_manager(
    session: Session,
    *,
    user_id: int,
    organization_id: int,
    manager_id: int,
    authorizer: Authorizer,
) -> None:
    """Promote ``manager_id``, granting membership first when needed."""

    _ensure_manager(authorizer, user_id, organization_id)
    with atomic(session):
        _get_organization(session, organization_id)
        if session.get(User, manager_id) is None:
            raise NotFoundError(f"User {manager_id} not found")
        if is_organization_manager(session, manager_id, organization_id):
            raise ConflictError(f"User {manager_id} is already a manager")
        _grant_membership(session, organization_id, [manager_id])
        session.add(OrganizationManager(organization_id=organization_id, user_id=manager_id))


__all__ = [
    "MemberItem",
    "OrganizationDetail",
    "OrganizationListItem",
    "add_manager",
    "add_members",
    "create_organization",
    "delete_organization",
    "get_organization_detail",
    "list_members",
    "list_organizations",
    "update_organization",
]
