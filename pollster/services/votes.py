"""Business logic for votes and the questions created alongside them."""
from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from pollster.core.errors import NotFoundError, PermissionDeniedError
from pollster.db.transaction import atomic
from pollster.models import Option, Organization, Question, QuestionType, Vote, VoteStatus
from pollster.services.authorization import Authorizer
from pollster.services.versioning import (
    EntityKind,
    EntityRef,
    advance_read_mark,
    bump_ancestors,
    bump_with_ancestors,
    has_updated_expression,
    resolve_has_updated,
    seed_for_new_entity,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class QuestionDraft:
    """A question submitted as part of another create call."""

    description: str
    type: QuestionType = QuestionType.SINGLE
    options: Sequence[str] = field(default_factory=tuple)


@dataclass(slots=True, frozen=True)
class VoteListItem:
    id: int
    name: str
    deadline: date | None
    status: VoteStatus
    version: int
    question_count: int
    has_updated: bool


@dataclass(slots=True, frozen=True)
class VoteDetail:
    id: int
    organization_id: int
    name: str
    deadline: date | None
    status: VoteStatus
    version: int
    has_updated: bool


def _status(deadline: date | None, today: date) -> VoteStatus:
    if deadline is not None and deadline < today:
        return VoteStatus.CLOSED
    return VoteStatus.COLLECTING


def get_vote(session: Session, vote_id: int, *, for_update: bool = False) -> Vote:
    stmt = select(Vote).where(Vote.id == vote_id)
    if for_update:
        stmt = stmt.with_for_update()
    vote = session.scalar(stmt)
    if vote is None:
        raise NotFoundError(f"Vote {vote_id} not found")
    return vote


def build_question(draft: QuestionDraft, *, vote_id: int, owner_id: int) -> Question:
    question = Question(
        description=draft.description,
        type=draft.type,
        vote_id=vote_id,
        owner_id=owner_id,
        version=1,
    )
    question.options = [Option(text=text) for text in draft.options]
    return question


def create_vote(
    session: Session,
    *,
    user_id: int,
    organization_id: int,
    name: str,
    deadline: date | None = None,
    questions: Sequence[QuestionDraft] = (),
) -> Vote:
    """Create a vote with optional nested questions.

    The organization is bumped once; nested questions are part of the new
    vote and do not bump it further.
    """

    with atomic(session):
        if session.get(Organization, organization_id) is None:
            raise NotFoundError(f"Organization {organization_id} not found")
        vote = Vote(name=name, deadline=deadline, organization_id=organization_id, version=1)
        session.add(vote)
        session.flush()

        created = [build_question(draft, vote_id=vote.id, owner_id=user_id) for draft in questions]
        session.add_all(created)
        session.flush()

        seed_for_new_entity(
            session,
            EntityRef.vote(vote.id),
            creator_id=user_id,
            organization_id=organization_id,
            version=vote.version,
        )
        for question in created:
            seed_for_new_entity(
                session,
                EntityRef.question(question.id),
                creator_id=user_id,
                organization_id=organization_id,
                version=question.version,
            )
        bump_ancestors(session, EntityRef.vote(vote.id))

    logger.info("user %s created vote %s with %d questions", user_id, vote.id, len(created))
    return vote


def list_votes(
    session: Session,
    *,
    user_id: int,
    organization_id: int,
    offset: int,
    limit: int,
    today: date | None = None,
) -> tuple[list[VoteListItem], int]:
    today = today or date.today()
    question_count = (
        select(func.count(Question.id)).where(Question.vote_id == Vote.id).scalar_subquery()
    )
    stmt = (
        select(
            Vote.id,
            Vote.name,
            Vote.deadline,
            Vote.version,
            question_count.label("question_count"),
            has_updated_expression(EntityKind.VOTE, user_id).label("has_updated"),
        )
        .where(Vote.organization_id == organization_id)
        .order_by(Vote.id.desc())
        .offset(offset)
        .limit(limit)
    )
    items = [
        VoteListItem(
            id=row.id,
            name=row.name,
            deadline=row.deadline,
            status=_status(row.deadline, today),
            version=row.version,
            question_count=row.question_count,
            has_updated=bool(row.has_updated),
        )
        for row in session.execute(stmt)
    ]
    total = session.scalar(select(func.count(Vote.id)).where(Vote.organization_id == organization_id))
    return items, int(total or 0)


def get_vote_detail(
    session: Session,
    *,
    user_id: int,
    vote_id: int,
    today: date | None = None,
) -> VoteDetail:
    """Return the vote and mark it seen by the caller."""

    today = today or date.today()
    ref = EntityRef.vote(vote_id)
    with atomic(session):
        vote = get_vote(session, vote_id)
        observed = advance_read_mark(session, user_id, ref)
        detail = VoteDetail(
            id=vote.id,
            organization_id=vote.organization_id,
            name=vote.name,
            deadline=vote.deadline,
            status=_status(vote.deadline, today),
            version=observed,
            has_updated=resolve_has_updated(session, user_id, ref),
        )
    return detail


def update_vote(
    session: Session,
    *,
    user_id: int,
    vote_id: int,
    authorizer: Authorizer,
    name: str | None = None,
    deadline: date | None = None,
    clear_deadline: bool = False,
) -> Vote:
    """Rename or reschedule a vote; versions move only when a field changed."""

    if not authorizer.check_vote_write(user_id, vote_id):
        raise PermissionDeniedError("Not allowed to change this vote")

    with atomic(session):
        vote = get_vote(session, vote_id, for_update=True)
        new_deadline = None if clear_deadline else (deadline if deadline is not None else vote.deadline)
        new_name = name if name is not None else vote.name
        if (new_name, new_deadline) == (vote.name, vote.deadline):
            return vote
        vote.name = new_name
        vote.deadline = new_deadline
        bump_with_ancestors(session, EntityRef.vote(vote_id))

    session.refresh(vote)
    return vote


def delete_vote(
    session: Session,
    *,
    user_id: int,
    vote_id: int,
    authorizer: Authorizer,
) -> None:
    """Delete a vote; only managers of its organization may do this."""

    vote = get_vote(session, vote_id)
    if not authorizer.check_organization_write(user_id, vote.organization_id):
        raise PermissionDeniedError("Only organization managers may delete votes")

    with atomic(session):
        bump_ancestors(session, EntityRef.vote(vote_id))
        session.delete(vote)
    logger.info("user %s deleted vote %s", user_id, vote_id)


__all__ = [
    "QuestionDraft",
    "VoteDetail",
    "VoteListItem",
    "build_question",
    "create_vote",
    "delete_vote",
    "get_vote",
    "get_vote_detail",
    "list_votes",
    "update_vote",
]
