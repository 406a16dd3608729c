"""Entity versions and per-user read marks.

Every organization, vote and question carries a ``version``. Each user who
can see one of them owns a read mark recording the last version they viewed.
Comparing the two, down the organization -> vote -> question tree, tells a
client whether anything under an entity is new to them.

All functions here run on the caller's session and never commit, so they
join whatever transaction the calling service opened.
"""
from __future__ import annotations

import enum
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from sqlalchemy import ColumnElement, exists, func, insert, or_, select, update
from sqlalchemy.orm import Session

from pollster.core.errors import NotFoundError
from pollster.models import (
    Organization,
    OrganizationMember,
    OrganizationReadMark,
    Question,
    QuestionReadMark,
    Vote,
    VoteReadMark,
)
from pollster.obs import VERSION_BUMP_COUNTER

logger = logging.getLogger(__name__)


class EntityKind(str, enum.Enum):
    ORGANIZATION = "organization"
    VOTE = "vote"
    QUESTION = "question"


@dataclass(frozen=True, slots=True)
class EntityRef:
    """Points at one versioned entity."""

    kind: EntityKind
    id: int

    @classmethod
    def organization(cls, organization_id: int) -> "EntityRef":
        return cls(EntityKind.ORGANIZATION, organization_id)

    @classmethod
    def vote(cls, vote_id: int) -> "EntityRef":
        return cls(EntityKind.VOTE, vote_id)

    @classmethod
    def question(cls, question_id: int) -> "EntityRef":
        return cls(EntityKind.QUESTION, question_id)


_ENTITY_MODELS: dict[EntityKind, type[Organization] | type[Vote] | type[Question]] = {
    EntityKind.ORGANIZATION: Organization,
    EntityKind.VOTE: Vote,
    EntityKind.QUESTION: Question,
}

_READ_MARK_MODELS = {
    EntityKind.ORGANIZATION: (OrganizationReadMark, "organization_id"),
    EntityKind.VOTE: (VoteReadMark, "vote_id"),
    EntityKind.QUESTION: (QuestionReadMark, "question_id"),
}


def _entity_model(kind: EntityKind):
    return _ENTITY_MODELS[kind]


def _read_mark(kind: EntityKind):
    model, column_name = _READ_MARK_MODELS[kind]
    return model, getattr(model, column_name), column_name


# ---------------------------------------------------------------------------
# Version bumps
# ---------------------------------------------------------------------------


def bump_version(session: Session, ref: EntityRef) -> int:
    """Raise the entity's version by one and return the new value.

    Issued as ``UPDATE ... SET version = version + 1`` so two concurrent
    bumps on the same row serialize on the row lock instead of losing one.
    Pending ORM changes are flushed first so the bump lands after the
    structural change it accompanies.
    """
    model = _entity_model(ref.kind)
    session.flush()
    result = session.execute(
        update(model).where(model.id == ref.id).values(version=model.version + 1)
    )
    if result.rowcount == 0:
        raise NotFoundError(f"{ref.kind.value} {ref.id} not found")
    new_version = session.scalar(select(model.version).where(model.id == ref.id))
    VERSION_BUMP_COUNTER.labels(kind=ref.kind.value).inc()
    logger.debug("bumped %s %s to version %s", ref.kind.value, ref.id, new_version)
    return int(new_version)


def lineage(session: Session, ref: EntityRef) -> list[EntityRef]:
    """Return ``ref`` followed by its versioned ancestors, nearest first."""
    if ref.kind is EntityKind.ORGANIZATION:
        return [ref]
    if ref.kind is EntityKind.VOTE:
        organization_id = session.scalar(select(Vote.organization_id).where(Vote.id == ref.id))
        if organization_id is None:
            raise NotFoundError(f"vote {ref.id} not found")
        return [ref, EntityRef.organization(organization_id)]

    row = session.execute(
        select(Question.vote_id, Vote.organization_id)
        .join(Vote, Question.vote_id == Vote.id)
        .where(Question.id == ref.id)
    ).one_or_none()
    if row is None:
        raise NotFoundError(f"question {ref.id} not found")
    vote_id, organization_id = row
    return [ref, EntityRef.vote(vote_id), EntityRef.organization(organization_id)]


def bump_with_ancestors(session: Session, ref: EntityRef) -> dict[EntityKind, int]:
    """Bump ``ref`` and every ancestor once each; returns the new versions."""
    return {item.kind: bump_version(session, item) for item in lineage(session, ref)}


def bump_ancestors(session: Session, ref: EntityRef) -> dict[EntityKind, int]:
    """Bump only the ancestors of ``ref``, used when ``ref`` itself is created or removed."""
    return {item.kind: bump_version(session, item) for item in lineage(session, ref)[1:]}


# ---------------------------------------------------------------------------
# Read-mark seeding
# ---------------------------------------------------------------------------


def seed_read_marks(
    session: Session,
    kind: EntityKind,
    *,
    entity_ids: Iterable[int],
    user_ids: Iterable[int],
    version_seen: int = 0,
) -> int:
    """Insert one read mark per (entity, user) pair in a single bulk statement."""
    model, _, column_name = _read_mark(kind)
    user_ids = list(user_ids)
    rows = [
        {column_name: entity_id, "user_id": user_id, "version_seen": version_seen}
        for entity_id in entity_ids
        for user_id in user_ids
    ]
    if rows:
        session.execute(insert(model), rows)
        logger.debug("seeded %d %s read marks at version %d", len(rows), kind.value, version_seen)
    return len(rows)


def organization_member_ids(session: Session, organization_id: int) -> list[int]:
    return list(
        session.scalars(
            select(OrganizationMember.user_id).where(OrganizationMember.organization_id == organization_id)
        )
    )


def seed_for_new_entity(
    session: Session,
    ref: EntityRef,
    *,
    creator_id: int,
    organization_id: int,
    version: int,
) -> None:
    """Seed marks for a freshly created vote or question.

    The creator starts at ``version`` so their own creation is not reported
    back to them; every other member of the organization starts at 0.
    """
    others = [uid for uid in organization_member_ids(session, organization_id) if uid != creator_id]
    seed_read_marks(session, ref.kind, entity_ids=[ref.id], user_ids=[creator_id], version_seen=version)
    seed_read_marks(session, ref.kind, entity_ids=[ref.id], user_ids=others, version_seen=0)


def seed_member_subtree(session: Session, organization_id: int, user_ids: Sequence[int]) -> None:
    """Seed marks at 0 for new members across the whole organization subtree."""
    if not user_ids:
        return
    vote_ids = list(session.scalars(select(Vote.id).where(Vote.organization_id == organization_id)))
    question_ids = list(
        session.scalars(
            select(Question.id)
            .join(Vote, Question.vote_id == Vote.id)
            .where(Vote.organization_id == organization_id)
        )
    )
    seed_read_marks(session, EntityKind.ORGANIZATION, entity_ids=[organization_id], user_ids=user_ids)
    seed_read_marks(session, EntityKind.VOTE, entity_ids=vote_ids, user_ids=user_ids)
    seed_read_marks(session, EntityKind.QUESTION, entity_ids=question_ids, user_ids=user_ids)


# ---------------------------------------------------------------------------
# Read-mark advancement
# ---------------------------------------------------------------------------


def advance_read_mark(session: Session, user_id: int, ref: EntityRef) -> int:
    """Stamp the caller's read mark with the version observed right now.

    The entity row is read with ``FOR SHARE`` so the stamped version was
    valid at read time while other readers proceed. Only detail views call
    this. A missing mark is created rather than silently skipped.
    """
    model = _entity_model(ref.kind)
    observed = session.scalar(
        select(model.version).where(model.id == ref.id).with_for_update(read=True)
    )
    if observed is None:
        raise NotFoundError(f"{ref.kind.value} {ref.id} not found")

    mark, entity_column, column_name = _read_mark(ref.kind)
    result = session.execute(
        update(mark)
        .where(entity_column == ref.id, mark.user_id == user_id)
        .values(version_seen=observed)
    )
    if result.rowcount == 0:
        logger.warning("missing %s read mark for user %s on %s; creating", ref.kind.value, user_id, ref.id)
        session.execute(insert(mark).values({column_name: ref.id, "user_id": user_id, "version_seen": observed}))
    return int(observed)


# ---------------------------------------------------------------------------
# Update status resolution
# ---------------------------------------------------------------------------


def _seen(kind: EntityKind, user_id: int) -> ColumnElement[int]:
    """Correlated ``version_seen`` for the enclosing entity row, 0 when absent."""
    mark, entity_column, _ = _read_mark(kind)
    entity_model = _entity_model(kind)
    seen = (
        select(mark.version_seen)
        .where(entity_column == entity_model.id, mark.user_id == user_id)
        .scalar_subquery()
    )
    return func.coalesce(seen, 0)


def _question_is_new(user_id: int) -> ColumnElement[bool]:
    return Question.version > _seen(EntityKind.QUESTION, user_id)


def _vote_is_new(user_id: int) -> ColumnElement[bool]:
    return Vote.version > _seen(EntityKind.VOTE, user_id)


def has_updated_expression(kind: EntityKind, user_id: int) -> ColumnElement[bool]:
    """Boolean SQL expression for "anything new under this row" for ``user_id``.

    Correlates against the entity table of the enclosing query, so a list
    query selecting it computes the flag for a whole page in one round trip.
    """
    if kind is EntityKind.QUESTION:
        return _question_is_new(user_id)

    question_under_vote = exists(
        select(Question.id).where(Question.vote_id == Vote.id, _question_is_new(user_id))
    )
    if kind is EntityKind.VOTE:
        return or_(_vote_is_new(user_id), question_under_vote)

    vote_under_organization = exists(
        select(Vote.id).where(Vote.organization_id == Organization.id, _vote_is_new(user_id))
    )
    question_under_organization = exists(
        select(Question.id)
        .join(Vote, Question.vote_id == Vote.id)
        .where(Vote.organization_id == Organization.id, _question_is_new(user_id))
    )
    return or_(
        Organization.version > _seen(EntityKind.ORGANIZATION, user_id),
        vote_under_organization,
        question_under_organization,
    )


def resolve_has_updated(session: Session, user_id: int, ref: EntityRef) -> bool:
    """Whether ``ref`` or anything beneath it changed since ``user_id`` last looked."""
    model = _entity_model(ref.kind)
    value = session.scalar(
        select(has_updated_expression(ref.kind, user_id).label("has_updated")).where(model.id == ref.id)
    )
    if value is None:
        raise NotFoundError(f"{ref.kind.value} {ref.id} not found")
    return bool(value)


def read_mark_version(session: Session, user_id: int, ref: EntityRef) -> int | None:
    mark, entity_column, _ = _read_mark(ref.kind)
    return session.scalar(
        select(mark.version_seen).where(entity_column == ref.id, mark.user_id == user_id)
    )


__all__ = [
    "EntityKind",
    "EntityRef",
    "advance_read_mark",
    "bump_ancestors",
    "bump_version",
    "bump_with_ancestors",
    "has_updated_expression",
    "lineage",
    "organization_member_ids",
    "read_mark_version",
    "resolve_has_updated",
    "seed_for_new_entity",
    "seed_member_subtree",
    "seed_read_marks",
]
