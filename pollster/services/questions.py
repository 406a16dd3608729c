"""Business logic for questions."""
from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy import exists, func, select
from sqlalchemy.orm import Session

from pollster.core.errors import NotFoundError, PermissionDeniedError
from pollster.db.transaction import atomic
from pollster.models import Answer, Option, Question, QuestionType
from pollster.services.authorization import Authorizer
from pollster.services.versioning import (
    EntityKind,
    EntityRef,
    advance_read_mark,
    bump_ancestors,
    has_updated_expression,
    resolve_has_updated,
    seed_for_new_entity,
)
from pollster.services.votes import QuestionDraft, build_question, get_vote

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class QuestionListItem:
    id: int
    description: str
    type: QuestionType
    version: int
    has_updated: bool
    has_answered: bool


@dataclass(slots=True, frozen=True)
class OptionItem:
    id: int
    text: str


@dataclass(slots=True, frozen=True)
class QuestionDetail:
    id: int
    vote_id: int
    owner_id: int
    description: str
    type: QuestionType
    version: int
    has_updated: bool
    options: Sequence[OptionItem]


def get_question(session: Session, question_id: int, *, for_update: bool = False) -> Question:
    stmt = select(Question).where(Question.id == question_id)
    if for_update:
        stmt = stmt.with_for_update()
    question = session.scalar(stmt)
    if question is None:
        raise NotFoundError(f"Question {question_id} not found")
    return question


def create_question(
    session: Session,
    *,
    user_id: int,
    vote_id: int,
    draft: QuestionDraft,
) -> Question:
    """Add a question to an existing vote; bumps the vote and organization."""

    with atomic(session):
        vote = get_vote(session, vote_id)
        question = build_question(draft, vote_id=vote.id, owner_id=user_id)
        session.add(question)
        session.flush()
        seed_for_new_entity(
            session,
            EntityRef.question(question.id),
            creator_id=user_id,
            organization_id=vote.organization_id,
            version=question.version,
        )
        bump_ancestors(session, EntityRef.question(question.id))

    logger.info("user %s created question %s in vote %s", user_id, question.id, vote_id)
    return question


def _answered_by(user_id: int):
    return exists(
        select(Answer.id)
        .join(Option, Answer.option_id == Option.id)
        .where(Option.question_id == Question.id, Answer.user_id == user_id)
    )


def list_questions(
    session: Session,
    *,
    user_id: int,
    vote_id: int,
    offset: int,
    limit: int,
) -> tuple[list[QuestionListItem], int]:
    stmt = (
        select(
            Question.id,
            Question.description,
            Question.type,
            Question.version,
            has_updated_expression(EntityKind.QUESTION, user_id).label("has_updated"),
            _answered_by(user_id).label("has_answered"),
        )
        .where(Question.vote_id == vote_id)
        .order_by(Question.id)
        .offset(offset)
        .limit(limit)
    )
    items = [
        QuestionListItem(
            id=row.id,
            description=row.description,
            type=row.type,
            version=row.version,
            has_updated=bool(row.has_updated),
            has_answered=bool(row.has_answered),
        )
        for row in session.execute(stmt)
    ]
    total = session.scalar(select(func.count(Question.id)).where(Question.vote_id == vote_id))
    return items, int(total or 0)


def get_question_detail(session: Session, *, user_id: int, question_id: int) -> QuestionDetail:
    """Return the question with its options and mark it seen by the caller."""

    ref = EntityRef.question(question_id)
    with atomic(session):
        question = get_question(session, question_id)
        observed = advance_read_mark(session, user_id, ref)
        detail = QuestionDetail(
            id=question.id,
            vote_id=question.vote_id,
            owner_id=question.owner_id,
            description=question.description,
            type=question.type,
            version=observed,
            has_updated=resolve_has_updated(session, user_id, ref),
            options=[OptionItem(id=option.id, text=option.text) for option in question.options],
        )
    return detail


def delete_question(session: Session, *, user_id: int, question_id: int, authorizer: Authorizer) -> None:
    """Delete a question; its owner or an organization manager may do this."""

    question = get_question(session, question_id)
    if not authorizer.check_question_delete(user_id, question_id):
        raise PermissionDeniedError("Only the question owner or a manager may delete it")

    with atomic(session):
        bump_ancestors(session, EntityRef.question(question_id))
        session.delete(question)
    logger.info("user %s deleted question %s", user_id, question_id)


__all__ = [
    "OptionItem",
    "QuestionDetail",
    "QuestionListItem",
    "create_question",
    "delete_question",
    "get_question",
    "get_question_detail",
    "list_questions",
]
