"""Business logic for question options."""
from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy import exists, func, select
from sqlalchemy.orm import Session

from pollster.core.errors import ConflictError, NotFoundError, PermissionDeniedError
from pollster.db.transaction import atomic
from pollster.models import Answer, Option
from pollster.services.authorization import Authorizer
from pollster.services.questions import get_question
from pollster.services.versioning import EntityRef, bump_with_ancestors

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class OptionListItem:
    id: int
    text: str
    checked: bool


def list_options(
    session: Session,
    *,
    user_id: int,
    question_id: int,
    offset: int,
    limit: int,
) -> tuple[list[OptionListItem], int]:
    """Options of a question, flagged ``checked`` where the caller chose them."""

    checked = exists().where(Answer.option_id == Option.id, Answer.user_id == user_id)
    stmt = (
        select(Option.id, Option.text, checked.label("checked"))
        .where(Option.question_id == question_id)
        .order_by(Option.id)
        .offset(offset)
        .limit(limit)
    )
    items = [
        OptionListItem(id=row.id, text=row.text, checked=bool(row.checked))
        for row in session.execute(stmt)
    ]
    total = session.scalar(select(func.count(Option.id)).where(Option.question_id == question_id))
    return items, int(total or 0)


def add_options(
    session: Session,
    *,
    user_id: int,
    question_id: int,
    texts: Sequence[str],
    authorizer: Authorizer,
) -> list[Option]:
    """Append options; the question, its vote and its organization are bumped."""

    if not authorizer.check_question_write(user_id, question_id):
        raise PermissionDeniedError("Not allowed to change this question")
    with atomic(session):
        question = get_question(session, question_id, for_update=True)
        options = [Option(text=text, question_id=question.id) for text in texts]
        session.add_all(options)
        bump_with_ancestors(session, EntityRef.question(question_id))

    return options


def delete_option(session: Session, *, user_id: int, option_id: int, authorizer: Authorizer) -> None:
    """Remove an option nobody has chosen yet."""

    with atomic(session):
        option = session.get(Option, option_id)
        if option is None:
            raise NotFoundError(f"Option {option_id} not found")
        if not authorizer.check_question_write(user_id, option.question_id):
            raise PermissionDeniedError("Not allowed to change this question")
        if session.scalar(select(exists().where(Answer.option_id == option_id))):
            raise ConflictError(f"Option {option_id} has answers and cannot be deleted")
        question_id = option.question_id
        session.delete(option)
        bump_with_ancestors(session, EntityRef.question(question_id))

    logger.info("deleted option %s of question %s", option_id, question_id)


__all__ = ["OptionListItem", "add_options", "delete_option", "list_options"]
