"""Membership predicates and the named-capability authorizer.

Predicates share one shape, ``(session, user_id, resource_id) -> bool``, so
the HTTP gate can be parameterized by any of them. They are plain reads with
no locks; store failures propagate to the caller instead of reading as
``False``.
"""
from __future__ import annotations

from typing import Callable, Protocol

from sqlalchemy import exists, select
from sqlalchemy.orm import Session

from pollster.models import Option, OrganizationManager, OrganizationMember, Question, Vote

Predicate = Callable[[Session, int, int], bool]


def is_organization_member(session: Session, user_id: int, organization_id: int) -> bool:
    return bool(
        session.scalar(
            select(
                exists().where(
                    OrganizationMember.organization_id == organization_id,
                    OrganizationMember.user_id == user_id,
                )
            )
        )
    )


def is_organization_manager(session: Session, user_id: int, organization_id: int) -> bool:
    return bool(
        session.scalar(
            select(
                exists().where(
                    OrganizationManager.organization_id == organization_id,
                    OrganizationManager.user_id == user_id,
                )
            )
        )
    )


def is_vote_member(session: Session, user_id: int, vote_id: int) -> bool:
    return bool(
        session.scalar(
            select(
                exists()
                .where(Vote.id == vote_id, OrganizationMember.user_id == user_id)
                .where(OrganizationMember.organization_id == Vote.organization_id)
            )
        )
    )


def is_vote_manager(session: Session, user_id: int, vote_id: int) -> bool:
    return bool(
        session.scalar(
            select(
                exists()
                .where(Vote.id == vote_id, OrganizationManager.user_id == user_id)
                .where(OrganizationManager.organization_id == Vote.organization_id)
            )
        )
    )


def is_question_member(session: Session, user_id: int, question_id: int) -> bool:
    return bool(
        session.scalar(
            select(
                exists()
                .where(Question.id == question_id, OrganizationMember.user_id == user_id)
                .where(Question.vote_id == Vote.id)
                .where(OrganizationMember.organization_id == Vote.organization_id)
            )
        )
    )


def is_question_owner_or_manager(session: Session, user_id: int, question_id: int) -> bool:
    owns = session.scalar(
        select(exists().where(Question.id == question_id, Question.owner_id == user_id))
    )
    if owns:
        return True
    return bool(
        session.scalar(
            select(
                exists()
                .where(Question.id == question_id, OrganizationManager.user_id == user_id)
                .where(Question.vote_id == Vote.id)
                .where(OrganizationManager.organization_id == Vote.organization_id)
            )
        )
    )


def is_option_member(session: Session, user_id: int, option_id: int) -> bool:
    return bool(
        session.scalar(
            select(
                exists()
                .where(Option.id == option_id, OrganizationMember.user_id == user_id)
                .where(Option.question_id == Question.id)
                .where(Question.vote_id == Vote.id)
                .where(OrganizationMember.organization_id == Vote.organization_id)
            )
        )
    )


def option_belongs_to_question(session: Session, option_id: int, question_id: int) -> bool:
    return bool(
        session.scalar(select(exists().where(Option.id == option_id, Option.question_id == question_id)))
    )


class Authorizer(Protocol):
    """Named read/write checks for business logic that branches on permission."""

    def check_organization_read(self, user_id: int, organization_id: int) -> bool: ...

    def check_organization_write(self, user_id: int, organization_id: int) -> bool: ...

    def check_vote_read(self, user_id: int, vote_id: int) -> bool: ...

    def check_vote_write(self, user_id: int, vote_id: int) -> bool: ...

    def check_question_read(self, user_id: int, question_id: int) -> bool: ...

    def check_question_write(self, user_id: int, question_id: int) -> bool: ...

    def check_question_delete(self, user_id: int, question_id: int) -> bool: ...


class SqlAuthorizer:
    """Authorizer backed by membership tables.

    Organization writes need a manager. Vote and question writes currently
    coincide with member reads but stay separately overridable; deleting a
    question needs its owner or a manager.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def check_organization_read(self, user_id: int, organization_id: int) -> bool:
        return is_organization_member(self._session, user_id, organization_id)

    def check_organization_write(self, user_id: int, organization_id: int) -> bool:
        return is_organization_manager(self._session, user_id, organization_id)

    def check_vote_read(self, user_id: int, vote_id: int) -> bool:
        return is_vote_member(self._session, user_id, vote_id)

    def check_vote_write(self, user_id: int, vote_id: int) -> bool:
        return is_vote_member(self._session, user_id, vote_id)

    def check_question_read(self, user_id: int, question_id: int) -> bool:
        return is_question_member(self._session, user_id, question_id)

    def check_question_write(self, user_id: int, question_id: int) -> bool:
        return is_question_member(self._session, user_id, question_id)

    def check_question_delete(self, user_id: int, question_id: int) -> bool:
        return is_question_owner_or_manager(self._session, user_id, question_id)


class AllowAllAuthorizer:
    """Grants everything; for tests that exercise business rules in isolation."""

    def check_organization_read(self, user_id: int, organization_id: int) -> bool:
        return True

    def check_organization_write(self, user_id: int, organization_id: int) -> bool:
        return True

    def check_vote_read(self, user_id: int, vote_id: int) -> bool:
        return True

    def check_vote_write(self, user_id: int, vote_id: int) -> bool:
        return True

    def check_question_read(self, user_id: int, question_id: int) -> bool:
        return True

    def check_question_write(self, user_id: int, question_id: int) -> bool:
        return True

    def check_question_delete(self, user_id: int, question_id: int) -> bool:
        return True


__all__ = [
    "AllowAllAuthorizer",
    "Authorizer",
    "Predicate",
    "SqlAuthorizer",
    "is_option_member",
    "is_organization_manager",
    "is_organization_member",
    "is_question_member",
    "is_question_owner_or_manager",
    "is_vote_manager",
    "is_vote_member",
    "option_belongs_to_question",
]
