"""Seed a demo organization with a manager, a member and an open vote."""
from __future__ import annotations

import logging
import sys
from pathlib import Path

from sqlalchemy import select
from sqlalchemy.orm import Session

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from pollster.db.session import engine, get_session
from pollster.models import Base, Organization, QuestionType, User
from pollster.services import organizations, users, votes
from pollster.services.authorization import SqlAuthorizer
from pollster.services.votes import QuestionDraft

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DEMO_PASSWORD = "demo-password"
DEMO_USERS = [
    ("Manager", "+15550000001", "manager@demo.local"),
    ("Member", "+15550000002", "member@demo.local"),
]


def _ensure_user(session: Session, nickname: str, phone: str, email: str) -> User:
    user = session.scalar(select(User).where(User.email == email))
    if user is not None:
        logger.info("User %s already exists", email)
        return user
    user = users.create_user(session, nickname=nickname, phone=phone, email=email, password=DEMO_PASSWORD)
    logger.info("Added user %s", email)
    return user


def seed(session: Session) -> None:
    manager, member = (_ensure_user(session, *entry) for entry in DEMO_USERS)

    if session.scalar(select(Organization).where(Organization.name == "Demo")) is not None:
        logger.info("Demo organization already exists")
        return

    organization = organizations.create_organization(
        session, user_id=manager.id, name="Demo", description="Demo organization"
    )
    organizations.add_members(
        session,
        user_id=manager.id,
        organization_id=organization.id,
        member_ids=[member.id],
        authorizer=SqlAuthorizer(session),
    )
    votes.create_vote(
        session,
        user_id=manager.id,
        organization_id=organization.id,
        name="Team lunch",
        questions=[
            QuestionDraft(description="Which day?", options=["Tuesday", "Thursday"]),
            QuestionDraft(description="Food?", type=QuestionType.MULTI, options=["Pizza", "Sushi", "Salad"]),
        ],
    )
    logger.info("Created demo organization %s", organization.id)


def main() -> None:
    Base.metadata.create_all(bind=engine)
    with get_session() as session:
        seed(session)


if __name__ == "__main__":
    main()
