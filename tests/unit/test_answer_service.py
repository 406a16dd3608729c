from __future__ import annotations

from datetime import date, timedelta

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session

from pollster.core.errors import ConflictError, InvalidAnswerError, VoteClosedError
from pollster.models import Question, QuestionType, User, Vote
from pollster.services import answers, options, organizations, votes
from pollster.services.answers import AnswerSubmission
from pollster.services.authorization import AllowAllAuthorizer
from pollster.services.votes import QuestionDraft

TODAY = date(2026, 3, 1)


def _vote(db_session: Session, user: User, *, deadline: date | None = None) -> tuple[Vote, Question, Question]:
    organization = organizations.create_organization(db_session, user_id=user.id, name="Eng")
    vote = votes.create_vote(
        db_session,
        user_id=user.id,
        organization_id=organization.id,
        name="Offsite",
        deadline=deadline,
        questions=[
            QuestionDraft(description="Where?", type=QuestionType.SINGLE, options=["Lisbon", "Oslo"]),
            QuestionDraft(description="Activities?", type=QuestionType.MULTI, options=["Hike", "Sail", "Cook"]),
        ],
    )
    single, multi = db_session.scalars(select(Question).where(Question.vote_id == vote.id).order_by(Question.id))
    return vote, single, multi


def _option_ids(question: Question) -> list[int]:
    return [option.id for option in question.options]


def test_resubmission_replaces_previous_answers(db_session: Session, alice: User) -> None:
    _, single, _ = _vote(db_session, alice)
    lisbon, oslo = _option_ids(single)

    answers.submit_answers(db_session, user_id=alice.id, question_id=single.id, option_ids=[lisbon], today=TODAY)
    answers.submit_answers(db_session, user_id=alice.id, question_id=single.id, option_ids=[oslo], today=TODAY)

    result = answers.answers_of(db_session, user_id=alice.id, question_id=single.id)
    assert list(result.chosen_option_ids) == [oslo]
    assert result.type is QuestionType.SINGLE
    assert [option.text for option in result.options] == ["Lisbon", "Oslo"]


def test_single_question_takes_exactly_one_option(db_session: Session, alice: User) -> None:
    _, single, _ = _vote(db_session, alice)

    with pytest.raises(InvalidAnswerError):
        answers.submit_answers(
            db_session, user_id=alice.id, question_id=single.id, option_ids=_option_ids(single), today=TODAY
        )
    with pytest.raises(InvalidAnswerError):
        answers.submit_answers(db_session, user_id=alice.id, question_id=single.id, option_ids=[], today=TODAY)


def test_multi_question_accepts_several_options(db_session: Session, alice: User) -> None:
    _, _, multi = _vote(db_session, alice)
    hike, sail, _ = _option_ids(multi)

    chosen = answers.submit_answers(
        db_session, user_id=alice.id, question_id=multi.id, option_ids=[sail, hike, sail], today=TODAY
    )

    assert chosen == [sail, hike]
    assert sorted(answers.answers_of(db_session, user_id=alice.id, question_id=multi.id).chosen_option_ids) == sorted(
        [hike, sail]
    )


def test_options_from_another_question_are_rejected(db_session: Session, alice: User) -> None:
    _, single, multi = _vote(db_session, alice)

    with pytest.raises(InvalidAnswerError, match="do not belong"):
        answers.submit_answers(
            db_session, user_id=alice.id, question_id=single.id, option_ids=[_option_ids(multi)[0]], today=TODAY
        )


def test_closed_vote_rejects_answers(db_session: Session, alice: User) -> None:
    _, single, _ = _vote(db_session, alice, deadline=TODAY - timedelta(days=1))

    with pytest.raises(VoteClosedError):
        answers.submit_answers(
            db_session, user_id=alice.id, question_id=single.id, option_ids=_option_ids(single)[:1], today=TODAY
        )


def test_deadline_day_itself_is_still_collecting(db_session: Session, alice: User) -> None:
    _, single, _ = _vote(db_session, alice, deadline=TODAY)

    chosen = answers.submit_answers(
        db_session, user_id=alice.id, question_id=single.id, option_ids=_option_ids(single)[:1], today=TODAY
    )
    assert len(chosen) == 1


def test_bulk_submission_is_all_or_nothing(db_session: Session, alice: User) -> None:
    vote, single, multi = _vote(db_session, alice)
    lisbon, _ = _option_ids(single)

    with pytest.raises(InvalidAnswerError):
        answers.submit_vote_answers(
            db_session,
            user_id=alice.id,
            vote_id=vote.id,
            submissions=[
                AnswerSubmission(question_id=single.id, option_ids=[lisbon]),
                AnswerSubmission(question_id=multi.id, option_ids=[]),
            ],
            today=TODAY,
        )
    assert list(answers.answers_of(db_session, user_id=alice.id, question_id=single.id).chosen_option_ids) == []

    result = answers.submit_vote_answers(
        db_session,
        user_id=alice.id,
        vote_id=vote.id,
        submissions=[
            AnswerSubmission(question_id=single.id, option_ids=[lisbon]),
            AnswerSubmission(question_id=multi.id, option_ids=_option_ids(multi)[:2]),
        ],
        today=TODAY,
    )
    assert result[single.id] == [lisbon]
    assert len(result[multi.id]) == 2


def test_bulk_submission_rejects_questions_of_other_votes(db_session: Session, alice: User) -> None:
    vote, single, _ = _vote(db_session, alice)
    other = votes.create_vote(
        db_session,
        user_id=alice.id,
        organization_id=vote.organization_id,
        name="Other",
        questions=[QuestionDraft(description="Stray?", options=["a"])],
    )
    stray = db_session.scalars(select(Question).where(Question.vote_id == other.id)).one()

    with pytest.raises(InvalidAnswerError, match="do not belong to vote"):
        answers.submit_vote_answers(
            db_session,
            user_id=alice.id,
            vote_id=vote.id,
            submissions=[AnswerSubmission(question_id=stray.id, option_ids=_option_ids(stray))],
            today=TODAY,
        )


def test_answered_option_cannot_be_deleted(db_session: Session, alice: User) -> None:
    _, single, _ = _vote(db_session, alice)
    lisbon, oslo = _option_ids(single)
    answers.submit_answers(db_session, user_id=alice.id, question_id=single.id, option_ids=[lisbon], today=TODAY)

    with pytest.raises(ConflictError):
        options.delete_option(db_session, user_id=alice.id, option_id=lisbon, authorizer=AllowAllAuthorizer())

    options.delete_option(db_session, user_id=alice.id, option_id=oslo, authorizer=AllowAllAuthorizer())
    db_session.expire_all()
    assert _option_ids(db_session.get(Question, single.id)) == [lisbon]
