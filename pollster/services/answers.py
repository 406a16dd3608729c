"""Business logic for submitting and reading answers.

Answers never bump versions: they are not content other members should be
notified about.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date

from sqlalchemy import delete, insert, select
from sqlalchemy.orm import Session

from pollster.core.errors import InvalidAnswerError, VoteClosedError
from pollster.db.transaction import atomic
from pollster.models import Answer, Option, Question, QuestionType, Vote
from pollster.services.questions import OptionItem, get_question
from pollster.services.votes import get_vote

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class AnswerSubmission:
    question_id: int
    option_ids: Sequence[int]


@dataclass(slots=True, frozen=True)
class QuestionAnswers:
    question_id: int
    type: QuestionType
    options: Sequence[OptionItem]
    chosen_option_ids: Sequence[int]


def _ensure_collecting(vote: Vote, today: date) -> None:
    if vote.deadline is not None and vote.deadline < today:
        raise VoteClosedError(f"Vote {vote.id} closed on {vote.deadline.isoformat()}")


def _replace_answers(session: Session, *, user_id: int, question: Question, option_ids: Sequence[int]) -> list[int]:
    chosen = list(dict.fromkeys(option_ids))
    if question.type is QuestionType.SINGLE and len(chosen) != 1:
        raise InvalidAnswerError(f"Question {question.id} takes exactly one option")
    if question.type is QuestionType.MULTI and not chosen:
        raise InvalidAnswerError(f"Question {question.id} takes at least one option")

    owned = set(
        session.scalars(select(Option.id).where(Option.question_id == question.id, Option.id.in_(chosen)))
    )
    strays = [option_id for option_id in chosen if option_id not in owned]
    if strays:
        raise InvalidAnswerError(
            f"Options {', '.join(map(str, strays))} do not belong to question {question.id}"
        )

    session.execute(
        delete(Answer)
        .where(
            Answer.user_id == user_id,
            Answer.option_id.in_(select(Option.id).where(Option.question_id == question.id)),
        )
        .execution_options(synchronize_session=False)
    )
    session.execute(insert(Answer), [{"user_id": user_id, "option_id": option_id} for option_id in chosen])
    return chosen


def submit_answers(
    session: Session,
    *,
    user_id: int,
    question_id: int,
    option_ids: Sequence[int],
    today: date | None = None,
) -> list[int]:
    """Replace the caller's answers to one question."""

    today = today or date.today()
    with atomic(session):
        question = get_question(session, question_id)
        _ensure_collecting(get_vote(session, question.vote_id), today)
        chosen = _replace_answers(session, user_id=user_id, question=question, option_ids=option_ids)

    logger.debug("user %s answered question %s with %s", user_id, question_id, chosen)
    return chosen


def submit_vote_answers(
    session: Session,
    *,
    user_id: int,
    vote_id: int,
    submissions: Sequence[AnswerSubmission],
    today: date | None = None,
) -> dict[int, list[int]]:
    """Replace the caller's answers to several questions of one vote at once."""

    today = today or date.today()
    with atomic(session):
        vote = get_vote(session, vote_id)
        _ensure_collecting(vote, today)
        wanted = [submission.question_id for submission in submissions]
        questions = {
            question.id: question
            for question in session.scalars(
                select(Question).where(Question.vote_id == vote_id, Question.id.in_(wanted))
            )
        }
        strays = [question_id for question_id in wanted if question_id not in questions]
        if strays:
            raise InvalidAnswerError(
                f"Questions {', '.join(map(str, strays))} do not belong to vote {vote_id}"
            )
        result = {
            submission.question_id: _replace_answers(
                session,
                user_id=user_id,
                question=questions[submission.question_id],
                option_ids=submission.option_ids,
            )
            for submission in submissions
        }

    logger.debug("user %s answered %d questions of vote %s", user_id, len(result), vote_id)
    return result


def answers_of(session: Session, *, user_id: int, question_id: int) -> QuestionAnswers:
    question = get_question(session, question_id)
    chosen = session.scalars(
        select(Answer.option_id)
        .join(Option, Answer.option_id == Option.id)
        .where(Option.question_id == question_id, Answer.user_id == user_id)
        .order_by(Answer.option_id)
    )
    return QuestionAnswers(
        question_id=question.id,
        type=question.type,
        options=[OptionItem(id=option.id, text=option.text) for option in question.options],
        chosen_option_ids=list(chosen),
    )


__all__ = [
    "AnswerSubmission",
    "QuestionAnswers",
    "answers_of",
    "submit_answers",
    "submit_vote_answers",
]
