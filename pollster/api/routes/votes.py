"""Vote endpoints, gated on membership of the vote's organization."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from pollster.api.deps import PageParams, get_authorizer, get_current_user_id, get_db_session, page_params
from pollster.api.gate import GateConfig, authorization_gate
from pollster.schemas.common import Page
from pollster.schemas.question import QuestionCreate, QuestionListItemRead, QuestionRead, VoteAnswersSubmit
from pollster.schemas.vote import VoteDetailRead, VoteRead, VoteUpdate
from pollster.services import answers, questions, votes
from pollster.services.answers import AnswerSubmission
from pollster.services.authorization import Authorizer, is_vote_member
from pollster.services.votes import QuestionDraft

vote_member_gate = authorization_gate(GateConfig(is_vote_member, "vote_id"))

router = APIRouter(prefix="/votes/{vote_id}", dependencies=[Depends(vote_member_gate)])


@router.get("", response_model=VoteDetailRead)
def get_vote(
    vote_id: int,
    session: Session = Depends(get_db_session),
    user_id: int = Depends(get_current_user_id),
) -> VoteDetailRead:
    return VoteDetailRead.model_validate(votes.get_vote_detail(session, user_id=user_id, vote_id=vote_id))


@router.put("", response_model=VoteRead)
def update_vote(
    vote_id: int,
    payload: VoteUpdate,
    session: Session = Depends(get_db_session),
    user_id: int = Depends(get_current_user_id),
    authorizer: Authorizer = Depends(get_authorizer),
) -> VoteRead:
    vote = votes.update_vote(
        session,
        user_id=user_id,
        vote_id=vote_id,
        authorizer=authorizer,
        name=payload.name,
        deadline=payload.deadline,
        clear_deadline=payload.clear_deadline,
    )
    return VoteRead.model_validate(vote)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def delete_vote(
    vote_id: int,
    session: Session = Depends(get_db_session),
    user_id: int = Depends(get_current_user_id),
    authorizer: Authorizer = Depends(get_authorizer),
) -> Response:
    votes.delete_vote(session, user_id=user_id, vote_id=vote_id, authorizer=authorizer)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/questions", response_model=Page[QuestionListItemRead])
def list_questions(
    vote_id: int,
    page: PageParams = Depends(page_params),
    session: Session = Depends(get_db_session),
    user_id: int = Depends(get_current_user_id),
) -> Page[QuestionListItemRead]:
    items, total = questions.list_questions(
        session, user_id=user_id, vote_id=vote_id, offset=page.offset, limit=page.size
    )
    return Page[QuestionListItemRead](
        items=[QuestionListItemRead.model_validate(item) for item in items],
        total=total,
    )


@router.post("/questions", response_model=QuestionRead, status_code=status.HTTP_201_CREATED)
def create_question(
    vote_id: int,
    payload: QuestionCreate,
    session: Session = Depends(get_db_session),
    user_id: int = Depends(get_current_user_id),
) -> QuestionRead:
    question = questions.create_question(
        session,
        user_id=user_id,
        vote_id=vote_id,
        draft=QuestionDraft(description=payload.description, type=payload.type, options=payload.options),
    )
    return QuestionRead.model_validate(question)


@router.put("/answers", response_model=dict[int, list[int]])
def submit_vote_answers(
    vote_id: int,
    payload: VoteAnswersSubmit,
    session: Session = Depends(get_db_session),
    user_id: int = Depends(get_current_user_id),
) -> dict[int, list[int]]:
    return answers.submit_vote_answers(
        session,
        user_id=user_id,
        vote_id=vote_id,
        submissions=[
            AnswerSubmission(question_id=item.question_id, option_ids=item.option_ids)
            for item in payload.answers
        ],
    )
