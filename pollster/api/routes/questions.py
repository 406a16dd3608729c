"""Question, option and answer endpoints."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from pollster.api.deps import PageParams, get_authorizer, get_current_user_id, get_db_session, page_params
from pollster.api.gate import GateConfig, authorization_gate
from pollster.schemas.common import Page
from pollster.schemas.question import (
    AnswerSubmit,
    OptionListItemRead,
    OptionRead,
    OptionsCreate,
    QuestionAnswersRead,
    QuestionDetailRead,
)
from pollster.services import answers, options, questions
from pollster.services.authorization import Authorizer, is_option_member, is_question_member

question_member_gate = authorization_gate(GateConfig(is_question_member, "question_id"))
option_member_gate = authorization_gate(GateConfig(is_option_member, "option_id"))

router = APIRouter(prefix="/questions/{question_id}", dependencies=[Depends(question_member_gate)])
option_router = APIRouter(prefix="/options/{option_id}", dependencies=[Depends(option_member_gate)])


@router.get("", response_model=QuestionDetailRead)
def get_question(
    question_id: int,
    session: Session = Depends(get_db_session),
    user_id: int = Depends(get_current_user_id),
) -> QuestionDetailRead:
    detail = questions.get_question_detail(session, user_id=user_id, question_id=question_id)
    return QuestionDetailRead.model_validate(detail)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def delete_question(
    question_id: int,
    session: Session = Depends(get_db_session),
    user_id: int = Depends(get_current_user_id),
    authorizer: Authorizer = Depends(get_authorizer),
) -> Response:
    questions.delete_question(session, user_id=user_id, question_id=question_id, authorizer=authorizer)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/options", response_model=Page[OptionListItemRead])
def list_options(
    question_id: int,
    page: PageParams = Depends(page_params),
    session: Session = Depends(get_db_session),
    user_id: int = Depends(get_current_user_id),
) -> Page[OptionListItemRead]:
    items, total = options.list_options(
        session, user_id=user_id, question_id=question_id, offset=page.offset, limit=page.size
    )
    return Page[OptionListItemRead](items=[OptionListItemRead.model_validate(item) for item in items], total=total)


@router.post("/options", response_model=list[OptionRead], status_code=status.HTTP_201_CREATED)
def add_options(
    question_id: int,
    payload: OptionsCreate,
    session: Session = Depends(get_db_session),
    user_id: int = Depends(get_current_user_id),
    authorizer: Authorizer = Depends(get_authorizer),
) -> list[OptionRead]:
    created = options.add_options(
        session, user_id=user_id, question_id=question_id, texts=payload.texts, authorizer=authorizer
    )
    return [OptionRead.model_validate(option) for option in created]


@router.get("/answers", response_model=QuestionAnswersRead)
def get_answers(
    question_id: int,
    session: Session = Depends(get_db_session),
    user_id: int = Depends(get_current_user_id),
) -> QuestionAnswersRead:
    return QuestionAnswersRead.model_validate(
        answers.answers_of(session, user_id=user_id, question_id=question_id)
    )


@router.put("/answers", response_model=QuestionAnswersRead)
def submit_answers(
    question_id: int,
    payload: AnswerSubmit,
    session: Session = Depends(get_db_session),
    user_id: int = Depends(get_current_user_id),
) -> QuestionAnswersRead:
    answers.submit_answers(session, user_id=user_id, question_id=question_id, option_ids=payload.option_ids)
    return QuestionAnswersRead.model_validate(
        answers.answers_of(session, user_id=user_id, question_id=question_id)
    )


@option_router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def delete_option(
    option_id: int,
    session: Session = Depends(get_db_session),
    user_id: int = Depends(get_current_user_id),
    authorizer: Authorizer = Depends(get_authorizer),
) -> Response:
    options.delete_option(session, user_id=user_id, option_id=option_id, authorizer=authorizer)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
