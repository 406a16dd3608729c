"""Pydantic schemas for questions, options and answers."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from pollster.models.question import QuestionType


class QuestionCreate(BaseModel):
    description: str = Field(..., min_length=1, max_length=1024)
    type: QuestionType = Field(default=QuestionType.SINGLE)
    options: list[str] = Field(default_factory=list)


class QuestionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    vote_id: int
    owner_id: int
    description: str
    type: QuestionType
    version: int


class QuestionListItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    description: str
    type: QuestionType
    version: int
    has_updated: bool
    has_answered: bool


class OptionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    text: str


class OptionListItemRead(OptionRead):
    checked: bool


class QuestionDetailRead(QuestionRead):
    has_updated: bool
    options: list[OptionRead]


class OptionsCreate(BaseModel):
    texts: list[str] = Field(..., min_length=1)


class AnswerSubmit(BaseModel):
    option_ids: list[int]


class VoteAnswerItem(BaseModel):
    question_id: int
    option_ids: list[int]


class VoteAnswersSubmit(BaseModel):
    answers: list[VoteAnswerItem] = Field(..., min_length=1)


class QuestionAnswersRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    question_id: int
    type: QuestionType
    options: list[OptionRead]
    chosen_option_ids: list[int]


__all__ = [
    "AnswerSubmit",
    "OptionListItemRead",
    "OptionRead",
    "OptionsCreate",
    "QuestionAnswersRead",
    "QuestionCreate",
    "QuestionDetailRead",
    "QuestionListItemRead",
    "QuestionRead",
    "VoteAnswerItem",
    "VoteAnswersSubmit",
]
