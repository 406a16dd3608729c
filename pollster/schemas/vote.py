"""Pydantic schemas for vote resources."""
from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field

from pollster.models.vote import VoteStatus
from pollster.schemas.question import QuestionCreate


class VoteCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    deadline: date | None = None
    questions: list[QuestionCreate] = Field(default_factory=list)


class VoteUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    deadline: date | None = None
    clear_deadline: bool = False


class VoteRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    organization_id: int
    name: str
    deadline: date | None
    version: int


class VoteListItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    deadline: date | None
    status: VoteStatus
    version: int
    question_count: int
    has_updated: bool


class VoteDetailRead(VoteRead):
    status: VoteStatus
    has_updated: bool


__all__ = ["VoteCreate", "VoteDetailRead", "VoteListItemRead", "VoteRead", "VoteUpdate"]
