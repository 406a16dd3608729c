"""Pydantic schemas for organization resources."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class OrganizationCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None


class OrganizationUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None


class OrganizationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None
    version: int


class OrganizationListItemRead(OrganizationRead):
    vote_count: int
    has_updated: bool


class OrganizationDetailRead(OrganizationRead):
    has_updated: bool
    is_manager: bool


class MemberRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    nickname: str
    phone: str
    email: str
    is_manager: bool


class MembersAdd(BaseModel):
    user_ids: list[int] = Field(..., min_length=1)


class MembersAdded(BaseModel):
    added: list[int]


class ManagerAdd(BaseModel):
    user_id: int


__all__ = [
    "ManagerAdd",
    "MemberRead",
    "MembersAdd",
    "MembersAdded",
    "OrganizationCreate",
    "OrganizationDetailRead",
    "OrganizationListItemRead",
    "OrganizationRead",
    "OrganizationUpdate",
]
