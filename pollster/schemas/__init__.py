"""Pydantic schemas package."""

from .common import Page
from .organization import (
    ManagerAdd,
    MemberRead,
    MembersAdd,
    MembersAdded,
    OrganizationCreate,
    OrganizationDetailRead,
    OrganizationListItemRead,
    OrganizationRead,
    OrganizationUpdate,
)
from .question import (
    AnswerSubmit,
    OptionListItemRead,
    OptionRead,
    OptionsCreate,
    QuestionAnswersRead,
    QuestionCreate,
    QuestionDetailRead,
    QuestionListItemRead,
    QuestionRead,
    VoteAnswerItem,
    VoteAnswersSubmit,
)
from .user import LoginRequest, SignupRequest, TokenResponse, UserLookupRead, UserRead
from .vote import VoteCreate, VoteDetailRead, VoteListItemRead, VoteRead, VoteUpdate

__all__ = [
    "AnswerSubmit",
    "LoginRequest",
    "ManagerAdd",
    "MemberRead",
    "MembersAdd",
    "MembersAdded",
    "OptionListItemRead",
    "OptionRead",
    "OptionsCreate",
    "OrganizationCreate",
    "OrganizationDetailRead",
    "OrganizationListItemRead",
    "OrganizationRead",
    "OrganizationUpdate",
    "Page",
    "QuestionAnswersRead",
    "QuestionCreate",
    "QuestionDetailRead",
    "QuestionListItemRead",
    "QuestionRead",
    "SignupRequest",
    "TokenResponse",
    "UserLookupRead",
    "UserRead",
    "VoteAnswerItem",
    "VoteAnswersSubmit",
    "VoteCreate",
    "VoteDetailRead",
    "VoteListItemRead",
    "VoteRead",
    "VoteUpdate",
]
