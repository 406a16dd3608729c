"""ORM models package."""
from .answer import Answer
from .base import Base, TimestampMixin, VersionedMixin
from .organization import Organization, OrganizationManager, OrganizationMember
from .question import Option, Question, QuestionType
from .read_mark import OrganizationReadMark, QuestionReadMark, VoteReadMark
from .user import User
from .vote import Vote, VoteStatus

__all__ = [
    "Answer",
    "Base",
    "Option",
    "Organization",
    "OrganizationManager",
    "OrganizationMember",
    "OrganizationReadMark",
    "Question",
    "QuestionReadMark",
    "QuestionType",
    "TimestampMixin",
    "User",
    "VersionedMixin",
    "Vote",
    "VoteReadMark",
    "VoteStatus",
]
