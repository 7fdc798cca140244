"""SQLAlchemy repository implementations."""

from .base import BaseRepository
from .account_repository import AccountRepository
from .group_repository import GroupRepository
from .membership_repository import MembershipRepository

__all__ = [
    "BaseRepository",
    "AccountRepository",
    "GroupRepository",
    "MembershipRepository",
]
