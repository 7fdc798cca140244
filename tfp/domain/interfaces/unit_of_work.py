"""
Unit of Work Interface.

Manages transaction boundaries across the account, group and membership
repositories. Group creation writes a group row and several membership rows
and must be atomic.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .repositories import (
        IAccountRepository,
        IGroupRepository,
        IMembershipRepository,
    )


class IUnitOfWork(ABC):
    """
    Unit of Work pattern interface.

    Usage:
        with uow:
            group_id = uow.groups.add("Alpha run-1")
            uow.memberships.upsert(group_id, owner_id, MemberRole.ADMIN)
            uow.commit()  # Both saved atomically

    Design Decisions:
    - Repository access through attributes
    - Context manager handles transaction lifecycle
    - Automatic rollback on exception
    - Explicit commit required
    """

    accounts: "IAccountRepository"
    groups: "IGroupRepository"
    memberships: "IMembershipRepository"

    @abstractmethod
    def __enter__(self) -> "IUnitOfWork":
        """Begin transaction."""
        pass

    @abstractmethod
    def __exit__(self, exc_type, exc_val, exc_tb):
        """End transaction, rolling back uncommitted work."""
        pass

    @abstractmethod
    def commit(self):
        """Persist all changes made through repositories."""
        pass

    @abstractmethod
    def rollback(self):
        """Discard all changes made through repositories."""
        pass
