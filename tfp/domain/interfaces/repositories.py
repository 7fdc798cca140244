"""
Repository Interfaces.

Abstract data access contracts for the three store tables the provisioning
layer touches: accounts, groups, and group memberships.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from tfp.domain.models import (
    AccountRecord,
    GroupSnapshot,
    MemberRole,
    MembershipRecord,
)


class IAccountRepository(ABC):
    """Account persistence keyed by email."""

    @abstractmethod
    def get(self, id: str) -> Optional[AccountRecord]:
        """Point lookup by account id."""
        pass

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[AccountRecord]:
        """Point lookup by the unique email key."""
        pass

    @abstractmethod
    def upsert(self, id: str, email: str, display_name: str) -> AccountRecord:
        """
        Insert the account, or re-apply its display name if the email exists.

        Args:
            id: Account id used only when inserting
            email: Unique upsert key
            display_name: Name to apply

        Returns:
            The stored account
        """
        pass

    @abstractmethod
    def list_memberships(self, account_id: str) -> List[MembershipRecord]:
        """
        Load the account together with its memberships.

        This is the read consumers use (account -> memberships relation),
        routed independently of IMembershipRepository.find_by_account.
        """
        pass


class IGroupRepository(ABC):
    """Group persistence."""

    @abstractmethod
    def get(self, id: str) -> Optional[GroupSnapshot]:
        pass

    @abstractmethod
    def find_by_name(self, name: str) -> Optional[GroupSnapshot]:
        pass

    @abstractmethod
    def add(self, name: str) -> str:
        """Create a group record and return its id."""
        pass


class IMembershipRepository(ABC):
    """Membership persistence, unique per (group, account)."""

    @abstractmethod
    def find_by_account(
        self, account_id: str, group_id: Optional[str] = None
    ) -> Optional[MembershipRecord]:
        """Lookup by foreign relation: first membership of an account, optionally in one group."""
        pass

    @abstractmethod
    def upsert(self, group_id: str, account_id: str, role: MemberRole) -> MembershipRecord:
        """Insert the membership or update its role."""
        pass

    @abstractmethod
    def list_by_group(self, group_id: str) -> List[MembershipRecord]:
        pass
