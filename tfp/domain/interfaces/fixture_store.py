"""
Fixture Store Interface.

Synchronous storage-client boundary used by the provisioning engine. The
coordination logic depends only on this contract, never on how operations
are physically transported to the store.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from tfp.domain.models import (
    GroupMember,
    GroupSnapshot,
    MembershipRecord,
    TestIdentity,
)


class IFixtureStore(ABC):
    """
    Storage capabilities required by provisioning.

    - idempotent upsert by unique key
    - multi-row atomic transaction (group + memberships)
    - point lookup by key
    - lookup by foreign relation (membership by owner)
    """

    @abstractmethod
    def upsert_identity(self, identity: TestIdentity) -> None:
        """Idempotent upsert keyed by email."""
        pass

    @abstractmethod
    def identity_exists(self, identity_id: str) -> bool:
        pass

    @abstractmethod
    def find_membership(
        self, identity_id: str, group_id: Optional[str] = None
    ) -> Optional[MembershipRecord]:
        """Storage read path: membership lookup by owner, optionally restricted to one group."""
        pass

    @abstractmethod
    def get_identity_memberships(self, identity_id: str) -> List[MembershipRecord]:
        """Consumer read path: identity loaded with its memberships."""
        pass

    @abstractmethod
    def create_group(
        self,
        store_name: str,
        owner_id: str,
        members: Sequence[GroupMember] = (),
    ) -> str:
        """
        Atomically find-or-create the group and upsert all memberships.

        The owner is upserted as ADMIN, then every member with its role.

        Returns:
            Store id of the group

        Raises:
            MissingRecordError: If the owner account is not visible
            TransientStoreError: On retryable store failures
        """
        pass

    @abstractmethod
    def get_group(self, group_id: str) -> Optional[GroupSnapshot]:
        pass
