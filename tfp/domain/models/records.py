"""
Store Records and Provisioning Results.

Read models returned by the fixture store and result objects returned by
the provisioning engine.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .fixtures import MemberRole


@dataclass(frozen=True)
class MembershipRecord:
    """A persisted membership row as seen through a read path."""
    group_id: str
    group_name: str
    identity_id: str
    role: MemberRole


@dataclass(frozen=True)
class GroupSnapshot:
    """A persisted group with all of its memberships."""
    group_id: str
    name: str
    members: List[MembershipRecord] = field(default_factory=list)

    def roles(self) -> Dict[str, MemberRole]:
        return {m.identity_id: m.role for m in self.members}

    def role_of(self, identity_id: str) -> Optional[MemberRole]:
        return self.roles().get(identity_id)


@dataclass
class IdentityBatchResult:
    """
    Outcome of a best-effort identity batch.

    Attributes:
        created: Keys upserted successfully
        skipped: Keys flagged external and not pre-created
        failed: Key -> error message for upserts that failed
    """
    created: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


@dataclass(frozen=True)
class GroupProvisioningResult:
    """
    Outcome of provisioning a single group.

    Attributes:
        key: Registry key of the group
        store_name: Unique name of the store record
        owner_id: Owner identity id
        group_id: Store id of the group the owner belongs to
        skipped: True when the precheck found an existing membership
        attempts: Creation attempts used (0 when skipped)
    """
    key: str
    store_name: str
    owner_id: str
    group_id: str
    skipped: bool = False
    attempts: int = 0


@dataclass(frozen=True)
class AccountRecord:
    """A persisted account row."""
    id: str
    email: str
    display_name: str
