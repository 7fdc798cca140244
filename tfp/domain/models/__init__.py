"""Domain models for fixture provisioning."""

from .fixtures import (
    MemberRole,
    TestIdentity,
    TestGroup,
    GroupMember,
)
from .lock import LockMarker
from .records import (
    AccountRecord,
    MembershipRecord,
    GroupSnapshot,
    IdentityBatchResult,
    GroupProvisioningResult,
)

__all__ = [
    "MemberRole",
    "TestIdentity",
    "TestGroup",
    "GroupMember",
    "LockMarker",
    "AccountRecord",
    "MembershipRecord",
    "GroupSnapshot",
    "IdentityBatchResult",
    "GroupProvisioningResult",
]
