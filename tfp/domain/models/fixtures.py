"""
Fixture Domain Models.

Pre-creation definitions of the entities a test file needs. These are pure
value objects: building them never touches the store.

Architecture:
- TestIdentity: An account, unique per run by email
- TestGroup: An organizational group owned by one identity
- GroupMember: (identity_id, role) pair inside a group
- MemberRole: ADMIN or MEMBER
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Union


class MemberRole(Enum):
    """Role of an identity inside a group."""
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"

    @classmethod
    def parse(cls, value: Union["MemberRole", str]) -> "MemberRole":
        """
        Coerce a role given as enum or string (case-insensitive).

        Raises:
            ValueError: If the string is not a known role
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            valid = ", ".join(r.value for r in cls)
            raise ValueError(f"Invalid member role '{value}'. Must be one of: {valid}") from None


@dataclass(frozen=True)
class TestIdentity:
    """
    Account fixture definition.

    Attributes:
        key: Registry key the identity was defined under
        id: Run-scoped account id
        email: Run-scoped email, the upsert key in the store
        display_name: Human-readable name
        external: True if the account arrives via an external flow
            (e.g. an invitation) and must not be pre-created
    """
    __test__ = False

    key: str
    id: str
    email: str
    display_name: str
    external: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "id": self.id,
            "email": self.email,
            "display_name": self.display_name,
            "external": self.external,
        }


@dataclass(frozen=True)
class GroupMember:
    """Declared membership of an identity inside a group."""
    identity_id: str
    role: MemberRole = MemberRole.MEMBER


@dataclass(frozen=True)
class TestGroup:
    """
    Group fixture definition.

    Attributes:
        key: Registry key the group was defined under
        name: Run-scoped display name
        store_name: Pre-computed unique name the store record is found or
            created by
        owner_id: Identity id of the owner (always provisioned as ADMIN)
        members: Additional declared members with roles
    """
    __test__ = False

    key: str
    name: str
    store_name: str
    owner_id: str
    members: List[GroupMember] = field(default_factory=list)

    @property
    def lock_name(self) -> str:
        """Lock resource guarding group creation for this owner."""
        return f"owner-{self.owner_id}"

    def expected_roles(self) -> Dict[str, MemberRole]:
        """Roles the provisioned group must end up with, owner included."""
        roles = {m.identity_id: m.role for m in self.members}
        roles[self.owner_id] = MemberRole.ADMIN
        return roles

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "name": self.name,
            "store_name": self.store_name,
            "owner_id": self.owner_id,
            "members": [
                {"identity_id": m.identity_id, "role": m.role.value}
                for m in self.members
            ],
        }
