"""
Fixture Registry.

In-memory definition table mapping logical keys to identity and group
definitions. References are validated eagerly at definition time, so an
inconsistent registry fails before any store access happens.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from tfp.domain.errors import NotFoundError, UndefinedReferenceError
from tfp.domain.models import GroupMember, MemberRole, TestGroup, TestIdentity

from .identity_generator import IdentityGenerator

logger = logging.getLogger(__name__)

MemberSpec = Tuple[str, Union[MemberRole, str]]


class FixtureRegistry:
    """
    Definitions of the identities and groups a test file needs.

    Usage:
        registry = FixtureRegistry(IdentityGenerator("billing"))
        registry.define_identity("owner", "owner", "Owner")
        registry.define_identity("viewer", "viewer", "Viewer")
        registry.define_group("team", "Team", "owner", [("viewer", "member")])
    """

    def __init__(self, generator: IdentityGenerator):
        self._generator = generator
        self._identities: Dict[str, TestIdentity] = {}
        self._groups: Dict[str, TestGroup] = {}

    @property
    def generator(self) -> IdentityGenerator:
        return self._generator

    # ═══════════════════════════════════════════════════════════════════════════
    # Definition
    # ═══════════════════════════════════════════════════════════════════════════

    def define_identity(
        self,
        key: str,
        base: str,
        display_name: str,
        external: bool = False,
    ) -> TestIdentity:
        """
        Define an account fixture. Redefining a key replaces it.

        Args:
            key: Logical key used by tests
            base: Base for the generated id and email
            display_name: Human-readable name
            external: Account arrives via an external flow and is never pre-created
        """
        identity = TestIdentity(
            key=key,
            id=self._generator.identity_id(base),
            email=self._generator.email(base),
            display_name=display_name,
            external=external,
        )
        if key in self._identities:
            logger.debug(f"Redefining identity '{key}'")
        self._identities[key] = identity
        return identity

    def define_group(
        self,
        key: str,
        name: str,
        owner_key: str,
        members: Optional[Iterable[MemberSpec]] = None,
    ) -> TestGroup:
        """
        Define a group owned by a previously defined identity.

        Args:
            key: Logical key used by tests
            name: Base display name of the group
            owner_key: Key of the owning identity
            members: (identity_key, role) pairs; role is a MemberRole or its name

        Raises:
            UndefinedReferenceError: If the owner or a member key is undefined
            ValueError: If a role name is unknown
        """
        owner = self._identities.get(owner_key)
        if owner is None:
            raise UndefinedReferenceError(owner_key, role="owner")

        group_members: List[GroupMember] = []
        for member_key, role in members or ():
            member = self._identities.get(member_key)
            if member is None:
                raise UndefinedReferenceError(member_key, role="member")
            group_members.append(GroupMember(identity_id=member.id, role=MemberRole.parse(role)))

        display_name = self._generator.group_name(name)
        group = TestGroup(
            key=key,
            name=display_name,
            store_name=self._generator.group_store_name(display_name, owner.id),
            owner_id=owner.id,
            members=group_members,
        )
        self._groups[key] = group
        return group

    # ═══════════════════════════════════════════════════════════════════════════
    # Lookup
    # ═══════════════════════════════════════════════════════════════════════════

    def get(self, key: str) -> Union[TestIdentity, TestGroup]:
        """Identity or group by key (identities win on a shared key)."""
        if key in self._identities:
            return self._identities[key]
        if key in self._groups:
            return self._groups[key]
        raise NotFoundError(key)

    def get_identity(self, key: str) -> TestIdentity:
        try:
            return self._identities[key]
        except KeyError:
            raise NotFoundError(key, kind="identity") from None

    def get_group(self, key: str) -> TestGroup:
        try:
            return self._groups[key]
        except KeyError:
            raise NotFoundError(key, kind="group") from None

    def get_identity_by_email(self, email: str) -> TestIdentity:
        for identity in self._identities.values():
            if identity.email == email:
                return identity
        raise NotFoundError(email, kind="identity")

    def identities(self) -> List[TestIdentity]:
        return list(self._identities.values())

    def groups(self) -> List[TestGroup]:
        return list(self._groups.values())

    def is_external(self, key: str) -> bool:
        return self.get_identity(key).external

    def identities_to_create(self) -> List[TestIdentity]:
        """Identities that must be pre-created (external ones excluded)."""
        return [i for i in self._identities.values() if not i.external]

    def debug_info(self) -> Dict[str, Any]:
        return {
            "namespace": self._generator.namespace,
            "run_id": self._generator.run_id,
            "identities": {k: i.to_dict() for k, i in self._identities.items()},
            "groups": {k: g.to_dict() for k, g in self._groups.items()},
        }
