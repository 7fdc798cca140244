"""
Provisioning Session.

The consumer-facing object of one provisioning run. It owns the run token,
the generator, the registry and the engine; nothing is kept in module or
process globals, so independent sessions can coexist in one process.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Union

from tfp.domain.models import (
    GroupProvisioningResult,
    GroupSnapshot,
    IdentityBatchResult,
    TestGroup,
    TestIdentity,
)

from .services.fixture_registry import FixtureRegistry, MemberSpec
from .services.identity_generator import IdentityGenerator
from .services.provisioning_engine import ProvisioningEngine

logger = logging.getLogger(__name__)


class ProvisioningSession:
    """
    Define fixtures, then create them.

    Usage:
        session = ProvisioningSessionFactory.create("billing", config)
        session.define_identity("owner", "owner", "Owner")
        session.define_identity("viewer", "viewer", "Viewer")
        session.define_group("team", "Team", "owner", [("viewer", "MEMBER")])

        session.create_identities()
        session.create_groups()

        team = session.group_of("owner")
    """

    def __init__(self, registry: FixtureRegistry, engine: ProvisioningEngine):
        self._registry = registry
        self._engine = engine

    @property
    def run_id(self) -> str:
        return self._registry.generator.run_id

    @property
    def namespace(self) -> str:
        return self._registry.generator.namespace

    @property
    def generator(self) -> IdentityGenerator:
        return self._registry.generator

    @property
    def registry(self) -> FixtureRegistry:
        return self._registry

    @property
    def engine(self) -> ProvisioningEngine:
        return self._engine

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
        return self._registry.define_identity(key, base, display_name, external=external)

    def define_group(
        self,
        key: str,
        name: str,
        owner_key: str,
        members: Optional[Iterable[MemberSpec]] = None,
    ) -> TestGroup:
        return self._registry.define_group(key, name, owner_key, members)

    # ═══════════════════════════════════════════════════════════════════════════
    # Creation
    # ═══════════════════════════════════════════════════════════════════════════

    def create_identities(self) -> IdentityBatchResult:
        return self._engine.create_identities(self._registry)

    def create_group(self, key: str) -> GroupProvisioningResult:
        return self._engine.create_group(self._registry, key)

    def create_groups(self, keys: Optional[Iterable[str]] = None) -> List[GroupProvisioningResult]:
        return self._engine.create_groups(self._registry, keys)

    def provision_all(self) -> List[GroupProvisioningResult]:
        """Create identities, then every group."""
        self.create_identities()
        return self.create_groups()

    # ═══════════════════════════════════════════════════════════════════════════
    # Lookup
    # ═══════════════════════════════════════════════════════════════════════════

    def get(self, key: str) -> Union[TestIdentity, TestGroup]:
        return self._registry.get(key)

    def get_identity(self, key: str) -> TestIdentity:
        return self._registry.get_identity(key)

    def get_group(self, key: str) -> TestGroup:
        return self._registry.get_group(key)

    def get_identity_by_email(self, email: str) -> TestIdentity:
        return self._registry.get_identity_by_email(email)

    def group_of(self, identity_key: str) -> Optional[GroupSnapshot]:
        """Persisted group of a defined identity, None if it has none."""
        identity = self._registry.get_identity(identity_key)
        return self._engine.group_of(identity.id)

    def debug_info(self) -> Dict[str, Any]:
        return self._registry.debug_info()
