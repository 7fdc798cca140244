"""
Pytest fixtures for TFP tests.
"""

import threading
import time
from typing import Dict, List, Optional, Sequence

import pytest

from tfp.config import LockConfig, RetryConfig
from tfp.application.services import FixtureRegistry, IdentityGenerator, ProvisioningEngine
from tfp.domain.errors import TransientStoreError
from tfp.domain.interfaces.fixture_store import IFixtureStore
from tfp.domain.interfaces.lock_manager import ILockManager
from tfp.domain.models import (
    GroupMember,
    GroupSnapshot,
    LockMarker,
    MembershipRecord,
    TestIdentity,
)
from tfp.infrastructure.database import InMemoryDataStore, UnitOfWorkFactory
from tfp.infrastructure.locking import FileLockManager
from tfp.infrastructure.store import UnitOfWorkFixtureStore


# ═══════════════════════════════════════════════════════════════════════════════
# Fault Injection
# ═══════════════════════════════════════════════════════════════════════════════


class FaultInjectingStore(IFixtureStore):
    """
    Delegating store that fails on demand.

    Attributes:
        failing_emails: Upserts for these emails raise TransientStoreError
        create_failures: Number of create_group calls to fail before delegating
        storage_misses: Post-creation storage reads that report no membership
        consumer_misses: Consumer reads that report no memberships
    """

    def __init__(self, inner: IFixtureStore):
        self.inner = inner
        self.failing_emails: set = set()
        self.create_failures = 0
        self.storage_misses = 0
        self.consumer_misses = 0
        self.calls: List[str] = []
        self._created = False

    def upsert_identity(self, identity: TestIdentity) -> None:
        self.calls.append("upsert_identity")
        if identity.email in self.failing_emails:
            raise TransientStoreError(f"injected upsert failure for {identity.email}")
        self.inner.upsert_identity(identity)

    def identity_exists(self, identity_id: str) -> bool:
        return self.inner.identity_exists(identity_id)

    def find_membership(
        self, identity_id: str, group_id: Optional[str] = None
    ) -> Optional[MembershipRecord]:
        self.calls.append("find_membership")
        if self._created and self.storage_misses > 0:
            self.storage_misses -= 1
            return None
        return self.inner.find_membership(identity_id, group_id)

    def get_identity_memberships(self, identity_id: str) -> List[MembershipRecord]:
        self.calls.append("get_identity_memberships")
        if self.consumer_misses > 0:
            self.consumer_misses -= 1
            return []
        return self.inner.get_identity_memberships(identity_id)

    def create_group(
        self,
        store_name: str,
        owner_id: str,
        members: Sequence[GroupMember] = (),
    ) -> str:
        self.calls.append("create_group")
        if self.create_failures > 0:
            self.create_failures -= 1
            raise TransientStoreError("injected create failure")
        group_id = self.inner.create_group(store_name, owner_id, members)
        self._created = True
        return group_id

    def get_group(self, group_id: str) -> Optional[GroupSnapshot]:
        return self.inner.get_group(group_id)


class TrackingLockManager(ILockManager):
    """Delegating lock manager recording how many holders are inside per resource."""

    def __init__(self, inner: ILockManager, hold_delay: float = 0.0):
        self.inner = inner
        self.hold_delay = hold_delay
        self.inside: Dict[str, int] = {}
        self.max_inside: Dict[str, int] = {}
        self.acquired: List[str] = []
        self.released: List[str] = []
        self._mutex = threading.Lock()

    def acquire(self, resource_name, max_wait=None, poll_interval=None) -> LockMarker:
        marker = self.inner.acquire(resource_name, max_wait=max_wait, poll_interval=poll_interval)
        with self._mutex:
            self.acquired.append(resource_name)
            self.inside[resource_name] = self.inside.get(resource_name, 0) + 1
            self.max_inside[resource_name] = max(
                self.max_inside.get(resource_name, 0), self.inside[resource_name]
            )
        if self.hold_delay:
            time.sleep(self.hold_delay)
        return marker

    def release(self, resource_name: str) -> bool:
        with self._mutex:
            self.inside[resource_name] -= 1
            self.released.append(resource_name)
        return self.inner.release(resource_name)

    def is_locked(self, resource_name: str) -> bool:
        return self.inner.is_locked(resource_name)

    def read_marker(self, resource_name: str) -> Optional[LockMarker]:
        return self.inner.read_marker(resource_name)


# ═══════════════════════════════════════════════════════════════════════════════
# Fixtures
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def lock_dir(tmp_path):
    path = tmp_path / "locks"
    path.mkdir()
    return path


@pytest.fixture
def lock_manager(lock_dir):
    return FileLockManager(lock_dir, max_wait=2.0, poll_interval=0.01, worker_id="gw-test")


@pytest.fixture
def data():
    return InMemoryDataStore()


@pytest.fixture
def store(data):
    return UnitOfWorkFixtureStore(UnitOfWorkFactory.create_factory("inmemory", data=data))


@pytest.fixture
def sqlite_url(tmp_path):
    return f"sqlite:///{tmp_path / 'tfp.db'}"


@pytest.fixture
def sqlite_store(sqlite_url):
    return UnitOfWorkFixtureStore(UnitOfWorkFactory.create_factory("sqlalchemy", sqlite_url))


@pytest.fixture
def generator():
    return IdentityGenerator("suite", run_id="run00001")


@pytest.fixture
def registry(generator):
    return FixtureRegistry(generator)


@pytest.fixture
def sleeps():
    """Delays the engine asked to sleep, in order."""
    return []


@pytest.fixture
def lock_config(lock_dir):
    return LockConfig(lock_dir=str(lock_dir), max_wait_seconds=2.0, poll_interval_seconds=0.01)


@pytest.fixture
def make_engine(lock_manager, lock_config, sleeps):
    """Build an engine over any store with test retry budgets."""

    def _make(store: IFixtureStore, locks: Optional[ILockManager] = None, retry: Optional[RetryConfig] = None):
        return ProvisioningEngine(
            store,
            locks or lock_manager,
            retry=retry or RetryConfig.for_testing(),
            lock_config=lock_config,
            sleep=sleeps.append,
            worker_id="gw-test",
        )

    return _make


@pytest.fixture
def engine(make_engine, store):
    return make_engine(store)


@pytest.fixture
def team_registry(registry):
    """Owner X with members Y (MEMBER) and Z (ADMIN)."""
    registry.define_identity("x", "owner", "Owner X")
    registry.define_identity("y", "member", "Member Y")
    registry.define_identity("z", "admin", "Admin Z")
    registry.define_group("team", "Team", "x", [("y", "MEMBER"), ("z", "ADMIN")])
    return registry
