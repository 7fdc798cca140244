"""
Testing Fixtures.

Helpers for building fully in-memory provisioning sessions in unit tests,
plus the conventional keys suites use for their standard identities.
"""

import os
import tempfile
from typing import Optional

from tfp.application.factories import FixtureStoreFactory, ProvisioningSessionFactory
from tfp.application.session import ProvisioningSession
from tfp.config import ProvisioningConfig
from tfp.domain.interfaces.fixture_store import IFixtureStore
from tfp.domain.interfaces.lock_manager import ILockManager
from tfp.infrastructure.database import InMemoryDataStore

DEFAULT_TESTING_LOCK_DIR = os.path.join(tempfile.gettempdir(), "tfp-test-locks")


def standard_user_key(role: str = "admin", index: Optional[int] = None) -> str:
    """Key of a standard suite identity, e.g. "user.admin" or "user.member.2"."""
    key = f"user.{role.lower()}"
    return key if index is None else f"{key}.{index}"


def standard_group_key(name: str = "primary") -> str:
    """Key of a standard suite group, e.g. "group.primary"."""
    return f"group.{name.lower()}"


def create_testing_session(
    namespace: str = "unit",
    lock_dir: Optional[str] = None,
    run_id: Optional[str] = None,
    data: Optional[InMemoryDataStore] = None,
    store: Optional[IFixtureStore] = None,
    lock_manager: Optional[ILockManager] = None,
) -> ProvisioningSession:
    """
    In-memory session with fast locks and no backoff sleeps.

    Args:
        namespace: Session namespace
        lock_dir: Marker directory (DEFAULT_TESTING_LOCK_DIR when omitted, shared
            by every session, markers removed on release; pass pytest's tmp_path for a
            directory removed with the test)
        run_id: Fixed run token
        data: Shared in-memory data, to let several sessions see one store
        store: Store overriding the in-memory one (fault injection)
        lock_manager: Lock manager overriding the filesystem one
    """
    config = ProvisioningConfig.for_testing(lock_dir=lock_dir or DEFAULT_TESTING_LOCK_DIR)
    if store is None:
        store = FixtureStoreFactory.create(config, data=data)
    return ProvisioningSessionFactory.create(
        namespace,
        config,
        run_id=run_id,
        store=store,
        lock_manager=lock_manager,
    )
