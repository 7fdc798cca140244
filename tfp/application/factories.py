"""
Application Factories.

Wire provisioning sessions from a ProvisioningConfig:
- storage_mode selects the unit of work (in-memory or SQLAlchemy)
- lock.backend selects the lock manager (filesystem or sandbox)
- retry and lock settings are handed to the engine
"""

import logging
from pathlib import Path
from typing import Callable, Optional

from tfp.config import ProvisioningConfig, configure_logging
from tfp.domain.interfaces.fixture_store import IFixtureStore
from tfp.domain.interfaces.lock_manager import ILockManager
from tfp.domain.interfaces.unit_of_work import IUnitOfWork
from tfp.infrastructure.database import InMemoryDataStore, UnitOfWorkFactory
from tfp.infrastructure.locking import FileLockManager, SandboxLockManager
from tfp.infrastructure.sandbox import SandboxCommandExecutor
from tfp.infrastructure.store import UnitOfWorkFixtureStore

from .services.fixture_registry import FixtureRegistry
from .services.identity_generator import IdentityGenerator
from .services.provisioning_engine import ProvisioningEngine
from .session import ProvisioningSession

logger = logging.getLogger(__name__)


def _ensure_sqlite_dir(db_url: str) -> None:
    """Create the parent directory of a file-based SQLite URL."""
    prefix = "sqlite:///"
    if not db_url.startswith(prefix):
        return
    path = db_url[len(prefix):]
    if path and path != ":memory:":
        Path(path).parent.mkdir(parents=True, exist_ok=True)


class FixtureStoreFactory:
    """Creates fixture stores for a configuration."""

    @staticmethod
    def create_uow_factory(
        config: ProvisioningConfig,
        data: Optional[InMemoryDataStore] = None,
    ) -> Callable[[], IUnitOfWork]:
        if config.storage_mode == "sqlalchemy":
            _ensure_sqlite_dir(config.db_url)
        return UnitOfWorkFactory.create_factory(
            mode=config.storage_mode,
            db_url=config.db_url,
            echo=config.log_sql,
            data=data,
        )

    @classmethod
    def create(
        cls,
        config: ProvisioningConfig,
        data: Optional[InMemoryDataStore] = None,
    ) -> IFixtureStore:
        """
        Args:
            config: Provisioning configuration
            data: Shared in-memory data (inmemory mode only)
        """
        return UnitOfWorkFixtureStore(cls.create_uow_factory(config, data))


class LockManagerFactory:
    """Creates lock managers for a configuration."""

    @staticmethod
    def create(config: ProvisioningConfig) -> ILockManager:
        lock = config.lock
        if lock.backend == "sandbox":
            executor = SandboxCommandExecutor(
                lock.sandbox_container,
                timeout_seconds=lock.command_timeout_seconds,
            )
            return SandboxLockManager(
                executor,
                lock_dir=lock.lock_dir,
                max_wait=lock.max_wait_seconds,
                poll_interval=lock.poll_interval_seconds,
            )
        return FileLockManager(
            lock_dir=lock.lock_dir,
            max_wait=lock.max_wait_seconds,
            poll_interval=lock.poll_interval_seconds,
        )


class ProvisioningSessionFactory:
    """
    Factory for creating provisioning sessions with proper dependencies.

    Usage:
        config = ProvisioningConfig.from_env()
        session = ProvisioningSessionFactory.create("billing", config)
    """

    @staticmethod
    def create(
        namespace: str,
        config: Optional[ProvisioningConfig] = None,
        run_id: Optional[str] = None,
        store: Optional[IFixtureStore] = None,
        lock_manager: Optional[ILockManager] = None,
    ) -> ProvisioningSession:
        """
        Build a session.

        Args:
            namespace: Test file or suite the fixtures belong to
            config: Configuration (ProvisioningConfig.from_env() when omitted)
            run_id: Fixed run token (random when omitted)
            store: Prebuilt store overriding config.storage_mode
            lock_manager: Prebuilt lock manager overriding config.lock
        """
        config = config or ProvisioningConfig.from_env()
        config.validate()
        configure_logging(config)

        generator = IdentityGenerator(namespace, run_id=run_id, email_domain=config.email_domain)
        engine = ProvisioningEngine(
            store=store or FixtureStoreFactory.create(config),
            lock_manager=lock_manager or LockManagerFactory.create(config),
            retry=config.retry,
            lock_config=config.lock,
        )
        logger.info(
            f"Provisioning session '{generator.namespace}' run {generator.run_id} "
            f"(storage={config.storage_mode}, locks={config.lock.backend})"
        )
        return ProvisioningSession(FixtureRegistry(generator), engine)
