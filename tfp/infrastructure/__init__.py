"""Infrastructure layer: persistence, fixture store, locks and sandbox access."""

from .database import (
    SQLAlchemyUnitOfWork,
    InMemoryUnitOfWork,
    InMemoryDataStore,
    UnitOfWorkFactory,
)
from .store import UnitOfWorkFixtureStore
from .locking import FileLockManager, SandboxLockManager
from .sandbox import SandboxCommandExecutor

__all__ = [
    "SQLAlchemyUnitOfWork",
    "InMemoryUnitOfWork",
    "InMemoryDataStore",
    "UnitOfWorkFactory",
    "UnitOfWorkFixtureStore",
    "FileLockManager",
    "SandboxLockManager",
    "SandboxCommandExecutor",
]
