"""Domain interfaces (ports) for provisioning."""

from .repositories import (
    IAccountRepository,
    IGroupRepository,
    IMembershipRepository,
)
from .unit_of_work import IUnitOfWork
from .lock_manager import ILockManager
from .fixture_store import IFixtureStore

__all__ = [
    "IAccountRepository",
    "IGroupRepository",
    "IMembershipRepository",
    "IUnitOfWork",
    "ILockManager",
    "IFixtureStore",
]
