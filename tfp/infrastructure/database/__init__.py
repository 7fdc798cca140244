"""Database infrastructure - ORM models, repositories, and unit of work."""

from typing import Callable, Optional

from tfp.domain.interfaces.unit_of_work import IUnitOfWork
from .models import (
    Base,
    AccountORM,
    GroupORM,
    GroupMembershipORM,
)
from .unit_of_work import SQLAlchemyUnitOfWork, create_fixture_engine
from .inmemory_unit_of_work import InMemoryUnitOfWork, InMemoryDataStore


class UnitOfWorkFactory:
    """
    Builds unit-of-work factories for a storage mode.

    Every call of the returned callable yields a new, independent unit of
    work bound to the same underlying store (engine or in-memory data).
    """

    @staticmethod
    def create_factory(
        mode: str,
        db_url: Optional[str] = None,
        echo: bool = False,
        data: Optional[InMemoryDataStore] = None,
    ) -> Callable[[], IUnitOfWork]:
        """
        Args:
            mode: "inmemory" or "sqlalchemy"
            db_url: Database URL for sqlalchemy mode
            echo: Log SQL statements
            data: Shared in-memory data for inmemory mode

        Returns:
            Zero-argument callable creating units of work
        """
        if mode == "inmemory":
            shared = data or InMemoryDataStore()
            return lambda: InMemoryUnitOfWork(shared)
        if mode == "sqlalchemy":
            if not db_url:
                raise ValueError("db_url is required for sqlalchemy storage mode")
            engine = create_fixture_engine(db_url, echo=echo)
            return lambda: SQLAlchemyUnitOfWork(db_url, engine=engine)
        raise ValueError(f"Unknown storage mode: {mode}")


__all__ = [
    # Models
    "Base",
    "AccountORM",
    "GroupORM",
    "GroupMembershipORM",
    # UoW
    "SQLAlchemyUnitOfWork",
    "InMemoryUnitOfWork",
    "InMemoryDataStore",
    "UnitOfWorkFactory",
    "create_fixture_engine",
]
