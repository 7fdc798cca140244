"""
SQLAlchemy Unit of Work Implementation.

Manages transaction boundaries across the account, group and membership
repositories.
"""

from typing import Optional

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session

from tfp.domain.interfaces.unit_of_work import IUnitOfWork
from .models import Base
from .repositories import (
    AccountRepository,
    GroupRepository,
    MembershipRepository,
)


def create_fixture_engine(db_url: str, echo: bool = False) -> Engine:
    """
    Create an engine and make sure the fixture tables exist.

    SQLite files shared by several worker processes get a busy timeout so
    that concurrent writers wait instead of failing immediately.
    """
    connect_args = {}
    if db_url.startswith("sqlite"):
        connect_args = {"timeout": 30, "check_same_thread": False}
    engine = create_engine(db_url, echo=echo, connect_args=connect_args)

    if db_url.startswith("sqlite"):
        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    Base.metadata.create_all(engine)
    return engine


class SQLAlchemyUnitOfWork(IUnitOfWork):
    """
    SQLAlchemy-based Unit of Work implementation.

    Usage:
        with SQLAlchemyUnitOfWork("sqlite:///tfp.db") as uow:
            group_id = uow.groups.add("Alpha run-1")
            uow.memberships.upsert(group_id, owner_id, MemberRole.ADMIN)
            uow.commit()
    """

    def __init__(
        self,
        db_url: str = "sqlite:///tfp.db",
        echo: bool = False,
        engine: Optional[Engine] = None,
    ):
        """
        Initialize the Unit of Work.

        Args:
            db_url: Database connection URL (ignored when engine is given)
            echo: If True, log SQL statements
            engine: Shared engine; pass one to reuse its connection pool
        """
        self._db_url = db_url
        self._engine = engine or create_fixture_engine(db_url, echo=echo)
        self._session_factory = sessionmaker(bind=self._engine)
        self._session: Optional[Session] = None

    def __enter__(self) -> "SQLAlchemyUnitOfWork":
        """Begin transaction and initialize repositories."""
        self._session = self._session_factory()

        self.accounts = AccountRepository(self._session)
        self.groups = GroupRepository(self._session)
        self.memberships = MembershipRepository(self._session)

        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """End transaction, rolling back on exception."""
        if exc_type:
            self.rollback()
        if self._session:
            self._session.close()
            self._session = None

    def commit(self):
        """Commit the transaction."""
        if self._session:
            try:
                self._session.commit()
            except Exception:
                self.rollback()
                raise

    def rollback(self):
        """Rollback the transaction."""
        if self._session:
            self._session.rollback()

    @property
    def session(self) -> Optional[Session]:
        """Get the current session (for advanced usage)."""
        return self._session
