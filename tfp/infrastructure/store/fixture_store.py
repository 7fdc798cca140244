"""
Unit-of-Work backed Fixture Store.

Synchronous storage client the provisioning engine talks to. Each public
operation opens its own unit of work, so every call is one transaction and
every read observes only committed data.

Error translation:
- connection/lock-wait/pool failures -> TransientStoreError (retryable)
- any other SQLAlchemy failure       -> StoreError
"""

import logging
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional, Sequence

from sqlalchemy.exc import (
    DBAPIError,
    IntegrityError,
    OperationalError,
    SQLAlchemyError,
    TimeoutError as PoolTimeoutError,
)

from tfp.domain.errors import MissingRecordError, StoreError, TransientStoreError
from tfp.domain.interfaces.fixture_store import IFixtureStore
from tfp.domain.interfaces.unit_of_work import IUnitOfWork
from tfp.domain.models import (
    GroupMember,
    GroupSnapshot,
    MemberRole,
    MembershipRecord,
    TestIdentity,
)

logger = logging.getLogger(__name__)


@contextmanager
def translate_store_errors(operation: str) -> Iterator[None]:
    """Map driver exceptions onto the provisioning error taxonomy."""
    try:
        yield
    except (OperationalError, PoolTimeoutError) as e:
        raise TransientStoreError(f"{operation} failed transiently: {e}") from e
    except DBAPIError as e:
        if e.connection_invalidated:
            raise TransientStoreError(f"{operation} lost its connection: {e}") from e
        raise StoreError(f"{operation} failed: {e}") from e
    except SQLAlchemyError as e:
        raise StoreError(f"{operation} failed: {e}") from e


class UnitOfWorkFixtureStore(IFixtureStore):
    """
    IFixtureStore over any IUnitOfWork implementation.

    Usage:
        store = UnitOfWorkFixtureStore(
            UnitOfWorkFactory.create_factory("sqlalchemy", db_url)
        )
        store.upsert_identity(identity)
    """

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]):
        """
        Args:
            uow_factory: Creates a new unit of work per call
        """
        self._uow_factory = uow_factory

    def upsert_identity(self, identity: TestIdentity) -> None:
        with translate_store_errors(f"upsert account {identity.email}"):
            try:
                self._apply_upsert(identity)
            except IntegrityError:
                # Lost an insert race on the unique email; re-apply as an update
                logger.debug(f"Upsert race on {identity.email}, re-applying")
                self._apply_upsert(identity)

    def _apply_upsert(self, identity: TestIdentity) -> None:
        with self._uow_factory() as uow:
            uow.accounts.upsert(identity.id, identity.email, identity.display_name)
            uow.commit()

    def identity_exists(self, identity_id: str) -> bool:
        with translate_store_errors(f"lookup account {identity_id}"):
            with self._uow_factory() as uow:
                return uow.accounts.get(identity_id) is not None

    def find_membership(
        self, identity_id: str, group_id: Optional[str] = None
    ) -> Optional[MembershipRecord]:
        with translate_store_errors(f"lookup membership of {identity_id}"):
            with self._uow_factory() as uow:
                return uow.memberships.find_by_account(identity_id, group_id)

    def get_identity_memberships(self, identity_id: str) -> List[MembershipRecord]:
        with translate_store_errors(f"load memberships of {identity_id}"):
            with self._uow_factory() as uow:
                return uow.accounts.list_memberships(identity_id)

    def create_group(
        self,
        store_name: str,
        owner_id: str,
        members: Sequence[GroupMember] = (),
    ) -> str:
        with translate_store_errors(f"create group {store_name}"):
            with self._uow_factory() as uow:
                if uow.accounts.get(owner_id) is None:
                    raise MissingRecordError("Account", owner_id)

                existing = uow.groups.find_by_name(store_name)
                if existing is not None:
                    group_id = existing.group_id
                else:
                    group_id = uow.groups.add(store_name)
                    logger.info(f"Created group record: {store_name}")

                uow.memberships.upsert(group_id, owner_id, MemberRole.ADMIN)
                for member in members:
                    if member.identity_id == owner_id:
                        continue
                    if uow.accounts.get(member.identity_id) is None:
                        raise MissingRecordError("Account", member.identity_id)
                    uow.memberships.upsert(group_id, member.identity_id, member.role)

                uow.commit()
                return group_id

    def get_group(self, group_id: str) -> Optional[GroupSnapshot]:
        with translate_store_errors(f"load group {group_id}"):
            with self._uow_factory() as uow:
                return uow.groups.get(group_id)
