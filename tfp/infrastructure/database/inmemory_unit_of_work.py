"""
In-Memory Unit of Work Implementation.

For unit tests and fast iteration - no database I/O.
Provides the same interface as SQLAlchemyUnitOfWork but stores data in memory.

Unlike a per-instance dict, the data lives in an InMemoryDataStore that
several units of work (and several threads) share, so that concurrency
tests see one store:
- A transaction holds the store lock from __enter__ to __exit__
- Repositories work on a private copy of the tables
- commit() swaps the copy in atomically; anything else discards it
"""

import threading
import uuid
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from tfp.domain.interfaces.unit_of_work import IUnitOfWork
from tfp.domain.interfaces.repositories import (
    IAccountRepository,
    IGroupRepository,
    IMembershipRepository,
)
from tfp.domain.models import (
    AccountRecord,
    GroupSnapshot,
    MemberRole,
    MembershipRecord,
)


# ═══════════════════════════════════════════════════════════════════════════════
# Shared Data
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass
class _Tables:
    accounts: Dict[str, AccountRecord] = field(default_factory=dict)
    account_ids_by_email: Dict[str, str] = field(default_factory=dict)
    groups: Dict[str, str] = field(default_factory=dict)  # id -> name
    memberships: Dict[int, Dict[str, str]] = field(default_factory=dict)
    # account id -> membership ids; only the account relation read uses it
    account_memberships: Dict[str, List[int]] = field(default_factory=dict)
    next_membership_id: int = 1


class InMemoryDataStore:
    """Committed state shared by every InMemoryUnitOfWork bound to it."""

    def __init__(self):
        self._lock = threading.RLock()
        self._tables = _Tables()

    @property
    def lock(self) -> threading.RLock:
        return self._lock

    def snapshot(self) -> _Tables:
        return deepcopy(self._tables)

    def replace(self, tables: _Tables) -> None:
        self._tables = tables

    def counts(self) -> Dict[str, int]:
        """Row counts per table (for assertions)."""
        with self._lock:
            return {
                "accounts": len(self._tables.accounts),
                "groups": len(self._tables.groups),
                "memberships": len(self._tables.memberships),
            }

    def reset(self) -> None:
        with self._lock:
            self._tables = _Tables()


# ═══════════════════════════════════════════════════════════════════════════════
# In-Memory Repository Implementations
# ═══════════════════════════════════════════════════════════════════════════════


def _membership_record(tables: _Tables, row: Dict[str, str]) -> MembershipRecord:
    return MembershipRecord(
        group_id=row["group_id"],
        group_name=tables.groups.get(row["group_id"], ""),
        identity_id=row["account_id"],
        role=MemberRole(row["role"]),
    )


class InMemoryAccountRepository(IAccountRepository):
    """In-memory account repository."""

    def __init__(self, tables: _Tables):
        self._tables = tables

    def get(self, id: str) -> Optional[AccountRecord]:
        return self._tables.accounts.get(id)

    def find_by_email(self, email: str) -> Optional[AccountRecord]:
        account_id = self._tables.account_ids_by_email.get(email)
        return self._tables.accounts.get(account_id) if account_id else None

    def upsert(self, id: str, email: str, display_name: str) -> AccountRecord:
        existing_id = self._tables.account_ids_by_email.get(email)
        account_id = existing_id or id
        if existing_id is None and id in self._tables.accounts:
            raise ValueError(f"Account id '{id}' already exists with another email")
        record = AccountRecord(id=account_id, email=email, display_name=display_name)
        self._tables.accounts[account_id] = record
        self._tables.account_ids_by_email[email] = account_id
        return record

    def list_memberships(self, account_id: str) -> List[MembershipRecord]:
        if account_id not in self._tables.accounts:
            return []
        ids = self._tables.account_memberships.get(account_id, [])
        return [
            _membership_record(self._tables, self._tables.memberships[mid])
            for mid in ids
        ]


class InMemoryGroupRepository(IGroupRepository):
    """In-memory group repository."""

    def __init__(self, tables: _Tables):
        self._tables = tables

    def _snapshot(self, group_id: str) -> GroupSnapshot:
        members = [
            _membership_record(self._tables, row)
            for _, row in sorted(self._tables.memberships.items())
            if row["group_id"] == group_id
        ]
        return GroupSnapshot(group_id=group_id, name=self._tables.groups[group_id], members=members)

    def get(self, id: str) -> Optional[GroupSnapshot]:
        if id not in self._tables.groups:
            return None
        return self._snapshot(id)

    def find_by_name(self, name: str) -> Optional[GroupSnapshot]:
        for group_id, group_name in self._tables.groups.items():
            if group_name == name:
                return self._snapshot(group_id)
        return None

    def add(self, name: str) -> str:
        group_id = str(uuid.uuid4())
        self._tables.groups[group_id] = name
        return group_id


class InMemoryMembershipRepository(IMembershipRepository):
    """In-memory membership repository."""

    def __init__(self, tables: _Tables):
        self._tables = tables

    def find_by_account(
        self, account_id: str, group_id: Optional[str] = None
    ) -> Optional[MembershipRecord]:
        for _, row in sorted(self._tables.memberships.items()):
            if row["account_id"] != account_id:
                continue
            if group_id is None or row["group_id"] == group_id:
                return _membership_record(self._tables, row)
        return None

    def upsert(self, group_id: str, account_id: str, role: MemberRole) -> MembershipRecord:
        if group_id not in self._tables.groups:
            raise ValueError(f"Group {group_id} not found")
        if account_id not in self._tables.accounts:
            raise ValueError(f"Account {account_id} not found")

        for row in self._tables.memberships.values():
            if row["group_id"] == group_id and row["account_id"] == account_id:
                row["role"] = role.value
                return _membership_record(self._tables, row)

        membership_id = self._tables.next_membership_id
        self._tables.next_membership_id += 1
        row = {"group_id": group_id, "account_id": account_id, "role": role.value}
        self._tables.memberships[membership_id] = row
        self._tables.account_memberships.setdefault(account_id, []).append(membership_id)
        return _membership_record(self._tables, row)

    def list_by_group(self, group_id: str) -> List[MembershipRecord]:
        return [
            _membership_record(self._tables, row)
            for _, row in sorted(self._tables.memberships.items())
            if row["group_id"] == group_id
        ]


# ═══════════════════════════════════════════════════════════════════════════════
# Unit of Work
# ═══════════════════════════════════════════════════════════════════════════════


class InMemoryUnitOfWork(IUnitOfWork):
    """
    In-memory Unit of Work for testing.

    Usage:
        data = InMemoryDataStore()
        with InMemoryUnitOfWork(data) as uow:
            uow.accounts.upsert("a-1", "a@x.test", "A")
            uow.commit()

    Pass the same InMemoryDataStore to every unit of work that should see
    the same data; omit it for a private store.
    """

    def __init__(self, data: Optional[InMemoryDataStore] = None):
        self._data = data or InMemoryDataStore()
        self._tables: Optional[_Tables] = None
        self._in_transaction = False

    @property
    def data(self) -> InMemoryDataStore:
        return self._data

    def __enter__(self) -> "InMemoryUnitOfWork":
        self._data.lock.acquire()
        self._in_transaction = True
        self._begin()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        # Uncommitted working copy is simply dropped
        self._tables = None
        self._in_transaction = False
        self._data.lock.release()

    def _begin(self) -> None:
        self._tables = self._data.snapshot()
        self.accounts = InMemoryAccountRepository(self._tables)
        self.groups = InMemoryGroupRepository(self._tables)
        self.memberships = InMemoryMembershipRepository(self._tables)

    def commit(self):
        """Atomically publish the working copy."""
        if not self._in_transaction or self._tables is None:
            return
        self._data.replace(self._tables)
        self._begin()

    def rollback(self):
        """Discard uncommitted changes."""
        if not self._in_transaction:
            return
        self._begin()
