"""
Tests for UnitOfWorkFixtureStore.

Runs the same behaviour against the in-memory and the SQLite-backed
units of work.

Tests:
- Idempotent account upsert by email
- Atomic group creation with memberships
- Storage and consumer read paths
- Error translation
"""

from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError

from tfp.domain.errors import MissingRecordError, StoreError, TransientStoreError
from tfp.domain.models import GroupMember, MemberRole, TestIdentity
from tfp.infrastructure.database import InMemoryUnitOfWork, SQLAlchemyUnitOfWork
from tfp.infrastructure.store import UnitOfWorkFixtureStore
from tfp.infrastructure.store.fixture_store import translate_store_errors


def _identity(name: str) -> TestIdentity:
    return TestIdentity(
        key=name,
        id=f"{name}-suite-run1",
        email=f"{name}.suite.run1@tfp.test",
        display_name=name.title(),
    )


@pytest.fixture(params=["inmemory", "sqlalchemy"])
def any_store(request):
    if request.param == "inmemory":
        return request.getfixturevalue("store")
    return request.getfixturevalue("sqlite_store")


class TestIdentityUpsert:
    """Tests for upsert_identity."""

    def test_creates_account(self, any_store):
        any_store.upsert_identity(_identity("owner"))
        assert any_store.identity_exists("owner-suite-run1")

    def test_idempotent(self, any_store):
        any_store.upsert_identity(_identity("owner"))
        any_store.upsert_identity(_identity("owner"))
        assert any_store.identity_exists("owner-suite-run1")
        assert any_store.get_identity_memberships("owner-suite-run1") == []

    def test_missing_identity(self, any_store):
        assert not any_store.identity_exists("ghost")


class TestCreateGroup:
    """Tests for create_group."""

    def test_owner_becomes_admin(self, any_store):
        any_store.upsert_identity(_identity("owner"))
        group_id = any_store.create_group("Team-owner", "owner-suite-run1")

        record = any_store.find_membership("owner-suite-run1")
        assert record.group_id == group_id
        assert record.group_name == "Team-owner"
        assert record.role == MemberRole.ADMIN

    def test_members_with_roles(self, any_store):
        for name in ("owner", "member", "admin"):
            any_store.upsert_identity(_identity(name))
        group_id = any_store.create_group(
            "Team-owner",
            "owner-suite-run1",
            [
                GroupMember("member-suite-run1", MemberRole.MEMBER),
                GroupMember("admin-suite-run1", MemberRole.ADMIN),
            ],
        )

        snapshot = any_store.get_group(group_id)
        assert snapshot.name == "Team-owner"
        assert snapshot.roles() == {
            "owner-suite-run1": MemberRole.ADMIN,
            "member-suite-run1": MemberRole.MEMBER,
            "admin-suite-run1": MemberRole.ADMIN,
        }

    def test_find_or_create_by_name(self, any_store):
        any_store.upsert_identity(_identity("owner"))
        first = any_store.create_group("Team-owner", "owner-suite-run1")
        second = any_store.create_group("Team-owner", "owner-suite-run1")
        assert first == second
        assert len(any_store.get_group(first).members) == 1

    def test_owner_listed_as_member_stays_admin(self, any_store):
        any_store.upsert_identity(_identity("owner"))
        group_id = any_store.create_group(
            "Team-owner",
            "owner-suite-run1",
            [GroupMember("owner-suite-run1", MemberRole.MEMBER)],
        )
        assert any_store.get_group(group_id).role_of("owner-suite-run1") == MemberRole.ADMIN

    def test_missing_owner(self, any_store):
        with pytest.raises(MissingRecordError) as exc_info:
            any_store.create_group("Team-ghost", "ghost")
        assert exc_info.value.record_id == "ghost"

    def test_missing_member_rolls_back(self, any_store):
        any_store.upsert_identity(_identity("owner"))
        with pytest.raises(MissingRecordError):
            any_store.create_group(
                "Team-owner",
                "owner-suite-run1",
                [GroupMember("ghost", MemberRole.MEMBER)],
            )
        assert any_store.find_membership("owner-suite-run1") is None

    def test_membership_in_given_group(self, any_store):
        for name in ("owner", "peer"):
            any_store.upsert_identity(_identity(name))
        peer_group = any_store.create_group(
            "Team-peer",
            "peer-suite-run1",
            [GroupMember("owner-suite-run1", MemberRole.MEMBER)],
        )
        own_group = any_store.create_group("Team-owner", "owner-suite-run1")

        assert any_store.find_membership("owner-suite-run1").group_id == peer_group
        record = any_store.find_membership("owner-suite-run1", own_group)
        assert record.group_id == own_group
        assert record.role == MemberRole.ADMIN
        assert any_store.find_membership("peer-suite-run1", own_group) is None

    def test_consumer_path(self, any_store):
        any_store.upsert_identity(_identity("owner"))
        group_id = any_store.create_group("Team-owner", "owner-suite-run1")

        memberships = any_store.get_identity_memberships("owner-suite-run1")
        assert [(m.group_id, m.role) for m in memberships] == [(group_id, MemberRole.ADMIN)]

    def test_unknown_group(self, any_store):
        assert any_store.get_group("no-such-group") is None


class TestInMemoryAtomicity:
    """The in-memory unit of work publishes only on commit."""

    def test_uncommitted_changes_discarded(self, data, store):
        with InMemoryUnitOfWork(data) as uow:
            uow.accounts.upsert("a-1", "a@tfp.test", "A")
        assert not store.identity_exists("a-1")

    def test_commit_publishes(self, data, store):
        with InMemoryUnitOfWork(data) as uow:
            uow.accounts.upsert("a-1", "a@tfp.test", "A")
            uow.commit()
        assert store.identity_exists("a-1")
        assert data.counts()["accounts"] == 1


class TestSQLAlchemyUnitOfWork:
    """Tests for the SQLAlchemy unit of work."""

    def test_rollback_on_exception(self, sqlite_url, sqlite_store):
        with pytest.raises(RuntimeError):
            with SQLAlchemyUnitOfWork(sqlite_url) as uow:
                uow.accounts.upsert("a-1", "a@tfp.test", "A")
                raise RuntimeError("boom")
        assert not sqlite_store.identity_exists("a-1")

    def test_upsert_by_email_updates_name(self, sqlite_url):
        with SQLAlchemyUnitOfWork(sqlite_url) as uow:
            uow.accounts.upsert("a-1", "a@tfp.test", "A")
            uow.commit()
        with SQLAlchemyUnitOfWork(sqlite_url) as uow:
            uow.accounts.upsert("a-1", "a@tfp.test", "Renamed")
            uow.commit()
        with SQLAlchemyUnitOfWork(sqlite_url) as uow:
            assert uow.accounts.find_by_email("a@tfp.test").display_name == "Renamed"

    def test_list_by_group(self, sqlite_url, sqlite_store):
        sqlite_store.upsert_identity(_identity("owner"))
        sqlite_store.upsert_identity(_identity("member"))
        group_id = sqlite_store.create_group(
            "Team-owner",
            "owner-suite-run1",
            [GroupMember("member-suite-run1", MemberRole.MEMBER)],
        )
        with SQLAlchemyUnitOfWork(sqlite_url) as uow:
            records = uow.memberships.list_by_group(group_id)
        assert [(r.identity_id, r.role) for r in records] == [
            ("owner-suite-run1", MemberRole.ADMIN),
            ("member-suite-run1", MemberRole.MEMBER),
        ]
        assert all(r.group_name == "Team-owner" for r in records)


class TestErrorTranslation:
    """Tests for translate_store_errors."""

    def test_operational_error_is_transient(self):
        with pytest.raises(TransientStoreError) as exc_info:
            with translate_store_errors("op"):
                raise OperationalError("SELECT 1", {}, Exception("database is locked"))
        assert isinstance(exc_info.value.__cause__, OperationalError)

    def test_invalidated_connection_is_transient(self):
        with pytest.raises(TransientStoreError):
            with translate_store_errors("op"):
                raise DBAPIError("SELECT 1", {}, Exception("gone"), connection_invalidated=True)

    def test_other_errors_are_store_errors(self):
        with pytest.raises(StoreError) as exc_info:
            with translate_store_errors("op"):
                raise SQLAlchemyError("bad mapping")
        assert not isinstance(exc_info.value, TransientStoreError)

    def test_non_sqlalchemy_errors_pass_through(self):
        with pytest.raises(ValueError):
            with translate_store_errors("op"):
                raise ValueError("not a store problem")

    def test_store_translates_uow_failures(self):
        uow = MagicMock()
        uow.__enter__.return_value = uow
        uow.__exit__.return_value = False
        uow.accounts.get.side_effect = OperationalError("SELECT", {}, Exception("locked"))
        store = UnitOfWorkFixtureStore(lambda: uow)

        with pytest.raises(TransientStoreError):
            store.identity_exists("a-1")


class TestInMemoryDataStore:
    """Tests for the shared in-memory data."""

    def test_reset(self, data, store):
        store.upsert_identity(_identity("owner"))
        store.create_group("Team-owner", "owner-suite-run1")
        assert data.counts() == {"accounts": 1, "groups": 1, "memberships": 1}
        data.reset()
        assert data.counts() == {"accounts": 0, "groups": 0, "memberships": 0}
