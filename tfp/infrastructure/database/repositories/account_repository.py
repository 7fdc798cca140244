"""Account repository implementation."""

from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from tfp.domain.interfaces.repositories import IAccountRepository
from tfp.domain.models import AccountRecord, MemberRole, MembershipRecord
from ..models import AccountORM, GroupMembershipORM
from .base import BaseRepository


class AccountRepository(BaseRepository[AccountRecord, AccountORM], IAccountRepository):
    """SQLAlchemy implementation of account repository."""

    def __init__(self, session: Session):
        super().__init__(session, AccountORM)

    def _to_domain(self, orm: AccountORM) -> AccountRecord:
        return AccountRecord(id=orm.id, email=orm.email, display_name=orm.name)

    def find_by_email(self, email: str) -> Optional[AccountRecord]:
        orm = self._session.query(AccountORM).filter_by(email=email).first()
        return self._to_domain(orm) if orm else None

    def upsert(self, id: str, email: str, display_name: str) -> AccountRecord:
        orm = self._session.query(AccountORM).filter_by(email=email).first()
        if orm is None:
            orm = AccountORM(id=id, email=email, name=display_name)
            self._session.add(orm)
        else:
            orm.name = display_name
        self._session.flush()
        return self._to_domain(orm)

    def list_memberships(self, account_id: str) -> List[MembershipRecord]:
        # Relationship load, the way consumers read an account
        orm = (
            self._session.query(AccountORM)
            .options(
                selectinload(AccountORM.memberships).selectinload(GroupMembershipORM.group)
            )
            .filter_by(id=account_id)
            .first()
        )
        if orm is None:
            return []
        return [
            MembershipRecord(
                group_id=m.group_id,
                group_name=m.group.name,
                identity_id=m.account_id,
                role=MemberRole(m.role),
            )
            for m in orm.memberships
        ]
