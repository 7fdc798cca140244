"""Group membership repository implementation."""

from typing import List, Optional

from sqlalchemy.orm import Session

from tfp.domain.interfaces.repositories import IMembershipRepository
from tfp.domain.models import MemberRole, MembershipRecord
from ..models import GroupMembershipORM, GroupORM
from .base import BaseRepository


class MembershipRepository(BaseRepository[MembershipRecord, GroupMembershipORM], IMembershipRepository):
    """SQLAlchemy implementation of membership repository."""

    def __init__(self, session: Session):
        super().__init__(session, GroupMembershipORM)

    def _to_domain(self, orm: GroupMembershipORM) -> MembershipRecord:
        return MembershipRecord(
            group_id=orm.group_id,
            group_name=orm.group.name if orm.group else "",
            identity_id=orm.account_id,
            role=MemberRole(orm.role),
        )

    def find_by_account(
        self, account_id: str, group_id: Optional[str] = None
    ) -> Optional[MembershipRecord]:
        query = (
            self._session.query(GroupMembershipORM)
            .join(GroupORM, GroupMembershipORM.group_id == GroupORM.id)
            .filter(GroupMembershipORM.account_id == account_id)
        )
        if group_id is not None:
            query = query.filter(GroupMembershipORM.group_id == group_id)
        orm = query.order_by(GroupMembershipORM.id).first()
        return self._to_domain(orm) if orm else None

    def upsert(self, group_id: str, account_id: str, role: MemberRole) -> MembershipRecord:
        orm = (
            self._session.query(GroupMembershipORM)
            .filter_by(group_id=group_id, account_id=account_id)
            .first()
        )
        if orm is None:
            orm = GroupMembershipORM(group_id=group_id, account_id=account_id, role=role.value)
            self._session.add(orm)
        else:
            orm.role = role.value
        self._session.flush()
        return self._to_domain(orm)

    def list_by_group(self, group_id: str) -> List[MembershipRecord]:
        orms = (
            self._session.query(GroupMembershipORM)
            .filter_by(group_id=group_id)
            .order_by(GroupMembershipORM.id)
            .all()
        )
        return [self._to_domain(orm) for orm in orms]
