"""Group repository implementation."""

import uuid
from typing import Optional

from sqlalchemy.orm import Session, selectinload

from tfp.domain.interfaces.repositories import IGroupRepository
from tfp.domain.models import GroupSnapshot, MemberRole, MembershipRecord
from ..models import GroupORM
from .base import BaseRepository


class GroupRepository(BaseRepository[GroupSnapshot, GroupORM], IGroupRepository):
    """SQLAlchemy implementation of group repository."""

    def __init__(self, session: Session):
        super().__init__(session, GroupORM)

    def _to_domain(self, orm: GroupORM) -> GroupSnapshot:
        return GroupSnapshot(
            group_id=orm.id,
            name=orm.name,
            members=[
                MembershipRecord(
                    group_id=orm.id,
                    group_name=orm.name,
                    identity_id=m.account_id,
                    role=MemberRole(m.role),
                )
                for m in orm.memberships
            ],
        )

    def _get_orm(self, id: str) -> Optional[GroupORM]:
        return (
            self._session.query(GroupORM)
            .options(selectinload(GroupORM.memberships))
            .filter_by(id=id)
            .first()
        )

    def find_by_name(self, name: str) -> Optional[GroupSnapshot]:
        orm = (
            self._session.query(GroupORM)
            .options(selectinload(GroupORM.memberships))
            .filter_by(name=name)
            .order_by(GroupORM.created_at)
            .first()
        )
        return self._to_domain(orm) if orm else None

    def add(self, name: str) -> str:
        orm = GroupORM(id=str(uuid.uuid4()), name=name)
        self._session.add(orm)
        self._session.flush()
        return orm.id
