"""Base repository: point lookup by primary key plus ORM -> record mapping."""

from typing import Generic, Optional, Type, TypeVar

from sqlalchemy.orm import Session

T = TypeVar('T')
ORM = TypeVar('ORM')


class BaseRepository(Generic[T, ORM]):
    """
    Shared plumbing for the fixture repositories.

    Subclasses implement _to_domain(orm) and may override _get_orm() to
    eager-load relationships.
    """

    def __init__(self, session: Session, orm_class: Type[ORM]):
        self._session = session
        self._orm_class = orm_class

    def _to_domain(self, orm: ORM) -> T:
        raise NotImplementedError

    def _get_orm(self, id: str) -> Optional[ORM]:
        return self._session.get(self._orm_class, id)

    def get(self, id: str) -> Optional[T]:
        orm = self._get_orm(id)
        return self._to_domain(orm) if orm else None
