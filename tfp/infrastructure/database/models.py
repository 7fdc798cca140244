"""
SQLAlchemy ORM Models for provisioned fixtures.

Tables:
- tfp_accounts: one row per test identity, unique by email
- tfp_groups: organizational groups, found or created by name
- tfp_group_memberships: role of an account inside a group,
  unique per (group, account)

No constraint covers "one group per owner"; the engine holds that
invariant with a locked check-then-act.
"""

from datetime import datetime

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class AccountORM(Base):
    """ORM model for tfp_accounts table."""

    __tablename__ = 'tfp_accounts'

    id = Column(String(128), primary_key=True)
    email = Column(String(255), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, onupdate=datetime.utcnow)

    # Relationships
    memberships = relationship('GroupMembershipORM', back_populates='account')


class GroupORM(Base):
    """ORM model for tfp_groups table."""

    __tablename__ = 'tfp_groups'

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    memberships = relationship('GroupMembershipORM', back_populates='group')

    __table_args__ = (
        Index('idx_tfp_groups_name', 'name'),
    )


class GroupMembershipORM(Base):
    """ORM model for tfp_group_memberships table."""

    __tablename__ = 'tfp_group_memberships'

    id = Column(Integer, primary_key=True, autoincrement=True)
    group_id = Column(String(64), ForeignKey('tfp_groups.id'), nullable=False)
    account_id = Column(String(128), ForeignKey('tfp_accounts.id'), nullable=False)
    role = Column(String(10), nullable=False, default='MEMBER')
    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    group = relationship('GroupORM', back_populates='memberships')
    account = relationship('AccountORM', back_populates='memberships')

    __table_args__ = (
        UniqueConstraint('group_id', 'account_id', name='uq_tfp_membership_group_account'),
        Index('idx_tfp_memberships_account', 'account_id'),
    )
