"""Group domain models.

A group is a closed circle of people (a family, a team) that shares events
and, optionally, live positions.
"""

import uuid

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from neighborwatch.area.models import MemberRole
from neighborwatch.core.mixins import TimestampMixin


class Group(TimestampMixin, SQLModel, table=True):
    __tablename__: str = "groups"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(max_length=100)
    description: str | None = Field(default=None, max_length=500)
    creator_id: uuid.UUID = Field(foreign_key="users.id", index=True)


class GroupMembership(TimestampMixin, SQLModel, table=True):
    __tablename__: str = "group_memberships"
    __table_args__ = (UniqueConstraint("group_id", "user_id"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    group_id: uuid.UUID = Field(foreign_key="groups.id", index=True, ondelete="CASCADE")
    user_id: uuid.UUID = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    role: MemberRole = Field(default=MemberRole.MEMBER)
    location_sharing_enabled: bool = Field(default=False)
