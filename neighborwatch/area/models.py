"""Area-of-interest domain models.

An area of interest is a named circle on the map. Membership in an area
surfaces every event inside its circle, public or not, and subscribes the
member to new-event notifications.
"""

import uuid
from enum import Enum

from sqlalchemy import Index, UniqueConstraint, text
from sqlmodel import Field, SQLModel

from neighborwatch.core.mixins import TimestampMixin


class AreaVisibility(str, Enum):
    """Who may find and join an area.

    - PUBLIC: listed in search, anyone joins directly
    - PRIVATE_SHAREABLE: listed in search, joining needs an admin's approval
    - PRIVATE: hidden, members are invited by an admin
    """

    PUBLIC = "PUBLIC"
    PRIVATE_SHAREABLE = "PRIVATE_SHAREABLE"
    PRIVATE = "PRIVATE"


class MemberRole(str, Enum):
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


class InvitationStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class InvitationType(str, Enum):
    """INVITATION is sent by an admin; JOIN_REQUEST is sent to the admins."""

    INVITATION = "INVITATION"
    JOIN_REQUEST = "JOIN_REQUEST"


class AreaOfInterest(TimestampMixin, SQLModel, table=True):
    __tablename__: str = "areas_of_interest"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(max_length=100, index=True)
    description: str | None = Field(default=None, max_length=500)
    latitude: float
    longitude: float
    radius: float
    visibility: AreaVisibility = Field(default=AreaVisibility.PUBLIC, index=True)
    creator_id: uuid.UUID = Field(foreign_key="users.id", index=True)


class AreaMembership(TimestampMixin, SQLModel, table=True):
    __tablename__: str = "area_memberships"
    __table_args__ = (UniqueConstraint("area_id", "user_id"),)

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    area_id: uuid.UUID = Field(
        foreign_key="areas_of_interest.id", index=True, ondelete="CASCADE"
    )
    user_id: uuid.UUID = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    role: MemberRole = Field(default=MemberRole.MEMBER)
    notifications_enabled: bool = Field(default=True)
    new_events_count: int = Field(default=0)


class AreaInvitation(TimestampMixin, SQLModel, table=True):
    """Invitation or join request.

    Join requests have no receiver: any admin of the area may answer them.
    Invitations are addressed to a user, or to an email address that has no
    account yet.
    """

    __tablename__: str = "area_invitations"
    __table_args__ = (
        Index(
            "uq_area_invitations_pending_join_request",
            "area_id",
            "sender_id",
            unique=True,
            sqlite_where=text("status = 'PENDING' AND type = 'JOIN_REQUEST'"),
            postgresql_where=text("status = 'PENDING' AND type = 'JOIN_REQUEST'"),
        ),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    area_id: uuid.UUID = Field(
        foreign_key="areas_of_interest.id", index=True, ondelete="CASCADE"
    )
    sender_id: uuid.UUID = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    receiver_id: uuid.UUID | None = Field(
        default=None, foreign_key="users.id", index=True, ondelete="CASCADE"
    )
    email: str | None = Field(default=None, max_length=255, index=True)
    type: InvitationType = Field(default=InvitationType.INVITATION)
    status: InvitationStatus = Field(default=InvitationStatus.PENDING, index=True)
