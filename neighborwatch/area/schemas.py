"""Area domain schemas.

Radius bounds are checked by the service layer so that out-of-range values
produce the area-specific ``invalid_radius`` error instead of a generic 422.
"""

import uuid

from pydantic import EmailStr, Field, model_validator

from neighborwatch.area.models import (
    AreaVisibility,
    InvitationStatus,
    InvitationType,
    MemberRole,
)
from neighborwatch.core.schemas import CamelModel, Latitude, Longitude, UTCDateTime


class AreaCreate(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    latitude: Latitude
    longitude: Longitude
    radius: float
    visibility: AreaVisibility = AreaVisibility.PUBLIC


class AreaUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    latitude: Latitude | None = None
    longitude: Longitude | None = None
    radius: float | None = None
    visibility: AreaVisibility | None = None


class AreaRead(CamelModel):
    id: uuid.UUID
    name: str
    description: str | None
    latitude: float
    longitude: float
    radius: float
    visibility: AreaVisibility
    creator_id: uuid.UUID
    created_at: UTCDateTime
    updated_at: UTCDateTime


class AreaSummary(AreaRead):
    """An area as seen by one of its members."""

    role: MemberRole
    notifications_enabled: bool
    new_events_count: int
    member_count: int
    pending_requests_count: int = 0


class MembershipRead(CamelModel):
    id: uuid.UUID
    area_id: uuid.UUID
    user_id: uuid.UUID
    role: MemberRole
    notifications_enabled: bool
    new_events_count: int
    created_at: UTCDateTime


class NotificationsUpdate(CamelModel):
    enabled: bool


class RoleUpdate(CamelModel):
    role: MemberRole


class InvitationCreate(CamelModel):
    """Invite an existing user by id, or anyone by email."""

    user_id: uuid.UUID | None = None
    email: EmailStr | None = None

    @model_validator(mode="after")
    def check_exactly_one_target(self) -> "InvitationCreate":
        if (self.user_id is None) == (self.email is None):
            raise ValueError("Provide exactly one of userId or email")
        return self


class InvitationRead(CamelModel):
    id: uuid.UUID
    area_id: uuid.UUID
    sender_id: uuid.UUID
    receiver_id: uuid.UUID | None
    email: str | None
    type: InvitationType
    status: InvitationStatus
    created_at: UTCDateTime
    updated_at: UTCDateTime


class InvitationWithArea(InvitationRead):
    area_name: str
    sender_name: str
