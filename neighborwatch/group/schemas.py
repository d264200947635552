"""Group domain schemas."""

import uuid

from pydantic import Field

from neighborwatch.area.models import MemberRole
from neighborwatch.core.schemas import CamelModel, UTCDateTime


class GroupCreate(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)


class GroupUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)


class GroupRead(CamelModel):
    id: uuid.UUID
    name: str
    description: str | None
    creator_id: uuid.UUID
    created_at: UTCDateTime


class GroupSummary(GroupRead):
    role: MemberRole
    location_sharing_enabled: bool
    member_count: int


class GroupMemberAdd(CamelModel):
    user_id: uuid.UUID
    role: MemberRole = MemberRole.MEMBER


class GroupMemberRead(CamelModel):
    user_id: uuid.UUID
    name: str
    role: MemberRole
    location_sharing_enabled: bool


class GroupMembershipRead(CamelModel):
    id: uuid.UUID
    group_id: uuid.UUID
    user_id: uuid.UUID
    role: MemberRole
    location_sharing_enabled: bool


class GroupRoleUpdate(CamelModel):
    role: MemberRole


class LocationSharingUpdate(CamelModel):
    enabled: bool


class MemberPositionRead(CamelModel):
    user_id: uuid.UUID
    user_name: str
    source: str
    device_id: uuid.UUID
    device_name: str
    latitude: float
    longitude: float
    timestamp: UTCDateTime
