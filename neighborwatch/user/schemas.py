"""User domain schemas.

Request and response schemas for user operations.

Security notes:
- external_id (Firebase UID) and push_token are never part of a response
- UserPublicProfile is filtered through the user's own privacy flags
"""

import uuid

from pydantic import EmailStr, Field

from neighborwatch.core.schemas import CamelModel, Latitude, Longitude, UTCDateTime
from neighborwatch.event.schemas import EventRead


class DefaultArea(CamelModel):
    latitude: Latitude
    longitude: Longitude
    radius: float


class UserRead(CamelModel):
    """Response schema for the caller's own profile."""

    id: uuid.UUID
    email: EmailStr
    first_name: str
    last_name: str
    show_name: bool
    show_email: bool
    show_public_events: bool
    default_area: DefaultArea | None = None
    created_at: UTCDateTime
    updated_at: UTCDateTime


class UserPublicProfile(CamelModel):
    """What other users may see; hidden fields are null."""

    id: uuid.UUID
    name: str | None
    email: EmailStr | None
    public_events: list[EventRead] | None


class UserRegister(CamelModel):
    """Create the local profile for an already verified Firebase account."""

    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)


class UserUpdateMe(CamelModel):
    """Fields a user may change on their own profile.

    Intentionally excludes email, status and external_id.
    """

    first_name: str | None = Field(default=None, min_length=1, max_length=50)
    last_name: str | None = Field(default=None, min_length=1, max_length=50)
    show_name: bool | None = None
    show_email: bool | None = None
    show_public_events: bool | None = None
    push_token: str | None = Field(default=None, max_length=255)
