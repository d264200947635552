"""Event domain schemas."""

import uuid
from typing import Literal

from pydantic import Field

from neighborwatch.core.schemas import (
    CamelModel,
    Latitude,
    Longitude,
    NonEmptyText,
    UTCDateTime,
)
from neighborwatch.event.models import EventStatus, EventType

SortBy = Literal["createdAt", "type"]
SortOrder = Literal["asc", "desc"]


class EventCreate(CamelModel):
    type: EventType
    description: NonEmptyText
    latitude: Latitude
    longitude: Longitude
    device_id: uuid.UUID | None = None
    phone_device_id: uuid.UUID | None = None
    group_id: uuid.UUID | None = None
    is_public: bool = True
    is_urgent: bool = False
    real_time_tracking: bool = False


class EventUpdate(CamelModel):
    """Only the status and the tracking flag of an event can change."""

    status: EventStatus | None = None
    real_time_tracking: bool | None = None


class EventRead(CamelModel):
    id: uuid.UUID
    author_id: uuid.UUID
    type: EventType
    status: EventStatus
    description: str
    latitude: float
    longitude: float
    is_public: bool
    is_urgent: bool
    real_time_tracking: bool
    group_id: uuid.UUID | None
    device_id: uuid.UUID | None
    phone_device_id: uuid.UUID | None
    closed_at: UTCDateTime | None
    created_at: UTCDateTime
    updated_at: UTCDateTime


class TrackPoint(CamelModel):
    latitude: float
    longitude: float
    timestamp: UTCDateTime
    speed: float | None = Field(default=None)
