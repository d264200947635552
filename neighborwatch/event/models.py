"""Event domain models."""

import uuid
from datetime import datetime
from enum import Enum

from sqlmodel import Field, SQLModel

from neighborwatch.core.mixins import TimestampMixin


class EventType(str, Enum):
    THEFT = "THEFT"
    LOST = "LOST"
    ACCIDENT = "ACCIDENT"
    FIRE = "FIRE"
    GENERAL = "GENERAL"


class EventStatus(str, Enum):
    IN_PROGRESS = "IN_PROGRESS"
    CLOSED = "CLOSED"


class Event(TimestampMixin, SQLModel, table=True):
    """Something that happened at a place.

    Visibility is decided by ``is_public``, by the areas of interest whose
    circle contains the event, and by ``group_id``.
    """

    __tablename__: str = "events"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    author_id: uuid.UUID = Field(foreign_key="users.id", index=True)
    type: EventType = Field(index=True)
    status: EventStatus = Field(default=EventStatus.IN_PROGRESS, index=True)
    description: str = Field(max_length=2000)
    latitude: float = Field(index=True)
    longitude: float = Field(index=True)
    is_public: bool = Field(default=True, index=True)
    is_urgent: bool = Field(default=False)
    real_time_tracking: bool = Field(default=False)
    group_id: uuid.UUID | None = Field(
        default=None, foreign_key="groups.id", index=True, ondelete="SET NULL"
    )
    device_id: uuid.UUID | None = Field(
        default=None, foreign_key="devices.id", index=True, ondelete="SET NULL"
    )
    phone_device_id: uuid.UUID | None = Field(
        default=None, foreign_key="phone_devices.id", ondelete="SET NULL"
    )
    closed_at: datetime | None = None
