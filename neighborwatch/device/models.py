"""Device domain models.

A Device is something a user owns and can lose: a GPS tracker that reports
positions, or a tagged object that only carries a QR sticker. Every device
has its own QR code. A PhoneDevice is the user's own phone when it reports
its location.
"""

import uuid
from datetime import datetime
from enum import Enum

from sqlmodel import Field, SQLModel

from neighborwatch.core.mixins import CreatedAtMixin, TimestampMixin, utc_now


class DeviceType(str, Enum):
    GPS_TRACKER = "GPS_TRACKER"
    TAGGED_OBJECT = "TAGGED_OBJECT"


def new_qr_code() -> str:
    return uuid.uuid4().hex


class Device(TimestampMixin, SQLModel, table=True):
    __tablename__: str = "devices"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID | None = Field(
        default=None, foreign_key="users.id", index=True, ondelete="SET NULL"
    )
    name: str = Field(max_length=100)
    type: DeviceType = Field(default=DeviceType.GPS_TRACKER, index=True)
    imei: str | None = Field(default=None, unique=True, max_length=32)
    qr_code: str = Field(default_factory=new_qr_code, unique=True, index=True)
    qr_enabled: bool = Field(default=True)


class Position(CreatedAtMixin, SQLModel, table=True):
    """A fix reported by a GPS tracker."""

    __tablename__: str = "positions"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    device_id: uuid.UUID = Field(foreign_key="devices.id", index=True, ondelete="CASCADE")
    latitude: float
    longitude: float
    altitude: float | None = None
    speed: float | None = None
    heading: float | None = None
    timestamp: datetime = Field(default_factory=utc_now)


class PhoneDevice(TimestampMixin, SQLModel, table=True):
    __tablename__: str = "phone_devices"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(
        foreign_key="users.id", unique=True, index=True, ondelete="CASCADE"
    )
    name: str = Field(default="My phone", max_length=100)
    is_active: bool = Field(default=False)
    last_position_at: datetime | None = None


class PhonePosition(CreatedAtMixin, SQLModel, table=True):
    """A fix reported by the app running on the user's phone."""

    __tablename__: str = "phone_positions"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    phone_device_id: uuid.UUID = Field(
        foreign_key="phone_devices.id", index=True, ondelete="CASCADE"
    )
    latitude: float
    longitude: float
    altitude: float | None = None
    speed: float | None = None
    heading: float | None = None
    accuracy: float | None = None
    timestamp: datetime = Field(default_factory=utc_now)
