"""Device domain schemas."""

import uuid
from datetime import datetime

from pydantic import Field

from neighborwatch.core.schemas import CamelModel, Latitude, Longitude, UTCDateTime
from neighborwatch.device.models import DeviceType


class DeviceCreate(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    type: DeviceType = DeviceType.GPS_TRACKER
    imei: str | None = Field(default=None, min_length=1, max_length=32)


class DeviceUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    qr_enabled: bool | None = None


class DeviceRead(CamelModel):
    id: uuid.UUID
    name: str
    type: DeviceType
    imei: str | None
    qr_code: str
    qr_enabled: bool
    created_at: UTCDateTime


class PositionCreate(CamelModel):
    latitude: Latitude
    longitude: Longitude
    altitude: float | None = None
    speed: float | None = Field(default=None, ge=0)
    heading: float | None = Field(default=None, ge=0, lt=360)
    accuracy: float | None = Field(default=None, ge=0)
    timestamp: datetime | None = None


class PositionRead(CamelModel):
    id: uuid.UUID
    latitude: float
    longitude: float
    altitude: float | None
    speed: float | None
    heading: float | None
    timestamp: UTCDateTime


class PhoneDeviceUpsert(CamelModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    is_active: bool


class PhoneDeviceRead(CamelModel):
    id: uuid.UUID
    name: str
    is_active: bool
    last_position_at: UTCDateTime | None
