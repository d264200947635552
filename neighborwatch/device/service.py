"""Device registration and position ingest."""

import logging
import uuid
from datetime import UTC, datetime

from sqlalchemy import delete, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, select

from neighborwatch.chat.models import FoundObjectChat, FoundObjectMessage
from neighborwatch.core.mixins import utc_now
from neighborwatch.device.exceptions import (
    DeviceExistsError,
    DeviceNotFoundError,
    DeviceOwnershipError,
    PhoneDeviceNotFoundError,
)
from neighborwatch.device.models import (
    Device,
    PhoneDevice,
    PhonePosition,
    Position,
    new_qr_code,
)
from neighborwatch.device.schemas import (
    DeviceCreate,
    DeviceUpdate,
    PhoneDeviceUpsert,
    PositionCreate,
)
from neighborwatch.event.models import Event
from neighborwatch.user.models import User

logger = logging.getLogger(__name__)


def _fix_time(data: PositionCreate) -> datetime:
    if data.timestamp is None:
        return utc_now()
    if data.timestamp.tzinfo is None:
        return data.timestamp.replace(microsecond=0)
    return data.timestamp.astimezone(UTC).replace(microsecond=0)


def register_device(session: Session, user: User, data: DeviceCreate) -> Device:
    """Register a device; each one gets its own QR code."""
    device = Device(user_id=user.id, name=data.name, type=data.type, imei=data.imei)
    session.add(device)
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise DeviceExistsError() from e
    session.refresh(device)
    logger.info("Device registered", extra={"user_id": str(user.id)})
    return device


def list_my_devices(session: Session, user: User) -> list[Device]:
    return list(
        session.exec(
            select(Device)
            .where(Device.user_id == user.id)
            .order_by(col(Device.created_at), col(Device.id))
        ).all()
    )


def get_own_device(session: Session, user: User, device_id: uuid.UUID) -> Device:
    device = session.get(Device, device_id)
    if not device:
        raise DeviceNotFoundError()
    if device.user_id != user.id:
        raise DeviceOwnershipError()
    return device


def update_device(
    session: Session, user: User, device_id: uuid.UUID, data: DeviceUpdate
) -> Device:
    device = get_own_device(session, user, device_id)
    for key, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(device, key, value)
    session.add(device)
    session.commit()
    session.refresh(device)
    return device


def regenerate_qr(session: Session, user: User, device_id: uuid.UUID) -> Device:
    """Issue a new QR code. The old sticker stops resolving immediately."""
    device = get_own_device(session, user, device_id)
    device.qr_code = new_qr_code()
    session.add(device)
    session.commit()
    session.refresh(device)
    logger.info("Device QR code regenerated", extra={"user_id": str(user.id)})
    return device


def delete_device(session: Session, user: User, device_id: uuid.UUID) -> None:
    """Delete a device with its positions and chats; its events survive."""
    device = get_own_device(session, user, device_id)

    session.exec(
        update(Event).where(col(Event.device_id) == device_id).values(device_id=None)
    )
    chat_ids = select(FoundObjectChat.id).where(FoundObjectChat.device_id == device_id)
    session.exec(
        delete(FoundObjectMessage).where(col(FoundObjectMessage.chat_id).in_(chat_ids))
    )
    session.exec(delete(FoundObjectChat).where(col(FoundObjectChat.device_id) == device_id))
    session.exec(delete(Position).where(col(Position.device_id) == device_id))
    session.delete(device)
    session.commit()
    logger.info("Device deleted", extra={"user_id": str(user.id)})


def add_position(
    session: Session, user: User, device_id: uuid.UUID, data: PositionCreate
) -> Position:
    """Store a fix for a device the caller owns."""
    get_own_device(session, user, device_id)
    position = Position(
        device_id=device_id,
        latitude=data.latitude,
        longitude=data.longitude,
        altitude=data.altitude,
        speed=data.speed,
        heading=data.heading,
        timestamp=_fix_time(data),
    )
    session.add(position)
    session.commit()
    session.refresh(position)
    return position


def list_positions(
    session: Session, user: User, device_id: uuid.UUID, limit: int = 100
) -> list[Position]:
    """Most recent fixes of an owned device, newest first."""
    get_own_device(session, user, device_id)
    return list(
        session.exec(
            select(Position)
            .where(Position.device_id == device_id)
            .order_by(col(Position.timestamp).desc(), col(Position.id))
            .limit(limit)
        ).all()
    )


def find_phone_device(session: Session, user: User) -> PhoneDevice | None:
    return session.exec(select(PhoneDevice).where(PhoneDevice.user_id == user.id)).first()


def upsert_phone_device(session: Session, user: User, data: PhoneDeviceUpsert) -> PhoneDevice:
    """Create or update the caller's phone device."""
    phone = find_phone_device(session, user)
    if phone is None:
        phone = PhoneDevice(user_id=user.id)
    if data.name is not None:
        phone.name = data.name
    phone.is_active = data.is_active
    session.add(phone)
    session.commit()
    session.refresh(phone)
    return phone


def add_phone_position(session: Session, user: User, data: PositionCreate) -> PhonePosition:
    phone = find_phone_device(session, user)
    if phone is None:
        raise PhoneDeviceNotFoundError()

    position = PhonePosition(
        phone_device_id=phone.id,
        latitude=data.latitude,
        longitude=data.longitude,
        altitude=data.altitude,
        speed=data.speed,
        heading=data.heading,
        accuracy=data.accuracy,
        timestamp=_fix_time(data),
    )
    phone.last_position_at = position.timestamp
    session.add(position)
    session.add(phone)
    session.commit()
    session.refresh(position)
    return position
