"""Device domain routers: owned devices and the caller's phone."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from neighborwatch.auth.dependencies import CurrentUserDep, require_auth
from neighborwatch.core.constants import CommonResponses, Routes
from neighborwatch.core.deps import SessionDep
from neighborwatch.device import service
from neighborwatch.device.schemas import (
    DeviceCreate,
    DeviceRead,
    DeviceUpdate,
    PhoneDeviceRead,
    PhoneDeviceUpsert,
    PositionCreate,
    PositionRead,
)

router = APIRouter(
    prefix=Routes.DEVICE.prefix,
    tags=[Routes.DEVICE.tag],
    dependencies=[Depends(require_auth)],
    responses={
        **CommonResponses.UNAUTHORIZED,
        **CommonResponses.FORBIDDEN,
    },
)

phone_router = APIRouter(
    prefix=Routes.PHONE_DEVICE.prefix,
    tags=[Routes.PHONE_DEVICE.tag],
    dependencies=[Depends(require_auth)],
    responses={**CommonResponses.UNAUTHORIZED},
)


@router.post(
    "",
    response_model=DeviceRead,
    status_code=status.HTTP_201_CREATED,
    responses={**CommonResponses.CONFLICT},
)
async def register_device(body: DeviceCreate, user: CurrentUserDep, session: SessionDep):
    """Register a tracker or a tagged object; a QR code is issued for it."""
    return service.register_device(session, user, body)


@router.get("", response_model=list[DeviceRead])
async def list_my_devices(user: CurrentUserDep, session: SessionDep):
    return service.list_my_devices(session, user)


@router.patch(
    "/{device_id}",
    response_model=DeviceRead,
    responses={**CommonResponses.NOT_FOUND},
)
async def update_device(
    device_id: uuid.UUID, body: DeviceUpdate, user: CurrentUserDep, session: SessionDep
):
    """Rename a device or switch its QR contact page on or off."""
    return service.update_device(session, user, device_id, body)


@router.delete(
    "/{device_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**CommonResponses.NOT_FOUND},
)
async def delete_device(device_id: uuid.UUID, user: CurrentUserDep, session: SessionDep):
    service.delete_device(session, user, device_id)


@router.post(
    "/{device_id}/qr/regenerate",
    response_model=DeviceRead,
    responses={**CommonResponses.NOT_FOUND},
)
async def regenerate_qr(device_id: uuid.UUID, user: CurrentUserDep, session: SessionDep):
    """Replace a lost or leaked QR sticker; the old code stops working."""
    return service.regenerate_qr(session, user, device_id)


@router.post(
    "/{device_id}/positions",
    response_model=PositionRead,
    status_code=status.HTTP_201_CREATED,
    responses={**CommonResponses.NOT_FOUND},
)
async def add_position(
    device_id: uuid.UUID, body: PositionCreate, user: CurrentUserDep, session: SessionDep
):
    return service.add_position(session, user, device_id, body)


@router.get(
    "/{device_id}/positions",
    response_model=list[PositionRead],
    responses={**CommonResponses.NOT_FOUND},
)
async def list_positions(
    device_id: uuid.UUID,
    user: CurrentUserDep,
    session: SessionDep,
    limit: Annotated[int, Query(ge=1, le=1000)] = 100,
):
    return service.list_positions(session, user, device_id, limit)


@phone_router.put("", response_model=PhoneDeviceRead)
async def upsert_phone_device(
    body: PhoneDeviceUpsert, user: CurrentUserDep, session: SessionDep
):
    """Register the caller's phone or switch its location reporting."""
    return service.upsert_phone_device(session, user, body)


@phone_router.post(
    "/positions",
    response_model=PositionRead,
    status_code=status.HTTP_201_CREATED,
    responses={**CommonResponses.NOT_FOUND},
)
async def add_phone_position(body: PositionCreate, user: CurrentUserDep, session: SessionDep):
    return service.add_phone_position(session, user, body)
