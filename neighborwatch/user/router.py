"""User domain router.

Registration of the local profile, self-service profile and privacy
settings, and public profiles.
"""

import uuid

from fastapi import APIRouter, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import or_, select

from neighborwatch.area.service import validate_radius
from neighborwatch.auth.dependencies import CurrentUserDep, TokenClaimsDep
from neighborwatch.core.constants import CommonResponses, Routes
from neighborwatch.core.deps import SessionDep
from neighborwatch.core.exceptions import ValidationError
from neighborwatch.event.schemas import EventRead
from neighborwatch.event.service import list_public_events_by_author
from neighborwatch.user.exceptions import UserExistsError, UserNotFoundError
from neighborwatch.user.models import User
from neighborwatch.user.schemas import (
    DefaultArea,
    UserPublicProfile,
    UserRead,
    UserRegister,
    UserUpdateMe,
)

router = APIRouter(
    prefix=Routes.USER.prefix,
    tags=[Routes.USER.tag],
    responses={**CommonResponses.UNAUTHORIZED},
)


def to_user_read(user: User) -> UserRead:
    default_area = None
    if (
        user.default_area_latitude is not None
        and user.default_area_longitude is not None
        and user.default_area_radius is not None
    ):
        default_area = DefaultArea(
            latitude=user.default_area_latitude,
            longitude=user.default_area_longitude,
            radius=user.default_area_radius,
        )
    return UserRead(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        show_name=user.show_name,
        show_email=user.show_email,
        show_public_events=user.show_public_events,
        default_area=default_area,
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


@router.post(
    "",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    responses={**CommonResponses.CONFLICT, **CommonResponses.BAD_REQUEST},
)
async def register(claims: TokenClaimsDep, body: UserRegister, session: SessionDep):
    """Create the local profile for the verified Firebase account."""
    if not claims.email:
        raise ValidationError("The credential carries no email address")

    existing = session.exec(
        select(User).where(
            or_(User.external_id == claims.uid, User.email == claims.email)
        )
    ).first()
    if existing:
        raise UserExistsError()

    user = User(
        external_id=claims.uid,
        email=claims.email,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    session.add(user)
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise UserExistsError() from e
    session.refresh(user)
    return to_user_read(user)


@router.get("/me", response_model=UserRead)
async def read_me(user: CurrentUserDep):
    """Current user's profile."""
    return to_user_read(user)


@router.patch("/me", response_model=UserRead)
async def update_me(user: CurrentUserDep, body: UserUpdateMe, session: SessionDep):
    """Update names, privacy flags or the push token.

    Email, status and external_id cannot be changed here.
    """
    update_data = body.model_dump(exclude_unset=True)
    for key, value in update_data.items():
        setattr(user, key, value)
    session.add(user)
    session.commit()
    session.refresh(user)
    return to_user_read(user)


@router.put(
    "/me/area",
    response_model=UserRead,
    responses={**CommonResponses.BAD_REQUEST},
)
async def set_default_area(user: CurrentUserDep, body: DefaultArea, session: SessionDep):
    """Set the caller's single default area of interest."""
    validate_radius(body.radius)
    user.default_area_latitude = body.latitude
    user.default_area_longitude = body.longitude
    user.default_area_radius = body.radius
    session.add(user)
    session.commit()
    session.refresh(user)
    return to_user_read(user)


@router.delete("/me/area", response_model=UserRead)
async def clear_default_area(user: CurrentUserDep, session: SessionDep):
    """Remove the caller's default area of interest."""
    user.default_area_latitude = None
    user.default_area_longitude = None
    user.default_area_radius = None
    session.add(user)
    session.commit()
    session.refresh(user)
    return to_user_read(user)


@router.get(
    "/{user_id}",
    response_model=UserPublicProfile,
    responses={**CommonResponses.NOT_FOUND},
)
async def read_public_profile(
    user_id: uuid.UUID, _caller: CurrentUserDep, session: SessionDep
):
    """Another user's profile, filtered by their privacy settings."""
    user = session.get(User, user_id)
    if not user:
        raise UserNotFoundError()
    return UserPublicProfile(
        id=user.id,
        name=user.display_name if user.show_name else None,
        email=user.email if user.show_email else None,
        public_events=(
            [
                EventRead.model_validate(e)
                for e in list_public_events_by_author(session, user.id)
            ]
            if user.show_public_events
            else None
        ),
    )
