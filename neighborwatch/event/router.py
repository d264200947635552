"""Event domain router."""

import uuid
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status

from neighborwatch.auth.dependencies import CurrentUserDep, require_auth
from neighborwatch.core.constants import CommonResponses, Routes
from neighborwatch.core.deps import PushServiceDep, SessionDep
from neighborwatch.core.geo import BoundingBox, parse_lat_lng
from neighborwatch.event import service
from neighborwatch.event.models import EventStatus, EventType
from neighborwatch.event.schemas import (
    EventCreate,
    EventRead,
    EventUpdate,
    SortBy,
    SortOrder,
    TrackPoint,
)

router = APIRouter(
    prefix=Routes.EVENT.prefix,
    tags=[Routes.EVENT.tag],
    dependencies=[Depends(require_auth)],
    responses={
        **CommonResponses.UNAUTHORIZED,
        **CommonResponses.FORBIDDEN,
    },
)

public_router = APIRouter(
    prefix=Routes.PUBLIC_EVENT.prefix,
    tags=[Routes.PUBLIC_EVENT.tag],
    responses={**CommonResponses.NOT_FOUND},
)

NorthEastQuery = Annotated[str, Query(alias="northEast", description="lat,lng")]
SouthWestQuery = Annotated[str, Query(alias="southWest", description="lat,lng")]
StatusQuery = Annotated[EventStatus | None, Query(alias="status")]
TypeQuery = Annotated[EventType | None, Query(alias="type")]
SortByQuery = Annotated[SortBy, Query(alias="sortBy")]
SortOrderQuery = Annotated[SortOrder, Query(alias="sortOrder")]


@router.get(
    "",
    response_model=list[EventRead],
    responses={**CommonResponses.BAD_REQUEST},
)
async def list_events(
    user: CurrentUserDep,
    session: SessionDep,
    north_east: NorthEastQuery,
    south_west: SouthWestQuery,
    event_status: StatusQuery = None,
    event_type: TypeQuery = None,
    sort_by: SortByQuery = "createdAt",
    sort_order: SortOrderQuery = "desc",
):
    """Events the caller may see for the current map viewport.

    Events of the caller's areas and groups are included even when they lie
    outside the viewport.
    """
    viewport = BoundingBox.from_corners(parse_lat_lng(north_east), parse_lat_lng(south_west))
    filters = service.EventFilters(
        status=event_status, type=event_type, sort_by=sort_by, sort_order=sort_order
    )
    return service.list_visible_events(session, user, viewport, filters)


@router.post(
    "",
    response_model=EventRead,
    status_code=status.HTTP_201_CREATED,
    responses={**CommonResponses.BAD_REQUEST, **CommonResponses.NOT_FOUND},
)
async def create_event(
    body: EventCreate,
    user: CurrentUserDep,
    session: SessionDep,
    push: PushServiceDep,
    background_tasks: BackgroundTasks,
):
    """Report an event. Members of the areas around it are notified."""
    event, recipients = service.create_event(session, user, body)
    push.notify(
        background_tasks,
        recipients,
        title=f"New {event.type.value.lower()} event nearby",
        body=event.description[:120],
        data={"type": "area_event", "eventId": str(event.id)},
    )
    return event


@router.get("/mine", response_model=list[EventRead])
async def list_my_events(user: CurrentUserDep, session: SessionDep):
    return service.list_my_events(session, user)


@router.get(
    "/{event_id}",
    response_model=EventRead,
    responses={**CommonResponses.NOT_FOUND},
)
async def get_event(event_id: uuid.UUID, user: CurrentUserDep, session: SessionDep):
    return service.get_event(session, user, event_id)


@router.patch(
    "/{event_id}",
    response_model=EventRead,
    responses={**CommonResponses.NOT_FOUND, **CommonResponses.CONFLICT},
)
async def update_event(
    event_id: uuid.UUID, body: EventUpdate, user: CurrentUserDep, session: SessionDep
):
    """Close an event or toggle its real-time tracking. Author only."""
    return service.update_event(session, user, event_id, body)


@router.delete(
    "/{event_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**CommonResponses.NOT_FOUND},
)
async def delete_event(event_id: uuid.UUID, user: CurrentUserDep, session: SessionDep):
    service.delete_event(session, user, event_id)


@router.get(
    "/{event_id}/track",
    response_model=list[TrackPoint],
    responses={**CommonResponses.NOT_FOUND},
)
async def get_event_track(event_id: uuid.UUID, user: CurrentUserDep, session: SessionDep):
    """Path followed by the event's device since the event was reported."""
    return [
        TrackPoint(
            latitude=s.latitude, longitude=s.longitude, timestamp=s.timestamp, speed=s.speed
        )
        for s in service.get_event_track(session, user, event_id)
    ]


# --- public, no authentication --------------------------------------------------


@public_router.get(
    "/region",
    response_model=list[EventRead],
    responses={**CommonResponses.BAD_REQUEST},
)
async def list_public_events(
    session: SessionDep,
    north_east: NorthEastQuery,
    south_west: SouthWestQuery,
    event_status: StatusQuery = None,
    event_type: TypeQuery = None,
    sort_by: SortByQuery = "createdAt",
    sort_order: SortOrderQuery = "desc",
):
    """Public events inside a map viewport, for visitors without an account."""
    viewport = BoundingBox.from_corners(parse_lat_lng(north_east), parse_lat_lng(south_west))
    filters = service.EventFilters(
        status=event_status, type=event_type, sort_by=sort_by, sort_order=sort_order
    )
    return service.list_public_events(session, viewport, filters)


@public_router.get("/{event_id}", response_model=EventRead)
async def get_public_event(event_id: uuid.UUID, session: SessionDep):
    """A public event; private ones look missing."""
    return service.get_public_event(session, event_id)
