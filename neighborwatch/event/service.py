"""Event visibility service.

A user sees the union, deduplicated by id, of:

1. public events inside the map viewport;
2. every event inside the circle of an area they are a member of, whatever
   the viewport shows;
3. every event of a group they belong to, whatever the viewport shows;
4. their own events inside the viewport.

Status and type filters run on the union, never on the individual sources,
so a filter cannot widen what a user is allowed to see.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime

from sqlmodel import Session, col, select

from neighborwatch.area.models import AreaMembership, AreaOfInterest
from neighborwatch.area.service import record_new_event
from neighborwatch.core.exceptions import ValidationError
from neighborwatch.core.geo import BoundingBox, LatLng, circle_bounds, is_within_radius
from neighborwatch.core.mixins import utc_now
from neighborwatch.device.exceptions import (
    DeviceNotFoundError,
    DeviceOwnershipError,
    PhoneDeviceNotFoundError,
)
from neighborwatch.device.models import Device, PhoneDevice, PhonePosition, Position
from neighborwatch.event.exceptions import (
    EventAuthorRequiredError,
    EventNotFoundError,
    InvalidEventTransitionError,
)
from neighborwatch.event.models import Event, EventStatus, EventType
from neighborwatch.event.schemas import EventCreate, EventUpdate, SortBy, SortOrder
from neighborwatch.group.service import (
    find_group_membership,
    group_ids_for_user,
    require_group_admin,
)
from neighborwatch.user.models import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EventFilters:
    status: EventStatus | None = None
    type: EventType | None = None
    sort_by: SortBy = "createdAt"
    sort_order: SortOrder = "desc"


def _point(event: Event) -> LatLng:
    return LatLng(event.latitude, event.longitude)


def _inside(box: BoundingBox):
    return (
        col(Event.latitude).between(box.min_latitude, box.max_latitude),
        col(Event.longitude).between(box.min_longitude, box.max_longitude),
    )


def _public_in_viewport(session: Session, viewport: BoundingBox) -> list[Event]:
    return list(
        session.exec(
            select(Event).where(col(Event.is_public).is_(True), *_inside(viewport))
        ).all()
    )


def _own_in_viewport(session: Session, user: User, viewport: BoundingBox) -> list[Event]:
    return list(
        session.exec(
            select(Event).where(Event.author_id == user.id, *_inside(viewport))
        ).all()
    )


def _member_areas(session: Session, user: User) -> list[AreaOfInterest]:
    return list(
        session.exec(
            select(AreaOfInterest)
            .join(AreaMembership, col(AreaMembership.area_id) == AreaOfInterest.id)
            .where(AreaMembership.user_id == user.id)
        ).all()
    )


def _in_member_areas(session: Session, user: User) -> list[Event]:
    events: list[Event] = []
    for area in _member_areas(session, user):
        center = LatLng(area.latitude, area.longitude)
        candidates = session.exec(
            select(Event).where(*_inside(circle_bounds(center, area.radius)))
        ).all()
        events.extend(e for e in candidates if is_within_radius(_point(e), center, area.radius))
    return events


def _in_member_groups(session: Session, user: User) -> list[Event]:
    group_ids = group_ids_for_user(session, user.id)
    if not group_ids:
        return []
    return list(
        session.exec(select(Event).where(col(Event.group_id).in_(group_ids))).all()
    )


def sort_events(
    events: list[Event], sort_by: SortBy = "createdAt", sort_order: SortOrder = "desc"
) -> list[Event]:
    """Active urgent events first, then by the sort key, ties by id ascending."""
    ordered = sorted(events, key=lambda e: e.id)
    if sort_by == "type":
        ordered.sort(key=lambda e: e.type.value, reverse=sort_order == "desc")
    else:
        ordered.sort(key=lambda e: e.created_at, reverse=sort_order == "desc")
    ordered.sort(key=lambda e: not (e.is_urgent and e.status == EventStatus.IN_PROGRESS))
    return ordered


def _matches(event: Event, filters: EventFilters) -> bool:
    return (filters.status is None or event.status == filters.status) and (
        filters.type is None or event.type == filters.type
    )


def list_visible_events(
    session: Session,
    user: User,
    viewport: BoundingBox,
    filters: EventFilters | None = None,
) -> list[Event]:
    filters = filters or EventFilters()

    visible: dict[uuid.UUID, Event] = {}
    for source in (
        _public_in_viewport(session, viewport),
        _in_member_areas(session, user),
        _in_member_groups(session, user),
        _own_in_viewport(session, user, viewport),
    ):
        for event in source:
            visible.setdefault(event.id, event)

    events = [e for e in visible.values() if _matches(e, filters)]
    return sort_events(events, filters.sort_by, filters.sort_order)


def list_public_events(
    session: Session, viewport: BoundingBox, filters: EventFilters | None = None
) -> list[Event]:
    """Public events inside the viewport, for visitors without an account."""
    filters = filters or EventFilters()
    events = [e for e in _public_in_viewport(session, viewport) if _matches(e, filters)]
    return sort_events(events, filters.sort_by, filters.sort_order)


def get_public_event(session: Session, event_id: uuid.UUID) -> Event:
    event = session.get(Event, event_id)
    if not event or not event.is_public:
        raise EventNotFoundError()
    return event


def list_public_events_by_author(
    session: Session, author_id: uuid.UUID, limit: int = 20
) -> list[Event]:
    """Most recent public events reported by one user."""
    return list(
        session.exec(
            select(Event)
            .where(Event.author_id == author_id, col(Event.is_public).is_(True))
            .order_by(col(Event.created_at).desc(), col(Event.id))
            .limit(limit)
        ).all()
    )


def can_view(session: Session, user: User, event: Event) -> bool:
    """Whether ``user`` may see ``event`` regardless of any viewport."""
    if event.is_public or event.author_id == user.id:
        return True
    if event.group_id and find_group_membership(session, event.group_id, user.id):
        return True
    return any(
        is_within_radius(_point(event), LatLng(a.latitude, a.longitude), a.radius)
        for a in _member_areas(session, user)
    )


def get_event(session: Session, user: User, event_id: uuid.UUID) -> Event:
    """Read one event; events the user may not see look missing."""
    event = session.get(Event, event_id)
    if not event or not can_view(session, user, event):
        raise EventNotFoundError()
    return event


def list_my_events(session: Session, user: User) -> list[Event]:
    events = session.exec(select(Event).where(Event.author_id == user.id)).all()
    return sort_events(list(events))


def _claim_device(session: Session, user: User, device_id: uuid.UUID) -> Device:
    device = session.get(Device, device_id)
    if not device:
        raise DeviceNotFoundError()
    if device.user_id is None:
        device.user_id = user.id
        session.add(device)
        logger.info(
            "Unowned device claimed by event author", extra={"user_id": str(user.id)}
        )
    elif device.user_id != user.id:
        raise DeviceOwnershipError()
    return device


def create_event(
    session: Session, user: User, data: EventCreate
) -> tuple[Event, list[User]]:
    """Create an event and count it against the areas that contain it.

    Returns the event and the area members to notify.
    """
    if data.group_id is not None:
        require_group_admin(session, data.group_id, user.id)
    if data.device_id is not None:
        _claim_device(session, user, data.device_id)
    if data.phone_device_id is not None:
        phone = session.get(PhoneDevice, data.phone_device_id)
        if not phone:
            raise PhoneDeviceNotFoundError()
        if phone.user_id != user.id:
            raise DeviceOwnershipError()
    if data.real_time_tracking and data.device_id is None and data.phone_device_id is None:
        raise ValidationError("Real-time tracking needs a device or phone attached")

    event = Event(
        author_id=user.id,
        type=data.type,
        description=data.description,
        latitude=data.latitude,
        longitude=data.longitude,
        is_public=data.is_public,
        is_urgent=data.is_urgent,
        real_time_tracking=data.real_time_tracking,
        group_id=data.group_id,
        device_id=data.device_id,
        phone_device_id=data.phone_device_id,
    )
    session.add(event)
    session.flush()
    recipients = record_new_event(session, _point(event), user.id)
    session.commit()
    session.refresh(event)
    logger.info(
        "Event created",
        extra={"event_id": str(event.id), "user_id": str(user.id)},
    )
    return event, recipients


def _get_own_event(session: Session, user: User, event_id: uuid.UUID) -> Event:
    event = get_event(session, user, event_id)
    if event.author_id != user.id:
        raise EventAuthorRequiredError()
    return event


def update_event(
    session: Session, user: User, event_id: uuid.UUID, data: EventUpdate
) -> Event:
    """Close an event or switch its live tracking. Author only."""
    event = _get_own_event(session, user, event_id)

    if data.status is not None and data.status != event.status:
        if event.status == EventStatus.CLOSED:
            raise InvalidEventTransitionError()
        event.status = data.status
        event.closed_at = utc_now()
        event.real_time_tracking = False

    if data.real_time_tracking is not None and data.status != EventStatus.CLOSED:
        if data.real_time_tracking and event.status == EventStatus.CLOSED:
            raise InvalidEventTransitionError("Closed events cannot be tracked")
        event.real_time_tracking = data.real_time_tracking

    session.add(event)
    session.commit()
    session.refresh(event)
    return event


def delete_event(session: Session, user: User, event_id: uuid.UUID) -> None:
    event = _get_own_event(session, user, event_id)
    session.delete(event)
    session.commit()
    logger.info("Event deleted", extra={"event_id": str(event_id), "user_id": str(user.id)})


@dataclass(frozen=True)
class TrackSample:
    latitude: float
    longitude: float
    timestamp: datetime
    speed: float | None = None


def get_event_track(session: Session, user: User, event_id: uuid.UUID) -> list[TrackSample]:
    """Positions of the attached device between the event's creation and close."""
    event = get_event(session, user, event_id)
    until = event.closed_at

    if event.device_id is not None:
        statement = select(Position).where(
            Position.device_id == event.device_id,
            col(Position.timestamp) >= event.created_at,
        )
        if until is not None:
            statement = statement.where(col(Position.timestamp) <= until)
        rows = session.exec(
            statement.order_by(col(Position.timestamp), col(Position.id))
        ).all()
        return [TrackSample(p.latitude, p.longitude, p.timestamp, p.speed) for p in rows]

    if event.phone_device_id is not None:
        phone_statement = select(PhonePosition).where(
            PhonePosition.phone_device_id == event.phone_device_id,
            col(PhonePosition.timestamp) >= event.created_at,
        )
        if until is not None:
            phone_statement = phone_statement.where(col(PhonePosition.timestamp) <= until)
        phone_rows = session.exec(
            phone_statement.order_by(col(PhonePosition.timestamp), col(PhonePosition.id))
        ).all()
        return [
            TrackSample(p.latitude, p.longitude, p.timestamp, p.speed) for p in phone_rows
        ]

    return []
