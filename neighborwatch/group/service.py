"""Group membership and location aggregation."""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import delete, func, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, select

from neighborwatch.area.models import MemberRole
from neighborwatch.device.models import (
    Device,
    DeviceType,
    PhoneDevice,
    PhonePosition,
    Position,
)
from neighborwatch.event.models import Event
from neighborwatch.group.exceptions import (
    AlreadyGroupMemberError,
    GroupAdminRequiredError,
    GroupCreatorError,
    GroupMemberNotFoundError,
    GroupMembershipRequiredError,
    GroupNotFoundError,
)
from neighborwatch.group.models import Group, GroupMembership
from neighborwatch.group.schemas import GroupUpdate
from neighborwatch.user.exceptions import UserNotFoundError
from neighborwatch.user.models import User

logger = logging.getLogger(__name__)


def get_group_or_404(session: Session, group_id: uuid.UUID) -> Group:
    group = session.get(Group, group_id)
    if not group:
        raise GroupNotFoundError()
    return group


def find_group_membership(
    session: Session, group_id: uuid.UUID, user_id: uuid.UUID
) -> GroupMembership | None:
    return session.exec(
        select(GroupMembership).where(
            GroupMembership.group_id == group_id, GroupMembership.user_id == user_id
        )
    ).first()


def require_group_member(
    session: Session, group_id: uuid.UUID, user_id: uuid.UUID
) -> GroupMembership:
    get_group_or_404(session, group_id)
    membership = find_group_membership(session, group_id, user_id)
    if not membership:
        raise GroupMembershipRequiredError()
    return membership


def require_group_admin(
    session: Session, group_id: uuid.UUID, user_id: uuid.UUID
) -> GroupMembership:
    membership = require_group_member(session, group_id, user_id)
    if membership.role != MemberRole.ADMIN:
        raise GroupAdminRequiredError()
    return membership


def group_ids_for_user(session: Session, user_id: uuid.UUID) -> list[uuid.UUID]:
    return list(
        session.exec(
            select(GroupMembership.group_id).where(GroupMembership.user_id == user_id)
        ).all()
    )


def create_group(
    session: Session, creator: User, name: str, description: str | None = None
) -> Group:
    """Create a group with its creator as ADMIN in one commit."""
    group = Group(name=name, description=description, creator_id=creator.id)
    session.add(group)
    session.flush()
    session.add(
        GroupMembership(group_id=group.id, user_id=creator.id, role=MemberRole.ADMIN)
    )
    session.commit()
    session.refresh(group)
    logger.info("Group created", extra={"user_id": str(creator.id)})
    return group


@dataclass
class GroupWithMembership:
    group: Group
    membership: GroupMembership
    member_count: int


def list_my_groups(session: Session, user: User) -> list[GroupWithMembership]:
    rows = session.exec(
        select(Group, GroupMembership)
        .join(GroupMembership, col(GroupMembership.group_id) == Group.id)
        .where(GroupMembership.user_id == user.id)
        .order_by(col(Group.name), col(Group.id))
    ).all()
    result = []
    for group, membership in rows:
        count = session.exec(
            select(func.count())
            .select_from(GroupMembership)
            .where(GroupMembership.group_id == group.id)
        ).one()
        result.append(GroupWithMembership(group, membership, count))
    return result


def list_members(
    session: Session, user: User, group_id: uuid.UUID
) -> list[tuple[GroupMembership, User]]:
    require_group_member(session, group_id, user.id)
    return list(
        session.exec(
            select(GroupMembership, User)
            .join(User, col(User.id) == GroupMembership.user_id)
            .where(GroupMembership.group_id == group_id)
            .order_by(col(GroupMembership.created_at), col(GroupMembership.id))
        ).all()
    )


def add_member(
    session: Session,
    user: User,
    group_id: uuid.UUID,
    member_id: uuid.UUID,
    role: MemberRole = MemberRole.MEMBER,
) -> GroupMembership:
    """Add an existing user to the group. Admin only."""
    require_group_admin(session, group_id, user.id)
    if not session.get(User, member_id):
        raise UserNotFoundError()
    if find_group_membership(session, group_id, member_id):
        raise AlreadyGroupMemberError()

    membership = GroupMembership(group_id=group_id, user_id=member_id, role=role)
    session.add(membership)
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise AlreadyGroupMemberError() from e
    session.refresh(membership)
    return membership


def update_group(
    session: Session, user: User, group_id: uuid.UUID, data: GroupUpdate
) -> Group:
    """Rename a group or change its description. Admin only."""
    group = get_group_or_404(session, group_id)
    require_group_admin(session, group_id, user.id)

    update_data = data.model_dump(exclude_unset=True)
    if update_data.get("name") is not None:
        group.name = update_data["name"]
    if "description" in update_data:
        group.description = update_data["description"]
    session.add(group)
    session.commit()
    session.refresh(group)
    return group


def remove_member(
    session: Session, user: User, group_id: uuid.UUID, member_id: uuid.UUID
) -> None:
    group = get_group_or_404(session, group_id)
    require_group_admin(session, group_id, user.id)
    if member_id == group.creator_id:
        raise GroupCreatorError("The group creator cannot be removed")
    membership = find_group_membership(session, group_id, member_id)
    if not membership:
        raise GroupMemberNotFoundError()
    session.delete(membership)
    session.commit()


def update_member_role(
    session: Session,
    user: User,
    group_id: uuid.UUID,
    member_id: uuid.UUID,
    role: MemberRole,
) -> GroupMembership:
    group = get_group_or_404(session, group_id)
    require_group_admin(session, group_id, user.id)
    if member_id == group.creator_id:
        raise GroupCreatorError("The group creator's role cannot be changed")
    membership = find_group_membership(session, group_id, member_id)
    if not membership:
        raise GroupMemberNotFoundError()
    membership.role = role
    session.add(membership)
    session.commit()
    session.refresh(membership)
    return membership


def leave_group(session: Session, user: User, group_id: uuid.UUID) -> None:
    group = get_group_or_404(session, group_id)
    if group.creator_id == user.id:
        raise GroupCreatorError("The group creator cannot leave; delete the group instead")
    membership = require_group_member(session, group_id, user.id)
    session.delete(membership)
    session.commit()


def delete_group(session: Session, user: User, group_id: uuid.UUID) -> None:
    """Delete a group. Its events survive without a group."""
    group = get_group_or_404(session, group_id)
    if group.creator_id != user.id:
        raise GroupCreatorError()

    session.exec(
        update(Event).where(col(Event.group_id) == group_id).values(group_id=None)
    )
    session.exec(delete(GroupMembership).where(col(GroupMembership.group_id) == group_id))
    session.delete(group)
    session.commit()
    logger.info("Group deleted", extra={"user_id": str(user.id)})


def set_location_sharing(
    session: Session, user: User, group_id: uuid.UUID, enabled: bool
) -> GroupMembership:
    membership = require_group_member(session, group_id, user.id)
    membership.location_sharing_enabled = enabled
    session.add(membership)
    session.commit()
    session.refresh(membership)
    return membership


def list_group_events(session: Session, user: User, group_id: uuid.UUID) -> list[Event]:
    require_group_member(session, group_id, user.id)
    return list(
        session.exec(
            select(Event)
            .where(Event.group_id == group_id)
            .order_by(col(Event.created_at).desc(), col(Event.id))
        ).all()
    )


@dataclass(frozen=True)
class MemberPosition:
    user_id: uuid.UUID
    user_name: str
    source: str
    device_id: uuid.UUID
    device_name: str
    latitude: float
    longitude: float
    timestamp: datetime


def _latest_tracker_position(session: Session, device_id: uuid.UUID) -> Position | None:
    return session.exec(
        select(Position)
        .where(Position.device_id == device_id)
        .order_by(col(Position.timestamp).desc(), col(Position.id))
        .limit(1)
    ).first()


def _latest_phone_position(
    session: Session, phone_device_id: uuid.UUID
) -> PhonePosition | None:
    return session.exec(
        select(PhonePosition)
        .where(PhonePosition.phone_device_id == phone_device_id)
        .order_by(col(PhonePosition.timestamp).desc(), col(PhonePosition.id))
        .limit(1)
    ).first()


def list_member_positions(
    session: Session, user: User, group_id: uuid.UUID
) -> list[MemberPosition]:
    """Latest known position of every member who shares their location.

    One entry per GPS tracker the member owns, plus one for their phone when
    it is active. Members with sharing off are left out entirely.
    """
    require_group_member(session, group_id, user.id)

    sharing = session.exec(
        select(User)
        .join(GroupMembership, col(GroupMembership.user_id) == User.id)
        .where(
            GroupMembership.group_id == group_id,
            col(GroupMembership.location_sharing_enabled).is_(True),
        )
        .order_by(col(User.id))
    ).all()

    positions: list[MemberPosition] = []
    for member in sharing:
        trackers = session.exec(
            select(Device)
            .where(Device.user_id == member.id, Device.type == DeviceType.GPS_TRACKER)
            .order_by(col(Device.id))
        ).all()
        for device in trackers:
            latest = _latest_tracker_position(session, device.id)
            if latest:
                positions.append(
                    MemberPosition(
                        user_id=member.id,
                        user_name=member.display_name,
                        source=DeviceType.GPS_TRACKER.value,
                        device_id=device.id,
                        device_name=device.name,
                        latitude=latest.latitude,
                        longitude=latest.longitude,
                        timestamp=latest.timestamp,
                    )
                )

        phone = session.exec(
            select(PhoneDevice).where(PhoneDevice.user_id == member.id)
        ).first()
        if phone and phone.is_active:
            latest_phone = _latest_phone_position(session, phone.id)
            if latest_phone:
                positions.append(
                    MemberPosition(
                        user_id=member.id,
                        user_name=member.display_name,
                        source="PHONE",
                        device_id=phone.id,
                        device_name=phone.name,
                        latitude=latest_phone.latitude,
                        longitude=latest_phone.longitude,
                        timestamp=latest_phone.timestamp,
                    )
                )
    return positions
