"""Group domain router."""

import uuid

from fastapi import APIRouter, BackgroundTasks, Depends, status

from neighborwatch.auth.dependencies import CurrentUserDep, require_auth
from neighborwatch.core.constants import CommonResponses, Routes
from neighborwatch.core.deps import PushServiceDep, SessionDep
from neighborwatch.core.schemas import MessageResponse
from neighborwatch.event.schemas import EventRead
from neighborwatch.group import service
from neighborwatch.group.schemas import (
    GroupCreate,
    GroupMemberAdd,
    GroupMemberRead,
    GroupMembershipRead,
    GroupRead,
    GroupRoleUpdate,
    GroupSummary,
    GroupUpdate,
    LocationSharingUpdate,
    MemberPositionRead,
)
from neighborwatch.user.models import User

router = APIRouter(
    prefix=Routes.GROUP.prefix,
    tags=[Routes.GROUP.tag],
    dependencies=[Depends(require_auth)],
    responses={
        **CommonResponses.UNAUTHORIZED,
        **CommonResponses.FORBIDDEN,
    },
)


@router.post("", response_model=GroupRead, status_code=status.HTTP_201_CREATED)
async def create_group(body: GroupCreate, user: CurrentUserDep, session: SessionDep):
    """Create a group; the creator becomes its admin."""
    return service.create_group(session, user, body.name, body.description)


@router.get("/mine", response_model=list[GroupSummary])
async def list_my_groups(user: CurrentUserDep, session: SessionDep):
    return [
        GroupSummary(
            **GroupRead.model_validate(item.group).model_dump(),
            role=item.membership.role,
            location_sharing_enabled=item.membership.location_sharing_enabled,
            member_count=item.member_count,
        )
        for item in service.list_my_groups(session, user)
    ]


@router.get(
    "/{group_id}",
    response_model=GroupRead,
    responses={**CommonResponses.NOT_FOUND},
)
async def get_group(group_id: uuid.UUID, user: CurrentUserDep, session: SessionDep):
    """Group details. Members only."""
    service.require_group_member(session, group_id, user.id)
    return service.get_group_or_404(session, group_id)


@router.put(
    "/{group_id}",
    response_model=GroupRead,
    responses={**CommonResponses.NOT_FOUND},
)
async def update_group(
    group_id: uuid.UUID, body: GroupUpdate, user: CurrentUserDep, session: SessionDep
):
    """Edit a group's name or description. Admin only."""
    return service.update_group(session, user, group_id, body)


@router.delete(
    "/{group_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**CommonResponses.NOT_FOUND},
)
async def delete_group(group_id: uuid.UUID, user: CurrentUserDep, session: SessionDep):
    """Delete a group. Creator only."""
    service.delete_group(session, user, group_id)


@router.get(
    "/{group_id}/members",
    response_model=list[GroupMemberRead],
    responses={**CommonResponses.NOT_FOUND},
)
async def list_members(group_id: uuid.UUID, user: CurrentUserDep, session: SessionDep):
    return [
        GroupMemberRead(
            user_id=member.id,
            name=member.display_name,
            role=membership.role,
            location_sharing_enabled=membership.location_sharing_enabled,
        )
        for membership, member in service.list_members(session, user, group_id)
    ]


@router.post(
    "/{group_id}/members",
    response_model=GroupMembershipRead,
    status_code=status.HTTP_201_CREATED,
    responses={**CommonResponses.NOT_FOUND, **CommonResponses.CONFLICT},
)
async def add_member(
    group_id: uuid.UUID,
    body: GroupMemberAdd,
    user: CurrentUserDep,
    session: SessionDep,
    push: PushServiceDep,
    background_tasks: BackgroundTasks,
):
    """Add a user to the group. Admin only."""
    membership = service.add_member(session, user, group_id, body.user_id, body.role)
    group = service.get_group_or_404(session, group_id)
    member = session.get(User, body.user_id)
    if member:
        push.notify(
            background_tasks,
            [member],
            title="Added to a group",
            body=f"{user.display_name} added you to {group.name}",
            data={"type": "group_member_added", "groupId": str(group_id)},
        )
    return membership


@router.delete(
    "/{group_id}/members/{member_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**CommonResponses.NOT_FOUND},
)
async def remove_member(
    group_id: uuid.UUID, member_id: uuid.UUID, user: CurrentUserDep, session: SessionDep
):
    """Remove a member. Admin only; the creator cannot be removed."""
    service.remove_member(session, user, group_id, member_id)


@router.put(
    "/{group_id}/members/{member_id}/role",
    response_model=GroupMembershipRead,
    responses={**CommonResponses.NOT_FOUND},
)
async def update_member_role(
    group_id: uuid.UUID,
    member_id: uuid.UUID,
    body: GroupRoleUpdate,
    user: CurrentUserDep,
    session: SessionDep,
):
    return service.update_member_role(session, user, group_id, member_id, body.role)


@router.post(
    "/{group_id}/leave",
    response_model=MessageResponse,
    responses={**CommonResponses.NOT_FOUND},
)
async def leave_group(group_id: uuid.UUID, user: CurrentUserDep, session: SessionDep):
    service.leave_group(session, user, group_id)
    return MessageResponse(message="Left the group")


@router.put(
    "/{group_id}/location-sharing",
    response_model=GroupMembershipRead,
    responses={**CommonResponses.NOT_FOUND},
)
async def set_location_sharing(
    group_id: uuid.UUID,
    body: LocationSharingUpdate,
    user: CurrentUserDep,
    session: SessionDep,
):
    """Share or stop sharing the caller's positions with this group."""
    return service.set_location_sharing(session, user, group_id, body.enabled)


@router.get(
    "/{group_id}/events",
    response_model=list[EventRead],
    responses={**CommonResponses.NOT_FOUND},
)
async def list_group_events(
    group_id: uuid.UUID, user: CurrentUserDep, session: SessionDep
):
    return service.list_group_events(session, user, group_id)


@router.get(
    "/{group_id}/positions",
    response_model=list[MemberPositionRead],
    responses={**CommonResponses.NOT_FOUND},
)
async def list_member_positions(
    group_id: uuid.UUID, user: CurrentUserDep, session: SessionDep
):
    """Latest positions of the members who share their location."""
    return service.list_member_positions(session, user, group_id)
