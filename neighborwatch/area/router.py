"""Area domain router.

Areas of interest, membership and the invitation / join-request workflow.
"""

import uuid

from fastapi import APIRouter, BackgroundTasks, Depends, status

from neighborwatch.area import service
from neighborwatch.area.models import AreaOfInterest
from neighborwatch.area.schemas import (
    AreaCreate,
    AreaRead,
    AreaSummary,
    AreaUpdate,
    InvitationCreate,
    InvitationRead,
    InvitationWithArea,
    MembershipRead,
    NotificationsUpdate,
    RoleUpdate,
)
from neighborwatch.auth.dependencies import CurrentUserDep, require_auth
from neighborwatch.core.constants import CommonResponses, Routes
from neighborwatch.core.deps import PushServiceDep, SessionDep
from neighborwatch.core.email import send_area_invitation_email
from neighborwatch.core.schemas import MessageResponse
from neighborwatch.user.models import User

router = APIRouter(
    prefix=Routes.AREA.prefix,
    tags=[Routes.AREA.tag],
    dependencies=[Depends(require_auth)],
    responses={
        **CommonResponses.UNAUTHORIZED,
        **CommonResponses.FORBIDDEN,
    },
)


@router.post(
    "",
    response_model=AreaRead,
    status_code=status.HTTP_201_CREATED,
    responses={**CommonResponses.BAD_REQUEST},
)
async def create_area(body: AreaCreate, user: CurrentUserDep, session: SessionDep):
    """Create an area; the creator becomes its first admin."""
    return service.create_area(session, user, body)


@router.get("/mine", response_model=list[AreaSummary])
async def list_my_areas(user: CurrentUserDep, session: SessionDep):
    """Areas the caller belongs to, with their membership details."""
    return [
        AreaSummary(
            **AreaRead.model_validate(item.area).model_dump(),
            role=item.membership.role,
            notifications_enabled=item.membership.notifications_enabled,
            new_events_count=item.membership.new_events_count,
            member_count=item.member_count,
            pending_requests_count=item.pending_requests_count,
        )
        for item in service.list_my_areas(session, user)
    ]


@router.get("/search", response_model=list[AreaRead])
async def search_areas(session: SessionDep, q: str | None = None):
    """Discoverable areas, optionally filtered by a name fragment."""
    return service.search_areas(session, q)


@router.get("/invitations/mine", response_model=list[InvitationWithArea])
async def list_my_invitations(user: CurrentUserDep, session: SessionDep):
    """Pending invitations addressed to the caller."""
    result = []
    for invitation in service.list_my_invitations(session, user):
        area = session.get(AreaOfInterest, invitation.area_id)
        sender = session.get(User, invitation.sender_id)
        result.append(
            InvitationWithArea(
                **InvitationRead.model_validate(invitation).model_dump(),
                area_name=area.name if area else "",
                sender_name=sender.display_name if sender else "",
            )
        )
    return result


@router.get(
    "/{area_id}",
    response_model=AreaRead,
    responses={**CommonResponses.NOT_FOUND},
)
async def get_area(area_id: uuid.UUID, user: CurrentUserDep, session: SessionDep):
    return service.get_area(session, user, area_id)


@router.put(
    "/{area_id}",
    response_model=AreaRead,
    responses={**CommonResponses.NOT_FOUND, **CommonResponses.BAD_REQUEST},
)
async def update_area(
    area_id: uuid.UUID, body: AreaUpdate, user: CurrentUserDep, session: SessionDep
):
    """Edit an area. Admin only."""
    return service.update_area(session, user, area_id, body)


@router.delete(
    "/{area_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**CommonResponses.NOT_FOUND},
)
async def delete_area(area_id: uuid.UUID, user: CurrentUserDep, session: SessionDep):
    """Delete an area with all its memberships. Creator only."""
    service.delete_area(session, user, area_id)


@router.post(
    "/{area_id}/join",
    response_model=MembershipRead,
    status_code=status.HTTP_201_CREATED,
    responses={**CommonResponses.NOT_FOUND, **CommonResponses.CONFLICT},
)
async def join_area(area_id: uuid.UUID, user: CurrentUserDep, session: SessionDep):
    """Join a public area."""
    return service.join_area(session, user, area_id)


@router.post(
    "/{area_id}/leave",
    response_model=MessageResponse,
    responses={**CommonResponses.NOT_FOUND},
)
async def leave_area(area_id: uuid.UUID, user: CurrentUserDep, session: SessionDep):
    service.leave(session, user, area_id)
    return MessageResponse(message="Left the area")


@router.get(
    "/{area_id}/membership",
    response_model=MembershipRead,
    responses={**CommonResponses.NOT_FOUND},
)
async def get_membership(area_id: uuid.UUID, user: CurrentUserDep, session: SessionDep):
    return service.get_membership(session, user, area_id)


@router.put(
    "/{area_id}/notifications",
    response_model=MembershipRead,
    responses={**CommonResponses.NOT_FOUND},
)
async def toggle_notifications(
    area_id: uuid.UUID,
    body: NotificationsUpdate,
    user: CurrentUserDep,
    session: SessionDep,
):
    return service.toggle_notifications(session, user, area_id, body.enabled)


@router.post(
    "/{area_id}/seen",
    response_model=MembershipRead,
    responses={**CommonResponses.NOT_FOUND},
)
async def mark_seen(area_id: uuid.UUID, user: CurrentUserDep, session: SessionDep):
    """Reset the caller's unseen event counter for this area."""
    return service.mark_seen(session, user, area_id)


@router.delete(
    "/{area_id}/members/{member_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**CommonResponses.NOT_FOUND},
)
async def remove_member(
    area_id: uuid.UUID, member_id: uuid.UUID, user: CurrentUserDep, session: SessionDep
):
    service.remove_member(session, user, area_id, member_id)


@router.put(
    "/{area_id}/members/{member_id}/role",
    response_model=MembershipRead,
    responses={**CommonResponses.NOT_FOUND},
)
async def update_member_role(
    area_id: uuid.UUID,
    member_id: uuid.UUID,
    body: RoleUpdate,
    user: CurrentUserDep,
    session: SessionDep,
):
    return service.update_member_role(session, user, area_id, member_id, body.role)


@router.post(
    "/{area_id}/request-join",
    response_model=InvitationRead,
    status_code=status.HTTP_201_CREATED,
    responses={
        **CommonResponses.NOT_FOUND,
        **CommonResponses.CONFLICT,
        **CommonResponses.BAD_REQUEST,
    },
)
async def request_join(
    area_id: uuid.UUID,
    user: CurrentUserDep,
    session: SessionDep,
    push: PushServiceDep,
    background_tasks: BackgroundTasks,
):
    """Ask to join a private-shareable area."""
    invitation = service.request_join(session, user, area_id)
    area = session.get(AreaOfInterest, area_id)
    push.notify(
        background_tasks,
        service.list_admins(session, area_id),
        title="New join request",
        body=f"{user.display_name} wants to join {area.name if area else 'your area'}",
        data={"type": "area_join_request", "areaId": str(area_id)},
    )
    return invitation


@router.post(
    "/{area_id}/invitations",
    response_model=InvitationRead,
    status_code=status.HTTP_201_CREATED,
    responses={**CommonResponses.NOT_FOUND, **CommonResponses.CONFLICT},
)
async def invite(
    area_id: uuid.UUID,
    body: InvitationCreate,
    user: CurrentUserDep,
    session: SessionDep,
    push: PushServiceDep,
    background_tasks: BackgroundTasks,
):
    """Invite a user by id or by email. Admin only."""
    invitation, receiver = service.invite(session, user, area_id, body)
    area = service.get_area_or_404(session, area_id)
    if receiver:
        push.notify(
            background_tasks,
            [receiver],
            title="Area invitation",
            body=f"{user.display_name} invited you to {area.name}",
            data={"type": "area_invitation", "areaId": str(area_id)},
        )
    if invitation.email:
        background_tasks.add_task(
            send_area_invitation_email, invitation.email, area.name, user.display_name
        )
    return invitation


@router.get(
    "/{area_id}/invitations/requests",
    response_model=list[InvitationRead],
    responses={**CommonResponses.NOT_FOUND},
)
async def list_join_requests(
    area_id: uuid.UUID, user: CurrentUserDep, session: SessionDep
):
    """Pending join requests. Admin only."""
    return service.list_join_requests(session, user, area_id)


@router.post(
    "/{area_id}/invitations/{invitation_id}/accept",
    response_model=MembershipRead,
    responses={**CommonResponses.NOT_FOUND, **CommonResponses.CONFLICT},
)
async def accept_invitation(
    area_id: uuid.UUID,
    invitation_id: uuid.UUID,
    user: CurrentUserDep,
    session: SessionDep,
    push: PushServiceDep,
    background_tasks: BackgroundTasks,
):
    """Accept an invitation (addressee) or a join request (admin)."""
    membership, _invitation = service.accept_invitation(
        session, user, area_id, invitation_id
    )
    if membership.user_id != user.id:
        member = session.get(User, membership.user_id)
        area = session.get(AreaOfInterest, area_id)
        if member and area:
            push.notify(
                background_tasks,
                [member],
                title="Request accepted",
                body=f"You are now a member of {area.name}",
                data={"type": "area_join_accepted", "areaId": str(area_id)},
            )
    return membership


@router.post(
    "/{area_id}/invitations/{invitation_id}/reject",
    response_model=InvitationRead,
    responses={**CommonResponses.NOT_FOUND, **CommonResponses.CONFLICT},
)
async def reject_invitation(
    area_id: uuid.UUID,
    invitation_id: uuid.UUID,
    user: CurrentUserDep,
    session: SessionDep,
):
    """Decline an invitation (addressee) or a join request (admin)."""
    return service.reject_invitation(session, user, area_id, invitation_id)

