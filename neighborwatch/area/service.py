"""Area-of-interest membership service.

Owns areas, memberships and the invitation / join-request workflow.

Answering an invitation is a compare-and-swap on its status: the row is only
updated while it is still PENDING, in the same transaction that inserts the
membership, so two admins answering the same request at once produce exactly
one membership and one InvitationNotPendingError.
"""

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import delete, func, update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, or_, select

from neighborwatch.area.exceptions import (
    AlreadyMemberError,
    AreaAdminRequiredError,
    AreaCreatorRequiredError,
    AreaNotFoundError,
    InvalidRadiusError,
    InvitationExistsError,
    InvitationNotFoundError,
    InvitationNotPendingError,
    JoinRequestExistsError,
    MembershipNotFoundError,
)
from neighborwatch.area.models import (
    AreaInvitation,
    AreaMembership,
    AreaOfInterest,
    AreaVisibility,
    InvitationStatus,
    InvitationType,
    MemberRole,
)
from neighborwatch.area.schemas import AreaCreate, AreaUpdate, InvitationCreate
from neighborwatch.core.exceptions import AuthorizationError, ValidationError
from neighborwatch.core.geo import LatLng, circle_bounds, is_within_radius
from neighborwatch.core.mixins import utc_now
from neighborwatch.user.models import User

logger = logging.getLogger(__name__)

MIN_AREA_RADIUS = 100.0
MAX_AREA_RADIUS = 10_000.0
SEARCH_LIMIT = 50


def validate_radius(radius: float) -> None:
    """Enforce the business bound on area radii, in meters."""
    if not MIN_AREA_RADIUS <= radius <= MAX_AREA_RADIUS:
        raise InvalidRadiusError(
            f"Radius must be between {MIN_AREA_RADIUS:g} and {MAX_AREA_RADIUS:g} meters"
        )


# --- lookups -----------------------------------------------------------------


def get_area_or_404(session: Session, area_id: uuid.UUID) -> AreaOfInterest:
    area = session.get(AreaOfInterest, area_id)
    if not area:
        raise AreaNotFoundError()
    return area


def find_membership(
    session: Session, area_id: uuid.UUID, user_id: uuid.UUID
) -> AreaMembership | None:
    return session.exec(
        select(AreaMembership).where(
            AreaMembership.area_id == area_id, AreaMembership.user_id == user_id
        )
    ).first()


def get_membership(session: Session, user: User, area_id: uuid.UUID) -> AreaMembership:
    """The caller's membership in an area; NotFound without one."""
    get_area_or_404(session, area_id)
    membership = find_membership(session, area_id, user.id)
    if not membership:
        raise MembershipNotFoundError()
    return membership


def _require_admin(session: Session, area_id: uuid.UUID, user_id: uuid.UUID) -> AreaMembership:
    membership = find_membership(session, area_id, user_id)
    if not membership or membership.role != MemberRole.ADMIN:
        raise AreaAdminRequiredError()
    return membership


def list_admins(session: Session, area_id: uuid.UUID) -> list[User]:
    return list(
        session.exec(
            select(User)
            .join(AreaMembership, col(AreaMembership.user_id) == User.id)
            .where(
                AreaMembership.area_id == area_id,
                AreaMembership.role == MemberRole.ADMIN,
            )
        ).all()
    )


def _member_count(session: Session, area_id: uuid.UUID) -> int:
    return session.exec(
        select(func.count()).select_from(AreaMembership).where(AreaMembership.area_id == area_id)
    ).one()


def _pending_requests_count(session: Session, area_id: uuid.UUID) -> int:
    return session.exec(
        select(func.count())
        .select_from(AreaInvitation)
        .where(
            AreaInvitation.area_id == area_id,
            AreaInvitation.type == InvitationType.JOIN_REQUEST,
            AreaInvitation.status == InvitationStatus.PENDING,
        )
    ).one()


# --- areas -------------------------------------------------------------------


def create_area(session: Session, creator: User, data: AreaCreate) -> AreaOfInterest:
    """Create an area and make its creator an ADMIN member in one commit."""
    validate_radius(data.radius)

    area = AreaOfInterest(
        name=data.name,
        description=data.description,
        latitude=data.latitude,
        longitude=data.longitude,
        radius=data.radius,
        visibility=data.visibility,
        creator_id=creator.id,
    )
    session.add(area)
    session.flush()
    session.add(
        AreaMembership(area_id=area.id, user_id=creator.id, role=MemberRole.ADMIN)
    )
    session.commit()
    session.refresh(area)
    logger.info("Area created", extra={"area_id": str(area.id), "user_id": str(creator.id)})
    return area


def update_area(
    session: Session, user: User, area_id: uuid.UUID, data: AreaUpdate
) -> AreaOfInterest:
    area = get_area_or_404(session, area_id)
    _require_admin(session, area_id, user.id)

    update_data = data.model_dump(exclude_unset=True)
    if update_data.get("radius") is not None:
        validate_radius(update_data["radius"])
    for key, value in update_data.items():
        if value is None and key != "description":
            continue
        setattr(area, key, value)
    session.add(area)
    session.commit()
    session.refresh(area)
    return area


def get_area(session: Session, user: User, area_id: uuid.UUID) -> AreaOfInterest:
    """Read an area; PRIVATE areas are visible to their members only."""
    area = get_area_or_404(session, area_id)
    if area.visibility == AreaVisibility.PRIVATE and not find_membership(
        session, area_id, user.id
    ):
        raise AuthorizationError("This area is private")
    return area


@dataclass
class AreaWithMembership:
    area: AreaOfInterest
    membership: AreaMembership
    member_count: int
    pending_requests_count: int


def list_my_areas(session: Session, user: User) -> list[AreaWithMembership]:
    rows = session.exec(
        select(AreaOfInterest, AreaMembership)
        .join(AreaMembership, col(AreaMembership.area_id) == AreaOfInterest.id)
        .where(AreaMembership.user_id == user.id)
        .order_by(col(AreaOfInterest.name), col(AreaOfInterest.id))
    ).all()
    return [
        AreaWithMembership(
            area=area,
            membership=membership,
            member_count=_member_count(session, area.id),
            pending_requests_count=(
                _pending_requests_count(session, area.id)
                if membership.role == MemberRole.ADMIN
                else 0
            ),
        )
        for area, membership in rows
    ]


def search_areas(session: Session, query: str | None = None) -> list[AreaOfInterest]:
    """Discoverable areas (PUBLIC and PRIVATE_SHAREABLE), optionally by name."""
    statement = select(AreaOfInterest).where(
        col(AreaOfInterest.visibility).in_(
            [AreaVisibility.PUBLIC, AreaVisibility.PRIVATE_SHAREABLE]
        )
    )
    if query:
        statement = statement.where(col(AreaOfInterest.name).icontains(query))
    return list(
        session.exec(
            statement.order_by(col(AreaOfInterest.name), col(AreaOfInterest.id)).limit(
                SEARCH_LIMIT
            )
        ).all()
    )


def delete_area(session: Session, user: User, area_id: uuid.UUID) -> None:
    """Delete an area with its memberships and invitations. Creator only."""
    area = get_area_or_404(session, area_id)
    if area.creator_id != user.id:
        raise AreaCreatorRequiredError()

    session.exec(delete(AreaInvitation).where(col(AreaInvitation.area_id) == area_id))
    session.exec(delete(AreaMembership).where(col(AreaMembership.area_id) == area_id))
    session.delete(area)
    session.commit()
    logger.info("Area deleted", extra={"area_id": str(area_id), "user_id": str(user.id)})


# --- membership --------------------------------------------------------------


def join_area(session: Session, user: User, area_id: uuid.UUID) -> AreaMembership:
    """Join a PUBLIC area directly."""
    area = get_area_or_404(session, area_id)
    if area.visibility != AreaVisibility.PUBLIC:
        raise AuthorizationError("Only public areas can be joined directly")
    if find_membership(session, area_id, user.id):
        raise AlreadyMemberError()

    membership = AreaMembership(area_id=area_id, user_id=user.id)
    session.add(membership)
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise AlreadyMemberError() from e
    session.refresh(membership)
    return membership


def leave(session: Session, user: User, area_id: uuid.UUID) -> None:
    """Leave an area. The creator deletes the area instead."""
    area = get_area_or_404(session, area_id)
    if area.creator_id == user.id:
        raise AreaCreatorRequiredError(
            "The area creator cannot leave; delete the area instead"
        )
    membership = find_membership(session, area_id, user.id)
    if not membership:
        raise MembershipNotFoundError()
    session.delete(membership)
    session.commit()


def remove_member(
    session: Session, user: User, area_id: uuid.UUID, member_id: uuid.UUID
) -> None:
    area = get_area_or_404(session, area_id)
    _require_admin(session, area_id, user.id)
    if member_id == area.creator_id:
        raise AreaCreatorRequiredError("The area creator cannot be removed")
    membership = find_membership(session, area_id, member_id)
    if not membership:
        raise MembershipNotFoundError("User is not a member of this area")
    session.delete(membership)
    session.commit()


def update_member_role(
    session: Session,
    user: User,
    area_id: uuid.UUID,
    member_id: uuid.UUID,
    role: MemberRole,
) -> AreaMembership:
    area = get_area_or_404(session, area_id)
    _require_admin(session, area_id, user.id)
    if member_id == area.creator_id:
        raise AreaCreatorRequiredError("The area creator's role cannot be changed")
    membership = find_membership(session, area_id, member_id)
    if not membership:
        raise MembershipNotFoundError("User is not a member of this area")
    membership.role = role
    session.add(membership)
    session.commit()
    session.refresh(membership)
    return membership


def toggle_notifications(
    session: Session, user: User, area_id: uuid.UUID, enabled: bool
) -> AreaMembership:
    membership = get_membership(session, user, area_id)
    membership.notifications_enabled = enabled
    session.add(membership)
    session.commit()
    session.refresh(membership)
    return membership


def mark_seen(session: Session, user: User, area_id: uuid.UUID) -> AreaMembership:
    """Reset the member's unseen event counter."""
    membership = get_membership(session, user, area_id)
    membership.new_events_count = 0
    session.add(membership)
    session.commit()
    session.refresh(membership)
    return membership


# --- invitations and join requests ---------------------------------------------


def request_join(session: Session, user: User, area_id: uuid.UUID) -> AreaInvitation:
    """Ask the admins of a PRIVATE_SHAREABLE area to let the caller in."""
    area = get_area_or_404(session, area_id)
    if area.visibility == AreaVisibility.PUBLIC:
        raise ValidationError("Public areas can be joined directly")
    if area.visibility == AreaVisibility.PRIVATE:
        raise AuthorizationError("This area does not accept join requests")
    if find_membership(session, area_id, user.id):
        raise AlreadyMemberError()

    pending = session.exec(
        select(AreaInvitation).where(
            AreaInvitation.area_id == area_id,
            AreaInvitation.sender_id == user.id,
            AreaInvitation.type == InvitationType.JOIN_REQUEST,
            AreaInvitation.status == InvitationStatus.PENDING,
        )
    ).first()
    if pending:
        raise JoinRequestExistsError()

    invitation = AreaInvitation(
        area_id=area_id,
        sender_id=user.id,
        type=InvitationType.JOIN_REQUEST,
    )
    session.add(invitation)
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise JoinRequestExistsError() from e
    session.refresh(invitation)
    logger.info(
        "Join request created",
        extra={"area_id": str(area_id), "user_id": str(user.id)},
    )
    return invitation


def invite(
    session: Session, sender: User, area_id: uuid.UUID, data: InvitationCreate
) -> tuple[AreaInvitation, User | None]:
    """Invite a user by id or by email. Admin only.

    Returns the invitation and the invited account, when one exists.
    """
    get_area_or_404(session, area_id)
    _require_admin(session, area_id, sender.id)

    receiver: User | None = None
    email: str | None = None
    if data.user_id is not None:
        receiver = session.get(User, data.user_id)
        if not receiver:
            raise ValidationError("Invited user does not exist")
    else:
        email = str(data.email).lower()
        receiver = session.exec(select(User).where(func.lower(User.email) == email)).first()

    if receiver and find_membership(session, area_id, receiver.id):
        raise AlreadyMemberError()

    target = []
    if receiver:
        target.append(AreaInvitation.receiver_id == receiver.id)
    if email:
        target.append(AreaInvitation.email == email)
    pending = session.exec(
        select(AreaInvitation).where(
            AreaInvitation.area_id == area_id,
            AreaInvitation.type == InvitationType.INVITATION,
            AreaInvitation.status == InvitationStatus.PENDING,
            or_(*target),
        )
    ).first()
    if pending:
        raise InvitationExistsError()

    invitation = AreaInvitation(
        area_id=area_id,
        sender_id=sender.id,
        receiver_id=receiver.id if receiver else None,
        email=email,
        type=InvitationType.INVITATION,
    )
    session.add(invitation)
    session.commit()
    session.refresh(invitation)
    logger.info(
        "Invitation created",
        extra={"area_id": str(area_id), "invitation_id": str(invitation.id)},
    )
    return invitation, receiver


def list_join_requests(
    session: Session, user: User, area_id: uuid.UUID
) -> list[AreaInvitation]:
    """Pending join requests of an area. Admin only."""
    get_area_or_404(session, area_id)
    _require_admin(session, area_id, user.id)
    return list(
        session.exec(
            select(AreaInvitation)
            .where(
                AreaInvitation.area_id == area_id,
                AreaInvitation.type == InvitationType.JOIN_REQUEST,
                AreaInvitation.status == InvitationStatus.PENDING,
            )
            .order_by(col(AreaInvitation.created_at), col(AreaInvitation.id))
        ).all()
    )


def list_my_invitations(session: Session, user: User) -> list[AreaInvitation]:
    """Pending invitations addressed to the caller's account or email."""
    return list(
        session.exec(
            select(AreaInvitation)
            .where(
                AreaInvitation.type == InvitationType.INVITATION,
                AreaInvitation.status == InvitationStatus.PENDING,
                or_(
                    AreaInvitation.receiver_id == user.id,
                    AreaInvitation.email == user.email.lower(),
                ),
            )
            .order_by(col(AreaInvitation.created_at).desc(), col(AreaInvitation.id))
        ).all()
    )


def _get_invitation(
    session: Session, area_id: uuid.UUID, invitation_id: uuid.UUID
) -> AreaInvitation:
    invitation = session.get(AreaInvitation, invitation_id)
    if not invitation or invitation.area_id != area_id:
        raise InvitationNotFoundError()
    return invitation


def _authorize_answer(session: Session, user: User, invitation: AreaInvitation) -> None:
    """Join requests are answered by an admin, invitations by their addressee."""
    if invitation.type == InvitationType.JOIN_REQUEST:
        _require_admin(session, invitation.area_id, user.id)
        return
    addressed = invitation.receiver_id == user.id or (
        invitation.receiver_id is None
        and invitation.email is not None
        and invitation.email == user.email.lower()
    )
    if not addressed:
        raise AuthorizationError("This invitation is not addressed to you")


def _claim_pending(
    session: Session, invitation: AreaInvitation, new_status: InvitationStatus
) -> None:
    """Move a PENDING invitation to ``new_status`` or fail if someone else did."""
    result = session.exec(
        update(AreaInvitation)
        .where(
            col(AreaInvitation.id) == invitation.id,
            col(AreaInvitation.status) == InvitationStatus.PENDING,
        )
        .values(status=new_status, updated_at=utc_now())
    )
    if result.rowcount != 1:
        session.rollback()
        raise InvitationNotPendingError()


def accept_invitation(
    session: Session, user: User, area_id: uuid.UUID, invitation_id: uuid.UUID
) -> tuple[AreaMembership, AreaInvitation]:
    """Accept an invitation or join request and create the membership."""
    invitation = _get_invitation(session, area_id, invitation_id)
    _authorize_answer(session, user, invitation)
    if invitation.status != InvitationStatus.PENDING:
        raise InvitationNotPendingError()

    if invitation.type == InvitationType.JOIN_REQUEST:
        member_id = invitation.sender_id
    else:
        member_id = user.id

    _claim_pending(session, invitation, InvitationStatus.ACCEPTED)

    membership = find_membership(session, area_id, member_id)
    if membership is None:
        membership = AreaMembership(area_id=area_id, user_id=member_id)
        session.add(membership)
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        raise AlreadyMemberError() from e

    session.refresh(membership)
    session.refresh(invitation)
    logger.info(
        "Invitation accepted",
        extra={
            "area_id": str(area_id),
            "invitation_id": str(invitation_id),
            "user_id": str(member_id),
        },
    )
    return membership, invitation


def reject_invitation(
    session: Session, user: User, area_id: uuid.UUID, invitation_id: uuid.UUID
) -> AreaInvitation:
    invitation = _get_invitation(session, area_id, invitation_id)
    _authorize_answer(session, user, invitation)
    if invitation.status != InvitationStatus.PENDING:
        raise InvitationNotPendingError()

    _claim_pending(session, invitation, InvitationStatus.REJECTED)
    session.commit()
    session.refresh(invitation)
    logger.info(
        "Invitation rejected",
        extra={"area_id": str(area_id), "invitation_id": str(invitation_id)},
    )
    return invitation


# --- new-event notification --------------------------------------------------


def record_new_event(
    session: Session, point: LatLng, author_id: uuid.UUID
) -> list[User]:
    """Count a new event against every area whose circle contains it.

    Bumps ``new_events_count`` of members with notifications enabled, except
    the author, and returns those members so the caller can push-notify them.
    Does not commit.
    """
    # An area can only contain the point if its center lies within the largest
    # allowed radius of it.
    box = circle_bounds(point, MAX_AREA_RADIUS)
    candidates = session.exec(
        select(AreaOfInterest).where(
            col(AreaOfInterest.latitude).between(box.min_latitude, box.max_latitude),
            col(AreaOfInterest.longitude).between(box.min_longitude, box.max_longitude),
        )
    ).all()
    containing = [
        area
        for area in candidates
        if is_within_radius(point, LatLng(area.latitude, area.longitude), area.radius)
    ]
    if not containing:
        return []

    memberships = session.exec(
        select(AreaMembership).where(
            col(AreaMembership.area_id).in_([area.id for area in containing]),
            AreaMembership.user_id != author_id,
            col(AreaMembership.notifications_enabled).is_(True),
        )
    ).all()

    recipients: dict[uuid.UUID, User] = {}
    for membership in memberships:
        membership.new_events_count += 1
        session.add(membership)
        if membership.user_id not in recipients:
            member = session.get(User, membership.user_id)
            if member:
                recipients[member.id] = member
    return list(recipients.values())
