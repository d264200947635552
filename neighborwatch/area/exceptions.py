"""Area domain exceptions."""

from neighborwatch.core.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)


class AreaNotFoundError(NotFoundError):
    error_type = "area_not_found"

    def __init__(self, message: str = "Area not found"):
        super().__init__(message)


class MembershipNotFoundError(NotFoundError):
    error_type = "membership_not_found"

    def __init__(self, message: str = "You are not a member of this area"):
        super().__init__(message)


class InvitationNotFoundError(NotFoundError):
    error_type = "invitation_not_found"

    def __init__(self, message: str = "Invitation not found"):
        super().__init__(message)


class InvalidRadiusError(ValidationError):
    error_type = "invalid_radius"


class AreaAdminRequiredError(AuthorizationError):
    error_type = "area_admin_required"

    def __init__(self, message: str = "Only area admins can do this"):
        super().__init__(message)


class AreaCreatorRequiredError(AuthorizationError):
    """Raised for operations reserved to, or forbidden to, the area's creator."""

    error_type = "area_creator_required"

    def __init__(self, message: str = "Only the area creator can do this"):
        super().__init__(message)


class AlreadyMemberError(ConflictError):
    error_type = "already_member"

    def __init__(self, message: str = "User is already a member of this area"):
        super().__init__(message)


class JoinRequestExistsError(ConflictError):
    error_type = "join_request_exists"

    def __init__(self, message: str = "A join request is already pending"):
        super().__init__(message)


class InvitationExistsError(ConflictError):
    error_type = "invitation_exists"

    def __init__(self, message: str = "An invitation is already pending"):
        super().__init__(message)


class InvitationNotPendingError(InvalidStateError):
    error_type = "invitation_not_pending"

    def __init__(self, message: str = "Invitation has already been answered"):
        super().__init__(message)
