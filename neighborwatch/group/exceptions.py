"""Group domain exceptions."""

from neighborwatch.core.exceptions import AuthorizationError, ConflictError, NotFoundError


class GroupNotFoundError(NotFoundError):
    error_type = "group_not_found"

    def __init__(self, message: str = "Group not found"):
        super().__init__(message)


class GroupMembershipRequiredError(AuthorizationError):
    error_type = "group_membership_required"

    def __init__(self, message: str = "You are not a member of this group"):
        super().__init__(message)


class GroupAdminRequiredError(AuthorizationError):
    error_type = "group_admin_required"

    def __init__(self, message: str = "Only group admins can do this"):
        super().__init__(message)


class GroupCreatorError(AuthorizationError):
    error_type = "group_creator_required"

    def __init__(self, message: str = "Only the group creator can do this"):
        super().__init__(message)


class AlreadyGroupMemberError(ConflictError):
    error_type = "already_group_member"

    def __init__(self, message: str = "User is already a member of this group"):
        super().__init__(message)


class GroupMemberNotFoundError(NotFoundError):
    error_type = "group_member_not_found"

    def __init__(self, message: str = "User is not a member of this group"):
        super().__init__(message)
