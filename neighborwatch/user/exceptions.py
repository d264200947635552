"""User domain exceptions."""

from neighborwatch.core.exceptions import AuthorizationError, ConflictError, NotFoundError


class UserNotFoundError(NotFoundError):
    """Raised when user cannot be found."""

    error_type = "user_not_found"

    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class UserInactiveError(AuthorizationError):
    """Raised when user is inactive in local database."""

    error_type = "user_inactive"

    def __init__(self, message: str = "User is inactive"):
        super().__init__(message)


class UserExistsError(ConflictError):
    """Raised when a profile is already registered for the credential or email."""

    error_type = "user_exists"

    def __init__(self, message: str = "User already registered"):
        super().__init__(message)
