"""App-wide exception hierarchy.

Every expected failure of a domain operation is one of these classes. Each
carries the HTTP status code and a stable ``error_type`` code that the mobile
client maps to a localized message.
"""


class AppException(Exception):
    """Base exception for all application errors."""

    status_code: int = 500
    error_type: str = "internal_error"

    def __init__(self, message: str = "An unexpected error occurred"):
        self.message = message
        super().__init__(message)


# Validation errors (400)
class ValidationError(AppException):
    """Malformed or out-of-range input."""

    status_code = 400
    error_type = "validation_error"

    def __init__(self, message: str = "Validation failed"):
        super().__init__(message)


# Authorization errors (403)
class AuthorizationError(AppException):
    """Caller lacks the role, ownership or session the operation requires."""

    status_code = 403
    error_type = "authorization_error"

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


class ForbiddenError(AuthorizationError):
    """Resource exists but is switched off for everyone."""

    error_type = "forbidden"

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)


# Authentication errors (401)
class AuthenticationError(AuthorizationError):
    """No authenticated user could be established for the request."""

    status_code = 401
    error_type = "authentication_error"

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message)


# Not found errors (404)
class NotFoundError(AppException):
    """Referenced entity does not exist."""

    status_code = 404
    error_type = "not_found"

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message)


# Conflict errors (409)
class ConflictError(AppException):
    """Duplicate request or unique-constraint violation."""

    status_code = 409
    error_type = "conflict"

    def __init__(self, message: str = "Resource conflict"):
        super().__init__(message)


class InvalidStateError(AppException):
    """Operation is illegal for the entity's current state."""

    status_code = 409
    error_type = "invalid_state"

    def __init__(self, message: str = "Operation not allowed in the current state"):
        super().__init__(message)

