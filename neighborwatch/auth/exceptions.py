"""Auth domain exceptions.

Failures of establishing who the caller is.
"""

from neighborwatch.core.exceptions import AuthenticationError


class InvalidCredentialsError(AuthenticationError):
    """Raised when no credentials were presented."""

    error_type = "invalid_credentials"

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class InvalidTokenError(AuthenticationError):
    """Raised when authentication token is invalid or expired."""

    error_type = "invalid_token"

    def __init__(self, message: str = "Invalid authentication token"):
        super().__init__(message)


class SessionCookieError(AuthenticationError):
    """Raised when session cookie verification fails."""

    error_type = "session_cookie_error"

    def __init__(self, message: str = "Session cookie error"):
        super().__init__(message)
