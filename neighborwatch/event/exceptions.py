"""Event domain exceptions."""

from neighborwatch.core.exceptions import AuthorizationError, InvalidStateError, NotFoundError


class EventNotFoundError(NotFoundError):
    error_type = "event_not_found"

    def __init__(self, message: str = "Event not found"):
        super().__init__(message)


class EventAuthorRequiredError(AuthorizationError):
    error_type = "event_author_required"

    def __init__(self, message: str = "Only the event author can do this"):
        super().__init__(message)


class InvalidEventTransitionError(InvalidStateError):
    error_type = "invalid_event_transition"

    def __init__(self, message: str = "Closed events cannot be reopened"):
        super().__init__(message)
