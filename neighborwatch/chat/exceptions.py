"""Found-object chat exceptions."""

from neighborwatch.core.exceptions import (
    AuthorizationError,
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)


class QrCodeNotFoundError(NotFoundError):
    error_type = "qr_not_found"

    def __init__(self, message: str = "QR code not registered"):
        super().__init__(message)


class QrDisabledError(ForbiddenError):
    error_type = "qr_disabled"

    def __init__(self, message: str = "The owner has disabled contact for this object"):
        super().__init__(message)


class DeviceWithoutOwnerError(ValidationError):
    error_type = "device_without_owner"

    def __init__(self, message: str = "This object has no owner to contact"):
        super().__init__(message)


class ChatNotFoundError(NotFoundError):
    error_type = "chat_not_found"

    def __init__(self, message: str = "Chat not found"):
        super().__init__(message)


class InvalidChatSessionError(AuthorizationError):
    error_type = "invalid_chat_session"

    def __init__(self, message: str = "Invalid chat session"):
        super().__init__(message)


class ChatOwnerRequiredError(AuthorizationError):
    error_type = "chat_owner_required"

    def __init__(self, message: str = "Only the owner of the object can do this"):
        super().__init__(message)


class ChatNotActiveError(InvalidStateError):
    error_type = "chat_not_active"

    def __init__(self, message: str = "This chat is no longer active"):
        super().__init__(message)


class OwnDeviceContactError(ValidationError):
    error_type = "cannot_contact_own_device"

    def __init__(self, message: str = "You cannot open a chat about your own object"):
        super().__init__(message)


class ActiveChatExistsError(ConflictError):
    error_type = "active_chat_exists"

    def __init__(self, message: str = "You already have an active chat about this object"):
        super().__init__(message)


class ChatFinderRequiredError(AuthorizationError):
    error_type = "chat_finder_required"

    def __init__(self, message: str = "Only the finder of the object can do this"):
        super().__init__(message)
