"""Device domain exceptions."""

from neighborwatch.core.exceptions import AuthorizationError, ConflictError, NotFoundError


class DeviceNotFoundError(NotFoundError):
    error_type = "device_not_found"

    def __init__(self, message: str = "Device not found"):
        super().__init__(message)


class DeviceOwnershipError(AuthorizationError):
    error_type = "device_not_owned"

    def __init__(self, message: str = "This device belongs to someone else"):
        super().__init__(message)


class DeviceExistsError(ConflictError):
    error_type = "device_exists"

    def __init__(self, message: str = "A device with this IMEI is already registered"):
        super().__init__(message)


class PhoneDeviceNotFoundError(NotFoundError):
    error_type = "phone_device_not_found"

    def __init__(self, message: str = "Phone device not registered"):
        super().__init__(message)
