class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class ShiftAlreadyActive(ValidationError):
    """Raised on check-in while the user still has an open record."""

    def __init__(self, message: str = "You already have an active shift. Check out before checking in again."):
        super().__init__(message)


class NoActiveShift(ValidationError):
    """Raised on check-out when the user has no open record."""

    def __init__(self, message: str = "No active shift to check out from."):
        super().__init__(message)


class AuthenticationError(DomainError):
    """Raised when credentials or device binding reject a login."""


class UserNotFound(AuthenticationError):
    def __init__(self, message: str = "User not found. Check the username or ask your hospital manager."):
        super().__init__(message)


class DeviceOwnedByOther(AuthenticationError):
    def __init__(self, message: str = "This device is registered to another staff member. Use your own device."):
        super().__init__(message)


class AccountBoundElsewhere(AuthenticationError):
    def __init__(
        self,
        message: str = "This account is bound to a different device. Ask an administrator to reset your device binding.",
    ):
        super().__init__(message)


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class LocationUnavailable(DomainError):
    """Raised when no position fix could be obtained (unsupported, denied or timed out)."""

    def __init__(self, message: str = "Could not retrieve location. Enable location services and try again."):
        super().__init__(message)


class CorruptPayload(DomainError):
    """Raised when a manual transfer payload cannot be decoded or has the wrong shape."""

    def __init__(self, message: str = "Invalid data code. The payload could not be decoded."):
        super().__init__(message)


class RemoteUnreachable(DomainError):
    """Raised by remote store backends when the network call fails or times out."""
