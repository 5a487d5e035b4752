class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class InvalidInput(ValidationError):
    """Raised when a coordinate or territory cannot be interpreted at all."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced user or record does not exist."""


class LocationError(DomainError):
    """Base class for failures of the device location collaborator."""


class PermissionDenied(LocationError):
    """Location permission was refused or revoked."""


class LocationUnavailable(LocationError):
    """No fix could be obtained (timeout, provider error, GPS off)."""


class SessionClosed(DomainError):
    """An automated sample arrived for a user who is no longer checked in."""
