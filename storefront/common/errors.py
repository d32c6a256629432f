"""Error taxonomy shared by the service layer and the HTTP boundary."""

from __future__ import annotations


class ServiceError(Exception):
    """Base class for failures reported to callers through the error envelope."""

    status_code = 500
    default_message = "Unexpected failure"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ServiceError):
    """Malformed or missing input; raised before any data-store access."""

    status_code = 400
    default_message = "Invalid request"


class AuthorizationError(ServiceError):
    """Missing or invalid identity."""

    status_code = 401
    default_message = "Authentication required"


class PermissionDeniedError(AuthorizationError):
    """Authenticated, but the role does not allow the operation."""

    status_code = 403
    default_message = "Insufficient permissions"


class NotFoundError(ServiceError):
    """Record absent, or not owned by the caller."""

    status_code = 404
    default_message = "Not found"


class ConflictError(ServiceError):
    status_code = 409
    default_message = "Request conflicts with the current state"


class DependencyError(ServiceError):
    """A collaborator (database, cache, lock) failed."""

    status_code = 500
    default_message = "Service dependency failure"
