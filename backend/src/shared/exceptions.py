from datetime import datetime
from typing import Any


class AppError(Exception):
    """Base exception for application errors."""

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str = "An error occurred",
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self, correlation_id: str | None = None) -> dict[str, Any]:
        """Render the error body shared by every failed response."""
        error: dict[str, Any] = {
            "code": self.error_code,
            "message": self.message,
            "correlationId": correlation_id,
        }
        if self.details:
            error["details"] = self.details
        return {"error": error}


class BadRequestError(AppError):
    """Raised when the request is well-formed but not acceptable in the current state."""

    status_code = 400
    error_code = "BAD_REQUEST"

    def __init__(self, message: str = "Bad request", details: dict[str, Any] | None = None):
        super().__init__(message, details)


class InvalidTransitionError(BadRequestError):
    """Raised when an article lifecycle transition is not allowed."""


class AuthenticationError(AppError):
    """Raised when credentials are missing or invalid."""

    status_code = 401
    error_code = "UNAUTHORIZED"

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class AuthorizationError(AppError):
    """Raised when a user lacks permission for an action."""

    status_code = 403
    error_code = "FORBIDDEN"

    def __init__(self, message: str = "Permission denied"):
        super().__init__(message)


class NotFoundError(AppError):
    """Raised when a requested resource does not exist."""

    status_code = 404
    error_code = "NOT_FOUND"

    def __init__(self, resource: str = "Resource", id: str = ""):
        super().__init__(f"{resource} not found: {id}" if id else f"{resource} not found")


class ConflictError(AppError):
    """Raised when a write clashes with existing state (duplicate names, held locks)."""

    status_code = 409
    error_code = "CONFLICT"

    def __init__(self, message: str = "Resource conflict", details: dict[str, Any] | None = None):
        super().__init__(message, details)


class LockConflictError(ConflictError):
    """Raised when an edit lock cannot be acquired because someone else holds it."""

    error_code = "LOCK_CONFLICT"

    def __init__(self, holder_name: str, locked_at: datetime, expires_at: datetime):
        super().__init__(
            f"Article is currently being edited by {holder_name}",
            details={
                "lockedByName": holder_name,
                "lockedAt": locked_at.isoformat(),
                "expiresAt": expires_at.isoformat(),
            },
        )
        self.holder_name = holder_name


class ValidationFailedError(AppError):
    """Raised with every offending field when input validation fails."""

    status_code = 422
    error_code = "VALIDATION_ERROR"

    def __init__(self, errors: dict[str, list[str]], message: str = "Validation failed"):
        super().__init__(message)
        self.validation_errors = errors

    def to_dict(self, correlation_id: str | None = None) -> dict[str, Any]:
        body = super().to_dict(correlation_id)
        body["error"]["validationErrors"] = self.validation_errors
        return body


class ResourceLockedError(AppError):
    """Raised when a mutation is blocked by another principal's live edit lock."""

    status_code = 423
    error_code = "RESOURCE_LOCKED"

    def __init__(self, holder_name: str, locked_at: datetime, expires_at: datetime):
        super().__init__(
            f"Article is currently being edited by {holder_name}",
            details={
                "lockedByName": holder_name,
                "lockedAt": locked_at.isoformat(),
                "expiresAt": expires_at.isoformat(),
            },
        )
        self.holder_name = holder_name


class InternalConsistencyError(AppError):
    """Raised when stored state contradicts an invariant (e.g. a version written twice)."""

    error_code = "INTERNAL_CONSISTENCY_ERROR"


class ServiceUnavailableError(AppError):
    """Raised when the storage backend is temporarily unavailable."""

    status_code = 503
    error_code = "SERVICE_UNAVAILABLE"

    def __init__(self, message: str = "Service temporarily unavailable"):
        super().__init__(message)


class OperationTimeoutError(AppError):
    """Raised when an operation gives up waiting on a backend."""

    status_code = 504
    error_code = "TIMEOUT"

    def __init__(self, message: str = "Operation timed out"):
        super().__init__(message)
