"""Error taxonomy shared by the stores, the admin gateway and the schema bootstrap.

Each error carries the HTTP status the gateway maps it to. Stores raise these
instead of ``HTTPException`` so they stay usable from scripts and tests.
"""

from fastapi import status


class AppError(Exception):
    """Base class for every error the API turns into a failure envelope."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or semantically invalid input."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class AuthenticationError(AppError):
    """Missing, malformed, expired, or otherwise unverifiable bearer token."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Could not validate credentials"


class AuthorizationError(AppError):
    """A valid identity without the privilege the operation needs."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Insufficient permissions"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ConflictError(AppError):
    """Uniqueness or dependency violation."""

    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource conflict"


class BookingConflictError(ConflictError):
    """The requested dates overlap a confirmed reservation for the same room."""

    default_message = "Dates conflict with an existing reservation"


class InvalidTransitionError(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Invalid status transition"


class OperationTimeoutError(AppError, TimeoutError):
    """The database or an upstream collaborator did not answer in time."""

    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    default_message = "The operation timed out"


class InternalError(AppError):
    """An unexpected failure. The details are logged, never sent to the client."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"


class SchemaMigrationError(RuntimeError):
    """Fatal schema bootstrap failure. The migration unit was rolled back."""
