"""
Domain exceptions raised by services and translated into the response envelope.

Services raise these instead of HTTPException so they stay usable from
background jobs and scripts. The handlers in app.main map each class to
its status code.
"""

from fastapi import status


class AppError(Exception):
    """Base class for errors that are safe to show to the caller."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or missing input, or a state transition that is not allowed."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"


class NotFoundError(AppError):
    """Referenced post or comment does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class AuthenticationError(AppError):
    """Missing, invalid or expired credentials."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authenticated"


class PermissionDeniedError(AppError):
    """Operation is disabled or not permitted for this caller."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Operation not permitted"


class StoreError(AppError):
    """Persistence failed; the message shown to callers is always generic."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"
