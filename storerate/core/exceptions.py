"""Domain errors and their HTTP rendering.

Services and permission checks raise these; the handlers registered in
``storerate.main`` turn them into the standard response envelope.
"""

from fastapi import status


class AppError(Exception):
    """Base class for errors that map onto a client-facing response."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_message: str = "Bad request"

    def __init__(self, message: str | None = None, errors: list[str] | None = None) -> None:
        self.message = message or self.default_message
        self.errors = errors
        super().__init__(self.message)

    @property
    def headers(self) -> dict[str, str] | None:
        return None


class ValidationFailed(AppError):
    """One or more input rules were violated. ``errors`` lists every one."""

    default_message = "Validation failed"

    def __init__(self, errors: list[str], message: str | None = None) -> None:
        super().__init__(message, errors)


class BadRequest(AppError):
    default_message = "Bad request"


class Conflict(AppError):
    """A unique value is already taken. Reported as 400 like other input errors."""

    default_message = "Resource already exists"


class Unauthenticated(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"

    @property
    def headers(self) -> dict[str, str] | None:
        return {"WWW-Authenticate": "Bearer"}


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Insufficient permissions"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"
