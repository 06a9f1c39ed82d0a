"""
Application error taxonomy.

Services raise these; the exception handlers in app.api.errors turn each one
into the `{status: false, message}` envelope with its status code. Some call
sites keep the status codes clients already rely on (e.g. signin failures are
400, not 401), so every error accepts a per-instance override.
"""

from typing import Optional

from fastapi import status


class AppError(Exception):
    """Base error carrying a user-safe message and an HTTP status code."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    kind: str = "internal"

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_envelope(self) -> dict:
        return {"status": False, "message": self.message}

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(status_code={self.status_code}, message={self.message!r})>"


class ValidationError(AppError):
    """Malformed or inconsistent input."""

    status_code = status.HTTP_400_BAD_REQUEST
    kind = "validation"


class AuthenticationError(AppError):
    """Bad credentials or a missing/invalid bearer token."""

    status_code = status.HTTP_401_UNAUTHORIZED
    kind = "authentication"


class AuthorizationError(AppError):
    """Authenticated, but the caller's role does not allow the operation."""

    status_code = status.HTTP_403_FORBIDDEN
    kind = "authorization"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    kind = "not_found"


class ConflictError(AppError):
    """Duplicate resource."""

    status_code = status.HTTP_409_CONFLICT
    kind = "conflict"


class InternalError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    kind = "internal"
