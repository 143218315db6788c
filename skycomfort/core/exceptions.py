"""
Application Error Types

Errors raised by repositories and services carry the HTTP status code
they translate to. Exception handlers in ``skycomfort.main`` render them
into the standard ``{"status": "error", "message": ...}`` envelope.

Operational errors (bad input, missing records, auth failures) always
expose their message. Non-operational errors expose it only when the
settings allow error details.
"""

from typing import Optional


class AppError(Exception):
    """Base class for errors that map to an HTTP response."""

    status_code: int = 500
    is_operational: bool = True

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        is_operational: Optional[bool] = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if is_operational is not None:
            self.is_operational = is_operational

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.status_code}: {self.message}>"


class ValidationError(AppError):
    """Missing or malformed input."""
    status_code = 400


class AuthenticationError(AppError):
    """Missing, invalid or expired credentials."""
    status_code = 401


class PermissionDeniedError(AppError):
    """Authenticated but not allowed."""
    status_code = 403


class NotFoundError(AppError):
    """Referenced record does not exist."""
    status_code = 404


def internal_error(exc: Exception, fallback: str, expose_details: bool) -> AppError:
    """
    Wrap an unexpected exception caught at a route boundary.

    Args:
        exc: The original exception
        fallback: Route-specific message used when details are hidden
        expose_details: Whether the original message may reach the client
    """
    message = str(exc) if expose_details and str(exc) else fallback
    return AppError(message, status_code=500, is_operational=False)
