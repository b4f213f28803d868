"""
core/errors.py -- Domain error hierarchy for TicketDesk.

Every error a request can end with is one of these classes. Services and
dependencies raise them; the exception handlers in api/main.py map each one,
exactly once, to the JSON error envelope:

    {"error": {"code": ..., "message": ..., "status": ..., "data": {...}}}

code and status_code are class attributes so the mapping needs no lookup
table. data carries structured context about the offending record (e.g. the
id that was not found, the email that collided).

Layer rule: core/ is the kernel. No imports from api/, auth/, or users/.
"""

from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base class for errors that map to a structured HTTP response."""

    code: str = "INTERNAL_ERROR"
    status_code: int = 503
    default_message: str = "Something went wrong."

    def __init__(self, message: str | None = None, data: dict[str, Any] | None = None) -> None:
        self.message = message or self.default_message
        self.data = data or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "status": self.status_code,
            "data": self.data,
        }


class InvalidTokenError(AppError):
    """Token is malformed, forged, expired, issued for another purpose, or orphaned."""

    code = "INVALID_TOKEN"
    status_code = 401
    default_message = "Invalid token."


class UnauthorizedError(AppError):
    """No usable credentials, or credentials that match no user."""

    code = "UNAUTHORIZED"
    status_code = 401
    default_message = "Authentication required."


class ValidationError(AppError):
    """Input shape, uniqueness, or business-rule violation."""

    code = "VALIDATION_ERROR"
    status_code = 422
    default_message = "There were validation errors."


class EntityNotFoundError(AppError):
    code = "ENTITY_NOT_FOUND"
    status_code = 404

    def __init__(self, entity: str, data: dict[str, Any] | None = None) -> None:
        self.entity = entity
        super().__init__(f"{entity} not found.", data)


class InternalError(AppError):
    """Fallback for unexpected failures. The message never carries internals."""
