"""Domain error taxonomy.

Services raise these before mutating anything. Each class carries the HTTP
status it maps to; the global handler in ``pinory.middleware.error_handler``
renders them as ``{"error": message}``.
"""

from __future__ import annotations

from typing import Any


class PinoryError(Exception):
    """Base class for errors that map to a client-visible HTTP response."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, **extra: Any) -> None:  # noqa: ANN401
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, **self.extra}


class UnauthorizedError(PinoryError):
    status_code = 401
    default_message = "Unauthorized"


class ForbiddenError(PinoryError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(PinoryError):
    status_code = 404
    default_message = "Not found"


class InvalidStateError(PinoryError):
    """Action is not valid given the entity's current state."""

    status_code = 400
    default_message = "Invalid state"


class AlreadyFriendsError(InvalidStateError):
    default_message = "You are already friends"


class ValidationError(PinoryError):
    """Malformed or semantically invalid input."""

    status_code = 400
    default_message = "Invalid request"


class SelfInviteError(ValidationError):
    default_message = "Cannot accept your own invitation"


class ConflictError(PinoryError):
    status_code = 409
    default_message = "Resource already exists"


class ExpiredError(PinoryError):
    status_code = 410
    default_message = "Invitation has expired"


class UsageExceededError(PinoryError):
    status_code = 400
    default_message = "Invitation has reached maximum usage"


class GenerationExhaustedError(PinoryError):
    """Bounded retry loop for a unique random code ran out of attempts."""

    status_code = 500
    default_message = "Failed to generate a unique code"


class InternalError(PinoryError):
    status_code = 500
