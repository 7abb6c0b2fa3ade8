"""Error types raised by the auth core and the store.

Routes translate these into HTTP responses at the boundary.
"""

from enum import Enum


class GymError(Exception):
    """Base class for expected, caller-facing failures."""


class ValidationFailure(GymError):
    """Malformed input, carrying per-field reasons."""

    def __init__(self, errors: dict[str, list[str]]):
        super().__init__("Validation failed.")
        self.errors = errors


class AuthFailureReason(str, Enum):
    INVALID_CREDENTIALS = "invalid_credentials"
    INVALID_TOKEN = "invalid_or_expired"
    FORBIDDEN = "forbidden"


_AUTH_FAILURE_MESSAGES = {
    AuthFailureReason.INVALID_CREDENTIALS: "Invalid email or password.",
    AuthFailureReason.INVALID_TOKEN: "Invalid or expired token.",
    AuthFailureReason.FORBIDDEN: "You do not have permission to perform this action.",
}


class AuthFailure(GymError):
    def __init__(self, reason: AuthFailureReason):
        super().__init__(_AUTH_FAILURE_MESSAGES[reason])
        self.reason = reason

    @property
    def message(self) -> str:
        return _AUTH_FAILURE_MESSAGES[self.reason]

    @property
    def status_code(self) -> int:
        return 403 if self.reason is AuthFailureReason.FORBIDDEN else 401


class NotFound(GymError):
    def __init__(self, message: str = "Not found."):
        super().__init__(message)
        self.message = message


class ConcurrencyConflict(GymError):
    """An update raced with another writer and the row still exists."""
