"""
Error taxonomy for the user-account service.

Every failure the core raises derives from ``UserServiceError`` and carries
the HTTP status and the text the API boundary is allowed to show.
"""

from __future__ import annotations


class UserServiceError(Exception):
    """Base class for all service failures."""

    status_code: int = 500
    public_text: str | None = None

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__

    @property
    def public_message(self) -> str:
        return self.public_text or self.message


# ── Caller faults ──────────────────────────────────────────────────────


class ValidationError(UserServiceError):
    status_code = 400


class DuplicateEmail(UserServiceError):
    status_code = 409
    public_text = "Email already registered"


class AuthenticationError(UserServiceError):
    """Login failed. Both subclasses report the same public text."""

    status_code = 401
    public_text = "Invalid email or password"


class UserNotFound(AuthenticationError):
    pass


class InvalidCredentials(AuthenticationError):
    pass


# ── Internal / infrastructure ──────────────────────────────────────────


class InternalError(UserServiceError):
    status_code = 500
    public_text = "Internal server error"


class EncodingError(InternalError):
    """Password hashing failed."""


class IssuanceError(InternalError):
    """Login token could not be signed or encoded."""


class DuplicateKeyError(UserServiceError):
    """The store rejected an insert on its unique email constraint."""

    status_code = 409
    public_text = "Email already registered"


class StoreUnavailable(UserServiceError):
    """The user store could not be reached; safe to retry later."""

    status_code = 503
    public_text = "Service temporarily unavailable"
