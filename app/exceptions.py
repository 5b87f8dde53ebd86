"""
Domain exceptions raised by the service layer.

Routes translate these into HTTP errors; services never raise HTTPException.
"""

from enum import Enum


class ValidationError(ValueError):
    """Local input validation failed before any network call."""


class PermissionDeniedError(RuntimeError):
    """The acting user is not allowed to perform the mutation."""


class SessionRevokedError(RuntimeError):
    """An authenticated identity has no profile document (account removed)."""


class NotWhitelistedError(RuntimeError):
    """Email was not pre-registered by an administrator."""


class AuthErrorCode(str, Enum):
    """Categories of auth identity service failures."""

    EMAIL_ALREADY_IN_USE = "email-already-in-use"
    INVALID_EMAIL = "invalid-email"
    WEAK_PASSWORD = "weak-password"
    INVALID_CREDENTIALS = "invalid-credentials"
    UNKNOWN = "unknown"


class AuthServiceError(RuntimeError):
    """The external auth identity service rejected a call."""

    def __init__(self, code: AuthErrorCode, message: str = ""):
        super().__init__(message or code.value)
        self.code = code


class RegistrationError(RuntimeError):
    """Self-activation failed with a user-facing category."""

    def __init__(self, code: AuthErrorCode, message: str):
        super().__init__(message)
        self.code = code
