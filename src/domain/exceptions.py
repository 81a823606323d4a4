"""
Domain exceptions - Closed error taxonomy for the account service.

Every caller-facing failure is exactly one ErrorKind. The API layer maps
each kind to an HTTP status (src/api/errors.py).
"""

from enum import Enum
from typing import ClassVar


class ErrorKind(str, Enum):
    """Machine-readable error kinds returned alongside the human message."""

    VALIDATION = "VALIDATION"
    CONFLICT = "CONFLICT"
    INVALID_TOKEN = "INVALID_TOKEN"
    INVALID_OTP = "INVALID_OTP"
    EXPIRED_OTP = "EXPIRED_OTP"
    ALREADY_VERIFIED = "ALREADY_VERIFIED"
    NOT_FOUND = "NOT_FOUND"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    UNVERIFIED_ACCOUNT = "UNVERIFIED_ACCOUNT"
    INVALID_SESSION = "INVALID_SESSION"
    STORE = "STORE"


class AuthError(Exception):
    """Base class for account service errors."""

    kind: ClassVar[ErrorKind]
    default_message: ClassVar[str] = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AuthError):
    """Required input missing or malformed."""

    kind = ErrorKind.VALIDATION
    default_message = "All fields are required"


class ConflictError(AuthError):
    """Normalized email is already registered."""

    kind = ErrorKind.CONFLICT
    default_message = (
        "This email is already registered. Please sign in or use a different email."
    )


class InvalidTokenError(AuthError):
    """No account holds this verification token."""

    kind = ErrorKind.INVALID_TOKEN
    default_message = "Invalid or expired verification token"


class InvalidOtpError(AuthError):
    kind = ErrorKind.INVALID_OTP
    default_message = "Invalid OTP"


class ExpiredOtpError(AuthError):
    kind = ErrorKind.EXPIRED_OTP
    default_message = "OTP has expired. Please request a new one."


class AlreadyVerifiedError(AuthError):
    """Account is verified; the caller should route to login."""

    kind = ErrorKind.ALREADY_VERIFIED
    default_message = "Account is already verified. You can log in."


class NotFoundError(AuthError):
    """No account for this email. Never raised by login."""

    kind = ErrorKind.NOT_FOUND
    default_message = "No account found with this email"


class InvalidCredentialsError(AuthError):
    """Unknown email or wrong password - deliberately indistinguishable."""

    kind = ErrorKind.INVALID_CREDENTIALS
    default_message = "Invalid credentials"


class UnverifiedAccountError(AuthError):
    kind = ErrorKind.UNVERIFIED_ACCOUNT
    default_message = "Please verify your email before logging in"


class InvalidSessionError(AuthError):
    """Session credential missing, tampered, expired or orphaned."""

    kind = ErrorKind.INVALID_SESSION
    default_message = "Invalid or expired session"


class StoreError(AuthError):
    """Persistence layer failure. Not caller-fixable."""

    kind = ErrorKind.STORE
    default_message = "Server error"
