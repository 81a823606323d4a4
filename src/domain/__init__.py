"""
Domain layer - Pure business logic with zero web framework imports.

This package contains the account lifecycle for the help desk: registration,
dual-channel verification (link token or OTP), resend and login. It defines
its own port interfaces for infrastructure abstraction, ensuring true
hexagonal architecture decoupling.
"""

from .accounts import AccountService, LoginResult, Registration, normalize_email, normalize_phone
from .exceptions import (
    AlreadyVerifiedError,
    AuthError,
    ConflictError,
    ErrorKind,
    ExpiredOtpError,
    InvalidCredentialsError,
    InvalidOtpError,
    InvalidSessionError,
    InvalidTokenError,
    NotFoundError,
    StoreError,
    UnverifiedAccountError,
    ValidationError,
)
from .notifications import NotificationDispatcher
from .ports import Account, AccountStore, Notifier, Role
from .sessions import IssuedSession, SessionClaims, SessionIssuer

__all__ = [
    "Account",
    "AccountService",
    "AccountStore",
    "AlreadyVerifiedError",
    "AuthError",
    "ConflictError",
    "ErrorKind",
    "ExpiredOtpError",
    "InvalidCredentialsError",
    "InvalidOtpError",
    "InvalidSessionError",
    "InvalidTokenError",
    "IssuedSession",
    "LoginResult",
    "NotFoundError",
    "NotificationDispatcher",
    "Notifier",
    "Registration",
    "Role",
    "SessionClaims",
    "SessionIssuer",
    "StoreError",
    "UnverifiedAccountError",
    "ValidationError",
    "normalize_email",
    "normalize_phone",
]
