"""
Session credentials - signed, time-boxed JWTs issued at login.

Tokens are HS256-signed with a server-held secret and carry the account id
(sub), email and role. The issuer claim is verified on decode.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import jwt

from .exceptions import InvalidSessionError
from .ports import Account, Role

_ALGORITHM = "HS256"

# HS256 keys shorter than the digest size are rejected at startup.
MIN_SECRET_LENGTH = 32


@dataclass(frozen=True)
class IssuedSession:
    """A freshly signed session credential."""

    token: str
    expires_at: datetime


@dataclass(frozen=True)
class SessionClaims:
    """Verified claims extracted from a session credential."""

    account_id: str
    email: str
    role: Role
    expires_at: datetime


@dataclass
class SessionIssuer:
    """Issues and verifies session credentials."""

    secret: str
    ttl: timedelta = timedelta(days=7)
    issuer: str = "helpdesk-auth"

    def __post_init__(self) -> None:
        if not self.secret or len(self.secret) < MIN_SECRET_LENGTH:
            raise ValueError(
                f"Session signing secret must be at least {MIN_SECRET_LENGTH} characters"
            )

    def issue(self, account: Account, now: datetime | None = None) -> IssuedSession:
        """
        Sign a session credential for a verified account.

        Args:
            account: The authenticated account
            now: Issue time (defaults to current UTC time)

        Returns:
            IssuedSession with the encoded token and its expiry
        """
        issued_at = now or datetime.now(UTC)
        expires_at = issued_at + self.ttl
        payload = {
            "sub": account.id,
            "email": account.email,
            "role": account.role.value,
            "iss": self.issuer,
            "iat": issued_at,
            "exp": expires_at,
        }
        token = jwt.encode(payload, self.secret, algorithm=_ALGORITHM)
        return IssuedSession(token=token, expires_at=expires_at)

    def decode(self, token: str) -> SessionClaims:
        """
        Verify signature, expiry and issuer.

        Raises:
            InvalidSessionError: On any verification failure
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[_ALGORITHM],
                issuer=self.issuer,
                options={"require": ["sub", "exp", "iat", "iss"]},
            )
            return SessionClaims(
                account_id=payload["sub"],
                email=payload["email"],
                role=Role(payload["role"]),
                expires_at=datetime.fromtimestamp(payload["exp"], UTC),
            )
        except (jwt.InvalidTokenError, KeyError, ValueError) as exc:
            raise InvalidSessionError() from exc
