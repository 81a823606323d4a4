"""
Account domain service - registration, verification and login.

Verification State Machine (per account)
========================================

States:
- Unverified{token, otp, expiry}: set at registration, refreshed by resend
- Verified: terminal, all secrets cleared

Transitions:
    Unverified -> Verified     VerifyByLink(token) on exact token match
    Unverified -> Verified     VerifyByOtp(email, code) on match, not expired
    Unverified -> Unverified   Resend(email): new otp + expiry, same token

Invalid Transitions (never allowed):
    Verified -> any            (Verified is terminal)

Every transition is a single atomic read-modify-write on one record
(AccountStore.update_by_email / update_by_token). Notifications are queued
after the record is persisted and never affect the outcome.
"""

import re
import secrets
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import bcrypt

from .exceptions import (
    AlreadyVerifiedError,
    ConflictError,
    ExpiredOtpError,
    InvalidCredentialsError,
    InvalidOtpError,
    InvalidSessionError,
    InvalidTokenError,
    NotFoundError,
    UnverifiedAccountError,
    ValidationError,
)
from .notifications import NotificationDispatcher
from .ports import Account, AccountStore, Role
from .sessions import IssuedSession, SessionIssuer

_NON_DIGITS = re.compile(r"\D")


def _utcnow() -> datetime:
    return datetime.now(UTC)


def normalize_email(email: str) -> str:
    """Strip whitespace and lowercase."""
    return email.strip().lower()


def normalize_phone(phone: str | None, country_code: str = "91") -> str | None:
    """
    Best-effort E.164-like normalization.

    - 10 digits: local number, prefixed with +<country_code>
    - country code + 10 digits: prefixed with +
    - any other 10+ digit string: prefixed with +
    - anything shorter (or not a string): None, never an error
    """
    if not phone or not isinstance(phone, str):
        return None
    digits = _NON_DIGITS.sub("", phone)
    if len(digits) == 10:
        return f"+{country_code}{digits}"
    if len(digits) == len(country_code) + 10 and digits.startswith(country_code):
        return f"+{digits}"
    if len(digits) >= 10:
        return f"+{digits}"
    return None


@dataclass(frozen=True)
class Registration:
    """Result of a successful registration."""

    account: Account
    verification_url: str


@dataclass(frozen=True)
class LoginResult:
    account: Account
    session: IssuedSession


@dataclass
class AccountService:
    """
    Domain service for the account lifecycle.

    Orchestrates input validation, secret generation, the verification
    state machine and session issuance. Persistence and delivery are
    delegated to the injected store and dispatcher.
    """

    store: AccountStore
    dispatcher: NotificationDispatcher
    sessions: SessionIssuer
    frontend_url: str = "http://localhost:5173"
    otp_ttl: timedelta = timedelta(minutes=10)
    bcrypt_cost: int = 10
    default_country_code: str = "91"
    clock: Callable[[], datetime] = _utcnow
    # Login runs bcrypt even for unknown emails, against this hash at the same
    # cost as stored hashes, so response time does not reveal existence.
    _dummy_hash: bytes = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._dummy_hash = bcrypt.hashpw(
            b"dummy_password_for_timing_safety", bcrypt.gensalt(rounds=self.bcrypt_cost)
        )

    def register(
        self,
        name: str,
        email: str,
        password: str,
        role: str | None = None,
        phone: str | None = None,
    ) -> Registration:
        """
        Register a new, unverified account and queue its verification secrets.

        Args:
            name: Display name
            email: Email address (will be normalized)
            password: Plaintext password (will be hashed)
            role: "admin" or "user" (defaults to "user")
            phone: Optional free-form phone number

        Returns:
            Registration with the stored account and its verification URL

        Raises:
            ValidationError: Missing field or unknown role
            ConflictError: Email already registered
            StoreError: Persistence failure
        """
        self._require(name, email, password)
        account_role = self._parse_role(role)
        normalized_email = normalize_email(email)

        if self.store.get_by_email(normalized_email) is not None:
            raise ConflictError()

        now = self.clock()
        otp = self._generate_otp()
        account = Account(
            id=str(uuid.uuid4()),
            email=normalized_email,
            name=name.strip(),
            password_hash=self._hash_password(password),
            role=account_role,
            phone=normalize_phone(phone, self.default_country_code),
            is_verified=False,
            verification_token=self._generate_verification_token(),
            otp=otp,
            otp_expires_at=now + self.otp_ttl,
            created_at=now,
            updated_at=now,
        )

        # The pre-check above is only an optimisation; create() is authoritative.
        if not self.store.create(account):
            raise ConflictError()

        verification_url = self._verification_url(account.verification_token)
        self.dispatcher.send_verification(account, verification_url, otp)
        return Registration(account=account, verification_url=verification_url)

    def verify_email(self, token: str) -> Account:
        """
        Verify an account by its link token.

        The token is single-use: success clears it, so a replay finds no
        matching record.

        Raises:
            InvalidTokenError: No account holds this token
        """
        if not token or not token.strip():
            raise InvalidTokenError()

        now = self.clock()
        account = self.store.update_by_token(token, lambda acc: acc.mark_verified(now))
        if account is None:
            raise InvalidTokenError()
        return account

    def verify_otp(self, email: str, otp: str | int | None) -> Account:
        """
        Verify an account by email + OTP.

        Checks run in order: exists, not yet verified, code matches,
        code not expired.

        Raises:
            ValidationError: Missing email or otp
            NotFoundError: No account for this email
            AlreadyVerifiedError: Account already verified
            InvalidOtpError: Code mismatch
            ExpiredOtpError: Code matched but expired (or no expiry on file)
        """
        code = "" if otp is None else str(otp).strip()
        if not email or not email.strip() or not code:
            raise ValidationError("Email and OTP are required")

        now = self.clock()

        def verify(account: Account) -> None:
            if account.is_verified:
                raise AlreadyVerifiedError()
            stored = account.otp or ""
            if not stored or not secrets.compare_digest(stored.encode(), code.encode()):
                raise InvalidOtpError()
            if account.otp_expires_at is None or now > account.otp_expires_at:
                raise ExpiredOtpError()
            account.mark_verified(now)

        account = self.store.update_by_email(normalize_email(email), verify)
        if account is None:
            raise NotFoundError()
        return account

    def resend_otp(self, email: str) -> Account:
        """
        Issue a fresh OTP and expiry, keeping the existing link token.

        Raises:
            ValidationError: Missing email
            NotFoundError: No account for this email
            AlreadyVerifiedError: Account already verified
        """
        if not email or not email.strip():
            raise ValidationError("Email is required")

        now = self.clock()

        def refresh(account: Account) -> None:
            if account.is_verified:
                raise AlreadyVerifiedError()
            otp = self._generate_otp()
            while otp == account.otp:
                otp = self._generate_otp()
            account.otp = otp
            account.otp_expires_at = now + self.otp_ttl
            account.updated_at = now

        account = self.store.update_by_email(normalize_email(email), refresh)
        if account is None:
            raise NotFoundError()

        verification_url = self._verification_url(account.verification_token)
        self.dispatcher.send_verification(account, verification_url, account.otp)
        return account

    def login(self, email: str, password: str) -> LoginResult:
        """
        Authenticate a verified account and issue a session credential.

        Unknown email and wrong password raise the same error. An existing
        but unverified account is reported as such.

        Raises:
            ValidationError: Missing email or password
            InvalidCredentialsError: Unknown email or wrong password
            UnverifiedAccountError: Account exists but is not verified
        """
        if not email or not email.strip() or not password:
            raise ValidationError()

        account = self.store.get_by_email(normalize_email(email))
        if account is None:
            bcrypt.checkpw(password.encode(), self._dummy_hash)
            raise InvalidCredentialsError()

        if not account.is_verified:
            raise UnverifiedAccountError()

        if not bcrypt.checkpw(password.encode(), account.password_hash.encode()):
            raise InvalidCredentialsError()

        session = self.sessions.issue(account, now=self.clock())
        return LoginResult(account=account, session=session)

    def current_account(self, token: str) -> Account:
        """
        Resolve a session credential to its (still existing) account.

        Raises:
            InvalidSessionError: Bad token, or the account no longer exists
        """
        claims = self.sessions.decode(token)
        account = self.store.get_by_email(claims.email)
        if account is None or account.id != claims.account_id:
            raise InvalidSessionError()
        return account

    def _require(self, name: str, email: str, password: str) -> None:
        if not name or not name.strip() or not email or not email.strip() or not password:
            raise ValidationError("All fields are required")

    def _parse_role(self, role: str | None) -> Role:
        if role is None or role == "":
            return Role.USER
        try:
            return Role(role)
        except ValueError:
            raise ValidationError("Role must be 'admin' or 'user'") from None

    def _verification_url(self, token: str | None) -> str:
        return f"{self.frontend_url.rstrip('/')}/verify-email/{token}"

    def _generate_verification_token(self) -> str:
        """32 random bytes, hex encoded (64 characters)."""
        return secrets.token_hex(32)

    def _generate_otp(self) -> str:
        """6-digit code in 100000-999999."""
        return str(100000 + secrets.randbelow(900000))

    def _hash_password(self, password: str) -> str:
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=self.bcrypt_cost)).decode()
