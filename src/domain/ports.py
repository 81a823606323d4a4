"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the Account entity and the interfaces (ports) that the
domain requires from infrastructure. Adapters implement these protocols.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Protocol


class Role(str, Enum):
    """Authorization tag carried by an account and its session credential."""

    ADMIN = "admin"
    USER = "user"


@dataclass
class Account:
    """
    Account record - the sole entity of the service.

    Invariants (maintained by AccountService, persisted by the store):
    - is_verified implies verification_token, otp and otp_expires_at are None
    - otp is not None implies otp_expires_at is not None
    """

    id: str
    email: str
    name: str
    password_hash: str
    role: Role
    phone: str | None
    is_verified: bool
    verification_token: str | None
    otp: str | None
    otp_expires_at: datetime | None
    created_at: datetime
    updated_at: datetime

    def mark_verified(self, now: datetime) -> None:
        """Terminal transition: flip the flag and clear every secret."""
        self.is_verified = True
        self.verification_token = None
        self.otp = None
        self.otp_expires_at = None
        self.updated_at = now


# Mutators run inside the store's atomic read-modify-write. Raising aborts
# the write; returning normally persists the (mutated) account.
AccountMutator = Callable[[Account], None]


class AccountStore(Protocol):
    """Port interface for account persistence."""

    def create(self, account: Account) -> bool:
        """
        Insert a new account.

        Returns:
            True if stored, False if the email is already taken
        """
        ...

    def get_by_email(self, email: str) -> Account | None:
        """Fetch an account by normalized email, or None."""
        ...

    def update_by_email(self, email: str, mutate: AccountMutator) -> Account | None:
        """
        Atomically read, mutate and write the account keyed by email.

        The mutator sees the current record while the store holds the
        record lock. Exceptions raised by the mutator propagate and nothing
        is written.

        Returns:
            The updated account, or None if no account has this email
            (the mutator is not called)
        """
        ...

    def update_by_token(self, token: str, mutate: AccountMutator) -> Account | None:
        """
        Same as update_by_email, keyed by exact verification_token match.

        Returns:
            The updated account, or None if no account holds this token
        """
        ...

    def ping(self) -> None:
        """Raise StoreError if the store is unreachable."""
        ...


class Notifier(Protocol):
    """
    Port interface for outbound delivery.

    Both methods are best-effort: they report success as a bool and are
    expected not to raise. An email may carry an HTML alternative
    alongside its plain-text body.
    """

    def send_email(self, to: str, subject: str, body: str, html: str | None = None) -> bool: ...

    def send_sms(self, to: str, body: str) -> bool: ...
