"""
In-memory repository adapter - Implements AccountStore protocol.

Process-local store for development and tests. Each email has its own lock,
so distinct accounts never contend. Mutators work on a copy which replaces
the stored record only when the mutator returns normally.
"""

import copy
import threading

from src.domain.ports import Account, AccountMutator


class InMemoryAccountStore:
    """
    Implements AccountStore protocol with dicts and per-record locks.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self) -> None:
        self._accounts: dict[str, Account] = {}
        self._record_locks: dict[str, threading.Lock] = {}
        # Guards the two dicts themselves, never held during a mutation.
        self._guard = threading.Lock()

    def create(self, account: Account) -> bool:
        with self._guard:
            if account.email in self._accounts:
                return False
            self._accounts[account.email] = copy.deepcopy(account)
            self._record_locks[account.email] = threading.Lock()
            return True

    def get_by_email(self, email: str) -> Account | None:
        with self._guard:
            account = self._accounts.get(email)
            return copy.deepcopy(account) if account is not None else None

    def update_by_email(self, email: str, mutate: AccountMutator) -> Account | None:
        with self._guard:
            lock = self._record_locks.get(email)
        if lock is None:
            return None

        with lock:
            return self._apply(email, mutate)

    def update_by_token(self, token: str, mutate: AccountMutator) -> Account | None:
        with self._guard:
            email = next(
                (acc.email for acc in self._accounts.values() if acc.verification_token == token),
                None,
            )
            lock = self._record_locks.get(email) if email is not None else None
        if lock is None:
            return None

        with lock:
            # Re-check under the record lock: a concurrent verification may
            # have cleared the token since the scan.
            with self._guard:
                current = self._accounts[email]
            if current.verification_token != token:
                return None
            return self._apply(email, mutate)

    def ping(self) -> None:
        return None

    def _apply(self, email: str, mutate: AccountMutator) -> Account:
        with self._guard:
            working = copy.deepcopy(self._accounts[email])
        mutate(working)
        with self._guard:
            self._accounts[email] = copy.deepcopy(working)
        return working
