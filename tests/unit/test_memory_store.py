"""
Unit tests for InMemoryAccountStore.

Tests the AccountStore contract: unique create, copy isolation, atomic
read-modify-write with rollback on mutator failure, and token lookup.
"""

from datetime import UTC, datetime, timedelta

import pytest

from src.adapters.repository.memory import InMemoryAccountStore
from src.domain.exceptions import InvalidOtpError
from src.domain.ports import Account, AccountStore, Role


def make_account(email: str = "alice@test.com", token: str | None = "tok-1") -> Account:
    now = datetime.now(UTC)
    return Account(
        id=f"id-{email}",
        email=email,
        name="Alice",
        password_hash="$2b$04$hash",
        role=Role.USER,
        phone=None,
        is_verified=False,
        verification_token=token,
        otp="123456",
        otp_expires_at=now + timedelta(minutes=10),
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def store() -> InMemoryAccountStore:
    return InMemoryAccountStore()


class TestProtocol:
    def test_satisfies_account_store(self, store: InMemoryAccountStore) -> None:
        def accepts_store(s: AccountStore) -> None:
            pass

        accepts_store(store)
        for method in ("create", "get_by_email", "update_by_email", "update_by_token", "ping"):
            assert callable(getattr(store, method))


class TestCreate:
    def test_create_then_get(self, store: InMemoryAccountStore) -> None:
        assert store.create(make_account()) is True
        assert store.get_by_email("alice@test.com").name == "Alice"

    def test_duplicate_email_rejected(self, store: InMemoryAccountStore) -> None:
        store.create(make_account())

        assert store.create(make_account(token="tok-2")) is False

    def test_get_missing_returns_none(self, store: InMemoryAccountStore) -> None:
        assert store.get_by_email("nobody@test.com") is None

    def test_returned_accounts_are_copies(self, store: InMemoryAccountStore) -> None:
        store.create(make_account())

        fetched = store.get_by_email("alice@test.com")
        fetched.is_verified = True

        assert store.get_by_email("alice@test.com").is_verified is False


class TestUpdateByEmail:
    def test_mutation_persisted(self, store: InMemoryAccountStore) -> None:
        store.create(make_account())

        def set_otp(acc: Account) -> None:
            acc.otp = "654321"

        updated = store.update_by_email("alice@test.com", set_otp)

        assert updated.otp == "654321"
        assert store.get_by_email("alice@test.com").otp == "654321"

    def test_mutator_error_rolls_back(self, store: InMemoryAccountStore) -> None:
        store.create(make_account())

        def fail_midway(acc: Account) -> None:
            acc.otp = "999999"
            raise InvalidOtpError()

        with pytest.raises(InvalidOtpError):
            store.update_by_email("alice@test.com", fail_midway)

        assert store.get_by_email("alice@test.com").otp == "123456"

    def test_missing_email_skips_mutator(self, store: InMemoryAccountStore) -> None:
        called = []

        assert store.update_by_email("nobody@test.com", called.append) is None
        assert called == []


class TestUpdateByToken:
    def test_matches_exact_token(self, store: InMemoryAccountStore) -> None:
        store.create(make_account())
        now = datetime.now(UTC)

        updated = store.update_by_token("tok-1", lambda acc: acc.mark_verified(now))

        assert updated.is_verified is True
        assert store.get_by_email("alice@test.com").verification_token is None

    def test_cleared_token_no_longer_matches(self, store: InMemoryAccountStore) -> None:
        store.create(make_account())
        now = datetime.now(UTC)
        store.update_by_token("tok-1", lambda acc: acc.mark_verified(now))

        assert store.update_by_token("tok-1", lambda acc: None) is None

    @pytest.mark.parametrize("token", ["tok", "TOK-1", "tok-1 "])
    def test_no_partial_matches(self, store: InMemoryAccountStore, token: str) -> None:
        store.create(make_account())

        assert store.update_by_token(token, lambda acc: None) is None

    def test_only_matching_account_updated(self, store: InMemoryAccountStore) -> None:
        store.create(make_account("alice@test.com", "tok-a"))
        store.create(make_account("bob@test.com", "tok-b"))
        now = datetime.now(UTC)

        store.update_by_token("tok-b", lambda acc: acc.mark_verified(now))

        assert store.get_by_email("alice@test.com").is_verified is False
        assert store.get_by_email("bob@test.com").is_verified is True


class TestPing:
    def test_ping_is_noop(self, store: InMemoryAccountStore) -> None:
        assert store.ping() is None
