"""
Unit tests for domain ports and exceptions.

Tests verify:
- The error taxonomy is closed and every kind maps to one HTTP status
- Account.mark_verified clears all verification secrets
- Domain purity (zero framework imports)
"""

import subprocess
from datetime import UTC, datetime, timedelta
from enum import Enum
from pathlib import Path

import pytest

from src.api.errors import STATUS_BY_KIND
from src.domain import exceptions
from src.domain.exceptions import AuthError, ErrorKind
from src.domain.ports import Account, Role

DOMAIN_DIR = Path(__file__).resolve().parents[2] / "src" / "domain"

ERROR_CLASSES = [
    exceptions.ValidationError,
    exceptions.ConflictError,
    exceptions.InvalidTokenError,
    exceptions.InvalidOtpError,
    exceptions.ExpiredOtpError,
    exceptions.AlreadyVerifiedError,
    exceptions.NotFoundError,
    exceptions.InvalidCredentialsError,
    exceptions.UnverifiedAccountError,
    exceptions.InvalidSessionError,
    exceptions.StoreError,
]


class TestErrorKind:
    def test_is_str_enum(self) -> None:
        assert issubclass(ErrorKind, Enum)
        assert ErrorKind.INVALID_OTP == "INVALID_OTP"

    def test_every_kind_has_one_class(self) -> None:
        assert {cls.kind for cls in ERROR_CLASSES} == set(ErrorKind)
        assert len(ERROR_CLASSES) == len(ErrorKind)

    def test_every_kind_has_a_status(self) -> None:
        assert set(STATUS_BY_KIND) == set(ErrorKind)

    def test_status_mapping(self) -> None:
        assert STATUS_BY_KIND[ErrorKind.INVALID_SESSION] == 401
        assert STATUS_BY_KIND[ErrorKind.STORE] == 500
        caller_fixable = set(ErrorKind) - {ErrorKind.INVALID_SESSION, ErrorKind.STORE}
        assert {STATUS_BY_KIND[kind] for kind in caller_fixable} == {400}


class TestAuthErrors:
    @pytest.mark.parametrize("error_class", ERROR_CLASSES)
    def test_inherits_from_auth_error(self, error_class: type[AuthError]) -> None:
        assert issubclass(error_class, AuthError)
        assert issubclass(error_class, Exception)

    @pytest.mark.parametrize("error_class", ERROR_CLASSES)
    def test_default_message(self, error_class: type[AuthError]) -> None:
        error = error_class()
        assert error.message == error_class.default_message
        assert str(error) == error.message

    def test_custom_message(self) -> None:
        error = exceptions.ValidationError("Email is required")
        assert error.message == "Email is required"
        assert error.kind is ErrorKind.VALIDATION

    def test_login_errors_share_no_detail(self) -> None:
        assert exceptions.InvalidCredentialsError().message == "Invalid credentials"


class TestAccount:
    def test_mark_verified_clears_secrets(self) -> None:
        created = datetime(2026, 1, 1, tzinfo=UTC)
        account = Account(
            id="acc-1",
            email="alice@test.com",
            name="Alice",
            password_hash="$2b$04$hash",
            role=Role.USER,
            phone=None,
            is_verified=False,
            verification_token="tok",
            otp="482913",
            otp_expires_at=created + timedelta(minutes=10),
            created_at=created,
            updated_at=created,
        )
        now = created + timedelta(minutes=2)

        account.mark_verified(now)

        assert account.is_verified is True
        assert account.verification_token is None
        assert account.otp is None
        assert account.otp_expires_at is None
        assert account.updated_at == now
        assert account.created_at == created

    def test_role_values(self) -> None:
        assert {role.value for role in Role} == {"admin", "user"}


class TestDomainPurity:
    """Tests for domain purity - zero framework imports."""

    @pytest.mark.parametrize(
        "pattern",
        [
            "from fastapi",
            "import fastapi",
            "from pydantic",
            "import pydantic",
            "from psycopg",
            "import psycopg",
            "import httpx",
            "import smtplib",
        ],
    )
    def test_no_framework_imports_in_domain(self, pattern: str) -> None:
        result = subprocess.run(
            ["grep", "-r", pattern, str(DOMAIN_DIR)],
            capture_output=True,
            text=True,
        )
        assert result.returncode != 0, f"{pattern} found: {result.stdout}"
