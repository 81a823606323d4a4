"""
Integration tests for application startup wiring.

Runs the real lifespan against the in-memory store and console notifier,
so no database or mail server is needed.
"""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from src.adapters.repository.memory import InMemoryAccountStore
from src.adapters.smtp.console import ConsoleNotifier
from src.api.main import app
from src.config.settings import get_settings
from support import TEST_SECRET


@pytest.fixture
def memory_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setenv("STORE_BACKEND", "memory")
    monkeypatch.setenv("NOTIFIER_BACKEND", "console")
    monkeypatch.setenv("JWT_SECRET", TEST_SECRET)
    monkeypatch.setenv("BCRYPT_COST", "4")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestLifespan:
    def test_wires_memory_store_and_console_notifier(self, memory_env: None) -> None:
        with TestClient(app) as client:
            assert isinstance(app.state.store, InMemoryAccountStore)
            assert isinstance(app.state.notifier, ConsoleNotifier)

            response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_register_through_real_app(self, memory_env: None) -> None:
        with TestClient(app) as client:
            response = client.post(
                "/api/v1/auth/register",
                json={"name": "Alice", "email": "alice@test.com", "password": "Secret123"},
            )
            otp = app.state.store.get_by_email("alice@test.com").otp
            verified = client.post(
                "/api/v1/auth/verify-otp", json={"email": "alice@test.com", "otp": otp}
            )

        assert response.status_code == 201
        assert response.json()["verificationUrl"].startswith("http://localhost:5173/verify-email/")
        assert verified.status_code == 200

    def test_missing_secret_fails_startup(
        self, memory_env: None, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("JWT_SECRET", "short")
        get_settings.cache_clear()

        with pytest.raises(ValueError), TestClient(app):
            pass
