"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- A controllable clock and an executor that runs tasks inline
- In-memory store, mock notifier and a wired AccountService
- A FastAPI test app/client backed by those collaborators
"""

from collections.abc import Iterator
from datetime import UTC, datetime, timedelta
from unittest.mock import Mock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.adapters.repository.memory import InMemoryAccountStore
from src.api.errors import register_exception_handlers
from src.api.v1 import router
from src.domain.accounts import AccountService
from src.domain.notifications import NotificationDispatcher
from src.domain.sessions import SessionIssuer
from support import TEST_FRONTEND_URL, TEST_SECRET, FixedClock, ImmediateExecutor


@pytest.fixture
def clock() -> FixedClock:
    """Starts at the real current time so issued sessions are still valid."""
    return FixedClock(datetime.now(UTC).replace(microsecond=0))


@pytest.fixture
def executor() -> ImmediateExecutor:
    return ImmediateExecutor()


@pytest.fixture
def notifier() -> Mock:
    """Notifier double whose channels always report delivery."""
    mock = Mock()
    mock.send_email.return_value = True
    mock.send_sms.return_value = True
    return mock


@pytest.fixture
def store() -> InMemoryAccountStore:
    return InMemoryAccountStore()


@pytest.fixture
def sessions() -> SessionIssuer:
    return SessionIssuer(secret=TEST_SECRET)


@pytest.fixture
def dispatcher(notifier: Mock, executor: ImmediateExecutor) -> NotificationDispatcher:
    return NotificationDispatcher(
        notifier=notifier, executor=executor, otp_ttl=timedelta(minutes=10)
    )


@pytest.fixture
def service(
    store: InMemoryAccountStore,
    dispatcher: NotificationDispatcher,
    sessions: SessionIssuer,
    clock: FixedClock,
) -> AccountService:
    """AccountService on the in-memory store, with a low bcrypt cost for speed."""
    return AccountService(
        store=store,
        dispatcher=dispatcher,
        sessions=sessions,
        frontend_url=TEST_FRONTEND_URL,
        otp_ttl=timedelta(minutes=10),
        bcrypt_cost=4,
        clock=clock,
    )


@pytest.fixture
def app(service: AccountService, store: InMemoryAccountStore, notifier: Mock) -> FastAPI:
    """Test application wired like the lifespan does, without starting it."""
    test_app = FastAPI()
    register_exception_handlers(test_app)
    test_app.include_router(router, prefix="/api/v1/auth")
    test_app.state.store = store
    test_app.state.notifier = notifier
    test_app.state.account_service = service
    return test_app


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    yield TestClient(app)
    app.dependency_overrides.clear()
