"""
Test doubles shared across the suite.

Imported as a top-level module: pytest puts tests/ on sys.path when it
loads tests/conftest.py.
"""

from collections.abc import Callable
from concurrent.futures import Executor, Future
from datetime import datetime, timedelta
from typing import Any

# Test-only signing secret (>= 32 characters)
TEST_SECRET = "test-secret-key-that-is-at-least-32-characters-long"  # nosec B105

TEST_FRONTEND_URL = "https://helpdesk.test"


class FixedClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


class ImmediateExecutor(Executor):
    """Executor that runs each task synchronously on submit."""

    def __init__(self) -> None:
        self.submitted = 0

    def submit(self, fn: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Future:
        self.submitted += 1
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as exc:
            future.set_exception(exc)
        return future
