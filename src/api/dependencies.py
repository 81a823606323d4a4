"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting the domain service
and infrastructure adapters into routes. Everything is constructed once in
the application lifespan and read back from app.state.
"""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.domain.accounts import AccountService
from src.domain.exceptions import InvalidSessionError
from src.domain.ports import AccountStore, Notifier


def get_store(request: Request) -> AccountStore:
    """Get the account store created during app lifespan startup."""
    return request.app.state.store


def get_notifier(request: Request) -> Notifier:
    return request.app.state.notifier


def get_account_service(request: Request) -> AccountService:
    """
    Get the account service.

    Wired in the lifespan with the store, notification dispatcher and
    session issuer.
    """
    return request.app.state.account_service


# Bearer scheme for OpenAPI documentation. Missing headers are reported
# through the domain's InvalidSessionError, not FastAPI's default 403.
http_bearer = HTTPBearer(auto_error=False)


def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(http_bearer),
) -> str:
    """
    Extract the session credential from the Authorization header.

    Raises:
        InvalidSessionError: Header missing or not a Bearer credential
    """
    if credentials is None or not credentials.credentials:
        raise InvalidSessionError()
    return credentials.credentials
