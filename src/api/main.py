"""
FastAPI application and lifespan wiring.

This module creates the FastAPI application instance, registers exception
handlers, and constructs every long-lived collaborator (store, notifier,
notification executor, session issuer, account service) once at startup.
"""

import logging
from collections.abc import AsyncGenerator
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from psycopg_pool import ConnectionPool

from src.adapters.notifier import ChannelNotifier
from src.adapters.repository.memory import InMemoryAccountStore
from src.adapters.repository.postgres import PostgresAccountStore, run_migrations
from src.adapters.sms.twilio import TwilioSmsSender
from src.adapters.smtp.console import ConsoleNotifier
from src.adapters.smtp.mailer import SmtpEmailSender
from src.api.errors import register_exception_handlers
from src.api.v1 import router as v1_router
from src.config.logging_config import configure_logging
from src.config.settings import Settings, get_settings
from src.domain.accounts import AccountService
from src.domain.notifications import NotificationDispatcher
from src.domain.ports import Notifier
from src.domain.sessions import SessionIssuer

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "auth",
        "description": "Account registration, email/OTP verification and login",
    },
]


def build_notifier(settings: Settings) -> Notifier:
    """
    Build the notifier from configured channels.

    "console" logs every message; "live" uses SMTP and Twilio for whichever
    channels have credentials and disables the rest.
    """
    if settings.notifier_backend == "console":
        logger.info("Notifier: console")
        return ConsoleNotifier()

    email_sender = None
    if settings.email_configured:
        email_sender = SmtpEmailSender(
            user=settings.email_user.strip(),
            password=settings.email_pass.get_secret_value().strip(),
            from_name=settings.email_from_name,
            host=settings.smtp_host,
            port=settings.smtp_port,
            timeout=settings.notifier_timeout_seconds,
        )

    sms_sender = None
    if settings.sms_configured:
        sms_sender = TwilioSmsSender(
            account_sid=settings.twilio_account_sid,
            auth_token=settings.twilio_auth_token.get_secret_value(),
            from_number=settings.twilio_phone_number,
            timeout=settings.notifier_timeout_seconds,
        )

    logger.info(
        "Email: %s | SMS: %s",
        f"configured ({settings.email_user})" if email_sender else "NOT configured",
        "configured" if sms_sender else "NOT configured",
    )
    return ChannelNotifier(email_sender=email_sender, sms_sender=sms_sender)


def build_session_issuer(settings: Settings) -> SessionIssuer:
    """Fail startup when the signing secret is missing or too short."""
    secret = settings.jwt_secret.get_secret_value() if settings.jwt_secret else ""
    return SessionIssuer(secret=secret, ttl=settings.session_ttl, issuer=settings.jwt_issuer)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Validates the session signing secret
    - Creates the account store (Postgres pool + migrations, or in-memory)
    - Creates the notifier and its background executor
    - Drains pending notifications and closes the pool on shutdown
    """
    settings = get_settings()
    configure_logging(settings.log_level)

    logger.info("Starting application...")
    sessions = build_session_issuer(settings)

    pool = None
    if settings.store_backend == "postgres":
        logger.info("Connecting to database...")
        timeout_ms = int(settings.store_timeout_seconds * 1000)
        pool = ConnectionPool(
            conninfo=settings.database_url,
            min_size=settings.pool_min_size,
            max_size=settings.pool_max_size,
            timeout=settings.store_timeout_seconds,
            kwargs={"options": f"-c statement_timeout={timeout_ms}"},
            open=True,
        )
        logger.info("Running database migrations...")
        run_migrations(pool)
        store = PostgresAccountStore(pool)
    else:
        logger.warning("Using in-memory account store; accounts are lost on restart")
        store = InMemoryAccountStore()

    notifier = build_notifier(settings)
    executor = ThreadPoolExecutor(
        max_workers=settings.notification_workers,
        thread_name_prefix="notify",
    )
    dispatcher = NotificationDispatcher(
        notifier=notifier,
        executor=executor,
        otp_ttl=settings.otp_ttl,
    )

    # Store collaborators in app state for dependency injection
    app.state.store = store
    app.state.notifier = notifier
    app.state.account_service = AccountService(
        store=store,
        dispatcher=dispatcher,
        sessions=sessions,
        frontend_url=settings.frontend_url,
        otp_ttl=settings.otp_ttl,
        bcrypt_cost=settings.bcrypt_cost,
        default_country_code=settings.default_country_code,
    )

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    executor.shutdown(wait=True)
    logger.info("Notification executor drained")
    if pool is not None:
        pool.close()
        logger.info("Database connection pool closed")


app = FastAPI(
    title="helpdesk-auth",
    description="Help Desk account service - registration, email/OTP verification and login",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

register_exception_handlers(app)

# Include v1 API routes
app.include_router(v1_router, prefix="/api/v1/auth")


@app.get("/health")
def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint with store validation.

    Returns 200 OK if application and store are healthy.
    A store failure surfaces as a 500 through the StoreError handler.
    """
    request.app.state.store.ping()
    return {"status": "healthy"}


def run() -> None:
    """Console entry point: serve the app with uvicorn on the configured address."""
    settings = get_settings()
    uvicorn.run("src.api.main:app", host=settings.host, port=settings.port)
