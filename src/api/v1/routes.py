"""
API v1 routes.

Defines REST endpoints for account registration, verification and login.
Handlers are plain functions so FastAPI runs them (and their bcrypt and
store calls) in its threadpool. Domain errors propagate to the handlers
registered in src/api/errors.py.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse

from src.api.dependencies import get_account_service, get_bearer_token, get_notifier
from src.api.models import (
    AccountOut,
    EmailCheckResponse,
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    MeResponse,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    ResendOtpRequest,
    VerifyOtpRequest,
)
from src.config.settings import Settings, get_settings
from src.domain.accounts import AccountService
from src.domain.exceptions import ValidationError
from src.domain.ports import Notifier

router = APIRouter(tags=["auth"])

_VERIFIED_MESSAGE = "Email verified successfully! You can now log in."
_ERRORS = {400: {"model": ErrorResponse, "description": "Validation or verification failure"}}


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_ERRORS,
    summary="Register a new account",
    description="Create an unverified account. A verification link and a 6-digit OTP "
    "are sent by email (and the OTP by SMS when a phone number is given).",
)
def register(
    request_data: RegisterRequest,
    service: AccountService = Depends(get_account_service),
) -> RegisterResponse:
    """
    Register a new account and queue its verification secrets.

    The verification URL is also returned so the account can be verified
    by hand when email delivery is unavailable.
    """
    registration = service.register(
        request_data.name,
        request_data.email,
        request_data.password,
        role=request_data.role,
        phone=request_data.phone,
    )
    return RegisterResponse(
        message="Registered! Check your email (and phone if provided) "
        "for the verification link or OTP.",
        user=AccountOut.from_account(registration.account),
        verification_url=registration.verification_url,
    )


@router.get(
    "/verify-email/{token}",
    response_model=MessageResponse,
    responses=_ERRORS,
    summary="Verify account by link",
)
def verify_email(
    token: str,
    service: AccountService = Depends(get_account_service),
) -> MessageResponse:
    service.verify_email(token)
    return MessageResponse(message=_VERIFIED_MESSAGE)


@router.post(
    "/verify-otp",
    response_model=MessageResponse,
    responses=_ERRORS,
    summary="Verify account by OTP",
)
def verify_otp(
    request_data: VerifyOtpRequest,
    service: AccountService = Depends(get_account_service),
) -> MessageResponse:
    service.verify_otp(request_data.email, request_data.otp)
    return MessageResponse(message=_VERIFIED_MESSAGE)


@router.post(
    "/resend-otp",
    response_model=MessageResponse,
    responses=_ERRORS,
    summary="Resend verification OTP",
    description="Issue a fresh OTP (the verification link stays the same). "
    "The response does not reveal which channels delivered.",
)
def resend_otp(
    request_data: ResendOtpRequest,
    service: AccountService = Depends(get_account_service),
) -> MessageResponse:
    service.resend_otp(request_data.email)
    return MessageResponse(message="New verification OTP/link sent successfully.")


@router.post(
    "/login",
    response_model=LoginResponse,
    responses=_ERRORS,
    summary="Log in to a verified account",
)
def login(
    request_data: LoginRequest,
    service: AccountService = Depends(get_account_service),
) -> LoginResponse:
    """Authenticate and receive a signed session token (7 days by default)."""
    result = service.login(request_data.email, request_data.password)
    return LoginResponse(
        message="Login successful",
        token=result.session.token,
        user=AccountOut.from_account(result.account),
    )


@router.get(
    "/me",
    response_model=MeResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid or expired session"}},
    summary="Current account",
)
def me(
    token: str = Depends(get_bearer_token),
    service: AccountService = Depends(get_account_service),
) -> MeResponse:
    account = service.current_account(token)
    return MeResponse(user=AccountOut.from_account(account))


@router.get(
    "/test-email",
    response_model=EmailCheckResponse,
    responses={502: {"model": EmailCheckResponse, "description": "Delivery failed"}},
    summary="Send a test email",
    description="Diagnostic endpoint, enabled with TEST_EMAIL_ENABLED.",
)
def send_test_email(
    to: str | None = Query(default=None, description="Recipient (defaults to the sender account)"),
    settings: Settings = Depends(get_settings),
    notifier: Notifier = Depends(get_notifier),
):
    if not settings.test_email_enabled:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")

    recipient = (to or settings.email_user or "").strip()
    if not recipient:
        raise ValidationError("Recipient is required")

    if notifier.send_email(
        recipient, "Help Desk - test email", "If you got this, email is working."
    ):
        return EmailCheckResponse(ok=True, message=f"Test email sent to {recipient}")

    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content=EmailCheckResponse(
            ok=False, message="Test email could not be delivered"
        ).model_dump(),
    )
