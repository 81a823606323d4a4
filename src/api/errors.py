"""
Exception handlers - domain errors to HTTP responses.

Every ErrorKind has exactly one status. Responses carry only the human
message and the kind; stack traces and internal identifiers stay in the log.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.api.models import ErrorResponse
from src.domain.exceptions import AuthError, ErrorKind, StoreError, ValidationError

logger = logging.getLogger(__name__)

STATUS_BY_KIND: dict[ErrorKind, int] = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.CONFLICT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_TOKEN: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_OTP: status.HTTP_400_BAD_REQUEST,
    ErrorKind.EXPIRED_OTP: status.HTTP_400_BAD_REQUEST,
    ErrorKind.ALREADY_VERIFIED: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_CREDENTIALS: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNVERIFIED_ACCOUNT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_SESSION: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.STORE: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _error_response(status_code: int, message: str, kind: ErrorKind) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message, code=kind.value).model_dump(),
    )


def auth_error_handler(_request: Request, exc: AuthError) -> JSONResponse:
    """Render a domain error as {message, code} with its mapped status."""
    status_code = STATUS_BY_KIND[exc.kind]
    if status_code >= 500:
        logger.error("Request failed with %s: %s", exc.kind.value, exc.__cause__ or exc)
    return _error_response(status_code, exc.message, exc.kind)


def validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Render request schema violations as a 400 ValidationError.

    Missing fields get the generic "All fields are required"; other
    violations name the first offending field.
    """
    errors = exc.errors()
    if any(error["type"] == "missing" for error in errors):
        message = ValidationError.default_message
    elif any(error["type"] == "json_invalid" for error in errors):
        message = "Invalid request"
    else:
        field = ".".join(str(part) for part in errors[0]["loc"] if part != "body") if errors else ""
        message = f"Invalid value for {field}" if field else "Invalid request"
    return _error_response(status.HTTP_400_BAD_REQUEST, message, ErrorKind.VALIDATION)


def unhandled_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log the traceback, answer with the generic server error."""
    logger.error("Unhandled error: %s", exc, exc_info=exc)
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR, StoreError.default_message, ErrorKind.STORE
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AuthError, auth_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
