"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Response fields use the camelCase names the help desk frontend consumes
(isVerified, verificationUrl).
"""

from pydantic import BaseModel, EmailStr, Field

from src.domain.ports import Account, Role


class AccountOut(BaseModel):
    """Public account fields. Never carries the password hash or secrets."""

    id: str
    name: str
    email: str
    role: Role
    is_verified: bool = Field(..., serialization_alias="isVerified")

    @classmethod
    def from_account(cls, account: Account) -> "AccountOut":
        return cls(
            id=account.id,
            name=account.name,
            email=account.email,
            role=account.role,
            is_verified=account.is_verified,
        )


class RegisterRequest(BaseModel):
    """Request model for account registration."""

    name: str = Field(..., description="Display name")
    email: EmailStr
    password: str = Field(..., description="Plaintext password, hashed before storage")
    role: Role | None = Field(default=None, description="admin or user (default user)")
    phone: str | None = Field(default=None, description="Optional phone for SMS OTP delivery")


class RegisterResponse(BaseModel):
    """Response model for successful registration."""

    message: str
    user: AccountOut
    verification_url: str = Field(..., serialization_alias="verificationUrl")


class VerifyOtpRequest(BaseModel):
    """Request model for OTP verification."""

    email: str
    otp: str | int = Field(..., description="6-digit code from email or SMS")


class ResendOtpRequest(BaseModel):
    email: str


class LoginRequest(BaseModel):
    email: str
    password: str


class LoginResponse(BaseModel):
    """Response model for successful login."""

    message: str
    token: str
    user: AccountOut


class MeResponse(BaseModel):
    user: AccountOut


class MessageResponse(BaseModel):
    message: str


class EmailCheckResponse(BaseModel):
    ok: bool
    message: str


class ErrorResponse(BaseModel):
    """Standard error response model."""

    message: str
    code: str
