"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
"""

from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    """Request model for user registration."""

    name: str = Field(..., min_length=1, max_length=100, description="Display name")
    email: EmailStr
    employee_no: int = Field(..., gt=0, description="Employee number")
    password: str = Field(..., min_length=8, description="User password (min 8 characters)")


class RegisterResponse(BaseModel):
    """Response model for register and resend: a code is on its way."""

    message: str
    email: str
    expires_in_seconds: int


class VerifyOtpRequest(BaseModel):
    """Request model for email verification."""

    email: EmailStr
    code: str = Field(
        ...,
        min_length=6,
        max_length=6,
        pattern=r"^\d{6}$",
        description="6-digit verification code",
    )


class VerifyOtpResponse(BaseModel):
    """Response model for successful verification."""

    message: str
    account_id: int
    email: str


class ResendOtpRequest(BaseModel):
    """Request model for a fresh verification code."""

    email: EmailStr


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str
    error: str
    remaining_attempts: int | None = None
