"""
API v1 routes.

Defines REST endpoints for OTP-gated registration:
- POST /v1/register - Store a pending registration and email a code
- POST /v1/verify-otp - Submit the code, commit the account
- POST /v1/resend-otp - Replace the code, reset attempts

Handlers are plain ``def`` so FastAPI runs them in its threadpool; the
domain service blocks on bcrypt, PostgreSQL and SMTP.
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from training_calendar.api.dependencies import get_registration_service
from training_calendar.api.models import (
    ErrorResponse,
    RegisterRequest,
    RegisterResponse,
    ResendOtpRequest,
    VerifyOtpRequest,
    VerifyOtpResponse,
)
from training_calendar.config.settings import get_settings
from training_calendar.domain.exceptions import (
    AttemptsExhaustedError,
    DuplicateAccountError,
    InvalidCodeError,
    NoPendingRegistrationError,
    NotificationError,
    OTPExpiredError,
    RegistrationError,
    StoreError,
    ValidationError,
)
from training_calendar.domain.registration import RegistrationService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["v1"])

# (status code, client message); message None means use str(exc)
_ERROR_MAP: dict[type[RegistrationError], tuple[int, str | None]] = {
    ValidationError: (422, None),
    NoPendingRegistrationError: (
        status.HTTP_404_NOT_FOUND,
        "No pending registration for this email. Please register again.",
    ),
    OTPExpiredError: (
        status.HTTP_410_GONE,
        "Verification code expired. Please register again.",
    ),
    AttemptsExhaustedError: (
        status.HTTP_403_FORBIDDEN,
        "Too many invalid attempts. Please register again.",
    ),
    InvalidCodeError: (status.HTTP_400_BAD_REQUEST, None),
    NotificationError: (
        status.HTTP_502_BAD_GATEWAY,
        "Could not send verification email. Please try again.",
    ),
    StoreError: (status.HTTP_500_INTERNAL_SERVER_ERROR, "Server error"),
}

_DUPLICATE_MESSAGES = {
    "email": "User already exists",
    "employee_number": "Employee number already registered",
}

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid code"},
    403: {"model": ErrorResponse, "description": "Attempts exhausted"},
    404: {"model": ErrorResponse, "description": "No pending registration"},
    409: {"model": ErrorResponse, "description": "Account already exists"},
    410: {"model": ErrorResponse, "description": "Code expired"},
    422: {"description": "Validation error"},
    502: {"model": ErrorResponse, "description": "Email delivery failed"},
}


def error_response(exc: RegistrationError) -> JSONResponse:
    """Map a domain error to its HTTP status and client-facing body."""
    if isinstance(exc, DuplicateAccountError):
        body = ErrorResponse(
            detail=_DUPLICATE_MESSAGES.get(exc.field, "Account already exists"),
            error=exc.category,
        )
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content=body.model_dump(exclude_none=True))

    status_code, message = status.HTTP_500_INTERNAL_SERVER_ERROR, "Server error"
    for exc_type, mapped in _ERROR_MAP.items():
        if isinstance(exc, exc_type):
            status_code, message = mapped
            break
    else:
        logger.error("Unmapped registration error: %r", exc)

    body = ErrorResponse(
        detail=message or str(exc),
        error=exc.category,
        remaining_attempts=exc.remaining_attempts if isinstance(exc, InvalidCodeError) else None,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_ERROR_RESPONSES,
    summary="Register a new user",
    description="Submit name, email, employee number and password to begin registration. "
    "A 6-digit verification code will be sent to the provided email.",
)
def register(
    request_data: RegisterRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> RegisterResponse | JSONResponse:
    """
    Register a new user and send verification code.

    - **name**: Display name
    - **email**: Valid email address to register
    - **employee_no**: Employee number (unique)
    - **password**: Password (minimum 8 characters)
    """
    try:
        ticket = service.register(
            request_data.name,
            request_data.email,
            request_data.employee_no,
            request_data.password,
        )
    except RegistrationError as e:
        return error_response(e)
    return RegisterResponse(
        message="Verification code sent",
        email=ticket.email,
        expires_in_seconds=get_settings().otp_ttl_minutes * 60,
    )


@router.post(
    "/verify-otp",
    response_model=VerifyOtpResponse,
    responses=_ERROR_RESPONSES,
    summary="Verify email with code",
    description="Submit the 6-digit code received by email to create the account.",
)
def verify_otp(
    request_data: VerifyOtpRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> VerifyOtpResponse | JSONResponse:
    try:
        account = service.verify_otp(request_data.email, request_data.code)
    except RegistrationError as e:
        return error_response(e)
    return VerifyOtpResponse(
        message="User registered successfully",
        account_id=account.account_id,
        email=account.email,
    )


@router.post(
    "/resend-otp",
    response_model=RegisterResponse,
    responses=_ERROR_RESPONSES,
    summary="Resend verification code",
    description="Issue a new code for a pending registration. Resets the attempt counter.",
)
def resend_otp(
    request_data: ResendOtpRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> RegisterResponse | JSONResponse:
    try:
        ticket = service.resend_otp(request_data.email)
    except RegistrationError as e:
        return error_response(e)
    return RegisterResponse(
        message="Verification code resent",
        email=ticket.email,
        expires_in_seconds=get_settings().otp_ttl_minutes * 60,
    )
