"""
Domain exceptions - Semantic error types for registration and reminders.

This module defines domain-specific exceptions that communicate
business rule violations without leaking infrastructure details.
Each error carries a ``category`` the HTTP layer uses to pick a
status code and a client-facing message.
"""


class RegistrationError(Exception):
    """Base class for registration domain errors."""

    category = "registration_error"


class ValidationError(RegistrationError):
    """Malformed input, rejected before any state mutation."""

    category = "validation_error"


class DuplicateAccountError(RegistrationError):
    """Email or employee number already belongs to a committed account."""

    category = "duplicate_account"

    def __init__(self, field: str, value: object) -> None:
        super().__init__(f"An account with this {field} already exists: {value}")
        self.field = field
        self.value = value


class NoPendingRegistrationError(RegistrationError):
    """No live pending registration exists for the email."""

    category = "no_pending_registration"


class OTPExpiredError(RegistrationError):
    """The verification code expired; the caller must register again."""

    category = "otp_expired"


class AttemptsExhaustedError(RegistrationError):
    """Too many wrong codes; the caller must register again."""

    category = "attempts_exhausted"


class InvalidCodeError(RegistrationError):
    """Wrong verification code."""

    category = "invalid_code"

    def __init__(self, remaining_attempts: int) -> None:
        super().__init__(f"Invalid verification code, {remaining_attempts} attempt(s) remaining")
        self.remaining_attempts = remaining_attempts


class NotificationError(RegistrationError):
    """Outbound email could not be sent."""

    category = "notification_failed"


class StoreError(RegistrationError):
    """Persistent store failure."""

    category = "store_error"


class NotFoundError(RegistrationError):
    """Pending store entry vanished between lookup and update."""

    category = "not_found"


class MalformedRecipientsError(ValueError):
    """Training recipient list could not be resolved to any address."""

    pass
