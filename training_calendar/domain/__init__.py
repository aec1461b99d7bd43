"""
Domain layer - Pure business logic with zero framework imports.

This package contains the core business logic for OTP-gated registration
and the daily training reminder sweep. It defines its own port interfaces
for infrastructure abstraction, ensuring true hexagonal architecture
decoupling.
"""

from .exceptions import (
    AttemptsExhaustedError,
    DuplicateAccountError,
    InvalidCodeError,
    MalformedRecipientsError,
    NoPendingRegistrationError,
    NotFoundError,
    NotificationError,
    OTPExpiredError,
    RegistrationError,
    StoreError,
    ValidationError,
)
from .ports import (
    AccountRepository,
    DueTraining,
    Notifier,
    PendingRegistration,
    PendingRegistrationStore,
    RegistrationState,
    RegistrationTicket,
    TrainingRepository,
    VerifiedAccount,
)
from .registration import RegistrationService
from .reminders import ReminderService, SweepReport, resolve_recipients

__all__ = [
    "AccountRepository",
    "AttemptsExhaustedError",
    "DueTraining",
    "DuplicateAccountError",
    "InvalidCodeError",
    "MalformedRecipientsError",
    "NoPendingRegistrationError",
    "NotFoundError",
    "NotificationError",
    "Notifier",
    "OTPExpiredError",
    "PendingRegistration",
    "PendingRegistrationStore",
    "RegistrationError",
    "RegistrationService",
    "RegistrationState",
    "RegistrationTicket",
    "ReminderService",
    "StoreError",
    "SweepReport",
    "TrainingRepository",
    "ValidationError",
    "VerifiedAccount",
    "resolve_recipients",
]
