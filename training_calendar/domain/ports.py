"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure, plus the value types that cross them.
Adapters implement these protocols.
"""

from collections.abc import Sequence
from contextlib import AbstractContextManager
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Protocol


class RegistrationState(str, Enum):
    """
    Lifecycle of one pending registration instance.

    State Transitions:
    - NO_PENDING -> PENDING (register)
    - PENDING -> PENDING (resend: new code, attempts reset)
    - PENDING -> VERIFIED (correct code, account committed)
    - PENDING -> EXPIRED (code used at or after expires_at)
    - PENDING -> ATTEMPTS_EXHAUSTED (max failed attempts reached)
    - PENDING -> REPLACED (new register call for the same email)

    Every state except PENDING is terminal for the instance and removes
    it from the pending store.
    """

    NO_PENDING = "NO_PENDING"
    PENDING = "PENDING"
    VERIFIED = "VERIFIED"
    EXPIRED = "EXPIRED"
    ATTEMPTS_EXHAUSTED = "ATTEMPTS_EXHAUSTED"
    REPLACED = "REPLACED"


@dataclass(frozen=True)
class PendingRegistration:
    """Candidate account awaiting email verification."""

    name: str
    email: str
    employee_number: int
    password_hash: str
    code: str
    expires_at: datetime
    attempt_count: int = 0


@dataclass(frozen=True)
class RegistrationTicket:
    """Returned by register/resend: where the code went and until when it is valid."""

    email: str
    expires_at: datetime


@dataclass(frozen=True)
class VerifiedAccount:
    """Committed account produced by a successful verification."""

    account_id: int
    name: str
    email: str
    employee_number: int


@dataclass(frozen=True)
class DueTraining:
    """
    Training row as read for the reminder sweep.

    raw_recipients is whatever the driver handed back for the
    notification_recipients column: decoded JSON (list) or JSON text.
    """

    id: int
    name: str
    schedule_date: datetime
    raw_recipients: Any
    venue: str = ""
    duration: int | None = None
    training_hours: int | None = None
    status: str = "pending"


class PendingRegistrationStore(Protocol):
    """Port interface for the volatile pending-registration store."""

    def put(self, email: str, record: PendingRegistration) -> None:
        """Store record, discarding any existing entry for email."""
        ...

    def get(self, email: str) -> PendingRegistration | None:
        """Return the live entry for email, or None."""
        ...

    def remove(self, email: str) -> None:
        """Delete the entry for email. Removing a missing entry is a no-op."""
        ...

    def increment_attempt(self, email: str) -> int:
        """
        Atomically bump the failed-attempt counter.

        Returns:
            The new attempt count

        Raises:
            NotFoundError: If no entry exists for email
        """
        ...

    def locked(self, email: str) -> AbstractContextManager[None]:
        """Hold the per-email lock for a read-decide-write sequence."""
        ...


class AccountRepository(Protocol):
    """Port interface for committed account persistence."""

    def account_exists_by_email(self, email: str) -> bool:
        ...

    def account_exists_by_employee_number(self, employee_number: int) -> bool:
        ...

    def insert_verified_account(
        self, name: str, email: str, employee_number: int, password_hash: str
    ) -> int:
        """
        Insert an account with verified = true.

        Returns:
            The new account id

        Raises:
            DuplicateAccountError: If email or employee number collides
            StoreError: On any other database failure
        """
        ...


class TrainingRepository(Protocol):
    """Port interface for reading training records."""

    def query_pending_trainings_due_within(
        self, days: int, reference_date: date
    ) -> list[DueTraining]:
        """
        Pending trainings scheduled on a calendar date in
        [reference_date, reference_date + days], inclusive.

        Raises:
            StoreError: On database failure
        """
        ...


class Notifier(Protocol):
    """Port interface for email delivery. All methods raise NotificationError on failure."""

    def send_code(self, email: str, name: str, code: str) -> None:
        ...

    def send_welcome(self, name: str, email: str, employee_number: int) -> None:
        ...

    def send_reminder(self, recipients: Sequence[str], training: DueTraining) -> None:
        ...

