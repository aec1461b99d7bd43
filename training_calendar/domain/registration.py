"""
Registration domain service - OTP-gated registration state machine.

This module contains the core business logic for user registration:
a candidate account is held in the pending store until the user proves
ownership of the email address with a one-time code.

Registration State Machine
==========================

States (per pending instance, see RegistrationState):
- PENDING: candidate stored with code, expiry and attempt counter
- VERIFIED: correct code, account committed (terminal)
- EXPIRED: code used at or after expiry (terminal)
- ATTEMPTS_EXHAUSTED: max failed attempts reached (terminal)
- REPLACED: a new register call overwrote the entry (terminal)

Transitions:
    register  : NO_PENDING/PENDING -> PENDING (old instance REPLACED)
    resend    : PENDING -> PENDING (new code, attempts reset to 0)
    verify_otp: PENDING -> VERIFIED | EXPIRED | ATTEMPTS_EXHAUSTED
                PENDING -> PENDING (wrong code, attempt_count + 1)

Commit vs. notification:
    Account insert and pending removal form one step, done under the
    per-email lock. The welcome email afterwards is a separate
    best-effort notification; its failure is logged and never undoes
    the committed account. Code delivery is not best-effort: without a
    delivered code the user has no path forward, so register rolls its
    pending entry back and resend reports the failure.
"""

import logging
import re
import secrets
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime, timezone

import bcrypt

from .exceptions import (
    AttemptsExhaustedError,
    DuplicateAccountError,
    InvalidCodeError,
    NoPendingRegistrationError,
    NotFoundError,
    NotificationError,
    OTPExpiredError,
    ValidationError,
)
from .otp import DEFAULT_TTL_MINUTES, compute_expiry, generate_code, is_expired
from .ports import (
    AccountRepository,
    Notifier,
    PendingRegistration,
    PendingRegistrationStore,
    RegistrationState,
    RegistrationTicket,
    VerifiedAccount,
)

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 8
DEFAULT_MAX_ATTEMPTS = 3


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email))


@dataclass
class RegistrationService:
    """
    Domain service for user registration.

    Orchestrates the registration flow: input validation, duplicate
    checks, password hashing, code generation, pending-state
    bookkeeping and account commit.
    """

    accounts: AccountRepository
    pending: PendingRegistrationStore
    notifier: Notifier
    ttl_minutes: int = DEFAULT_TTL_MINUTES
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    bcrypt_rounds: int = 10
    clock: Callable[[], datetime] = utc_now

    def register(
        self, name: str, email: str, employee_number: int, password: str
    ) -> RegistrationTicket:
        """
        Start a registration: store the candidate and send it a code.

        Args:
            name: Display name
            email: User's email address (will be normalized)
            employee_number: Employee identifier, unique among accounts
            password: User's password (will be hashed)

        Returns:
            Ticket with the normalized email and code expiry

        Raises:
            ValidationError: If any field is malformed
            DuplicateAccountError: If email or employee number is taken
            NotificationError: If the code could not be sent (nothing stays pending)
        """
        normalized_email = self._normalize_email(email)
        name = (name or "").strip()
        self._validate(name, normalized_email, employee_number, password)

        if self.accounts.account_exists_by_email(normalized_email):
            raise DuplicateAccountError("email", normalized_email)
        if self.accounts.account_exists_by_employee_number(employee_number):
            raise DuplicateAccountError("employee_number", employee_number)

        record = PendingRegistration(
            name=name,
            email=normalized_email,
            employee_number=employee_number,
            password_hash=self._hash_password(password),
            code=generate_code(),
            expires_at=compute_expiry(self.clock(), self.ttl_minutes),
        )

        with self.pending.locked(normalized_email):
            if self.pending.get(normalized_email) is not None:
                logger.info(
                    "Pending registration for %s -> %s",
                    normalized_email,
                    RegistrationState.REPLACED.value,
                )
            self.pending.put(normalized_email, record)

        try:
            self._send_code(record)
        except NotificationError:
            with self.pending.locked(normalized_email):
                # A concurrent register may have replaced our entry; leave theirs alone
                if self.pending.get(normalized_email) is record:
                    self.pending.remove(normalized_email)
            raise

        return RegistrationTicket(email=normalized_email, expires_at=record.expires_at)

    def verify_otp(self, email: str, code: str) -> VerifiedAccount:
        """
        Check a submitted code and commit the account on success.

        Checks run in order: entry exists, not expired, attempts left,
        code matches. Code comparison is constant-time.

        Raises:
            NoPendingRegistrationError: No pending entry for email
            OTPExpiredError: Entry expired (entry removed)
            AttemptsExhaustedError: Attempt bound reached (entry removed)
            InvalidCodeError: Wrong code; carries remaining attempts
            DuplicateAccountError: Account was committed elsewhere meanwhile
            StoreError: Insert failed (entry kept, user may retry)
        """
        normalized_email = self._normalize_email(email)
        submitted = (code or "").strip()

        with self.pending.locked(normalized_email):
            record = self.pending.get(normalized_email)
            if record is None:
                raise NoPendingRegistrationError(normalized_email)

            if is_expired(record.expires_at, self.clock()):
                self._terminate(normalized_email, RegistrationState.EXPIRED)
                raise OTPExpiredError(normalized_email)

            if record.attempt_count >= self.max_attempts:
                self._terminate(normalized_email, RegistrationState.ATTEMPTS_EXHAUSTED)
                raise AttemptsExhaustedError(normalized_email)

            if not secrets.compare_digest(record.code.encode(), submitted.encode()):
                try:
                    attempts = self.pending.increment_attempt(normalized_email)
                except NotFoundError:
                    raise NoPendingRegistrationError(normalized_email) from None
                raise InvalidCodeError(max(self.max_attempts - attempts, 0))

            try:
                account_id = self.accounts.insert_verified_account(
                    record.name, normalized_email, record.employee_number, record.password_hash
                )
            except DuplicateAccountError:
                # Can never be promoted now
                self.pending.remove(normalized_email)
                raise
            self._terminate(normalized_email, RegistrationState.VERIFIED)

        self._send_welcome(record)
        return VerifiedAccount(
            account_id=account_id,
            name=record.name,
            email=normalized_email,
            employee_number=record.employee_number,
        )

    def resend_otp(self, email: str) -> RegistrationTicket:
        """
        Issue a fresh code for a pending registration.

        Resets the attempt counter. If sending fails the new code stays
        stored; a further resend simply overwrites it again.

        Raises:
            NoPendingRegistrationError: No pending entry for email
            NotificationError: The new code could not be sent
        """
        normalized_email = self._normalize_email(email)

        with self.pending.locked(normalized_email):
            record = self.pending.get(normalized_email)
            if record is None:
                raise NoPendingRegistrationError(normalized_email)
            refreshed = replace(
                record,
                code=generate_code(),
                expires_at=compute_expiry(self.clock(), self.ttl_minutes),
                attempt_count=0,
            )
            self.pending.put(normalized_email, refreshed)

        self._send_code(refreshed)
        return RegistrationTicket(email=normalized_email, expires_at=refreshed.expires_at)

    def _terminate(self, email: str, state: RegistrationState) -> None:
        self.pending.remove(email)
        logger.info("Pending registration for %s -> %s", email, state.value)

    def _send_code(self, record: PendingRegistration) -> None:
        try:
            self.notifier.send_code(record.email, record.name, record.code)
        except NotificationError:
            raise
        except Exception as e:
            raise NotificationError(f"Could not send verification code to {record.email}") from e

    def _send_welcome(self, record: PendingRegistration) -> None:
        try:
            self.notifier.send_welcome(record.name, record.email, record.employee_number)
        except Exception:
            logger.exception("Welcome email to %s failed; account remains committed", record.email)

    def _validate(self, name: str, email: str, employee_number: int, password: str) -> None:
        if not name:
            raise ValidationError("Name is required")
        if not is_valid_email(email):
            raise ValidationError("Please include a valid email")
        if (
            isinstance(employee_number, bool)
            or not isinstance(employee_number, int)
            or employee_number <= 0
        ):
            raise ValidationError("Employee number must be a positive integer")
        if password is None or len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
            )

    def _normalize_email(self, email: str) -> str:
        """
        Normalize email address for consistent storage and lookup.

        Applies: strip whitespace + lowercase
        """
        return (email or "").strip().lower()

    def _hash_password(self, password: str) -> str:
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=self.bcrypt_rounds)).decode()
