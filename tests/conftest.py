"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- A controllable clock
- Mocked account repository and notifier ports
- A registration service wired to the in-memory pending store
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from training_calendar.adapters.pending.memory import InMemoryPendingRegistrationStore
from training_calendar.domain.registration import RegistrationService


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def accounts() -> Mock:
    """Account repository with no existing accounts; inserts return id 1."""
    repo = Mock()
    repo.account_exists_by_email.return_value = False
    repo.account_exists_by_employee_number.return_value = False
    repo.insert_verified_account.return_value = 1
    return repo


@pytest.fixture
def notifier() -> Mock:
    return Mock()


@pytest.fixture
def pending() -> InMemoryPendingRegistrationStore:
    return InMemoryPendingRegistrationStore()


@pytest.fixture
def service(
    accounts: Mock,
    pending: InMemoryPendingRegistrationStore,
    notifier: Mock,
    clock: FrozenClock,
) -> RegistrationService:
    """Registration service with cheap bcrypt rounds for fast tests."""
    return RegistrationService(
        accounts=accounts,
        pending=pending,
        notifier=notifier,
        bcrypt_rounds=4,
        clock=clock,
    )

