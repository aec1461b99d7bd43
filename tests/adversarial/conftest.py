"""
Shared fixtures for adversarial tests.

Adversarial tests run against the real in-memory pending store and the
real RegistrationService; only the account repository and notifier are
mocked. The service, pending store and clock fixtures come from the
top-level conftest.
"""

import threading
from unittest.mock import Mock

import pytest


@pytest.fixture
def committed_accounts(accounts: Mock) -> list[tuple]:
    """Record every insert so tests can count promotions across threads."""
    inserted: list[tuple] = []
    lock = threading.Lock()

    def insert(name: str, email: str, employee_number: int, password_hash: str) -> int:
        with lock:
            inserted.append((name, email, employee_number, password_hash))
            return len(inserted)

    accounts.insert_verified_account.side_effect = insert
    return inserted
