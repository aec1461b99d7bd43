"""
Unit tests for InMemoryPendingRegistrationStore.

Tests verify the store satisfies the PendingRegistrationStore protocol,
its put/get/remove semantics, and atomic attempt counting.
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from zlib import crc32

import pytest

from training_calendar.adapters.pending.memory import DEFAULT_STRIPES, InMemoryPendingRegistrationStore
from training_calendar.domain.exceptions import NotFoundError
from training_calendar.domain.ports import PendingRegistration, PendingRegistrationStore


def make_record(email: str = "a@x.com", code: str = "123456", attempts: int = 0) -> PendingRegistration:
    return PendingRegistration(
        name="A",
        email=email,
        employee_number=1,
        password_hash="$2b$04$hash",
        code=code,
        expires_at=datetime(2030, 1, 1, tzinfo=timezone.utc),
        attempt_count=attempts,
    )


class TestProtocol:
    """Tests for PendingRegistrationStore protocol compliance."""

    def test_implements_protocol(self) -> None:
        store = InMemoryPendingRegistrationStore()

        def accepts_store(s: PendingRegistrationStore) -> None:
            pass

        accepts_store(store)
        for method in ("put", "get", "remove", "increment_attempt", "locked"):
            assert callable(getattr(store, method))

    def test_no_explicit_inheritance(self) -> None:
        assert InMemoryPendingRegistrationStore.__bases__ == (object,)


class TestPutGetRemove:
    """Tests for basic store operations."""

    def test_get_missing_returns_none(self) -> None:
        assert InMemoryPendingRegistrationStore().get("a@x.com") is None

    def test_put_then_get(self) -> None:
        store = InMemoryPendingRegistrationStore()
        record = make_record()

        store.put("a@x.com", record)

        assert store.get("a@x.com") is record

    def test_put_overwrites(self) -> None:
        """A second put discards the first entry and its attempt history."""
        store = InMemoryPendingRegistrationStore()
        store.put("a@x.com", make_record(code="111111", attempts=2))
        store.put("a@x.com", make_record(code="222222"))

        record = store.get("a@x.com")
        assert record.code == "222222"
        assert record.attempt_count == 0
        assert len(store) == 1

    def test_remove(self) -> None:
        store = InMemoryPendingRegistrationStore()
        store.put("a@x.com", make_record())

        store.remove("a@x.com")

        assert store.get("a@x.com") is None

    def test_remove_is_idempotent(self) -> None:
        store = InMemoryPendingRegistrationStore()
        store.put("a@x.com", make_record())

        store.remove("a@x.com")
        store.remove("a@x.com")
        store.remove("never@x.com")

        assert len(store) == 0

    def test_keys_are_independent(self) -> None:
        store = InMemoryPendingRegistrationStore()
        store.put("a@x.com", make_record("a@x.com"))
        store.put("b@x.com", make_record("b@x.com"))

        store.remove("a@x.com")

        assert store.get("b@x.com") is not None


class TestIncrementAttempt:
    """Tests for atomic attempt counting."""

    def test_increment_returns_new_count(self) -> None:
        store = InMemoryPendingRegistrationStore()
        store.put("a@x.com", make_record())

        assert store.increment_attempt("a@x.com") == 1
        assert store.increment_attempt("a@x.com") == 2
        assert store.get("a@x.com").attempt_count == 2

    def test_increment_keeps_other_fields(self) -> None:
        store = InMemoryPendingRegistrationStore()
        store.put("a@x.com", make_record(code="654321"))

        store.increment_attempt("a@x.com")

        assert store.get("a@x.com").code == "654321"

    def test_increment_missing_raises_not_found(self) -> None:
        with pytest.raises(NotFoundError):
            InMemoryPendingRegistrationStore().increment_attempt("a@x.com")

    def test_concurrent_increments_lose_no_updates(self) -> None:
        store = InMemoryPendingRegistrationStore()
        store.put("a@x.com", make_record())

        with ThreadPoolExecutor(max_workers=10) as executor:
            counts = list(executor.map(lambda _: store.increment_attempt("a@x.com"), range(100)))

        assert sorted(counts) == list(range(1, 101))
        assert store.get("a@x.com").attempt_count == 100


class TestLocked:
    """Tests for the per-email lock."""

    def test_locked_serializes_same_email(self) -> None:
        store = InMemoryPendingRegistrationStore()
        inside = threading.Event()
        release = threading.Event()
        order: list[str] = []

        def holder() -> None:
            with store.locked("a@x.com"):
                inside.set()
                release.wait(timeout=5)
                order.append("holder")

        def waiter() -> None:
            inside.wait(timeout=5)
            with store.locked("a@x.com"):
                order.append("waiter")

        t1 = threading.Thread(target=holder)
        t2 = threading.Thread(target=waiter)
        t1.start()
        t2.start()
        inside.wait(timeout=5)
        release.set()
        t1.join(timeout=5)
        t2.join(timeout=5)

        assert order == ["holder", "waiter"]

    def test_lock_released_on_exception(self) -> None:
        store = InMemoryPendingRegistrationStore()

        with pytest.raises(RuntimeError):
            with store.locked("a@x.com"):
                raise RuntimeError("boom")

        acquired = threading.Event()

        def grab() -> None:
            with store.locked("a@x.com"):
                acquired.set()

        t = threading.Thread(target=grab)
        t.start()
        t.join(timeout=5)
        assert acquired.is_set()

    def test_store_operations_allowed_inside_lock(self) -> None:
        """The key lock is separate from the dict guard, so no self-deadlock."""
        store = InMemoryPendingRegistrationStore()

        with store.locked("a@x.com"):
            store.put("a@x.com", make_record())
            store.increment_attempt("a@x.com")
            store.remove("a@x.com")

        assert len(store) == 0

    def test_other_stripe_not_blocked_by_held_lock(self) -> None:
        """A slow holder only stalls emails that hash to its own stripe."""
        store = InMemoryPendingRegistrationStore()
        held = "a@x.com"
        held_stripe = crc32(held.encode()) % DEFAULT_STRIPES
        other = next(
            f"user{i}@x.com"
            for i in range(1000)
            if crc32(f"user{i}@x.com".encode()) % DEFAULT_STRIPES != held_stripe
        )
        acquired = threading.Event()

        def grab() -> None:
            with store.locked(other):
                acquired.set()

        with store.locked(held):
            t = threading.Thread(target=grab)
            t.start()
            t.join(timeout=5)
            assert acquired.is_set()
