"""
In-memory pending registration store - Implements PendingRegistrationStore protocol.

Pending registrations live in process memory only; a restart drops them
and users register again.

Concurrency Design:
------------------
Two kinds of locks are used:

1. **_guard**: protects the dict itself. Held only for the duration of a
   single put/get/remove/increment, never across I/O.

2. **Striped key locks**: a fixed pool of locks indexed by the email hash.
   ``locked(email)`` lets the domain service make a read-decide-write
   sequence on one email atomic (verify, resend). Striping keeps the lock
   table bounded; two emails sharing a stripe only serialize against each
   other, which is harmless.
"""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace
from zlib import crc32

from training_calendar.domain.exceptions import NotFoundError
from training_calendar.domain.ports import PendingRegistration

logger = logging.getLogger(__name__)

DEFAULT_STRIPES = 256


class InMemoryPendingRegistrationStore:
    """
    Implements PendingRegistrationStore protocol with a dict.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Records are frozen dataclasses; updates swap in a new instance.
    """

    def __init__(self, stripes: int = DEFAULT_STRIPES) -> None:
        self._entries: dict[str, PendingRegistration] = {}
        self._guard = threading.Lock()
        self._key_locks = [threading.Lock() for _ in range(stripes)]

    def put(self, email: str, record: PendingRegistration) -> None:
        with self._guard:
            self._entries[email] = record

    def get(self, email: str) -> PendingRegistration | None:
        with self._guard:
            return self._entries.get(email)

    def remove(self, email: str) -> None:
        with self._guard:
            self._entries.pop(email, None)

    def increment_attempt(self, email: str) -> int:
        """
        Atomically bump the failed-attempt counter.

        Raises:
            NotFoundError: If the entry vanished (removed or replaced away)
        """
        with self._guard:
            record = self._entries.get(email)
            if record is None:
                raise NotFoundError(email)
            updated = replace(record, attempt_count=record.attempt_count + 1)
            self._entries[email] = updated
            return updated.attempt_count

    @contextmanager
    def locked(self, email: str) -> Iterator[None]:
        lock = self._key_locks[crc32(email.encode()) % len(self._key_locks)]
        with lock:
            yield

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)
