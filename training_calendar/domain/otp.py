"""
One-time verification codes.

Pure functions, no shared state. Expiry helpers take ``now`` explicitly so
callers check and compute expiry against the same clock.
"""

import secrets
from datetime import datetime, timedelta

CODE_MIN = 100000
CODE_MAX = 999999
DEFAULT_TTL_MINUTES = 10


def generate_code() -> str:
    """
    Generate a 6-digit verification code, uniform over [100000, 999999].

    Uses secrets module for cryptographic randomness.
    """
    return str(CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1))


def compute_expiry(now: datetime, ttl_minutes: int = DEFAULT_TTL_MINUTES) -> datetime:
    return now + timedelta(minutes=ttl_minutes)


def is_expired(expires_at: datetime, now: datetime) -> bool:
    """A code is unusable at or after its expiry instant."""
    return now >= expires_at
