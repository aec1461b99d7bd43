"""
Shared fixtures for integration tests.

Integration tests run against a real PostgreSQL database located by
DATABASE_URL (see training_calendar.config.settings). When the database
is unreachable the tests are skipped rather than failed.
"""

import pytest
from psycopg_pool import ConnectionPool, PoolTimeout

from training_calendar.adapters.repository.postgres import run_migrations
from training_calendar.config.settings import get_settings


@pytest.fixture(scope="session")
def pool() -> ConnectionPool:
    """Create connection pool for integration tests, migrated once."""
    settings = get_settings()
    pool = ConnectionPool(
        conninfo=settings.database_url,
        min_size=1,
        max_size=10,
        open=True,
    )
    try:
        pool.wait(timeout=5.0)
    except PoolTimeout:
        pool.close()
        pytest.skip("PostgreSQL is not reachable")
    run_migrations(pool)
    yield pool
    pool.close()


@pytest.fixture(autouse=True)
def clean_database(pool: ConnectionPool) -> None:
    """Clean trainings and users tables before each test."""
    with pool.connection() as conn:
        conn.execute("DELETE FROM trainings")
        conn.execute("DELETE FROM users")
        conn.commit()
    yield
