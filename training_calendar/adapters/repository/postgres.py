"""
PostgreSQL repository adapters - Implement AccountRepository and TrainingRepository.

This module provides the PostgreSQL implementations of the domain's
persistence ports using psycopg3 with raw SQL.

Error translation:
-----------------
psycopg exceptions never leave this module. A unique-constraint violation
on insert becomes DuplicateAccountError naming the colliding field; every
other database failure (including pool timeouts) becomes StoreError,
chained to the original exception for the logs.

Ownership:
---------
This core only inserts accounts and reads trainings. Updates and deletes
of rows belong to other parts of the application.
"""

import logging
from datetime import date, timedelta
from pathlib import Path

import psycopg
from psycopg import errors
from psycopg_pool import ConnectionPool

from training_calendar.domain.exceptions import DuplicateAccountError, StoreError
from training_calendar.domain.ports import DueTraining

logger = logging.getLogger(__name__)

# Constraint names from migrations/001_create_users.sql
_UNIQUE_CONSTRAINT_FIELDS = {
    "users_email_unique": "email",
    "users_employee_no_unique": "employee_number",
}


class PostgresAccountRepository:
    """
    Implements AccountRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries for security.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def account_exists_by_email(self, email: str) -> bool:
        return self._exists("SELECT 1 FROM users WHERE email = %s", (email,))

    def account_exists_by_employee_number(self, employee_number: int) -> bool:
        return self._exists("SELECT 1 FROM users WHERE employee_no = %s", (employee_number,))

    def insert_verified_account(
        self, name: str, email: str, employee_number: int, password_hash: str
    ) -> int:
        """
        Insert a verified account and return its id.

        The UNIQUE constraints on email and employee_no are the final
        guard against two verifications racing for the same identity.

        Raises:
            DuplicateAccountError: If email or employee_no already exists
            StoreError: On any other database failure
        """
        sql = """
            INSERT INTO users (name, email, employee_no, password_hash, verified)
            VALUES (%s, %s, %s, %s, TRUE)
            RETURNING id
        """

        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (name, email, employee_number, password_hash))
                row = cursor.fetchone()
                conn.commit()
        except errors.UniqueViolation as e:
            constraint = e.diag.constraint_name or ""
            field = _UNIQUE_CONSTRAINT_FIELDS.get(constraint, "email")
            value = email if field == "email" else employee_number
            raise DuplicateAccountError(field, value) from e
        except psycopg.Error as e:
            logger.error("Account insert failed for %s: %s", email, e)
            raise StoreError("Could not create account") from e

        return row[0]

    def _exists(self, sql: str, params: tuple) -> bool:
        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, params)
                return cursor.fetchone() is not None
        except psycopg.Error as e:
            logger.error("Account lookup failed: %s", e)
            raise StoreError("Could not query accounts") from e


class PostgresTrainingRepository:
    """
    Implements TrainingRepository protocol via psycopg3.

    notification_recipients is JSONB, so psycopg hands back a decoded
    list; rows written as JSON strings come back as str. The domain
    resolves both.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        self._pool = pool

    def query_pending_trainings_due_within(
        self, days: int, reference_date: date
    ) -> list[DueTraining]:
        """
        Pending trainings whose schedule date falls in
        [reference_date, reference_date + days] by calendar date.

        Raises:
            StoreError: On database failure
        """
        sql = """
            SELECT id, name, schedule_date, notification_recipients,
                   venue, duration, training_hours, status
            FROM trainings
            WHERE status = 'pending'
              AND schedule_date::date BETWEEN %s AND %s
            ORDER BY schedule_date, id
        """
        end_date = reference_date + timedelta(days=days)

        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                cursor.execute(sql, (reference_date, end_date))
                rows = cursor.fetchall()
        except psycopg.Error as e:
            logger.error("Training query failed: %s", e)
            raise StoreError("Could not query trainings") from e

        return [
            DueTraining(
                id=row[0],
                name=row[1],
                schedule_date=row[2],
                raw_recipients=row[3],
                venue=row[4] or "",
                duration=row[5],
                training_hours=row[6],
                status=row[7],
            )
            for row in rows
        ]


MIGRATIONS_DIR = Path(__file__).resolve().parents[3] / "migrations"


def run_migrations(pool: ConnectionPool, migrations_dir: Path = MIGRATIONS_DIR) -> None:
    """
    Apply every *.sql file in migrations_dir, in filename order.

    Files must be idempotent (CREATE ... IF NOT EXISTS); they run on
    every application start.

    Raises:
        RuntimeError: If a migration fails; startup should abort
    """
    if not migrations_dir.is_dir():
        logger.warning("Migrations directory not found: %s", migrations_dir)
        return

    sql_files = sorted(migrations_dir.glob("*.sql"))
    logger.info("Applying %d migration(s) from %s", len(sql_files), migrations_dir)

    for sql_file in sql_files:
        try:
            with pool.connection() as conn:
                conn.execute(sql_file.read_text())
        except (OSError, psycopg.Error) as e:
            logger.error("Migration %s failed: %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
        logger.debug("Migration applied: %s", sql_file.name)
