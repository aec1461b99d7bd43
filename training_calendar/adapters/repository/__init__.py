"""Repository adapters - Database implementations."""

from .postgres import PostgresAccountRepository, PostgresTrainingRepository, run_migrations

__all__ = ["PostgresAccountRepository", "PostgresTrainingRepository", "run_migrations"]
