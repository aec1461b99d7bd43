"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting
domain services and infrastructure adapters into routes.

Process-lifetime singletons (connection pool, pending store, notifier)
live on app.state and are created in the application lifespan.
"""

from fastapi import Request
from psycopg_pool import ConnectionPool

from training_calendar.adapters.pending.memory import InMemoryPendingRegistrationStore
from training_calendar.adapters.repository.postgres import PostgresAccountRepository
from training_calendar.adapters.smtp.console import ConsoleNotifier
from training_calendar.adapters.smtp.mailer import SmtpNotifier
from training_calendar.config.settings import Settings, get_settings
from training_calendar.domain.ports import Notifier
from training_calendar.domain.registration import RegistrationService


def build_notifier(settings: Settings) -> Notifier:
    """Pick the notifier adapter named by settings.email_backend."""
    if settings.email_backend == "smtp":
        return SmtpNotifier.from_settings(settings)
    return ConsoleNotifier()


def get_pool(request: Request) -> ConnectionPool:
    """
    Get connection pool from app state.

    The pool is created during app lifespan startup and stored in app.state.
    """
    return request.app.state.pool


def get_account_repository(request: Request) -> PostgresAccountRepository:
    """Create repository with connection pool from app state."""
    pool = get_pool(request)
    return PostgresAccountRepository(pool)


def get_pending_store(request: Request) -> InMemoryPendingRegistrationStore:
    """Get the process-wide pending registration store from app state."""
    return request.app.state.pending_store


def get_notifier(request: Request) -> Notifier:
    """Get the notifier singleton from app state."""
    return request.app.state.notifier


def get_registration_service(request: Request) -> RegistrationService:
    """
    Create registration service with injected dependencies.

    Wires together the account repository, pending store and notifier.
    """
    settings = get_settings()
    return RegistrationService(
        accounts=get_account_repository(request),
        pending=get_pending_store(request),
        notifier=get_notifier(request),
        ttl_minutes=settings.otp_ttl_minutes,
        max_attempts=settings.max_attempts,
        bcrypt_rounds=settings.bcrypt_cost,
    )
