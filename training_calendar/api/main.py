"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures routes and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import date, datetime
from zoneinfo import ZoneInfo

from fastapi import FastAPI, Request
from psycopg_pool import ConnectionPool

from training_calendar.adapters.pending.memory import InMemoryPendingRegistrationStore
from training_calendar.adapters.repository.postgres import (
    PostgresTrainingRepository,
    run_migrations,
)
from training_calendar.adapters.scheduler import build_scheduler
from training_calendar.api.dependencies import build_notifier
from training_calendar.api.v1 import router as v1_router
from training_calendar.config.settings import Settings, get_settings
from training_calendar.domain.ports import Notifier
from training_calendar.domain.reminders import ReminderService

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "v1",
        "description": "Training Calendar Registration API v1 - Register and verify accounts by email code",
    },
]


def build_reminder_service(
    settings: Settings, pool: ConnectionPool, notifier: Notifier
) -> ReminderService:
    """Reminder service whose 'today' follows the scheduler's timezone."""
    tz = ZoneInfo(settings.reminder_timezone)

    def today() -> date:
        return datetime.now(tz).date()

    return ReminderService(
        trainings=PostgresTrainingRepository(pool),
        notifier=notifier,
        window_days=settings.reminder_window_days,
        clock=today,
    )


def build_pool(settings: Settings) -> ConnectionPool:
    """
    Connection pool with a bounded checkout wait.

    Account inserts run under a per-email lock, so a starved pool must
    fail fast (StoreError) instead of holding that lock.
    """
    return ConnectionPool(
        conninfo=settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
        timeout=settings.pool_timeout_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates database connection pool and runs migrations
    - Creates the process-wide pending store and notifier
    - Starts the daily reminder scheduler
    - Stops the scheduler and closes the pool on shutdown
    """
    settings = get_settings()

    logger.info("Starting application, opening database pool")

    pool = build_pool(settings)

    run_migrations(pool)

    notifier = build_notifier(settings)

    # Store singletons in app state for dependency injection
    app.state.pool = pool
    app.state.pending_store = InMemoryPendingRegistrationStore()
    app.state.notifier = notifier
    app.state.reminder_service = build_reminder_service(settings, pool, notifier)

    scheduler = None
    if settings.reminders_enabled:
        scheduler = build_scheduler(settings, app.state.reminder_service)
        scheduler.start()
        logger.info(
            "Reminder sweep scheduled daily at %02d:%02d %s",
            settings.reminder_cron_hour,
            settings.reminder_cron_minute,
            settings.reminder_timezone,
        )

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application")
    if scheduler is not None:
        scheduler.shutdown(wait=False)
    pool.close()
    logger.info("Database connection pool closed")


app = FastAPI(
    title="training-calendar",
    description="Training Calendar API - Email-verified registration and training reminders",
    version="0.1.0",
    openapi_tags=tags_metadata,
    lifespan=lifespan,
)

# Include v1 API routes
app.include_router(v1_router, prefix="/v1")


@app.get("/health")
def health_check(request: Request) -> dict[str, str]:
    """
    Health check endpoint with database validation.

    Returns 200 OK if application and database are healthy.
    Raises exception if database connection fails.
    """
    pool = request.app.state.pool
    with pool.connection() as conn:
        conn.execute("SELECT 1")

    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_config=None)
