"""
Daily reminder scheduling via APScheduler.

A single BackgroundScheduler runs the reminder sweep once per day on a
cron trigger (08:00 by default). The job wrapper is the sweep's top
level: whatever goes wrong in one run is logged there and the next day's
run starts fresh.
"""

import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from training_calendar.config.settings import Settings
from training_calendar.domain.reminders import ReminderService, SweepReport

logger = logging.getLogger(__name__)

REMINDER_JOB_ID = "daily_training_reminders"


def run_reminder_job(service: ReminderService) -> SweepReport | None:
    """Run one sweep; log and absorb any failure so the scheduler keeps ticking."""
    try:
        return service.run_daily_sweep()
    except Exception:
        logger.exception("Reminder sweep aborted")
        return None


def build_scheduler(settings: Settings, service: ReminderService) -> BackgroundScheduler:
    """
    Create (but do not start) the scheduler with the daily reminder job.

    Args:
        settings: Cron hour/minute and timezone for the job
        service: Reminder service the job drives
    """
    scheduler = BackgroundScheduler(timezone=settings.reminder_timezone)
    scheduler.add_job(
        run_reminder_job,
        CronTrigger(
            hour=settings.reminder_cron_hour,
            minute=settings.reminder_cron_minute,
            timezone=settings.reminder_timezone,
        ),
        args=[service],
        id=REMINDER_JOB_ID,
        replace_existing=True,
        coalesce=True,
        max_instances=1,
    )
    return scheduler
