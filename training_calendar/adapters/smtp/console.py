"""
Console notifier adapter - Implements Notifier protocol.

This module provides a console-based implementation of the domain's
notifier port, logging messages instead of sending them. Used in
development and whenever email_backend is "console".
"""

import logging
from collections.abc import Sequence

from training_calendar.domain.ports import DueTraining

from .templates import format_date

logger = logging.getLogger(__name__)


class ConsoleNotifier:
    """
    Implements Notifier protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Never fails, so registration and sweeps always proceed in development.
    """

    def send_code(self, email: str, name: str, code: str) -> None:
        """
        Log verification code to console (simulates email delivery).

        Logged at INFO level to be visible in docker-compose logs.
        """
        logger.info("[VERIFICATION] Email: %s Code: %s", email, code)

    def send_welcome(self, name: str, email: str, employee_number: int) -> None:
        logger.info("[WELCOME] Email: %s Name: %s Employee: %s", email, name, employee_number)

    def send_reminder(self, recipients: Sequence[str], training: DueTraining) -> None:
        logger.info(
            "[REMINDER] Training: %s (%s) on %s To: %s",
            training.name,
            training.id,
            format_date(training.schedule_date),
            ",".join(recipients),
        )
