"""
Reminder sweep - Daily scan of upcoming trainings and reminder dispatch.

The sweep is best-effort: one reminder per training, addressed to the
training's whole recipient list. A training with unusable recipient data
is skipped and a failed send is logged; neither stops the sweep. Only a
failure to query trainings at all aborts the run, and the next scheduled
run starts from scratch.

The due-soon window is counted in calendar dates, not hours: with the
default window of 2 days a sweep on Monday covers trainings scheduled on
Monday, Tuesday and Wednesday at any time of day.
"""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from .exceptions import MalformedRecipientsError
from .ports import DueTraining, Notifier, TrainingRepository
from .registration import is_valid_email, utc_now

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 2


def utc_today() -> date:
    return utc_now().date()


def resolve_recipients(raw: Any) -> list[str]:
    """
    Turn a stored recipient value into a clean list of addresses.

    Accepts an already-decoded list/tuple or JSON text of a list.
    Entries are stripped; non-strings and invalid addresses are dropped;
    duplicates are dropped case-insensitively, keeping the first spelling.

    Raises:
        MalformedRecipientsError: Unparseable, not a list, or nothing usable left
    """
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except (ValueError, RecursionError) as e:
            raise MalformedRecipientsError(f"Recipient list is not valid JSON: {e}") from e
    if not isinstance(raw, (list, tuple)):
        raise MalformedRecipientsError(f"Recipient list is a {type(raw).__name__}, not a list")

    recipients: list[str] = []
    seen: set[str] = set()
    for entry in raw:
        if not isinstance(entry, str):
            continue
        address = entry.strip()
        if not is_valid_email(address) or address.lower() in seen:
            continue
        seen.add(address.lower())
        recipients.append(address)

    if not recipients:
        raise MalformedRecipientsError("Recipient list has no valid addresses")
    return recipients


@dataclass
class SweepReport:
    """Per-run tally for observability."""

    reference_date: date
    found: int = 0
    sent: int = 0
    skipped: int = 0
    failed: int = 0
    failed_ids: list[int] = field(default_factory=list)


@dataclass
class ReminderService:
    """Scans pending trainings in the due-soon window and sends reminders."""

    trainings: TrainingRepository
    notifier: Notifier
    window_days: int = DEFAULT_WINDOW_DAYS
    clock: Callable[[], date] = utc_today

    def run_daily_sweep(self, today: date | None = None) -> SweepReport:
        """
        Send one reminder per pending training due within the window.

        Args:
            today: Reference calendar date (defaults to the service clock)

        Returns:
            SweepReport tally

        Raises:
            StoreError: If trainings cannot be queried (whole sweep aborted)
        """
        reference_date = today or self.clock()
        logger.info(
            "Reminder sweep started for %s (+%d days)", reference_date.isoformat(), self.window_days
        )

        trainings = self.trainings.query_pending_trainings_due_within(
            self.window_days, reference_date
        )
        report = SweepReport(reference_date=reference_date, found=len(trainings))

        for training in trainings:
            self._dispatch(training, report)

        logger.info(
            "Reminder sweep finished: found=%d sent=%d skipped=%d failed=%d",
            report.found,
            report.sent,
            report.skipped,
            report.failed,
        )
        return report

    def _dispatch(self, training: DueTraining, report: SweepReport) -> None:
        try:
            recipients = resolve_recipients(training.raw_recipients)
        except MalformedRecipientsError as e:
            logger.warning("Training %s skipped: %s", training.id, e)
            report.skipped += 1
            return

        try:
            self.notifier.send_reminder(recipients, training)
        except Exception:
            logger.exception("Reminder for training %s failed", training.id)
            report.failed += 1
            report.failed_ids.append(training.id)
            return

        logger.info("Sent reminder for training %s to %d recipient(s)", training.id, len(recipients))
        report.sent += 1
