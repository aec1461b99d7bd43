"""Notifier adapters - Console and SMTP email delivery."""

from .console import ConsoleNotifier
from .mailer import SmtpNotifier

__all__ = ["ConsoleNotifier", "SmtpNotifier"]
