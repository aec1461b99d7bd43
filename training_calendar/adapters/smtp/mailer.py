"""
SMTP notifier adapter - Implements Notifier protocol over smtplib.

Each message is sent as multipart/alternative (plain text + HTML) on its
own connection. Transport failures (SMTPException, OSError such as a
refused connection or timeout) are raised as NotificationError; whether
that is fatal is the domain's call, not this adapter's.
"""

import logging
import smtplib
from collections.abc import Callable, Sequence
from email.headerregistry import Address
from email.message import EmailMessage

from training_calendar.config.settings import Settings
from training_calendar.domain.exceptions import NotificationError
from training_calendar.domain.ports import DueTraining

from . import templates

logger = logging.getLogger(__name__)


class SmtpNotifier:
    """
    Implements Notifier protocol via an SMTP relay.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(
        self,
        host: str,
        port: int,
        from_address: str,
        from_name: str = templates.COMPANY_NAME,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        timeout: float = 15.0,
        code_ttl_minutes: int = 10,
        smtp_factory: Callable[..., smtplib.SMTP] = smtplib.SMTP,
    ) -> None:
        self._host = host
        self._port = port
        self._sender = Address(display_name=from_name, addr_spec=from_address)
        self._username = username
        self._password = password
        self._use_tls = use_tls
        self._timeout = timeout
        self._code_ttl_minutes = code_ttl_minutes
        self._smtp_factory = smtp_factory

    @classmethod
    def from_settings(cls, settings: Settings) -> "SmtpNotifier":
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            from_address=settings.mail_from_address,
            from_name=settings.mail_from_name,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
            timeout=settings.smtp_timeout_seconds,
            code_ttl_minutes=settings.otp_ttl_minutes,
        )

    def send_code(self, email: str, name: str, code: str) -> None:
        self._send([email], *templates.verification_code(name, code, self._code_ttl_minutes))

    def send_welcome(self, name: str, email: str, employee_number: int) -> None:
        self._send([email], *templates.welcome(name, email, employee_number))

    def send_reminder(self, recipients: Sequence[str], training: DueTraining) -> None:
        self._send(list(recipients), *templates.training_reminder(training))

    def _send(self, to: list[str], subject: str, text: str, html: str) -> None:
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = self._sender
        message["To"] = ", ".join(to)
        message.set_content(text)
        message.add_alternative(html, subtype="html")

        try:
            with self._smtp_factory(self._host, self._port, timeout=self._timeout) as server:
                if self._use_tls:
                    server.starttls()
                if self._username:
                    server.login(self._username, self._password or "")
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("SMTP send to %s failed: %s", message["To"], e)
            raise NotificationError(f"Could not send email: {subject}") from e

        logger.info("Sent email %r to %s", subject, message["To"])
