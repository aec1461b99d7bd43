"""
Email bodies for the three messages this service sends.

Each builder returns (subject, text, html). Styling is deliberately plain;
the branded layouts belong to the front-end team's templates.
"""

from datetime import datetime
from html import escape

from training_calendar.domain.ports import DueTraining

COMPANY_NAME = "Training Calendar System"
_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

Rendered = tuple[str, str, str]


def format_date(value: datetime | None) -> str:
    """Format as d/Mon/yyyy, e.g. 1/Jan/2025. Empty string for None."""
    if value is None:
        return ""
    return f"{value.day}/{_MONTHS[value.month - 1]}/{value.year}"


def _html(title: str, paragraphs: list[str]) -> str:
    body = "\n".join(f"<p>{p}</p>" for p in paragraphs)
    return (
        "<!DOCTYPE html>\n"
        f'<html lang="en"><head><meta charset="UTF-8"><title>{escape(title)}</title></head>\n'
        f"<body>\n<h2>{escape(title)}</h2>\n{body}\n"
        f"<p><small>{COMPANY_NAME}</small></p>\n</body></html>"
    )


def verification_code(name: str, code: str, ttl_minutes: int) -> Rendered:
    subject = f"Email Verification Code - {COMPANY_NAME}"
    text = (
        f"Hello {name},\n\n"
        f"Your verification code is: {code}\n\n"
        f"It expires in {ttl_minutes} minutes. "
        "If you did not request this, ignore this email."
    )
    html = _html(
        "Verify your email",
        [
            f"Hello {escape(name)},",
            f"Your verification code is: <strong>{escape(code)}</strong>",
            f"It expires in {ttl_minutes} minutes. If you did not request this, ignore this email.",
        ],
    )
    return subject, text, html


def welcome(name: str, email: str, employee_number: int) -> Rendered:
    subject = f"Welcome to {COMPANY_NAME}, {name}!"
    text = (
        f"Hello {name},\n\n"
        "Your account has been verified.\n"
        f"Email: {email}\n"
        f"Employee number: {employee_number}\n"
    )
    html = _html(
        "Welcome!",
        [
            f"Hello {escape(name)},",
            "Your account has been verified.",
            f"Email: {escape(email)}<br>Employee number: {employee_number}",
        ],
    )
    return subject, text, html


def training_reminder(training: DueTraining) -> Rendered:
    when = format_date(training.schedule_date)
    subject = f"Training Reminder: {training.name}"
    lines = [f'Reminder: The training "{training.name}" is scheduled on {when}.']
    if training.venue:
        lines.append(f"Venue: {training.venue}")
    if training.duration is not None:
        lines.append(f"Duration: {training.duration}")
    text = "\n".join(lines)
    html = _html("Training Reminder", [escape(line) for line in lines])
    return subject, text, html
