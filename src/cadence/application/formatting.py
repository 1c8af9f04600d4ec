"""Human-readable labels for intervals and due dates."""

from dataclasses import dataclass
from datetime import datetime, timedelta

from cadence.application.scheduler import round_half_up, utcnow


@dataclass(frozen=True)
class DueDateLabel:
    text: str
    is_overdue: bool
    is_due_today: bool


def format_interval(interval_days: float) -> str:
    """
    Format an interval for display.

    - 0: "New card"
    - < 1 day: hours
    - 1-30 days: days
    - < 90 days: weeks
    - otherwise: months

    Hours, weeks and months round .5 up.
    """
    if interval_days == 0:
        return "New card"

    if interval_days < 1:
        hours = round_half_up(interval_days * 24)
        return "1 hour" if hours == 1 else f"{hours} hours"

    if interval_days == 1:
        return "1 day"

    if interval_days <= 30:
        return f"{interval_days} days"

    if interval_days < 90:
        weeks = round_half_up(interval_days / 7)
        return "1 week" if weeks == 1 else f"{weeks} weeks"

    months = round_half_up(interval_days / 30)
    return "1 month" if months == 1 else f"{months} months"


def format_due_date(due_date: datetime, now: datetime | None = None) -> DueDateLabel:
    """
    Format a due date relative to now.

    Calendar days ("today", "tomorrow") are taken in the timezone of `now`.
    """
    now = now or utcnow()
    if due_date.tzinfo is not None and now.tzinfo is not None:
        due_date = due_date.astimezone(now.tzinfo)

    if due_date < now:
        return DueDateLabel("Due now", is_overdue=True, is_due_today=False)

    if due_date.date() == now.date():
        time_str = due_date.strftime("%I:%M %p").lstrip("0")
        return DueDateLabel(f"Due today at {time_str}", is_overdue=False, is_due_today=True)

    if due_date.date() == (now + timedelta(days=1)).date():
        return DueDateLabel("Due tomorrow", is_overdue=False, is_due_today=False)

    return DueDateLabel(
        f"{due_date.strftime('%b')} {due_date.day}, {due_date.year}",
        is_overdue=False,
        is_due_today=False,
    )
