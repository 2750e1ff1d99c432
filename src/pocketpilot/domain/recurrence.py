"""Occurrence scheduling for recurring transactions."""

from datetime import date, timedelta
from dateutil.relativedelta import relativedelta

from pocketpilot.domain.entities import FREQUENCIES
from pocketpilot.domain.errors import ValidationError
from pocketpilot.utils.dates import utc_today

_STEPS = {
    "weekly": timedelta(days=7),
    "biweekly": timedelta(days=14),
    "monthly": relativedelta(months=1),
    "yearly": relativedelta(years=1),
}


def next_occurrence(current: date, frequency: str) -> date:
    """Return the occurrence following ``current``.

    Monthly and yearly steps use calendar arithmetic, clamping to the end of
    shorter months (Jan 31 -> Feb 29 in a leap year).

    Raises:
        ValidationError: If the frequency is unknown
    """
    step = _STEPS.get(frequency)
    if step is None:
        raise ValidationError(
            f"Invalid frequency '{frequency}'. Must be one of: {', '.join(FREQUENCIES)}"
        )
    return current + step


def is_due(next_date: date, today: date | None = None) -> bool:
    """True when an occurrence date has been reached."""
    return next_date <= (today or utc_today())


def days_until(next_date: date, today: date | None = None) -> int:
    """Signed number of days until an occurrence (negative when past due)."""
    return (next_date - (today or utc_today())).days
