"""Date parsing and calendar helpers."""

from datetime import date, datetime, timedelta, UTC
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

# Import-format tokens accepted by CSV formats, mapped to strptime patterns
DATE_FORMATS = {
    "YYYY-MM-DD": "%Y-%m-%d",
    "MM/DD/YYYY": "%m/%d/%Y",
    "DD/MM/YYYY": "%d/%m/%Y",
    "YYYY/MM/DD": "%Y/%m/%d",
}

_WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]


def utc_today() -> date:
    """Return the current calendar date in UTC."""
    return datetime.now(UTC).date()


def parse_date(date_str: str, today: date | None = None) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "January 15, 2024") and a few
    relative phrases: "today", "yesterday", "tomorrow", "last monday",
    "this month", "next month", "last year", ...

    Args:
        date_str: Date string
        today: Reference date for relative phrases (defaults to UTC today)

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    text = date_str.strip().lower()
    today = today or utc_today()

    simple = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if text in simple:
        return simple[text]

    if " " in text:
        prefix, period = text.split(" ", 1)
        shift = {"last": -1, "this": 0, "next": 1}.get(prefix)
        if shift is not None:
            if period == "month":
                return (today + relativedelta(months=shift)).replace(day=1)
            if period == "year":
                return today.replace(month=1, day=1) + relativedelta(years=shift)
            if period == "week":
                return today - timedelta(days=today.weekday()) + timedelta(weeks=shift)
            if period in _WEEKDAYS and prefix == "last":
                days_ago = (today.weekday() - _WEEKDAYS.index(period)) % 7 or 7
                return today - timedelta(days=days_ago)

    try:
        return date_parser.parse(text).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_date_with_format(value: str, date_format: str | None) -> date:
    """Parse a CSV date cell using one of the DATE_FORMATS tokens.

    Falls back to :func:`parse_date` when no format is configured.

    Raises:
        ValueError: If the token is unknown or the value does not match it
    """
    if not date_format:
        return parse_date(value)
    pattern = DATE_FORMATS.get(date_format)
    if pattern is None:
        raise ValueError(
            f"Unknown date format '{date_format}'. Supported: {', '.join(DATE_FORMATS)}"
        )
    try:
        return datetime.strptime(value.strip(), pattern).date()
    except ValueError:
        raise ValueError(f"Date '{value}' does not match format {date_format}")


def month_bounds(day: date) -> tuple[date, date]:
    """Return the first and last calendar day of the month containing ``day``."""
    start = day.replace(day=1)
    end = start + relativedelta(months=1) - timedelta(days=1)
    return start, end


def previous_month_bounds(day: date) -> tuple[date, date]:
    """Return the first and last day of the month before ``day``'s month."""
    return month_bounds(day.replace(day=1) - timedelta(days=1))


def months_between(start: date, end: date) -> int:
    """Whole calendar months from ``start`` to ``end``, ignoring the day of month."""
    return (end.year - start.year) * 12 + (end.month - start.month)
