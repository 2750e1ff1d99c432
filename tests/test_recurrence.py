"""Tests for the recurrence calculator."""

from datetime import date

import pytest

from pocketpilot.domain.errors import ValidationError
from pocketpilot.domain.recurrence import days_until, is_due, next_occurrence


@pytest.mark.parametrize(
    "current,frequency,expected",
    [
        (date(2024, 1, 15), "weekly", date(2024, 1, 22)),
        (date(2024, 1, 15), "biweekly", date(2024, 1, 29)),
        (date(2024, 1, 31), "monthly", date(2024, 2, 29)),
        (date(2023, 1, 31), "monthly", date(2023, 2, 28)),
        (date(2024, 12, 15), "monthly", date(2025, 1, 15)),
        (date(2024, 2, 29), "yearly", date(2025, 2, 28)),
        (date(2024, 6, 1), "yearly", date(2025, 6, 1)),
    ],
)
def test_next_occurrence(current, frequency, expected):
    assert next_occurrence(current, frequency) == expected


def test_unknown_frequency():
    with pytest.raises(ValidationError):
        next_occurrence(date(2024, 1, 1), "daily")


def test_is_due():
    today = date(2024, 5, 10)
    assert is_due(date(2024, 5, 10), today)
    assert is_due(date(2024, 5, 1), today)
    assert not is_due(date(2024, 5, 11), today)


def test_days_until():
    today = date(2024, 5, 10)
    assert days_until(date(2024, 5, 13), today) == 3
    assert days_until(date(2024, 5, 8), today) == -2
