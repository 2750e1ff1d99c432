"""Utility functions for pocketpilot."""

from pocketpilot.utils.dates import parse_date, parse_date_with_format, utc_today
from pocketpilot.utils.amounts import (
    parse_amount,
    round_cents,
    to_signed_amount,
    transaction_type,
    format_currency,
)

__all__ = [
    "parse_date",
    "parse_date_with_format",
    "utc_today",
    "parse_amount",
    "round_cents",
    "to_signed_amount",
    "transaction_type",
    "format_currency",
]
