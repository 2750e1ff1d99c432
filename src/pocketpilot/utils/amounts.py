"""Amount parsing, sign conventions and currency formatting.

Amounts are signed throughout the application: expenses are negative and
income is positive. Values are ``Decimal`` rounded to cents.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
import re

CENT = Decimal("0.01")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "$123.45"
    - "-$123.45"
    - "1,234.56"
    - "(123.45)" (negative in parentheses)

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    text = amount_str.strip()
    is_negative = text.startswith("(") and text.endswith(")")
    if is_negative:
        text = text[1:-1]

    text = re.sub(r"[$€£¥\s]", "", text).replace(",", "")
    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise ValueError(f"Could not parse amount '{amount_str}'")
    if not amount.is_finite():
        raise ValueError(f"Could not parse amount '{amount_str}'")
    return -amount if is_negative else amount


def round_cents(value: Decimal | int | float | str) -> Decimal:
    """Round to two decimal places, half away from zero."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def to_signed_amount(amount: Decimal, kind: str) -> Decimal:
    """Apply the sign convention for an ``expense`` or ``income`` amount."""
    if kind not in ("expense", "income"):
        raise ValueError(f"Unknown transaction type '{kind}'")
    magnitude = abs(Decimal(amount))
    return -magnitude if kind == "expense" else magnitude


def transaction_type(amount: Decimal) -> str:
    """Classify a signed amount as ``expense`` or ``income``."""
    return "expense" if amount < 0 else "income"


def format_currency(amount: Decimal, signed: bool = False) -> str:
    """Format an amount as dollars, e.g. ``$1,234.56``.

    The absolute value is shown unless ``signed`` is set, in which case
    negative amounts get a leading minus sign.
    """
    value = round_cents(amount)
    text = f"${abs(value):,.2f}"
    if signed and value < 0:
        return f"-{text}"
    return text
