"""Amount parsing utilities."""

from decimal import Decimal, InvalidOperation
import re

ZERO = Decimal("0")


def parse_amount(amount_str: str) -> Decimal:
    """Parse an amount string into a Decimal.

    Handles various formats:
    - "123.45"
    - "$123.45"
    - "-123.45"
    - "-$123.45"
    - "1,234.56"
    - "(123.45)" (negative in parentheses)

    Args:
        amount_str: Amount string

    Returns:
        Decimal amount

    Raises:
        ValueError: If amount string cannot be parsed
    """
    if not amount_str or not amount_str.strip():
        raise ValueError("Empty amount string")

    amount_str = amount_str.strip()

    # Handle parentheses notation (negative)
    is_negative = False
    if amount_str.startswith("(") and amount_str.endswith(")"):
        is_negative = True
        amount_str = amount_str[1:-1]

    amount_str = re.sub(r"[$€£¥]", "", amount_str)
    amount_str = amount_str.replace(",", "").strip()

    try:
        amount = Decimal(amount_str)
    except InvalidOperation as e:
        raise ValueError(f"Could not parse amount '{amount_str}': {e}")

    if not amount.is_finite():
        raise ValueError(f"Amount '{amount_str}' is not a finite number")

    return -amount if is_negative else amount


def parse_amount_lenient(value: object) -> tuple[Decimal, bool]:
    """Parse an amount from an API payload field, never raising.

    Accepts strings, ints, floats and Decimals. Missing or unparsable values
    become zero.

    Returns:
        Tuple of (amount, defaulted) where defaulted is True when the value
        was absent or could not be parsed.
    """
    if value is None or isinstance(value, bool):
        return ZERO, True

    if isinstance(value, Decimal):
        return (value, False) if value.is_finite() else (ZERO, True)

    if isinstance(value, (int, float)):
        amount = Decimal(str(value))
        return (amount, False) if amount.is_finite() else (ZERO, True)

    try:
        return parse_amount(str(value)), False
    except ValueError:
        return ZERO, True
