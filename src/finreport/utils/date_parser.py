"""Date parsing utilities."""

from datetime import date, datetime, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-01-15", "January 15, 2024", etc.
    - Relative dates: "today", "yesterday", "last month", "this year", etc.

    Relative month and year phrases resolve to the first day of that period.
    Partial dates fill missing fields from January 1 of the reference year,
    so "2024-03" is March 1, 2024 and "2024" is January 1, 2024.

    Args:
        date_str: Date string in various formats
        today: Reference date for relative phrases (defaults to today)

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    if today is None:
        today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    if date_str.startswith("last "):
        period = date_str[5:]
        if period == "month":
            return (today - relativedelta(months=1)).replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1) - relativedelta(years=1)

    elif date_str.startswith("this "):
        period = date_str[5:]
        if period == "month":
            return today.replace(day=1)
        elif period == "year":
            return today.replace(month=1, day=1)

    if not date_str:
        raise ValueError("Empty date string")

    try:
        dt = date_parser.parse(date_str, default=datetime(today.year, 1, 1))
        return dt.date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_record_date(value: object) -> Optional[date]:
    """Parse a date field from an API payload, never raising.

    Accepts date and datetime objects and ISO-8601 strings such as
    "2024-03-01" or "2024-03-01 12:30:00". Relative phrases are not
    recognized here.

    Returns:
        Date object, or None when the value is absent or unparsable
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None

    try:
        return date_parser.isoparse(value.strip()).date()
    except (ValueError, OverflowError):
        return None
