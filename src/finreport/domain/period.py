"""Reporting period resolution."""

import logging
from datetime import date, datetime, timedelta
from typing import Optional, Union

from dateutil.relativedelta import relativedelta

from finreport.domain.entities import CustomRange, DateInterval, PeriodToken
from finreport.domain.errors import (
    InvalidConfigurationError,
    UnknownPeriodError,
    custom_range_incomplete,
    invalid_custom_bound,
    unknown_period,
)
from finreport.utils.date_parser import parse_date

logger = logging.getLogger(__name__)

MONTHLY_TOKENS = (PeriodToken.CURRENT_MONTH, PeriodToken.LAST_MONTH)
YEARLY_TOKENS = (PeriodToken.CURRENT_YEAR, PeriodToken.LAST_YEAR)


def supported_periods() -> list[str]:
    return [token.value for token in PeriodToken]


def parse_period_token(value: Union[PeriodToken, str]) -> PeriodToken:
    """Convert a period string into a PeriodToken.

    Raises:
        UnknownPeriodError: If the value is not a supported period
    """
    if isinstance(value, PeriodToken):
        return value
    try:
        return PeriodToken(str(value).strip().lower())
    except ValueError:
        raise UnknownPeriodError(unknown_period(value, supported_periods())) from None


def month_bounds(day: date) -> tuple[date, date]:
    """Return first and last calendar day of the month containing day."""
    start = day.replace(day=1)
    end = start + relativedelta(months=1) - timedelta(days=1)
    return start, end


def year_bounds(day: date) -> tuple[date, date]:
    """Return January 1 and December 31 of the year containing day."""
    return date(day.year, 1, 1), date(day.year, 12, 31)


def _custom_bound(which: str, value: Union[date, str, None], today: date) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return parse_date(value, today=today)
    except ValueError as e:
        raise InvalidConfigurationError(invalid_custom_bound(which, value, e)) from e


def resolve_period(
    token: Union[PeriodToken, str],
    custom: Optional[CustomRange] = None,
    today: Optional[date] = None,
) -> DateInterval:
    """Resolve a period token into a closed date interval.

    Args:
        token: Period token or its string value
        custom: Start and end bounds, required for the custom period
        today: Reference date (defaults to today)

    Returns:
        DateInterval covering the period, both ends inclusive

    Raises:
        UnknownPeriodError: If the token is not recognized
        InvalidConfigurationError: If a custom range is missing or unparsable
    """
    period = parse_period_token(token)
    if today is None:
        today = date.today()

    if period == PeriodToken.CURRENT_MONTH:
        start, end = month_bounds(today)
    elif period == PeriodToken.LAST_MONTH:
        start, end = month_bounds(today - relativedelta(months=1))
    elif period == PeriodToken.CURRENT_YEAR:
        start, end = year_bounds(today)
    elif period == PeriodToken.LAST_YEAR:
        start, end = year_bounds(today - relativedelta(years=1))
    else:
        if custom is None or not custom.start or not custom.end:
            raise InvalidConfigurationError(custom_range_incomplete())
        start = _custom_bound("start", custom.start, today)
        end = _custom_bound("end", custom.end, today)
        if start > end:
            # Kept as-is: a reversed range matches no records.
            logger.warning("Custom range start %s is after end %s", start, end)

    return DateInterval.from_dates(start, end)


def format_period_label(token: Union[PeriodToken, str], interval: DateInterval) -> str:
    """Format a human-readable label for a resolved period.

    Monthly periods render as "March 2024", yearly periods as "2024", and
    custom or unrecognized tokens as "Mar 01, 2024 - Mar 31, 2024".
    """
    try:
        period = parse_period_token(token)
    except UnknownPeriodError:
        period = None

    if period in MONTHLY_TOKENS:
        return interval.start.strftime("%B %Y")
    if period in YEARLY_TOKENS:
        return interval.start.strftime("%Y")
    return f"{interval.start.strftime('%b %d, %Y')} - {interval.end.strftime('%b %d, %Y')}"
