"""Record filtering, sorting and aggregation.

Every function here is pure and tolerant of malformed records: amounts were
already defaulted to zero at ingestion, and records without a usable date
simply never match a date interval.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Callable, Iterable, Optional, Sequence, Union

from finreport.domain.entities import (
    ZERO,
    DateInterval,
    FinancialRecord,
    GroupBucket,
    SortOrder,
    Statistics,
)

UNCATEGORIZED = "Uncategorized"
UNKNOWN_VENDOR = "Unknown Vendor"
UNKNOWN_CLIENT = "Unknown"
UNKNOWN_MONTH_KEY = "unknown"
UNKNOWN_MONTH_LABEL = "Unknown Date"


def _is_descending(order: Union[SortOrder, str]) -> bool:
    return SortOrder(order) == SortOrder.DESC


def filter_by_interval(
    records: Iterable[FinancialRecord], interval: DateInterval
) -> list[FinancialRecord]:
    """Keep records dated within the closed interval."""
    return [record for record in records if interval.contains(record.date)]


def sort_by_date(
    records: Iterable[FinancialRecord], order: Union[SortOrder, str] = SortOrder.DESC
) -> list[FinancialRecord]:
    """Return records ordered by date; undated records go last."""
    records = list(records)
    dated = [r for r in records if r.date is not None]
    undated = [r for r in records if r.date is None]
    dated.sort(key=lambda r: r.date, reverse=_is_descending(order))
    return dated + undated


def sort_by_amount(
    records: Iterable[FinancialRecord], order: Union[SortOrder, str] = SortOrder.DESC
) -> list[FinancialRecord]:
    """Return records ordered by amount."""
    return sorted(records, key=lambda r: r.amount, reverse=_is_descending(order))


def total_amount(records: Iterable[FinancialRecord]) -> Decimal:
    """Sum of record amounts, zero for no records."""
    return sum((record.amount for record in records), ZERO)


def statistics(records: Iterable[FinancialRecord]) -> Statistics:
    """Compute count, total, average, min and max in one pass."""
    count = 0
    total = ZERO
    low: Optional[Decimal] = None
    high: Optional[Decimal] = None

    for record in records:
        amount = record.amount
        count += 1
        total += amount
        if low is None or amount < low:
            low = amount
        if high is None or amount > high:
            high = amount

    if count == 0:
        return Statistics()

    return Statistics(
        count=count,
        total=total,
        average=total / count,
        min=low,
        max=high,
    )


def group_by(
    records: Iterable[FinancialRecord],
    key_fn: Callable[[FinancialRecord], Optional[str]],
    fallback: str,
    label_fn: Optional[Callable[[str, FinancialRecord], str]] = None,
) -> dict[str, GroupBucket]:
    """Partition records into buckets keyed by key_fn.

    Buckets keep first-seen order. Records whose key is empty land in the
    fallback bucket, so every record appears in exactly one bucket.

    Args:
        records: Records to partition
        key_fn: Returns the grouping key for a record, or None
        fallback: Key used when key_fn returns nothing
        label_fn: Optional display label for a bucket, given its key and
            first member (defaults to the key)

    Returns:
        Mapping of key to GroupBucket
    """
    members: dict[str, list[FinancialRecord]] = defaultdict(list)
    labels: dict[str, str] = {}

    for record in records:
        key = key_fn(record) or fallback
        if key not in labels:
            labels[key] = label_fn(key, record) if label_fn else key
        members[key].append(record)

    return {
        key: GroupBucket(
            key=key,
            label=labels[key],
            members=tuple(group),
            subtotal=total_amount(group),
        )
        for key, group in members.items()
    }


def group_by_category(records: Iterable[FinancialRecord]) -> dict[str, GroupBucket]:
    return group_by(records, lambda r: r.category_name, UNCATEGORIZED)


def group_by_vendor(records: Iterable[FinancialRecord]) -> dict[str, GroupBucket]:
    return group_by(records, lambda r: r.counterparty_name, UNKNOWN_VENDOR)


def group_by_client(records: Iterable[FinancialRecord]) -> dict[str, GroupBucket]:
    return group_by(records, lambda r: r.counterparty_name, UNKNOWN_CLIENT)


def group_by_month(records: Iterable[FinancialRecord]) -> dict[str, GroupBucket]:
    """Group records by calendar month, keyed "YYYY-MM" and labelled "March 2024"."""

    def month_key(record: FinancialRecord) -> Optional[str]:
        return record.date.strftime("%Y-%m") if record.date else None

    def month_label(key: str, record: FinancialRecord) -> str:
        if record.date is None:
            return UNKNOWN_MONTH_LABEL
        return record.date.strftime("%B %Y")

    return group_by(records, month_key, UNKNOWN_MONTH_KEY, month_label)


def unpaid_invoices(invoices: Iterable[FinancialRecord]) -> list[FinancialRecord]:
    """Invoices with an outstanding balance, regardless of date."""
    return [inv for inv in invoices if inv.balance is not None and inv.balance > ZERO]


def count_defaulted(records: Sequence[FinancialRecord]) -> int:
    """Number of records whose amount was missing or unparsable upstream."""
    return sum(1 for record in records if record.amount_defaulted)
