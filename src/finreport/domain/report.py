"""Report assembly domain service."""

import logging
from datetime import date, datetime
from typing import Iterable, Optional, Sequence, Union

from finreport.domain import aggregation
from finreport.domain.entities import (
    ZERO,
    CustomRange,
    DateInterval,
    FinancialRecord,
    KindSummary,
    NetBasis,
    PeriodToken,
    RecordKind,
    ReportConfig,
    ReportData,
    SortOrder,
)
from finreport.domain.period import format_period_label, resolve_period
from finreport.sources.base import AccountingSource

logger = logging.getLogger(__name__)

ALL_KINDS = (RecordKind.EXPENSE, RecordKind.INVOICE, RecordKind.PAYMENT)


def summarize_kind(kind: RecordKind, records: Sequence[FinancialRecord]) -> KindSummary:
    """Build statistics and groupings for one record kind."""
    if kind == RecordKind.EXPENSE:
        groups = {
            "category": aggregation.group_by_category(records),
            "vendor": aggregation.group_by_vendor(records),
            "month": aggregation.group_by_month(records),
        }
    else:
        groups = {
            "client": aggregation.group_by_client(records),
            "month": aggregation.group_by_month(records),
        }

    return KindSummary(
        kind=kind,
        records=tuple(records),
        statistics=aggregation.statistics(records),
        groups=groups,
    )


def assemble_report(
    title: str,
    period_label: str,
    interval: DateInterval,
    expenses: Sequence[FinancialRecord],
    invoices: Optional[Sequence[FinancialRecord]] = None,
    payments: Optional[Sequence[FinancialRecord]] = None,
    unpaid: Optional[Sequence[FinancialRecord]] = None,
    generated_at: Optional[datetime] = None,
    skipped_records: int = 0,
) -> ReportData:
    """Combine per-kind aggregates into a ReportData value.

    The net amount uses the cash basis (payments received minus expenses)
    when payments are present, the accrual basis (invoiced minus expenses)
    when only invoices are present, and is the negated expense total
    otherwise.

    Args:
        title: Report title
        period_label: Human-readable period
        interval: Resolved reporting interval
        expenses: Expenses within the interval
        invoices: Invoices within the interval, or None if not reported
        payments: Payments within the interval, or None if not reported
        unpaid: Invoices with an outstanding balance (whole history)
        generated_at: Generation timestamp (defaults to now)
        skipped_records: Fetched records dropped for lacking a usable date

    Returns:
        ReportData for rendering and mailing
    """
    expense_summary = summarize_kind(RecordKind.EXPENSE, expenses)
    invoice_summary = (
        summarize_kind(RecordKind.INVOICE, invoices) if invoices is not None else None
    )
    payment_summary = (
        summarize_kind(RecordKind.PAYMENT, payments) if payments is not None else None
    )

    if payment_summary is not None:
        net_basis = NetBasis.CASH
        net_amount = payment_summary.total - expense_summary.total
    elif invoice_summary is not None:
        net_basis = NetBasis.ACCRUAL
        net_amount = invoice_summary.total - expense_summary.total
    else:
        net_basis = NetBasis.EXPENSES_ONLY
        net_amount = ZERO - expense_summary.total

    unpaid = tuple(unpaid or ())
    outstanding = sum((inv.balance for inv in unpaid if inv.balance is not None), ZERO)

    defaulted = sum(
        aggregation.count_defaulted(s.records)
        for s in (expense_summary, invoice_summary, payment_summary)
        if s is not None
    )

    return ReportData(
        title=title,
        period_label=period_label,
        interval=interval,
        generated_at=generated_at or datetime.now(),
        expenses=expense_summary,
        invoices=invoice_summary,
        payments=payment_summary,
        unpaid_invoices=unpaid,
        outstanding_balance=outstanding,
        net_amount=net_amount,
        net_basis=net_basis,
        skipped_records=skipped_records,
        defaulted_amounts=defaulted,
    )


class ReportService:
    """Service for fetching records and assembling report data."""

    def __init__(self, source: AccountingSource):
        """Initialize report service.

        Args:
            source: Accounting source to read records from
        """
        self.source = source

    def fetch_period_records(
        self, kind: RecordKind, interval: DateInterval
    ) -> tuple[list[FinancialRecord], int]:
        """Fetch one kind for the interval and re-filter it client-side.

        Returns:
            Tuple of (records in the interval sorted by date, undated count)
        """
        fetched = self.source.get_records(
            kind, start_date=interval.start, end_date=interval.end
        )
        logger.info("Fetched %d %s record(s)", len(fetched), kind.value)
        return self._narrow(kind, fetched, interval)

    def _narrow(
        self, kind: RecordKind, fetched: Sequence[FinancialRecord], interval: DateInterval
    ) -> tuple[list[FinancialRecord], int]:
        undated = sum(1 for record in fetched if record.date is None)
        if undated:
            logger.warning("Skipping %d %s record(s) without a usable date", undated, kind.value)
        in_period = aggregation.filter_by_interval(fetched, interval)
        logger.info("%d %s record(s) in selected period", len(in_period), kind.value)
        return aggregation.sort_by_date(in_period, SortOrder.ASC), undated

    def build_report(
        self,
        config: ReportConfig,
        period: Union[PeriodToken, str, None] = None,
        custom: Optional[CustomRange] = None,
        kinds: Iterable[Union[RecordKind, str]] = ALL_KINDS,
        include_unpaid: bool = True,
        today: Optional[date] = None,
        generated_at: Optional[datetime] = None,
    ) -> ReportData:
        """Resolve the period, fetch each enabled kind in turn and assemble.

        Expenses are always included. When unpaid invoices are requested the
        full invoice history is fetched once and the period subset is taken
        from it.

        Args:
            config: Report defaults (title, default period)
            period: Period token (defaults to config.default_period)
            custom: Bounds for the custom period
            kinds: Record kinds to include
            include_unpaid: Include invoices with an outstanding balance
            today: Reference date for period resolution
            generated_at: Generation timestamp (defaults to now)

        Returns:
            Assembled ReportData
        """
        token = period if period is not None else config.default_period
        interval = resolve_period(token, custom, today=today)
        period_label = format_period_label(token, interval)
        logger.info(
            "Building report for %s (%s to %s)",
            period_label,
            interval.start_label,
            interval.end_label,
        )

        enabled = {RecordKind(kind) for kind in kinds}
        skipped = 0

        expenses, undated = self.fetch_period_records(RecordKind.EXPENSE, interval)
        skipped += undated

        invoices = None
        unpaid = None
        if RecordKind.INVOICE in enabled:
            if include_unpaid:
                history = self.source.get_invoices()
                logger.info("Fetched %d invoice(s) across all dates", len(history))
                invoices, undated = self._narrow(RecordKind.INVOICE, history, interval)
                unpaid = aggregation.sort_by_date(
                    aggregation.unpaid_invoices(history), SortOrder.ASC
                )
            else:
                invoices, undated = self.fetch_period_records(RecordKind.INVOICE, interval)
            skipped += undated
        elif include_unpaid:
            unpaid = aggregation.sort_by_date(
                aggregation.unpaid_invoices(self.source.get_invoices()), SortOrder.ASC
            )

        payments = None
        if RecordKind.PAYMENT in enabled:
            payments, undated = self.fetch_period_records(RecordKind.PAYMENT, interval)
            skipped += undated

        return assemble_report(
            title=config.report_title,
            period_label=period_label,
            interval=interval,
            expenses=expenses,
            invoices=invoices,
            payments=payments,
            unpaid=unpaid,
            generated_at=generated_at,
            skipped_records=skipped,
        )
