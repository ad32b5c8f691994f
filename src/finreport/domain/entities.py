"""Domain model entities for finreport.

These are pure data classes representing the values that flow through a
report run. Raw API payloads are normalized into FinancialRecord once, at
ingestion, so the aggregation code never deals with alternative field names.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Union

ZERO = Decimal("0")


class RecordKind(str, Enum):
    """Kind of financial record pulled from the accounting system."""

    EXPENSE = "expense"
    INVOICE = "invoice"
    PAYMENT = "payment"


class PeriodToken(str, Enum):
    """Named reporting period."""

    CURRENT_MONTH = "current-month"
    LAST_MONTH = "last-month"
    CURRENT_YEAR = "current-year"
    LAST_YEAR = "last-year"
    CUSTOM = "custom"


class SortOrder(str, Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


class NetBasis(str, Enum):
    """How the report's net amount was computed."""

    CASH = "cash"
    ACCRUAL = "accrual"
    EXPENSES_ONLY = "expenses-only"


@dataclass(frozen=True)
class FinancialRecord:
    """Expense, invoice or payment normalized from the accounting API."""

    kind: RecordKind
    amount: Decimal
    date: Optional[date]
    id: Optional[str] = None
    counterparty_name: Optional[str] = None
    category_name: Optional[str] = None
    note: Optional[str] = None
    reference_number: Optional[str] = None
    balance: Optional[Decimal] = None
    amount_defaulted: bool = False


@dataclass(frozen=True)
class DateInterval:
    """Closed date interval with ISO labels for both bounds."""

    start: date
    end: date
    start_label: str
    end_label: str

    @classmethod
    def from_dates(cls, start: date, end: date) -> "DateInterval":
        return cls(
            start=start,
            end=end,
            start_label=start.isoformat(),
            end_label=end.isoformat(),
        )

    def contains(self, value: Optional[date]) -> bool:
        if value is None:
            return False
        return self.start <= value <= self.end


@dataclass(frozen=True)
class CustomRange:
    """Explicit bounds for the custom period."""

    start: Union[date, str, None]
    end: Union[date, str, None]


@dataclass(frozen=True)
class GroupBucket:
    """Records sharing one grouping key, with their subtotal."""

    key: str
    label: str
    members: tuple[FinancialRecord, ...]
    subtotal: Decimal

    @property
    def count(self) -> int:
        return len(self.members)


@dataclass(frozen=True)
class Statistics:
    """Summary statistics over a list of records."""

    count: int = 0
    total: Decimal = ZERO
    average: Decimal = ZERO
    min: Decimal = ZERO
    max: Decimal = ZERO


@dataclass(frozen=True)
class KindSummary:
    """Aggregated view of one record kind within the reporting period."""

    kind: RecordKind
    records: tuple[FinancialRecord, ...]
    statistics: Statistics
    groups: dict[str, dict[str, GroupBucket]] = field(default_factory=dict)

    @property
    def total(self) -> Decimal:
        return self.statistics.total


@dataclass(frozen=True)
class ReportData:
    """Everything the renderer and the mailer need for one report run."""

    title: str
    period_label: str
    interval: DateInterval
    generated_at: datetime
    expenses: KindSummary
    invoices: Optional[KindSummary] = None
    payments: Optional[KindSummary] = None
    unpaid_invoices: tuple[FinancialRecord, ...] = ()
    outstanding_balance: Decimal = ZERO
    net_amount: Decimal = ZERO
    net_basis: NetBasis = NetBasis.EXPENSES_ONLY
    skipped_records: int = 0
    defaulted_amounts: int = 0

    def summaries(self) -> list[KindSummary]:
        """Return the summaries present in this report, expenses first."""
        return [s for s in (self.expenses, self.invoices, self.payments) if s is not None]

    @property
    def record_count(self) -> int:
        return sum(len(s.records) for s in self.summaries())

    @property
    def is_empty(self) -> bool:
        return self.record_count == 0


@dataclass(frozen=True)
class ReportConfig:
    """Report defaults passed explicitly into top-level operations."""

    report_title: str = "HOA Financial Report"
    default_period: PeriodToken = PeriodToken.CURRENT_MONTH
    default_recipients: str = ""
