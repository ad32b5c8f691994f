"""Abstract accounting source interface."""

from abc import ABC, abstractmethod
from datetime import date
from typing import Optional

from finreport.domain.entities import FinancialRecord, RecordKind


class AccountingSource(ABC):
    """Abstract read-only interface to the accounting system."""

    @abstractmethod
    def get_expenses(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[FinancialRecord]:
        """Fetch all expenses, optionally narrowed server-side to a date range."""
        pass

    @abstractmethod
    def get_invoices(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[FinancialRecord]:
        """Fetch all invoices, optionally narrowed server-side to a date range."""
        pass

    @abstractmethod
    def get_payments(
        self, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> list[FinancialRecord]:
        """Fetch all payments, optionally narrowed server-side to a date range."""
        pass

    @abstractmethod
    def ping(self) -> None:
        """Make one cheap authenticated request. Raises on failure."""
        pass

    def close(self) -> None:
        """Release any connections held by the source."""

    def __enter__(self) -> "AccountingSource":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def get_records(
        self,
        kind: RecordKind,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[FinancialRecord]:
        """Fetch records of the given kind."""
        fetchers = {
            RecordKind.EXPENSE: self.get_expenses,
            RecordKind.INVOICE: self.get_invoices,
            RecordKind.PAYMENT: self.get_payments,
        }
        return fetchers[RecordKind(kind)](start_date=start_date, end_date=end_date)
