"""Domain layer for finreport application."""

from finreport.domain.entities import (
    FinancialRecord,
    DateInterval,
    PeriodToken,
    RecordKind,
    ReportConfig,
    ReportData,
)
from finreport.domain.errors import FinReportError, DomainError, CollaboratorError

__all__ = [
    "FinancialRecord",
    "DateInterval",
    "PeriodToken",
    "RecordKind",
    "ReportConfig",
    "ReportData",
    "FinReportError",
    "DomainError",
    "CollaboratorError",
]
