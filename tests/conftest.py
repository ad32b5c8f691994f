"""Shared pytest fixtures for finreport tests."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from finreport.config import Settings
from finreport.domain.entities import FinancialRecord, PeriodToken, RecordKind, ReportConfig
from finreport.domain.errors import RenderError
from finreport.delivery.mailer import SendResult
from finreport.sources.base import AccountingSource


class FakeSource(AccountingSource):
    """In-memory accounting source that records the calls made to it."""

    def __init__(self, expenses=(), invoices=(), payments=(), fail_with=None):
        self.records = {
            RecordKind.EXPENSE: list(expenses),
            RecordKind.INVOICE: list(invoices),
            RecordKind.PAYMENT: list(payments),
        }
        self.calls = []
        self.fail_with = fail_with
        self.close_calls = 0

    def close(self):
        self.close_calls += 1

    def _fetch(self, kind, start_date, end_date):
        self.calls.append((kind, start_date, end_date))
        if self.fail_with is not None:
            raise self.fail_with
        return list(self.records[kind])

    def get_expenses(self, start_date=None, end_date=None):
        return self._fetch(RecordKind.EXPENSE, start_date, end_date)

    def get_invoices(self, start_date=None, end_date=None):
        return self._fetch(RecordKind.INVOICE, start_date, end_date)

    def get_payments(self, start_date=None, end_date=None):
        return self._fetch(RecordKind.PAYMENT, start_date, end_date)

    def ping(self):
        if self.fail_with is not None:
            raise self.fail_with


class FakeRenderer:
    """Renderer stand-in that counts init/close calls."""

    instances = []

    def __init__(self, fail=False):
        self.fail = fail
        self.init_calls = 0
        self.close_calls = 0
        FakeRenderer.instances.append(self)

    def init(self):
        self.init_calls += 1

    def render(self, report):
        if self.fail:
            raise RenderError("Error generating PDF: boom")
        return b"%PDF-fake " + report.period_label.encode()

    def close(self):
        self.close_calls += 1


class FakeMailer:
    """Mail sender stand-in that keeps sent messages."""

    def __init__(self, fail_with=None, verified=True):
        self.sent = []
        self.fail_with = fail_with
        self.verified = verified

    def send(self, subject, text, html=None, to=None, attachment=None):
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(
            {"subject": subject, "text": text, "html": html, "to": to, "attachment": attachment}
        )
        return SendResult(message_id="<fake@finreport>", recipients=(to or "",))

    def verify_connection(self):
        return self.verified


@pytest.fixture
def make_record():
    """Build FinancialRecords with short keyword arguments."""

    def _make(
        amount="0",
        on=None,
        kind=RecordKind.EXPENSE,
        category=None,
        counterparty=None,
        balance=None,
        **fields,
    ):
        return FinancialRecord(
            kind=kind,
            amount=Decimal(str(amount)),
            date=date.fromisoformat(on) if isinstance(on, str) else on,
            category_name=category,
            counterparty_name=counterparty,
            balance=Decimal(str(balance)) if balance is not None else None,
            **fields,
        )

    return _make


@pytest.fixture
def march_expenses(make_record):
    """Two March 2024 expenses in different categories."""
    return [
        make_record("100", "2024-03-01", category="Utilities", counterparty="City Water", id="e1"),
        make_record("40", "2024-03-15", category="Landscaping", counterparty="Green Co", id="e2"),
    ]


@pytest.fixture
def march_invoices(make_record):
    """One March 2024 invoice plus an older unpaid one."""
    return [
        make_record(
            "500", "2024-03-10", kind=RecordKind.INVOICE, counterparty="Unit 4",
            balance="0", reference_number="INV-0004", id="i1",
        ),
        make_record(
            "250", "2023-11-02", kind=RecordKind.INVOICE, counterparty="Unit 7",
            balance="125.50", reference_number="INV-0001", id="i0",
        ),
    ]


@pytest.fixture
def report_config():
    return ReportConfig(
        report_title="Maple Court HOA Report",
        default_period=PeriodToken.CURRENT_MONTH,
        default_recipients="board@example.com",
    )


@pytest.fixture
def fixed_now():
    return datetime(2024, 4, 2, 9, 30)


@pytest.fixture
def settings():
    return Settings(
        api_url="https://invoicing.example.com",
        api_token="secret-token",
        api_per_page=250,
        smtp_host="smtp.example.com",
        smtp_port=587,
        smtp_secure=False,
        smtp_user="reports@example.com",
        smtp_password="hunter2",
        email_from="reports@example.com",
        email_to="board@example.com",
        report_title="Maple Court HOA Report",
        report_period=PeriodToken.CURRENT_MONTH,
        report_kinds=(RecordKind.EXPENSE, RecordKind.INVOICE, RecordKind.PAYMENT),
        include_unpaid=True,
        log_level="WARNING",
    )


@pytest.fixture(autouse=True)
def reset_fake_renderers():
    FakeRenderer.instances = []
    yield
    FakeRenderer.instances = []


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
