"""Tests for environment-driven settings."""

import os

import pytest

from finreport.config import get_settings, parse_kinds
from finreport.domain.entities import PeriodToken, RecordKind

ENV_NAMES = [
    "INVOICE_NINJA_URL",
    "INVOICE_NINJA_TOKEN",
    "INVOICE_NINJA_PER_PAGE",
    "EMAIL_HOST",
    "EMAIL_PORT",
    "EMAIL_SECURE",
    "EMAIL_USER",
    "EMAIL_PASSWORD",
    "EMAIL_FROM",
    "EMAIL_TO",
    "REPORT_TITLE",
    "REPORT_PERIOD",
    "REPORT_KINDS",
    "REPORT_INCLUDE_UNPAID",
    "FINREPORT_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    # load_dotenv writes to os.environ directly
    monkeypatch.setattr(os, "environ", dict(os.environ))
    for name in ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def test_defaults():
    settings = get_settings()

    assert settings.api_url == ""
    assert settings.api_per_page == 250
    assert settings.smtp_port == 587
    assert settings.smtp_secure is False
    assert settings.report_title == "HOA Financial Report"
    assert settings.report_period == PeriodToken.CURRENT_MONTH
    assert settings.report_kinds == (RecordKind.EXPENSE, RecordKind.INVOICE, RecordKind.PAYMENT)
    assert settings.include_unpaid is True
    assert settings.log_level == "INFO"


def test_values_from_environment(monkeypatch):
    monkeypatch.setenv("INVOICE_NINJA_URL", "https://ninja.example.org")
    monkeypatch.setenv("EMAIL_PORT", "465")
    monkeypatch.setenv("EMAIL_SECURE", "true")
    monkeypatch.setenv("REPORT_TITLE", "Board Report")
    monkeypatch.setenv("REPORT_PERIOD", "Last-Year")
    monkeypatch.setenv("REPORT_KINDS", "expenses, payments")
    monkeypatch.setenv("REPORT_INCLUDE_UNPAID", "no")
    monkeypatch.setenv("FINREPORT_LOG_LEVEL", "debug")

    settings = get_settings()

    assert settings.api_url == "https://ninja.example.org"
    assert settings.smtp_port == 465
    assert settings.smtp_secure is True
    assert settings.report_title == "Board Report"
    assert settings.report_period == PeriodToken.LAST_YEAR
    assert settings.report_kinds == (RecordKind.EXPENSE, RecordKind.PAYMENT)
    assert settings.include_unpaid is False
    assert settings.log_level == "DEBUG"


def test_invalid_values_fall_back(monkeypatch):
    monkeypatch.setenv("EMAIL_PORT", "smtp")
    monkeypatch.setenv("INVOICE_NINJA_PER_PAGE", "-5")
    monkeypatch.setenv("REPORT_PERIOD", "fortnight")

    settings = get_settings()

    assert settings.smtp_port == 587
    assert settings.api_per_page == 250
    assert settings.report_period == PeriodToken.CURRENT_MONTH


def test_env_file_is_loaded(tmp_path):
    env_file = tmp_path / "finreport.env"
    env_file.write_text("INVOICE_NINJA_TOKEN=from-file\nEMAIL_TO=board@example.com\n")

    settings = get_settings(str(env_file))

    assert settings.api_token == "from-file"
    assert settings.email_to == "board@example.com"


def test_report_config(settings):
    config = settings.report_config()

    assert config.report_title == "Maple Court HOA Report"
    assert config.default_recipients == "board@example.com"


def test_parse_kinds_ignores_unknown_and_duplicates():
    assert parse_kinds("invoice, bogus, invoices") == (RecordKind.INVOICE,)
    assert parse_kinds("bogus") == (RecordKind.EXPENSE, RecordKind.INVOICE, RecordKind.PAYMENT)
