"""Environment-driven settings."""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from finreport.domain.entities import PeriodToken, RecordKind, ReportConfig

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "HOA Financial Report"
DEFAULT_KINDS = (RecordKind.EXPENSE, RecordKind.INVOICE, RecordKind.PAYMENT)


@dataclass(frozen=True)
class Settings:
    api_url: str
    api_token: str
    api_per_page: int
    smtp_host: str
    smtp_port: int
    smtp_secure: bool
    smtp_user: str
    smtp_password: str
    email_from: str
    email_to: str
    report_title: str
    report_period: PeriodToken
    report_kinds: tuple[RecordKind, ...]
    include_unpaid: bool
    log_level: str

    def report_config(self) -> ReportConfig:
        return ReportConfig(
            report_title=self.report_title,
            default_period=self.report_period,
            default_recipients=self.email_to,
        )


def _int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    try:
        value = int(raw) if raw else default
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %d", name, raw, default)
        return default
    return value if value > 0 else default


def _bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


def _period(raw: str) -> PeriodToken:
    try:
        return PeriodToken(raw.strip().lower())
    except ValueError:
        logger.warning("Ignoring invalid REPORT_PERIOD=%r, using current-month", raw)
        return PeriodToken.CURRENT_MONTH


def parse_kinds(raw: str) -> tuple[RecordKind, ...]:
    """Parse a comma-separated kind list such as "expense,invoice".

    Plural forms ("expenses") are accepted. Unknown names are ignored with a
    warning; an empty result falls back to all kinds.
    """
    kinds: list[RecordKind] = []
    for part in raw.split(","):
        name = part.strip().lower()
        if not name:
            continue
        if name.endswith("s"):
            name = name[:-1]
        try:
            kind = RecordKind(name)
        except ValueError:
            logger.warning("Ignoring unknown record kind %r", part)
            continue
        if kind not in kinds:
            kinds.append(kind)
    return tuple(kinds) or DEFAULT_KINDS


def get_settings(env_file: Optional[str] = None) -> Settings:
    """Load .env (if present) and build Settings from the environment."""
    load_dotenv(env_file)

    return Settings(
        api_url=os.getenv("INVOICE_NINJA_URL", ""),
        api_token=os.getenv("INVOICE_NINJA_TOKEN", ""),
        api_per_page=_int("INVOICE_NINJA_PER_PAGE", 250),
        smtp_host=os.getenv("EMAIL_HOST", ""),
        smtp_port=_int("EMAIL_PORT", 587),
        smtp_secure=_bool("EMAIL_SECURE", False),
        smtp_user=os.getenv("EMAIL_USER", ""),
        smtp_password=os.getenv("EMAIL_PASSWORD", ""),
        email_from=os.getenv("EMAIL_FROM", ""),
        email_to=os.getenv("EMAIL_TO", ""),
        report_title=os.getenv("REPORT_TITLE", "") or DEFAULT_TITLE,
        report_period=_period(os.getenv("REPORT_PERIOD", "") or PeriodToken.CURRENT_MONTH.value),
        report_kinds=parse_kinds(os.getenv("REPORT_KINDS", "")),
        include_unpaid=_bool("REPORT_INCLUDE_UNPAID", True),
        log_level=(os.getenv("FINREPORT_LOG_LEVEL", "") or "INFO").upper(),
    )
