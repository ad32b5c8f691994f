"""End-to-end report pipeline: build, render, save and send."""

import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Callable, Optional, Union

from finreport.delivery.mailer import Attachment, MailSender
from finreport.delivery.pdf import PdfRenderer
from finreport.delivery.templates import render_email_html, render_email_text
from finreport.domain.entities import CustomRange, PeriodToken, RecordKind, ReportConfig, ReportData
from finreport.domain.errors import DeliveryError, FinReportError
from finreport.domain.report import ALL_KINDS, ReportService
from finreport.sources.base import AccountingSource

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = "./financial-report.pdf"
DEFAULT_TEST_OUTPUT = "./financial-report-test.pdf"
NO_RECORDS = "No records found for the selected period"


@dataclass(frozen=True)
class ReportOptions:
    period: Union[PeriodToken, str, None] = None
    custom: Optional[CustomRange] = None
    email_to: Optional[str] = None
    save_to_file: bool = False
    output_path: str = DEFAULT_OUTPUT
    kinds: tuple[RecordKind, ...] = ALL_KINDS
    include_unpaid: bool = True
    today: Optional[date] = None


@dataclass(frozen=True)
class ReportResult:
    success: bool
    message: str
    report: Optional[ReportData] = None
    output_path: Optional[str] = None
    message_id: Optional[str] = None


@dataclass(frozen=True)
class ConnectionTestResult:
    accounting_api: bool
    email: bool
    error: Optional[str] = None


def attachment_filename(report: ReportData) -> str:
    return f"financial-report-{report.generated_at.strftime('%Y-%m-%d')}.pdf"


def check_connections(
    source_factory: Callable[[], AccountingSource],
    mailer_factory: Callable[[], MailSender],
) -> ConnectionTestResult:
    """Check the accounting API and the mail server. Never raises.

    Factories are called here so that missing configuration is reported as a
    failed check rather than an exception.
    """
    errors = []

    logger.info("Testing accounting API...")
    try:
        with source_factory() as source:
            source.ping()
        api_ok = True
    except FinReportError as e:
        logger.error("Accounting API check failed: %s", e)
        errors.append(str(e))
        api_ok = False

    logger.info("Testing email connection...")
    try:
        email_ok = mailer_factory().verify_connection()
        if not email_ok:
            errors.append("Email connection verification failed")
    except FinReportError as e:
        logger.error("Email check failed: %s", e)
        errors.append(str(e))
        email_ok = False

    return ConnectionTestResult(
        accounting_api=api_ok,
        email=email_ok,
        error="; ".join(errors) or None,
    )


class ReportPipeline:
    """Coordinates one report run from fetch to delivery."""

    def __init__(
        self,
        source: AccountingSource,
        config: ReportConfig,
        mailer: Optional[MailSender] = None,
        renderer_factory: Callable[[], PdfRenderer] = PdfRenderer,
    ):
        """Initialize the pipeline.

        Args:
            source: Accounting source to read records from
            config: Report defaults
            mailer: Mail sender, required only for sending
            renderer_factory: Builds a fresh renderer for each render
        """
        self.source = source
        self.config = config
        self.mailer = mailer
        self.renderer_factory = renderer_factory
        self.service = ReportService(source)

    def close(self) -> None:
        """Release the accounting source's connections."""
        self.source.close()

    def __enter__(self) -> "ReportPipeline":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def build(self, options: ReportOptions) -> ReportData:
        return self.service.build_report(
            self.config,
            period=options.period,
            custom=options.custom,
            kinds=options.kinds,
            include_unpaid=options.include_unpaid,
            today=options.today,
        )

    def render(self, report: ReportData) -> bytes:
        """Render the PDF, closing the renderer on every exit path."""
        renderer = self.renderer_factory()
        try:
            renderer.init()
            pdf = renderer.render(report)
        finally:
            renderer.close()
        logger.info("PDF generated successfully (%d bytes)", len(pdf))
        return pdf

    def save(self, pdf: bytes, output_path: str) -> str:
        path = Path(output_path)
        path.write_bytes(pdf)
        logger.info("PDF saved to: %s", path)
        return str(path)

    def generate_and_send(self, options: ReportOptions) -> ReportResult:
        """Build, render, optionally save, and email the report.

        Raises:
            FinReportError: Any failure along the way, after logging it
        """
        try:
            report = self.build(options)
            if report.is_empty:
                logger.info("No records found for the selected period.")
                return ReportResult(success=False, message=NO_RECORDS, report=report)

            pdf = self.render(report)
            output_path = self.save(pdf, options.output_path) if options.save_to_file else None

            if self.mailer is None:
                raise DeliveryError("Email is not configured")

            logger.info("Sending email...")
            result = self.mailer.send(
                subject=f"{report.title} - {report.period_label}",
                text=render_email_text(report),
                html=render_email_html(report),
                to=options.email_to or self.config.default_recipients or None,
                attachment=Attachment(attachment_filename(report), pdf),
            )
        except (FinReportError, OSError) as e:
            logger.error("Error generating report: %s", e)
            raise

        return ReportResult(
            success=True,
            message="Report generated and sent successfully",
            report=report,
            output_path=output_path,
            message_id=result.message_id,
        )

    def test_inform(self, options: ReportOptions) -> ReportResult:
        """Build and render the report and save the PDF without sending.

        Raises:
            FinReportError: Any failure along the way, after logging it
        """
        try:
            report = self.build(options)
            if report.is_empty:
                logger.info("No records found for the selected period.")
                return ReportResult(success=False, message=NO_RECORDS, report=report)

            pdf = self.render(report)
            output_path = self.save(pdf, options.output_path)
        except (FinReportError, OSError) as e:
            logger.error("Error during test inform: %s", e)
            raise

        return ReportResult(
            success=True,
            message="Test inform completed successfully",
            report=report,
            output_path=output_path,
        )
