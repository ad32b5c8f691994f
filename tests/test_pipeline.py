"""Tests for the end-to-end report pipeline."""

from datetime import date

import pytest

from conftest import FakeMailer, FakeRenderer, FakeSource
from finreport.domain.entities import CustomRange
from finreport.domain.errors import (
    ConfigurationError,
    DeliveryError,
    RenderError,
    UpstreamFetchError,
)
from finreport.domain.pipeline import (
    NO_RECORDS,
    ReportOptions,
    ReportPipeline,
    attachment_filename,
    check_connections,
)

MARCH = CustomRange(start="2024-03-01", end="2024-03-31")


@pytest.fixture
def source(march_expenses, march_invoices):
    return FakeSource(expenses=march_expenses, invoices=march_invoices)


def _options(tmp_path, **kwargs):
    defaults = dict(period="custom", custom=MARCH, output_path=str(tmp_path / "report.pdf"))
    defaults.update(kwargs)
    return ReportOptions(**defaults)


def test_generate_and_send(source, report_config, tmp_path):
    mailer = FakeMailer()
    pipeline = ReportPipeline(source, report_config, mailer=mailer, renderer_factory=FakeRenderer)

    result = pipeline.generate_and_send(_options(tmp_path, save_to_file=True))

    assert result.success
    assert result.message_id == "<fake@finreport>"
    assert result.output_path == str(tmp_path / "report.pdf")
    assert (tmp_path / "report.pdf").read_bytes().startswith(b"%PDF")

    [sent] = mailer.sent
    assert sent["subject"] == "Maple Court HOA Report - Mar 01, 2024 - Mar 31, 2024"
    assert sent["to"] == "board@example.com"
    assert sent["attachment"].filename == attachment_filename(result.report)
    assert sent["attachment"].content.startswith(b"%PDF")
    assert "Summary:" in sent["text"]
    assert "<html>" in sent["html"]


def test_generate_and_send_without_saving(source, report_config, tmp_path):
    mailer = FakeMailer()
    pipeline = ReportPipeline(source, report_config, mailer=mailer, renderer_factory=FakeRenderer)

    result = pipeline.generate_and_send(_options(tmp_path, email_to="treasurer@example.com"))

    assert result.output_path is None
    assert not (tmp_path / "report.pdf").exists()
    assert mailer.sent[0]["to"] == "treasurer@example.com"


def test_renderer_closed_exactly_once_on_success(source, report_config, tmp_path):
    pipeline = ReportPipeline(source, report_config, renderer_factory=FakeRenderer)

    pipeline.test_inform(_options(tmp_path))

    [renderer] = FakeRenderer.instances
    assert renderer.init_calls == 1
    assert renderer.close_calls == 1


def test_renderer_closed_exactly_once_on_failure(source, report_config, tmp_path):
    pipeline = ReportPipeline(
        source, report_config, mailer=FakeMailer(),
        renderer_factory=lambda: FakeRenderer(fail=True),
    )

    with pytest.raises(RenderError):
        pipeline.generate_and_send(_options(tmp_path))

    [renderer] = FakeRenderer.instances
    assert renderer.close_calls == 1


def test_delivery_failure_after_pdf_saved(source, report_config, tmp_path):
    mailer = FakeMailer(fail_with=DeliveryError("Error sending email: connection refused"))
    pipeline = ReportPipeline(source, report_config, mailer=mailer, renderer_factory=FakeRenderer)

    with pytest.raises(DeliveryError, match="connection refused"):
        pipeline.generate_and_send(_options(tmp_path, save_to_file=True))

    assert (tmp_path / "report.pdf").exists()


def test_send_without_mailer_is_delivery_error(source, report_config, tmp_path):
    pipeline = ReportPipeline(source, report_config, renderer_factory=FakeRenderer)

    with pytest.raises(DeliveryError, match="not configured"):
        pipeline.generate_and_send(_options(tmp_path))


def test_empty_report_is_not_sent(report_config, tmp_path):
    mailer = FakeMailer()
    pipeline = ReportPipeline(FakeSource(), report_config, mailer=mailer, renderer_factory=FakeRenderer)

    result = pipeline.generate_and_send(_options(tmp_path, save_to_file=True))

    assert not result.success
    assert result.message == NO_RECORDS
    assert mailer.sent == []
    assert FakeRenderer.instances == []
    assert not (tmp_path / "report.pdf").exists()


def test_test_inform_saves_and_never_sends(source, report_config, tmp_path):
    mailer = FakeMailer()
    pipeline = ReportPipeline(source, report_config, mailer=mailer, renderer_factory=FakeRenderer)

    result = pipeline.test_inform(_options(tmp_path))

    assert result.success
    assert result.message_id is None
    assert (tmp_path / "report.pdf").read_bytes() == b"%PDF-fake Mar 01, 2024 - Mar 31, 2024"
    assert mailer.sent == []


def test_test_inform_empty_report(report_config, tmp_path):
    pipeline = ReportPipeline(FakeSource(), report_config, renderer_factory=FakeRenderer)

    result = pipeline.test_inform(_options(tmp_path))

    assert not result.success
    assert not (tmp_path / "report.pdf").exists()


def test_upstream_failure_propagates(report_config, tmp_path):
    source = FakeSource(fail_with=UpstreamFetchError("Error fetching /expenses: 500"))
    pipeline = ReportPipeline(source, report_config, renderer_factory=FakeRenderer)

    with pytest.raises(UpstreamFetchError):
        pipeline.test_inform(_options(tmp_path))


def test_default_period_used_when_options_omit_it(source, report_config, tmp_path):
    pipeline = ReportPipeline(source, report_config, renderer_factory=FakeRenderer)

    result = pipeline.test_inform(
        ReportOptions(output_path=str(tmp_path / "r.pdf"), today=date(2024, 3, 20))
    )

    assert result.report.period_label == "March 2024"


def test_check_connections_all_ok():
    result = check_connections(lambda: FakeSource(), lambda: FakeMailer())

    assert result.accounting_api
    assert result.email
    assert result.error is None


def test_check_connections_reports_failures_without_raising():
    def missing_source():
        raise ConfigurationError("Invoice Ninja configuration missing")

    result = check_connections(missing_source, lambda: FakeMailer(verified=False))

    assert not result.accounting_api
    assert not result.email
    assert "Invoice Ninja configuration missing" in result.error
    assert "verification failed" in result.error


def test_check_connections_upstream_error():
    source = FakeSource(fail_with=UpstreamFetchError("Error fetching /expenses: 401"))

    result = check_connections(lambda: source, lambda: FakeMailer())

    assert not result.accounting_api
    assert result.email
    assert result.error == "Error fetching /expenses: 401"


def test_pipeline_context_manager_closes_source(source, report_config, tmp_path):
    with ReportPipeline(source, report_config, renderer_factory=FakeRenderer) as pipeline:
        pipeline.test_inform(_options(tmp_path))

    assert source.close_calls == 1


def test_check_connections_closes_source():
    source = FakeSource()

    check_connections(lambda: source, lambda: FakeMailer())

    assert source.close_calls == 1


def test_check_connections_closes_source_after_failed_ping():
    source = FakeSource(fail_with=UpstreamFetchError("Error fetching /expenses: 401"))

    check_connections(lambda: source, lambda: FakeMailer())

    assert source.close_calls == 1
