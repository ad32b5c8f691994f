"""Report commands."""

import click

from finreport.cli.error_handling import handle_error
from finreport.cli.period_args import resolve_cli_period
from finreport.config import Settings, parse_kinds
from finreport.delivery.mailer import create_mail_sender
from finreport.delivery.templates import KIND_TITLES, NET_LABELS, format_money
from finreport.domain.entities import ReportData
from finreport.domain.errors import FinReportError
from finreport.domain.pipeline import (
    DEFAULT_OUTPUT,
    DEFAULT_TEST_OUTPUT,
    ReportOptions,
    ReportPipeline,
)
from finreport.sources.factories import create_invoice_ninja_client

RULE = "═" * 63


def build_pipeline(settings: Settings, with_mailer: bool) -> ReportPipeline:
    """Build a pipeline from settings.

    Raises:
        ConfigurationError: If the API or (when requested) email settings are missing
    """
    source = create_invoice_ninja_client(
        base_url=settings.api_url,
        token=settings.api_token,
        per_page=settings.api_per_page,
    )
    try:
        mailer = create_mail_sender(settings) if with_mailer else None
    except BaseException:
        source.close()
        raise
    return ReportPipeline(source, settings.report_config(), mailer=mailer)


def _options(ctx, settings: Settings, period, start_date, end_date, kinds, no_unpaid, **extra):
    token, custom = resolve_cli_period(
        ctx,
        period=period,
        start_date=start_date,
        end_date=end_date,
        default_period=settings.report_period,
    )
    return ReportOptions(
        period=token,
        custom=custom,
        kinds=parse_kinds(kinds) if kinds else settings.report_kinds,
        include_unpaid=settings.include_unpaid and not no_unpaid,
        **extra,
    )


def _echo_buckets(title: str, buckets) -> None:
    click.echo(f"{title}:")
    click.echo("-" * 80)
    for bucket in buckets.values():
        count = f"{bucket.count} record{'s' if bucket.count != 1 else ''}"
        click.echo(f"    {bucket.label:<46} {count:>12} {format_money(bucket.subtotal):>16}")
    click.echo()


def display_report(report: ReportData) -> None:
    """Print the period, statistics, groupings and detail lines of a report."""
    click.echo("PERIOD INFORMATION:")
    click.echo(f"   Period: {report.period_label}")
    click.echo(f"   Date Range: {report.interval.start_label} to {report.interval.end_label}")
    click.echo()

    for summary in report.summaries():
        stats = summary.statistics
        title = KIND_TITLES[summary.kind]
        click.echo(f"{title.upper()} STATISTICS:")
        click.echo(f"   Count: {stats.count}")
        click.echo(f"   Total Amount: {format_money(stats.total)}")
        click.echo(f"   Average: {format_money(stats.average)}")
        click.echo(f"   Min: {format_money(stats.min)}")
        click.echo(f"   Max: {format_money(stats.max)}")
        click.echo()

        for name, buckets in summary.groups.items():
            if buckets:
                _echo_buckets(f"{title} by {name.capitalize()}", buckets)

    click.echo("EXPENSE DETAILS:")
    for index, expense in enumerate(report.expenses.records, start=1):
        click.echo(f"   {index}. [{expense.date}] {expense.note or '-'}")
        click.echo(
            f"      Vendor: {expense.counterparty_name or '-'} | "
            f"Category: {expense.category_name or '-'} | "
            f"Amount: {format_money(expense.amount)}"
        )
    click.echo()

    if report.unpaid_invoices:
        click.echo("UNPAID INVOICES:")
        for invoice in report.unpaid_invoices:
            click.echo(
                f"   [{invoice.date or '-'}] #{invoice.reference_number or '-'} "
                f"{invoice.counterparty_name or 'Unknown'}: balance {format_money(invoice.balance)}"
            )
        click.echo(f"   Outstanding Balance: {format_money(report.outstanding_balance)}")
        click.echo()

    click.echo(f"{NET_LABELS[report.net_basis]}: {format_money(report.net_amount)}")
    if report.skipped_records or report.defaulted_amounts:
        click.echo(
            f"Data notes: {report.skipped_records} undated record(s) skipped, "
            f"{report.defaulted_amounts} amount(s) defaulted to $0.00"
        )


def display_result_summary(report: ReportData) -> None:
    click.echo(f"  Period: {report.period_label}")
    click.echo(f"  Expenses: {report.expenses.statistics.count}")
    click.echo(f"  Total: {format_money(report.expenses.total)}")
    for summary in (report.invoices, report.payments):
        if summary is not None:
            click.echo(f"  {KIND_TITLES[summary.kind]}: {format_money(summary.total)}")
    click.echo(f"  Net: {format_money(report.net_amount)}")


_period_argument = click.argument("period", required=False)
_start_option = click.option("--start", "start_date", help="Custom range start date (YYYY-MM-DD)")
_end_option = click.option("--end", "end_date", help="Custom range end date (YYYY-MM-DD)")
_kinds_option = click.option(
    "--kinds",
    help="Comma-separated record kinds to include (expense, invoice, payment)",
)
_unpaid_option = click.option(
    "--no-unpaid", is_flag=True, help="Skip the outstanding-balance section"
)


@click.command("test-inform")
@_period_argument
@_start_option
@_end_option
@click.option(
    "--output",
    "output_path",
    default=DEFAULT_TEST_OUTPUT,
    show_default=True,
    type=click.Path(dir_okay=False),
    help="Where to write the PDF",
)
@_kinds_option
@_unpaid_option
@click.pass_context
def test_inform(ctx, period, start_date, end_date, output_path, kinds, no_unpaid):
    """Generate the report and PDF without sending email.

    PERIOD is one of current-month, last-month, current-year, last-year or
    custom (defaults to REPORT_PERIOD, then current-month).
    """
    settings: Settings = ctx.obj["settings"]
    options = _options(
        ctx, settings, period, start_date, end_date, kinds, no_unpaid,
        output_path=output_path,
    )

    click.echo(RULE)
    click.echo("TEST INFORM - Report Preview (No Email)")
    click.echo(RULE)
    click.echo()

    try:
        with build_pipeline(settings, with_mailer=False) as pipeline:
            result = pipeline.test_inform(options)
    except (FinReportError, OSError) as e:
        handle_error(ctx, e)
        return

    if not result.success:
        click.echo(f"⚠️  {result.message}.")
        return

    display_report(result.report)
    click.echo()
    click.echo(f"✓ PDF generated and saved to: {result.output_path}")
    click.echo(RULE)
    click.echo("✓ TEST INFORM COMPLETED SUCCESSFULLY")
    click.echo(RULE)
    click.echo("Report Summary:")
    display_result_summary(result.report)


@click.command("report")
@_period_argument
@_start_option
@_end_option
@click.option(
    "--output",
    "output_path",
    default=DEFAULT_OUTPUT,
    show_default=True,
    type=click.Path(dir_okay=False),
    help="Where to write the PDF",
)
@click.option("--no-save", is_flag=True, help="Do not write the PDF to disk")
@click.option("--to", "email_to", help="Recipients (overrides EMAIL_TO)")
@_kinds_option
@_unpaid_option
@click.pass_context
def report(ctx, period, start_date, end_date, output_path, no_save, email_to, kinds, no_unpaid):
    """Generate the report and email it.

    PERIOD is one of current-month, last-month, current-year, last-year or
    custom (defaults to REPORT_PERIOD, then current-month).
    """
    settings: Settings = ctx.obj["settings"]
    options = _options(
        ctx, settings, period, start_date, end_date, kinds, no_unpaid,
        output_path=output_path,
        save_to_file=not no_save,
        email_to=email_to,
    )

    click.echo("Starting financial report generation...")

    try:
        with build_pipeline(settings, with_mailer=True) as pipeline:
            result = pipeline.generate_and_send(options)
    except (FinReportError, OSError) as e:
        handle_error(ctx, e)
        return

    if not result.success:
        click.echo(f"{result.message}.")
        return

    click.echo("\n✓ Report generation completed successfully!")
    display_result_summary(result.report)
    if result.output_path:
        click.echo(f"  Saved: {result.output_path}")
    click.echo(f"  Message ID: {result.message_id}")


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(test_inform)
    cli.add_command(report)
