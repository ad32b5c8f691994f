"""Connection test command."""

import click

from finreport.config import Settings
from finreport.delivery.mailer import create_mail_sender
from finreport.domain.pipeline import check_connections
from finreport.sources.factories import create_invoice_ninja_client


@click.command("test")
@click.pass_context
def test_connections(ctx):
    """Check the accounting API and the mail server.

    Always exits 0; read the output for the result of each check.
    """
    settings: Settings = ctx.obj["settings"]
    click.echo("Testing connections...")

    result = check_connections(
        source_factory=lambda: create_invoice_ninja_client(
            base_url=settings.api_url,
            token=settings.api_token,
            per_page=settings.api_per_page,
        ),
        mailer_factory=lambda: create_mail_sender(settings),
    )

    click.echo(f"{'✓' if result.accounting_api else '✗'} Invoice Ninja API "
               f"{'connected' if result.accounting_api else 'unreachable'}")
    click.echo(f"{'✓' if result.email else '✗'} Email connection "
               f"{'verified' if result.email else 'failed'}")
    if result.error:
        click.echo(f"  Details: {result.error}")


def register_commands(cli):
    """Register connection test command with main CLI."""
    cli.add_command(test_connections)
