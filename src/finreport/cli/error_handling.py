"""CLI error handling helpers."""

import click

from finreport.domain.errors import FinReportError


def handle_error(ctx: click.Context, error: FinReportError | OSError) -> None:
    """Render an error and exit with failure."""
    click.echo(f"\n✗ Error: {error}", err=True)
    ctx.exit(1)
