"""Main CLI entry point."""

import click

from finreport.config import get_settings
from finreport.logging_config import setup_logging

# Import and register all commands at module level
from finreport.cli.commands import connections, report


@click.group()
@click.option(
    "--env-file",
    type=click.Path(dir_okay=False),
    help="Path to a .env file (defaults to ./.env when present)",
    envvar="FINREPORT_ENV_FILE",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Log level (overrides FINREPORT_LOG_LEVEL environment variable)",
)
@click.pass_context
def cli(ctx, env_file: str | None, log_level: str | None):
    """finreport - Financial report automation.

    Pulls expenses, invoices and payments from Invoice Ninja, renders a PDF
    report for a period, and emails it to stakeholders.
    """
    ctx.ensure_object(dict)

    # Load settings only when actually running a command (not when showing help)
    if ctx.invoked_subcommand is not None and "settings" not in ctx.obj:
        settings = get_settings(env_file)
        setup_logging(log_level or settings.log_level)
        ctx.obj["settings"] = settings


# Register all commands
connections.register_commands(cli)
report.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
