"""CLI helpers for period resolution."""

from typing import Optional

import click

from finreport.domain.entities import CustomRange, PeriodToken
from finreport.domain.errors import UnknownPeriodError
from finreport.domain.period import parse_period_token


def resolve_cli_period(
    ctx,
    *,
    period: str | None,
    start_date: str | None,
    end_date: str | None,
    default_period: PeriodToken,
) -> tuple[PeriodToken, Optional[CustomRange]]:
    """Resolve the period argument and --start/--end options.

    Explicit dates imply the custom period. The dates themselves are parsed
    later, when the period is resolved.
    """
    token = default_period
    if period:
        try:
            token = parse_period_token(period)
        except UnknownPeriodError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)

    if start_date or end_date:
        if period and token != PeriodToken.CUSTOM:
            click.echo(
                "Error: --start/--end can only be combined with the 'custom' period.",
                err=True,
            )
            ctx.exit(1)
        token = PeriodToken.CUSTOM

    if token == PeriodToken.CUSTOM:
        return token, CustomRange(start=start_date, end=end_date)

    return token, None
