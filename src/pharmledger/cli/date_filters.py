"""CLI helpers for date range resolution."""

from datetime import date

import click

from pharmledger.utils.date_parser import get_date_range, parse_date

PERIODS = ["this-month", "this-year", "this-week", "last-month", "last-year", "last-week"]


def date_range_options(command):
    """Add --start-date, --end-date and the period flags to a command."""
    for period in reversed(PERIODS):
        command = click.option(
            f"--{period}",
            period.replace("-", "_"),
            is_flag=True,
            help=f"Limit to {period.replace('-', ' ')}",
        )(command)
    command = click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')")(command)
    command = click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month')")(command)
    return command


def pop_period_flags(kwargs: dict) -> dict[str, bool]:
    """Remove the period flags added by date_range_options from kwargs."""
    return {period: kwargs.pop(period.replace("-", "_"), False) for period in PERIODS}


def parse_date_or_exit(ctx, value: str | None, label: str, default: date | None = None) -> date | None:
    """Parse an optional date option, or exit with a CLI error."""
    if not value:
        return default
    try:
        return parse_date(value)
    except ValueError as e:
        click.echo(f"Error: Invalid {label}: {e}", err=True)
        ctx.exit(1)


def resolve_cli_date_range(
    ctx,
    *,
    start_date: str | None,
    end_date: str | None,
    period_flags: dict[str, bool],
    default_range: tuple[date, date] | None = None,
) -> tuple[date | None, date | None]:
    """Resolve CLI date range from period flags or explicit dates.

    At most one period flag may be set, and never together with explicit
    dates. Without either, ``default_range`` applies.
    """
    selected = [period for period, is_set in period_flags.items() if is_set]
    flag_list = ", ".join(f"--{period}" for period in PERIODS)

    if len(selected) > 1:
        click.echo(f"Error: Only one period option ({flag_list}) can be specified at a time.", err=True)
        ctx.exit(1)
    if selected and (start_date or end_date):
        click.echo(
            f"Error: Period options ({flag_list}) cannot be combined with --start-date or --end-date.",
            err=True,
        )
        ctx.exit(1)

    if selected:
        return get_date_range(selected[0])

    start = parse_date_or_exit(ctx, start_date, "start date")
    end = parse_date_or_exit(ctx, end_date, "end date")
    if start is None and end is None and default_range is not None:
        return default_range
    return start, end
