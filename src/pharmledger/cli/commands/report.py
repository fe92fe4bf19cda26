"""Financial statement, tax and ageing report commands."""

from datetime import date

import click
from pharmledger.cli.date_filters import (
    date_range_options,
    parse_date_or_exit,
    pop_period_flags,
    resolve_cli_date_range,
)
from pharmledger.cli.error_handling import handle_domain_error
from pharmledger.domain.ageing import AgeingService
from pharmledger.domain.reports import ReportService, statement_amount
from pharmledger.domain.tax import TaxService
from pharmledger.utils.date_parser import get_date_range, parse_month


def _period_label(start, end) -> str:
    if start is None and end is None:
        return "all dates"
    return f"{start or 'beginning'} to {end or 'today'}"


def _section(title: str, rows, total) -> None:
    click.echo(f"\n{title}")
    for row in rows:
        click.echo(f"  {row.code:6s} {row.name:36s} {statement_amount(row):>18,.2f}")
    click.echo(f"  {'Total ' + title.lower():43s} {total:>18,.2f}")


@click.group()
def report_group():
    """Compile financial statements and tax and ageing reports."""
    pass


@report_group.command("trial-balance")
@date_range_options
@click.pass_context
def trial_balance(ctx, start_date: str | None, end_date: str | None, **kwargs):
    """Show debit and credit totals per account."""
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=pop_period_flags(kwargs)
    )

    try:
        tb = ReportService(ctx.obj["db"]).trial_balance(start, end)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nTrial balance ({_period_label(start, end)})")
    click.echo("-" * 80)
    if not tb.rows:
        click.echo("No posted entries in this period.")
        return
    for row in tb.rows:
        click.echo(f"{row.code:6s} {row.name:36s} {row.total_debit:>16,.2f} {row.total_credit:>16,.2f}")
    click.echo("-" * 80)
    click.echo(f"{'Total':43s} {tb.total_debit:>16,.2f} {tb.total_credit:>16,.2f}")


@report_group.command("pnl")
@date_range_options
@click.pass_context
def profit_and_loss(ctx, start_date: str | None, end_date: str | None, **kwargs):
    """Show the profit and loss statement (defaults to this month)."""
    start, end = resolve_cli_date_range(
        ctx,
        start_date=start_date,
        end_date=end_date,
        period_flags=pop_period_flags(kwargs),
        default_range=get_date_range("this-month"),
    )

    try:
        pnl = ReportService(ctx.obj["db"]).profit_and_loss(start, end)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nProfit and loss ({_period_label(start, end)})")
    click.echo("-" * 70)
    _section("Revenue", pnl.revenue_rows, pnl.revenue)
    _section("Expenses", pnl.expense_rows, pnl.expense)
    click.echo("-" * 70)
    click.echo(f"{'Net income':45s} {pnl.net_income:>18,.2f}")


@report_group.command("balance-sheet")
@click.option("--as-of", help="Report date (default: today)")
@click.pass_context
def balance_sheet(ctx, as_of: str | None):
    """Show the balance sheet as of a date."""
    when = parse_date_or_exit(ctx, as_of, "as-of date", default=date.today())

    try:
        sheet = ReportService(ctx.obj["db"]).balance_sheet(when)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\nBalance sheet as of {when}")
    click.echo("-" * 70)
    _section("Assets", sheet.asset_rows, sheet.assets)
    if sheet.contra_asset_rows:
        _section("Less contra assets", sheet.contra_asset_rows, sheet.contra_assets)
    click.echo(f"  {'Net assets':43s} {sheet.net_assets:>18,.2f}")
    _section("Liabilities", sheet.liability_rows, sheet.liabilities)
    _section("Equity", sheet.equity_rows, sheet.equity)
    click.echo(f"  {'Net income':43s} {sheet.net_income:>18,.2f}")
    click.echo("-" * 70)
    click.echo(f"{'Liabilities and equity':45s} {sheet.liabilities_and_equity:>18,.2f}")


@report_group.command("tax")
@click.argument("month")
@click.option("--to", "to_month", help="Last month of a range (YYYY-MM)")
@click.pass_context
def tax_report(ctx, month: str, to_month: str | None):
    """Show input and output PPN for MONTH (YYYY-MM).

    Examples:
        pharmledger report tax 2024-03
        pharmledger report tax 2024-01 --to 2024-06
    """
    service = TaxService(ctx.obj["db"], settings=ctx.obj["settings"])

    try:
        first = parse_month(month)
        last = parse_month(to_month) if to_month else first
        summaries = service.monthly_summaries(first, last)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\n{'Month':8s} {'Input PPN':>16s} {'Output PPN':>16s} {'Net payable':>16s}")
    click.echo("-" * 60)
    for summary in summaries:
        click.echo(
            f"{summary.month:%Y-%m}  {summary.input_ppn:>16,.2f} {summary.output_ppn:>16,.2f} "
            f"{summary.net_payable:>16,.2f}"
        )
        if summary.net_payable < 0:
            click.echo(f"          Refundable or carried forward: {-summary.net_payable:,.2f}")


@report_group.command("ageing")
@click.option("--as-of", help="Ageing date (default: today)")
@click.pass_context
def ageing_report(ctx, as_of: str | None):
    """Show outstanding receivables by customer and age."""
    when = parse_date_or_exit(ctx, as_of, "as-of date", default=date.today())
    rows = AgeingService(ctx.obj["db"]).ageing_report(when)

    if not rows:
        click.echo("No outstanding receivables.")
        return

    click.echo(f"\nReceivables ageing as of {when}")
    click.echo(
        f"{'Customer':24s} {'Current':>14s} {'1-30':>14s} {'31-60':>14s} {'61-90':>14s} {'90+':>14s} {'Total':>16s}"
    )
    click.echo("-" * 116)
    for row in rows:
        click.echo(
            f"{row.customer_name[:24]:24s} {row.current:>14,.2f} {row.days_1_30:>14,.2f} "
            f"{row.days_31_60:>14,.2f} {row.days_61_90:>14,.2f} {row.days_90_plus:>14,.2f} "
            f"{row.total_outstanding:>16,.2f}"
        )


def register_commands(cli):
    """Register report commands with main CLI."""
    cli.add_command(report_group, name="report")
