"""Account, party and bank ledger commands."""

import click
from pharmledger.cli.date_filters import date_range_options, pop_period_flags, resolve_cli_date_range
from pharmledger.cli.error_handling import handle_domain_error
from pharmledger.domain.bank import BankAccountService
from pharmledger.domain.entities import ZERO
from pharmledger.domain.ledger import LedgerService, ledger_summary
from pharmledger.domain.party import PartyService
from pharmledger.utils.resolvers import resolve_bank_account, resolve_party


def _print_ledger(title: str, entries, opening) -> None:
    click.echo(f"\n{title}")
    click.echo("-" * 100)
    click.echo(f"{'Opening balance':71s} {abs(opening):>16,.2f} {'Dr' if opening >= 0 else 'Cr'}")
    for entry in entries:
        text = entry.memo or entry.description or ""
        click.echo(
            f"{entry.entry_date} | {entry.entry_id:5d} | {entry.source_type.value:20s} | {text[:24]:24s} | "
            f"{entry.debit:>14,.2f} | {entry.credit:>14,.2f} | {abs(entry.balance):>16,.2f} {entry.side}"
        )

    summary = ledger_summary(entries, opening)
    closing = summary.closing_balance
    click.echo("-" * 100)
    click.echo(
        f"{summary.entry_count} entries | Debits {summary.total_debit:,.2f} | "
        f"Credits {summary.total_credit:,.2f} | Closing {abs(closing):,.2f} {'Dr' if closing >= 0 else 'Cr'}"
    )


def _resolve_range(ctx, start_date, end_date, kwargs):
    return resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=pop_period_flags(kwargs)
    )


@click.group()
def ledger_group():
    """Show running-balance ledgers."""
    pass


@ledger_group.command("account")
@click.argument("code")
@date_range_options
@click.option("--carry", is_flag=True, help="Open with the balance of entries before the start date")
@click.pass_context
def account_ledger(ctx, code: str, start_date: str | None, end_date: str | None, carry: bool, **kwargs):
    """Show the ledger of an account; a header account includes its children.

    Examples:
        pharmledger ledger account 1120 --this-month --carry
    """
    start, end = _resolve_range(ctx, start_date, end_date, kwargs)
    service = LedgerService(ctx.obj["db"])

    try:
        account = service.chart.resolve(code)
        opening = service.opening_balance_for_account(code, start) if carry and start else ZERO
        entries = service.account_ledger(code, start_date=start, end_date=end, opening_balance=opening)
    except ValueError as e:
        handle_domain_error(ctx, e)

    _print_ledger(f"Ledger {account.code} {account.name}", entries, opening)


@ledger_group.command("party")
@click.argument("party")
@date_range_options
@click.option("--carry", is_flag=True, help="Open with the balance of entries before the start date")
@click.pass_context
def party_ledger(ctx, party: str, start_date: str | None, end_date: str | None, carry: bool, **kwargs):
    """Show the subledger of a customer or supplier."""
    start, end = _resolve_range(ctx, start_date, end_date, kwargs)
    service = LedgerService(ctx.obj["db"])

    try:
        found = resolve_party(PartyService(ctx.obj["db"]), party)
        opening = service.opening_balance_for_party(found.id, start) if carry and start else ZERO
        entries = service.party_ledger(found.id, start_date=start, end_date=end, opening_balance=opening)
    except ValueError as e:
        handle_domain_error(ctx, e)

    _print_ledger(f"Ledger {found.party_type.value} {found.name}", entries, opening)


@ledger_group.command("bank")
@click.argument("bank_account")
@date_range_options
@click.option("--carry", is_flag=True, help="Open with the balance of entries before the start date")
@click.pass_context
def bank_ledger(ctx, bank_account: str, start_date: str | None, end_date: str | None, carry: bool, **kwargs):
    """Show the ledger of a bank account."""
    start, end = _resolve_range(ctx, start_date, end_date, kwargs)
    service = LedgerService(ctx.obj["db"])

    try:
        found = resolve_bank_account(BankAccountService(ctx.obj["db"]), bank_account)
        opening = service.opening_balance_for_bank(found.id, start) if carry and start else ZERO
        entries = service.bank_ledger(found.id, start_date=start, end_date=end, opening_balance=opening)
    except ValueError as e:
        handle_domain_error(ctx, e)

    _print_ledger(f"Ledger bank account {found.name}", entries, opening)


def register_commands(cli):
    """Register ledger commands with main CLI."""
    cli.add_command(ledger_group, name="ledger")
