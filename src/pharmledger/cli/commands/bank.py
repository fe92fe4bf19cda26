"""Bank account management commands."""

import click
from pharmledger.cli.error_handling import handle_domain_error
from pharmledger.domain.bank import BankAccountService
from pharmledger.utils.resolvers import resolve_bank_account


@click.group()
def bank_group():
    """Manage bank accounts."""
    pass


@bank_group.command("create")
@click.argument("name", metavar="BANK_ACCOUNT_NAME")
@click.option("--bank", help="Bank name (defaults to the bank account name if not provided)")
@click.option("--ledger-account", required=True, help="Code of the asset account this bank posts to")
@click.option("--number", "account_number", help="Account number at the bank")
@click.option("--currency", default="IDR", show_default=True)
@click.pass_context
def create_bank_account(
    ctx, name: str, bank: str | None, ledger_account: str, account_number: str | None, currency: str
):
    """Create a new bank account.

    Examples:
        pharmledger bank create "BCA Operating" --bank "BCA" --ledger-account 1120
    """
    service = BankAccountService(ctx.obj["db"])
    bank_name = bank if bank is not None else name

    try:
        bank_account = service.create_bank_account(
            name=name,
            bank_name=bank_name,
            ledger_account_code=ledger_account,
            account_number=account_number,
            currency=currency,
        )
        click.echo(f"Created bank account '{bank_account.name}' (ID: {bank_account.id})")
        if bank is None:
            click.echo(f"Bank name set to '{bank_name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


@bank_group.command("list")
@click.pass_context
def list_bank_accounts(ctx):
    """List all bank accounts."""
    db = ctx.obj["db"]
    service = BankAccountService(db)

    bank_accounts = service.list_bank_accounts()
    if not bank_accounts:
        click.echo("No bank accounts found.")
        return

    click.echo("\nBank accounts:")
    click.echo("-" * 70)
    for acc in bank_accounts:
        ledger = db.get_account(acc.ledger_account_id)
        number = f" | No: {acc.account_number}" if acc.account_number else ""
        click.echo(f"ID: {acc.id:3d} | {acc.name:20s} | Bank: {acc.bank_name:10s} | Ledger: {ledger.code}{number}")


@bank_group.command("rename")
@click.argument("bank_account", metavar="BANK_ACCOUNT")
@click.argument("new_name", metavar="NEW_NAME")
@click.option("--bank", help="New bank name (optional)")
@click.pass_context
def rename_bank_account(ctx, bank_account: str, new_name: str, bank: str | None) -> None:
    """Rename a bank account.

    BANK_ACCOUNT can be a bank account name or ID.
    """
    service = BankAccountService(ctx.obj["db"])

    try:
        found = resolve_bank_account(service, bank_account)
        service.rename_bank_account(bank_account_id=found.id, name=new_name, bank_name=bank)
        click.echo(f"Renamed bank account to '{new_name}'")
        if bank is not None:
            click.echo(f"Bank name updated to '{bank}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register bank account commands with main CLI."""
    cli.add_command(bank_group, name="bank")
