"""Chart of accounts commands."""

import click
from pharmledger.cli.error_handling import handle_domain_error
from pharmledger.domain.chart import ChartOfAccountsService
from pharmledger.domain.entities import AccountType, NormalBalance

ACCOUNT_TYPES = [t.value for t in AccountType]
NORMAL_BALANCES = [b.value for b in NormalBalance]


@click.group()
def account_group():
    """Manage the chart of accounts."""
    pass


@account_group.command("create")
@click.argument("code")
@click.argument("name")
@click.option("--type", "account_type", type=click.Choice(ACCOUNT_TYPES), required=True, help="Account type")
@click.option(
    "--normal-balance",
    type=click.Choice(NORMAL_BALANCES),
    required=True,
    help="Side the account normally carries its balance on",
)
@click.option("--local-name", help="Localized account name")
@click.option("--group", "account_group_name", help="Reporting group (e.g. 'Current Assets')")
@click.option("--parent", help="Code of the parent header account")
@click.option("--header", is_flag=True, help="Create a header account that only groups children")
@click.option("--description", help="Account description")
@click.pass_context
def create_account(
    ctx,
    code: str,
    name: str,
    account_type: str,
    normal_balance: str,
    local_name: str | None,
    account_group_name: str | None,
    parent: str | None,
    header: bool,
    description: str | None,
):
    """Create a new account.

    Examples:
        pharmledger account create 1130 "Bank Mandiri" --type asset --normal-balance debit --parent 1100
        pharmledger account create 7000 "Other Expenses" --type expense --normal-balance debit --header
    """
    service = ChartOfAccountsService(ctx.obj["db"])

    try:
        parent_id = service.resolve(parent).id if parent else None
        account = service.create_account(
            code=code,
            name=name,
            account_type=account_type,
            normal_balance=normal_balance,
            name_local=local_name,
            account_group=account_group_name,
            parent_id=parent_id,
            is_header=header,
            description=description,
        )
        click.echo(f"Created account {account.code} '{account.name}' (ID: {account.id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.option("--active-only", is_flag=True, help="Hide deactivated accounts")
@click.pass_context
def list_accounts(ctx, active_only: bool):
    """List all accounts."""
    service = ChartOfAccountsService(ctx.obj["db"])

    accounts = service.list_accounts(include_inactive=not active_only)
    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\nAccounts:")
    click.echo("-" * 80)
    for acc in accounts:
        flags = []
        if acc.is_header:
            flags.append("header")
        if not acc.is_active:
            flags.append("inactive")
        suffix = f" [{', '.join(flags)}]" if flags else ""
        click.echo(
            f"{acc.code:6s} | {acc.name:30s} | {acc.account_type.value:9s} | "
            f"{acc.normal_balance.value:6s}{suffix}"
        )


@account_group.command("tree")
@click.pass_context
def account_tree(ctx):
    """Show the account hierarchy."""
    service = ChartOfAccountsService(ctx.obj["db"])

    roots = service.account_tree()
    if not roots:
        click.echo("No accounts found.")
        return

    def show(node, depth: int):
        acc = node.account
        local = f" ({acc.name_local})" if acc.name_local else ""
        inactive = " [inactive]" if not acc.is_active else ""
        click.echo(f"{'  ' * depth}{acc.code} {acc.name}{local}{inactive}")
        for child in node.children:
            show(child, depth + 1)

    for root in roots:
        show(root, 0)


@account_group.command("update")
@click.argument("code")
@click.option("--code", "new_code", help="New account code")
@click.option("--name", help="New name")
@click.option("--local-name", help="New localized name")
@click.option("--group", "account_group_name", help="New reporting group")
@click.option("--description", help="New description")
@click.option("--parent", help="Code of the new parent header account")
@click.option("--type", "account_type", type=click.Choice(ACCOUNT_TYPES), help="New account type")
@click.option("--normal-balance", type=click.Choice(NORMAL_BALANCES), help="New normal balance")
@click.option("--header/--no-header", default=None, help="Mark as header or postable account")
@click.pass_context
def update_account(
    ctx,
    code: str,
    new_code: str | None,
    name: str | None,
    local_name: str | None,
    account_group_name: str | None,
    description: str | None,
    parent: str | None,
    account_type: str | None,
    normal_balance: str | None,
    header: bool | None,
) -> None:
    """Update an account.

    Examples:
        pharmledger account update 1120 --name "Bank BCA"
        pharmledger account update 1510 --parent 1500
    """
    service = ChartOfAccountsService(ctx.obj["db"])

    try:
        account = service.resolve(code)
        patch = {
            "code": new_code,
            "name": name,
            "name_local": local_name,
            "account_group": account_group_name,
            "description": description,
            "account_type": account_type,
            "normal_balance": normal_balance,
            "is_header": header,
        }
        patch = {key: value for key, value in patch.items() if value is not None}
        if parent is not None:
            patch["parent_id"] = service.resolve(parent).id

        if not patch:
            click.echo("Nothing to update.")
            return

        updated = service.update_account(account.id, **patch)
        click.echo(f"Updated account {updated.code} '{updated.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("deactivate")
@click.argument("code")
@click.pass_context
def deactivate_account(ctx, code: str) -> None:
    """Deactivate an account so it no longer accepts postings."""
    service = ChartOfAccountsService(ctx.obj["db"])

    try:
        account = service.deactivate(service.resolve(code).id)
        click.echo(f"Deactivated account {account.code} '{account.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("delete")
@click.argument("code")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, code: str, yes: bool) -> None:
    """Delete an account.

    The account can only be deleted if it has no posted journal lines and no
    child accounts. Deactivate it instead to keep its history.

    Examples:
        pharmledger account delete 1130
    """
    service = ChartOfAccountsService(ctx.obj["db"])

    try:
        account = service.resolve(code)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not yes and not click.confirm(f"Are you sure you want to delete account {account.code} '{account.name}'?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(account.id)
        click.echo(f"Deleted account {account.code} '{account.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
