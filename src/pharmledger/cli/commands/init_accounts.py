"""Initialize the default chart of accounts."""

import click
from pharmledger.domain.chart import ChartOfAccountsService


# (code, name, local name, type, normal balance, group, parent code, is header)
DEFAULT_CHART = [
    ("1000", "Assets", "Aset", "asset", "debit", None, None, True),
    ("1100", "Cash and Bank", "Kas dan Bank", "asset", "debit", "Current Assets", "1000", True),
    ("1110", "Cash", "Kas", "asset", "debit", "Current Assets", "1100", False),
    ("1120", "Bank", "Bank", "asset", "debit", "Current Assets", "1100", False),
    ("1200", "Accounts Receivable", "Piutang Usaha", "asset", "debit", "Current Assets", "1000", False),
    ("1300", "Inventory", "Persediaan", "asset", "debit", "Current Assets", "1000", False),
    ("1400", "Input VAT", "PPN Masukan", "asset", "debit", "Current Assets", "1000", False),
    ("1500", "Fixed Assets", "Aset Tetap", "asset", "debit", "Fixed Assets", "1000", True),
    ("1510", "Equipment", "Peralatan", "asset", "debit", "Fixed Assets", "1500", False),
    ("1590", "Accumulated Depreciation", "Akumulasi Penyusutan", "contra", "credit", "Fixed Assets", "1500", False),
    ("2000", "Liabilities", "Kewajiban", "liability", "credit", None, None, True),
    ("2100", "Accounts Payable", "Utang Usaha", "liability", "credit", "Current Liabilities", "2000", False),
    ("2200", "Output VAT", "PPN Keluaran", "liability", "credit", "Current Liabilities", "2000", False),
    ("2300", "Accrued Expenses", "Biaya Yang Masih Harus Dibayar", "liability", "credit", "Current Liabilities", "2000", False),
    ("3000", "Equity", "Ekuitas", "equity", "credit", None, None, True),
    ("3100", "Owner's Capital", "Modal Pemilik", "equity", "credit", "Equity", "3000", False),
    ("3200", "Retained Earnings", "Laba Ditahan", "equity", "credit", "Equity", "3000", False),
    ("4000", "Revenue", "Pendapatan", "revenue", "credit", None, None, True),
    ("4100", "Sales", "Penjualan", "revenue", "credit", "Revenue", "4000", False),
    ("5000", "Cost of Goods Sold", "Harga Pokok Penjualan", "expense", "debit", None, None, True),
    ("5100", "Cost of Goods Sold", "Harga Pokok Penjualan", "expense", "debit", "Cost of Sales", "5000", False),
    ("6000", "Operating Expenses", "Beban Operasional", "expense", "debit", None, None, True),
    ("6100", "Salaries", "Beban Gaji", "expense", "debit", "Operating Expenses", "6000", False),
    ("6200", "Bank Charges", "Beban Administrasi Bank", "expense", "debit", "Operating Expenses", "6000", False),
    ("6300", "Depreciation Expense", "Beban Penyusutan", "expense", "debit", "Operating Expenses", "6000", False),
]


def seed_chart(service: ChartOfAccountsService) -> tuple[int, list[str]]:
    """Create the default chart, parents before children.

    Returns:
        Number of accounts created and the error messages of those skipped
    """
    created = 0
    errors = []
    for code, name, name_local, account_type, normal_balance, group, parent_code, is_header in DEFAULT_CHART:
        try:
            parent_id = service.resolve(parent_code).id if parent_code else None
            service.create_account(
                code=code,
                name=name,
                name_local=name_local,
                account_type=account_type,
                normal_balance=normal_balance,
                account_group=group,
                parent_id=parent_id,
                is_header=is_header,
            )
            created += 1
        except ValueError as e:
            errors.append(f"Could not create account '{code}': {e}")
    return created, errors


@click.command("init-accounts")
@click.option("--force", is_flag=True, help="Add missing default accounts to an existing chart")
@click.pass_context
def init_accounts(ctx, force: bool):
    """Initialize database with the default chart of accounts."""
    db = ctx.obj["db"]
    service = ChartOfAccountsService(db)

    if service.list_accounts() and not force:
        click.echo("Accounts already exist. Use --force to add missing default accounts.")
        return

    click.echo("Creating default chart of accounts...")
    created, errors = seed_chart(service)
    for message in errors:
        click.echo(f"Warning: {message}", err=True)

    if not errors:
        click.echo(f"Successfully created {created} accounts.")
    else:
        click.echo(f"Created {created} accounts with {len(errors)} errors.")


def register_commands(cli):
    """Register init-accounts command with main CLI."""
    cli.add_command(init_accounts)
