"""Commands that post source documents to the journal."""

from datetime import date

import click
from pharmledger.cli.date_filters import parse_date_or_exit
from pharmledger.cli.error_handling import handle_domain_error
from pharmledger.domain.bank import BankAccountService
from pharmledger.domain.currency import to_money
from pharmledger.domain.documents import (
    FundTransfer,
    ManualEntry,
    ManualLine,
    PaymentVoucher,
    PurchaseInvoice,
    ReceiptVoucher,
    SalesInvoice,
)
from pharmledger.domain.entities import ItemType, ZERO
from pharmledger.domain.journal import JournalService
from pharmledger.domain.landed_cost import BatchService
from pharmledger.domain.party import PartyService
from pharmledger.utils.amount_parser import parse_amount
from pharmledger.utils.resolvers import resolve_bank_account, resolve_batch, resolve_party


def _journal(ctx) -> JournalService:
    return JournalService(ctx.obj["db"], settings=ctx.obj["settings"])


def _bank_id(ctx, bank: str | None) -> int | None:
    if not bank:
        return None
    return resolve_bank_account(BankAccountService(ctx.obj["db"]), bank).id


def _tax(ctx, subtotal, tax: str | None, with_ppn: bool):
    if tax and with_ppn:
        raise ValueError("Use either --tax or --with-ppn, not both")
    if with_ppn:
        return to_money(subtotal * ctx.obj["settings"].ppn_rate)
    return parse_amount(tax) if tax else ZERO


def _parse_manual_line(value: str, side: str) -> ManualLine:
    """Parse CODE=AMOUNT into a manual entry line."""
    code, sep, amount = value.partition("=")
    if not sep or not code.strip():
        raise ValueError(f"Invalid --{side} '{value}' (expected CODE=AMOUNT)")
    parsed = parse_amount(amount)
    if side == "debit":
        return ManualLine(account_code=code.strip(), debit=parsed)
    return ManualLine(account_code=code.strip(), credit=parsed)


def _report(entry) -> None:
    click.echo(f"Posted entry {entry.id} ({entry.source_type.value} {entry.source_id or '-'}): {entry.total_debit:,.2f}")


@click.group()
def post_group():
    """Post source documents as journal entries."""
    pass


@post_group.command("purchase-invoice")
@click.argument("invoice_number")
@click.option("--supplier", required=True, help="Supplier name or ID")
@click.option("--date", "invoice_date", help="Invoice date (default: today)")
@click.option("--subtotal", required=True, help="Amount before tax, in the invoice currency")
@click.option("--tax", help="PPN amount, in the invoice currency")
@click.option("--with-ppn", is_flag=True, help="Compute PPN from the configured rate")
@click.option("--item-type", type=click.Choice([t.value for t in ItemType]), default="inventory", show_default=True)
@click.option("--expense-account", help="Expense account code for expense invoices")
@click.option("--currency", default="IDR", show_default=True)
@click.option("--rate", help="Exchange rate to the base currency")
@click.option("--import", "is_import", is_flag=True, help="Invoice is an import purchase")
@click.option("--due-date", help="Due date")
@click.option("--faktur", help="Faktur pajak number")
@click.option("--notes", help="Notes stored as the entry description")
@click.pass_context
def post_purchase_invoice(
    ctx,
    invoice_number: str,
    supplier: str,
    invoice_date: str | None,
    subtotal: str,
    tax: str | None,
    with_ppn: bool,
    item_type: str,
    expense_account: str | None,
    currency: str,
    rate: str | None,
    is_import: bool,
    due_date: str | None,
    faktur: str | None,
    notes: str | None,
):
    """Post a purchase invoice.

    Examples:
        pharmledger post purchase-invoice PI-001 --supplier "Pharma Global" --subtotal 1000000 --with-ppn --import
    """
    when = parse_date_or_exit(ctx, invoice_date, "invoice date", default=date.today())
    due = parse_date_or_exit(ctx, due_date, "due date")

    try:
        found = resolve_party(PartyService(ctx.obj["db"]), supplier, party_type="supplier")
        amount = parse_amount(subtotal)
        document = PurchaseInvoice(
            invoice_number=invoice_number,
            supplier_id=found.id,
            invoice_date=when,
            subtotal=amount,
            tax_amount=_tax(ctx, amount, tax, with_ppn),
            item_type=ItemType(item_type),
            expense_account_code=expense_account,
            currency=currency,
            exchange_rate=parse_amount(rate) if rate else None,
            is_import=is_import,
            due_date=due,
            faktur_pajak_number=faktur,
            notes=notes,
        )
        _report(_journal(ctx).post(document))
    except ValueError as e:
        handle_domain_error(ctx, e)


@post_group.command("sales-invoice")
@click.argument("invoice_number")
@click.option("--customer", required=True, help="Customer name or ID")
@click.option("--date", "invoice_date", help="Invoice date (default: today)")
@click.option("--subtotal", required=True, help="Amount before tax")
@click.option("--tax", help="PPN amount")
@click.option("--with-ppn", is_flag=True, help="Compute PPN from the configured rate")
@click.option("--due-date", help="Due date")
@click.option("--faktur", help="Faktur pajak number")
@click.option("--notes", help="Notes stored as the entry description")
@click.pass_context
def post_sales_invoice(
    ctx,
    invoice_number: str,
    customer: str,
    invoice_date: str | None,
    subtotal: str,
    tax: str | None,
    with_ppn: bool,
    due_date: str | None,
    faktur: str | None,
    notes: str | None,
):
    """Post a sales invoice.

    Examples:
        pharmledger post sales-invoice SI-001 --customer "Apotek Sehat" --subtotal 2000000 --with-ppn --due-date 2024-02-15
    """
    when = parse_date_or_exit(ctx, invoice_date, "invoice date", default=date.today())
    due = parse_date_or_exit(ctx, due_date, "due date")

    try:
        found = resolve_party(PartyService(ctx.obj["db"]), customer, party_type="customer")
        amount = parse_amount(subtotal)
        document = SalesInvoice(
            invoice_number=invoice_number,
            customer_id=found.id,
            invoice_date=when,
            subtotal=amount,
            tax_amount=_tax(ctx, amount, tax, with_ppn),
            due_date=due,
            faktur_pajak_number=faktur,
            notes=notes,
        )
        _report(_journal(ctx).post(document))
    except ValueError as e:
        handle_domain_error(ctx, e)


@post_group.command("receipt")
@click.argument("voucher_number")
@click.option("--customer", required=True, help="Customer name or ID")
@click.option("--amount", required=True, help="Amount received")
@click.option("--date", "voucher_date", help="Receipt date (default: today)")
@click.option("--bank", help="Bank account name or ID (default: cash)")
@click.option("--invoice", help="Sales invoice number this receipt settles")
@click.option("--description", help="Entry description")
@click.pass_context
def post_receipt(
    ctx,
    voucher_number: str,
    customer: str,
    amount: str,
    voucher_date: str | None,
    bank: str | None,
    invoice: str | None,
    description: str | None,
):
    """Post money received from a customer."""
    db = ctx.obj["db"]
    when = parse_date_or_exit(ctx, voucher_date, "receipt date", default=date.today())

    try:
        found = resolve_party(PartyService(db), customer, party_type="customer")
        invoice_id = None
        if invoice:
            record = db.get_sales_invoice_by_number(invoice)
            if record is None:
                raise ValueError(f"Sales invoice '{invoice}' not found")
            invoice_id = record.id
        document = ReceiptVoucher(
            voucher_number=voucher_number,
            customer_id=found.id,
            voucher_date=when,
            amount=parse_amount(amount),
            bank_account_id=_bank_id(ctx, bank),
            sales_invoice_id=invoice_id,
            description=description,
        )
        _report(_journal(ctx).post(document))
    except ValueError as e:
        handle_domain_error(ctx, e)


@post_group.command("payment")
@click.argument("voucher_number")
@click.option("--supplier", required=True, help="Supplier name or ID")
@click.option("--amount", required=True, help="Amount paid")
@click.option("--date", "voucher_date", help="Payment date (default: today)")
@click.option("--bank", help="Bank account name or ID (default: cash)")
@click.option("--description", help="Entry description")
@click.pass_context
def post_payment(
    ctx,
    voucher_number: str,
    supplier: str,
    amount: str,
    voucher_date: str | None,
    bank: str | None,
    description: str | None,
):
    """Post money paid to a supplier."""
    when = parse_date_or_exit(ctx, voucher_date, "payment date", default=date.today())

    try:
        found = resolve_party(PartyService(ctx.obj["db"]), supplier, party_type="supplier")
        document = PaymentVoucher(
            voucher_number=voucher_number,
            supplier_id=found.id,
            voucher_date=when,
            amount=parse_amount(amount),
            bank_account_id=_bank_id(ctx, bank),
            description=description,
        )
        _report(_journal(ctx).post(document))
    except ValueError as e:
        handle_domain_error(ctx, e)


@post_group.command("transfer")
@click.argument("reference")
@click.option("--from", "from_bank", required=True, help="Source bank account name or ID")
@click.option("--to", "to_bank", required=True, help="Destination bank account name or ID")
@click.option("--amount", required=True, help="Amount transferred")
@click.option("--fee", help="Bank fee charged to the source account")
@click.option("--date", "transfer_date", help="Transfer date (default: today)")
@click.option("--description", help="Entry description")
@click.pass_context
def post_transfer(
    ctx,
    reference: str,
    from_bank: str,
    to_bank: str,
    amount: str,
    fee: str | None,
    transfer_date: str | None,
    description: str | None,
):
    """Move funds between two bank accounts."""
    when = parse_date_or_exit(ctx, transfer_date, "transfer date", default=date.today())

    try:
        document = FundTransfer(
            reference=reference,
            transfer_date=when,
            from_bank_account_id=_bank_id(ctx, from_bank),
            to_bank_account_id=_bank_id(ctx, to_bank),
            amount=parse_amount(amount),
            fee=parse_amount(fee) if fee else ZERO,
            description=description,
        )
        _report(_journal(ctx).post(document))
    except ValueError as e:
        handle_domain_error(ctx, e)


@post_group.command("manual")
@click.option("--debit", "debits", multiple=True, help="CODE=AMOUNT, repeatable")
@click.option("--credit", "credits", multiple=True, help="CODE=AMOUNT, repeatable")
@click.option("--date", "entry_date", help="Entry date (default: today)")
@click.option("--reference", help="Unique reference of the entry")
@click.option("--description", help="Entry description")
@click.pass_context
def post_manual(
    ctx,
    debits: tuple[str, ...],
    credits: tuple[str, ...],
    entry_date: str | None,
    reference: str | None,
    description: str | None,
):
    """Post a manual adjusting entry.

    Examples:
        pharmledger post manual --debit 6300=500000 --credit 1590=500000 --description "Monthly depreciation"
    """
    when = parse_date_or_exit(ctx, entry_date, "entry date", default=date.today())

    try:
        lines = [_parse_manual_line(value, "debit") for value in debits]
        lines += [_parse_manual_line(value, "credit") for value in credits]
        document = ManualEntry(
            manual_date=when,
            lines=tuple(lines),
            reference=reference,
            description=description,
        )
        _report(_journal(ctx).post(document))
    except ValueError as e:
        handle_domain_error(ctx, e)


@post_group.command("capitalize")
@click.argument("batch")
@click.option("--date", "entry_date", help="Capitalization date (default: today)")
@click.option("--description", help="Entry description")
@click.pass_context
def post_capitalization(ctx, batch: str, entry_date: str | None, description: str | None):
    """Lock a batch's landed cost and post it to inventory."""
    when = parse_date_or_exit(ctx, entry_date, "capitalization date", default=date.today())

    try:
        found = resolve_batch(BatchService(ctx.obj["db"]), batch)
        entry = _journal(ctx).capitalize_batch(found.id, when, description=description)
        _report(entry)
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register posting commands with main CLI."""
    cli.add_command(post_group, name="post")
