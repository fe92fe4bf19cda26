"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, including the tagged charge type
that is stored as an amount column plus a type column.
"""

from decimal import Decimal
from typing import Optional

from pharmledger.domain import entities as domain
from pharmledger.database.models import (
    Account as ORMAccount,
    Party as ORMParty,
    BankAccount as ORMBankAccount,
    Batch as ORMBatch,
    JournalEntry as ORMJournalEntry,
    JournalLine as ORMJournalLine,
    PurchaseInvoice as ORMPurchaseInvoice,
    SalesInvoice as ORMSalesInvoice,
)


def _decimal(value) -> Optional[Decimal]:
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def _money(value) -> Decimal:
    return _decimal(value if value is not None else 0).quantize(Decimal("0.01"))


def charge_from_columns(charge_type: str, amount) -> domain.Charge:
    """Build the tagged charge from its stored type flag and amount."""
    value = _decimal(amount if amount is not None else 0)
    if charge_type == "percentage":
        return domain.PercentageCharge(value)
    if charge_type == "fixed":
        return domain.FixedCharge(value)
    raise ValueError(f"Unknown charge type '{charge_type}'")


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        code=orm_account.code,
        name=orm_account.name,
        name_local=orm_account.name_local,
        account_type=domain.AccountType(orm_account.account_type),
        account_group=orm_account.account_group,
        parent_id=orm_account.parent_id,
        is_header=orm_account.is_header,
        normal_balance=domain.NormalBalance(orm_account.normal_balance),
        is_active=orm_account.is_active,
        description=orm_account.description,
        created_at=orm_account.created_at,
    )


def party_to_domain(orm_party: ORMParty) -> domain.Party:
    """Convert SQLAlchemy Party model to domain Party entity."""
    return domain.Party(
        id=orm_party.id,
        name=orm_party.name,
        party_type=domain.PartyType(orm_party.party_type),
        tax_id=orm_party.tax_id,
        is_pkp=orm_party.is_pkp,
        currency=orm_party.currency,
        created_at=orm_party.created_at,
    )


def bank_account_to_domain(orm_bank: ORMBankAccount) -> domain.BankAccount:
    """Convert SQLAlchemy BankAccount model to domain BankAccount entity."""
    return domain.BankAccount(
        id=orm_bank.id,
        name=orm_bank.name,
        bank_name=orm_bank.bank_name,
        account_number=orm_bank.account_number,
        ledger_account_id=orm_bank.ledger_account_id,
        currency=orm_bank.currency,
        created_at=orm_bank.created_at,
    )


def batch_to_domain(orm_batch: ORMBatch) -> domain.Batch:
    """Convert SQLAlchemy Batch model to domain Batch entity."""
    return domain.Batch(
        id=orm_batch.id,
        batch_number=orm_batch.batch_number,
        product_name=orm_batch.product_name,
        supplier_id=orm_batch.supplier_id,
        import_date=orm_batch.import_date,
        import_quantity=_decimal(orm_batch.import_quantity),
        sold_quantity=_decimal(orm_batch.sold_quantity or 0),
        currency=orm_batch.currency,
        import_price=_decimal(orm_batch.import_price_usd),
        exchange_rate=_decimal(orm_batch.exchange_rate),
        duty_percent=_decimal(orm_batch.duty_percent or 0),
        freight=charge_from_columns(orm_batch.freight_type, orm_batch.freight_amount),
        other=charge_from_columns(orm_batch.other_type, orm_batch.other_amount),
        cost_locked=orm_batch.cost_locked,
        final_landed_cost=_decimal(orm_batch.final_landed_cost),
        created_at=orm_batch.created_at,
    )


def journal_line_to_domain(orm_line: ORMJournalLine) -> domain.JournalLine:
    """Convert SQLAlchemy JournalLine model to domain JournalLine entity."""
    return domain.JournalLine(
        line_number=orm_line.line_number,
        account_id=orm_line.account_id,
        party_id=orm_line.party_id,
        sales_invoice_id=orm_line.sales_invoice_id,
        debit=_money(orm_line.debit),
        credit=_money(orm_line.credit),
        memo=orm_line.memo,
    )


def journal_entry_to_domain(orm_entry: ORMJournalEntry) -> domain.JournalEntry:
    """Convert SQLAlchemy JournalEntry model, with lines, to a domain entity."""
    return domain.JournalEntry(
        id=orm_entry.id,
        entry_date=orm_entry.entry_date,
        source_type=domain.SourceType(orm_entry.source_type),
        source_id=orm_entry.source_id,
        description=orm_entry.description,
        reverses_entry_id=orm_entry.reverses_entry_id,
        lines=tuple(journal_line_to_domain(line) for line in orm_entry.lines),
        created_at=orm_entry.created_at,
    )


def posted_line_to_domain(orm_line: ORMJournalLine, orm_entry: ORMJournalEntry) -> domain.PostedLine:
    """Flatten a journal line and its entry header into a PostedLine."""
    return domain.PostedLine(
        entry_id=orm_entry.id,
        line_number=orm_line.line_number,
        entry_date=orm_entry.entry_date,
        source_type=domain.SourceType(orm_entry.source_type),
        source_id=orm_entry.source_id,
        description=orm_entry.description,
        account_id=orm_line.account_id,
        party_id=orm_line.party_id,
        sales_invoice_id=orm_line.sales_invoice_id,
        debit=_money(orm_line.debit),
        credit=_money(orm_line.credit),
        memo=orm_line.memo,
    )


def purchase_invoice_to_domain(orm_invoice: ORMPurchaseInvoice) -> domain.PurchaseInvoiceRecord:
    """Convert SQLAlchemy PurchaseInvoice model to domain record."""
    return domain.PurchaseInvoiceRecord(
        id=orm_invoice.id,
        invoice_number=orm_invoice.invoice_number,
        supplier_id=orm_invoice.supplier_id,
        invoice_date=orm_invoice.invoice_date,
        due_date=orm_invoice.due_date,
        item_type=domain.ItemType(orm_invoice.item_type),
        subtotal=_money(orm_invoice.subtotal),
        tax_amount=_money(orm_invoice.tax_amount),
        total_amount=_money(orm_invoice.total_amount),
        is_import=orm_invoice.is_import,
        faktur_pajak_number=orm_invoice.faktur_pajak_number,
        journal_entry_id=orm_invoice.journal_entry_id,
    )


def sales_invoice_to_domain(orm_invoice: ORMSalesInvoice) -> domain.SalesInvoiceRecord:
    """Convert SQLAlchemy SalesInvoice model to domain record."""
    return domain.SalesInvoiceRecord(
        id=orm_invoice.id,
        invoice_number=orm_invoice.invoice_number,
        customer_id=orm_invoice.customer_id,
        invoice_date=orm_invoice.invoice_date,
        due_date=orm_invoice.due_date,
        subtotal=_money(orm_invoice.subtotal),
        tax_amount=_money(orm_invoice.tax_amount),
        total_amount=_money(orm_invoice.total_amount),
        faktur_pajak_number=orm_invoice.faktur_pajak_number,
        journal_entry_id=orm_invoice.journal_entry_id,
    )
