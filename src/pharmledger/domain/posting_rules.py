"""Pure mapping from source documents to journal line drafts.

Each document type has its own rule function. Rules only read the document
and the posting context; they never touch the database, so the same input
always produces the same lines. Account codes are resolved and lines are
validated by the journal service afterwards.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Callable, Mapping, Optional

from pharmledger.config import PostingAccounts
from pharmledger.domain.currency import BASE_CURRENCY, convert_to_base, to_money
from pharmledger.domain.documents import (
    BatchCapitalization,
    FundTransfer,
    ManualEntry,
    PaymentVoucher,
    PurchaseInvoice,
    ReceiptVoucher,
    SalesInvoice,
    SourceDocument,
)
from pharmledger.domain.entities import Batch, ItemType, ZERO
from pharmledger.domain.errors import ValidationError, bank_account_not_found


@dataclass(frozen=True)
class LineDraft:
    """Journal line before its account code is resolved."""

    account_code: str
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    party_id: Optional[int] = None
    memo: Optional[str] = None
    sales_invoice_id: Optional[int] = None


@dataclass(frozen=True)
class PostingContext:
    """Everything besides the document itself that a rule may need."""

    accounts: PostingAccounts = field(default_factory=PostingAccounts)
    base_currency: str = BASE_CURRENCY
    # bank account id -> ledger account code
    bank_ledger_codes: Mapping[int, str] = field(default_factory=dict)
    batch: Optional[Batch] = None

    def bank_code(self, bank_account_id: Optional[int]) -> str:
        """Ledger code for a bank account; no bank account means cash."""
        if bank_account_id is None:
            return self.accounts.cash
        try:
            return self.bank_ledger_codes[bank_account_id]
        except KeyError:
            raise ValidationError(bank_account_not_found(bank_account_id)) from None


def purchase_invoice_amounts(document: PurchaseInvoice, base_currency: str = BASE_CURRENCY) -> tuple[Decimal, Decimal]:
    """Subtotal and tax of a purchase invoice in base currency."""
    subtotal = convert_to_base(document.subtotal, document.currency, document.exchange_rate, base_currency)
    tax = convert_to_base(document.tax_amount, document.currency, document.exchange_rate, base_currency)
    return subtotal, tax


def purchase_invoice_lines(document: PurchaseInvoice, context: PostingContext) -> list[LineDraft]:
    subtotal, tax = purchase_invoice_amounts(document, context.base_currency)

    if document.item_type == ItemType.INVENTORY:
        debit_code = context.accounts.inventory
    else:
        if not document.expense_account_code:
            raise ValidationError(
                f"Purchase invoice {document.invoice_number} buys an expense item but has no expense account"
            )
        debit_code = document.expense_account_code

    memo = f"Purchase invoice {document.invoice_number}"
    lines = [LineDraft(debit_code, debit=subtotal, memo=memo)]
    if tax:
        lines.append(LineDraft(context.accounts.input_tax, debit=tax, memo=f"Input PPN {document.invoice_number}"))
    lines.append(
        LineDraft(context.accounts.payable, credit=subtotal + tax, party_id=document.supplier_id, memo=memo)
    )
    return lines


def sales_invoice_lines(document: SalesInvoice, context: PostingContext) -> list[LineDraft]:
    subtotal = to_money(document.subtotal)
    tax = to_money(document.tax_amount)
    memo = f"Sales invoice {document.invoice_number}"

    lines = [
        LineDraft(context.accounts.receivable, debit=subtotal + tax, party_id=document.customer_id, memo=memo),
        LineDraft(context.accounts.sales, credit=subtotal, memo=memo),
    ]
    if tax:
        lines.append(LineDraft(context.accounts.output_tax, credit=tax, memo=f"Output PPN {document.invoice_number}"))
    return lines


def receipt_voucher_lines(document: ReceiptVoucher, context: PostingContext) -> list[LineDraft]:
    amount = to_money(document.amount)
    memo = document.description or f"Receipt {document.voucher_number}"
    return [
        LineDraft(context.bank_code(document.bank_account_id), debit=amount, memo=memo),
        LineDraft(
            context.accounts.receivable,
            credit=amount,
            party_id=document.customer_id,
            memo=memo,
            sales_invoice_id=document.sales_invoice_id,
        ),
    ]


def payment_voucher_lines(document: PaymentVoucher, context: PostingContext) -> list[LineDraft]:
    amount = to_money(document.amount)
    memo = document.description or f"Payment {document.voucher_number}"
    return [
        LineDraft(context.accounts.payable, debit=amount, party_id=document.supplier_id, memo=memo),
        LineDraft(context.bank_code(document.bank_account_id), credit=amount, memo=memo),
    ]


def batch_capitalization_lines(document: BatchCapitalization, context: PostingContext) -> list[LineDraft]:
    batch = context.batch
    if batch is None or batch.id != document.batch_id:
        raise ValidationError(f"Batch {document.batch_id} is required to post its capitalization")
    if batch.final_landed_cost is None:
        raise ValidationError(f"Batch {batch.batch_number} has no allocated landed cost")

    cost = to_money(batch.final_landed_cost)
    memo = f"Landed cost of batch {batch.batch_number}"
    return [
        LineDraft(context.accounts.inventory, debit=cost, memo=memo),
        LineDraft(context.accounts.payable, credit=cost, party_id=batch.supplier_id, memo=memo),
    ]


def fund_transfer_lines(document: FundTransfer, context: PostingContext) -> list[LineDraft]:
    if document.from_bank_account_id == document.to_bank_account_id:
        raise ValidationError("Cannot transfer funds to the same bank account")

    amount = to_money(document.amount)
    fee = to_money(document.fee)
    source = context.bank_code(document.from_bank_account_id)
    memo = document.description or f"Transfer {document.reference}"

    lines = [
        LineDraft(context.bank_code(document.to_bank_account_id), debit=amount, memo=memo),
        LineDraft(source, credit=amount, memo=memo),
    ]
    if fee:
        lines.append(LineDraft(context.accounts.bank_charges, debit=fee, memo=f"Bank charge {document.reference}"))
        lines.append(LineDraft(source, credit=fee, memo=f"Bank charge {document.reference}"))
    return lines


def manual_entry_lines(document: ManualEntry, context: PostingContext) -> list[LineDraft]:
    return [
        LineDraft(
            line.account_code,
            debit=to_money(line.debit),
            credit=to_money(line.credit),
            party_id=line.party_id,
            memo=line.memo,
        )
        for line in document.lines
    ]


POSTING_RULES: dict[type, Callable[..., list[LineDraft]]] = {
    PurchaseInvoice: purchase_invoice_lines,
    SalesInvoice: sales_invoice_lines,
    ReceiptVoucher: receipt_voucher_lines,
    PaymentVoucher: payment_voucher_lines,
    BatchCapitalization: batch_capitalization_lines,
    FundTransfer: fund_transfer_lines,
    ManualEntry: manual_entry_lines,
}


def map_document(document: SourceDocument, context: PostingContext) -> list[LineDraft]:
    """Derive journal line drafts for a source document.

    Raises:
        ValidationError: If the document type has no posting rule or the
            document cannot be mapped
    """
    rule = POSTING_RULES.get(type(document))
    if rule is None:
        raise ValidationError(f"No posting rule for {type(document).__name__}")
    return rule(document, context)
