"""Source documents the journal engine posts from.

Each document type is an explicit record; ``SourceDocument`` is the union the
engine dispatches on. Amounts are in the document's own currency unless noted.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional, Union

from pharmledger.domain.entities import ItemType, SourceType, ZERO


@dataclass(frozen=True)
class PurchaseInvoice:
    invoice_number: str
    supplier_id: int
    invoice_date: date
    subtotal: Decimal
    tax_amount: Decimal = ZERO
    item_type: ItemType = ItemType.INVENTORY
    expense_account_code: Optional[str] = None
    currency: str = "IDR"
    exchange_rate: Optional[Decimal] = None
    is_import: bool = False
    due_date: Optional[date] = None
    faktur_pajak_number: Optional[str] = None
    notes: Optional[str] = None

    source_type = SourceType.PURCHASE_INVOICE

    @property
    def reference(self) -> str:
        return self.invoice_number

    @property
    def entry_date(self) -> date:
        return self.invoice_date


@dataclass(frozen=True)
class SalesInvoice:
    invoice_number: str
    customer_id: int
    invoice_date: date
    subtotal: Decimal
    tax_amount: Decimal = ZERO
    due_date: Optional[date] = None
    faktur_pajak_number: Optional[str] = None
    notes: Optional[str] = None

    source_type = SourceType.SALES_INVOICE

    @property
    def reference(self) -> str:
        return self.invoice_number

    @property
    def entry_date(self) -> date:
        return self.invoice_date

    @property
    def total_amount(self) -> Decimal:
        return self.subtotal + self.tax_amount


@dataclass(frozen=True)
class ReceiptVoucher:
    """Money received from a customer, optionally settling a sales invoice."""

    voucher_number: str
    customer_id: int
    voucher_date: date
    amount: Decimal
    bank_account_id: Optional[int] = None
    sales_invoice_id: Optional[int] = None
    description: Optional[str] = None

    source_type = SourceType.RECEIPT_VOUCHER

    @property
    def reference(self) -> str:
        return self.voucher_number

    @property
    def entry_date(self) -> date:
        return self.voucher_date


@dataclass(frozen=True)
class PaymentVoucher:
    """Money paid to a supplier."""

    voucher_number: str
    supplier_id: int
    voucher_date: date
    amount: Decimal
    bank_account_id: Optional[int] = None
    description: Optional[str] = None

    source_type = SourceType.PAYMENT_VOUCHER

    @property
    def reference(self) -> str:
        return self.voucher_number

    @property
    def entry_date(self) -> date:
        return self.voucher_date


@dataclass(frozen=True)
class BatchCapitalization:
    """Capitalize a batch's locked landed cost into inventory."""

    batch_id: int
    capitalization_date: date
    description: Optional[str] = None

    source_type = SourceType.BATCH_CAPITALIZATION

    @property
    def reference(self) -> str:
        return str(self.batch_id)

    @property
    def entry_date(self) -> date:
        return self.capitalization_date


@dataclass(frozen=True)
class FundTransfer:
    reference: str
    transfer_date: date
    from_bank_account_id: int
    to_bank_account_id: int
    amount: Decimal
    fee: Decimal = ZERO
    description: Optional[str] = None

    source_type = SourceType.FUND_TRANSFER

    @property
    def entry_date(self) -> date:
        return self.transfer_date


@dataclass(frozen=True)
class ManualLine:
    account_code: str
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    party_id: Optional[int] = None
    memo: Optional[str] = None


@dataclass(frozen=True)
class ManualEntry:
    """Adjusting entry keyed in by an accountant."""

    manual_date: date
    lines: tuple[ManualLine, ...]
    reference: Optional[str] = None
    description: Optional[str] = None

    source_type = SourceType.MANUAL_ENTRY

    @property
    def entry_date(self) -> date:
        return self.manual_date


SourceDocument = Union[
    PurchaseInvoice,
    SalesInvoice,
    ReceiptVoucher,
    PaymentVoucher,
    BatchCapitalization,
    FundTransfer,
    ManualEntry,
]
