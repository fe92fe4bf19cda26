"""Domain model entities for pharmledger.

These are pure data classes representing ledger concepts, independent of the
database schema. Derived views (ledger entries, report rows) are built from
these and are never persisted.
"""

from dataclasses import dataclass
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional, Union


ZERO = Decimal("0.00")


class AccountType(str, Enum):
    """Classification of a chart-of-accounts entry."""

    ASSET = "asset"
    LIABILITY = "liability"
    EQUITY = "equity"
    REVENUE = "revenue"
    EXPENSE = "expense"
    CONTRA = "contra"


class NormalBalance(str, Enum):
    """Side on which an account normally carries its balance."""

    DEBIT = "debit"
    CREDIT = "credit"


class PartyType(str, Enum):
    CUSTOMER = "customer"
    SUPPLIER = "supplier"


class ItemType(str, Enum):
    """What a purchase invoice buys: stock for resale or a direct expense."""

    INVENTORY = "inventory"
    EXPENSE = "expense"


class SourceType(str, Enum):
    """Kind of business document a journal entry was posted from."""

    PURCHASE_INVOICE = "purchase_invoice"
    SALES_INVOICE = "sales_invoice"
    RECEIPT_VOUCHER = "receipt_voucher"
    PAYMENT_VOUCHER = "payment_voucher"
    BATCH_CAPITALIZATION = "batch_capitalization"
    FUND_TRANSFER = "fund_transfer"
    MANUAL_ENTRY = "manual_entry"
    REVERSAL = "reversal"


@dataclass(frozen=True)
class Account:
    """Chart-of-accounts entry."""

    id: int
    code: str
    name: str
    account_type: AccountType
    normal_balance: NormalBalance
    name_local: Optional[str] = None
    account_group: Optional[str] = None
    parent_id: Optional[int] = None
    is_header: bool = False
    is_active: bool = True
    description: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def is_postable(self) -> bool:
        """Whether journal lines may reference this account."""
        return not self.is_header and self.is_active


@dataclass(frozen=True)
class AccountTreeNode:
    """Account node with nested children for hierarchical display."""

    account: Account
    children: tuple["AccountTreeNode", ...] = ()


@dataclass(frozen=True)
class Party:
    """Customer or supplier tracked in the subledger."""

    id: int
    name: str
    party_type: PartyType
    tax_id: Optional[str] = None
    is_pkp: bool = False
    currency: str = "IDR"
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class BankAccount:
    """Bank account linked to a postable ledger account."""

    id: int
    name: str
    bank_name: str
    ledger_account_id: int
    account_number: Optional[str] = None
    currency: str = "IDR"
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class PercentageCharge:
    """Charge computed as a percentage of the base-currency purchase price."""

    value: Decimal

    @property
    def charge_type(self) -> str:
        return "percentage"

    @property
    def charge_value(self) -> Decimal:
        return self.value

    def amount_on(self, base: Decimal) -> Decimal:
        return base * self.value / Decimal(100)


@dataclass(frozen=True)
class FixedCharge:
    """Charge of a fixed base-currency amount."""

    amount: Decimal

    @property
    def charge_type(self) -> str:
        return "fixed"

    @property
    def charge_value(self) -> Decimal:
        return self.amount

    def amount_on(self, base: Decimal) -> Decimal:
        return self.amount


Charge = Union[PercentageCharge, FixedCharge]


@dataclass(frozen=True)
class ChargeComponent:
    """Named import charge (duty, freight, other)."""

    kind: str
    charge: Charge


@dataclass(frozen=True)
class LandedCost:
    """Breakdown of an allocated landed cost, all in base currency."""

    base_price: Decimal
    charges: tuple[tuple[str, Decimal], ...]
    total: Decimal

    def charge(self, kind: str) -> Decimal:
        for name, amount in self.charges:
            if name == kind:
                return amount
        return ZERO


@dataclass(frozen=True)
class Batch:
    """Imported inventory batch and its landed-cost inputs."""

    id: int
    batch_number: str
    import_date: date
    import_quantity: Decimal
    import_price: Decimal
    currency: str
    exchange_rate: Optional[Decimal]
    duty_percent: Decimal
    freight: Charge
    other: Charge
    sold_quantity: Decimal = ZERO
    product_name: Optional[str] = None
    supplier_id: Optional[int] = None
    cost_locked: bool = False
    final_landed_cost: Optional[Decimal] = None
    created_at: Optional[datetime] = None

    @property
    def current_stock(self) -> Decimal:
        return self.import_quantity - self.sold_quantity

    @property
    def unit_landed_cost(self) -> Optional[Decimal]:
        if self.final_landed_cost is None or not self.import_quantity:
            return None
        return self.final_landed_cost / self.import_quantity

    def charge_components(self) -> tuple[ChargeComponent, ...]:
        """Charges in allocation order; duty is always a percentage of base."""
        return (
            ChargeComponent("duty", PercentageCharge(self.duty_percent)),
            ChargeComponent("freight", self.freight),
            ChargeComponent("other", self.other),
        )


@dataclass(frozen=True)
class JournalLine:
    """One debit or credit against an account."""

    account_id: int
    debit: Decimal
    credit: Decimal
    line_number: int = 0
    party_id: Optional[int] = None
    memo: Optional[str] = None
    sales_invoice_id: Optional[int] = None


@dataclass(frozen=True)
class JournalEntry:
    """Balanced set of journal lines posted from one source document."""

    id: int
    entry_date: date
    source_type: SourceType
    source_id: Optional[str]
    lines: tuple[JournalLine, ...]
    description: Optional[str] = None
    reverses_entry_id: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def total_debit(self) -> Decimal:
        return sum((line.debit for line in self.lines), ZERO)

    @property
    def total_credit(self) -> Decimal:
        return sum((line.credit for line in self.lines), ZERO)


@dataclass(frozen=True)
class PostedLine:
    """Journal line joined with its entry header, as read for aggregation."""

    entry_id: int
    line_number: int
    entry_date: date
    source_type: SourceType
    source_id: Optional[str]
    account_id: int
    debit: Decimal
    credit: Decimal
    party_id: Optional[int] = None
    memo: Optional[str] = None
    description: Optional[str] = None
    sales_invoice_id: Optional[int] = None


@dataclass(frozen=True)
class PurchaseInvoiceRecord:
    """Stored purchase invoice, amounts converted to base currency."""

    id: int
    invoice_number: str
    supplier_id: int
    invoice_date: date
    item_type: ItemType
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    is_import: bool = False
    due_date: Optional[date] = None
    faktur_pajak_number: Optional[str] = None
    journal_entry_id: Optional[int] = None


@dataclass(frozen=True)
class SalesInvoiceRecord:
    """Stored sales invoice in base currency."""

    id: int
    invoice_number: str
    customer_id: int
    invoice_date: date
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    due_date: Optional[date] = None
    faktur_pajak_number: Optional[str] = None
    journal_entry_id: Optional[int] = None


@dataclass(frozen=True)
class LedgerEntry:
    """Row of a running-balance ledger; always derived, never stored."""

    entry_date: date
    entry_id: int
    source_type: SourceType
    source_id: Optional[str]
    debit: Decimal
    credit: Decimal
    balance: Decimal
    description: Optional[str] = None
    memo: Optional[str] = None

    @property
    def side(self) -> str:
        """Dr/Cr label of the running balance, by sign only."""
        return "Dr" if self.balance >= 0 else "Cr"


@dataclass(frozen=True)
class AccountBalanceRow:
    """Debit/credit totals of one account over a report range."""

    code: str
    name: str
    account_type: AccountType
    normal_balance: NormalBalance
    total_debit: Decimal
    total_credit: Decimal
    account_group: Optional[str] = None

    @property
    def balance(self) -> Decimal:
        """Debit-positive balance."""
        return self.total_debit - self.total_credit


@dataclass(frozen=True)
class TrialBalance:
    start_date: Optional[date]
    end_date: Optional[date]
    rows: tuple[AccountBalanceRow, ...]
    total_debit: Decimal
    total_credit: Decimal

    def row(self, code: str) -> Optional[AccountBalanceRow]:
        for row in self.rows:
            if row.code == code:
                return row
        return None


@dataclass(frozen=True)
class ProfitAndLoss:
    start_date: Optional[date]
    end_date: Optional[date]
    revenue_rows: tuple[AccountBalanceRow, ...]
    expense_rows: tuple[AccountBalanceRow, ...]
    revenue: Decimal
    expense: Decimal

    @property
    def net_income(self) -> Decimal:
        return self.revenue - self.expense


@dataclass(frozen=True)
class BalanceSheet:
    as_of: date
    asset_rows: tuple[AccountBalanceRow, ...]
    contra_asset_rows: tuple[AccountBalanceRow, ...]
    liability_rows: tuple[AccountBalanceRow, ...]
    equity_rows: tuple[AccountBalanceRow, ...]
    assets: Decimal
    contra_assets: Decimal
    liabilities: Decimal
    equity: Decimal
    net_income: Decimal

    @property
    def net_assets(self) -> Decimal:
        return self.assets - self.contra_assets

    @property
    def liabilities_and_equity(self) -> Decimal:
        return self.liabilities + self.equity + self.net_income


@dataclass(frozen=True)
class TaxRecord:
    """Invoice contributing to a monthly PPN figure."""

    invoice_date: date
    invoice_number: str
    party_id: int
    taxable_amount: Decimal
    ppn_amount: Decimal


@dataclass(frozen=True)
class TaxSummary:
    month: date
    input_ppn: Decimal
    output_ppn: Decimal
    input_records: tuple[TaxRecord, ...] = ()
    output_records: tuple[TaxRecord, ...] = ()

    @property
    def net_payable(self) -> Decimal:
        """Positive when payable, negative when refundable or carried forward."""
        return self.output_ppn - self.input_ppn


@dataclass(frozen=True)
class AgeingRow:
    """Outstanding receivables of one customer, bucketed by days past due."""

    customer_id: int
    customer_name: str
    current: Decimal = ZERO
    days_1_30: Decimal = ZERO
    days_31_60: Decimal = ZERO
    days_61_90: Decimal = ZERO
    days_90_plus: Decimal = ZERO
    invoice_count: int = 0

    @property
    def total_outstanding(self) -> Decimal:
        return self.current + self.days_1_30 + self.days_31_60 + self.days_61_90 + self.days_90_plus


@dataclass(frozen=True)
class LedgerSummary:
    opening_balance: Decimal
    total_debit: Decimal
    total_credit: Decimal
    closing_balance: Decimal
    entry_count: int = 0
