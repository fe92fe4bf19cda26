"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Optional, Sequence, Any
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from pharmledger.domain.entities import (
    Account,
    Party,
    BankAccount,
    Batch,
    JournalEntry,
    JournalLine,
    PostedLine,
    PurchaseInvoiceRecord,
    SalesInvoiceRecord,
    SourceType,
)


class Database(ABC):
    """Abstract database interface for pharmledger."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def transaction(self) -> AbstractContextManager[None]:
        """Group writes so they are committed together or not at all.

        Write methods called inside the block do not commit on their own.
        Any exception rolls back everything written inside the block.
        """
        pass

    # Chart of accounts operations
    @abstractmethod
    def create_account(
        self,
        code: str,
        name: str,
        account_type: str,
        normal_balance: str,
        name_local: Optional[str] = None,
        account_group: Optional[str] = None,
        parent_id: Optional[int] = None,
        is_header: bool = False,
        description: Optional[str] = None,
    ) -> int:
        """Create an account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def get_account_by_code(self, code: str) -> Optional[Account]:
        """Get account by code."""
        pass

    @abstractmethod
    def list_accounts(self, parent_id: Optional[int] = None, roots_only: bool = False) -> list[Account]:
        """List accounts ordered by code.

        Args:
            parent_id: Only children of this account
            roots_only: Only accounts without a parent (ignored when parent_id is set)
        """
        pass

    @abstractmethod
    def update_account(self, account_id: int, fields: dict[str, Any]) -> None:
        """Update account columns named in ``fields``."""
        pass

    @abstractmethod
    def delete_account(self, account_id: int) -> None:
        """Delete an account row."""
        pass

    @abstractmethod
    def get_account_line_count(self, account_id: int) -> int:
        """Count journal lines posted to an account."""
        pass

    # Party operations
    @abstractmethod
    def create_party(
        self,
        name: str,
        party_type: str,
        tax_id: Optional[str] = None,
        is_pkp: bool = False,
        currency: str = "IDR",
    ) -> int:
        """Create a customer or supplier. Returns party ID."""
        pass

    @abstractmethod
    def get_party(self, party_id: int) -> Optional[Party]:
        """Get party by ID."""
        pass

    @abstractmethod
    def list_parties(self, party_type: Optional[str] = None) -> list[Party]:
        """List parties, optionally filtered by type."""
        pass

    # Bank account operations
    @abstractmethod
    def create_bank_account(
        self,
        name: str,
        bank_name: str,
        ledger_account_id: int,
        account_number: Optional[str] = None,
        currency: str = "IDR",
    ) -> int:
        """Create a bank account. Returns bank account ID."""
        pass

    @abstractmethod
    def get_bank_account(self, bank_account_id: int) -> Optional[BankAccount]:
        """Get bank account by ID."""
        pass

    @abstractmethod
    def list_bank_accounts(self) -> list[BankAccount]:
        """List bank accounts."""
        pass

    @abstractmethod
    def update_bank_account_name(
        self, bank_account_id: int, name: str, bank_name: Optional[str] = None
    ) -> None:
        """Rename a bank account."""
        pass

    # Batch operations
    @abstractmethod
    def create_batch(
        self,
        batch_number: str,
        import_date: date,
        import_quantity: Decimal,
        import_price: Decimal,
        currency: str,
        exchange_rate: Optional[Decimal],
        duty_percent: Decimal,
        freight_type: str,
        freight_amount: Decimal,
        other_type: str,
        other_amount: Decimal,
        product_name: Optional[str] = None,
        supplier_id: Optional[int] = None,
    ) -> int:
        """Create a batch. Returns batch ID."""
        pass

    @abstractmethod
    def get_batch(self, batch_id: int) -> Optional[Batch]:
        """Get batch by ID."""
        pass

    @abstractmethod
    def list_batches(self) -> list[Batch]:
        """List batches."""
        pass

    @abstractmethod
    def update_unlocked_batch_costs(self, batch_id: int, fields: dict[str, Any]) -> bool:
        """Update cost columns only while the batch is unlocked.

        Returns:
            False if the batch was locked, leaving it unchanged
        """
        pass

    @abstractmethod
    def lock_batch_cost(self, batch_id: int) -> bool:
        """Set cost_locked from false to true.

        Returns:
            True if this call locked the batch, False if it was already locked
        """
        pass

    @abstractmethod
    def set_batch_import_quantity(self, batch_id: int, import_quantity: Decimal) -> bool:
        """Set import quantity only if it is not below the sold quantity.

        Returns:
            False if the guard failed and the batch is unchanged
        """
        pass

    @abstractmethod
    def add_batch_sold_quantity(self, batch_id: int, quantity: Decimal) -> bool:
        """Increase sold quantity only if enough stock remains.

        Returns:
            False if the guard failed and the batch is unchanged
        """
        pass

    # Journal operations
    @abstractmethod
    def create_journal_entry(
        self,
        entry_date: date,
        source_type: str,
        source_id: Optional[str],
        lines: Sequence[JournalLine],
        description: Optional[str] = None,
        reverses_entry_id: Optional[int] = None,
    ) -> int:
        """Write an entry header and all of its lines. Returns entry ID."""
        pass

    @abstractmethod
    def get_journal_entry(self, entry_id: int) -> Optional[JournalEntry]:
        """Get journal entry with its lines."""
        pass

    @abstractmethod
    def find_journal_entry(self, source_type: str, source_id: str) -> Optional[JournalEntry]:
        """Find the entry posted from a given source document."""
        pass

    @abstractmethod
    def find_reversal(self, entry_id: int) -> Optional[JournalEntry]:
        """Find the entry that reverses ``entry_id``."""
        pass

    @abstractmethod
    def list_journal_entries(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        source_type: Optional[SourceType] = None,
    ) -> list[JournalEntry]:
        """List entries in posting order with optional filters."""
        pass

    @abstractmethod
    def list_posted_lines(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_ids: Optional[Sequence[int]] = None,
        party_id: Optional[int] = None,
        before_date: Optional[date] = None,
    ) -> list[PostedLine]:
        """List journal lines joined with entry headers.

        Args:
            start_date: Inclusive lower date bound
            end_date: Inclusive upper date bound
            account_ids: Only lines against these accounts
            party_id: Only lines carrying this party
            before_date: Only lines dated strictly before this date
        """
        pass

    # Document operations
    @abstractmethod
    def create_purchase_invoice(
        self,
        invoice_number: str,
        supplier_id: int,
        invoice_date: date,
        item_type: str,
        subtotal: Decimal,
        tax_amount: Decimal,
        total_amount: Decimal,
        is_import: bool = False,
        due_date: Optional[date] = None,
        faktur_pajak_number: Optional[str] = None,
        journal_entry_id: Optional[int] = None,
    ) -> int:
        """Store a purchase invoice. Returns invoice ID."""
        pass

    @abstractmethod
    def get_purchase_invoice_by_number(self, invoice_number: str) -> Optional[PurchaseInvoiceRecord]:
        """Get purchase invoice by number."""
        pass

    @abstractmethod
    def list_purchase_invoices(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        import_only: bool = False,
    ) -> list[PurchaseInvoiceRecord]:
        """List purchase invoices by invoice date."""
        pass

    @abstractmethod
    def create_sales_invoice(
        self,
        invoice_number: str,
        customer_id: int,
        invoice_date: date,
        subtotal: Decimal,
        tax_amount: Decimal,
        total_amount: Decimal,
        due_date: Optional[date] = None,
        faktur_pajak_number: Optional[str] = None,
        journal_entry_id: Optional[int] = None,
    ) -> int:
        """Store a sales invoice. Returns invoice ID."""
        pass

    @abstractmethod
    def get_sales_invoice(self, invoice_id: int) -> Optional[SalesInvoiceRecord]:
        """Get sales invoice by ID."""
        pass

    @abstractmethod
    def get_sales_invoice_by_number(self, invoice_number: str) -> Optional[SalesInvoiceRecord]:
        """Get sales invoice by number."""
        pass

    @abstractmethod
    def list_sales_invoices(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        customer_id: Optional[int] = None,
    ) -> list[SalesInvoiceRecord]:
        """List sales invoices by invoice date."""
        pass
