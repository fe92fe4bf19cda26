"""Journal engine: posts source documents as balanced journal entries."""

import logging
from datetime import date
from typing import Optional, Sequence

from pharmledger.config import LedgerSettings
from pharmledger.database.base import Database
from pharmledger.domain.chart import ChartOfAccountsService
from pharmledger.domain.currency import to_money
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
from pharmledger.domain.entities import (
    Batch,
    JournalEntry,
    JournalLine,
    PartyType,
    SourceType,
    ZERO,
)
from pharmledger.domain.errors import (
    ValidationError,
    NotFoundError,
    ConflictError,
    UnbalancedEntryError,
    duplicate_document,
    entry_not_found,
    party_not_found,
    bank_account_not_found,
)
from pharmledger.domain.landed_cost import BatchService
from pharmledger.domain.posting_rules import (
    LineDraft,
    PostingContext,
    map_document,
    purchase_invoice_amounts,
)

logger = logging.getLogger(__name__)


def reversed_entry_ids(db: Database) -> set[int]:
    """IDs of entries that have been cancelled by a reversal."""
    return {
        entry.reverses_entry_id
        for entry in db.list_journal_entries(source_type=SourceType.REVERSAL)
        if entry.reverses_entry_id is not None
    }


class JournalService:
    """Service that turns source documents into journal entries.

    Posting is all-or-nothing: lines are derived and validated before
    anything is written, and the entry, its lines and the document record
    are written in a single transaction.
    """

    def __init__(self, db: Database, settings: Optional[LedgerSettings] = None):
        """Initialize journal service.

        Args:
            db: Database instance
            settings: Ledger settings; defaults are used when omitted
        """
        self.db = db
        self.settings = settings or LedgerSettings()
        self.chart = ChartOfAccountsService(db)
        self.batches = BatchService(db, base_currency=self.settings.base_currency)

    # Validation helpers
    def _require_party(self, party_id: int, party_type: PartyType):
        party = self.db.get_party(party_id)
        if party is None:
            raise ValidationError(party_not_found(party_id))
        if party.party_type != party_type:
            raise ValidationError(f"Party {party_id} ({party.name}) is not a {party_type.value}")
        return party

    def _check_duplicate(self, document: SourceDocument) -> None:
        if isinstance(document, PurchaseInvoice):
            taken = self.db.get_purchase_invoice_by_number(document.invoice_number) is not None
        elif isinstance(document, SalesInvoice):
            taken = self.db.get_sales_invoice_by_number(document.invoice_number) is not None
        elif document.reference is None:
            return
        else:
            taken = self.db.find_journal_entry(document.source_type.value, document.reference) is not None

        if taken:
            logger.warning("Rejected duplicate %s %s", document.source_type.value, document.reference)
            raise ConflictError(duplicate_document(document.source_type.value, document.reference))

    def _check_document(self, document: SourceDocument) -> None:
        """Validate document-level references before mapping."""
        if isinstance(document, PurchaseInvoice):
            supplier = self._require_party(document.supplier_id, PartyType.SUPPLIER)
            if supplier.is_pkp and document.tax_amount and not document.faktur_pajak_number:
                raise ValidationError(
                    f"Purchase invoice {document.invoice_number} from PKP supplier {supplier.name} "
                    "requires a faktur pajak number"
                )
        elif isinstance(document, SalesInvoice):
            self._require_party(document.customer_id, PartyType.CUSTOMER)
        elif isinstance(document, ReceiptVoucher):
            self._require_party(document.customer_id, PartyType.CUSTOMER)
            if document.sales_invoice_id is not None:
                invoice = self.db.get_sales_invoice(document.sales_invoice_id)
                if invoice is None:
                    raise ValidationError(f"Sales invoice {document.sales_invoice_id} not found")
                if invoice.customer_id != document.customer_id:
                    raise ValidationError(
                        f"Sales invoice {invoice.invoice_number} does not belong to customer {document.customer_id}"
                    )
        elif isinstance(document, PaymentVoucher):
            self._require_party(document.supplier_id, PartyType.SUPPLIER)

    def _context(self, document: SourceDocument, batch: Optional[Batch] = None) -> PostingContext:
        bank_ids: list[int] = []
        if isinstance(document, (ReceiptVoucher, PaymentVoucher)) and document.bank_account_id is not None:
            bank_ids.append(document.bank_account_id)
        elif isinstance(document, FundTransfer):
            bank_ids.extend([document.from_bank_account_id, document.to_bank_account_id])

        codes = {}
        for bank_account_id in bank_ids:
            bank_account = self.db.get_bank_account(bank_account_id)
            if bank_account is None:
                raise ValidationError(bank_account_not_found(bank_account_id))
            codes[bank_account_id] = self.db.get_account(bank_account.ledger_account_id).code

        return PostingContext(
            accounts=self.settings.posting_accounts,
            base_currency=self.settings.base_currency,
            bank_ledger_codes=codes,
            batch=batch,
        )

    def resolve_lines(self, drafts: Sequence[LineDraft]) -> list[JournalLine]:
        """Resolve account codes and validate every line.

        Raises:
            ValidationError: If an amount is negative, a line has both or
                neither side set, an account is unknown, a header or
                inactive, a party is unknown, or there are fewer than two lines
        """
        if len(drafts) < 2:
            raise ValidationError("A journal entry needs at least two lines")

        lines = []
        for number, draft in enumerate(drafts, start=1):
            debit = to_money(draft.debit)
            credit = to_money(draft.credit)
            if debit < 0 or credit < 0:
                raise ValidationError(f"Line {number}: amounts cannot be negative")
            if debit and credit:
                raise ValidationError(f"Line {number}: a line cannot have both a debit and a credit")
            if not debit and not credit:
                raise ValidationError(f"Line {number}: a line needs a non-zero debit or credit")

            account = self.chart.ensure_postable(self.chart.resolve(draft.account_code))
            if draft.party_id is not None and self.db.get_party(draft.party_id) is None:
                raise ValidationError(f"Line {number}: {party_not_found(draft.party_id)}")

            lines.append(
                JournalLine(
                    account_id=account.id,
                    debit=debit,
                    credit=credit,
                    line_number=number,
                    party_id=draft.party_id,
                    memo=draft.memo,
                    sales_invoice_id=draft.sales_invoice_id,
                )
            )
        return lines

    @staticmethod
    def check_balanced(lines: Sequence[JournalLine]) -> None:
        """Raise UnbalancedEntryError unless debits equal credits at 2 places."""
        total_debit = to_money(sum((line.debit for line in lines), ZERO))
        total_credit = to_money(sum((line.credit for line in lines), ZERO))
        if total_debit != total_credit:
            logger.warning("Rejected unbalanced entry: debits %s, credits %s", total_debit, total_credit)
            raise UnbalancedEntryError(total_debit, total_credit)

    def _store_document(self, document: SourceDocument, entry_id: int) -> None:
        if isinstance(document, PurchaseInvoice):
            subtotal, tax = purchase_invoice_amounts(document, self.settings.base_currency)
            self.db.create_purchase_invoice(
                invoice_number=document.invoice_number,
                supplier_id=document.supplier_id,
                invoice_date=document.invoice_date,
                item_type=document.item_type.value,
                subtotal=subtotal,
                tax_amount=tax,
                total_amount=subtotal + tax,
                is_import=document.is_import,
                due_date=document.due_date,
                faktur_pajak_number=document.faktur_pajak_number,
                journal_entry_id=entry_id,
            )
        elif isinstance(document, SalesInvoice):
            subtotal = to_money(document.subtotal)
            tax = to_money(document.tax_amount)
            self.db.create_sales_invoice(
                invoice_number=document.invoice_number,
                customer_id=document.customer_id,
                invoice_date=document.invoice_date,
                subtotal=subtotal,
                tax_amount=tax,
                total_amount=subtotal + tax,
                due_date=document.due_date,
                faktur_pajak_number=document.faktur_pajak_number,
                journal_entry_id=entry_id,
            )

    @staticmethod
    def _description(document: SourceDocument) -> Optional[str]:
        if isinstance(document, (PurchaseInvoice, SalesInvoice)):
            return document.notes or f"{document.source_type.value.replace('_', ' ').capitalize()} {document.invoice_number}"
        return document.description

    def _post(self, document: SourceDocument, batch: Optional[Batch] = None) -> JournalEntry:
        self._check_duplicate(document)
        self._check_document(document)
        drafts = map_document(document, self._context(document, batch=batch))
        lines = self.resolve_lines(drafts)
        self.check_balanced(lines)

        with self.db.transaction():
            entry_id = self.db.create_journal_entry(
                entry_date=document.entry_date,
                source_type=document.source_type.value,
                source_id=document.reference,
                lines=lines,
                description=self._description(document),
            )
            self._store_document(document, entry_id)

        entry = self.db.get_journal_entry(entry_id)
        logger.info(
            "Posted %s %s as entry %s (%s)",
            document.source_type.value, document.reference, entry_id, entry.total_debit,
        )
        return entry

    def post(self, document: SourceDocument) -> JournalEntry:
        """Post a source document as one balanced journal entry.

        Args:
            document: Purchase or sales invoice, receipt or payment voucher,
                batch capitalization, fund transfer or manual entry

        Returns:
            Posted journal entry

        Raises:
            ValidationError: If the document or any derived line is invalid
            UnbalancedEntryError: If the lines do not balance
            ConflictError: If the document was already posted
        """
        if isinstance(document, BatchCapitalization):
            return self.capitalize_batch(
                document.batch_id, document.capitalization_date, description=document.description
            )
        return self._post(document)

    def capitalize_batch(
        self, batch_id: int, entry_date: date, description: Optional[str] = None
    ) -> JournalEntry:
        """Lock a batch's landed cost and post it to inventory.

        The lock and the entry are written together; if posting fails the
        batch stays unlocked.

        Raises:
            NotFoundError: If the batch does not exist
            ConflictError: If the batch was already capitalized
            InvalidRateError: If the batch cost cannot be allocated
        """
        document = BatchCapitalization(batch_id=batch_id, capitalization_date=entry_date, description=description)
        self.batches.require_batch(batch_id)
        if self.db.find_journal_entry(SourceType.BATCH_CAPITALIZATION.value, document.reference) is not None:
            logger.warning("Rejected second capitalization of batch %s", batch_id)
            raise ConflictError(f"Batch {batch_id} has already been capitalized")

        with self.db.transaction():
            batch = self.batches.lock(batch_id)
            if description is None:
                document = BatchCapitalization(
                    batch_id=batch_id,
                    capitalization_date=entry_date,
                    description=f"Capitalize batch {batch.batch_number}",
                )
            entry = self._post(document, batch=batch)
        logger.info("Capitalized batch %s at %s", batch.batch_number, batch.final_landed_cost)
        return entry

    def get_entry(self, entry_id: int) -> Optional[JournalEntry]:
        """Get journal entry by ID."""
        return self.db.get_journal_entry(entry_id)

    def require_entry(self, entry_id: int) -> JournalEntry:
        entry = self.db.get_journal_entry(entry_id)
        if entry is None:
            raise NotFoundError(entry_not_found(entry_id))
        return entry

    def list_entries(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        source_type: Optional[SourceType] = None,
    ) -> list[JournalEntry]:
        """List journal entries in posting order."""
        return self.db.list_journal_entries(start_date=start_date, end_date=end_date, source_type=source_type)

    def reverse(
        self,
        entry_id: int,
        reversal_date: Optional[date] = None,
        description: Optional[str] = None,
    ) -> JournalEntry:
        """Post a new entry that cancels an existing one.

        Args:
            entry_id: Entry to reverse
            reversal_date: Date of the reversing entry (defaults to the
                original entry's date)
            description: Description of the reversing entry

        Returns:
            Reversing entry, with every debit and credit swapped

        Raises:
            NotFoundError: If the entry does not exist
            ConflictError: If the entry is a reversal or was already reversed
        """
        original = self.require_entry(entry_id)
        if original.source_type == SourceType.REVERSAL:
            raise ConflictError(f"Journal entry {entry_id} is itself a reversal and cannot be reversed")
        if self.db.find_reversal(entry_id) is not None:
            raise ConflictError(f"Journal entry {entry_id} has already been reversed")

        lines = []
        for line in original.lines:
            self.chart.ensure_postable(self.chart.require_account(line.account_id))
            lines.append(
                JournalLine(
                    account_id=line.account_id,
                    debit=line.credit,
                    credit=line.debit,
                    line_number=line.line_number,
                    party_id=line.party_id,
                    memo=line.memo,
                    sales_invoice_id=line.sales_invoice_id,
                )
            )
        self.check_balanced(lines)

        with self.db.transaction():
            reversal_id = self.db.create_journal_entry(
                entry_date=reversal_date or original.entry_date,
                source_type=SourceType.REVERSAL.value,
                source_id=str(entry_id),
                lines=lines,
                description=description or f"Reversal of entry {entry_id}",
                reverses_entry_id=entry_id,
            )

        logger.info("Reversed entry %s with entry %s", entry_id, reversal_id)
        return self.db.get_journal_entry(reversal_id)
