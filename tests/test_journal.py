"""Tests for the journal engine."""

from datetime import date
from decimal import Decimal

import pytest

from pharmledger.domain.documents import (
    BatchCapitalization,
    FundTransfer,
    ManualEntry,
    ManualLine,
    PaymentVoucher,
    PurchaseInvoice,
    ReceiptVoucher,
    SalesInvoice,
)
from pharmledger.domain.entities import JournalLine, SourceType
from pharmledger.domain.errors import (
    ConflictError,
    InvalidRateError,
    NotFoundError,
    UnbalancedEntryError,
    ValidationError,
)
from pharmledger.domain.posting_rules import LineDraft


def _lines_by_code(temp_db, entry):
    return {temp_db.get_account(line.account_id).code: (line.debit, line.credit) for line in entry.lines}


def _manual(*lines, reference=None, when=date(2024, 3, 31)):
    return ManualEntry(manual_date=when, lines=tuple(lines), reference=reference)


class TestPosting:
    def test_purchase_invoice_entry_balances(self, journal_service, temp_db, seeded_chart, sample_supplier):
        entry = journal_service.post(
            PurchaseInvoice(
                invoice_number="PI-001",
                supplier_id=sample_supplier.id,
                invoice_date=date(2024, 3, 5),
                subtotal=Decimal("1000000"),
                tax_amount=Decimal("110000"),
                is_import=True,
            )
        )

        assert entry.source_type == SourceType.PURCHASE_INVOICE
        assert entry.source_id == "PI-001"
        assert entry.total_debit == entry.total_credit == Decimal("1110000.00")
        assert [line.line_number for line in entry.lines] == [1, 2, 3]

        record = temp_db.get_purchase_invoice_by_number("PI-001")
        assert record.journal_entry_id == entry.id
        assert record.total_amount == Decimal("1110000.00")
        assert record.is_import

    def test_sales_invoice_stores_record(self, journal_service, temp_db, seeded_chart, sample_customer):
        entry = journal_service.post(
            SalesInvoice(
                invoice_number="SI-001",
                customer_id=sample_customer.id,
                invoice_date=date(2024, 3, 6),
                subtotal=Decimal("5000000"),
                due_date=date(2024, 4, 5),
            )
        )

        record = temp_db.get_sales_invoice_by_number("SI-001")
        assert record.journal_entry_id == entry.id
        assert record.due_date == date(2024, 4, 5)
        assert _lines_by_code(temp_db, entry) == {
            "1200": (Decimal("5000000.00"), Decimal("0.00")),
            "4100": (Decimal("0.00"), Decimal("5000000.00")),
        }

    def test_receipt_and_payment_through_bank(
        self, journal_service, temp_db, seeded_chart, sample_customer, sample_supplier, sample_bank
    ):
        receipt = journal_service.post(
            ReceiptVoucher(
                voucher_number="RV-001",
                customer_id=sample_customer.id,
                voucher_date=date(2024, 3, 10),
                amount=Decimal("300000"),
                bank_account_id=sample_bank.id,
            )
        )
        payment = journal_service.post(
            PaymentVoucher(
                voucher_number="PV-001",
                supplier_id=sample_supplier.id,
                voucher_date=date(2024, 3, 11),
                amount=Decimal("200000"),
                bank_account_id=sample_bank.id,
            )
        )

        assert _lines_by_code(temp_db, receipt)["1120"] == (Decimal("300000.00"), Decimal("0.00"))
        assert _lines_by_code(temp_db, payment)["1120"] == (Decimal("0.00"), Decimal("200000.00"))

    def test_fund_transfer(self, journal_service, bank_service, temp_db, sample_bank):
        cash_box = bank_service.create_bank_account(name="Petty Cash", bank_name="Office", ledger_account_code="1110")

        entry = journal_service.post(
            FundTransfer(
                reference="TR-001",
                transfer_date=date(2024, 3, 12),
                from_bank_account_id=sample_bank.id,
                to_bank_account_id=cash_box.id,
                amount=Decimal("1000000"),
                fee=Decimal("2500"),
            )
        )

        assert entry.total_debit == Decimal("1002500.00")
        assert len(entry.lines) == 4

    def test_payment_with_unknown_bank_account(self, journal_service, seeded_chart, sample_supplier):
        with pytest.raises(ValidationError, match="Bank account 42 not found"):
            journal_service.post(
                PaymentVoucher(
                    voucher_number="PV-X",
                    supplier_id=sample_supplier.id,
                    voucher_date=date(2024, 3, 11),
                    amount=Decimal("1"),
                    bank_account_id=42,
                )
            )

    def test_manual_entry(self, journal_service, temp_db, seeded_chart):
        entry = journal_service.post(
            _manual(ManualLine("6300", debit=Decimal("500000")), ManualLine("1590", credit=Decimal("500000")))
        )

        assert entry.source_type == SourceType.MANUAL_ENTRY
        assert entry.source_id is None


class TestAllOrNothing:
    def test_unbalanced_manual_entry_writes_nothing(self, journal_service, temp_db, seeded_chart):
        with pytest.raises(UnbalancedEntryError) as excinfo:
            journal_service.post(
                _manual(ManualLine("6100", debit=Decimal("100")), ManualLine("1110", credit=Decimal("90")))
            )

        assert excinfo.value.total_debit == Decimal("100.00")
        assert excinfo.value.total_credit == Decimal("90.00")
        assert journal_service.list_entries() == []

    def test_failure_on_later_line_writes_nothing(self, journal_service, seeded_chart):
        with pytest.raises(ValidationError, match="header account"):
            journal_service.post(
                _manual(ManualLine("6100", debit=Decimal("100")), ManualLine("1100", credit=Decimal("100")))
            )
        assert journal_service.list_entries() == []

    def test_document_record_failure_rolls_back_entry(self, journal_service, temp_db, seeded_chart, sample_customer):
        def broken_store(document, entry_id):
            raise RuntimeError("disk full")

        journal_service._store_document = broken_store

        with pytest.raises(RuntimeError):
            journal_service.post(
                SalesInvoice(
                    invoice_number="SI-ERR",
                    customer_id=sample_customer.id,
                    invoice_date=date(2024, 3, 6),
                    subtotal=Decimal("100"),
                )
            )
        assert journal_service.list_entries() == []

    @pytest.mark.parametrize(
        "lines, message",
        [
            ((ManualLine("6100", debit=Decimal("100")),), "at least two lines"),
            ((ManualLine("6100", debit=Decimal("-5")), ManualLine("1110", credit=Decimal("-5"))), "negative"),
            (
                (ManualLine("6100", debit=Decimal("5"), credit=Decimal("5")), ManualLine("1110", credit=Decimal("0"))),
                "both a debit and a credit",
            ),
            ((ManualLine("6100", debit=Decimal("5")), ManualLine("1110")), "non-zero"),
            ((ManualLine("6100", debit=Decimal("5")), ManualLine("9999", credit=Decimal("5"))), "not found"),
        ],
    )
    def test_invalid_lines_rejected(self, journal_service, seeded_chart, lines, message):
        with pytest.raises(ValidationError, match=message):
            journal_service.post(_manual(*lines))

    def test_unknown_party_on_line_rejected(self, journal_service, seeded_chart):
        with pytest.raises(ValidationError, match="Party 77 not found"):
            journal_service.resolve_lines(
                [LineDraft("1200", debit=Decimal("1"), party_id=77), LineDraft("4100", credit=Decimal("1"))]
            )

    def test_check_balanced_accepts_equal_totals(self):
        lines = [
            JournalLine(account_id=1, debit=Decimal("0.10"), credit=Decimal("0")),
            JournalLine(account_id=1, debit=Decimal("0.20"), credit=Decimal("0")),
            JournalLine(account_id=2, debit=Decimal("0"), credit=Decimal("0.30")),
        ]
        from pharmledger.domain.journal import JournalService

        JournalService.check_balanced(lines)


class TestDocumentChecks:
    def test_duplicate_invoice_number_rejected(self, journal_service, seeded_chart, sample_customer):
        invoice = SalesInvoice(
            invoice_number="SI-DUP",
            customer_id=sample_customer.id,
            invoice_date=date(2024, 3, 6),
            subtotal=Decimal("100"),
        )
        journal_service.post(invoice)

        with pytest.raises(ConflictError, match="already been posted"):
            journal_service.post(invoice)
        assert len(journal_service.list_entries()) == 1

    def test_duplicate_voucher_number_rejected(self, journal_service, seeded_chart, sample_supplier):
        voucher = PaymentVoucher(
            voucher_number="PV-DUP", supplier_id=sample_supplier.id, voucher_date=date(2024, 3, 6), amount=Decimal("1")
        )
        journal_service.post(voucher)

        with pytest.raises(ConflictError):
            journal_service.post(voucher)

    def test_party_type_is_checked(self, journal_service, seeded_chart, sample_customer):
        with pytest.raises(ValidationError, match="not a supplier"):
            journal_service.post(
                PurchaseInvoice(
                    invoice_number="PI-WRONG",
                    supplier_id=sample_customer.id,
                    invoice_date=date(2024, 3, 5),
                    subtotal=Decimal("100"),
                )
            )

    def test_pkp_supplier_requires_faktur_for_taxed_invoice(self, journal_service, seeded_chart, pkp_supplier):
        invoice = PurchaseInvoice(
            invoice_number="PI-PKP",
            supplier_id=pkp_supplier.id,
            invoice_date=date(2024, 3, 5),
            subtotal=Decimal("1000000"),
            tax_amount=Decimal("110000"),
        )

        with pytest.raises(ValidationError, match="faktur pajak"):
            journal_service.post(invoice)

        entry = journal_service.post(
            PurchaseInvoice(
                invoice_number="PI-PKP",
                supplier_id=pkp_supplier.id,
                invoice_date=date(2024, 3, 5),
                subtotal=Decimal("1000000"),
                tax_amount=Decimal("110000"),
                faktur_pajak_number="010.000-24.00000001",
            )
        )
        assert entry.total_debit == Decimal("1110000.00")

    def test_receipt_invoice_must_belong_to_customer(
        self, journal_service, party_service, temp_db, seeded_chart, sample_customer
    ):
        other = party_service.create_party(name="Klinik Prima", party_type="customer")
        journal_service.post(
            SalesInvoice(
                invoice_number="SI-OWN",
                customer_id=sample_customer.id,
                invoice_date=date(2024, 3, 6),
                subtotal=Decimal("100"),
            )
        )
        invoice = temp_db.get_sales_invoice_by_number("SI-OWN")

        with pytest.raises(ValidationError, match="does not belong"):
            journal_service.post(
                ReceiptVoucher(
                    voucher_number="RV-OWN",
                    customer_id=other.id,
                    voucher_date=date(2024, 3, 7),
                    amount=Decimal("100"),
                    sales_invoice_id=invoice.id,
                )
            )


class TestCapitalization:
    def test_capitalize_locks_and_posts_landed_cost(
        self, journal_service, batch_service, temp_db, seeded_chart, sample_batch, sample_supplier
    ):
        entry = journal_service.capitalize_batch(sample_batch.id, date(2024, 3, 2))

        assert entry.source_type == SourceType.BATCH_CAPITALIZATION
        assert entry.source_id == str(sample_batch.id)
        assert _lines_by_code(temp_db, entry) == {
            "1300": (Decimal("16250000.00"), Decimal("0.00")),
            "2100": (Decimal("0.00"), Decimal("16250000.00")),
        }
        assert entry.lines[1].party_id == sample_supplier.id
        assert batch_service.require_batch(sample_batch.id).cost_locked

    def test_post_routes_batch_capitalization(self, journal_service, seeded_chart, sample_batch):
        entry = journal_service.post(BatchCapitalization(batch_id=sample_batch.id, capitalization_date=date(2024, 3, 2)))
        assert entry.description == "Capitalize batch B-001"

    def test_second_capitalization_rejected(self, journal_service, seeded_chart, sample_batch):
        journal_service.capitalize_batch(sample_batch.id, date(2024, 3, 2))

        with pytest.raises(ConflictError, match="already been capitalized"):
            journal_service.capitalize_batch(sample_batch.id, date(2024, 3, 3))

    def test_failed_capitalization_leaves_batch_unlocked(
        self, journal_service, batch_service, seeded_chart, sample_batch
    ):
        journal_service.chart.deactivate(seeded_chart["1300"].id)

        with pytest.raises(ValidationError, match="inactive"):
            journal_service.capitalize_batch(sample_batch.id, date(2024, 3, 2))

        batch = batch_service.require_batch(sample_batch.id)
        assert not batch.cost_locked
        assert batch.final_landed_cost is None
        assert journal_service.list_entries() == []

    def test_capitalize_zero_rate_batch_fails(self, journal_service, batch_service, seeded_chart):
        batch = batch_service.create_batch(
            batch_number="B-ZERO",
            import_date=date(2024, 3, 1),
            import_quantity=1,
            import_price=Decimal("10"),
            currency="USD",
            exchange_rate=0,
        )

        with pytest.raises(InvalidRateError):
            journal_service.capitalize_batch(batch.id, date(2024, 3, 2))
        assert not batch_service.require_batch(batch.id).cost_locked

    def test_capitalize_unknown_batch(self, journal_service, seeded_chart):
        with pytest.raises(NotFoundError):
            journal_service.capitalize_batch(404, date(2024, 3, 2))


class TestReversal:
    def test_reversal_swaps_sides(self, journal_service, temp_db, seeded_chart, sample_customer):
        original = journal_service.post(
            SalesInvoice(
                invoice_number="SI-REV",
                customer_id=sample_customer.id,
                invoice_date=date(2024, 3, 6),
                subtotal=Decimal("1000"),
                tax_amount=Decimal("110"),
            )
        )

        reversal = journal_service.reverse(original.id)

        assert reversal.source_type == SourceType.REVERSAL
        assert reversal.source_id == str(original.id)
        assert reversal.reverses_entry_id == original.id
        assert reversal.entry_date == original.entry_date
        for before, after in zip(original.lines, reversal.lines):
            assert (before.account_id, before.debit, before.credit, before.party_id) == (
                after.account_id,
                after.credit,
                after.debit,
                after.party_id,
            )
        # history is untouched
        assert journal_service.require_entry(original.id) == original

    def test_reversal_date_can_be_given(self, journal_service, seeded_chart):
        original = journal_service.post(
            _manual(ManualLine("6100", debit=Decimal("10")), ManualLine("1110", credit=Decimal("10")))
        )

        reversal = journal_service.reverse(original.id, reversal_date=date(2024, 4, 1), description="Wrong month")

        assert reversal.entry_date == date(2024, 4, 1)
        assert reversal.description == "Wrong month"

    def test_cannot_reverse_twice(self, journal_service, seeded_chart):
        original = journal_service.post(
            _manual(ManualLine("6100", debit=Decimal("10")), ManualLine("1110", credit=Decimal("10")))
        )
        reversal = journal_service.reverse(original.id)

        with pytest.raises(ConflictError, match="already been reversed"):
            journal_service.reverse(original.id)
        with pytest.raises(ConflictError, match="itself a reversal"):
            journal_service.reverse(reversal.id)

    def test_reverse_unknown_entry(self, journal_service):
        with pytest.raises(NotFoundError):
            journal_service.reverse(123)

    def test_list_entries_by_source_type(self, journal_service, seeded_chart):
        original = journal_service.post(
            _manual(ManualLine("6100", debit=Decimal("10")), ManualLine("1110", credit=Decimal("10")))
        )
        journal_service.reverse(original.id)

        reversals = journal_service.list_entries(source_type=SourceType.REVERSAL)
        assert [entry.reverses_entry_id for entry in reversals] == [original.id]
        assert len(journal_service.list_entries()) == 2
