"""Receivables ageing by customer."""

from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Optional

from pharmledger.database.base import Database
from pharmledger.domain.currency import to_money
from pharmledger.domain.entities import AgeingRow, SalesInvoiceRecord, ZERO
from pharmledger.domain.journal import reversed_entry_ids

BUCKETS = ("current", "days_1_30", "days_31_60", "days_61_90", "days_90_plus")


def ageing_bucket(days_overdue: int) -> str:
    """Bucket field for an invoice that is ``days_overdue`` days past due.

    Invoices not yet due are current; an invoice due today is in 1-30.
    """
    if days_overdue < 0:
        return "current"
    if days_overdue <= 30:
        return "days_1_30"
    if days_overdue <= 60:
        return "days_31_60"
    if days_overdue <= 90:
        return "days_61_90"
    return "days_90_plus"


def invoice_status(total_amount: Decimal, paid_amount: Decimal) -> str:
    """Payment status of an invoice: unpaid, partial or paid."""
    if paid_amount <= 0:
        return "unpaid"
    if paid_amount < total_amount:
        return "partial"
    return "paid"


class AgeingService:
    """Service computing outstanding receivables."""

    def __init__(self, db: Database):
        """Initialize ageing service.

        Args:
            db: Database instance
        """
        self.db = db

    def paid_amounts(self, as_of: Optional[date] = None) -> dict[int, Decimal]:
        """Receipts applied to each sales invoice up to ``as_of``."""
        paid: dict[int, Decimal] = {}
        for line in self.db.list_posted_lines(end_date=as_of):
            if line.sales_invoice_id is None:
                continue
            paid[line.sales_invoice_id] = paid.get(line.sales_invoice_id, ZERO) + line.credit - line.debit
        return paid

    def open_invoices(self, as_of: date) -> list[tuple[SalesInvoiceRecord, Decimal]]:
        """Sales invoices dated up to ``as_of`` with their outstanding amount."""
        reversed_ids = reversed_entry_ids(self.db)
        paid = self.paid_amounts(as_of)
        result = []
        for invoice in self.db.list_sales_invoices(end_date=as_of):
            if invoice.journal_entry_id in reversed_ids:
                continue
            outstanding = to_money(invoice.total_amount - paid.get(invoice.id, ZERO))
            if outstanding > 0:
                result.append((invoice, outstanding))
        return result

    def ageing_report(self, as_of: date) -> list[AgeingRow]:
        """Outstanding receivables per customer, bucketed by days past due.

        Invoices without a due date age from their invoice date. Fully paid
        invoices are left out. Rows are sorted by total outstanding, largest
        first.
        """
        rows: dict[int, AgeingRow] = {}
        for invoice, outstanding in self.open_invoices(as_of):
            due = invoice.due_date or invoice.invoice_date
            bucket = ageing_bucket((as_of - due).days)

            row = rows.get(invoice.customer_id)
            if row is None:
                party = self.db.get_party(invoice.customer_id)
                row = AgeingRow(
                    customer_id=invoice.customer_id,
                    customer_name=party.name if party else str(invoice.customer_id),
                )
            rows[invoice.customer_id] = replace(
                row,
                invoice_count=row.invoice_count + 1,
                **{bucket: getattr(row, bucket) + outstanding},
            )

        return sorted(rows.values(), key=lambda r: (-r.total_outstanding, r.customer_name))
