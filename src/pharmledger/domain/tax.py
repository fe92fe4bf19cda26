"""Monthly PPN (value-added tax) summaries."""

from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Optional, Union

from dateutil.relativedelta import relativedelta

from pharmledger.config import LedgerSettings
from pharmledger.database.base import Database
from pharmledger.domain.currency import to_money
from pharmledger.domain.entities import TaxRecord, TaxSummary, ZERO
from pharmledger.domain.errors import ValidationError
from pharmledger.domain.journal import reversed_entry_ids

MonthLike = Union[date, datetime, str]


def month_start(month: MonthLike) -> date:
    """First day of a month given as a date or a "YYYY-MM" string.

    Raises:
        ValidationError: If the string is not a valid year and month
    """
    if isinstance(month, datetime):
        return month.date().replace(day=1)
    if isinstance(month, date):
        return month.replace(day=1)
    try:
        parsed = datetime.strptime(month.strip(), "%Y-%m")
    except (AttributeError, ValueError) as e:
        raise ValidationError(f"Invalid month '{month}' (expected YYYY-MM)") from e
    return parsed.date()


def _ppn(rate: Decimal, amounts: Iterable[Decimal]) -> Decimal:
    return to_money(rate * sum(amounts, ZERO))


class TaxService:
    """Service deriving input and output PPN per month.

    Input PPN comes from import purchase invoices, output PPN from sales
    invoices. Both are recognized by invoice date, regardless of payment.
    Invoices whose journal entry has been reversed are left out.
    """

    def __init__(self, db: Database, settings: Optional[LedgerSettings] = None):
        """Initialize tax service.

        Args:
            db: Database instance
            settings: Ledger settings providing the PPN rate
        """
        self.db = db
        self.settings = settings or LedgerSettings()

    def tax_summary(self, month: MonthLike) -> TaxSummary:
        """Input PPN, output PPN and the net payable for one month.

        Args:
            month: Any date within the month, or "YYYY-MM"

        Returns:
            Tax summary; a negative net payable is refundable or carried forward
        """
        start = month_start(month)
        end = start + relativedelta(months=1, days=-1)
        rate = self.settings.ppn_rate
        reversed_ids = reversed_entry_ids(self.db)

        purchases = [
            invoice
            for invoice in self.db.list_purchase_invoices(start_date=start, end_date=end, import_only=True)
            if invoice.journal_entry_id not in reversed_ids
        ]
        sales = [
            invoice
            for invoice in self.db.list_sales_invoices(start_date=start, end_date=end)
            if invoice.journal_entry_id not in reversed_ids
        ]

        input_records = tuple(
            TaxRecord(
                invoice_date=invoice.invoice_date,
                invoice_number=invoice.invoice_number,
                party_id=invoice.supplier_id,
                taxable_amount=invoice.subtotal,
                ppn_amount=to_money(rate * invoice.subtotal),
            )
            for invoice in purchases
        )
        output_records = tuple(
            TaxRecord(
                invoice_date=invoice.invoice_date,
                invoice_number=invoice.invoice_number,
                party_id=invoice.customer_id,
                taxable_amount=invoice.subtotal,
                ppn_amount=to_money(rate * invoice.subtotal),
            )
            for invoice in sales
        )

        return TaxSummary(
            month=start,
            input_ppn=_ppn(rate, (invoice.subtotal for invoice in purchases)),
            output_ppn=_ppn(rate, (invoice.subtotal for invoice in sales)),
            input_records=input_records,
            output_records=output_records,
        )

    def monthly_summaries(self, start_month: MonthLike, end_month: MonthLike) -> list[TaxSummary]:
        """One summary per month from start_month through end_month inclusive."""
        current = month_start(start_month)
        last = month_start(end_month)
        if current > last:
            raise ValidationError(f"Start month {current:%Y-%m} is after end month {last:%Y-%m}")

        summaries = []
        while current <= last:
            summaries.append(self.tax_summary(current))
            current += relativedelta(months=1)
        return summaries
