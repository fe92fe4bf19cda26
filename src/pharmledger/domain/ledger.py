"""Running-balance ledgers replayed from posted journal lines.

Ledgers are never stored. ``build_ledger`` folds lines into running
balances and only depends on its arguments, so a ledger can always be
reproduced from the journal. A ledger for a date range starts from the
opening balance the caller passes in; use the ``opening_balance_for_*``
helpers to carry the balance of earlier entries forward.
"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from pharmledger.database.base import Database
from pharmledger.domain.chart import ChartOfAccountsService
from pharmledger.domain.currency import to_money
from pharmledger.domain.entities import (
    Account,
    LedgerEntry,
    LedgerSummary,
    PostedLine,
    ZERO,
)
from pharmledger.domain.errors import (
    ValidationError,
    NotFoundError,
    party_not_found,
    bank_account_not_found,
    account_not_found,
)


def build_ledger(lines: Iterable[PostedLine], opening_balance: Decimal = ZERO) -> list[LedgerEntry]:
    """Replay lines in posting order into running-balance entries.

    Lines are ordered by entry date, then entry id, then line number. A
    positive balance is a debit balance.
    """
    balance = to_money(opening_balance)
    entries = []
    for line in sorted(lines, key=lambda l: (l.entry_date, l.entry_id, l.line_number)):
        balance += line.debit - line.credit
        entries.append(
            LedgerEntry(
                entry_date=line.entry_date,
                entry_id=line.entry_id,
                source_type=line.source_type,
                source_id=line.source_id,
                debit=line.debit,
                credit=line.credit,
                balance=balance,
                description=line.description,
                memo=line.memo,
            )
        )
    return entries


def ledger_summary(entries: Sequence[LedgerEntry], opening_balance: Decimal = ZERO) -> LedgerSummary:
    """Totals and closing balance of a ledger."""
    opening = to_money(opening_balance)
    total_debit = sum((e.debit for e in entries), ZERO)
    total_credit = sum((e.credit for e in entries), ZERO)
    return LedgerSummary(
        opening_balance=opening,
        total_debit=total_debit,
        total_credit=total_credit,
        closing_balance=opening + total_debit - total_credit,
        entry_count=len(entries),
    )


def _check_range(start_date: Optional[date], end_date: Optional[date]) -> None:
    if start_date is not None and end_date is not None and start_date > end_date:
        raise ValidationError(f"Start date {start_date} is after end date {end_date}")


class LedgerService:
    """Read-only service producing account, party and bank ledgers."""

    def __init__(self, db: Database):
        """Initialize ledger service.

        Args:
            db: Database instance
        """
        self.db = db
        self.chart = ChartOfAccountsService(db)

    def _account_ids(self, account: Account) -> list[int]:
        """The account itself plus, for headers, every descendant."""
        ids = [account.id]
        pending = [account.id] if account.is_header else []
        while pending:
            for child in self.chart.children(pending.pop()):
                ids.append(child.id)
                if child.is_header:
                    pending.append(child.id)
        return ids

    def _sum(self, lines: Iterable[PostedLine]) -> Decimal:
        return to_money(sum((line.debit - line.credit for line in lines), ZERO))

    def account_ledger(
        self,
        code: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        opening_balance: Decimal = ZERO,
    ) -> list[LedgerEntry]:
        """Ledger of an account; a header account covers all its descendants.

        Raises:
            ValidationError: If the code is unknown or the range is inverted
        """
        _check_range(start_date, end_date)
        account = self.chart.resolve(code)
        lines = self.db.list_posted_lines(
            start_date=start_date, end_date=end_date, account_ids=self._account_ids(account)
        )
        return build_ledger(lines, opening_balance)

    def party_ledger(
        self,
        party_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        opening_balance: Decimal = ZERO,
    ) -> list[LedgerEntry]:
        """Subledger of every line carrying a customer or supplier.

        Raises:
            NotFoundError: If the party does not exist
        """
        _check_range(start_date, end_date)
        if self.db.get_party(party_id) is None:
            raise NotFoundError(party_not_found(party_id))
        lines = self.db.list_posted_lines(start_date=start_date, end_date=end_date, party_id=party_id)
        return build_ledger(lines, opening_balance)

    def bank_ledger(
        self,
        bank_account_id: int,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        opening_balance: Decimal = ZERO,
    ) -> list[LedgerEntry]:
        """Ledger of the account a bank account posts to.

        Raises:
            NotFoundError: If the bank account does not exist
        """
        _check_range(start_date, end_date)
        bank_account = self.db.get_bank_account(bank_account_id)
        if bank_account is None:
            raise NotFoundError(bank_account_not_found(bank_account_id))
        lines = self.db.list_posted_lines(
            start_date=start_date, end_date=end_date, account_ids=[bank_account.ledger_account_id]
        )
        return build_ledger(lines, opening_balance)

    def opening_balance_for_account(self, code: str, before_date: date) -> Decimal:
        """Debit-positive balance of an account from lines dated before ``before_date``."""
        account = self.chart.resolve(code)
        lines = self.db.list_posted_lines(before_date=before_date, account_ids=self._account_ids(account))
        return self._sum(lines)

    def opening_balance_for_party(self, party_id: int, before_date: date) -> Decimal:
        """Debit-positive balance of a party from lines dated before ``before_date``."""
        if self.db.get_party(party_id) is None:
            raise NotFoundError(party_not_found(party_id))
        return self._sum(self.db.list_posted_lines(before_date=before_date, party_id=party_id))

    def opening_balance_for_bank(self, bank_account_id: int, before_date: date) -> Decimal:
        bank_account = self.db.get_bank_account(bank_account_id)
        if bank_account is None:
            raise NotFoundError(bank_account_not_found(bank_account_id))
        account = self.db.get_account(bank_account.ledger_account_id)
        if account is None:
            raise NotFoundError(account_not_found(bank_account.ledger_account_id))
        return self.opening_balance_for_account(account.code, before_date)
