"""Trial balance, profit and loss, and balance sheet compilation.

Every report is recomputed from posted journal lines. Each one checks its
own reconciliation rule and raises ``IntegrityMismatchError`` rather than
returning figures that do not add up.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from pharmledger.database.base import Database
from pharmledger.domain.currency import to_money
from pharmledger.domain.entities import (
    Account,
    AccountBalanceRow,
    AccountType,
    BalanceSheet,
    PostedLine,
    ProfitAndLoss,
    TrialBalance,
    ZERO,
)
from pharmledger.domain.errors import IntegrityMismatchError, NotFoundError, ValidationError, account_not_found

logger = logging.getLogger(__name__)

CONTRA_ASSET_GROUP = "Assets"


def statement_amount(row: AccountBalanceRow) -> Decimal:
    """Amount a row contributes to its statement section.

    Assets are summed as signed debit-positive balances; every other section
    sums absolute balances.
    """
    if row.account_type == AccountType.ASSET:
        return row.balance
    return abs(row.balance)


def compile_trial_balance(
    lines: Iterable[PostedLine],
    accounts: Iterable[Account],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> TrialBalance:
    """Aggregate lines into one row per account with activity.

    Args:
        lines: Posted lines in the report range
        accounts: Chart of accounts
        start_date: Start of the range, for labelling
        end_date: End of the range, for labelling

    Returns:
        Trial balance with rows sorted by account code

    Raises:
        IntegrityMismatchError: If total debits differ from total credits
    """
    by_id = {account.id: account for account in accounts}
    totals: dict[int, list[Decimal]] = {}
    for line in lines:
        if line.account_id not in by_id:
            raise NotFoundError(account_not_found(line.account_id))
        debit_credit = totals.setdefault(line.account_id, [ZERO, ZERO])
        debit_credit[0] += line.debit
        debit_credit[1] += line.credit

    rows = []
    for account_id, (debit, credit) in totals.items():
        account = by_id[account_id]
        rows.append(
            AccountBalanceRow(
                code=account.code,
                name=account.name,
                account_type=account.account_type,
                normal_balance=account.normal_balance,
                total_debit=to_money(debit),
                total_credit=to_money(credit),
                account_group=account.account_group,
            )
        )
    rows.sort(key=lambda row: row.code)

    total_debit = to_money(sum((row.total_debit for row in rows), ZERO))
    total_credit = to_money(sum((row.total_credit for row in rows), ZERO))
    if total_debit != total_credit:
        logger.warning("Trial balance does not reconcile: debits %s, credits %s", total_debit, total_credit)
        raise IntegrityMismatchError(
            "Trial balance", total_debit, total_credit, "total debits do not equal total credits"
        )

    return TrialBalance(
        start_date=start_date,
        end_date=end_date,
        rows=tuple(rows),
        total_debit=total_debit,
        total_credit=total_credit,
    )


def _rows_of(trial_balance: TrialBalance, account_type: AccountType) -> tuple[AccountBalanceRow, ...]:
    return tuple(row for row in trial_balance.rows if row.account_type == account_type)


def _total(rows: Iterable[AccountBalanceRow]) -> Decimal:
    return to_money(sum((statement_amount(row) for row in rows), ZERO))


def profit_and_loss_from(trial_balance: TrialBalance) -> ProfitAndLoss:
    """Revenue and expense totals of a trial balance."""
    revenue_rows = _rows_of(trial_balance, AccountType.REVENUE)
    expense_rows = _rows_of(trial_balance, AccountType.EXPENSE)
    return ProfitAndLoss(
        start_date=trial_balance.start_date,
        end_date=trial_balance.end_date,
        revenue_rows=revenue_rows,
        expense_rows=expense_rows,
        revenue=_total(revenue_rows),
        expense=_total(expense_rows),
    )


def balance_sheet_from(trial_balance: TrialBalance, as_of: date) -> BalanceSheet:
    """Balance sheet built from a single trial balance snapshot.

    Raises:
        IntegrityMismatchError: If assets less contra assets differ from
            liabilities plus equity plus net income
    """
    contra_rows = tuple(
        row
        for row in _rows_of(trial_balance, AccountType.CONTRA)
        if row.account_group and CONTRA_ASSET_GROUP.lower() in row.account_group.lower()
    )
    asset_rows = _rows_of(trial_balance, AccountType.ASSET)
    liability_rows = _rows_of(trial_balance, AccountType.LIABILITY)
    equity_rows = _rows_of(trial_balance, AccountType.EQUITY)
    net_income = profit_and_loss_from(trial_balance).net_income

    sheet = BalanceSheet(
        as_of=as_of,
        asset_rows=asset_rows,
        contra_asset_rows=contra_rows,
        liability_rows=liability_rows,
        equity_rows=equity_rows,
        assets=_total(asset_rows),
        contra_assets=_total(contra_rows),
        liabilities=_total(liability_rows),
        equity=_total(equity_rows),
        net_income=net_income,
    )
    if sheet.net_assets != sheet.liabilities_and_equity:
        logger.warning(
            "Balance sheet as of %s does not reconcile: %s != %s",
            as_of, sheet.net_assets, sheet.liabilities_and_equity,
        )
        raise IntegrityMismatchError(
            "Balance sheet",
            sheet.net_assets,
            sheet.liabilities_and_equity,
            "assets less contra assets do not equal liabilities plus equity plus net income",
        )
    return sheet


class ReportService:
    """Service compiling financial statements from the journal."""

    def __init__(self, db: Database):
        """Initialize report service.

        Args:
            db: Database instance
        """
        self.db = db

    def trial_balance(self, start_date: Optional[date] = None, end_date: Optional[date] = None) -> TrialBalance:
        """Debit and credit totals per account over an inclusive date range.

        An empty range yields no rows and zero totals.
        """
        if start_date is not None and end_date is not None and start_date > end_date:
            raise ValidationError(f"Start date {start_date} is after end date {end_date}")
        lines = self.db.list_posted_lines(start_date=start_date, end_date=end_date)
        return compile_trial_balance(lines, self.db.list_accounts(), start_date, end_date)

    def profit_and_loss(self, start_date: Optional[date] = None, end_date: Optional[date] = None) -> ProfitAndLoss:
        """Revenue, expense and net income over an inclusive date range."""
        return profit_and_loss_from(self.trial_balance(start_date, end_date))

    def balance_sheet(self, as_of: date) -> BalanceSheet:
        """Financial position from inception through ``as_of``.

        Net income is recomputed from the same snapshot rather than read
        from a closing entry.
        """
        return balance_sheet_from(self.trial_balance(None, as_of), as_of)
