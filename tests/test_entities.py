"""Tests for domain entities."""

from datetime import date
from decimal import Decimal

import pytest
from dataclasses import FrozenInstanceError

from pharmledger.domain.entities import (
    Account,
    AccountBalanceRow,
    AccountType,
    AgeingRow,
    BalanceSheet,
    FixedCharge,
    JournalEntry,
    JournalLine,
    LandedCost,
    NormalBalance,
    PercentageCharge,
    SourceType,
    TaxSummary,
)


def test_account_is_frozen():
    account = Account(id=1, code="1110", name="Cash", account_type=AccountType.ASSET, normal_balance=NormalBalance.DEBIT)

    with pytest.raises(FrozenInstanceError):
        account.name = "Petty Cash"


@pytest.mark.parametrize(
    "is_header, is_active, postable",
    [(False, True, True), (True, True, False), (False, False, False)],
)
def test_account_is_postable(is_header, is_active, postable):
    account = Account(
        id=1,
        code="1110",
        name="Cash",
        account_type=AccountType.ASSET,
        normal_balance=NormalBalance.DEBIT,
        is_header=is_header,
        is_active=is_active,
    )
    assert account.is_postable is postable


def test_charges():
    assert PercentageCharge(Decimal("5")).amount_on(Decimal("15000000")) == Decimal("750000")
    assert FixedCharge(Decimal("500000")).amount_on(Decimal("15000000")) == Decimal("500000")
    assert PercentageCharge(Decimal("5")).charge_type == "percentage"
    assert FixedCharge(Decimal("1")).charge_type == "fixed"
    assert PercentageCharge(Decimal("2.125")).charge_value == Decimal("2.125")
    assert FixedCharge(Decimal("750")).charge_value == Decimal("750")


def test_landed_cost_charge_lookup():
    landed = LandedCost(
        base_price=Decimal("100"), charges=(("duty", Decimal("5")),), total=Decimal("105")
    )
    assert landed.charge("duty") == Decimal("5")
    assert landed.charge("freight") == Decimal("0")


def test_journal_entry_totals():
    entry = JournalEntry(
        id=1,
        entry_date=date(2024, 3, 1),
        source_type=SourceType.MANUAL_ENTRY,
        source_id=None,
        lines=(
            JournalLine(account_id=1, debit=Decimal("70.00"), credit=Decimal("0.00")),
            JournalLine(account_id=2, debit=Decimal("30.00"), credit=Decimal("0.00")),
            JournalLine(account_id=3, debit=Decimal("0.00"), credit=Decimal("100.00")),
        ),
    )
    assert entry.total_debit == entry.total_credit == Decimal("100.00")


def test_balance_row_is_debit_positive():
    row = AccountBalanceRow(
        code="4100",
        name="Sales",
        account_type=AccountType.REVENUE,
        normal_balance=NormalBalance.CREDIT,
        total_debit=Decimal("10"),
        total_credit=Decimal("110"),
    )
    assert row.balance == Decimal("-100")


def test_balance_sheet_sides():
    sheet = BalanceSheet(
        as_of=date(2024, 3, 31),
        asset_rows=(),
        contra_asset_rows=(),
        liability_rows=(),
        equity_rows=(),
        assets=Decimal("1000"),
        contra_assets=Decimal("100"),
        liabilities=Decimal("300"),
        equity=Decimal("500"),
        net_income=Decimal("100"),
    )
    assert sheet.net_assets == sheet.liabilities_and_equity == Decimal("900")


def test_tax_summary_net_payable():
    summary = TaxSummary(month=date(2024, 3, 1), input_ppn=Decimal("11000000"), output_ppn=Decimal("5500000"))
    assert summary.net_payable == Decimal("-5500000")


def test_ageing_row_total():
    row = AgeingRow(customer_id=1, customer_name="Apotek Sehat", current=Decimal("1"), days_90_plus=Decimal("2"))
    assert row.total_outstanding == Decimal("3")
