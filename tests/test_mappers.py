"""Tests for database mappers."""

import pytest
from datetime import datetime, date, UTC
from decimal import Decimal

from pharmledger.database.models import (
    Account as ORMAccount,
    Batch as ORMBatch,
    JournalEntry as ORMJournalEntry,
    JournalLine as ORMJournalLine,
    Party as ORMParty,
)
from pharmledger.database.mappers import (
    account_to_domain,
    batch_to_domain,
    charge_from_columns,
    journal_entry_to_domain,
    party_to_domain,
    posted_line_to_domain,
)
from pharmledger.domain.entities import (
    Account,
    AccountType,
    FixedCharge,
    NormalBalance,
    PartyType,
    PercentageCharge,
    SourceType,
)


class TestAccountMapper:
    """Tests for Account mapper."""

    def test_account_to_domain(self):
        orm_account = ORMAccount(
            id=1,
            code="1590",
            name="Accumulated Depreciation",
            name_local="Akumulasi Penyusutan",
            account_type="contra",
            account_group="Fixed Assets",
            parent_id=5,
            is_header=False,
            normal_balance="credit",
            is_active=True,
            created_at=datetime.now(UTC),
        )
        account = account_to_domain(orm_account)

        assert isinstance(account, Account)
        assert account.account_type == AccountType.CONTRA
        assert account.normal_balance == NormalBalance.CREDIT
        assert account.parent_id == 5
        assert account.created_at == orm_account.created_at


def test_party_to_domain():
    party = party_to_domain(
        ORMParty(id=3, name="Pharma Global Ltd", party_type="supplier", is_pkp=True, currency="USD")
    )

    assert party.party_type == PartyType.SUPPLIER
    assert party.is_pkp
    assert party.currency == "USD"


class TestChargeMapping:
    def test_from_columns(self):
        assert charge_from_columns("percentage", Decimal("2.5")) == PercentageCharge(Decimal("2.5"))
        assert charge_from_columns("fixed", 500000) == FixedCharge(Decimal("500000"))
        assert charge_from_columns("fixed", None) == FixedCharge(Decimal("0"))

    def test_unknown_flag(self):
        with pytest.raises(ValueError, match="Unknown charge type"):
            charge_from_columns("flat", 1)


def test_batch_to_domain():
    orm_batch = ORMBatch(
        id=7,
        batch_number="B-007",
        import_date=date(2024, 3, 1),
        import_quantity=Decimal("100.000"),
        sold_quantity=Decimal("40.000"),
        currency="USD",
        import_price_usd=Decimal("1000.00"),
        exchange_rate=Decimal("15000.000000"),
        duty_percent=Decimal("5.0000"),
        freight_type="percentage",
        freight_amount=Decimal("2.00"),
        other_type="fixed",
        other_amount=Decimal("125000.00"),
        cost_locked=True,
        final_landed_cost=Decimal("15875000.00"),
    )
    batch = batch_to_domain(orm_batch)

    assert batch.import_price == Decimal("1000")
    assert batch.freight == PercentageCharge(Decimal("2"))
    assert batch.other == FixedCharge(Decimal("125000"))
    assert batch.current_stock == Decimal("60")
    assert batch.cost_locked
    assert [c.kind for c in batch.charge_components()] == ["duty", "freight", "other"]


def test_journal_entry_and_posted_line():
    orm_entry = ORMJournalEntry(
        id=11,
        entry_date=date(2024, 3, 5),
        source_type="purchase_invoice",
        source_id="PI-001",
        description="Purchase invoice PI-001",
    )
    orm_line = ORMJournalLine(
        line_number=1, account_id=4, debit=Decimal("1000000"), credit=Decimal("0"), memo="Inventory"
    )
    orm_entry.lines.append(orm_line)

    entry = journal_entry_to_domain(orm_entry)
    posted = posted_line_to_domain(orm_line, orm_entry)

    assert entry.source_type == SourceType.PURCHASE_INVOICE
    assert entry.lines[0].debit == Decimal("1000000.00")
    assert entry.total_credit == Decimal("0.00")
    assert posted.entry_id == 11
    assert posted.entry_date == date(2024, 3, 5)
    assert posted.description == "Purchase invoice PI-001"
    assert posted.memo == "Inventory"
