"""Shared pytest fixtures for pharmledger tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest

from pharmledger.config import LedgerSettings
from pharmledger.database.factories import create_sqlite_database
from pharmledger.domain.bank import BankAccountService
from pharmledger.domain.chart import ChartOfAccountsService
from pharmledger.domain.journal import JournalService
from pharmledger.domain.landed_cost import BatchService, make_charge
from pharmledger.domain.ledger import LedgerService
from pharmledger.domain.party import PartyService
from pharmledger.domain.reports import ReportService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def settings():
    return LedgerSettings()


@pytest.fixture
def chart_service(temp_db):
    """Create a ChartOfAccountsService with a temporary database."""
    return ChartOfAccountsService(temp_db)


@pytest.fixture
def party_service(temp_db):
    return PartyService(temp_db)


@pytest.fixture
def bank_service(temp_db):
    return BankAccountService(temp_db)


@pytest.fixture
def batch_service(temp_db):
    return BatchService(temp_db)


@pytest.fixture
def journal_service(temp_db, settings):
    return JournalService(temp_db, settings=settings)


@pytest.fixture
def ledger_service(temp_db):
    return LedgerService(temp_db)


@pytest.fixture
def report_service(temp_db):
    return ReportService(temp_db)


@pytest.fixture
def seeded_chart(chart_service):
    """Create the default chart of accounts and return accounts by code."""
    from pharmledger.cli.commands.init_accounts import seed_chart

    created, errors = seed_chart(chart_service)
    assert errors == []
    return {account.code: account for account in chart_service.list_accounts()}


@pytest.fixture
def sample_supplier(party_service):
    """Create a non-PKP supplier."""
    return party_service.create_party(name="Pharma Global Ltd", party_type="supplier")


@pytest.fixture
def pkp_supplier(party_service):
    return party_service.create_party(
        name="Kimia Farma Distribusi", party_type="supplier", tax_id="01.234.567.8-901.000", is_pkp=True
    )


@pytest.fixture
def sample_customer(party_service):
    return party_service.create_party(name="Apotek Sehat", party_type="customer")


@pytest.fixture
def sample_bank(bank_service, seeded_chart):
    """Create a bank account posting to the default bank ledger account."""
    return bank_service.create_bank_account(name="BCA Operating", bank_name="BCA", ledger_account_code="1120")


@pytest.fixture
def sample_batch(batch_service, sample_supplier):
    """Batch of $1,000 at 15,000 with 5% duty and 500,000 fixed freight."""
    return batch_service.create_batch(
        batch_number="B-001",
        import_date=date(2024, 3, 1),
        import_quantity=Decimal("100"),
        import_price=Decimal("1000"),
        currency="USD",
        exchange_rate=Decimal("15000"),
        duty_percent=Decimal("5"),
        freight=make_charge("fixed", Decimal("500000")),
        product_name="Paracetamol 500mg",
        supplier_id=sample_supplier.id,
    )


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
