"""Tests for landed cost allocation and batch cost locking."""

from datetime import date
from decimal import Decimal

import pytest

from pharmledger.domain.entities import ChargeComponent, FixedCharge, PercentageCharge
from pharmledger.domain.errors import (
    InsufficientStockError,
    InvalidRateError,
    LockedCostError,
    ValidationError,
)
from pharmledger.database.factories import create_sqlite_database
from pharmledger.domain.landed_cost import BatchService, compute_landed_cost, make_charge


def test_compute_landed_cost_example():
    landed = compute_landed_cost(
        Decimal("1000"),
        "USD",
        Decimal("15000"),
        (
            ChargeComponent("duty", PercentageCharge(Decimal("5"))),
            ChargeComponent("freight", FixedCharge(Decimal("500000"))),
            ChargeComponent("other", FixedCharge(Decimal("0"))),
        ),
    )

    assert landed.base_price == Decimal("15000000.00")
    assert landed.charge("duty") == Decimal("750000.00")
    assert landed.charge("freight") == Decimal("500000.00")
    assert landed.charge("other") == Decimal("0.00")
    assert landed.total == Decimal("16250000.00")


def test_percentage_freight_uses_converted_price():
    landed = compute_landed_cost(
        Decimal("200"),
        "USD",
        Decimal("16000"),
        (ChargeComponent("freight", PercentageCharge(Decimal("2.5"))),),
    )

    assert landed.base_price == Decimal("3200000.00")
    assert landed.charge("freight") == Decimal("80000.00")
    assert landed.total == Decimal("3280000.00")


def test_make_charge():
    assert make_charge("percentage", "10") == PercentageCharge(Decimal("10"))
    assert make_charge("fixed", 500000) == FixedCharge(Decimal("500000.00"))
    with pytest.raises(ValidationError):
        make_charge("flat", 1)
    with pytest.raises(ValidationError):
        make_charge("fixed", -1)


@pytest.fixture
def rival_service(temp_db):
    """BatchService on a second connection to the same database file."""
    other_db = create_sqlite_database(database_path=temp_db.database_path)
    yield BatchService(other_db)
    other_db.disconnect()


@pytest.fixture
def locked_after_read(monkeypatch, batch_service, rival_service):
    """Make the rival lock a batch right after batch_service has read it unlocked."""
    read = batch_service.require_batch

    def read_then_rival_locks(batch_id):
        batch = read(batch_id)
        rival_service.lock(batch_id)
        return batch

    monkeypatch.setattr(batch_service, "require_batch", read_then_rival_locks)


class TestConcurrentLock:
    def test_allocate_loses_to_concurrent_lock(self, batch_service, sample_batch, locked_after_read):
        with pytest.raises(LockedCostError):
            batch_service.allocate(sample_batch.id)

        batch = batch_service.get_batch(sample_batch.id)
        assert batch.cost_locked
        assert batch.final_landed_cost == Decimal("16250000.00")

    def test_cost_edit_loses_to_concurrent_lock(self, batch_service, sample_batch, locked_after_read):
        with pytest.raises(LockedCostError):
            batch_service.update_costs(sample_batch.id, duty_percent=Decimal("10"))

        batch = batch_service.get_batch(sample_batch.id)
        assert batch.cost_locked
        assert batch.duty_percent == Decimal("5")
        assert batch.final_landed_cost == Decimal("16250000.00")


class TestBatchService:
    def test_create_batch(self, sample_batch, sample_supplier):
        assert sample_batch.batch_number == "B-001"
        assert sample_batch.currency == "USD"
        assert sample_batch.supplier_id == sample_supplier.id
        assert not sample_batch.cost_locked
        assert sample_batch.final_landed_cost is None
        assert sample_batch.current_stock == Decimal("100")

    def test_duplicate_batch_number(self, batch_service, sample_batch):
        with pytest.raises(ValidationError, match="already exists"):
            batch_service.create_batch(
                batch_number="B-001",
                import_date=date(2024, 3, 2),
                import_quantity=10,
                import_price=10,
                exchange_rate=15000,
            )

    def test_negative_rate_rejected_on_create(self, batch_service):
        with pytest.raises(InvalidRateError):
            batch_service.create_batch(
                batch_number="B-NEG",
                import_date=date(2024, 3, 2),
                import_quantity=10,
                import_price=10,
                exchange_rate=-1,
            )

    def test_supplier_must_be_a_supplier(self, batch_service, sample_customer):
        with pytest.raises(ValidationError, match="not a supplier"):
            batch_service.create_batch(
                batch_number="B-002",
                import_date=date(2024, 3, 2),
                import_quantity=10,
                import_price=10,
                exchange_rate=15000,
                supplier_id=sample_customer.id,
            )

    def test_allocate_stores_landed_cost(self, batch_service, sample_batch):
        landed = batch_service.allocate(sample_batch.id)

        assert landed.total == Decimal("16250000.00")
        batch = batch_service.require_batch(sample_batch.id)
        assert batch.final_landed_cost == Decimal("16250000.00")
        assert batch.unit_landed_cost == Decimal("162500")
        assert not batch.cost_locked

    def test_zero_rate_fails_allocation(self, batch_service):
        batch = batch_service.create_batch(
            batch_number="B-ZERO",
            import_date=date(2024, 3, 2),
            import_quantity=10,
            import_price=Decimal("1000"),
            currency="USD",
            exchange_rate=0,
        )

        with pytest.raises(InvalidRateError):
            batch_service.allocate(batch.id)
        assert batch_service.require_batch(batch.id).final_landed_cost is None

    def test_base_currency_batch_needs_no_rate(self, batch_service):
        batch = batch_service.create_batch(
            batch_number="B-IDR",
            import_date=date(2024, 3, 2),
            import_quantity=10,
            import_price=Decimal("2000000"),
            currency="IDR",
            duty_percent=Decimal("10"),
        )

        assert batch_service.allocate(batch.id).total == Decimal("2200000.00")

    def test_lock_allocates_when_needed(self, batch_service, sample_batch):
        locked = batch_service.lock(sample_batch.id)

        assert locked.cost_locked
        assert locked.final_landed_cost == Decimal("16250000.00")

    def test_lock_is_idempotent(self, batch_service, sample_batch):
        once = batch_service.lock(sample_batch.id)
        twice = batch_service.lock(sample_batch.id)

        assert once == twice

    def test_round_trip_and_locked_edits_rejected(self, batch_service, sample_batch):
        allocated = batch_service.allocate(sample_batch.id).total
        batch_service.lock(sample_batch.id)

        with pytest.raises(LockedCostError):
            batch_service.update_costs(sample_batch.id, duty_percent=Decimal("10"))
        with pytest.raises(LockedCostError):
            batch_service.allocate(sample_batch.id)

        refetched = batch_service.require_batch(sample_batch.id)
        assert refetched.final_landed_cost == allocated
        assert refetched.duty_percent == Decimal("5")

    def test_update_costs_clears_allocation(self, batch_service, sample_batch):
        batch_service.allocate(sample_batch.id)

        updated = batch_service.update_costs(
            sample_batch.id, exchange_rate=Decimal("16000"), freight=make_charge("percentage", 1)
        )

        assert updated.final_landed_cost is None
        assert updated.exchange_rate == Decimal("16000")
        assert isinstance(updated.freight, PercentageCharge)
        assert batch_service.allocate(sample_batch.id).total == Decimal("16960000.00")

    def test_fractional_percentage_charge_is_stored_exactly(self, batch_service, temp_db):
        batch = batch_service.create_batch(
            batch_number="B-FRAC",
            import_date=date(2024, 3, 2),
            import_quantity=10,
            import_price=Decimal("1000"),
            currency="USD",
            exchange_rate=Decimal("15000"),
            freight=make_charge("percentage", "2.125"),
        )
        temp_db.disconnect()

        stored = batch_service.require_batch(batch.id)
        assert stored.freight == PercentageCharge(Decimal("2.125"))
        assert batch_service.allocate(batch.id).total == Decimal("15318750.00")

    def test_record_sale(self, batch_service, sample_batch):
        batch = batch_service.record_sale(sample_batch.id, Decimal("30"))

        assert batch.sold_quantity == Decimal("30")
        assert batch.current_stock == Decimal("70")

    def test_record_sale_beyond_stock(self, batch_service, sample_batch):
        with pytest.raises(InsufficientStockError) as excinfo:
            batch_service.record_sale(sample_batch.id, Decimal("101"))

        assert excinfo.value.available == Decimal("100")
        assert batch_service.require_batch(sample_batch.id).sold_quantity == Decimal("0")

    def test_reduce_quantity_below_sold_fails_unchanged(self, batch_service, sample_batch):
        batch_service.record_sale(sample_batch.id, Decimal("60"))
        before = batch_service.require_batch(sample_batch.id)

        with pytest.raises(InsufficientStockError) as excinfo:
            batch_service.update_import_quantity(sample_batch.id, Decimal("50"))

        assert excinfo.value.requested == Decimal("50")
        assert excinfo.value.available == Decimal("60")
        assert batch_service.require_batch(sample_batch.id) == before

    def test_reduce_quantity_to_sold_allowed(self, batch_service, sample_batch):
        batch_service.record_sale(sample_batch.id, Decimal("60"))

        batch = batch_service.update_import_quantity(sample_batch.id, Decimal("60"))

        assert batch.import_quantity == Decimal("60")
        assert batch.current_stock == Decimal("0")
