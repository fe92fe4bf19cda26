"""Landed cost allocation and cost locking for imported inventory batches.

The landed cost of a batch is its purchase price converted to the base
currency plus duty, freight and other import charges. Duty is always a
percentage of the converted price; freight and other charges are either a
percentage or a fixed base-currency amount.

Once a batch's cost is locked, its cost inputs and final landed cost are
immutable. Locking is a guarded write in the database, so two concurrent
callers cannot both allocate a cost to the same batch.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence, Any

from pharmledger.database.base import Database
from pharmledger.domain.currency import BASE_CURRENCY, convert_to_base, to_decimal, to_money
from pharmledger.domain.entities import (
    Batch,
    Charge,
    ChargeComponent,
    FixedCharge,
    LandedCost,
    PartyType,
    PercentageCharge,
    ZERO,
)
from pharmledger.domain.errors import (
    ValidationError,
    InvalidRateError,
    NotFoundError,
    LockedCostError,
    InsufficientStockError,
    batch_not_found,
    party_not_found,
)

logger = logging.getLogger(__name__)


def compute_landed_cost(
    amount,
    currency: Optional[str],
    exchange_rate,
    components: Sequence[ChargeComponent],
    base_currency: str = BASE_CURRENCY,
) -> LandedCost:
    """Compute the landed cost of a purchase.

    Args:
        amount: Purchase price in ``currency``
        currency: Currency of the purchase price
        exchange_rate: Base-currency units per unit of ``currency``
        components: Charges in allocation order
        base_currency: Ledger base currency

    Returns:
        Landed cost breakdown in base currency

    Raises:
        InvalidRateError: If a non-zero foreign price has no positive rate
    """
    base_price = convert_to_base(amount, currency, exchange_rate, base_currency)
    charges = tuple(
        (component.kind, to_money(component.charge.amount_on(base_price)))
        for component in components
    )
    total = base_price + sum((charge for _, charge in charges), ZERO)
    return LandedCost(base_price=base_price, charges=charges, total=to_money(total))


def make_charge(charge_type: str, value: Any) -> Charge:
    """Build a charge from a type flag ("percentage" or "fixed") and a value."""
    amount = to_decimal(value)
    if amount < 0:
        raise ValidationError(f"Charge value cannot be negative (got {amount})")
    if charge_type == "percentage":
        return PercentageCharge(amount)
    if charge_type == "fixed":
        return FixedCharge(to_money(amount))
    raise ValidationError(f"Invalid charge type '{charge_type}' (expected percentage or fixed)")


def _non_negative(value: Any, label: str) -> Decimal:
    amount = to_decimal(value)
    if amount < 0:
        raise ValidationError(f"{label} cannot be negative (got {amount})")
    return amount


class BatchService:
    """Service for inventory batches and their landed cost."""

    def __init__(self, db: Database, base_currency: str = BASE_CURRENCY):
        """Initialize batch service.

        Args:
            db: Database instance
            base_currency: Ledger base currency
        """
        self.db = db
        self.base_currency = base_currency

    def create_batch(
        self,
        batch_number: str,
        import_date: date,
        import_quantity,
        import_price,
        currency: str = "USD",
        exchange_rate=None,
        duty_percent=ZERO,
        freight: Optional[Charge] = None,
        other: Optional[Charge] = None,
        product_name: Optional[str] = None,
        supplier_id: Optional[int] = None,
    ) -> Batch:
        """Create an unlocked batch.

        Args:
            batch_number: Unique batch number
            import_date: Date the batch was imported
            import_quantity: Units received
            import_price: Purchase price in ``currency``
            currency: Purchase currency
            exchange_rate: Base-currency units per unit of ``currency``
            duty_percent: Import duty as a percentage of the converted price
            freight: Freight charge (defaults to a zero fixed charge)
            other: Other import charges (defaults to a zero fixed charge)
            product_name: Product description
            supplier_id: Supplier the batch is bought from

        Returns:
            Created batch

        Raises:
            ValidationError: If a value is negative, the number is taken, or
                the supplier is unknown
        """
        batch_number = (batch_number or "").strip()
        if not batch_number:
            raise ValidationError("Batch number is required")
        for existing in self.db.list_batches():
            if existing.batch_number == batch_number:
                raise ValidationError(f"Batch '{batch_number}' already exists")

        quantity = _non_negative(import_quantity, "Import quantity")
        price = _non_negative(import_price, "Import price")
        duty = _non_negative(duty_percent, "Duty percent")
        rate = None
        if exchange_rate is not None:
            rate = to_decimal(exchange_rate)
            if rate < 0:
                raise InvalidRateError(f"Exchange rate cannot be negative (got {rate})")

        freight = freight if freight is not None else FixedCharge(ZERO)
        other = other if other is not None else FixedCharge(ZERO)
        if freight.charge_value < 0 or other.charge_value < 0:
            raise ValidationError("Charge values cannot be negative")

        if supplier_id is not None:
            supplier = self.db.get_party(supplier_id)
            if supplier is None:
                raise ValidationError(party_not_found(supplier_id))
            if supplier.party_type != PartyType.SUPPLIER:
                raise ValidationError(f"Party {supplier_id} is not a supplier")

        batch_id = self.db.create_batch(
            batch_number=batch_number,
            import_date=import_date,
            import_quantity=quantity,
            import_price=price,
            currency=(currency or self.base_currency).upper(),
            exchange_rate=rate,
            duty_percent=duty,
            freight_type=freight.charge_type,
            freight_amount=freight.charge_value,
            other_type=other.charge_type,
            other_amount=other.charge_value,
            product_name=product_name,
            supplier_id=supplier_id,
        )
        logger.info("Created batch %s (id=%s)", batch_number, batch_id)
        return self.db.get_batch(batch_id)

    def get_batch(self, batch_id: int) -> Optional[Batch]:
        """Get batch by ID."""
        return self.db.get_batch(batch_id)

    def require_batch(self, batch_id: int) -> Batch:
        """Get batch by ID.

        Raises:
            NotFoundError: If the batch does not exist
        """
        batch = self.db.get_batch(batch_id)
        if batch is None:
            raise NotFoundError(batch_not_found(batch_id))
        return batch

    def list_batches(self) -> list[Batch]:
        """List batches by import date."""
        return self.db.list_batches()

    def landed_cost(self, batch: Batch) -> LandedCost:
        """Compute the landed cost breakdown of a batch without storing it."""
        return compute_landed_cost(
            batch.import_price,
            batch.currency,
            batch.exchange_rate,
            batch.charge_components(),
            self.base_currency,
        )

    def update_costs(
        self,
        batch_id: int,
        import_price=None,
        currency: Optional[str] = None,
        exchange_rate=None,
        duty_percent=None,
        freight: Optional[Charge] = None,
        other: Optional[Charge] = None,
    ) -> Batch:
        """Change cost inputs of an unlocked batch.

        Any previously allocated landed cost is cleared, since it no longer
        matches the inputs.

        Raises:
            LockedCostError: If the batch cost is locked
        """
        batch = self.require_batch(batch_id)
        if batch.cost_locked:
            logger.warning("Refused cost edit on locked batch %s", batch.batch_number)
            raise LockedCostError(batch_id)

        fields: dict[str, Any] = {"final_landed_cost": None}
        if import_price is not None:
            fields["import_price_usd"] = _non_negative(import_price, "Import price")
        if currency is not None:
            fields["currency"] = currency.upper()
        if exchange_rate is not None:
            rate = to_decimal(exchange_rate)
            if rate < 0:
                raise InvalidRateError(f"Exchange rate cannot be negative (got {rate})")
            fields["exchange_rate"] = rate
        if duty_percent is not None:
            fields["duty_percent"] = _non_negative(duty_percent, "Duty percent")
        if freight is not None:
            fields["freight_type"], fields["freight_amount"] = freight.charge_type, freight.charge_value
        if other is not None:
            fields["other_type"], fields["other_amount"] = other.charge_type, other.charge_value

        if not self.db.update_unlocked_batch_costs(batch_id, fields):
            logger.warning("Batch %s was locked before its cost edit was written", batch.batch_number)
            raise LockedCostError(batch_id)
        return self.db.get_batch(batch_id)

    def allocate(self, batch_id: int) -> LandedCost:
        """Compute and store the landed cost of an unlocked batch.

        Returns:
            Landed cost breakdown

        Raises:
            InvalidRateError: If a foreign-currency batch has no positive rate
            LockedCostError: If the batch cost is already locked
        """
        batch = self.require_batch(batch_id)
        if batch.cost_locked:
            logger.warning("Refused allocation on locked batch %s", batch.batch_number)
            raise LockedCostError(batch_id, f"Landed cost of batch {batch_id} is locked and cannot be reallocated")

        landed = self.landed_cost(batch)
        if not self.db.update_unlocked_batch_costs(batch_id, {"final_landed_cost": landed.total}):
            logger.warning("Batch %s was locked concurrently during allocation", batch.batch_number)
            raise LockedCostError(batch_id)

        logger.info("Allocated landed cost %s to batch %s", landed.total, batch.batch_number)
        return landed

    def lock(self, batch_id: int) -> Batch:
        """Freeze the landed cost of a batch.

        Allocates first if no cost has been allocated yet. Locking an already
        locked batch returns it unchanged.
        """
        batch = self.require_batch(batch_id)
        if batch.cost_locked:
            return batch

        if batch.final_landed_cost is None:
            try:
                self.allocate(batch_id)
            except LockedCostError:
                return self.require_batch(batch_id)

        if self.db.lock_batch_cost(batch_id):
            logger.info("Locked landed cost of batch %s", batch.batch_number)
        return self.require_batch(batch_id)

    def update_import_quantity(self, batch_id: int, new_quantity) -> Batch:
        """Change the quantity received for a batch.

        Raises:
            InsufficientStockError: If the new quantity is below what has
                already been sold; the batch is left unchanged
        """
        quantity = _non_negative(new_quantity, "Import quantity")
        batch = self.require_batch(batch_id)
        if quantity < batch.sold_quantity or not self.db.set_batch_import_quantity(batch_id, quantity):
            sold = self.require_batch(batch_id).sold_quantity
            logger.warning(
                "Refused to set batch %s quantity to %s below sold quantity %s",
                batch.batch_number, quantity, sold,
            )
            raise InsufficientStockError(
                batch_id,
                requested=quantity,
                available=sold,
                message=(
                    f"Cannot set import quantity of batch {batch.batch_number} to {quantity}: "
                    f"{sold} units have already been sold"
                ),
            )
        logger.info("Set import quantity of batch %s to %s", batch.batch_number, quantity)
        return self.require_batch(batch_id)

    def record_sale(self, batch_id: int, quantity) -> Batch:
        """Consume stock from a batch.

        Raises:
            InsufficientStockError: If the batch does not have enough stock
        """
        amount = to_decimal(quantity)
        if amount <= 0:
            raise ValidationError(f"Sale quantity must be positive (got {amount})")
        batch = self.require_batch(batch_id)
        if not self.db.add_batch_sold_quantity(batch_id, amount):
            available = self.require_batch(batch_id).current_stock
            logger.warning("Refused sale of %s from batch %s with %s in stock", amount, batch.batch_number, available)
            raise InsufficientStockError(
                batch_id,
                requested=amount,
                available=available,
                message=f"Batch {batch.batch_number} has only {available} units in stock (requested {amount})",
            )
        return self.require_batch(batch_id)
