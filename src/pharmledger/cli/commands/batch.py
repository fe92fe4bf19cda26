"""Inventory batch and landed cost commands."""

from datetime import date

import click
from pharmledger.cli.date_filters import parse_date_or_exit
from pharmledger.cli.error_handling import handle_domain_error
from pharmledger.domain.entities import Charge, PercentageCharge
from pharmledger.domain.landed_cost import BatchService, make_charge
from pharmledger.domain.party import PartyService
from pharmledger.utils.amount_parser import parse_amount
from pharmledger.utils.resolvers import resolve_batch, resolve_party

CHARGE_TYPES = ["percentage", "fixed"]


def _service(ctx) -> BatchService:
    return BatchService(ctx.obj["db"], base_currency=ctx.obj["settings"].base_currency)


def _charge_label(charge: Charge) -> str:
    if isinstance(charge, PercentageCharge):
        return f"{charge.value.normalize():f}%"
    return f"{charge.amount:,.2f} (fixed)"


def _changed_charge(current: Charge, value: str | None, charge_type: str | None) -> Charge | None:
    if not value and charge_type is None:
        return None
    amount = parse_amount(value) if value else current.charge_value
    return make_charge(charge_type or current.charge_type, amount)


def _show_batch(service: BatchService, batch) -> None:
    click.echo(f"Batch {batch.batch_number} (ID: {batch.id})")
    if batch.product_name:
        click.echo(f"  Product: {batch.product_name}")
    click.echo(f"  Import date: {batch.import_date}")
    click.echo(f"  Quantity: {batch.import_quantity} imported, {batch.sold_quantity} sold, {batch.current_stock} in stock")
    rate = batch.exchange_rate if batch.exchange_rate is not None else "-"
    click.echo(f"  Price: {batch.currency} {batch.import_price:,.2f} @ {rate}")
    click.echo(f"  Duty: {batch.duty_percent}%")
    click.echo(f"  Freight: {_charge_label(batch.freight)}")
    click.echo(f"  Other: {_charge_label(batch.other)}")

    try:
        landed = service.landed_cost(batch)
        click.echo(f"  Base price: {landed.base_price:,.2f}")
        for kind, amount in landed.charges:
            click.echo(f"  {kind.capitalize()}: {amount:,.2f}")
    except ValueError as e:
        click.echo(f"  Landed cost cannot be computed: {e}")

    if batch.final_landed_cost is not None:
        click.echo(f"  Final landed cost: {batch.final_landed_cost:,.2f}")
        if batch.unit_landed_cost is not None:
            click.echo(f"  Unit cost: {batch.unit_landed_cost:,.2f}")
    click.echo(f"  Cost locked: {'yes' if batch.cost_locked else 'no'}")


@click.group()
def batch_group():
    """Manage imported inventory batches and their landed cost."""
    pass


@batch_group.command("create")
@click.argument("batch_number")
@click.option("--date", "import_date", help="Import date (default: today)")
@click.option("--quantity", required=True, help="Units imported")
@click.option("--price", required=True, help="Purchase price in the batch currency")
@click.option("--currency", default="USD", show_default=True, help="Purchase currency")
@click.option("--rate", help="Exchange rate to the base currency")
@click.option("--duty", default="0", show_default=True, help="Import duty percent")
@click.option("--freight", default="0", show_default=True, help="Freight charge")
@click.option("--freight-type", type=click.Choice(CHARGE_TYPES), default="fixed", show_default=True)
@click.option("--other", default="0", show_default=True, help="Other import charges")
@click.option("--other-type", type=click.Choice(CHARGE_TYPES), default="fixed", show_default=True)
@click.option("--product", help="Product name")
@click.option("--supplier", help="Supplier name or ID")
@click.pass_context
def create_batch(
    ctx,
    batch_number: str,
    import_date: str | None,
    quantity: str,
    price: str,
    currency: str,
    rate: str | None,
    duty: str,
    freight: str,
    freight_type: str,
    other: str,
    other_type: str,
    product: str | None,
    supplier: str | None,
):
    """Create a batch.

    Examples:
        pharmledger batch create B-001 --quantity 100 --price 1000 --rate 15000 --duty 5 --freight 500000
    """
    service = _service(ctx)
    when = parse_date_or_exit(ctx, import_date, "import date", default=date.today())

    try:
        supplier_id = None
        if supplier:
            supplier_id = resolve_party(PartyService(ctx.obj["db"]), supplier, party_type="supplier").id
        batch = service.create_batch(
            batch_number=batch_number,
            import_date=when,
            import_quantity=parse_amount(quantity),
            import_price=parse_amount(price),
            currency=currency,
            exchange_rate=parse_amount(rate) if rate else None,
            duty_percent=parse_amount(duty),
            freight=make_charge(freight_type, parse_amount(freight)),
            other=make_charge(other_type, parse_amount(other)),
            product_name=product,
            supplier_id=supplier_id,
        )
        click.echo(f"Created batch {batch.batch_number} (ID: {batch.id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@batch_group.command("list")
@click.pass_context
def list_batches(ctx):
    """List all batches."""
    batches = _service(ctx).list_batches()
    if not batches:
        click.echo("No batches found.")
        return

    click.echo("\nBatches:")
    click.echo("-" * 90)
    for batch in batches:
        cost = f"{batch.final_landed_cost:,.2f}" if batch.final_landed_cost is not None else "-"
        lock = "locked" if batch.cost_locked else "open"
        click.echo(
            f"ID: {batch.id:3d} | {batch.batch_number:12s} | {batch.import_date} | "
            f"stock {batch.current_stock} | cost {cost} | {lock}"
        )


@batch_group.command("show")
@click.argument("batch")
@click.pass_context
def show_batch(ctx, batch: str):
    """Show a batch and its landed cost breakdown."""
    service = _service(ctx)
    try:
        found = resolve_batch(service, batch)
    except ValueError as e:
        handle_domain_error(ctx, e)
    _show_batch(service, found)


@batch_group.command("update-costs")
@click.argument("batch")
@click.option("--price", help="Purchase price in the batch currency")
@click.option("--currency", help="Purchase currency")
@click.option("--rate", help="Exchange rate to the base currency")
@click.option("--duty", help="Import duty percent")
@click.option("--freight", help="Freight charge")
@click.option("--freight-type", type=click.Choice(CHARGE_TYPES), help="Freight charge type [default: current type]")
@click.option("--other", help="Other import charges")
@click.option("--other-type", type=click.Choice(CHARGE_TYPES), help="Other charge type [default: current type]")
@click.pass_context
def update_costs(
    ctx,
    batch: str,
    price: str | None,
    currency: str | None,
    rate: str | None,
    duty: str | None,
    freight: str | None,
    freight_type: str | None,
    other: str | None,
    other_type: str | None,
):
    """Change the cost inputs of a batch whose cost is not locked.

    A charge keeps its current type unless --freight-type or --other-type is
    given, and keeps its current value when only the type changes.
    """
    service = _service(ctx)
    try:
        found = resolve_batch(service, batch)
        updated = service.update_costs(
            found.id,
            import_price=parse_amount(price) if price else None,
            currency=currency,
            exchange_rate=parse_amount(rate) if rate else None,
            duty_percent=parse_amount(duty) if duty else None,
            freight=_changed_charge(found.freight, freight, freight_type),
            other=_changed_charge(found.other, other, other_type),
        )
        click.echo(f"Updated cost inputs of batch {updated.batch_number}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@batch_group.command("allocate")
@click.argument("batch")
@click.pass_context
def allocate(ctx, batch: str):
    """Compute and store the landed cost of a batch."""
    service = _service(ctx)
    try:
        found = resolve_batch(service, batch)
        landed = service.allocate(found.id)
        click.echo(f"Allocated landed cost of batch {found.batch_number}: {landed.total:,.2f}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@batch_group.command("lock")
@click.argument("batch")
@click.pass_context
def lock(ctx, batch: str):
    """Lock the landed cost of a batch."""
    service = _service(ctx)
    try:
        found = resolve_batch(service, batch)
        locked = service.lock(found.id)
        click.echo(f"Locked batch {locked.batch_number} at {locked.final_landed_cost:,.2f}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@batch_group.command("set-quantity")
@click.argument("batch")
@click.argument("quantity")
@click.pass_context
def set_quantity(ctx, batch: str, quantity: str):
    """Change the imported quantity of a batch."""
    service = _service(ctx)
    try:
        found = resolve_batch(service, batch)
        updated = service.update_import_quantity(found.id, parse_amount(quantity))
        click.echo(f"Set import quantity of batch {updated.batch_number} to {updated.import_quantity}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@batch_group.command("record-sale")
@click.argument("batch")
@click.argument("quantity")
@click.pass_context
def record_sale(ctx, batch: str, quantity: str):
    """Consume stock from a batch."""
    service = _service(ctx)
    try:
        found = resolve_batch(service, batch)
        updated = service.record_sale(found.id, parse_amount(quantity))
        click.echo(f"Recorded sale of {quantity} from batch {updated.batch_number}; {updated.current_stock} left")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register batch commands with main CLI."""
    cli.add_command(batch_group, name="batch")
