"""Customer and supplier commands."""

import click
from pharmledger.cli.error_handling import handle_domain_error
from pharmledger.domain.party import PartyService


@click.group()
def party_group():
    """Manage customers and suppliers."""
    pass


@party_group.command("create")
@click.argument("name")
@click.option("--type", "party_type", type=click.Choice(["customer", "supplier"]), required=True)
@click.option("--tax-id", help="Tax registration number (NPWP)")
@click.option("--pkp", is_flag=True, help="Party is a VAT-registered business (PKP)")
@click.option("--currency", default="IDR", show_default=True, help="Default trading currency")
@click.pass_context
def create_party(ctx, name: str, party_type: str, tax_id: str | None, pkp: bool, currency: str):
    """Create a customer or supplier.

    Examples:
        pharmledger party create "Apotek Sehat" --type customer
        pharmledger party create "Pharma Global Ltd" --type supplier --pkp --tax-id 01.234.567.8-901.000
    """
    service = PartyService(ctx.obj["db"])

    try:
        party = service.create_party(name=name, party_type=party_type, tax_id=tax_id, is_pkp=pkp, currency=currency)
        click.echo(f"Created {party.party_type.value} '{party.name}' (ID: {party.id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@party_group.command("list")
@click.option("--type", "party_type", type=click.Choice(["customer", "supplier"]), help="Only this party type")
@click.pass_context
def list_parties(ctx, party_type: str | None):
    """List customers and suppliers."""
    service = PartyService(ctx.obj["db"])

    parties = service.list_parties(party_type=party_type)
    if not parties:
        click.echo("No parties found.")
        return

    click.echo("\nParties:")
    click.echo("-" * 70)
    for party in parties:
        pkp = " | PKP" if party.is_pkp else ""
        tax_id = f" | NPWP: {party.tax_id}" if party.tax_id else ""
        click.echo(f"ID: {party.id:3d} | {party.name:25s} | {party.party_type.value:8s}{pkp}{tax_id}")


def register_commands(cli):
    """Register party commands with main CLI."""
    cli.add_command(party_group, name="party")
