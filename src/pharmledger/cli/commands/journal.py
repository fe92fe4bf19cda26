"""Journal entry commands."""

import click
from pharmledger.cli.date_filters import (
    date_range_options,
    parse_date_or_exit,
    pop_period_flags,
    resolve_cli_date_range,
)
from pharmledger.cli.error_handling import handle_domain_error
from pharmledger.domain.entities import SourceType
from pharmledger.domain.journal import JournalService


@click.group()
def journal_group():
    """View and reverse journal entries."""
    pass


@journal_group.command("list")
@date_range_options
@click.option("--source", type=click.Choice([t.value for t in SourceType]), help="Only entries of this source type")
@click.pass_context
def list_entries(ctx, start_date: str | None, end_date: str | None, source: str | None, **kwargs):
    """List journal entries in posting order."""
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=pop_period_flags(kwargs)
    )
    service = JournalService(ctx.obj["db"], settings=ctx.obj["settings"])

    try:
        entries = service.list_entries(
            start_date=start, end_date=end, source_type=SourceType(source) if source else None
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    if not entries:
        click.echo("No journal entries found.")
        return

    click.echo("\nJournal entries:")
    click.echo("-" * 90)
    for entry in entries:
        reference = entry.source_id or "-"
        description = entry.description or ""
        click.echo(
            f"{entry.id:5d} | {entry.entry_date} | {entry.source_type.value:20s} | {reference:12s} | "
            f"{entry.total_debit:>16,.2f} | {description}"
        )


@journal_group.command("show")
@click.argument("entry_id", type=int)
@click.pass_context
def show_entry(ctx, entry_id: int):
    """Show the lines of a journal entry."""
    db = ctx.obj["db"]
    service = JournalService(db, settings=ctx.obj["settings"])

    try:
        entry = service.require_entry(entry_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Entry {entry.id} | {entry.entry_date} | {entry.source_type.value} {entry.source_id or ''}")
    if entry.description:
        click.echo(f"  {entry.description}")
    if entry.reverses_entry_id is not None:
        click.echo(f"  Reverses entry {entry.reverses_entry_id}")
    click.echo("-" * 80)
    for line in entry.lines:
        account = db.get_account(line.account_id)
        party = db.get_party(line.party_id) if line.party_id is not None else None
        party_label = f" | {party.name}" if party else ""
        click.echo(
            f"{line.line_number:3d} | {account.code:6s} {account.name:28s} | "
            f"{line.debit:>14,.2f} | {line.credit:>14,.2f}{party_label}"
        )
    click.echo("-" * 80)
    click.echo(f"{'Total':42s} | {entry.total_debit:>14,.2f} | {entry.total_credit:>14,.2f}")


@journal_group.command("reverse")
@click.argument("entry_id", type=int)
@click.option("--date", "reversal_date", help="Date of the reversing entry (default: original entry date)")
@click.option("--description", help="Description of the reversing entry")
@click.pass_context
def reverse_entry(ctx, entry_id: int, reversal_date: str | None, description: str | None):
    """Post an entry that cancels ENTRY_ID."""
    when = parse_date_or_exit(ctx, reversal_date, "reversal date")
    service = JournalService(ctx.obj["db"], settings=ctx.obj["settings"])

    try:
        reversal = service.reverse(entry_id, reversal_date=when, description=description)
        click.echo(f"Reversed entry {entry_id} with entry {reversal.id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register journal commands with main CLI."""
    cli.add_command(journal_group, name="journal")
