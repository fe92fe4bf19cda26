"""Main CLI entry point."""

import logging

import click
from pharmledger.config import load_settings
from pharmledger.database.factories import create_sqlite_database

# Import and register all commands at module level
from pharmledger.cli.commands import (
    account,
    init_accounts,
    party,
    bank,
    batch,
    post,
    journal,
    ledger,
    report,
)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides PHARMLEDGER_DB_PATH environment variable)",
    envvar="PHARMLEDGER_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    envvar="PHARMLEDGER_LOG_LEVEL",
    show_default=True,
    help="Logging verbosity",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str):
    """Pharmledger - double-entry ledger for pharmaceutical trading.

    Post purchases, sales, receipts, payments and imported batches as
    balanced journal entries, and compile ledgers, financial statements,
    PPN summaries and receivables ageing from them.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None:
        try:
            ctx.obj["settings"] = load_settings()
        except ValueError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db


# Register all commands
init_accounts.register_commands(cli)
account.register_commands(cli)
party.register_commands(cli)
bank.register_commands(cli)
batch.register_commands(cli)
post.register_commands(cli)
journal.register_commands(cli)
ledger.register_commands(cli)
report.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
