"""Main CLI entry point."""

import logging

import click
from parkledger.database.factories import create_sqlite_database

# Import and register all commands at module level
from parkledger.cli.commands import (
    init,
    category,
    entry,
    submit,
    balance,
    asset,
    settings,
)


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    help="Path to database file (overrides PARKLEDGER_DB_PATH environment variable)",
    envvar="PARKLEDGER_DB_PATH",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    envvar="PARKLEDGER_LOG_LEVEL",
    help="Logging level (default: WARNING)",
)
@click.pass_context
def cli(ctx, db_path: str | None, log_level: str):
    """Parkledger - Park accounting ledger.

    Keep a hierarchical chart of accounts, post double-entry journal entries,
    classify transactions from park modules and depreciate fixed assets.
    """
    ctx.ensure_object(dict)
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize database connection only when actually running a command
    # (not when showing help)
    if ctx.invoked_subcommand is not None and "db" not in ctx.obj:
        db = create_sqlite_database(database_path=db_path)
        db.connect()
        db.initialize_schema()
        ctx.obj["db"] = db


# Register all commands
init.register_commands(cli)
category.register_commands(cli)
entry.register_commands(cli)
submit.register_commands(cli)
balance.register_commands(cli)
asset.register_commands(cli)
settings.register_commands(cli)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
