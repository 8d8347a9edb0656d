"""Initialize the chart of accounts and accounting settings."""

import click
from parkledger.cli.error_handling import handle_domain_error
from parkledger.domain.category import CategoryService
from parkledger.domain.errors import DomainError, PersistenceError
from parkledger.domain.settings import SettingsService


@click.command("init")
@click.pass_context
def init(ctx):
    """Create the default chart of accounts and settings.

    Safe to run more than once: existing categories and settings are kept.
    """
    db = ctx.obj["db"]
    try:
        created_categories = CategoryService(db).seed()
        created_settings = SettingsService(db).seed()
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)
        return

    if created_categories == 0 and created_settings == 0:
        click.echo("Already initialized. No changes made.")
        return
    click.echo(f"Created {created_categories} categories and {created_settings} settings.")


def register_commands(cli):
    """Register init command with main CLI."""
    cli.add_command(init)
