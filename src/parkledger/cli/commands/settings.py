"""Accounting settings commands."""

import click
from parkledger.cli.error_handling import handle_domain_error
from parkledger.domain.errors import DomainError, PersistenceError
from parkledger.domain.settings import SettingsService


@click.group()
def settings_group():
    """View and change accounting settings."""
    pass


@settings_group.command("list")
@click.pass_context
def list_settings(ctx):
    """List accounting settings."""
    settings = SettingsService(ctx.obj["db"]).list_settings()
    if not settings:
        click.echo("No settings found. Run 'init' to create the defaults.")
        return
    current = None
    for s in settings:
        if s.category != current:
            current = s.category
            click.echo(f"\n[{current}]")
        click.echo(f"  {s.key} = {s.value}")


@settings_group.command("get")
@click.argument("key")
@click.pass_context
def get_setting(ctx, key: str):
    """Show one setting."""
    try:
        setting = SettingsService(ctx.obj["db"]).get_setting(key)
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"{setting.key} = {setting.value} ({setting.data_type.value})")
    if setting.description:
        click.echo(setting.description)


@settings_group.command("set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def set_setting(ctx, key: str, value: str):
    """Change a setting."""
    try:
        setting = SettingsService(ctx.obj["db"]).set(key, value)
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"{setting.key} = {setting.value}")


def register_commands(cli):
    """Register settings commands with main CLI."""
    cli.add_command(settings_group, name="settings")
