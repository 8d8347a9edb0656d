"""Balance and trial balance commands."""

import click
from parkledger.cli.error_handling import handle_domain_error
from parkledger.domain.category import CategoryService
from parkledger.domain.errors import DomainError, PersistenceError
from parkledger.domain.ledger import BalanceLedgerService
from parkledger.utils.amount_parser import parse_amount


def _print_balance(label: str, balance) -> None:
    click.echo(f"\n{label} - {balance.period}")
    click.echo(f"Beginning balance: {balance.beginning_balance:>16,.2f}")
    click.echo(f"Debits:            {balance.debit_total:>16,.2f}")
    click.echo(f"Credits:           {balance.credit_total:>16,.2f}")
    click.echo(f"Ending balance:    {balance.ending_balance:>16,.2f}")


@click.group()
def balance_group():
    """Query account balances."""
    pass


@balance_group.command("show")
@click.argument("code")
@click.argument("period")
@click.pass_context
def show_balance(ctx, code: str, period: str):
    """Show the balance of one category for a period (YYYY-MM)."""
    db = ctx.obj["db"]
    try:
        cat = CategoryService(db).get_category(code)
        balance = BalanceLedgerService(db).get_balance(cat.id, period)
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)
        return
    _print_balance(f"{cat.code} {cat.name}", balance)


@balance_group.command("rollup")
@click.argument("code")
@click.argument("period")
@click.pass_context
def rollup_balance(ctx, code: str, period: str):
    """Show the balance of a category and all its descendants."""
    db = ctx.obj["db"]
    try:
        cat = CategoryService(db).get_category(code)
        balance = BalanceLedgerService(db).rollup(code, period)
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)
        return
    _print_balance(f"{cat.code} {cat.name} (rollup)", balance)


@balance_group.command("trial")
@click.argument("period")
@click.pass_context
def trial_balance(ctx, period: str):
    """Show the trial balance for a period."""
    try:
        trial = BalanceLedgerService(ctx.obj["db"]).trial_balance(period)
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nTrial balance - {trial.period}")
    if not trial.rows:
        click.echo("No activity.")
        return
    click.echo(f"{'Code':<12} {'Name':<36} {'Debits':>14} {'Credits':>14} {'Balance':>14}")
    click.echo("-" * 94)
    for row in trial.rows:
        click.echo(
            f"{row.code:<12} {row.name[:36]:<36} {row.debit_total:>14,.2f} "
            f"{row.credit_total:>14,.2f} {row.ending_balance:>14,.2f}"
        )
    click.echo("-" * 94)
    click.echo(f"{'Total':<49} {trial.total_debits:>14,.2f} {trial.total_credits:>14,.2f}")
    if not trial.is_balanced:
        click.echo("Warning: debits and credits differ", err=True)


@balance_group.command("levels")
@click.argument("period")
@click.pass_context
def levels_balance(ctx, period: str):
    """Show total balances per category level and nature."""
    try:
        levels = BalanceLedgerService(ctx.obj["db"]).balances_by_level(period)
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nBalances by level - {period}")
    click.echo(f"{'Level':>5} {'Nature':<14} {'Categories':>10} {'Balance':>16}")
    for row in levels:
        click.echo(
            f"{row.level:>5} {row.account_nature.value:<14} "
            f"{row.category_count:>10} {row.total_balance:>16,.2f}"
        )


@balance_group.command("set-beginning")
@click.argument("code")
@click.argument("period")
@click.argument("amount")
@click.pass_context
def set_beginning(ctx, code: str, period: str, amount: str):
    """Set the opening balance of a category for a period."""
    db = ctx.obj["db"]
    try:
        value = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)
    try:
        cat = CategoryService(db).get_category(code)
        balance = BalanceLedgerService(db).set_beginning_balance(cat.id, period, value)
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)
        return
    _print_balance(f"{cat.code} {cat.name}", balance)


def register_commands(cli):
    """Register balance commands with main CLI."""
    cli.add_command(balance_group, name="balance")
