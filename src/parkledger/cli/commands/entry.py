"""Journal entry commands."""

import click
from parkledger.cli.error_handling import handle_domain_error
from parkledger.domain.category import CategoryService
from parkledger.domain.entities import ZERO, EntryLine, EntryStatus, JournalEntry
from parkledger.domain.errors import DomainError, PersistenceError, ValidationError
from parkledger.domain.journal import JournalService
from parkledger.utils.amount_parser import parse_amount
from parkledger.utils.date_parser import parse_date


def parse_line(categories: CategoryService, line_text: str) -> EntryLine:
    """Parse a ``CODE:DEBIT:CREDIT`` line option; an empty side is zero."""
    parts = line_text.rsplit(":", 2)
    if len(parts) != 3 or not parts[0]:
        raise ValidationError(f"Invalid line '{line_text}': expected CODE:DEBIT:CREDIT")
    code, debit, credit = parts
    try:
        debit_amount = parse_amount(debit) if debit.strip() else ZERO
        credit_amount = parse_amount(credit) if credit.strip() else ZERO
    except ValueError as e:
        raise ValidationError(f"Invalid line '{line_text}': {e}") from e
    return EntryLine(
        category_id=categories.get_category(code).id,
        debit=debit_amount,
        credit=credit_amount,
    )


def print_entry(journal: JournalService, categories: CategoryService, entry: JournalEntry) -> None:
    """Print an entry header and its lines."""
    click.echo(f"\nEntry: {entry.entry_number} (ID: {entry.id})")
    click.echo(f"Date: {entry.date}")
    click.echo(f"Description: {entry.description}")
    if entry.reference:
        click.echo(f"Reference: {entry.reference}")
    click.echo(f"Status: {entry.status.value}")
    click.echo(f"Total: {entry.total_amount:,.2f}")
    click.echo(f"Balanced: {'Yes' if entry.is_balanced else 'No'}")
    click.echo("")
    click.echo(f"{'Category':<12} {'Name':<36} {'Debit':>14} {'Credit':>14}")
    click.echo("-" * 79)
    for line in journal.get_lines(entry.id):
        cat = categories.get_category_by_id(line.category_id)
        debit = f"{line.debit_amount:,.2f}" if line.debit_amount else ""
        credit = f"{line.credit_amount:,.2f}" if line.credit_amount else ""
        click.echo(f"{cat.code:<12} {cat.name[:36]:<36} {debit:>14} {credit:>14}")


@click.group()
def entry_group():
    """Manage journal entries."""
    pass


@entry_group.command("create")
@click.option("--date", "date_str", default="today", help="Entry date (YYYY-MM-DD or relative like 'today')")
@click.option("--description", required=True, help="Entry description")
@click.option("--reference", help="External reference")
@click.option("--line", "lines", multiple=True, required=True, help="Line as CODE:DEBIT:CREDIT (repeatable)")
@click.option("--post", "post_now", is_flag=True, help="Post the entry right after creating it")
@click.pass_context
def create_entry(ctx, date_str: str, description: str, reference: str | None, lines: tuple[str, ...], post_now: bool):
    """Create a draft journal entry.

    Examples:
        parkledger entry create --description "Cash sale" --line A-1-1:500:0 --line D-1-1:0:500
        parkledger entry create --date 2024-03-31 --description "Rent" --line F-1-1:1200: --line A-1-1::1200 --post
    """
    db = ctx.obj["db"]
    journal = JournalService(db)
    categories = CategoryService(db)

    try:
        entry_date = parse_date(date_str)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        entry_lines = [parse_line(categories, line_text) for line_text in lines]
        entry = journal.create_draft(entry_date, description, entry_lines, reference=reference)
        if post_now:
            entry = journal.post(entry.id)
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Created entry {entry.entry_number} (ID: {entry.id}, status: {entry.status.value})")


@entry_group.command("post")
@click.argument("entry_id", type=int)
@click.pass_context
def post_entry(ctx, entry_id: int):
    """Post a draft entry to the ledger."""
    journal = JournalService(ctx.obj["db"])
    try:
        entry = journal.post(entry_id)
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Posted entry {entry.entry_number}")


@entry_group.command("void")
@click.argument("entry_id", type=int)
@click.pass_context
def void_entry(ctx, entry_id: int):
    """Void a draft entry."""
    journal = JournalService(ctx.obj["db"])
    try:
        entry = journal.void(entry_id)
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Voided entry {entry.entry_number}")


@entry_group.command("reverse")
@click.argument("entry_id", type=int)
@click.option("--date", "date_str", help="Date of the reversing entry (defaults to the original date)")
@click.pass_context
def reverse_entry(ctx, entry_id: int, date_str: str | None):
    """Post a reversing entry for a posted entry."""
    journal = JournalService(ctx.obj["db"])
    reversal_date = None
    if date_str:
        try:
            reversal_date = parse_date(date_str)
        except ValueError as e:
            click.echo(f"Error: Invalid date format: {e}", err=True)
            ctx.exit(1)
    try:
        reversal = journal.reverse(entry_id, reversal_date)
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Reversed entry {entry_id} with {reversal.entry_number} (ID: {reversal.id})")


@entry_group.command("show")
@click.argument("entry")
@click.pass_context
def show_entry(ctx, entry: str):
    """Show an entry by ID or entry number."""
    db = ctx.obj["db"]
    journal = JournalService(db)
    try:
        if entry.isdigit():
            found = journal.get_entry(int(entry))
        else:
            found = journal.get_entry_by_number(entry)
        print_entry(journal, CategoryService(db), found)
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)


@entry_group.command("list")
@click.option("--status", type=click.Choice([s.value for s in EntryStatus]), help="Only entries with this status")
@click.option("--period", help="Only entries in this period (YYYY-MM)")
@click.pass_context
def list_entries(ctx, status: str | None, period: str | None):
    """List journal entries."""
    journal = JournalService(ctx.obj["db"])
    try:
        entries = journal.list_entries(
            status=EntryStatus(status) if status else None, period=period
        )
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)
        return

    if not entries:
        click.echo("No entries found.")
        return
    click.echo(f"{'ID':>5} {'Number':<20} {'Date':<10} {'Status':<7} {'Total':>14}  Description")
    for e in entries:
        click.echo(
            f"{e.id:>5} {e.entry_number:<20} {e.date.isoformat():<10} "
            f"{e.status.value:<7} {e.total_amount:>14,.2f}  {e.description}"
        )


def register_commands(cli):
    """Register entry commands with main CLI."""
    cli.add_command(entry_group, name="entry")
