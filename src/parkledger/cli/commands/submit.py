"""Submit and list raw transactions from upstream park modules."""

import click
from parkledger.cli.error_handling import handle_domain_error
from parkledger.domain.category import CategoryService
from parkledger.domain.classifier import TransactionClassifier
from parkledger.domain.entities import RawTransaction, SourceTransactionFilter, TransactionType
from parkledger.domain.errors import DomainError, PersistenceError
from parkledger.utils.amount_parser import parse_amount
from parkledger.utils.date_parser import parse_date


@click.command("submit")
@click.option("--module", "source_module", required=True, help="Source module (e.g., 'concessions')")
@click.option("--source-id", required=True, help="Transaction ID within the source module")
@click.option("--type", "transaction_type", required=True, type=click.Choice([t.value for t in TransactionType]), help="Transaction type")
@click.option("--amount", required=True, help="Transaction amount (e.g., 1500.00)")
@click.option("--date", "date_str", default="today", help="Transaction date (YYYY-MM-DD or relative like 'today')")
@click.option("--description", required=True, help="Transaction description")
@click.pass_context
def submit(ctx, source_module: str, source_id: str, transaction_type: str, amount: str, date_str: str, description: str):
    """Classify a transaction into a journal entry.

    Submitting the same module and source ID twice returns the first entry.

    Example:
        parkledger submit --module concessions --source-id 42 --type income --amount 1500 --description "Monthly fee"
    """
    try:
        txn_date = parse_date(date_str)
        txn_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    classifier = TransactionClassifier(ctx.obj["db"])
    try:
        entry = classifier.submit_transaction(
            RawTransaction(
                amount=txn_amount,
                date=txn_date,
                transaction_type=TransactionType(transaction_type),
                source_module=source_module,
                source_id=source_id,
                description=description,
            )
        )
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Entry {entry.entry_number} (ID: {entry.id}, status: {entry.status.value})")


@click.command("transactions")
@click.option("--search", help="Text in the description or source ID")
@click.option("--category", "category_code", help="Resolved category code")
@click.option("--type", "transaction_type", type=click.Choice([t.value for t in TransactionType]), help="Transaction type")
@click.option("--module", "source_module", help="Source module")
@click.option("--start-date", help="Earliest transaction date (YYYY-MM-DD or relative)")
@click.option("--end-date", help="Latest transaction date (YYYY-MM-DD or relative)")
@click.option("--page", default=1, type=int, help="Page number (default: 1)")
@click.option("--limit", "page_size", default=10, type=int, help="Transactions per page (default: 10)")
@click.pass_context
def list_transactions(ctx, search: str | None, category_code: str | None, transaction_type: str | None, source_module: str | None, start_date: str | None, end_date: str | None, page: int, page_size: int):
    """List submitted transactions, newest first.

    Examples:
        parkledger transactions --module concessions --start-date 2024-03-01
        parkledger transactions --search boletos --page 2
    """
    db = ctx.obj["db"]
    try:
        start = parse_date(start_date) if start_date else None
        end = parse_date(end_date) if end_date else None
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        category_id = CategoryService(db).get_category(category_code).id if category_code else None
        result = TransactionClassifier(db).list_transactions(
            SourceTransactionFilter(
                search=search,
                category_id=category_id,
                transaction_type=TransactionType(transaction_type) if transaction_type else None,
                source_module=source_module,
                start_date=start,
                end_date=end,
            ),
            page=page,
            page_size=page_size,
        )
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)
        return

    if not result.transactions:
        click.echo("No transactions found.")
        return
    click.echo(f"{'Date':<10} {'Module':<14} {'Source ID':<16} {'Type':<12} {'Amount':>14} {'Entry':>6}  Description")
    for t in result.transactions:
        entry = str(t.entry_id) if t.entry_id is not None else "-"
        click.echo(
            f"{t.date.isoformat():<10} {t.source_module[:14]:<14} {t.source_id[:16]:<16} "
            f"{t.transaction_type.value:<12} {t.amount:>14,.2f} {entry:>6}  {t.description}"
        )
    click.echo(f"\nPage {result.page} of {result.total_pages} ({result.total} transactions)")


def register_commands(cli):
    """Register submit and transaction listing commands with main CLI."""
    cli.add_command(submit)
    cli.add_command(list_transactions)
