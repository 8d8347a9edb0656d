"""CLI error handling helpers."""

import click

from parkledger.domain.errors import DomainError, PersistenceError


def handle_domain_error(
    ctx: click.Context, error: DomainError | PersistenceError | ValueError
) -> None:
    """Render a domain error with its kind and exit with failure."""
    kind = getattr(error, "kind", "ValidationError")
    click.echo(f"Error ({kind}): {error}", err=True)
    ctx.exit(1)
