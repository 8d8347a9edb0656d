"""Category management commands."""

import click
from parkledger.cli.error_handling import handle_domain_error
from parkledger.domain.category import CategoryService
from parkledger.domain.entities import AccountNature, CategoryFilter, CategoryTreeNode
from parkledger.domain.errors import DomainError, PersistenceError


def print_category_tree(nodes: list[CategoryTreeNode], indent: int = 0) -> None:
    """Recursively print category tree."""
    for node in nodes:
        cat = node.category
        prefix = "  " * indent
        inactive = " [inactive]" if not cat.is_active else ""
        click.echo(f"{prefix}{cat.code} {cat.name}{inactive}")
        print_category_tree(node.children, indent + 1)


@click.group()
def category_group():
    """Manage the chart of accounts."""
    pass


@category_group.command("list")
@click.option("--level", type=int, help="Only categories at this level")
@click.option("--parent", help="Only direct children of this category code")
@click.option("--search", help="Match name or code")
@click.option("--all", "include_inactive", is_flag=True, help="Include inactive categories")
@click.option("--flat", is_flag=True, help="Print a flat list instead of a tree")
@click.pass_context
def list_categories(ctx, level: int | None, parent: str | None, search: str | None, include_inactive: bool, flat: bool):
    """List categories as a tree, or flat when filtered."""
    service = CategoryService(ctx.obj["db"])

    try:
        if flat or level is not None or parent or search:
            categories = service.list_categories(
                CategoryFilter(
                    level=level,
                    parent_code=parent,
                    search=search,
                    include_inactive=include_inactive,
                )
            )
            for cat in categories:
                click.echo(f"{cat.code:<12} {cat.name:<40} {cat.account_nature.value}")
            if not categories:
                click.echo("No categories found.")
            return
        tree = service.get_category_tree(include_inactive=include_inactive)
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)
        return

    if not tree:
        click.echo("No categories found. Run 'init' to create the default chart of accounts.")
        return
    click.echo("\nCategories:")
    print_category_tree(tree)


@category_group.command("show")
@click.argument("code")
@click.pass_context
def show_category(ctx, code: str):
    """Show a category and its path."""
    service = CategoryService(ctx.obj["db"])
    try:
        cat = service.get_category(code)
        path = service.path(code)
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nCategory: {cat.code} {cat.name}")
    click.echo(f"Level: {cat.level}")
    click.echo(f"Nature: {cat.account_nature.value}")
    click.echo(f"Path: {' > '.join(c.name for c in path)}")
    if cat.fiscal_code:
        click.echo(f"Fiscal code: {cat.fiscal_code}")
    if cat.description:
        click.echo(f"Description: {cat.description}")
    click.echo(f"Active: {'Yes' if cat.is_active else 'No'}")


@category_group.command("create")
@click.argument("name")
@click.option("--parent", help="Parent category code (e.g., 'A-1')")
@click.option("--code", help="Category code (generated from the parent when omitted)")
@click.option(
    "--nature",
    type=click.Choice([n.value for n in AccountNature]),
    help="Account nature (required for top-level categories)",
)
@click.option("--description", help="Category description")
@click.option("--fiscal-code", help="Regulatory account code")
@click.pass_context
def create_category(ctx, name: str, parent: str | None, code: str | None, nature: str | None, description: str | None, fiscal_code: str | None):
    """Create a new category."""
    service = CategoryService(ctx.obj["db"])
    try:
        cat = service.create_category(
            name=name,
            parent_code=parent,
            account_nature=AccountNature(nature) if nature else None,
            code=code,
            description=description,
            fiscal_code=fiscal_code,
        )
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)
        return
    parent_str = f" under '{parent}'" if parent else ""
    click.echo(f"Created category {cat.code} '{cat.name}'{parent_str}")


@category_group.command("update")
@click.argument("code")
@click.option("--name", help="New name")
@click.option("--description", help="New description")
@click.option("--fiscal-code", help="New regulatory account code")
@click.option("--sort-order", type=int, help="New position among siblings")
@click.pass_context
def update_category(ctx, code: str, name: str | None, description: str | None, fiscal_code: str | None, sort_order: int | None):
    """Rename or relabel a category."""
    service = CategoryService(ctx.obj["db"])
    try:
        cat = service.update_category(
            code,
            name=name,
            description=description,
            fiscal_code=fiscal_code,
            sort_order=sort_order,
        )
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Updated category {cat.code} '{cat.name}'")


@category_group.command("deactivate")
@click.argument("code")
@click.pass_context
def deactivate_category(ctx, code: str):
    """Stop a category from receiving postings."""
    service = CategoryService(ctx.obj["db"])
    try:
        service.deactivate_category(code)
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Deactivated category {code}")


@category_group.command("delete")
@click.argument("code")
@click.pass_context
def delete_category(ctx, code: str):
    """Delete a category that has no subcategories or journal lines."""
    service = CategoryService(ctx.obj["db"])
    try:
        service.delete_category(code)
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Deleted category {code}")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
