"""Fixed asset and depreciation commands."""

import click
from parkledger.cli.error_handling import handle_domain_error
from parkledger.domain.assets import FixedAssetService
from parkledger.domain.depreciation import DepreciationScheduler
from parkledger.domain.entities import ZERO, AssetStatus
from parkledger.domain.errors import DomainError, PersistenceError
from parkledger.utils.amount_parser import parse_amount
from parkledger.utils.date_parser import parse_date


@click.group()
def asset_group():
    """Manage fixed assets and depreciation."""
    pass


@asset_group.command("register")
@click.argument("name")
@click.option("--category", "category_code", required=True, help="Asset category code (e.g., 'A-2-3')")
@click.option("--cost", required=True, help="Acquisition cost")
@click.option("--life", "useful_life_months", required=True, type=int, help="Useful life in months")
@click.option("--residual", default=None, help="Residual value (default: 0)")
@click.option("--acquired", "acquired_str", default="today", help="Acquisition date (YYYY-MM-DD or relative)")
@click.option("--location", help="Location within the park")
@click.option("--description", help="Asset description")
@click.pass_context
def register_asset(ctx, name: str, category_code: str, cost: str, useful_life_months: int, residual: str | None, acquired_str: str, location: str | None, description: str | None):
    """Register a fixed asset."""
    try:
        acquisition_cost = parse_amount(cost)
        residual_value = parse_amount(residual) if residual else ZERO
        acquisition_date = parse_date(acquired_str)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    service = FixedAssetService(ctx.obj["db"])
    try:
        asset = service.register(
            name=name,
            category_code=category_code,
            acquisition_date=acquisition_date,
            acquisition_cost=acquisition_cost,
            useful_life_months=useful_life_months,
            residual_value=residual_value,
            location=location,
            description=description,
        )
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Registered asset '{asset.name}' (ID: {asset.id})")


@asset_group.command("list")
@click.option("--status", type=click.Choice([s.value for s in AssetStatus]), help="Only assets with this status")
@click.pass_context
def list_assets(ctx, status: str | None):
    """List fixed assets."""
    assets = FixedAssetService(ctx.obj["db"]).list_assets(AssetStatus(status) if status else None)
    if not assets:
        click.echo("No assets found.")
        return
    click.echo(f"{'ID':>5} {'Name':<30} {'Cost':>14} {'Accumulated':>14} {'Book value':>14}  Status")
    for a in assets:
        click.echo(
            f"{a.id:>5} {a.name[:30]:<30} {a.acquisition_cost:>14,.2f} "
            f"{a.accumulated_depreciation:>14,.2f} {a.net_book_value:>14,.2f}  {a.status.value}"
        )


@asset_group.command("show")
@click.argument("asset_id", type=int)
@click.pass_context
def show_asset(ctx, asset_id: int):
    """Show an asset and its depreciation history."""
    service = FixedAssetService(ctx.obj["db"])
    try:
        asset = service.get(asset_id)
        history = service.depreciation_history(asset_id)
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"\nAsset: {asset.name} (ID: {asset.id})")
    click.echo(f"Acquired: {asset.acquisition_date}")
    click.echo(f"Cost: {asset.acquisition_cost:,.2f}")
    click.echo(f"Residual value: {asset.residual_value:,.2f}")
    click.echo(f"Useful life: {asset.useful_life_months} months")
    click.echo(f"Accumulated depreciation: {asset.accumulated_depreciation:,.2f}")
    click.echo(f"Net book value: {asset.net_book_value:,.2f}")
    click.echo(f"Status: {asset.status.value}")
    if asset.location:
        click.echo(f"Location: {asset.location}")
    if history:
        click.echo("\nDepreciation:")
        for row in history:
            click.echo(
                f"  {row.period}  {row.monthly_amount:>12,.2f}  "
                f"{row.accumulated_to_date:>14,.2f}  {row.remaining_value:>14,.2f}"
            )


@asset_group.command("update")
@click.argument("asset_id", type=int)
@click.option("--name", help="New name")
@click.option("--category", "category_code", help="New asset category code")
@click.option("--cost", help="New acquisition cost")
@click.option("--life", "useful_life_months", type=int, help="New useful life in months")
@click.option("--residual", help="New residual value")
@click.option("--acquired", "acquired_str", help="New acquisition date")
@click.option("--location", help="New location")
@click.option("--description", help="New description")
@click.pass_context
def update_asset(ctx, asset_id: int, name: str | None, category_code: str | None, cost: str | None, useful_life_months: int | None, residual: str | None, acquired_str: str | None, location: str | None, description: str | None):
    """Edit an asset. Valuation terms are locked once depreciation is charged."""
    try:
        acquisition_cost = parse_amount(cost) if cost else None
        residual_value = parse_amount(residual) if residual else None
        acquisition_date = parse_date(acquired_str) if acquired_str else None
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)

    try:
        asset = FixedAssetService(ctx.obj["db"]).update(
            asset_id,
            name=name,
            category_code=category_code,
            acquisition_date=acquisition_date,
            acquisition_cost=acquisition_cost,
            useful_life_months=useful_life_months,
            residual_value=residual_value,
            location=location,
            description=description,
        )
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Updated asset '{asset.name}' (ID: {asset.id})")


@asset_group.command("delete")
@click.argument("asset_id", type=int)
@click.pass_context
def delete_asset(ctx, asset_id: int):
    """Delete an asset that has never been depreciated.

    Examples:
        parkledger asset delete 3
    """
    service = FixedAssetService(ctx.obj["db"])
    try:
        asset = service.get(asset_id)
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)
        return

    if not click.confirm(f"Are you sure you want to delete asset '{asset.name}' (ID: {asset_id})?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete(asset_id)
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Deleted asset {asset_id}")


@asset_group.command("dispose")
@click.argument("asset_id", type=int)
@click.option("--date", "date_str", default="today", help="Disposal date")
@click.pass_context
def dispose_asset(ctx, asset_id: int, date_str: str):
    """Dispose of an asset."""
    try:
        disposal_date = parse_date(date_str)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)
    try:
        asset = FixedAssetService(ctx.obj["db"]).dispose(asset_id, disposal_date)
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"Disposed asset '{asset.name}' on {asset.disposal_date}")


@asset_group.command("depreciate")
@click.option("--through", "through_period", help="Last period to charge (YYYY-MM, default: current month)")
@click.pass_context
def depreciate(ctx, through_period: str | None):
    """Charge monthly depreciation for every active asset."""
    try:
        result = DepreciationScheduler(ctx.obj["db"]).run(through_period)
    except (DomainError, PersistenceError) as e:
        handle_domain_error(ctx, e)
        return

    click.echo(f"Charged {len(result.charges)} periods, total {result.total_charged:,.2f}")
    for asset_id, reason in result.skipped.items():
        click.echo(f"Skipped asset {asset_id}: {reason}", err=True)


def register_commands(cli):
    """Register asset commands with main CLI."""
    cli.add_command(asset_group, name="asset")
