"""Fixed asset domain service."""

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from parkledger.database.base import Database
from parkledger.domain.category import CategoryService
from parkledger.domain.entities import ZERO, AssetStatus, FixedAsset, MonthlyDepreciation
from parkledger.domain.errors import (
    DependencyError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
    asset_depreciated,
    asset_not_found,
)
from parkledger.domain.settings import SettingsService

logger = logging.getLogger(__name__)

STRAIGHT_LINE = "straight_line"
SUPPORTED_METHODS = (STRAIGHT_LINE,)


def _validate_terms(cost: Decimal, life_months: int, residual: Decimal) -> None:
    if cost <= 0:
        raise ValidationError("Acquisition cost must be positive")
    if life_months <= 0:
        raise ValidationError("Useful life must be at least one month")
    if residual < 0 or residual > cost:
        raise ValidationError("Residual value must be between zero and the acquisition cost")


class FixedAssetService:
    """Service for registering, editing and disposing of fixed assets."""

    def __init__(
        self,
        db: Database,
        categories: Optional[CategoryService] = None,
        settings: Optional[SettingsService] = None,
    ):
        """Initialize fixed asset service.

        Args:
            db: Database instance
            categories: Category service used to resolve asset categories
            settings: Settings service providing the default method
        """
        self.db = db
        self.categories = categories or CategoryService(db)
        self.settings = settings or SettingsService(db)

    def register(
        self,
        name: str,
        category_code: str,
        acquisition_date: date,
        acquisition_cost: Decimal,
        useful_life_months: int,
        residual_value: Decimal = ZERO,
        depreciation_method: Optional[str] = None,
        location: Optional[str] = None,
        description: Optional[str] = None,
    ) -> FixedAsset:
        """Register a fixed asset.

        Args:
            name: Asset name
            category_code: Asset category (e.g. ``A-2-3``)
            acquisition_date: Date acquired; depreciation starts that month
            acquisition_cost: Cost (> 0)
            useful_life_months: Useful life in months (> 0)
            residual_value: Value left at the end of the useful life
            depreciation_method: Defaults to the configured method
            location: Optional location within the park
            description: Optional description

        Returns:
            The registered asset

        Raises:
            ValidationError: If amounts, life or method are invalid
            NotFoundError: If the category is unknown or inactive
        """
        if not name or not name.strip():
            raise ValidationError("Asset name is required")
        _validate_terms(acquisition_cost, useful_life_months, residual_value)
        method = depreciation_method or self.settings.depreciation_method()
        if method not in SUPPORTED_METHODS:
            raise ValidationError(f"Unsupported depreciation method '{method}'")

        category = self.categories.resolve(category_code)
        asset_id = self.db.create_fixed_asset(
            name=name.strip(),
            category_id=category.id,
            acquisition_date=acquisition_date,
            acquisition_cost=acquisition_cost,
            useful_life_months=useful_life_months,
            residual_value=residual_value,
            depreciation_method=method,
            location=location,
            description=description,
        )
        logger.info("Registered asset %d (%s) at %s", asset_id, name, acquisition_cost)
        return self.get(asset_id)

    def get(self, asset_id: int) -> FixedAsset:
        """Get an asset by ID.

        Raises:
            NotFoundError: If the asset does not exist
        """
        asset = self.db.get_fixed_asset(asset_id)
        if asset is None:
            raise NotFoundError(asset_not_found(asset_id))
        return asset

    def list_assets(self, status: Optional[AssetStatus] = None) -> list[FixedAsset]:
        return self.db.list_fixed_assets(status)

    def update(
        self,
        asset_id: int,
        name: Optional[str] = None,
        category_code: Optional[str] = None,
        acquisition_date: Optional[date] = None,
        acquisition_cost: Optional[Decimal] = None,
        useful_life_months: Optional[int] = None,
        residual_value: Optional[Decimal] = None,
        location: Optional[str] = None,
        description: Optional[str] = None,
    ) -> FixedAsset:
        """Edit an asset. None leaves a field unchanged.

        Once depreciation has been charged, only the name, location and
        description can change.

        Raises:
            NotFoundError: If the asset or category does not exist
            DependencyError: If valuation terms change after depreciation
            ValidationError: If the new terms are invalid
        """
        valuation = {
            "category_code": category_code,
            "acquisition_date": acquisition_date,
            "acquisition_cost": acquisition_cost,
            "useful_life_months": useful_life_months,
            "residual_value": residual_value,
        }
        with self.db.transaction():
            asset = self.db.get_fixed_asset(asset_id, for_update=True)
            if asset is None:
                raise NotFoundError(asset_not_found(asset_id))
            changed = [field for field, value in valuation.items() if value is not None]
            if changed and self.db.list_monthly_depreciation(asset_id):
                raise DependencyError(asset_depreciated(asset_id, "change " + ", ".join(changed)))
            if name is not None and not name.strip():
                raise ValidationError("Asset name is required")

            cost = asset.acquisition_cost if acquisition_cost is None else acquisition_cost
            life = asset.useful_life_months if useful_life_months is None else useful_life_months
            residual = asset.residual_value if residual_value is None else residual_value
            _validate_terms(cost, life, residual)
            if (
                acquisition_date is not None
                and asset.disposal_date is not None
                and asset.disposal_date < acquisition_date
            ):
                raise ValidationError("Disposal date cannot precede the acquisition date")
            category_id = None
            if category_code is not None:
                category_id = self.categories.resolve(category_code).id

            self.db.update_fixed_asset(
                asset_id,
                net_book_value=cost - asset.accumulated_depreciation,
                name=name.strip() if name is not None else None,
                category_id=category_id,
                acquisition_date=acquisition_date,
                acquisition_cost=acquisition_cost,
                useful_life_months=useful_life_months,
                residual_value=residual_value,
                location=location,
                description=description,
            )
        logger.info("Updated asset %d", asset_id)
        return self.get(asset_id)

    def delete(self, asset_id: int) -> None:
        """Delete an asset that has never been depreciated.

        Raises:
            NotFoundError: If the asset does not exist
            DependencyError: If depreciation has been charged to it
        """
        with self.db.transaction():
            self.get(asset_id)
            if self.db.list_monthly_depreciation(asset_id):
                raise DependencyError(asset_depreciated(asset_id, "delete it"))
            self.db.delete_fixed_asset(asset_id)
        logger.info("Deleted asset %d", asset_id)

    def dispose(self, asset_id: int, disposal_date: date) -> FixedAsset:
        """Mark an asset as disposed; it is no longer depreciated."""
        with self.db.transaction():
            asset = self.db.get_fixed_asset(asset_id, for_update=True)
            if asset is None:
                raise NotFoundError(asset_not_found(asset_id))
            if asset.status == AssetStatus.DISPOSED:
                raise InvalidTransitionError(f"Fixed asset {asset_id} is already disposed")
            if disposal_date < asset.acquisition_date:
                raise ValidationError("Disposal date cannot precede the acquisition date")
            self.db.update_fixed_asset(
                asset_id, status=AssetStatus.DISPOSED, disposal_date=disposal_date
            )
        logger.info("Disposed asset %d on %s", asset_id, disposal_date)
        return self.get(asset_id)

    def depreciation_history(self, asset_id: int) -> list[MonthlyDepreciation]:
        """Depreciation charged to an asset, oldest period first."""
        self.get(asset_id)
        return self.db.list_monthly_depreciation(asset_id)
