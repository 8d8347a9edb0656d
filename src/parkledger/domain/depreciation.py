"""Straight-line depreciation of fixed assets.

Each asset is charged once per period starting with its acquisition month.
The monthly charge is ``(cost - residual) / life`` rounded down to cents; the
last month of the useful life absorbs the rounding remainder so the asset
ends exactly at its residual value.
"""

import logging
from datetime import date
from decimal import ROUND_DOWN, Decimal
from typing import Optional

from parkledger.database.base import Database
from parkledger.domain.assets import STRAIGHT_LINE
from parkledger.domain.classifier import TransactionClassifier
from parkledger.domain.entities import (
    ZERO,
    AssetStatus,
    DepreciationRunResult,
    FixedAsset,
    MonthlyDepreciation,
    RawTransaction,
    TransactionType,
)
from parkledger.domain.errors import (
    DepreciationError,
    NotFoundError,
    ValidationError,
    asset_not_found,
)
from parkledger.utils.period import iter_periods, parse_period, period_end, period_of

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
SOURCE_MODULE = "assets"


def monthly_charge(asset: FixedAsset, months_charged: int) -> Decimal:
    """Charge for the next period of an asset.

    Args:
        asset: Asset with its current accumulated depreciation
        months_charged: Periods already charged

    Returns:
        The charge, zero once nothing is left to depreciate

    Raises:
        DepreciationError: If the asset's method or values cannot be depreciated
    """
    if asset.depreciation_method != STRAIGHT_LINE:
        raise DepreciationError(
            f"Asset {asset.id}: unsupported depreciation method "
            f"'{asset.depreciation_method}'"
        )
    if asset.useful_life_months <= 0:
        raise DepreciationError(f"Asset {asset.id}: useful life must be positive")

    depreciable = asset.acquisition_cost - asset.residual_value
    if depreciable < 0:
        raise DepreciationError(f"Asset {asset.id}: residual value exceeds cost")
    remaining = depreciable - asset.accumulated_depreciation
    if remaining < 0:
        raise DepreciationError(
            f"Asset {asset.id}: accumulated depreciation {asset.accumulated_depreciation} "
            f"exceeds depreciable amount {depreciable}"
        )
    if remaining == 0:
        return ZERO
    if months_charged + 1 >= asset.useful_life_months:
        return remaining
    charge = (depreciable / asset.useful_life_months).quantize(CENT, rounding=ROUND_DOWN)
    return min(charge, remaining)


class DepreciationScheduler:
    """Charges monthly depreciation and books it through the classifier.

    Runs are idempotent: a period already charged for an asset is skipped.
    """

    def __init__(self, db: Database, classifier: Optional[TransactionClassifier] = None):
        self.db = db
        self.classifier = classifier or TransactionClassifier(db)

    def run(self, through_period: Optional[str] = None) -> DepreciationRunResult:
        """Depreciate every active asset up to and including a period.

        An asset that fails with ``DepreciationError`` is logged and skipped;
        the rest of the batch continues.

        Args:
            through_period: Last period to charge (defaults to the current month)
        """
        through_period = self._period(through_period)
        result = DepreciationRunResult()
        for asset in self.db.list_fixed_assets(AssetStatus.ACTIVE):
            try:
                self._depreciate(asset, through_period, result.charges)
            except DepreciationError as e:
                logger.warning("Skipping asset %d: %s", asset.id, e)
                result.skipped[asset.id] = str(e)
        logger.info(
            "Depreciation through %s: %d charges totalling %s, %d assets skipped",
            through_period,
            len(result.charges),
            result.total_charged,
            len(result.skipped),
        )
        return result

    def depreciate_asset(
        self, asset_id: int, through_period: Optional[str] = None
    ) -> list[MonthlyDepreciation]:
        """Charge every uncharged period of one asset up to a period.

        Raises:
            NotFoundError: If the asset does not exist
            DepreciationError: If the asset cannot be depreciated
        """
        through_period = self._period(through_period)
        asset = self.db.get_fixed_asset(asset_id)
        if asset is None:
            raise NotFoundError(asset_not_found(asset_id))
        charges: list[MonthlyDepreciation] = []
        self._depreciate(asset, through_period, charges)
        return charges

    def _depreciate(
        self, asset: FixedAsset, through_period: str, charges: list[MonthlyDepreciation]
    ) -> None:
        for period in iter_periods(period_of(asset.acquisition_date), through_period):
            if self.db.get_monthly_depreciation(asset.id, period) is not None:
                continue
            charge = self._charge_period(asset.id, period)
            if charge is None:
                break
            charges.append(charge)

    def _charge_period(self, asset_id: int, period: str) -> Optional[MonthlyDepreciation]:
        """Charge one period. Returns None once the asset stops depreciating."""
        with self.db.transaction():
            asset = self.db.get_fixed_asset(asset_id, for_update=True)
            if asset.status != AssetStatus.ACTIVE:
                return None
            # Rows are charged in period order, so their count is the month index.
            months_charged = len(self.db.list_monthly_depreciation(asset_id))
            charge = monthly_charge(asset, months_charged)
            if charge == 0:
                self.db.update_fixed_asset(asset_id, status=AssetStatus.FULLY_DEPRECIATED)
                return None

            accumulated = asset.accumulated_depreciation + charge
            net_book_value = asset.acquisition_cost - accumulated
            if net_book_value < asset.residual_value:
                raise DepreciationError(
                    f"Asset {asset_id}: charge {charge} for {period} would leave net "
                    f"book value {net_book_value} below residual {asset.residual_value}"
                )

            row_id = self.db.create_monthly_depreciation(
                asset_id, period, charge, accumulated, net_book_value
            )
            entry = self.classifier.submit_transaction(
                RawTransaction(
                    amount=charge,
                    date=period_end(period),
                    transaction_type=TransactionType.DEPRECIATION,
                    source_module=SOURCE_MODULE,
                    source_id=f"depreciation:{asset_id}:{period}",
                    description=f"Depreciación {asset.name} {period}",
                )
            )
            self.db.set_monthly_depreciation_entry(row_id, entry.id)

            fully = net_book_value == asset.residual_value
            self.db.update_fixed_asset(
                asset_id,
                accumulated_depreciation=accumulated,
                net_book_value=net_book_value,
                status=AssetStatus.FULLY_DEPRECIATED if fully else None,
            )
            row = self.db.get_monthly_depreciation(asset_id, period)

        logger.info("Charged %s depreciation to asset %d for %s", charge, asset_id, period)
        return row

    @staticmethod
    def _period(period: Optional[str]) -> str:
        if period is None:
            return period_of(date.today())
        try:
            return parse_period(period)
        except ValueError as e:
            raise ValidationError(str(e)) from e
