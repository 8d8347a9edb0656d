"""Balance ledger: per-category, per-period running balances.

This is the only service that writes ``account_balances`` rows. Balances
are materialized lazily on the first posting to a (category, period) key and
carry forward the most recent earlier ending balance.
"""

import logging
from dataclasses import replace
from decimal import Decimal
from typing import Optional

from parkledger.database.base import Database
from parkledger.domain.entities import (
    ZERO,
    AccountBalance,
    AccountNature,
    Category,
    LevelBalance,
    TrialBalance,
    TrialBalanceRow,
)
from parkledger.domain.errors import (
    NotFoundError,
    ValidationError,
    category_id_not_found,
    category_not_found,
)
from parkledger.utils.period import parse_period

logger = logging.getLogger(__name__)


def nature_delta(nature: AccountNature, debit: Decimal, credit: Decimal) -> Decimal:
    """Change in balance caused by a debit and credit in a category's nature."""
    if nature == AccountNature.DEBIT:
        return debit - credit
    return credit - debit


def ending_balance(
    nature: AccountNature, beginning: Decimal, debit_total: Decimal, credit_total: Decimal
) -> Decimal:
    """Ending balance from beginning balance and period totals."""
    return beginning + nature_delta(nature, debit_total, credit_total)


def _period(period: str) -> str:
    try:
        return parse_period(period)
    except ValueError as e:
        raise ValidationError(str(e)) from e


class BalanceLedgerService:
    """Service maintaining materialized account balances."""

    def __init__(self, db: Database):
        """Initialize balance ledger service.

        Args:
            db: Database instance
        """
        self.db = db

    def _category(self, category_id: int) -> Category:
        category = self.db.get_category(category_id)
        if category is None:
            raise NotFoundError(category_id_not_found(category_id))
        return category

    def _materialize(self, category_id: int, period: str) -> AccountBalance:
        balance = self.db.get_account_balance(category_id, period, for_update=True)
        if balance is not None:
            return balance
        prior = self.db.get_latest_balance_before(category_id, period)
        beginning = prior.ending_balance if prior is not None else ZERO
        return self.db.create_account_balance(category_id, period, beginning)

    def _shift_later_periods(self, category_id: int, period: str, delta: Decimal) -> None:
        if delta == 0:
            return
        for later in self.db.list_balances_after(category_id, period):
            self.db.save_account_balance(
                replace(
                    later,
                    beginning_balance=later.beginning_balance + delta,
                    ending_balance=later.ending_balance + delta,
                )
            )

    def apply_posting(
        self, category_id: int, period: str, debit: Decimal, credit: Decimal
    ) -> AccountBalance:
        """Add debit and credit amounts to a category's period totals.

        Later materialized periods of the same category are shifted by the
        resulting balance change so carried-forward balances stay consistent.

        Args:
            category_id: Category receiving the posting
            period: Period (YYYY-MM)
            debit: Debit amount (>= 0)
            credit: Credit amount (>= 0)

        Returns:
            The updated balance for the period
        """
        period = _period(period)
        if debit < 0 or credit < 0:
            raise ValidationError("Posting amounts cannot be negative")

        with self.db.transaction():
            category = self._category(category_id)
            balance = self._materialize(category_id, period)
            debit_total = balance.debit_total + debit
            credit_total = balance.credit_total + credit
            updated = replace(
                balance,
                debit_total=debit_total,
                credit_total=credit_total,
                ending_balance=ending_balance(
                    category.account_nature,
                    balance.beginning_balance,
                    debit_total,
                    credit_total,
                ),
            )
            self.db.save_account_balance(updated)
            delta = nature_delta(category.account_nature, debit, credit)
            self._shift_later_periods(category_id, period, delta)

        logger.debug(
            "Applied debit %s credit %s to %s in %s", debit, credit, category.code, period
        )
        return updated

    def get_balance(self, category_id: int, period: str) -> AccountBalance:
        """Get a category's balance for a period.

        A period with no activity reports zero totals and the balance carried
        from the latest earlier period (zero when there is none).
        """
        period = _period(period)
        balance = self.db.get_account_balance(category_id, period)
        if balance is not None:
            return balance
        prior = self.db.get_latest_balance_before(category_id, period)
        carried = prior.ending_balance if prior is not None else ZERO
        return AccountBalance(
            category_id=category_id,
            period=period,
            beginning_balance=carried,
            debit_total=ZERO,
            credit_total=ZERO,
            ending_balance=carried,
        )

    def rollup(self, category_code: str, period: str) -> AccountBalance:
        """Aggregate a category and all its descendants for a period.

        Balances of descendants whose nature differs from the rolled-up
        category are sign-flipped before summing. Debit and credit totals are
        raw sums.

        Raises:
            NotFoundError: If the category code is unknown
        """
        period = _period(period)
        root = self.db.get_category_by_code(category_code)
        if root is None:
            raise NotFoundError(category_not_found(category_code))

        beginning = debit_total = credit_total = ending = ZERO
        for category in self.db.list_descendants(root.full_path):
            balance = self.get_balance(category.id, period)
            sign = 1 if category.account_nature == root.account_nature else -1
            beginning += sign * balance.beginning_balance
            ending += sign * balance.ending_balance
            debit_total += balance.debit_total
            credit_total += balance.credit_total

        return AccountBalance(
            category_id=root.id,
            period=period,
            beginning_balance=beginning,
            debit_total=debit_total,
            credit_total=credit_total,
            ending_balance=ending,
        )

    def set_beginning_balance(
        self, category_id: int, period: str, amount: Decimal
    ) -> AccountBalance:
        """Set the opening balance of a category for a period."""
        period = _period(period)
        with self.db.transaction():
            category = self._category(category_id)
            balance = self._materialize(category_id, period)
            delta = amount - balance.beginning_balance
            updated = replace(
                balance,
                beginning_balance=amount,
                ending_balance=balance.ending_balance + delta,
            )
            self.db.save_account_balance(updated)
            self._shift_later_periods(category_id, period, delta)
        logger.info("Beginning balance of %s in %s set to %s", category.code, period, amount)
        return updated

    def trial_balance(self, period: str, category_ids: Optional[list[int]] = None) -> TrialBalance:
        """Debit and credit totals of every category with a balance in a period."""
        period = _period(period)
        categories = {
            c.id: c for c in self.db.list_categories(include_inactive=True)
        }
        rows = []
        for balance in self.db.list_account_balances(period, category_ids):
            category = categories[balance.category_id]
            rows.append(
                TrialBalanceRow(
                    category_id=category.id,
                    code=category.code,
                    name=category.name,
                    account_nature=category.account_nature,
                    debit_total=balance.debit_total,
                    credit_total=balance.credit_total,
                    ending_balance=balance.ending_balance,
                )
            )
        rows.sort(key=lambda row: row.code)
        return TrialBalance(
            period=period,
            rows=rows,
            total_debits=sum((r.debit_total for r in rows), ZERO),
            total_credits=sum((r.credit_total for r in rows), ZERO),
        )

    def balances_by_level(self, period: str) -> list[LevelBalance]:
        """Total ending balance of active categories per level and nature.

        Balances are summed in their own nature, so debit-normal and
        credit-normal categories of one level are reported separately.
        """
        period = _period(period)
        groups: dict[tuple[int, AccountNature], list[Decimal]] = {}
        for category in self.db.list_categories():
            balance = self.get_balance(category.id, period)
            groups.setdefault((category.level, category.account_nature), []).append(
                balance.ending_balance
            )
        return [
            LevelBalance(
                level=level,
                account_nature=nature,
                category_count=len(balances),
                total_balance=sum(balances, ZERO),
            )
            for (level, nature), balances in sorted(
                groups.items(), key=lambda item: (item[0][0], item[0][1].value)
            )
        ]
