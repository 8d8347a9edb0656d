"""Abstract database interface."""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Optional
from datetime import date, datetime
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from parkledger.domain.entities import (
    AccountBalance,
    AccountNature,
    AssetStatus,
    Category,
    EntryDetail,
    EntryLine,
    EntryStatus,
    FixedAsset,
    JournalEntry,
    MonthlyDepreciation,
    Setting,
    SettingType,
    SourceTransaction,
    SourceTransactionFilter,
    TransactionType,
)


class Database(ABC):
    """Abstract database interface for parkledger.

    Single-row writes commit immediately unless they run inside
    ``transaction()``, in which case the outermost block decides.
    Storage failures surface as ``PersistenceError``.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def transaction(self) -> AbstractContextManager[None]:
        """Open a re-entrant unit of work.

        The outermost block commits on success and rolls back on error.
        """
        pass

    @abstractmethod
    def in_transaction(self) -> bool:
        """Return True while inside a ``transaction()`` block."""
        pass

    # Category operations
    @abstractmethod
    def create_category(
        self,
        code: str,
        name: str,
        level: int,
        parent_id: Optional[int],
        account_nature: AccountNature,
        full_path: str,
        description: Optional[str] = None,
        fiscal_code: Optional[str] = None,
        sort_order: int = 0,
    ) -> int:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def get_category_by_code(self, code: str) -> Optional[Category]:
        """Get category by code (e.g., 'A-1-1')."""
        pass

    @abstractmethod
    def list_categories(
        self,
        level: Optional[int] = None,
        parent_id: Optional[int] = None,
        search: Optional[str] = None,
        include_inactive: bool = False,
    ) -> list[Category]:
        """List categories ordered by level, sort order and name."""
        pass

    @abstractmethod
    def list_children(self, parent_id: int) -> list[Category]:
        """List direct children of a category ordered by sort order."""
        pass

    @abstractmethod
    def list_descendants(self, full_path: str) -> list[Category]:
        """List the category with this full path and all categories below it."""
        pass

    @abstractmethod
    def update_category(
        self,
        category_id: int,
        name: Optional[str] = None,
        description: Optional[str] = None,
        fiscal_code: Optional[str] = None,
        sort_order: Optional[int] = None,
        is_active: Optional[bool] = None,
    ) -> None:
        """Update mutable category fields. None leaves a field unchanged."""
        pass

    @abstractmethod
    def delete_category(self, category_id: int) -> None:
        """Delete a category row."""
        pass

    @abstractmethod
    def count_categories(self) -> int:
        """Count all categories, active or not."""
        pass

    @abstractmethod
    def count_category_children(self, category_id: int, active_only: bool = False) -> int:
        """Count direct children of a category."""
        pass

    @abstractmethod
    def count_category_lines(self, category_id: int) -> int:
        """Count journal lines referencing a category."""
        pass

    # Entry number sequences
    @abstractmethod
    def next_entry_sequence(self, period: str) -> int:
        """Atomically allocate the next entry sequence value for a period."""
        pass

    # Journal entry operations
    @abstractmethod
    def create_journal_entry(
        self,
        entry_number: str,
        date: date,
        description: str,
        total_amount: Decimal,
        is_balanced: bool,
        lines: list[EntryLine],
        reference: Optional[str] = None,
        source_transaction_id: Optional[int] = None,
        reversal_of_id: Optional[int] = None,
    ) -> int:
        """Create a draft journal entry with its lines. Returns entry ID."""
        pass

    @abstractmethod
    def replace_entry_details(
        self,
        entry_id: int,
        lines: list[EntryLine],
        total_amount: Decimal,
        is_balanced: bool,
        description: Optional[str] = None,
    ) -> None:
        """Replace all lines of an entry and its cached totals."""
        pass

    @abstractmethod
    def get_journal_entry(self, entry_id: int) -> Optional[JournalEntry]:
        """Get journal entry by ID."""
        pass

    @abstractmethod
    def get_journal_entry_by_number(self, entry_number: str) -> Optional[JournalEntry]:
        """Get journal entry by its entry number."""
        pass

    @abstractmethod
    def get_reversal_of(self, entry_id: int) -> Optional[JournalEntry]:
        """Get the entry that reverses the given entry, if any."""
        pass

    @abstractmethod
    def get_entry_details(self, entry_id: int) -> list[EntryDetail]:
        """Get the lines of an entry ordered by sort order."""
        pass

    @abstractmethod
    def list_journal_entries(
        self,
        status: Optional[EntryStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[JournalEntry]:
        """List journal entries ordered by date and entry number."""
        pass

    @abstractmethod
    def transition_entry_status(
        self,
        entry_id: int,
        from_status: EntryStatus,
        to_status: EntryStatus,
        posted_at: Optional[datetime] = None,
    ) -> bool:
        """Move an entry between statuses if it is still in ``from_status``.

        Returns False when the entry was not in ``from_status``.
        """
        pass

    # Balance operations
    @abstractmethod
    def get_account_balance(
        self, category_id: int, period: str, for_update: bool = False
    ) -> Optional[AccountBalance]:
        """Get the materialized balance for a category and period."""
        pass

    @abstractmethod
    def get_latest_balance_before(
        self, category_id: int, period: str
    ) -> Optional[AccountBalance]:
        """Get the most recent materialized balance earlier than a period."""
        pass

    @abstractmethod
    def list_balances_after(self, category_id: int, period: str) -> list[AccountBalance]:
        """List materialized balances later than a period, oldest first."""
        pass

    @abstractmethod
    def list_account_balances(
        self, period: str, category_ids: Optional[list[int]] = None
    ) -> list[AccountBalance]:
        """List materialized balances for a period."""
        pass

    @abstractmethod
    def create_account_balance(
        self, category_id: int, period: str, beginning_balance: Decimal
    ) -> AccountBalance:
        """Materialize a balance row with no activity."""
        pass

    @abstractmethod
    def save_account_balance(self, balance: AccountBalance) -> None:
        """Write totals of an existing balance row."""
        pass

    # Source transaction operations
    @abstractmethod
    def create_source_transaction(
        self,
        source_module: str,
        source_id: str,
        transaction_type: TransactionType,
        date: date,
        amount: Decimal,
        description: str,
        category_id: int,
    ) -> int:
        """Record a raw upstream transaction. Returns its ID."""
        pass

    @abstractmethod
    def get_source_transaction(
        self, source_module: str, source_id: str
    ) -> Optional[SourceTransaction]:
        """Get a recorded raw transaction by its upstream identity."""
        pass

    @abstractmethod
    def set_source_transaction_entry(self, source_transaction_id: int, entry_id: int) -> None:
        """Link a recorded raw transaction to its journal entry."""
        pass

    @abstractmethod
    def list_source_transactions(
        self,
        transaction_filter: Optional[SourceTransactionFilter] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[SourceTransaction]:
        """List recorded raw transactions, newest date first."""
        pass

    @abstractmethod
    def count_source_transactions(
        self, transaction_filter: Optional[SourceTransactionFilter] = None
    ) -> int:
        """Count recorded raw transactions matching a filter."""
        pass

    # Fixed asset operations
    @abstractmethod
    def create_fixed_asset(
        self,
        name: str,
        category_id: int,
        acquisition_date: date,
        acquisition_cost: Decimal,
        useful_life_months: int,
        residual_value: Decimal,
        depreciation_method: str = "straight_line",
        location: Optional[str] = None,
        description: Optional[str] = None,
    ) -> int:
        """Create a fixed asset. Returns asset ID."""
        pass

    @abstractmethod
    def get_fixed_asset(self, asset_id: int, for_update: bool = False) -> Optional[FixedAsset]:
        """Get fixed asset by ID."""
        pass

    @abstractmethod
    def list_fixed_assets(self, status: Optional[AssetStatus] = None) -> list[FixedAsset]:
        """List fixed assets, optionally filtered by status."""
        pass

    @abstractmethod
    def update_fixed_asset(
        self,
        asset_id: int,
        accumulated_depreciation: Optional[Decimal] = None,
        net_book_value: Optional[Decimal] = None,
        status: Optional[AssetStatus] = None,
        disposal_date: Optional[date] = None,
        name: Optional[str] = None,
        category_id: Optional[int] = None,
        acquisition_date: Optional[date] = None,
        acquisition_cost: Optional[Decimal] = None,
        useful_life_months: Optional[int] = None,
        residual_value: Optional[Decimal] = None,
        location: Optional[str] = None,
        description: Optional[str] = None,
    ) -> None:
        """Update an asset. None leaves a field unchanged."""
        pass

    @abstractmethod
    def delete_fixed_asset(self, asset_id: int) -> None:
        """Delete an asset row."""
        pass

    @abstractmethod
    def create_monthly_depreciation(
        self,
        asset_id: int,
        period: str,
        monthly_amount: Decimal,
        accumulated_to_date: Decimal,
        remaining_value: Decimal,
    ) -> int:
        """Record a depreciation charge. Returns row ID."""
        pass

    @abstractmethod
    def get_monthly_depreciation(
        self, asset_id: int, period: str
    ) -> Optional[MonthlyDepreciation]:
        """Get the depreciation row for an asset and period."""
        pass

    @abstractmethod
    def list_monthly_depreciation(self, asset_id: int) -> list[MonthlyDepreciation]:
        """List depreciation rows of an asset ordered by period."""
        pass

    @abstractmethod
    def set_monthly_depreciation_entry(self, row_id: int, entry_id: int) -> None:
        """Link a depreciation row to its journal entry."""
        pass

    # Settings operations
    @abstractmethod
    def get_setting(self, key: str) -> Optional[Setting]:
        """Get an accounting setting by key."""
        pass

    @abstractmethod
    def list_settings(self) -> list[Setting]:
        """List active settings ordered by category and key."""
        pass

    @abstractmethod
    def create_setting(
        self,
        key: str,
        value: str,
        data_type: SettingType,
        category: str,
        description: Optional[str] = None,
    ) -> bool:
        """Insert a setting unless the key exists. Returns True if inserted."""
        pass

    @abstractmethod
    def update_setting_value(self, key: str, value: str) -> None:
        """Replace the stored value of a setting."""
        pass
