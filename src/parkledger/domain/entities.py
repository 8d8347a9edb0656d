"""Domain model entities for parkledger.

These are pure data classes representing accounting concepts, independent of
database schema. Services and the CLI only ever see these types; the ORM
models stay behind the database layer.
"""

from dataclasses import dataclass, field
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Optional


ZERO = Decimal("0.00")


class AccountNature(str, Enum):
    """Which side of a posting increases a category's balance."""

    DEBIT = "debit-normal"
    CREDIT = "credit-normal"


class EntryStatus(str, Enum):
    """Journal entry lifecycle states."""

    DRAFT = "draft"
    POSTED = "posted"
    VOID = "void"


class TransactionType(str, Enum):
    """Kinds of raw transactions emitted by upstream modules."""

    INCOME = "income"
    EXPENSE = "expense"
    TRANSFER = "transfer"
    DEPRECIATION = "depreciation"


class AssetStatus(str, Enum):
    """Fixed asset lifecycle states."""

    ACTIVE = "active"
    DISPOSED = "disposed"
    FULLY_DEPRECIATED = "fully-depreciated"


class SettingType(str, Enum):
    """Storage type of an accounting setting value."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"


@dataclass(frozen=True)
class Category:
    """Chart-of-accounts node."""

    id: int
    code: str
    name: str
    level: int
    parent_id: Optional[int]
    account_nature: AccountNature
    full_path: str
    description: Optional[str] = None
    fiscal_code: Optional[str] = None
    sort_order: int = 0
    is_active: bool = True
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class CategoryTreeNode:
    """Category with its nested children, for tree displays."""

    category: Category
    children: list["CategoryTreeNode"] = field(default_factory=list)


@dataclass(frozen=True)
class CategoryFilter:
    """Optional filters for listing categories."""

    level: Optional[int] = None
    parent_code: Optional[str] = None
    search: Optional[str] = None
    include_inactive: bool = False


@dataclass(frozen=True)
class EntryLine:
    """Input line for a draft journal entry."""

    category_id: int
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    description: Optional[str] = None


@dataclass(frozen=True)
class JournalEntry:
    """Double-entry journal entry header."""

    id: int
    entry_number: str
    date: date
    description: str
    total_amount: Decimal
    is_balanced: bool
    status: EntryStatus
    reference: Optional[str] = None
    source_transaction_id: Optional[int] = None
    reversal_of_id: Optional[int] = None
    created_at: Optional[datetime] = None
    posted_at: Optional[datetime] = None


@dataclass(frozen=True)
class EntryDetail:
    """One debit or credit line of a journal entry."""

    id: int
    entry_id: int
    category_id: int
    debit_amount: Decimal
    credit_amount: Decimal
    sort_order: int
    description: Optional[str] = None


@dataclass(frozen=True)
class AccountBalance:
    """Per-category, per-period balance.

    ``id`` is None for balances that were never materialized (no activity).
    """

    category_id: int
    period: str
    beginning_balance: Decimal
    debit_total: Decimal
    credit_total: Decimal
    ending_balance: Decimal
    id: Optional[int] = None
    last_updated: Optional[datetime] = None


@dataclass(frozen=True)
class TrialBalanceRow:
    """One category line of a trial balance."""

    category_id: int
    code: str
    name: str
    account_nature: AccountNature
    debit_total: Decimal
    credit_total: Decimal
    ending_balance: Decimal


@dataclass(frozen=True)
class TrialBalance:
    """Debit and credit activity of all categories for one period."""

    period: str
    rows: list[TrialBalanceRow]
    total_debits: Decimal
    total_credits: Decimal

    @property
    def is_balanced(self) -> bool:
        return self.total_debits == self.total_credits


@dataclass(frozen=True)
class LevelBalance:
    """Balance of all active categories sharing a level and nature."""

    level: int
    account_nature: AccountNature
    category_count: int
    total_balance: Decimal


@dataclass(frozen=True)
class RawTransaction:
    """Financial event submitted by an upstream module."""

    amount: Decimal
    date: date
    transaction_type: TransactionType
    source_module: str
    source_id: str
    description: str


@dataclass(frozen=True)
class SourceTransaction:
    """Recorded raw transaction and the entry generated for it."""

    id: int
    source_module: str
    source_id: str
    transaction_type: TransactionType
    date: date
    amount: Decimal
    description: str
    category_id: int
    entry_id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass
class SourceTransactionFilter:
    """Optional filters for listing recorded source transactions."""

    search: Optional[str] = None
    category_id: Optional[int] = None
    transaction_type: Optional[TransactionType] = None
    source_module: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


@dataclass(frozen=True)
class SourceTransactionPage:
    """One page of recorded source transactions, newest first."""

    transactions: list[SourceTransaction]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return -(-self.total // self.page_size)


@dataclass(frozen=True)
class ClassificationRule:
    """Default category for one (source module, transaction type) pair.

    ``category_code`` receives the resolved side of the entry (credit for
    income, debit otherwise); ``offset_category_code`` receives the other.
    """

    source_module: str
    transaction_type: TransactionType
    category_code: str
    offset_category_code: str


@dataclass(frozen=True)
class FixedAsset:
    """Depreciable resource."""

    id: int
    name: str
    category_id: int
    acquisition_date: date
    acquisition_cost: Decimal
    useful_life_months: int
    residual_value: Decimal
    depreciation_method: str
    accumulated_depreciation: Decimal
    net_book_value: Decimal
    status: AssetStatus
    location: Optional[str] = None
    description: Optional[str] = None
    disposal_date: Optional[date] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class MonthlyDepreciation:
    """Depreciation charged for one asset in one period."""

    id: int
    asset_id: int
    period: str
    monthly_amount: Decimal
    accumulated_to_date: Decimal
    remaining_value: Decimal
    entry_id: Optional[int] = None
    created_at: Optional[datetime] = None


@dataclass
class DepreciationRunResult:
    """Outcome of one depreciation batch."""

    charges: list[MonthlyDepreciation] = field(default_factory=list)
    skipped: dict[int, str] = field(default_factory=dict)

    @property
    def total_charged(self) -> Decimal:
        return sum((c.monthly_amount for c in self.charges), ZERO)


@dataclass(frozen=True)
class Setting:
    """Persisted accounting setting."""

    key: str
    value: str
    data_type: SettingType
    category: str
    description: Optional[str] = None
    is_active: bool = True
