"""SQLAlchemy models for parkledger database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()

MONEY = Numeric(15, 2)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Category(Base):
    """Chart-of-accounts category with hierarchical structure."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    code = Column(String(20), unique=True, nullable=False)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    level = Column(Integer, nullable=False, index=True)
    parent_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)
    fiscal_code = Column(String(20), nullable=True)
    account_nature = Column(String(20), nullable=False)
    full_path = Column(String(500), nullable=False, index=True)
    sort_order = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    # Relationships
    parent = relationship("Category", remote_side=[id], backref="children")


class SourceTransaction(Base):
    """Raw transaction recorded from an upstream module."""

    __tablename__ = "source_transactions"

    id = Column(Integer, primary_key=True)
    source_module = Column(String(50), nullable=False)
    source_id = Column(String(100), nullable=False)
    transaction_type = Column(String(20), nullable=False)
    date = Column(Date, nullable=False, index=True)
    amount = Column(MONEY, nullable=False)
    description = Column(Text, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("source_module", "source_id", name="uq_source_module_id"),
    )


class JournalEntry(Base):
    """Journal entry header."""

    __tablename__ = "journal_entries"

    id = Column(Integer, primary_key=True)
    entry_number = Column(String(50), unique=True, nullable=False)
    date = Column(Date, nullable=False, index=True)
    description = Column(Text, nullable=False)
    reference = Column(String(100), nullable=True)
    total_amount = Column(MONEY, nullable=False)
    is_balanced = Column(Boolean, default=False, nullable=False)
    status = Column(String(20), default="draft", nullable=False)
    source_transaction_id = Column(Integer, nullable=True, index=True)
    reversal_of_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    posted_at = Column(DateTime, nullable=True)

    # Relationships
    details = relationship(
        "EntryDetail",
        back_populates="entry",
        cascade="all, delete-orphan",
        order_by="EntryDetail.sort_order",
    )


class EntryDetail(Base):
    """Journal entry line."""

    __tablename__ = "entry_details"

    id = Column(Integer, primary_key=True)
    entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    description = Column(Text, nullable=True)
    debit_amount = Column(MONEY, default=0, nullable=False)
    credit_amount = Column(MONEY, default=0, nullable=False)
    sort_order = Column(Integer, default=0, nullable=False)

    # Relationships
    entry = relationship("JournalEntry", back_populates="details")
    category = relationship("Category")


class AccountBalance(Base):
    """Materialized balance per category and period."""

    __tablename__ = "account_balances"

    id = Column(Integer, primary_key=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    period = Column(String(7), nullable=False, index=True)
    beginning_balance = Column(MONEY, default=0, nullable=False)
    debit_total = Column(MONEY, default=0, nullable=False)
    credit_total = Column(MONEY, default=0, nullable=False)
    ending_balance = Column(MONEY, default=0, nullable=False)
    last_updated = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("category_id", "period", name="uq_balance_category_period"),
    )


class EntrySequence(Base):
    """Per-period counter for entry numbers."""

    __tablename__ = "entry_sequences"

    id = Column(Integer, primary_key=True)
    period = Column(String(7), unique=True, nullable=False)
    next_value = Column(Integer, default=1, nullable=False)


class FixedAsset(Base):
    """Depreciable fixed asset."""

    __tablename__ = "fixed_assets"

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    acquisition_date = Column(Date, nullable=False)
    acquisition_cost = Column(MONEY, nullable=False)
    useful_life_months = Column(Integer, nullable=False)
    residual_value = Column(MONEY, default=0, nullable=False)
    depreciation_method = Column(String(20), default="straight_line", nullable=False)
    accumulated_depreciation = Column(MONEY, default=0, nullable=False)
    net_book_value = Column(MONEY, nullable=False)
    status = Column(String(20), default="active", nullable=False)
    location = Column(String(200), nullable=True)
    disposal_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    # Relationships
    depreciations = relationship(
        "MonthlyDepreciation", back_populates="asset", cascade="all, delete-orphan"
    )


class MonthlyDepreciation(Base):
    """Depreciation charged for one asset in one period."""

    __tablename__ = "monthly_depreciation"

    id = Column(Integer, primary_key=True)
    asset_id = Column(Integer, ForeignKey("fixed_assets.id"), nullable=False)
    period = Column(String(7), nullable=False)
    monthly_amount = Column(MONEY, nullable=False)
    accumulated_to_date = Column(MONEY, nullable=False)
    remaining_value = Column(MONEY, nullable=False)
    entry_id = Column(Integer, ForeignKey("journal_entries.id"), nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("asset_id", "period", name="uq_depreciation_asset_period"),
    )

    # Relationships
    asset = relationship("FixedAsset", back_populates="depreciations")


class AccountingSetting(Base):
    """Key/value accounting configuration."""

    __tablename__ = "accounting_settings"

    id = Column(Integer, primary_key=True)
    key = Column(String(100), unique=True, nullable=False)
    value = Column(Text, nullable=False)
    data_type = Column(String(20), default="string", nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(50), default="general", nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": 30}
    engine = create_engine(database_url, echo=False, connect_args=connect_args)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
