"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the schema can change without
touching the services. Monetary values are normalized to two decimal places
on the way out.
"""

from decimal import Decimal
from typing import Optional

from parkledger.domain import entities as domain
from parkledger.database.models import (
    Category as ORMCategory,
    SourceTransaction as ORMSourceTransaction,
    JournalEntry as ORMJournalEntry,
    EntryDetail as ORMEntryDetail,
    AccountBalance as ORMAccountBalance,
    FixedAsset as ORMFixedAsset,
    MonthlyDepreciation as ORMMonthlyDepreciation,
    AccountingSetting as ORMAccountingSetting,
)

CENT = Decimal("0.01")


def to_money(value: Optional[Decimal | int | str]) -> Decimal:
    """Normalize a stored amount to a two-place Decimal."""
    if value is None:
        return domain.ZERO
    return Decimal(value).quantize(CENT)


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        code=orm_category.code,
        name=orm_category.name,
        level=orm_category.level,
        parent_id=orm_category.parent_id,
        account_nature=domain.AccountNature(orm_category.account_nature),
        full_path=orm_category.full_path,
        description=orm_category.description,
        fiscal_code=orm_category.fiscal_code,
        sort_order=orm_category.sort_order or 0,
        is_active=bool(orm_category.is_active),
        created_at=orm_category.created_at,
    )


def source_transaction_to_domain(
    orm_txn: ORMSourceTransaction,
) -> domain.SourceTransaction:
    """Convert SQLAlchemy SourceTransaction model to domain entity."""
    return domain.SourceTransaction(
        id=orm_txn.id,
        source_module=orm_txn.source_module,
        source_id=orm_txn.source_id,
        transaction_type=domain.TransactionType(orm_txn.transaction_type),
        date=orm_txn.date,
        amount=to_money(orm_txn.amount),
        description=orm_txn.description,
        category_id=orm_txn.category_id,
        entry_id=orm_txn.entry_id,
        created_at=orm_txn.created_at,
    )


def journal_entry_to_domain(orm_entry: ORMJournalEntry) -> domain.JournalEntry:
    """Convert SQLAlchemy JournalEntry model to domain JournalEntry entity."""
    return domain.JournalEntry(
        id=orm_entry.id,
        entry_number=orm_entry.entry_number,
        date=orm_entry.date,
        description=orm_entry.description,
        total_amount=to_money(orm_entry.total_amount),
        is_balanced=bool(orm_entry.is_balanced),
        status=domain.EntryStatus(orm_entry.status),
        reference=orm_entry.reference,
        source_transaction_id=orm_entry.source_transaction_id,
        reversal_of_id=orm_entry.reversal_of_id,
        created_at=orm_entry.created_at,
        posted_at=orm_entry.posted_at,
    )


def entry_detail_to_domain(orm_detail: ORMEntryDetail) -> domain.EntryDetail:
    """Convert SQLAlchemy EntryDetail model to domain EntryDetail entity."""
    return domain.EntryDetail(
        id=orm_detail.id,
        entry_id=orm_detail.entry_id,
        category_id=orm_detail.category_id,
        debit_amount=to_money(orm_detail.debit_amount),
        credit_amount=to_money(orm_detail.credit_amount),
        sort_order=orm_detail.sort_order or 0,
        description=orm_detail.description,
    )


def account_balance_to_domain(orm_balance: ORMAccountBalance) -> domain.AccountBalance:
    """Convert SQLAlchemy AccountBalance model to domain AccountBalance entity."""
    return domain.AccountBalance(
        id=orm_balance.id,
        category_id=orm_balance.category_id,
        period=orm_balance.period,
        beginning_balance=to_money(orm_balance.beginning_balance),
        debit_total=to_money(orm_balance.debit_total),
        credit_total=to_money(orm_balance.credit_total),
        ending_balance=to_money(orm_balance.ending_balance),
        last_updated=orm_balance.last_updated,
    )


def fixed_asset_to_domain(orm_asset: ORMFixedAsset) -> domain.FixedAsset:
    """Convert SQLAlchemy FixedAsset model to domain FixedAsset entity."""
    return domain.FixedAsset(
        id=orm_asset.id,
        name=orm_asset.name,
        category_id=orm_asset.category_id,
        acquisition_date=orm_asset.acquisition_date,
        acquisition_cost=to_money(orm_asset.acquisition_cost),
        useful_life_months=orm_asset.useful_life_months,
        residual_value=to_money(orm_asset.residual_value),
        depreciation_method=orm_asset.depreciation_method,
        accumulated_depreciation=to_money(orm_asset.accumulated_depreciation),
        net_book_value=to_money(orm_asset.net_book_value),
        status=domain.AssetStatus(orm_asset.status),
        location=orm_asset.location,
        description=orm_asset.description,
        disposal_date=orm_asset.disposal_date,
        created_at=orm_asset.created_at,
    )


def monthly_depreciation_to_domain(
    orm_row: ORMMonthlyDepreciation,
) -> domain.MonthlyDepreciation:
    """Convert SQLAlchemy MonthlyDepreciation model to domain entity."""
    return domain.MonthlyDepreciation(
        id=orm_row.id,
        asset_id=orm_row.asset_id,
        period=orm_row.period,
        monthly_amount=to_money(orm_row.monthly_amount),
        accumulated_to_date=to_money(orm_row.accumulated_to_date),
        remaining_value=to_money(orm_row.remaining_value),
        entry_id=orm_row.entry_id,
        created_at=orm_row.created_at,
    )


def setting_to_domain(orm_setting: ORMAccountingSetting) -> domain.Setting:
    """Convert SQLAlchemy AccountingSetting model to domain Setting entity."""
    return domain.Setting(
        key=orm_setting.key,
        value=orm_setting.value,
        data_type=domain.SettingType(orm_setting.data_type),
        category=orm_setting.category,
        description=orm_setting.description,
        is_active=bool(orm_setting.is_active),
    )
