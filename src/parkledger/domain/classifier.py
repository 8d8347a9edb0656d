"""Transaction classifier: raw upstream transactions to balanced journal entries."""

import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional

from parkledger.database.base import Database
from parkledger.domain.category import CategoryService
from parkledger.domain.entities import (
    ClassificationRule,
    EntryLine,
    JournalEntry,
    RawTransaction,
    SourceTransactionFilter,
    SourceTransactionPage,
    TransactionType,
)
from parkledger.domain.errors import (
    PersistenceError,
    UnmappedTransactionError,
    ValidationError,
    unmapped_transaction,
)
from parkledger.domain.journal import JournalService
from parkledger.domain.settings import SettingsService

logger = logging.getLogger(__name__)

INCOME = TransactionType.INCOME
EXPENSE = TransactionType.EXPENSE
TRANSFER = TransactionType.TRANSFER
DEPRECIATION = TransactionType.DEPRECIATION

DEFAULT_CLASSIFICATION_RULES = [
    ClassificationRule("assets", EXPENSE, "F-1-3", "A-1-1"),
    ClassificationRule("assets", DEPRECIATION, "F-1-4", "A-2-4"),
    ClassificationRule("assets", INCOME, "D-2", "A-1-1"),
    ClassificationRule("concessions", INCOME, "D-1-2", "A-1-2"),
    ClassificationRule("concessions", EXPENSE, "F-1-1", "A-1-1"),
    ClassificationRule("concessions", TRANSFER, "A-1-1", "A-1-2"),
    ClassificationRule("hr", EXPENSE, "F-1-5", "B-1-2"),
    ClassificationRule("events", INCOME, "D-1-1", "A-1-1"),
    ClassificationRule("events", EXPENSE, "F-1-2", "A-1-1"),
    ClassificationRule("sponsorships", INCOME, "D-1-3", "A-1-2"),
]


class TransactionClassifier:
    """Classifies raw transactions into posted two-line journal entries.

    Income credits the rule's category and debits its offset (cash or a
    receivable). Every other type debits the rule's category and credits the
    offset.
    """

    def __init__(
        self,
        db: Database,
        rules: Optional[Iterable[ClassificationRule]] = None,
        journal: Optional[JournalService] = None,
        categories: Optional[CategoryService] = None,
        settings: Optional[SettingsService] = None,
    ):
        self.db = db
        self.settings = settings or SettingsService(db)
        self.journal = journal or JournalService(db, settings=self.settings)
        self.categories = categories or CategoryService(db)
        self.rules: dict[tuple[str, TransactionType], ClassificationRule] = {}
        for rule in DEFAULT_CLASSIFICATION_RULES if rules is None else rules:
            key = (rule.source_module, rule.transaction_type)
            if key in self.rules:
                raise ValidationError(
                    f"Duplicate classification rule for {rule.source_module}/"
                    f"{rule.transaction_type.value}"
                )
            self.rules[key] = rule

    def resolve_rule(
        self, source_module: str, transaction_type: TransactionType
    ) -> ClassificationRule:
        """Get the rule for a source module and transaction type.

        Raises:
            UnmappedTransactionError: If no rule covers the pair
        """
        rule = self.rules.get((source_module, transaction_type))
        if rule is None:
            raise UnmappedTransactionError(
                unmapped_transaction(source_module, transaction_type.value)
            )
        return rule

    @staticmethod
    def _validate(raw: RawTransaction) -> RawTransaction:
        if not raw.source_module or not raw.source_id:
            raise ValidationError("Source module and source ID are required")
        if not raw.description or not raw.description.strip():
            raise ValidationError("Transaction description is required")
        if not isinstance(raw.date, date):
            raise ValidationError(f"Transaction date must be a date, got {raw.date!r}")
        try:
            amount = Decimal(raw.amount)
        except (InvalidOperation, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid transaction amount {raw.amount!r}") from e
        if not amount.is_finite() or amount <= 0:
            raise ValidationError(f"Transaction amount must be positive, got {raw.amount}")
        try:
            transaction_type = TransactionType(raw.transaction_type)
        except ValueError as e:
            raise ValidationError(
                f"Unknown transaction type '{raw.transaction_type}'"
            ) from e
        return RawTransaction(
            amount=amount,
            date=raw.date,
            transaction_type=transaction_type,
            source_module=raw.source_module,
            source_id=str(raw.source_id),
            description=raw.description.strip(),
        )

    def _existing_entry(self, raw: RawTransaction) -> Optional[JournalEntry]:
        recorded = self.db.get_source_transaction(raw.source_module, raw.source_id)
        if recorded is None or recorded.entry_id is None:
            return None
        return self.journal.get_entry(recorded.entry_id)

    def submit_transaction(self, raw: RawTransaction) -> JournalEntry:
        """Turn a raw transaction into a journal entry, once.

        Submitting the same (source module, source ID) again returns the entry
        created the first time, unchanged.

        Args:
            raw: Transaction reported by an upstream module

        Returns:
            The generated entry, posted unless automatic entry generation is
            disabled

        Raises:
            UnmappedTransactionError: If no rule covers the module and type
            NotFoundError: If a rule's category is missing or inactive
        """
        raw = self._validate(raw)
        existing = self._existing_entry(raw)
        if existing is not None:
            logger.debug(
                "Transaction %s:%s already classified as %s",
                raw.source_module,
                raw.source_id,
                existing.entry_number,
            )
            return existing

        rule = self.resolve_rule(raw.source_module, raw.transaction_type)
        category = self.categories.resolve(rule.category_code)
        offset = self.categories.resolve(rule.offset_category_code)
        if raw.transaction_type == INCOME:
            debit_category, credit_category = offset, category
        else:
            debit_category, credit_category = category, offset
        lines = [
            EntryLine(category_id=debit_category.id, debit=raw.amount),
            EntryLine(category_id=credit_category.id, credit=raw.amount),
        ]

        try:
            with self.db.transaction():
                source_transaction_id = self.db.create_source_transaction(
                    source_module=raw.source_module,
                    source_id=raw.source_id,
                    transaction_type=raw.transaction_type,
                    date=raw.date,
                    amount=raw.amount,
                    description=raw.description,
                    category_id=category.id,
                )
                entry = self.journal.create_draft(
                    raw.date,
                    raw.description,
                    lines,
                    reference=f"{raw.source_module}:{raw.source_id}",
                    source_transaction_id=source_transaction_id,
                )
                self.db.set_source_transaction_entry(source_transaction_id, entry.id)
                if self.settings.auto_generate_entries():
                    entry = self.journal.post(entry.id)
        except PersistenceError:
            if self.db.in_transaction():
                raise
            # Another worker may have recorded the same transaction first.
            existing = self._existing_entry(raw)
            if existing is None:
                raise
            return existing

        logger.info(
            "Classified %s:%s (%s %s) as %s",
            raw.source_module,
            raw.source_id,
            raw.transaction_type.value,
            raw.amount,
            entry.entry_number,
        )
        return entry

    def list_transactions(
        self,
        transaction_filter: Optional[SourceTransactionFilter] = None,
        page: int = 1,
        page_size: int = 10,
    ) -> SourceTransactionPage:
        """List recorded source transactions one page at a time, newest first.

        Raises:
            ValidationError: If the page or page size is below one, or the
                date range is inverted
        """
        if page < 1 or page_size < 1:
            raise ValidationError("Page and page size must be at least 1")
        f = transaction_filter
        if f and f.start_date and f.end_date and f.start_date > f.end_date:
            raise ValidationError("Start date must not be after end date")
        return SourceTransactionPage(
            transactions=self.db.list_source_transactions(
                f, limit=page_size, offset=(page - 1) * page_size
            ),
            total=self.db.count_source_transactions(f),
            page=page,
            page_size=page_size,
        )
