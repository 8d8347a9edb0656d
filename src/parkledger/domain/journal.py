"""Journal engine: the draft/posted/void state machine for entries."""

import logging
from datetime import date, datetime, UTC
from decimal import Decimal, InvalidOperation
from typing import Optional

from parkledger.database.base import Database
from parkledger.domain.entities import (
    ZERO,
    EntryDetail,
    EntryLine,
    EntryStatus,
    JournalEntry,
)
from parkledger.domain.errors import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    PersistenceError,
    UnbalancedEntryError,
    ValidationError,
    category_id_not_found,
    category_inactive,
    entry_not_found,
    invalid_transition,
    unbalanced_entry,
)
from parkledger.domain.ledger import BalanceLedgerService
from parkledger.domain.numbering import format_entry_number
from parkledger.domain.settings import SettingsService
from parkledger.utils.period import parse_period, period_end, period_of, period_start

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

# Attempts for a draft whose entry number allocation lost a race.
MAX_NUMBERING_ATTEMPTS = 3


def _cents(amount: Decimal, what: str) -> Decimal:
    try:
        amount = Decimal(amount)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise ValidationError(f"{what} {amount!r} is not an amount") from e
    if not amount.is_finite():
        raise ValidationError(f"{what} must be a finite amount")
    if amount != amount.quantize(CENT):
        raise ValidationError(f"{what} {amount} has more than 2 decimal places")
    return amount.quantize(CENT)


class JournalService:
    """Service for creating, posting, voiding and reversing journal entries."""

    def __init__(
        self,
        db: Database,
        ledger: Optional[BalanceLedgerService] = None,
        settings: Optional[SettingsService] = None,
    ):
        """Initialize journal service.

        Args:
            db: Database instance
            ledger: Balance ledger receiving posted lines
            settings: Settings service providing the entry number format
        """
        self.db = db
        self.ledger = ledger or BalanceLedgerService(db)
        self.settings = settings or SettingsService(db)

    def _validate_lines(self, lines: list[EntryLine]) -> list[EntryLine]:
        if len(lines) < 2:
            raise ValidationError("A journal entry needs at least two lines")

        validated = []
        for index, line in enumerate(lines, start=1):
            debit = _cents(line.debit, f"Line {index} debit")
            credit = _cents(line.credit, f"Line {index} credit")
            if debit < 0 or credit < 0:
                raise ValidationError(f"Line {index} has a negative amount")
            if (debit > 0) == (credit > 0):
                raise ValidationError(
                    f"Line {index} must have exactly one of debit or credit"
                )
            self._ensure_postable(line.category_id)
            validated.append(
                EntryLine(
                    category_id=line.category_id,
                    debit=debit,
                    credit=credit,
                    description=line.description,
                )
            )
        return validated

    def _ensure_postable(self, category_id: int) -> None:
        category = self.db.get_category(category_id)
        if category is None:
            raise ValidationError(category_id_not_found(category_id))
        if not category.is_active:
            raise ValidationError(category_inactive(category.code))

    def _get(self, entry_id: int) -> JournalEntry:
        entry = self.db.get_journal_entry(entry_id)
        if entry is None:
            raise NotFoundError(entry_not_found(entry_id))
        return entry

    def create_draft(
        self,
        entry_date: date,
        description: str,
        lines: list[EntryLine],
        reference: Optional[str] = None,
        source_transaction_id: Optional[int] = None,
        reversal_of_id: Optional[int] = None,
    ) -> JournalEntry:
        """Create a draft entry and allocate its entry number.

        Args:
            entry_date: Accounting date; its month selects the number sequence
            description: Entry description
            lines: Debit and credit lines
            reference: Optional external reference
            source_transaction_id: Raw transaction this entry was generated from
            reversal_of_id: Entry this draft reverses

        Returns:
            The draft entry

        Raises:
            ValidationError: If a line is malformed or targets an unknown or
                inactive category
        """
        if not isinstance(entry_date, date):
            raise ValidationError(f"Entry date must be a date, got {entry_date!r}")
        if not description or not description.strip():
            raise ValidationError("Entry description is required")
        lines = self._validate_lines(lines)
        total_debits = sum((line.debit for line in lines), ZERO)
        total_credits = sum((line.credit for line in lines), ZERO)
        template = self.settings.entry_number_format()

        # A conflict inside an outer unit of work poisons that unit, so only
        # standalone drafts retry.
        attempts = 1 if self.db.in_transaction() else MAX_NUMBERING_ATTEMPTS
        for attempt in range(1, attempts + 1):
            try:
                with self.db.transaction():
                    sequence = self.db.next_entry_sequence(period_of(entry_date))
                    entry_number = format_entry_number(template, entry_date, sequence)
                    entry_id = self.db.create_journal_entry(
                        entry_number=entry_number,
                        date=entry_date,
                        description=description.strip(),
                        total_amount=total_debits,
                        is_balanced=total_debits == total_credits,
                        lines=lines,
                        reference=reference,
                        source_transaction_id=source_transaction_id,
                        reversal_of_id=reversal_of_id,
                    )
                    entry = self._get(entry_id)
            except PersistenceError:
                if attempt == attempts:
                    raise
                logger.warning(
                    "Entry number conflict for %s, retrying (attempt %d of %d)",
                    period_of(entry_date),
                    attempt,
                    attempts,
                )
                continue
            logger.info("Created draft entry %s", entry.entry_number)
            return entry

    def amend_draft(
        self,
        entry_id: int,
        lines: list[EntryLine],
        description: Optional[str] = None,
    ) -> JournalEntry:
        """Replace the lines of a draft entry.

        Raises:
            InvalidTransitionError: If the entry is no longer a draft
        """
        if description is not None and not description.strip():
            raise ValidationError("Entry description cannot be empty")
        lines = self._validate_lines(lines)
        total_debits = sum((line.debit for line in lines), ZERO)
        total_credits = sum((line.credit for line in lines), ZERO)
        with self.db.transaction():
            entry = self._get(entry_id)
            if entry.status != EntryStatus.DRAFT:
                raise InvalidTransitionError(
                    invalid_transition(entry.entry_number, entry.status.value, "amend")
                )
            self.db.replace_entry_details(
                entry_id,
                lines,
                total_amount=total_debits,
                is_balanced=total_debits == total_credits,
                description=description.strip() if description is not None else None,
            )
            return self._get(entry_id)

    def post(self, entry_id: int) -> JournalEntry:
        """Post a draft entry and apply its lines to the balance ledger.

        The status change and every ledger update commit together or not at
        all.

        Raises:
            UnbalancedEntryError: If debits differ from credits; the entry
                stays in draft
            InvalidTransitionError: If the entry is not a draft
            ValidationError: If a line's category was deactivated
        """
        with self.db.transaction():
            entry = self._get(entry_id)
            if entry.status != EntryStatus.DRAFT:
                raise InvalidTransitionError(
                    invalid_transition(entry.entry_number, entry.status.value, "post")
                )

            details = self.db.get_entry_details(entry_id)
            debits = sum((d.debit_amount for d in details), ZERO)
            credits = sum((d.credit_amount for d in details), ZERO)
            if debits != credits:
                raise UnbalancedEntryError(
                    unbalanced_entry(entry.entry_number, debits, credits)
                )
            for detail in details:
                self._ensure_postable(detail.category_id)

            if not self.db.transition_entry_status(
                entry_id, EntryStatus.DRAFT, EntryStatus.POSTED, posted_at=datetime.now(UTC)
            ):
                current = self._get(entry_id)
                raise InvalidTransitionError(
                    invalid_transition(current.entry_number, current.status.value, "post")
                )

            period = period_of(entry.date)
            for detail in details:
                self.ledger.apply_posting(
                    detail.category_id, period, detail.debit_amount, detail.credit_amount
                )
            posted = self._get(entry_id)

        logger.info("Posted entry %s (%s)", posted.entry_number, posted.total_amount)
        return posted

    def void(self, entry_id: int) -> JournalEntry:
        """Void a draft entry. Its entry number stays consumed.

        Raises:
            InvalidTransitionError: If the entry is posted or already void
        """
        with self.db.transaction():
            entry = self._get(entry_id)
            if entry.status != EntryStatus.DRAFT or not self.db.transition_entry_status(
                entry_id, EntryStatus.DRAFT, EntryStatus.VOID
            ):
                current = self._get(entry_id)
                raise InvalidTransitionError(
                    invalid_transition(current.entry_number, current.status.value, "void")
                )
            voided = self._get(entry_id)
        logger.info("Voided entry %s", voided.entry_number)
        return voided

    def reverse(self, entry_id: int, reversal_date: Optional[date] = None) -> JournalEntry:
        """Post a new entry that swaps the debits and credits of a posted entry.

        Args:
            entry_id: Posted entry to reverse
            reversal_date: Date of the reversing entry (defaults to the
                original entry's date)

        Returns:
            The posted reversing entry

        Raises:
            InvalidTransitionError: If the entry is not posted
            ConflictError: If the entry was already reversed
        """
        with self.db.transaction():
            entry = self._get(entry_id)
            if entry.status != EntryStatus.POSTED:
                raise InvalidTransitionError(
                    invalid_transition(entry.entry_number, entry.status.value, "reverse")
                )
            existing = self.db.get_reversal_of(entry_id)
            if existing is not None:
                raise ConflictError(
                    f"Entry {entry.entry_number} was already reversed by "
                    f"{existing.entry_number}"
                )

            lines = [
                EntryLine(
                    category_id=detail.category_id,
                    debit=detail.credit_amount,
                    credit=detail.debit_amount,
                    description=detail.description,
                )
                for detail in self.db.get_entry_details(entry_id)
            ]
            draft = self.create_draft(
                reversal_date or entry.date,
                f"Reversal of {entry.entry_number}: {entry.description}",
                lines,
                reference=entry.entry_number,
                reversal_of_id=entry.id,
            )
            reversal = self.post(draft.id)

        logger.info("Reversed entry %s with %s", entry.entry_number, reversal.entry_number)
        return reversal

    def get_entry(self, entry_id: int) -> JournalEntry:
        """Get an entry by ID.

        Raises:
            NotFoundError: If the entry does not exist
        """
        return self._get(entry_id)

    def get_entry_by_number(self, entry_number: str) -> JournalEntry:
        """Get an entry by its entry number."""
        entry = self.db.get_journal_entry_by_number(entry_number)
        if entry is None:
            raise NotFoundError(f"Journal entry '{entry_number}' not found")
        return entry

    def list_entries(
        self,
        status: Optional[EntryStatus] = None,
        period: Optional[str] = None,
    ) -> list[JournalEntry]:
        """List entries ordered by date and number, optionally for one period."""
        start_date = end_date = None
        if period is not None:
            try:
                period = parse_period(period)
            except ValueError as e:
                raise ValidationError(str(e)) from e
            start_date, end_date = period_start(period), period_end(period)
        return self.db.list_journal_entries(
            status=status, start_date=start_date, end_date=end_date
        )

    def get_lines(self, entry_id: int) -> list[EntryDetail]:
        """Get the lines of an entry in order."""
        self._get(entry_id)
        return self.db.get_entry_details(entry_id)
