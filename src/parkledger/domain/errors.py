"""Shared domain error messages and error types."""

from decimal import Decimal


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling. ``kind`` is the stable name
    reported to callers alongside the message.
    """

    kind = "DomainError"


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""

    kind = "ValidationError"


class NotFoundError(DomainError):
    """Requested domain entity or path does not exist."""

    kind = "NotFound"


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""

    kind = "Conflict"


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""

    kind = "Dependency"


class InvalidHierarchyError(DomainError):
    """Category placement would break the chart-of-accounts tree rules."""

    kind = "InvalidHierarchy"


class InvalidTransitionError(DomainError):
    """Journal entry state change not allowed from its current status."""

    kind = "InvalidTransition"


class UnbalancedEntryError(DomainError):
    """Journal entry debits and credits differ at post time."""

    kind = "UnbalancedEntry"


class UnmappedTransactionError(DomainError):
    """No classification rule for a source module and transaction type."""

    kind = "UnmappedTransaction"


class DepreciationError(DomainError):
    """A single asset could not be depreciated for a period."""

    kind = "DepreciationError"


class PersistenceError(Exception):
    """Storage-layer failure (constraint violation, conflict, lost connection).

    Idempotent operations (classification, depreciation) may be retried.
    A failed post must be inspected before retrying.
    """

    kind = "PersistenceError"


def category_not_found(code: str) -> str:
    """Return message for missing category by code."""
    return f"Category '{code}' not found"


def category_inactive(code: str) -> str:
    """Return message for postings against an inactive category."""
    return f"Category '{code}' is inactive and cannot receive postings"


def category_id_not_found(category_id: int) -> str:
    """Return message for missing category by ID."""
    return f"Category {category_id} not found"


def entry_not_found(entry_id: int) -> str:
    """Return message for missing journal entry."""
    return f"Journal entry {entry_id} not found"


def asset_not_found(asset_id: int) -> str:
    """Return message for missing fixed asset."""
    return f"Fixed asset {asset_id} not found"


def asset_depreciated(asset_id: int, action: str) -> str:
    """Return message for edits blocked by charged depreciation."""
    return f"Fixed asset {asset_id} has depreciation charges; cannot {action}"


def setting_not_found(key: str) -> str:
    """Return message for missing accounting setting."""
    return f"Setting '{key}' not found"


def invalid_transition(entry_number: str, current: str, action: str) -> str:
    """Return message for an illegal journal entry status change."""
    return f"Cannot {action} entry {entry_number}: status is '{current}'"


def unbalanced_entry(entry_number: str, debits: Decimal, credits: Decimal) -> str:
    """Return message for a journal entry whose sides differ."""
    return (
        f"Entry {entry_number} is unbalanced: debits {debits} != credits {credits}"
    )


def unmapped_transaction(source_module: str, transaction_type: str) -> str:
    """Return message for a source/type pair with no classification rule."""
    return (
        f"No category mapping for source module '{source_module}' "
        f"and transaction type '{transaction_type}'"
    )


def category_delete_blocked(code: str, child_count: int, line_count: int) -> str:
    """Return message when a category has children or posted lines."""
    parts = []
    if child_count > 0:
        parts.append(f"{child_count} subcategor{'ies' if child_count != 1 else 'y'}")
    if line_count > 0:
        parts.append(f"{line_count} journal line{'s' if line_count != 1 else ''}")
    return f"Cannot delete category '{code}': it has {', '.join(parts)}."
