"""Tests for the database layer's unit of work and sequences."""

import pytest
from datetime import date
from decimal import Decimal

from parkledger.database.base import Database
from parkledger.domain.entities import AccountNature, EntryLine, EntryStatus
from parkledger.domain.errors import PersistenceError


def test_sqlalchemy_database_implements_interface(temp_db):
    """Test that the SQLAlchemy database is a Database."""
    assert isinstance(temp_db, Database)


def test_transaction_rolls_back_on_error(temp_db):
    """Test that a failing unit of work leaves nothing behind."""
    with pytest.raises(RuntimeError):
        with temp_db.transaction():
            temp_db.create_category("X", "Temporal", 1, None, AccountNature.DEBIT, "X")
            raise RuntimeError("boom")

    assert temp_db.get_category_by_code("X") is None
    assert temp_db.in_transaction() is False


def test_nested_transaction_joins_outer(temp_db):
    """Test that inner blocks commit only with the outer block."""
    with pytest.raises(RuntimeError):
        with temp_db.transaction():
            with temp_db.transaction():
                temp_db.create_category("X", "Temporal", 1, None, AccountNature.DEBIT, "X")
            assert temp_db.get_category_by_code("X") is not None
            raise RuntimeError("boom")

    assert temp_db.get_category_by_code("X") is None


def test_unique_violation_is_persistence_error(temp_db):
    """Test that storage constraint failures surface as PersistenceError."""
    temp_db.create_category("X", "Temporal", 1, None, AccountNature.DEBIT, "X")
    with pytest.raises(PersistenceError):
        temp_db.create_category("X", "Otra", 1, None, AccountNature.DEBIT, "X")

    # The session is usable again after the failure.
    assert temp_db.get_category_by_code("X").name == "Temporal"


def test_entry_sequences_per_period(temp_db):
    """Test that sequences are independent per period and never reused."""
    assert temp_db.next_entry_sequence("2024-03") == 1
    assert temp_db.next_entry_sequence("2024-03") == 2
    assert temp_db.next_entry_sequence("2024-04") == 1

    with pytest.raises(RuntimeError):
        with temp_db.transaction():
            assert temp_db.next_entry_sequence("2024-03") == 3
            raise RuntimeError("boom")

    assert temp_db.next_entry_sequence("2024-03") == 3


def test_transition_entry_status_compare_and_set(temp_db, seeded):
    """Test that a status transition only applies from the expected status."""
    entry_id = temp_db.create_journal_entry(
        entry_number="T-1",
        date=date(2024, 3, 1),
        description="Prueba",
        total_amount=Decimal("1.00"),
        is_balanced=True,
        lines=[
            EntryLine(category_id=seeded["A-1-1"], debit=Decimal("1.00")),
            EntryLine(category_id=seeded["D-1-1"], credit=Decimal("1.00")),
        ],
    )

    assert temp_db.transition_entry_status(entry_id, EntryStatus.DRAFT, EntryStatus.VOID) is True
    assert temp_db.transition_entry_status(entry_id, EntryStatus.DRAFT, EntryStatus.POSTED) is False
    assert temp_db.get_journal_entry(entry_id).status == EntryStatus.VOID
