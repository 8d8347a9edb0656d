"""Tests for the transaction classifier."""

import pytest
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from decimal import Decimal

from parkledger.cli.main import cli
from parkledger.domain.classifier import DEFAULT_CLASSIFICATION_RULES, TransactionClassifier
from parkledger.domain.entities import (
    ClassificationRule,
    EntryStatus,
    RawTransaction,
    SourceTransactionFilter,
    TransactionType,
)
from parkledger.domain.errors import (
    NotFoundError,
    UnmappedTransactionError,
    ValidationError,
)


def concession_fee(source_id="C-42", amount="1500.00"):
    return RawTransaction(
        amount=Decimal(amount),
        date=date(2024, 3, 31),
        transaction_type=TransactionType.INCOME,
        source_module="concessions",
        source_id=source_id,
        description="Cuota mensual de concesión",
    )


def test_income_credits_resolved_category(classifier, journal_service, seeded):
    """Test that income debits the offset and credits the income category."""
    entry = classifier.submit_transaction(concession_fee())

    assert entry.status == EntryStatus.POSTED
    assert entry.reference == "concessions:C-42"
    lines = journal_service.get_lines(entry.id)
    assert lines[0].category_id == seeded["A-1-2"]
    assert lines[0].debit_amount == Decimal("1500.00")
    assert lines[1].category_id == seeded["D-1-2"]
    assert lines[1].credit_amount == Decimal("1500.00")


def test_expense_debits_resolved_category(classifier, journal_service, seeded):
    """Test that an asset expense goes to maintenance against cash."""
    entry = classifier.submit_transaction(
        RawTransaction(
            amount=Decimal("320.50"),
            date=date(2024, 3, 12),
            transaction_type=TransactionType.EXPENSE,
            source_module="assets",
            source_id="M-7",
            description="Reparación de bomba",
        )
    )

    lines = journal_service.get_lines(entry.id)
    assert lines[0].category_id == seeded["F-1-3"]
    assert lines[0].debit_amount == Decimal("320.50")
    assert lines[1].category_id == seeded["A-1-1"]
    assert lines[1].credit_amount == Decimal("320.50")


def test_submit_is_idempotent(classifier, journal_service, ledger_service, seeded):
    """Test that the same source transaction yields one entry."""
    first = classifier.submit_transaction(concession_fee())
    second = classifier.submit_transaction(concession_fee())

    assert second.id == first.id
    assert second.entry_number == first.entry_number
    assert len(journal_service.list_entries()) == 1
    balance = ledger_service.get_balance(seeded["D-1-2"], "2024-03")
    assert balance.credit_total == Decimal("1500.00")


def test_concurrent_submits_create_one_entry(classifier, journal_service, ledger_service, seeded):
    """Test that racing submits of one source transaction share a single entry."""
    with ThreadPoolExecutor(max_workers=8) as executor:
        entries = list(executor.map(lambda _: classifier.submit_transaction(concession_fee()), range(16)))

    assert len({e.id for e in entries}) == 1
    assert len(journal_service.list_entries()) == 1
    balance = ledger_service.get_balance(seeded["D-1-2"], "2024-03")
    assert balance.credit_total == Decimal("1500.00")


def test_source_transaction_recorded(classifier, temp_db, seeded):
    """Test that the raw transaction is stored and linked to its entry."""
    entry = classifier.submit_transaction(concession_fee())

    recorded = temp_db.get_source_transaction("concessions", "C-42")
    assert recorded.entry_id == entry.id
    assert recorded.category_id == seeded["D-1-2"]
    assert recorded.transaction_type == TransactionType.INCOME
    assert recorded.amount == Decimal("1500.00")


def test_unmapped_transaction(classifier, journal_service, seeded):
    """Test that unmapped pairs fail instead of defaulting."""
    with pytest.raises(UnmappedTransactionError):
        classifier.submit_transaction(
            RawTransaction(
                amount=Decimal("10"),
                date=date(2024, 3, 1),
                transaction_type=TransactionType.INCOME,
                source_module="hr",
                source_id="1",
                description="Ingreso desconocido",
            )
        )
    assert journal_service.list_entries() == []


def test_invalid_raw_transaction(classifier, seeded):
    """Test validation of the raw transaction."""
    with pytest.raises(ValidationError):
        classifier.submit_transaction(concession_fee(amount="0"))
    with pytest.raises(ValidationError):
        classifier.submit_transaction(concession_fee(source_id=""))


def test_malformed_raw_transaction_rejected_before_storage(classifier, temp_db, seeded):
    """Test that a non-numeric amount or a missing date is a validation error."""
    bad = [
        RawTransaction("abc", date(2024, 3, 5), TransactionType.INCOME, "events", "z1", "Taquilla"),
        RawTransaction(Decimal("50.00"), None, TransactionType.INCOME, "events", "z2", "Taquilla"),
        RawTransaction(Decimal("50.00"), "2024-03-05", TransactionType.INCOME, "events", "z3", "Taquilla"),
    ]
    for raw in bad:
        with pytest.raises(ValidationError):
            classifier.submit_transaction(raw)
        assert temp_db.get_source_transaction("events", raw.source_id) is None


def test_inactive_rule_category(classifier, category_service, seeded):
    """Test that a rule pointing at an inactive category fails."""
    category_service.deactivate_category("D-1-2")
    with pytest.raises(NotFoundError):
        classifier.submit_transaction(concession_fee())


def test_auto_generate_disabled_leaves_draft(classifier, settings_service, seeded):
    """Test that entries stay in draft when automatic posting is off."""
    settings_service.set("auto_generate_entries", "false")
    entry = classifier.submit_transaction(concession_fee())
    assert entry.status == EntryStatus.DRAFT


def test_custom_rules(temp_db, seeded):
    """Test a classifier with its own rule set."""
    classifier = TransactionClassifier(
        temp_db,
        rules=[ClassificationRule("parking", TransactionType.INCOME, "D-1-1", "A-1-1")],
    )
    rule = classifier.resolve_rule("parking", TransactionType.INCOME)
    assert rule.category_code == "D-1-1"
    with pytest.raises(UnmappedTransactionError):
        classifier.resolve_rule("concessions", TransactionType.INCOME)

    with pytest.raises(ValidationError):
        TransactionClassifier(temp_db, rules=[rule, rule])


def test_default_rules_reference_seeded_categories(category_service, seeded):
    """Test that every default rule resolves against the seed."""
    for rule in DEFAULT_CLASSIFICATION_RULES:
        category_service.resolve(rule.category_code)
        category_service.resolve(rule.offset_category_code)


def test_cli_submit(cli_runner, temp_db, seeded):
    """Test submitting a transaction twice from the CLI."""
    args = [
        "--db-path", temp_db.database_path,
        "submit",
        "--module", "events",
        "--source-id", "EV-3",
        "--type", "income",
        "--amount", "2,000.00",
        "--date", "2024-05-01",
        "--description", "Festival de primavera",
    ]
    result1 = cli_runner.invoke(cli, args)
    assert result1.exit_code == 0
    assert "Entry AST-2024-05-0001" in result1.output
    assert "status: posted" in result1.output

    result2 = cli_runner.invoke(cli, args)
    assert result2.exit_code == 0
    assert "Entry AST-2024-05-0001" in result2.output

    result3 = cli_runner.invoke(cli, args[:5] + ["--source-id", "EV-4", "--type", "transfer"] + args[9:])
    assert result3.exit_code == 1
    assert "Error (UnmappedTransaction):" in result3.output


def submit_many(classifier):
    transactions = [
        ("events", "T-1", TransactionType.INCOME, date(2024, 3, 2), "Taquilla festival"),
        ("events", "T-2", TransactionType.EXPENSE, date(2024, 3, 9), "Renta de templete"),
        ("concessions", "C-1", TransactionType.INCOME, date(2024, 3, 31), "Cuota cafetería"),
        ("concessions", "C-2", TransactionType.INCOME, date(2024, 4, 30), "Cuota cafetería"),
        ("hr", "N-1", TransactionType.EXPENSE, date(2024, 4, 15), "Nómina quincenal"),
    ]
    for module, source_id, txn_type, txn_date, description in transactions:
        classifier.submit_transaction(
            RawTransaction(Decimal("100.00"), txn_date, txn_type, module, source_id, description)
        )


def test_list_transactions_filters(classifier, seeded):
    """Test filtering recorded transactions by text, category, type and dates."""
    submit_many(classifier)

    everything = classifier.list_transactions()
    assert everything.total == 5
    assert [t.source_id for t in everything.transactions] == ["C-2", "N-1", "C-1", "T-2", "T-1"]

    def ids(**criteria):
        page = classifier.list_transactions(SourceTransactionFilter(**criteria))
        return sorted(t.source_id for t in page.transactions)

    assert ids(search="cafetería") == ["C-1", "C-2"]
    assert ids(search="n-1") == ["N-1"]
    assert ids(category_id=seeded["D-1-2"]) == ["C-1", "C-2"]
    assert ids(transaction_type=TransactionType.EXPENSE) == ["N-1", "T-2"]
    assert ids(source_module="events") == ["T-1", "T-2"]
    assert ids(start_date=date(2024, 3, 9), end_date=date(2024, 3, 31)) == ["C-1", "T-2"]
    assert all(t.entry_id is not None for t in everything.transactions)


def test_list_transactions_pages(classifier, seeded):
    """Test pagination of recorded transactions."""
    submit_many(classifier)

    second = classifier.list_transactions(page=2, page_size=2)
    assert [t.source_id for t in second.transactions] == ["C-1", "T-2"]
    assert second.total == 5
    assert second.total_pages == 3
    assert classifier.list_transactions(page=4, page_size=2).transactions == []

    with pytest.raises(ValidationError):
        classifier.list_transactions(page=0)
    with pytest.raises(ValidationError):
        classifier.list_transactions(
            SourceTransactionFilter(start_date=date(2024, 4, 1), end_date=date(2024, 3, 1))
        )


def test_cli_list_transactions(cli_runner, temp_db, classifier, seeded):
    """Test listing submitted transactions from the CLI."""
    submit_many(classifier)
    db_args = ["--db-path", temp_db.database_path]

    result = cli_runner.invoke(cli, db_args + ["transactions", "--module", "concessions"])
    assert result.exit_code == 0
    assert "C-1" in result.output
    assert "T-1" not in result.output
    assert "Page 1 of 1 (2 transactions)" in result.output

    result = cli_runner.invoke(cli, db_args + ["transactions", "--category", "Z-9"])
    assert result.exit_code == 1
    assert "Error (NotFound):" in result.output
