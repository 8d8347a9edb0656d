"""Tests for the category tree store and category commands."""

import pytest
from parkledger.cli.main import cli
from parkledger.domain.entities import AccountNature, CategoryFilter, EntryLine
from parkledger.domain.errors import (
    ConflictError,
    DependencyError,
    InvalidHierarchyError,
    NotFoundError,
    ValidationError,
)
from parkledger.domain.seed import INITIAL_CATEGORIES
from datetime import date
from decimal import Decimal


def test_seed_creates_chart_of_accounts(category_service, temp_db):
    """Test that seeding creates every initial category."""
    created = category_service.seed()

    assert created == len(INITIAL_CATEGORIES)
    assert temp_db.count_categories() == len(INITIAL_CATEGORIES)
    roots = category_service.list_categories(CategoryFilter(level=1))
    assert [c.code for c in roots] == ["A", "B", "C", "D", "E", "F"]


def test_seed_is_idempotent(category_service, temp_db):
    """Test that seeding twice never duplicates rows."""
    category_service.seed()
    assert category_service.seed() == 0
    assert temp_db.count_categories() == len(INITIAL_CATEGORIES)


def test_seeded_paths_and_natures(category_service, seeded):
    """Test full paths and inherited natures of seeded leaves."""
    cash = category_service.get_category("A-1-1")
    assert cash.full_path == "A.A-1.A-1-1"
    assert cash.level == 3
    assert cash.account_nature == AccountNature.DEBIT

    concessions = category_service.get_category("D-1-2")
    assert concessions.account_nature == AccountNature.CREDIT
    assert [c.code for c in category_service.path("D-1-2")] == ["D", "D-1", "D-1-2"]


def test_create_child_generates_code(category_service, seeded):
    """Test that a child without a code gets the next free segment."""
    child = category_service.create_category(name="Caja Chica", parent_code="A-1-1")

    assert child.code == "A-1-1-1"
    assert child.level == 4
    assert child.full_path == "A.A-1.A-1-1.A-1-1-1"
    assert child.account_nature == AccountNature.DEBIT

    sibling = category_service.create_category(name="Bancos", parent_code="A-1-1")
    assert sibling.code == "A-1-1-2"
    assert [c.code for c in category_service.children("A-1-1")] == ["A-1-1-1", "A-1-1-2"]


def test_create_rejects_level_six(category_service, seeded):
    """Test that the tree is at most five levels deep."""
    level4 = category_service.create_category(name="Nivel 4", parent_code="A-1-1")
    level5 = category_service.create_category(name="Nivel 5", parent_code=level4.code)
    assert level5.level == 5

    with pytest.raises(InvalidHierarchyError):
        category_service.create_category(name="Nivel 6", parent_code=level5.code)


def test_create_rejects_conflicting_nature(category_service, seeded):
    """Test that a child cannot contradict its branch nature."""
    with pytest.raises(InvalidHierarchyError):
        category_service.create_category(
            name="Ingreso raro", parent_code="A-1", account_nature=AccountNature.CREDIT
        )


def test_create_rejects_code_outside_parent(category_service, seeded):
    """Test that an explicit code must extend the parent code."""
    with pytest.raises(InvalidHierarchyError):
        category_service.create_category(name="Mal", parent_code="A-1", code="B-1-9")


def test_create_duplicate_code(category_service, seeded):
    """Test that codes are unique."""
    with pytest.raises(ConflictError):
        category_service.create_category(name="Otro", parent_code="A-1", code="A-1-1")


def test_create_root_requires_nature(category_service):
    """Test that a top-level category needs a nature."""
    with pytest.raises(ValidationError):
        category_service.create_category(name="Orden", code="G")

    root = category_service.create_category(
        name="Cuentas de Orden", code="G", account_nature=AccountNature.DEBIT
    )
    assert root.level == 1
    assert root.full_path == "G"
    assert root.parent_id is None


def test_create_under_missing_parent(category_service):
    """Test that an unknown parent is reported as not found."""
    with pytest.raises(NotFoundError):
        category_service.create_category(name="Huérfano", parent_code="Z-9")


def test_resolve_rejects_inactive(category_service, seeded):
    """Test that inactive categories cannot receive postings but stay readable."""
    category_service.deactivate_category("A-1-3")

    with pytest.raises(NotFoundError):
        category_service.resolve("A-1-3")
    assert category_service.get_category("A-1-3").is_active is False


def test_deactivate_with_active_children(category_service, seeded):
    """Test that a category with active children cannot be deactivated."""
    with pytest.raises(DependencyError):
        category_service.deactivate_category("A-1")


def test_delete_unused_category(category_service, seeded):
    """Test deleting a category with no children or lines."""
    category_service.create_category(name="Temporal", parent_code="A-1-3")
    category_service.delete_category("A-1-3-1")

    with pytest.raises(NotFoundError):
        category_service.get_category("A-1-3-1")


def test_delete_blocked_by_lines(category_service, journal_service, seeded):
    """Test that a category with journal lines cannot be deleted."""
    journal_service.create_draft(
        date(2024, 3, 1),
        "Venta",
        [
            EntryLine(category_id=seeded["A-1-1"], debit=Decimal("10.00")),
            EntryLine(category_id=seeded["D-1-1"], credit=Decimal("10.00")),
        ],
    )
    with pytest.raises(DependencyError) as exc_info:
        category_service.delete_category("D-1-1")
    assert "1 journal line" in str(exc_info.value)


def test_update_category(category_service, seeded):
    """Test relabeling a category."""
    updated = category_service.update_category("F-1-3", name="Mantenimiento de Parques")

    assert updated.name == "Mantenimiento de Parques"
    assert updated.code == "F-1-3"
    with pytest.raises(ValidationError):
        category_service.update_category("F-1-3", name="  ")


def test_list_categories_search(category_service, seeded):
    """Test searching categories by name or code."""
    results = category_service.list_categories(CategoryFilter(search="depreciación"))
    assert {c.code for c in results} == {"A-2-4", "F-1-4"}

    children = category_service.list_categories(CategoryFilter(parent_code="B-1"))
    assert [c.code for c in children] == ["B-1-1", "B-1-2"]


def test_descendants_and_tree(category_service, seeded):
    """Test descendant lookup and the nested tree."""
    codes = [c.code for c in category_service.descendants("A-2")]
    assert codes == ["A-2", "A-2-1", "A-2-2", "A-2-3", "A-2-4"]

    tree = category_service.get_category_tree()
    assert [node.category.code for node in tree] == ["A", "B", "C", "D", "E", "F"]
    assets = tree[0]
    assert [node.category.code for node in assets.children] == ["A-1", "A-2", "A-3"]


def test_cli_init_twice(cli_runner, temp_db):
    """Test the init command is idempotent."""
    result1 = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "init"])
    assert result1.exit_code == 0
    assert f"Created {len(INITIAL_CATEGORIES)} categories" in result1.output

    result2 = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "init"])
    assert result2.exit_code == 0
    assert "Already initialized" in result2.output


def test_cli_category_list_and_create(cli_runner, temp_db, seeded):
    """Test listing and creating categories from the CLI."""
    result = cli_runner.invoke(cli, ["--db-path", temp_db.database_path, "category", "list"])
    assert result.exit_code == 0
    assert "A-1-1 Efectivo y Equivalentes" in result.output

    result = cli_runner.invoke(
        cli,
        ["--db-path", temp_db.database_path, "category", "create", "Caja", "--parent", "A-1-1"],
    )
    assert result.exit_code == 0
    assert "Created category A-1-1-1 'Caja'" in result.output


def test_cli_category_error_kind(cli_runner, temp_db, seeded):
    """Test that CLI errors report their kind."""
    result = cli_runner.invoke(
        cli, ["--db-path", temp_db.database_path, "category", "deactivate", "A"]
    )
    assert result.exit_code == 1
    assert "Error (Dependency):" in result.output
