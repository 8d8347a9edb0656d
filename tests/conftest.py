"""Shared pytest fixtures for parkledger tests."""

import tempfile
import os
import pytest

from parkledger.database.factories import create_sqlite_database
from parkledger.domain.assets import FixedAssetService
from parkledger.domain.category import CategoryService
from parkledger.domain.classifier import TransactionClassifier
from parkledger.domain.depreciation import DepreciationScheduler
from parkledger.domain.journal import JournalService
from parkledger.domain.ledger import BalanceLedgerService
from parkledger.domain.settings import SettingsService


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    # Create a temporary file for the database
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    # Create database
    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    # Cleanup
    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def settings_service(temp_db):
    """Create a SettingsService with a temporary database."""
    return SettingsService(temp_db)


@pytest.fixture
def ledger_service(temp_db):
    """Create a BalanceLedgerService with a temporary database."""
    return BalanceLedgerService(temp_db)


@pytest.fixture
def journal_service(temp_db, ledger_service, settings_service):
    """Create a JournalService with a temporary database."""
    return JournalService(temp_db, ledger=ledger_service, settings=settings_service)


@pytest.fixture
def classifier(temp_db, journal_service, category_service, settings_service):
    """Create a TransactionClassifier with the default rules."""
    return TransactionClassifier(
        temp_db,
        journal=journal_service,
        categories=category_service,
        settings=settings_service,
    )


@pytest.fixture
def asset_service(temp_db, category_service, settings_service):
    """Create a FixedAssetService with a temporary database."""
    return FixedAssetService(temp_db, categories=category_service, settings=settings_service)


@pytest.fixture
def scheduler(temp_db, classifier):
    """Create a DepreciationScheduler wired to the classifier."""
    return DepreciationScheduler(temp_db, classifier=classifier)


@pytest.fixture
def seeded(category_service, settings_service):
    """Seed the default chart of accounts and settings.

    Returns a lookup from category code to category ID.
    """
    category_service.seed()
    settings_service.seed()

    class Codes:
        def __getitem__(self, code):
            return category_service.get_category(code).id

    return Codes()


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
