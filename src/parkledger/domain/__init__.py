"""Domain layer for parkledger application."""

from importlib import import_module

# Services import the database layer, which imports domain.entities; load them
# lazily so importing the database first does not cycle back here.
_SERVICES = {
    "CategoryService": "parkledger.domain.category",
    "SettingsService": "parkledger.domain.settings",
    "BalanceLedgerService": "parkledger.domain.ledger",
    "JournalService": "parkledger.domain.journal",
    "TransactionClassifier": "parkledger.domain.classifier",
    "FixedAssetService": "parkledger.domain.assets",
    "DepreciationScheduler": "parkledger.domain.depreciation",
}

__all__ = list(_SERVICES)


def __getattr__(name):
    if name in _SERVICES:
        return getattr(import_module(_SERVICES[name]), name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
