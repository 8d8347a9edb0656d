"""Accounting settings domain service."""

import logging
from decimal import Decimal, InvalidOperation

from parkledger.database.base import Database
from parkledger.domain.entities import Setting, SettingType
from parkledger.domain.errors import NotFoundError, ValidationError, setting_not_found
from parkledger.domain.numbering import validate_entry_number_format
from parkledger.domain.seed import INITIAL_SETTINGS

logger = logging.getLogger(__name__)

ENTRY_NUMBER_FORMAT = "entry_number_format"
AUTO_GENERATE_ENTRIES = "auto_generate_entries"
DEPRECIATION_METHOD = "depreciation_method"

_DEFAULTS = {key: (value, data_type) for key, value, data_type, _, _ in INITIAL_SETTINGS}
_TRUE_VALUES = {"true", "1", "yes", "on"}
_FALSE_VALUES = {"false", "0", "no", "off"}


def _typed(value: str, data_type: SettingType) -> str | Decimal | bool:
    if data_type == SettingType.NUMBER:
        return Decimal(value)
    if data_type == SettingType.BOOLEAN:
        return value == "true"
    return value


def _normalize(key: str, value: str, data_type: SettingType) -> str:
    value = value.strip()
    if data_type == SettingType.NUMBER:
        try:
            number = Decimal(value)
        except InvalidOperation as e:
            raise ValidationError(f"Setting '{key}' expects a number, got '{value}'") from e
        if not number.is_finite():
            raise ValidationError(f"Setting '{key}' expects a finite number")
        return str(number)
    if data_type == SettingType.BOOLEAN:
        lowered = value.lower()
        if lowered in _TRUE_VALUES:
            return "true"
        if lowered in _FALSE_VALUES:
            return "false"
        raise ValidationError(f"Setting '{key}' expects true or false, got '{value}'")
    if key == ENTRY_NUMBER_FORMAT:
        validate_entry_number_format(value)
    return value


class SettingsService:
    """Service for reading and changing accounting settings."""

    def __init__(self, db: Database):
        """Initialize settings service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_setting(self, key: str) -> Setting:
        """Get a stored setting.

        Raises:
            NotFoundError: If the key does not exist
        """
        setting = self.db.get_setting(key)
        if setting is None:
            raise NotFoundError(setting_not_found(key))
        return setting

    def get(self, key: str) -> str | Decimal | bool:
        """Get the typed value of a setting.

        Keys that were never seeded fall back to the built-in default.
        """
        setting = self.db.get_setting(key)
        if setting is not None:
            return _typed(setting.value, setting.data_type)
        if key in _DEFAULTS:
            value, data_type = _DEFAULTS[key]
            return _typed(value, data_type)
        raise NotFoundError(setting_not_found(key))

    def set(self, key: str, value: str) -> Setting:
        """Change a setting after validating it against its data type."""
        setting = self.get_setting(key)
        self.db.update_setting_value(key, _normalize(key, value, setting.data_type))
        logger.info("Setting %s changed", key)
        return self.get_setting(key)

    def list_settings(self) -> list[Setting]:
        """List active settings ordered by category and key."""
        return self.db.list_settings()

    def seed(self) -> int:
        """Insert default settings that are missing. Returns number inserted."""
        created = 0
        with self.db.transaction():
            for key, value, data_type, category, description in INITIAL_SETTINGS:
                if self.db.create_setting(key, value, data_type, category, description):
                    created += 1
        if created:
            logger.info("Seeded %d accounting settings", created)
        return created

    def entry_number_format(self) -> str:
        return str(self.get(ENTRY_NUMBER_FORMAT))

    def auto_generate_entries(self) -> bool:
        return bool(self.get(AUTO_GENERATE_ENTRIES))

    def depreciation_method(self) -> str:
        return str(self.get(DEPRECIATION_METHOD))
