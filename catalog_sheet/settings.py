"""Per-document configuration.

The add-on keeps a handful of defaults (product type, currency, category,
availability, condition, image folder) as string properties of the
document. ``Configuration`` is the typed view of those properties; the
stores only know about strings.
"""

import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Dict, Generator, List, Optional

from catalog_sheet.config import DB_PATH, DEFAULT_FOLDER_NAME
from catalog_sheet.errors import ConfigurationError
from catalog_sheet.logging_config import get_logger
from catalog_sheet.schema import (
    AVAILABILITY_LIST,
    CATEGORY_LIST,
    CONDITION_LIST,
    CURRENCY_LIST,
    PRODUCT_TYPE_LIST,
)

__all__ = [
    "PROPERTY_KEYS",
    "FALLBACKS",
    "SettingsStore",
    "MemorySettingsStore",
    "SQLiteSettingsStore",
    "Configuration",
    "ConfigurationUpdate",
    "configuration_options",
]

logger = get_logger("settings")

# Configuration attribute -> persisted property key
PROPERTY_KEYS: Dict[str, str] = {
    "product_type": "DEFAULT_PRODUCT_TYPE",
    "currency": "DEFAULT_CURRENCY",
    "category": "DEFAULT_CATEGORY",
    "availability": "DEFAULT_AVAILABILITY",
    "condition": "DEFAULT_CONDITION",
    "image_folder_id": "IMAGE_FOLDER_ID",
    "image_folder_name": "IMAGE_FOLDER_NAME",
}

# Used when a property has never been saved
FALLBACKS: Dict[str, str] = {
    "product_type": "default",
    "currency": "USD",
    "category": "",
    "availability": "in stock",
    "condition": "new",
    "image_folder_id": "",
    "image_folder_name": DEFAULT_FOLDER_NAME,
}

_DOMAINS: Dict[str, List[str]] = {
    "product_type": PRODUCT_TYPE_LIST,
    "currency": CURRENCY_LIST,
    "category": CATEGORY_LIST,
    "availability": AVAILABILITY_LIST,
    "condition": CONDITION_LIST,
}


class SettingsStore:
    """String key/value properties persisted per document."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def set_many(self, values: Dict[str, str]) -> None:
        for key, value in values.items():
            self.set(key, value)

    def delete(self, key: str) -> None:
        raise NotImplementedError


class MemorySettingsStore(SettingsStore):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def as_dict(self) -> Dict[str, str]:
        return dict(self._data)


class SQLiteSettingsStore(SettingsStore):
    """Properties kept in a SQLite table, one row per key."""

    def __init__(self, db_path: str = DB_PATH, document_id: str = "default"):
        self.db_path = db_path
        self.document_id = document_id
        self._init_table()

    @contextmanager
    def _connection(self) -> Generator[sqlite3.Connection, None, None]:
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        try:
            yield conn
        finally:
            conn.close()

    def _init_table(self) -> None:
        with self._connection() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS document_properties (
                    document_id TEXT NOT NULL,
                    key TEXT NOT NULL,
                    value TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    PRIMARY KEY (document_id, key)
                )
            """)
            conn.commit()

    def get(self, key: str) -> Optional[str]:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT value FROM document_properties WHERE document_id = ? AND key = ?",
                (self.document_id, key),
            ).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        with self._connection() as conn:
            conn.execute(
                """
                INSERT INTO document_properties (document_id, key, value)
                VALUES (?, ?, ?)
                ON CONFLICT(document_id, key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (self.document_id, key, value),
            )
            conn.commit()

    def delete(self, key: str) -> None:
        with self._connection() as conn:
            conn.execute(
                "DELETE FROM document_properties WHERE document_id = ? AND key = ?",
                (self.document_id, key),
            )
            conn.commit()


@dataclass
class Configuration:
    """Defaults applied to catalog rows, with fallbacks for unset properties."""

    product_type: str = FALLBACKS["product_type"]
    currency: str = FALLBACKS["currency"]
    category: str = FALLBACKS["category"]
    availability: str = FALLBACKS["availability"]
    condition: str = FALLBACKS["condition"]
    image_folder_id: str = FALLBACKS["image_folder_id"]
    image_folder_name: str = FALLBACKS["image_folder_name"]

    @classmethod
    def load(cls, store: SettingsStore) -> "Configuration":
        values = {}
        for attr, key in PROPERTY_KEYS.items():
            stored = store.get(key)
            values[attr] = stored if stored else FALLBACKS[attr]
        return cls(**values)

    def default_for(self, attr: str) -> str:
        return getattr(self, attr)


@dataclass
class ConfigurationUpdate:
    """Values submitted from the configuration form; empty means unchanged."""

    product_type: str = ""
    currency: str = ""
    category: str = ""
    availability: str = ""
    condition: str = ""

    def changes(self) -> Dict[str, str]:
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name)}

    def validate(self) -> None:
        """Reject values outside their dropdown domain.

        Raises:
            ConfigurationError: On the first out-of-domain value
        """
        for attr, value in self.changes().items():
            if value not in _DOMAINS[attr]:
                raise ConfigurationError(f"Invalid {attr.replace('_', ' ')}: {value}")

    def persist(self, store: SettingsStore) -> Dict[str, str]:
        changed = self.changes()
        store.set_many({PROPERTY_KEYS[attr]: value for attr, value in changed.items()})
        logger.info(f"Saved configuration keys: {', '.join(sorted(changed)) or '(none)'}")
        return changed


def configuration_options(store: SettingsStore) -> Dict[str, object]:
    """Dropdown lists for the configuration form plus the preselected values.

    Preselected values are empty when the property has never been saved.
    """
    return {
        "currencyList": CURRENCY_LIST,
        "categoryList": CATEGORY_LIST,
        "productTypeList": PRODUCT_TYPE_LIST,
        "availabilityList": AVAILABILITY_LIST,
        "conditionList": CONDITION_LIST,
        "preselectedProductType": store.get(PROPERTY_KEYS["product_type"]) or "",
        "preselectedCurrency": store.get(PROPERTY_KEYS["currency"]) or "",
        "preselectedCategory": store.get(PROPERTY_KEYS["category"]) or "",
        "preselectedAvailability": store.get(PROPERTY_KEYS["availability"]) or "",
        "preselectedCondition": store.get(PROPERTY_KEYS["condition"]) or "",
    }
