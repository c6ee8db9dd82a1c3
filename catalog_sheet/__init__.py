"""WhatsApp catalog sheet curation package."""

__version__ = "0.1.0"

# Re-export main components for convenient imports
from catalog_sheet.columns import ColumnMap, get_column_index
from catalog_sheet.config import SHEET_NAME
from catalog_sheet.errors import (
    CatalogError,
    ConfigurationError,
    ExternalServiceError,
    SchemaError,
)
from catalog_sheet.models import ProductRecord, ProductType
from catalog_sheet.orchestrator import (
    CatalogOrchestrator,
    CommandResult,
    EditEvent,
    EditOutcome,
    FilterConfig,
)
from catalog_sheet.schema import HEADERS, get_relevant_columns
from catalog_sheet.settings import (
    Configuration,
    ConfigurationUpdate,
    MemorySettingsStore,
    SQLiteSettingsStore,
)
from catalog_sheet.sheet import Sheet, Workbook
from catalog_sheet.validation import validate_product, validate_rows

__all__ = [
    # Version
    "__version__",
    # Config
    "SHEET_NAME",
    "HEADERS",
    "get_relevant_columns",
    # Models
    "ProductRecord",
    "ProductType",
    "Sheet",
    "Workbook",
    "ColumnMap",
    "get_column_index",
    # Settings
    "Configuration",
    "ConfigurationUpdate",
    "MemorySettingsStore",
    "SQLiteSettingsStore",
    # Core functions
    "validate_product",
    "validate_rows",
    "CatalogOrchestrator",
    "CommandResult",
    "EditEvent",
    "EditOutcome",
    "FilterConfig",
    # Errors
    "CatalogError",
    "SchemaError",
    "ConfigurationError",
    "ExternalServiceError",
]
