"""Configuration and constants for the catalog sheet add-on."""

import os
from pathlib import Path

__all__ = [
    "SHEET_NAME",
    "LOG_SHEET_NAME",
    "EXPORT_SHEET_NAME",
    "FILTER_SHEET_NAME",
    "HEADER_ROW",
    "FIRST_DATA_ROW",
    "ID_MIN",
    "ID_MAX",
    "THUMBNAIL_MODE",
    "THUMBNAIL_SIZE",
    "THUMBNAIL_COLUMN_WIDTH",
    "PRICE_NUMBER_FORMAT",
    "REQUIRED_HIGHLIGHT_COLOR",
    "IMAGE_MIME_TYPES",
    "DEFAULT_FOLDER_NAME",
    "REQUEST_TIMEOUT",
    "PROBE_DELAY",
    "HEADERS",
    "DB_PATH",
    "CSV_PATH",
    "GENERIC_ERROR_MESSAGE",
    "MAX_LISTED_ERRORS",
]

_PROJECT_ROOT = Path(__file__).parent.parent

# Sheet names inside the workbook
SHEET_NAME = "WhatsApp Catalog"
LOG_SHEET_NAME = "Error_Log"
EXPORT_SHEET_NAME = "Export"
FILTER_SHEET_NAME = "Filtered Results"

# Row layout (1-based, like the host spreadsheet)
HEADER_ROW = 1
FIRST_DATA_ROW = 2

# Generated product IDs are 6-digit numbers
ID_MIN = 100000
ID_MAX = 999999

# IMAGE(url, mode, height, width); mode 4 = custom size
THUMBNAIL_MODE = 4
THUMBNAIL_SIZE = 100
THUMBNAIL_COLUMN_WIDTH = 120

PRICE_NUMBER_FORMAT = "#,##0.00"
REQUIRED_HIGHLIGHT_COLOR = "#FFB3BA"

# Object store listing filter
IMAGE_MIME_TYPES = ("image/jpeg", "image/png", "image/gif")
DEFAULT_FOLDER_NAME = "WhatsApp Catalog Listing"

# HTTP reachability probes
HEADERS = {
    "User-Agent": "catalog-sheet image probe",
}
REQUEST_TIMEOUT = int(os.getenv("CATALOG_REQUEST_TIMEOUT", "15"))
PROBE_DELAY = float(os.getenv("CATALOG_PROBE_DELAY", "1.0"))

# Local storage used by the CLI
DB_PATH = os.getenv("CATALOG_DB_PATH", str(_PROJECT_ROOT / "data" / "catalog_settings.db"))
CSV_PATH = os.getenv("CATALOG_CSV_PATH", str(_PROJECT_ROOT / "data" / "catalog.csv"))

GENERIC_ERROR_MESSAGE = "Error Please try again or contact support."

# Validation summaries only list this many row errors
MAX_LISTED_ERRORS = 10
