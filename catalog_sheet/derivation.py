"""Generated column values.

Unique IDs, thumbnail formulas, default backfill and the hidden column set
are all computed from what is currently in the sheet. Missing columns on the
per-row paths come back as failed ``Outcome`` values; bulk initialisers used
by setup raise ``SchemaError`` instead.
"""

import random
from typing import Dict, List, Optional, Set

from catalog_sheet.columns import ColumnMap
from catalog_sheet.config import (
    FIRST_DATA_ROW,
    ID_MAX,
    ID_MIN,
    THUMBNAIL_MODE,
    THUMBNAIL_SIZE,
)
from catalog_sheet.logging_config import get_logger
from catalog_sheet.models import Outcome, cell_text, is_blank
from catalog_sheet.schema import DEFAULTED_COLUMNS, HEADERS, get_relevant_columns
from catalog_sheet.settings import Configuration
from catalog_sheet.sheet import Sheet

__all__ = [
    "generate_unique_id",
    "generate_and_set_unique_id",
    "generate_missing_ids",
    "thumbnail_formula",
    "derive_thumbnail",
    "update_thumbnail",
    "clear_thumbnail",
    "init_thumbnail_column",
    "fill_blank_cells",
    "set_column_values",
    "backfill_defaults",
    "hidden_columns_for",
    "apply_column_visibility",
]

logger = get_logger("derivation")


# =============================================================================
# Unique IDs
# =============================================================================

def generate_unique_id(rng: Optional[random.Random] = None) -> str:
    """A uniformly random 6-digit ID."""
    return str((rng or random).randint(ID_MIN, ID_MAX))


def _existing_ids(sheet: Sheet, id_column: int) -> Set[str]:
    return {cell_text(v) for v in sheet.get_column(id_column) if not is_blank(v)}


def generate_and_set_unique_id(
    sheet: Sheet,
    row: int,
    rng: Optional[random.Random] = None,
) -> Outcome[str]:
    """Give ``row`` an ID unless it already has one.

    Returns the existing ID untouched when present, so calling it again is a
    no-op. ``changed`` is set only when a new ID was written.
    """
    id_column = ColumnMap.from_sheet(sheet).index("id")
    if id_column is None:
        logger.warning("ID column not found")
        return Outcome.failure("ID column not found")

    current = sheet.get_value(row, id_column)
    if not is_blank(current):
        return Outcome.success(cell_text(current))

    existing = _existing_ids(sheet, id_column)
    unique_id = generate_unique_id(rng)
    while unique_id in existing:
        unique_id = generate_unique_id(rng)

    sheet.set_value(row, id_column, unique_id)
    logger.info(f"Generated and set unique ID {unique_id} for row {row}")
    return Outcome.success(unique_id, changed=True)


def generate_missing_ids(sheet: Sheet, rng: Optional[random.Random] = None) -> Outcome[int]:
    """Assign distinct IDs to every row that has an image URL but no ID."""
    columns = ColumnMap.from_sheet(sheet)
    id_column = columns.index("id")
    image_column = columns.index("image_url")
    if id_column is None or image_column is None:
        logger.warning("Could not find 'id' or 'image_url' columns")
        return Outcome.failure("Could not find 'id' or 'image_url' columns")

    existing = _existing_ids(sheet, id_column)
    assigned = 0
    for row in range(FIRST_DATA_ROW, sheet.last_row + 1):
        if is_blank(sheet.get_value(row, image_column)) or not is_blank(sheet.get_value(row, id_column)):
            continue
        unique_id = generate_unique_id(rng)
        while unique_id in existing:
            unique_id = generate_unique_id(rng)
        existing.add(unique_id)
        sheet.set_value(row, id_column, unique_id)
        assigned += 1

    if assigned:
        logger.info(f"Generated and set unique IDs for {assigned} rows")
    else:
        logger.info("No new unique IDs needed to be generated")
    return Outcome.success(assigned, changed=assigned > 0)


# =============================================================================
# Thumbnails
# =============================================================================

def thumbnail_formula(image_url: str, size: int = THUMBNAIL_SIZE) -> str:
    """IMAGE formula rendering ``image_url`` at a fixed square size."""
    escaped = image_url.replace('"', '""')
    return f'=IMAGE("{escaped}",{THUMBNAIL_MODE},{size},{size})'


def derive_thumbnail(image_url: str) -> str:
    """Thumbnail cell content for an image URL; empty URL clears it."""
    return thumbnail_formula(image_url) if image_url else ""


def _thumbnail_column(sheet: Sheet) -> Optional[int]:
    return ColumnMap.from_sheet(sheet).index("thumbnail")


def update_thumbnail(sheet: Sheet, row: int, image_url: str) -> Outcome[str]:
    column = _thumbnail_column(sheet)
    if column is None:
        logger.warning("Thumbnail column not found")
        return Outcome.failure("Thumbnail column not found")
    formula = derive_thumbnail(image_url)
    sheet.set_value(row, column, formula)
    return Outcome.success(formula, changed=True)


def clear_thumbnail(sheet: Sheet, row: int) -> Outcome[str]:
    column = _thumbnail_column(sheet)
    if column is None:
        logger.warning("Thumbnail column not found")
        return Outcome.failure("Thumbnail column not found")
    sheet.clear_content(row, column)
    return Outcome.success("", changed=True)


def init_thumbnail_column(sheet: Sheet) -> int:
    """Recompute every data row's thumbnail from its image URL.

    Raises:
        SchemaError: If the thumbnail or image_url column is missing
    """
    columns = ColumnMap.from_sheet(sheet)
    thumbnail_column = columns.require("thumbnail")
    image_column = columns.require("image_url")

    count = 0
    for row in range(FIRST_DATA_ROW, sheet.last_row + 1):
        image_url = cell_text(sheet.get_value(row, image_column))
        sheet.set_value(row, thumbnail_column, derive_thumbnail(image_url))
        if image_url:
            count += 1

    logger.info(f"Thumbnail column set up for {count} rows")
    return count


# =============================================================================
# Default values
# =============================================================================

def fill_blank_cells(sheet: Sheet, column: int, value: str) -> int:
    """Write ``value`` into the empty data cells of a column. Returns cells filled."""
    if not value:
        return 0
    filled = 0
    for row in range(FIRST_DATA_ROW, sheet.last_row + 1):
        if is_blank(sheet.get_value(row, column)):
            sheet.set_value(row, column, value)
            filled += 1
    return filled


def set_column_values(sheet: Sheet, column_name: str, value: str) -> Outcome[int]:
    """Overwrite every data row of a column with ``value``."""
    column = ColumnMap.from_sheet(sheet).index(column_name)
    if column is None:
        logger.warning(f"Column '{column_name}' not found")
        return Outcome.failure(f"Column '{column_name}' not found")

    rows = range(FIRST_DATA_ROW, sheet.last_row + 1)
    for row in rows:
        sheet.set_value(row, column, value)
    logger.info(f"Set value '{value}' to column '{column_name}'")
    return Outcome.success(len(rows), changed=len(rows) > 0)


def backfill_defaults(sheet: Sheet, config: Configuration) -> Dict[str, int]:
    """Fill blank defaulted cells for the configured product type.

    Only columns relevant to the product type are touched, and only where a
    default is set. Populated cells are left as they are.
    """
    columns = ColumnMap.from_sheet(sheet)
    filled: Dict[str, int] = {}
    for column_name in get_relevant_columns(config.product_type):
        attr = DEFAULTED_COLUMNS.get(column_name)
        if attr is None:
            continue
        column = columns.index(column_name)
        if column is None:
            continue
        filled[column_name] = fill_blank_cells(sheet, column, config.default_for(attr))

    logger.info(f"Default values set for product type: {config.product_type}")
    return filled


# =============================================================================
# Column visibility
# =============================================================================

def hidden_columns_for(product_type: str) -> Set[str]:
    """Columns that are not relevant to ``product_type``."""
    relevant = set(get_relevant_columns(product_type))
    return {h for h in HEADERS if h not in relevant}


def apply_column_visibility(sheet: Sheet, product_type: str) -> List[str]:
    """Show the relevant columns and hide the rest.

    Everything is un-hidden first, so the result depends only on the
    product type and not on what was hidden before.
    """
    columns = ColumnMap.from_sheet(sheet)
    hidden = sorted(hidden_columns_for(product_type), key=HEADERS.index)

    sheet.show_all_columns()
    hidden_names: List[str] = []
    for name in hidden:
        index = columns.index(name)
        if index is not None:
            sheet.hide_column(index)
            hidden_names.append(name)

    logger.info(f"Hiding irrelevant columns: {','.join(hidden_names)}")
    return hidden_names
