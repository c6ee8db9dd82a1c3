"""Column index resolution.

Columns are found by exact, case-sensitive header match on the first row.
Lookups that miss return ``None``; only ``require`` raises.
"""

from typing import Any, Dict, List, Optional, Sequence

from catalog_sheet.errors import SchemaError
from catalog_sheet.logging_config import get_logger
from catalog_sheet.models import ProductRecord
from catalog_sheet.sheet import Sheet

__all__ = [
    "get_column_index",
    "column_letter",
    "ColumnMap",
    "record_from_row",
]

logger = get_logger("columns")


def get_column_index(header_row: Sequence[Any], header_name: str) -> Optional[int]:
    """1-based index of ``header_name`` in ``header_row``, or None."""
    for index, value in enumerate(header_row, start=1):
        if value == header_name:
            return index
    logger.debug(f'Header "{header_name}" not found in the sheet.')
    return None


def column_letter(column_index: int) -> str:
    """Convert a 1-based column index to its letter (1 -> A, 27 -> AA)."""
    if column_index < 1:
        raise ValueError(f"Column index must be positive, got {column_index}")
    letter = ""
    while column_index > 0:
        column_index, remainder = divmod(column_index - 1, 26)
        letter = chr(65 + remainder) + letter
    return letter


class ColumnMap:
    """Snapshot of a sheet's header row.

    Stable until the header row itself changes; rebuild it after setup.
    """

    def __init__(self, headers: Sequence[Any]):
        self.headers: List[str] = [str(h) for h in headers]
        self._index: Dict[str, int] = {}
        for i, name in enumerate(self.headers, start=1):
            # First occurrence wins, like a left-to-right header scan
            if name and name not in self._index:
                self._index[name] = i

    @classmethod
    def from_sheet(cls, sheet: Sheet) -> "ColumnMap":
        return cls(sheet.header_row())

    def index(self, name: str) -> Optional[int]:
        return self._index.get(name)

    def require(self, name: str) -> int:
        index = self._index.get(name)
        if index is None:
            raise SchemaError(f"Column '{name}' not found in the sheet")
        return index

    def name_at(self, column: int) -> Optional[str]:
        if 1 <= column <= len(self.headers):
            return self.headers[column - 1] or None
        return None

    def __contains__(self, name: str) -> bool:
        return name in self._index

    def __len__(self) -> int:
        return len(self.headers)

    def record(self, row_values: Sequence[Any], default_product_type: Optional[str] = None) -> ProductRecord:
        return record_from_row(self.headers, row_values, default_product_type)


def record_from_row(
    headers: Sequence[str],
    row_values: Sequence[Any],
    default_product_type: Optional[str] = None,
) -> ProductRecord:
    """Zip a header row with a value row into a ProductRecord."""
    data: Dict[str, Any] = {}
    for i, header in enumerate(headers):
        if not header or header in data:
            continue
        data[header] = row_values[i] if i < len(row_values) else ""
    return ProductRecord.from_mapping(data, default_product_type=default_product_type)
