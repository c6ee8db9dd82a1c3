"""CSV import and export for catalog sheets."""

import csv
import os
from typing import List, Optional, Sequence

from catalog_sheet.config import FIRST_DATA_ROW
from catalog_sheet.models import cell_text, is_blank
from catalog_sheet.sheet import Sheet

__all__ = [
    "load_sheet_from_csv",
    "save_sheet_to_csv",
    "export_columns_to_csv",
]


def load_sheet_from_csv(path: str, sheet: Sheet) -> int:
    """Replace the contents of ``sheet`` with the rows of a CSV file.

    The first CSV line becomes the header row. A missing file leaves the
    sheet untouched.

    Returns:
        Number of data rows loaded
    """
    if not os.path.exists(path):
        return 0

    with open(path, "r", newline="", encoding="utf-8") as f:
        rows = [row for row in csv.reader(f)]

    sheet.clear()
    sheet.set_values(1, 1, rows)
    return max(len(rows) - 1, 0)


def save_sheet_to_csv(sheet: Sheet, path: str) -> int:
    """Write every row of ``sheet`` (header included) to ``path``.

    Returns:
        Number of data rows written
    """
    width = sheet.last_column
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        for row in range(1, sheet.last_row + 1):
            writer.writerow([cell_text(v) for v in sheet.get_row(row, width)])

    written = max(sheet.last_row - 1, 0)
    print(f"Saved {written} rows to {path}")
    return written


def export_columns_to_csv(
    sheet: Sheet,
    path: str,
    columns: Optional[Sequence[str]] = None,
) -> int:
    """Export selected columns of ``sheet`` to CSV, skipping empty rows.

    Args:
        sheet: Sheet whose first row holds the headers
        path: Output CSV path
        columns: Header names to export (default: all headers, in sheet order)

    Returns:
        Number of rows exported
    """
    headers = sheet.header_row()
    fieldnames: List[str] = [h for h in (columns or headers) if h in headers]
    if not fieldnames:
        print("No columns to export.")
        return 0

    rows = []
    for _row, values in sheet.iter_rows(FIRST_DATA_ROW):
        record = dict(zip(headers, values))
        picked = {name: cell_text(record.get(name, "")) for name in fieldnames}
        if all(is_blank(v) for v in picked.values()):
            continue
        rows.append(picked)

    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames, extrasaction="ignore")
        writer.writeheader()
        for row in rows:
            writer.writerow(row)

    print(f"Exported {len(rows)} rows to {path}")
    return len(rows)
