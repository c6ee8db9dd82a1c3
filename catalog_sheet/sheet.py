"""In-memory tabular store.

A small stand-in for the host spreadsheet: a 1-based grid of cells plus the
formatting metadata the add-on writes (dropdown constraints, conditional
highlighting, number formats, protections, hidden columns, frozen rows).
Rows and columns are addressed the way the host addresses them, so the
engine code reads the same against either.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Sequence, Set, Tuple

from catalog_sheet.models import is_blank

__all__ = [
    "DataValidationRule",
    "ConditionalFormatRule",
    "Protection",
    "Sheet",
    "Workbook",
]


@dataclass(frozen=True)
class DataValidationRule:
    """Dropdown constraint on one column over a row range (inclusive)."""

    column: int
    start_row: int
    end_row: int
    values: Tuple[str, ...]


@dataclass(frozen=True)
class ConditionalFormatRule:
    column: int
    start_row: int
    end_row: int
    formula: str
    background: str


@dataclass(frozen=True)
class Protection:
    description: str
    start_row: int
    end_row: int
    start_column: int
    end_column: int
    warning_only: bool = False


@dataclass
class Sheet:
    """A named grid of cells. Empty cells read back as ``""``."""

    name: str
    max_rows: int = 1000
    max_columns: int = 26
    _cells: Dict[Tuple[int, int], Any] = field(default_factory=dict, repr=False)
    hidden_columns: Set[int] = field(default_factory=set)
    data_validations: Dict[int, DataValidationRule] = field(default_factory=dict)
    conditional_formats: List[ConditionalFormatRule] = field(default_factory=list)
    number_formats: Dict[int, str] = field(default_factory=dict)
    protections: List[Protection] = field(default_factory=list)
    column_widths: Dict[int, int] = field(default_factory=dict)
    frozen_rows: int = 0

    # ------------------------------------------------------------------
    # Dimensions
    # ------------------------------------------------------------------

    @property
    def last_row(self) -> int:
        """Last row holding any content, 0 for an empty sheet."""
        return max((r for (r, _c) in self._cells), default=0)

    @property
    def last_column(self) -> int:
        return max((c for (_r, c) in self._cells), default=0)

    def _check(self, row: int, column: int) -> None:
        if row < 1 or column < 1:
            raise IndexError(f"Cell ({row}, {column}) is outside the sheet")
        # Writing past the grid grows it, as appending rows does on the host
        if row > self.max_rows:
            self.max_rows = row
        if column > self.max_columns:
            self.max_columns = column

    # ------------------------------------------------------------------
    # Cell access
    # ------------------------------------------------------------------

    def get_value(self, row: int, column: int) -> Any:
        return self._cells.get((row, column), "")

    def set_value(self, row: int, column: int, value: Any) -> None:
        self._check(row, column)
        if is_blank(value):
            self._cells.pop((row, column), None)
        else:
            self._cells[(row, column)] = value

    def clear_content(self, row: int, column: int) -> None:
        self._cells.pop((row, column), None)

    def get_values(self, row: int, column: int, num_rows: int, num_columns: int) -> List[List[Any]]:
        return [
            [self.get_value(r, c) for c in range(column, column + num_columns)]
            for r in range(row, row + num_rows)
        ]

    def set_values(self, row: int, column: int, values: Sequence[Sequence[Any]]) -> None:
        for r_offset, row_values in enumerate(values):
            for c_offset, value in enumerate(row_values):
                self.set_value(row + r_offset, column + c_offset, value)

    def get_row(self, row: int, width: Optional[int] = None) -> List[Any]:
        width = self.last_column if width is None else width
        return [self.get_value(row, c) for c in range(1, width + 1)]

    def get_column(self, column: int, start_row: int = 2, end_row: Optional[int] = None) -> List[Any]:
        end_row = self.last_row if end_row is None else end_row
        return [self.get_value(r, column) for r in range(start_row, end_row + 1)]

    def header_row(self) -> List[str]:
        return [str(v) for v in self.get_row(1)]

    def append_row(self, values: Sequence[Any]) -> int:
        row = self.last_row + 1
        self.set_values(row, 1, [values])
        return row

    def iter_rows(self, start_row: int = 2) -> Iterator[Tuple[int, List[Any]]]:
        width = self.last_column
        for r in range(start_row, self.last_row + 1):
            yield r, self.get_row(r, width)

    # ------------------------------------------------------------------
    # Column visibility and sizing
    # ------------------------------------------------------------------

    def hide_column(self, column: int) -> None:
        self.hidden_columns.add(column)

    def show_column(self, column: int) -> None:
        self.hidden_columns.discard(column)

    def show_all_columns(self) -> None:
        self.hidden_columns.clear()

    def set_column_width(self, column: int, width: int) -> None:
        self.column_widths[column] = width

    def auto_resize_columns(self, start_column: int = 1, num_columns: Optional[int] = None) -> None:
        """Size each column to its longest text, keeping explicit minimums."""
        num_columns = self.last_column - start_column + 1 if num_columns is None else num_columns
        for c in range(start_column, start_column + num_columns):
            longest = max((len(str(v)) for v in self.get_column(c, 1)), default=0)
            self.column_widths[c] = max(self.column_widths.get(c, 0), longest * 7 + 10)

    # ------------------------------------------------------------------
    # Formatting metadata
    # ------------------------------------------------------------------

    def set_data_validation(self, column: int, start_row: int, end_row: int, values: Sequence[str]) -> None:
        self.data_validations[column] = DataValidationRule(column, start_row, end_row, tuple(values))

    def clear_data_validations(self) -> None:
        self.data_validations.clear()

    def add_conditional_format(self, rule: ConditionalFormatRule) -> None:
        self.conditional_formats.append(rule)

    def set_number_format(self, column: int, fmt: str) -> None:
        self.number_formats[column] = fmt

    def protect(self, protection: Protection) -> Protection:
        self.protections.append(protection)
        return protection

    def clear_formatting(self) -> None:
        """Drop every formatting artefact while keeping cell content."""
        self.hidden_columns.clear()
        self.data_validations.clear()
        self.conditional_formats.clear()
        self.number_formats.clear()
        self.protections.clear()
        self.column_widths.clear()
        self.frozen_rows = 0

    def clear(self) -> None:
        self._cells.clear()
        self.clear_formatting()


class Workbook:
    """Named sheets of one document."""

    def __init__(self) -> None:
        self._sheets: Dict[str, Sheet] = {}

    @property
    def sheet_names(self) -> List[str]:
        return list(self._sheets)

    def get_sheet(self, name: str) -> Optional[Sheet]:
        return self._sheets.get(name)

    def insert_sheet(self, name: str) -> Sheet:
        if name in self._sheets:
            raise ValueError(f"A sheet named '{name}' already exists")
        sheet = Sheet(name=name)
        self._sheets[name] = sheet
        return sheet

    def add_sheet(self, sheet: Sheet) -> Sheet:
        self._sheets[sheet.name] = sheet
        return sheet

    def get_or_create_sheet(self, name: str) -> Sheet:
        sheet = self.get_sheet(name)
        if sheet is None:
            sheet = self.insert_sheet(name)
        return sheet

    def replace_sheet(self, name: str) -> Sheet:
        """Start a fresh sheet under ``name``, discarding any previous one."""
        self._sheets.pop(name, None)
        return self.insert_sheet(name)
