"""Catalog orchestration.

Sequences the resolver, validation and derivation engines in response to
cell edits and bulk commands. Configuration is read fresh from the settings
store at the start of each operation and passed down explicitly.

Hosts should call commands through ``run_command``, which turns any failure
into a logged error and a user-facing notice instead of an exception.
"""

import math
import random
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

import requests  # type: ignore[import-untyped]

from catalog_sheet.columns import ColumnMap, column_letter
from catalog_sheet.config import (
    EXPORT_SHEET_NAME,
    FILTER_SHEET_NAME,
    FIRST_DATA_ROW,
    GENERIC_ERROR_MESSAGE,
    HEADER_ROW,
    PRICE_NUMBER_FORMAT,
    PROBE_DELAY,
    REQUEST_TIMEOUT,
    REQUIRED_HIGHLIGHT_COLOR,
    SHEET_NAME,
    THUMBNAIL_COLUMN_WIDTH,
)
from catalog_sheet.derivation import (
    apply_column_visibility,
    backfill_defaults,
    clear_thumbnail,
    derive_thumbnail,
    generate_and_set_unique_id,
    generate_missing_ids,
    init_thumbnail_column,
    set_column_values,
    update_thumbnail,
)
from catalog_sheet.errors import CatalogError, ConfigurationError, ExternalServiceError
from catalog_sheet.images import ImageStore, list_image_urls, probe_url
from catalog_sheet.logging_config import get_logger, log_catalog_event
from catalog_sheet.models import cell_text, is_blank
from catalog_sheet.notifications import Notifier
from catalog_sheet.schema import (
    DOMAIN_COLUMNS,
    GENERATED_COLUMNS,
    HEADERS,
    PRICE_COLUMNS,
    REQUIRED_HEADERS,
    get_relevant_columns,
)
from catalog_sheet.settings import (
    PROPERTY_KEYS,
    Configuration,
    ConfigurationUpdate,
    SettingsStore,
    configuration_options,
)
from catalog_sheet.sheet import ConditionalFormatRule, Protection, Sheet, Workbook
from catalog_sheet.url_validation import URLValidationError, validate_image_url
from catalog_sheet.validation import validate_product, validate_rows

__all__ = [
    "EditEvent",
    "EditOutcome",
    "CommandResult",
    "FilterConfig",
    "CatalogOrchestrator",
]

logger = get_logger("orchestrator")

HEADER_EDIT_NOTICE = "You cannot edit the header row."
THUMBNAIL_EDIT_NOTICE = "The thumbnail column is automatically generated and cannot be edited directly."
BLANK_CELL_FORMULA = '=ISBLANK(INDIRECT("R[0]C[0]", FALSE))'

# Configuration attributes that overwrite their whole column when saved
OVERWRITE_ON_SAVE = {
    "currency": "currency",
    "availability": "availability",
    "condition": "condition",
}


@dataclass
class EditEvent:
    """A single-cell edit the host has already applied to the sheet."""

    row: int
    column: int
    value: Any = ""
    old_value: Any = ""
    sheet_name: str = SHEET_NAME


@dataclass
class EditOutcome:
    row: int
    handled: bool = True
    reverted: bool = False
    assigned_id: Optional[str] = None
    thumbnail: Optional[str] = None
    extended_validation: bool = False
    errors: List[str] = field(default_factory=list)


@dataclass
class CommandResult:
    ok: bool
    message: str
    data: Any = None


@dataclass
class FilterConfig:
    min_price: float = 0.0
    max_price: float = math.inf
    categories: Sequence[str] = ()
    show_hidden: bool = False


class CatalogOrchestrator:
    """Entry point for edit events and bulk commands on one document."""

    def __init__(
        self,
        workbook: Workbook,
        settings: SettingsStore,
        notifier: Optional[Notifier] = None,
        image_store: Optional[ImageStore] = None,
        session: Optional[requests.Session] = None,
        rng: Optional[random.Random] = None,
        probe_delay: float = PROBE_DELAY,
        request_timeout: int = REQUEST_TIMEOUT,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.workbook = workbook
        self.settings = settings
        self.notifier = notifier or Notifier()
        self.image_store = image_store
        self.session = session
        self.rng = rng
        self.probe_delay = probe_delay
        self.request_timeout = request_timeout
        self._sleep = sleep

    # ------------------------------------------------------------------
    # Shared helpers
    # ------------------------------------------------------------------

    @property
    def sheet(self) -> Sheet:
        return self.get_or_create_main_sheet()

    def get_or_create_main_sheet(self) -> Sheet:
        sheet = self.workbook.get_sheet(SHEET_NAME)
        if sheet is None:
            sheet = self.workbook.insert_sheet(SHEET_NAME)
            logger.info(f"Created new '{SHEET_NAME}' sheet")
        return sheet

    def load_configuration(self) -> Configuration:
        return Configuration.load(self.settings)

    def configuration_options(self) -> Dict[str, object]:
        return configuration_options(self.settings)

    def _default_product_type(self, columns: ColumnMap, config: Configuration) -> Optional[str]:
        # A product_type column wins over the configured default
        return None if "product_type" in columns else config.product_type

    def run_command(self, name: str, func: Callable[..., Any], *args: Any, **kwargs: Any) -> CommandResult:
        """Run a command, converting any failure into a notice and a failed result."""
        try:
            data = func(*args, **kwargs)
        except CatalogError as e:
            logger.error(f"{name} failed: {e}", exc_info=True)
            self.notifier.notify(f"Error in {name}: {e}", "ERROR")
            return CommandResult(ok=False, message=str(e))
        except Exception:
            logger.exception(f"Unexpected error in {name}")
            self.notifier.notify(GENERIC_ERROR_MESSAGE, "ERROR")
            return CommandResult(ok=False, message=GENERIC_ERROR_MESSAGE)
        return CommandResult(ok=True, message=f"{name} completed", data=data)

    # ------------------------------------------------------------------
    # Edit events
    # ------------------------------------------------------------------

    def edit_cell(self, row: int, column: Any, value: Any) -> EditOutcome:
        """Apply an edit the way the host does, then handle the event.

        ``column`` may be a 1-based index or a header name.
        """
        sheet = self.sheet
        if isinstance(column, str):
            column = ColumnMap.from_sheet(sheet).require(column)
        old_value = sheet.get_value(row, column)
        sheet.set_value(row, column, value)
        return self.on_edit(EditEvent(row=row, column=column, value=value, old_value=old_value))

    def _revert(self, sheet: Sheet, event: EditEvent, notice: str) -> EditOutcome:
        sheet.set_value(event.row, event.column, event.old_value)
        self.notifier.notify(notice, "WARNING")
        return EditOutcome(row=event.row, reverted=True)

    def on_edit(self, event: EditEvent) -> EditOutcome:
        """Handle an edit on the catalog sheet.

        Header and thumbnail edits are reverted and stop there. An image_url
        edit assigns the row's ID if needed and refreshes its thumbnail.
        Rows beyond the dropdown constraints get them extended. The row is
        then validated; errors are reported but never undo the edit.
        """
        if event.sheet_name != SHEET_NAME:
            return EditOutcome(row=event.row, handled=False)

        sheet = self.sheet
        if event.row == HEADER_ROW:
            return self._revert(sheet, event, HEADER_EDIT_NOTICE)

        columns = ColumnMap.from_sheet(sheet)
        header = columns.name_at(event.column)
        if header in GENERATED_COLUMNS:
            return self._revert(sheet, event, THUMBNAIL_EDIT_NOTICE)

        outcome = EditOutcome(row=event.row)

        if header == "image_url":
            image_url = cell_text(sheet.get_value(event.row, event.column))
            if image_url:
                id_outcome = generate_and_set_unique_id(sheet, event.row, self.rng)
                if id_outcome.ok:
                    outcome.assigned_id = id_outcome.value
                thumb_outcome = update_thumbnail(sheet, event.row, image_url)
            else:
                thumb_outcome = clear_thumbnail(sheet, event.row)
            if thumb_outcome.ok:
                outcome.thumbnail = thumb_outcome.value

        if not self._constraints_cover(sheet, event.row):
            self.extend_data_validation()
            outcome.extended_validation = True

        outcome.errors = self.validate_row(event.row)
        if outcome.errors:
            self.notifier.notify(
                f"Validation errors in row {event.row}: {', '.join(outcome.errors)}",
                "WARNING",
            )
        return outcome

    @staticmethod
    def _constraints_cover(sheet: Sheet, row: int) -> bool:
        rules = list(sheet.data_validations.values())
        return bool(rules) and all(rule.end_row >= row for rule in rules)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_row(self, row: int) -> List[str]:
        """Validate one sheet row against its product type's rules."""
        sheet = self.sheet
        config = self.load_configuration()
        columns = ColumnMap.from_sheet(sheet)
        record = columns.record(sheet.get_row(row, len(columns)), self._default_product_type(columns, config))

        errors = validate_product(record)
        if errors:
            logger.warning(f"Validation errors in row {row}: {', '.join(errors)}")
        else:
            logger.info(f"Row {row} validated successfully")
        return errors

    def validate_all(self) -> List[str]:
        """Validate every populated data row; one labelled entry per failing row."""
        sheet = self.sheet
        config = self.load_configuration()
        columns = ColumnMap.from_sheet(sheet)
        rows = sheet.get_values(FIRST_DATA_ROW, 1, max(sheet.last_row - 1, 0), len(columns))

        errors = validate_rows(
            columns.headers,
            rows,
            default_product_type=self._default_product_type(columns, config),
            first_row_number=FIRST_DATA_ROW,
        )
        log_catalog_event(
            "validate_all",
            {"message": f"Validation completed. {len(errors)} errors found.", "error_count": len(errors)},
        )
        return errors

    # ------------------------------------------------------------------
    # Domain constraints
    # ------------------------------------------------------------------

    def apply_domain_constraints(self) -> List[str]:
        """Replace the dropdown constraints on every domain column.

        Returns the names of the columns constrained.
        """
        sheet = self.sheet
        columns = ColumnMap.from_sheet(sheet)
        end_row = max(sheet.last_row, FIRST_DATA_ROW)

        sheet.clear_data_validations()
        applied: List[str] = []
        for column_name, values in DOMAIN_COLUMNS.items():
            index = columns.index(column_name)
            if index is None:
                logger.warning(f"The header '{column_name}' was not found. Data validation not set.")
                continue
            sheet.set_data_validation(index, FIRST_DATA_ROW, end_row, values)
            applied.append(column_name)
            logger.debug(f"Data validation set for column {column_name} from row {FIRST_DATA_ROW} to {end_row}")
        return applied

    def extend_data_validation(self) -> List[str]:
        applied = self.apply_domain_constraints()
        logger.info(f"Data validation extended to row {self.sheet.last_row}")
        return applied

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def setup_sheet(self) -> Sheet:
        """Lay out the catalog sheet. Safe to run again; row data is kept.

        Raises:
            SchemaError: If a column setup depends on cannot be resolved
        """
        log_catalog_event("setup", {"message": "Starting sheet setup"})
        sheet = self.sheet
        config = self.load_configuration()

        self._align_columns(sheet)
        sheet.clear_formatting()
        sheet.set_values(HEADER_ROW, 1, [HEADERS])
        columns = ColumnMap.from_sheet(sheet)

        self.apply_domain_constraints()

        end_row = max(sheet.last_row, FIRST_DATA_ROW)
        for header in REQUIRED_HEADERS:
            sheet.add_conditional_format(ConditionalFormatRule(
                column=columns.require(header),
                start_row=FIRST_DATA_ROW,
                end_row=end_row,
                formula=BLANK_CELL_FORMULA,
                background=REQUIRED_HIGHLIGHT_COLOR,
            ))

        for header in PRICE_COLUMNS:
            sheet.set_number_format(columns.require(header), PRICE_NUMBER_FORMAT)

        init_thumbnail_column(sheet)

        sheet.frozen_rows = 1
        sheet.protect(Protection(
            description="Header Row",
            start_row=HEADER_ROW,
            end_row=HEADER_ROW,
            start_column=1,
            end_column=sheet.last_column,
        ))
        thumbnail_column = columns.require("thumbnail")
        sheet.protect(Protection(
            description="Thumbnail Column",
            start_row=FIRST_DATA_ROW,
            end_row=end_row,
            start_column=thumbnail_column,
            end_column=thumbnail_column,
            warning_only=True,
        ))
        sheet.set_column_width(thumbnail_column, THUMBNAIL_COLUMN_WIDTH)
        sheet.auto_resize_columns()

        apply_column_visibility(sheet, config.product_type)

        log_catalog_event(
            "setup",
            {
                "message": "Spreadsheet setup completed successfully",
                "rows": max(sheet.last_row - 1, 0),
                "last_column": column_letter(sheet.last_column),
            },
        )
        return sheet

    @staticmethod
    def _align_columns(sheet: Sheet) -> bool:
        """Move existing columns so the standard headers sit at their usual positions.

        Columns outside the standard set keep their header and values and
        follow the standard ones in their original order. Returns True when
        the sheet was rearranged.
        """
        current = sheet.header_row()
        if all(is_blank(h) for h in current) or current[:len(HEADERS)] == HEADERS:
            return False

        target: Dict[int, int] = {}
        extra_headers: List[str] = []
        placed = set()
        for column, header in enumerate(current, start=1):
            if header in HEADERS and header not in placed:
                target[column] = HEADERS.index(header) + 1
                placed.add(header)
            else:
                extra_headers.append(header)
                target[column] = len(HEADERS) + len(extra_headers)

        data = sheet.get_values(FIRST_DATA_ROW, 1, max(sheet.last_row - 1, 0), len(current))
        sheet.clear()
        sheet.set_values(HEADER_ROW, 1, [HEADERS + extra_headers])
        for row, values in enumerate(data, start=FIRST_DATA_ROW):
            for column, value in enumerate(values, start=1):
                sheet.set_value(row, target[column], value)

        logger.warning(f"Rearranged {len(current)} columns to the standard header order")
        return True

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def hide_irrelevant_columns(self) -> List[str]:
        """Hide the columns the configured product type does not use."""
        return apply_column_visibility(self.sheet, self.load_configuration().product_type)

    def backfill_defaults(self) -> Dict[str, int]:
        """Fill blank defaulted cells for the configured type, then fix visibility."""
        config = self.load_configuration()
        filled = backfill_defaults(self.sheet, config)
        self.hide_irrelevant_columns()
        return filled

    def save_configuration(self, update: ConfigurationUpdate) -> Configuration:
        """Persist the submitted defaults and bring the sheet in line with them.

        Raises:
            ConfigurationError: If a submitted value is outside its domain
        """
        update.validate()
        changed = update.persist(self.settings)
        config = self.load_configuration()
        sheet = self.sheet

        if "product_type" in changed:
            apply_column_visibility(sheet, config.product_type)

        for attr, column_name in OVERWRITE_ON_SAVE.items():
            if attr in changed:
                set_column_values(sheet, column_name, changed[attr])

        self.backfill_defaults()
        self.apply_domain_constraints()

        self.notifier.notify("Configuration updated successfully")
        return config

    def set_image_folder(self, folder_id: str, folder_name: str = "") -> Configuration:
        """Remember which image folder to import from.

        Raises:
            ConfigurationError: If the folder id is empty
        """
        if not isinstance(folder_id, str) or not folder_id.strip():
            raise ConfigurationError("Invalid folder name provided.")
        folder_id = folder_id.strip()
        folder_name = (folder_name or "").strip() or folder_id

        self.settings.set_many({
            PROPERTY_KEYS["image_folder_id"]: folder_id,
            PROPERTY_KEYS["image_folder_name"]: folder_name,
        })
        logger.info(f'Image folder set to "{folder_name}" ({folder_id})')
        return self.load_configuration()

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    def probe_image_urls(self, urls: Sequence[str]) -> Dict[str, Optional[int]]:
        """Probe each URL once, pausing between calls. Failures become notices."""
        results: Dict[str, Optional[int]] = {}
        for i, url in enumerate(urls):
            if i > 0 and self.probe_delay > 0:
                self._sleep(self.probe_delay)
            try:
                results[url] = probe_url(url, session=self.session, timeout=self.request_timeout)
            except ExternalServiceError as e:
                self.notifier.notify(f"Row {FIRST_DATA_ROW + i}: {e}", "WARNING")
                results[url] = None
        logger.info("All image URL tests completed")
        return results

    def import_images(self, probe: bool = True) -> List[str]:
        """Fill the image_url column from the configured image folder.

        Thumbnails, missing IDs and default values follow the new URLs.

        Raises:
            ConfigurationError: If no folder or image store is configured
            ExternalServiceError: If the folder cannot be listed
            SchemaError: If the sheet has no image_url column
        """
        config = self.load_configuration()
        if self.image_store is None:
            raise ConfigurationError("No image store configured")
        if not config.image_folder_id:
            raise ConfigurationError("Image folder not set. Please set up the folder first.")

        urls: List[str] = []
        for raw_url in list_image_urls(self.image_store, config.image_folder_id):
            try:
                urls.append(validate_image_url(raw_url))
            except URLValidationError as e:
                logger.warning(f"Skipping image {raw_url!r}: {e}")

        if not urls:
            self.notifier.notify("No image URLs retrieved or set.", "WARNING")
            return []

        sheet = self.sheet
        image_column = ColumnMap.from_sheet(sheet).require("image_url")
        sheet.set_values(FIRST_DATA_ROW, image_column, [[url] for url in urls])
        logger.info(f"Set {len(urls)} image URLs in the sheet")

        init_thumbnail_column(sheet)
        if probe:
            self.probe_image_urls(urls)
        generate_missing_ids(sheet, self.rng)
        self.backfill_defaults()
        sheet.auto_resize_columns(1, 1)

        self.notifier.notify(f"Successfully imported {len(urls)} image URLs.")
        log_catalog_event("import_images", {"message": "Images imported", "count": len(urls)})
        return urls

    def check_thumbnails(self) -> List[int]:
        """Rows whose thumbnail differs from what their image URL derives."""
        sheet = self.sheet
        columns = ColumnMap.from_sheet(sheet)
        thumbnail_column = columns.index("thumbnail")
        image_column = columns.index("image_url")
        if thumbnail_column is None or image_column is None:
            logger.error("Could not find 'thumbnail' or 'image_url' column")
            return []

        stale = []
        for row in range(FIRST_DATA_ROW, sheet.last_row + 1):
            expected = derive_thumbnail(cell_text(sheet.get_value(row, image_column)))
            if cell_text(sheet.get_value(row, thumbnail_column)) != expected:
                logger.warning(f"Row {row}: thumbnail out of date")
                stale.append(row)
        return stale

    # ------------------------------------------------------------------
    # Export and filtering
    # ------------------------------------------------------------------

    def export_columns(self, product_type: Optional[str] = None) -> Sheet:
        """Copy the columns relevant to ``product_type`` into the export sheet.

        Generated columns are left out and empty rows are skipped.
        """
        sheet = self.sheet
        product_type = product_type or self.load_configuration().product_type
        columns = ColumnMap.from_sheet(sheet)
        export_headers = [
            name for name in get_relevant_columns(product_type)
            if name not in GENERATED_COLUMNS and name in columns
        ]
        # Keep the sheet's column order
        export_headers.sort(key=lambda name: columns.index(name))

        export = self.workbook.replace_sheet(EXPORT_SHEET_NAME)
        export.append_row(export_headers)
        for _row, values in sheet.iter_rows(FIRST_DATA_ROW):
            picked = [values[columns.index(name) - 1] for name in export_headers]
            if all(is_blank(v) for v in picked):
                continue
            export.append_row(picked)

        logger.info(f"Exported {max(export.last_row - 1, 0)} rows with {len(export_headers)} columns")
        return export

    def apply_filter(self, filter_config: FilterConfig) -> int:
        """Copy rows matching price range, categories and visibility into a results sheet."""
        sheet = self.sheet
        columns = ColumnMap.from_sheet(sheet)
        price_column = columns.index("price")
        category_column = columns.index("category_id")
        hidden_column = columns.index("is_hidden")

        matches = []
        for _row, values in sheet.iter_rows(FIRST_DATA_ROW):
            price = _to_number(values[price_column - 1]) if price_column else math.nan
            category = cell_text(values[category_column - 1]) if category_column else ""
            hidden = cell_text(values[hidden_column - 1]).lower() if hidden_column else ""
            if (
                filter_config.min_price <= price <= filter_config.max_price
                and category in filter_config.categories
                and (filter_config.show_hidden or hidden != "true")
            ):
                matches.append(values)

        if matches:
            results = self.workbook.replace_sheet(FILTER_SHEET_NAME)
            results.append_row(columns.headers)
            for values in matches:
                results.append_row(values)

        logger.info(f"Advanced filter applied: {len(matches)} results")
        return len(matches)


def _to_number(value: Any) -> float:
    try:
        return float(cell_text(value))
    except ValueError:
        return math.nan
