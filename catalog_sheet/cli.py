"""Command-line interface for catalog sheet maintenance.

The catalog sheet is loaded from a CSV file, the requested command runs
against it, and the sheet is written back. Per-document settings live in a
SQLite database.
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

__all__ = ["main", "parse_args", "build_orchestrator"]

from catalog_sheet.config import CSV_PATH, DB_PATH, FILTER_SHEET_NAME, PROBE_DELAY, REQUEST_TIMEOUT, SHEET_NAME
from catalog_sheet.csv_utils import export_columns_to_csv, load_sheet_from_csv, save_sheet_to_csv
from catalog_sheet.images import LocalImageStore, create_session
from catalog_sheet.logging_config import setup_logging
from catalog_sheet.orchestrator import CatalogOrchestrator, CommandResult, FilterConfig
from catalog_sheet.schema import (
    AVAILABILITY_LIST,
    CATEGORY_LIST,
    CONDITION_LIST,
    CURRENCY_LIST,
    PRODUCT_TYPE_LIST,
)
from catalog_sheet.settings import ConfigurationUpdate, SQLiteSettingsStore
from catalog_sheet.sheet import Workbook
from catalog_sheet.validation import summarize_errors


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Maintain a WhatsApp catalog sheet stored as CSV",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Lay out the sheet (headers, dropdowns, thumbnails)
  python -m catalog_sheet.cli setup

  # Validate every product row
  python -m catalog_sheet.cli validate

  # Switch to service listings priced in EUR
  python -m catalog_sheet.cli configure --product-type service --currency EUR

  # Import images from ./images/summer, published under https://cdn.example.com
  python -m catalog_sheet.cli set-folder summer
  python -m catalog_sheet.cli import-images --root images --base-url https://cdn.example.com

  # Export the columns relevant to the configured product type
  python -m catalog_sheet.cli export data/upload.csv
        """,
    )
    parser.add_argument(
        "--csv",
        default=os.getenv("CATALOG_CSV_PATH", CSV_PATH),
        help="Catalog sheet CSV path (default: %(default)s)",
    )
    parser.add_argument(
        "--db",
        default=os.getenv("CATALOG_DB_PATH", DB_PATH),
        help="SQLite settings database path (default: %(default)s)",
    )
    parser.add_argument(
        "--document",
        default="default",
        help="Document id the settings belong to (default: %(default)s)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log debug output to the console",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("setup", help="Write headers, dropdowns, formats and thumbnails")
    sub.add_parser("validate", help="Validate every populated row")
    sub.add_parser("options", help="Show configuration choices and saved values")

    configure = sub.add_parser("configure", help="Save default values and apply them to the sheet")
    configure.add_argument("--product-type", default="", choices=PRODUCT_TYPE_LIST)
    configure.add_argument("--currency", default="", choices=CURRENCY_LIST)
    configure.add_argument("--category", default="", choices=CATEGORY_LIST, metavar="CATEGORY")
    configure.add_argument("--availability", default="", choices=AVAILABILITY_LIST)
    configure.add_argument("--condition", default="", choices=CONDITION_LIST)

    set_folder = sub.add_parser("set-folder", help="Remember the image folder to import from")
    set_folder.add_argument("folder_id", help="Folder id (a directory name under --root on import)")
    set_folder.add_argument("--name", default="", help="Display name for the folder")

    import_images = sub.add_parser("import-images", help="Fill image_url from the image folder")
    import_images.add_argument("--root", default="images", help="Directory holding image folders")
    import_images.add_argument("--base-url", required=True, help="Public URL the root is served at")
    import_images.add_argument("--no-probe", action="store_true", help="Skip the URL reachability check")

    export = sub.add_parser("export", help="Export the columns relevant to a product type")
    export.add_argument("output", help="Output CSV path")
    export.add_argument("--product-type", default="", choices=PRODUCT_TYPE_LIST)

    filt = sub.add_parser("filter", help="Export rows matching price and category filters")
    filt.add_argument("output", help="Output CSV path")
    filt.add_argument("--min-price", type=float, default=0.0)
    filt.add_argument("--max-price", type=float, default=float("inf"))
    filt.add_argument("--categories", nargs="+", required=True, metavar="CATEGORY")
    filt.add_argument("--show-hidden", action="store_true", help="Include rows marked is_hidden")

    return parser.parse_args(argv)


def build_orchestrator(args: argparse.Namespace) -> CatalogOrchestrator:
    """Load the CSV-backed workbook and wire up the orchestrator.

    Probe delay and timeout are read from the environment at call time.
    """
    workbook = Workbook()
    sheet = workbook.insert_sheet(SHEET_NAME)
    loaded = load_sheet_from_csv(args.csv, sheet)
    print(f"Loaded {loaded} rows from {args.csv}")

    image_store = None
    if getattr(args, "root", None):
        image_store = LocalImageStore(Path(args.root), args.base_url)

    return CatalogOrchestrator(
        workbook,
        SQLiteSettingsStore(args.db, document_id=args.document),
        image_store=image_store,
        session=create_session(),
        probe_delay=float(os.getenv("CATALOG_PROBE_DELAY", PROBE_DELAY)),
        request_timeout=int(os.getenv("CATALOG_REQUEST_TIMEOUT", REQUEST_TIMEOUT)),
    )


def _report(result: CommandResult, orchestrator: CatalogOrchestrator) -> int:
    for notice in orchestrator.notifier.notices:
        print(f"[{notice.severity}] {notice.message}")
    if not result.ok:
        print(f"Failed: {result.message}")
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    load_dotenv(dotenv_path=Path.cwd() / ".env")
    args = parse_args(argv)
    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    orchestrator = build_orchestrator(args)
    command = args.command

    if command == "options":
        for key, value in orchestrator.configuration_options().items():
            print(f"{key}: {value}")
        return 0

    if command == "validate":
        result = orchestrator.run_command("validate", orchestrator.validate_all)
        if result.ok:
            for line in summarize_errors(result.data):
                print(line)
        return _report(result, orchestrator)

    if command == "export":
        result = orchestrator.run_command("export", orchestrator.export_columns, args.product_type or None)
        if result.ok:
            export_columns_to_csv(result.data, args.output)
        return _report(result, orchestrator)

    if command == "filter":
        filter_config = FilterConfig(
            min_price=args.min_price,
            max_price=args.max_price,
            categories=args.categories,
            show_hidden=args.show_hidden,
        )
        result = orchestrator.run_command("filter", orchestrator.apply_filter, filter_config)
        if result.ok:
            print(f"{result.data} matching rows")
            results_sheet = orchestrator.workbook.get_sheet(FILTER_SHEET_NAME)
            if results_sheet is not None:
                save_sheet_to_csv(results_sheet, args.output)
        return _report(result, orchestrator)

    if command == "setup":
        result = orchestrator.run_command("setup", orchestrator.setup_sheet)
    elif command == "configure":
        update = ConfigurationUpdate(
            product_type=args.product_type,
            currency=args.currency,
            category=args.category,
            availability=args.availability,
            condition=args.condition,
        )
        result = orchestrator.run_command("configure", orchestrator.save_configuration, update)
    elif command == "set-folder":
        result = orchestrator.run_command("set-folder", orchestrator.set_image_folder, args.folder_id, args.name)
    elif command == "import-images":
        result = orchestrator.run_command("import-images", orchestrator.import_images, probe=not args.no_probe)
    else:
        print(f"Unknown command: {command}")
        return 2

    if result.ok:
        save_sheet_to_csv(orchestrator.sheet, args.csv)
    return _report(result, orchestrator)


if __name__ == "__main__":
    sys.exit(main())
