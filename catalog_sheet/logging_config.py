"""Logging configuration for the catalog engine.

Console output for interactive runs, daily JSONL files for later analysis,
and optionally an ``Error_Log`` sheet inside the workbook so the log travels
with the document.
"""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional

from catalog_sheet.config import LOG_SHEET_NAME

if TYPE_CHECKING:
    from catalog_sheet.sheet import Workbook

__all__ = [
    "setup_logging",
    "get_logger",
    "log_catalog_event",
    "JSONLFileHandler",
    "SheetLogHandler",
    "LOG_DIR",
    "LOG_SHEET_HEADERS",
]

LOG_DIR = Path(__file__).parent.parent / "logs"

LOG_SHEET_HEADERS = ["Timestamp", "Level", "Message", "Function", "File", "Stack"]


class JSONLFileHandler(logging.Handler):
    """Custom handler that writes structured JSONL logs."""

    def __init__(self, log_dir: Path, prefix: str = "catalog"):
        super().__init__()
        self.log_dir = log_dir
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.prefix = prefix

    def _get_log_file(self) -> Path:
        """Get log file path, rotating daily."""
        today = datetime.now().strftime("%Y%m%d")
        return self.log_dir / f"{self.prefix}_{today}.jsonl"

    def emit(self, record: logging.LogRecord) -> None:
        try:
            entry = {
                "timestamp": datetime.now().isoformat(),
                "level": record.levelname,
                "logger": record.name,
                "message": record.getMessage(),
            }
            if hasattr(record, "event_type"):
                entry["event_type"] = record.event_type
            if hasattr(record, "extra_data"):
                entry.update(record.extra_data)
            if record.exc_info:
                entry["stack"] = logging.Formatter().formatException(record.exc_info)

            with open(self._get_log_file(), "a", encoding="utf-8") as f:
                f.write(json.dumps(entry, ensure_ascii=False, default=str) + "\n")
        except Exception:
            self.handleError(record)


class SheetLogHandler(logging.Handler):
    """Append log rows to a sheet of the workbook, creating it on first use."""

    def __init__(self, workbook: "Workbook", sheet_name: str = LOG_SHEET_NAME):
        super().__init__()
        self.workbook = workbook
        self.sheet_name = sheet_name

    def _get_log_sheet(self):
        sheet = self.workbook.get_sheet(self.sheet_name)
        if sheet is None:
            sheet = self.workbook.insert_sheet(self.sheet_name)
            sheet.append_row(LOG_SHEET_HEADERS)
            sheet.frozen_rows = 1
        return sheet

    def emit(self, record: logging.LogRecord) -> None:
        try:
            stack = ""
            if record.exc_info:
                stack = logging.Formatter().formatException(record.exc_info)
            self._get_log_sheet().append_row([
                datetime.fromtimestamp(record.created).isoformat(),
                record.levelname,
                record.getMessage(),
                record.funcName,
                record.filename,
                stack,
            ])
        except Exception:
            self.handleError(record)


class ColoredConsoleHandler(logging.StreamHandler):
    """Console handler with colored output for better readability."""

    COLORS = {
        "DEBUG": "\033[36m",      # Cyan
        "INFO": "\033[32m",       # Green
        "WARNING": "\033[33m",    # Yellow
        "ERROR": "\033[31m",      # Red
        "CRITICAL": "\033[35m",   # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        if hasattr(self.stream, "isatty") and self.stream.isatty():
            color = self.COLORS.get(record.levelname, "")
            return f"{color}{text}{self.RESET}"
        return text


def setup_logging(
    level: int = logging.INFO,
    log_to_file: bool = True,
    log_to_console: bool = True,
    log_dir: Optional[Path] = None,
    workbook: Optional["Workbook"] = None,
) -> logging.Logger:
    """Set up logging for the catalog engine.

    Args:
        level: Logging level (default: INFO)
        log_to_file: Whether to log to JSONL file
        log_to_console: Whether to log to console
        log_dir: Custom log directory (default: project logs/)
        workbook: When given, WARNING and above also go to its Error_Log sheet

    Returns:
        Configured package logger
    """
    logger = logging.getLogger("catalog_sheet")
    logger.setLevel(level)
    logger.handlers.clear()

    if log_to_console:
        console_handler = ColoredConsoleHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(message)s",
            datefmt="%H:%M:%S",
        ))
        logger.addHandler(console_handler)

    if log_to_file:
        file_handler = JSONLFileHandler(log_dir or LOG_DIR)
        file_handler.setLevel(logging.DEBUG)
        logger.addHandler(file_handler)

    if workbook is not None:
        sheet_handler = SheetLogHandler(workbook)
        sheet_handler.setLevel(logging.WARNING)
        logger.addHandler(sheet_handler)

    return logger


def get_logger(name: str = "catalog_sheet") -> logging.Logger:
    """Get a logger instance, prefixed with 'catalog_sheet.'."""
    if name == "catalog_sheet":
        return logging.getLogger("catalog_sheet")
    return logging.getLogger(f"catalog_sheet.{name}")


def log_catalog_event(
    event_type: str,
    data: Dict[str, Any],
    level: int = logging.INFO,
    logger_name: str = "catalog_sheet",
) -> None:
    """Log a structured catalog event.

    Args:
        event_type: Type of event (e.g., 'setup', 'validate_all', 'import_images')
        data: Event-specific data; an optional 'message' key becomes the log message
        level: Log level
        logger_name: Logger to use
    """
    logger = get_logger(logger_name)
    if not logger.isEnabledFor(level):
        return

    record = logger.makeRecord(
        logger.name,
        level,
        "(catalog)",
        0,
        data.get("message", event_type),
        (),
        None,
    )
    record.event_type = event_type
    record.extra_data = {k: v for k, v in data.items() if k != "message"}

    logger.handle(record)
