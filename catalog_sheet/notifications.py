"""User-facing notices.

The host shows these as toasts or alerts; here they are recorded, logged and
forwarded to any registered listeners. Sending a notice never raises.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List

from catalog_sheet.logging_config import get_logger

__all__ = ["Notice", "Notifier", "SEVERITY_LEVELS"]

logger = get_logger("notifications")

SEVERITY_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


@dataclass(frozen=True)
class Notice:
    message: str
    severity: str = "INFO"


class Notifier:
    """Collects notices and fans them out to listeners."""

    def __init__(self) -> None:
        self.notices: List[Notice] = []
        self._listeners: List[Callable[[Notice], None]] = []

    def register_listener(self, callback: Callable[[Notice], None]) -> None:
        self._listeners.append(callback)

    def notify(self, message: str, severity: str = "INFO") -> Notice:
        severity = severity.upper()
        if severity not in SEVERITY_LEVELS:
            severity = "INFO"
        notice = Notice(message=message, severity=severity)
        self.notices.append(notice)
        logger.log(SEVERITY_LEVELS[severity], message)

        for callback in self._listeners:
            try:
                callback(notice)
            except Exception as e:
                logger.warning(f"Notice listener failed: {e}")
        return notice

    def messages(self, severity: str = "") -> List[str]:
        return [n.message for n in self.notices if not severity or n.severity == severity.upper()]

    def clear(self) -> None:
        self.notices.clear()
