"""Shared test fixtures for the catalog sheet test suite."""

import random
from typing import Any, Dict, List
from unittest.mock import MagicMock

import pytest

from catalog_sheet.config import SHEET_NAME
from catalog_sheet.notifications import Notifier
from catalog_sheet.orchestrator import CatalogOrchestrator
from catalog_sheet.schema import HEADERS
from catalog_sheet.settings import MemorySettingsStore
from catalog_sheet.sheet import Sheet, Workbook


def _row_in_header_order(**values: Any) -> List[Any]:
    return [values.get(h, "") for h in HEADERS]


@pytest.fixture
def make_row():
    """Build a data row in canonical header order from keyword values."""
    return _row_in_header_order


@pytest.fixture
def valid_standard() -> Dict[str, str]:
    """Field values for a standard product that passes every rule."""
    return {
        "id": "123456",
        "name": "Ceramic Mug",
        "price": "12.50",
        "currency": "USD",
        "image_url": "https://cdn.example.com/mug.jpg",
        "availability": "in stock",
        "condition": "new",
        "product_type": "standard",
    }


@pytest.fixture
def workbook() -> Workbook:
    return Workbook()


@pytest.fixture
def main_sheet(workbook) -> Sheet:
    """Catalog sheet with the canonical header row and no data."""
    sheet = workbook.insert_sheet(SHEET_NAME)
    sheet.set_values(1, 1, [HEADERS])
    return sheet


@pytest.fixture
def settings() -> MemorySettingsStore:
    return MemorySettingsStore()


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()


@pytest.fixture
def mock_session():
    """requests.Session stand-in whose HEAD calls succeed with 200."""
    session = MagicMock()
    session.head.return_value = MagicMock(status_code=200)
    return session


@pytest.fixture
def orchestrator(workbook, main_sheet, settings, notifier, mock_session) -> CatalogOrchestrator:
    return CatalogOrchestrator(
        workbook,
        settings,
        notifier=notifier,
        session=mock_session,
        rng=random.Random(42),
        probe_delay=0,
    )
