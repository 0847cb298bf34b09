"""Shared test fixtures for the books engine test suite."""

import logging
from decimal import Decimal

import pytest

from books_engine.core.logging_config import ENGINE_LOGGERS, InterceptHandler
from books_engine.domain.models.allocation import Obligation
from books_engine.domain.models.tax_rate_config import TaxRateTable


@pytest.fixture
def tax_rates() -> TaxRateTable:
    """Organization tax master as the settings service would supply it."""
    return TaxRateTable(
        rates={
            "none": Decimal("0"),
            "GST5": Decimal("5"),
            "GST12": Decimal("12"),
            "GST18": Decimal("18"),
            "GST28": Decimal("28"),
        },
        source="settings",
    )


@pytest.fixture
def jan_obligations() -> list[Obligation]:
    """Three unpaid bills, deliberately supplied out of date order."""
    return [
        Obligation(id="BILL-003", date="2025-01-10", balance=Decimal("50")),
        Obligation(id="BILL-001", date="2025-01-01", balance=Decimal("100")),
        Obligation(id="BILL-002", date="2025-01-05", balance=Decimal("200")),
    ]


@pytest.fixture
def restore_engine_logging():
    """Undo setup_logging() so later tests see default stdlib logging."""
    from loguru import logger

    root = logging.getLogger()
    root_level = root.level
    yield
    logger.remove()
    root.handlers = [h for h in root.handlers if not isinstance(h, InterceptHandler)]
    root.setLevel(root_level)
    for name in ENGINE_LOGGERS:
        engine_logger = logging.getLogger(name)
        engine_logger.handlers = []
        engine_logger.propagate = True
        engine_logger.setLevel(logging.NOTSET)
