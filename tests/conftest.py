"""
Pytest configuration and fixtures for spend-analytics-mcp tests.
"""

from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Callable, List, Optional

import pytest

from spend_analytics_mcp.models.category import CategoryRef, TagRef
from spend_analytics_mcp.models.expense import ExpenseRecord


@pytest.fixture(scope="session")
def expenses_file() -> Path:
    """Path to the fixture expense export (January and February 2026)."""
    return Path(__file__).parent / "fixtures" / "expenses.json"


@pytest.fixture
def make_expense() -> Callable[..., ExpenseRecord]:
    """Factory for expense records with sensible defaults."""
    counter = {"next_id": 1}

    def _make(
        amount: str = "10.00",
        when: datetime = datetime(2026, 1, 15, 12, 0),
        category: Optional[CategoryRef] = None,
        tags: Optional[List[TagRef]] = None,
        id: Optional[int] = None,
    ) -> ExpenseRecord:
        if id is None:
            id = counter["next_id"]
        counter["next_id"] = id + 1
        return ExpenseRecord(
            id=id,
            amount=Decimal(amount),
            transaction_date=when,
            category=category,
            tags=tags or [],
        )

    return _make
