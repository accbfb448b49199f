"""
Monthly budget storage and budget-vs-actual tracking.
"""

import json
import logging
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Callable, Dict, Optional, Protocol, Tuple

from spend_analytics_mcp.core.exceptions import BudgetDataError, InvalidBudgetAmountError
from spend_analytics_mcp.models.budget import BudgetSnapshot
from spend_analytics_mcp.utils.date_utils import validate_month

logger = logging.getLogger(__name__)

BudgetKey = Tuple[int, int]


class BudgetStore(Protocol):
    """Keyed storage of one budget amount per (year, month)."""

    def get_budget(self, year: int, month: int) -> Optional[Decimal]:
        ...

    def set_budget(self, year: int, month: int, amount: Decimal) -> None:
        ...


class InMemoryBudgetStore:
    """Budgets held in a dict for the lifetime of the process."""

    def __init__(self) -> None:
        self._budgets: Dict[BudgetKey, Decimal] = {}

    def get_budget(self, year: int, month: int) -> Optional[Decimal]:
        return self._budgets.get((year, month))

    def set_budget(self, year: int, month: int, amount: Decimal) -> None:
        self._budgets[(year, month)] = amount


class JsonFileBudgetStore:
    """
    Budgets persisted to a JSON file as ``{"YYYY-MM": "amount"}``.

    The file is rewritten on every update; amounts are stored as strings so
    decimal values survive the round trip.
    """

    def __init__(self, path: Path):
        self.path = path
        self._budgets: Dict[BudgetKey, Decimal] = self._load()

    def _load(self) -> Dict[BudgetKey, Decimal]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            return {_parse_key(key): Decimal(str(value)) for key, value in raw.items()}
        except (json.JSONDecodeError, AttributeError, InvalidOperation, ValueError) as e:
            raise BudgetDataError(f"Malformed budget file {self.path}: {e}") from e

    def _save(self) -> None:
        payload = {
            f"{year:04d}-{month:02d}": str(amount)
            for (year, month), amount in sorted(self._budgets.items())
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)

    def get_budget(self, year: int, month: int) -> Optional[Decimal]:
        return self._budgets.get((year, month))

    def set_budget(self, year: int, month: int, amount: Decimal) -> None:
        self._budgets[(year, month)] = amount
        self._save()


def _parse_key(key: str) -> BudgetKey:
    year, month = key.split("-")
    return int(year), int(month)


class BudgetTracker:
    """
    Owns the budget store and classifies current spend against it.

    The tracker is the only writer to its store.
    """

    def __init__(self, store: Optional[BudgetStore] = None):
        self.store: BudgetStore = store if store is not None else InMemoryBudgetStore()

    def set_budget(self, year: int, month: int, amount: Decimal) -> None:
        """
        Create or replace the budget for (year, month).

        Raises:
            InvalidBudgetAmountError: If amount is negative (store unchanged)
            ValueError: If month is not in 1-12
        """
        validate_month(month)
        amount = Decimal(str(amount))
        if amount < 0:
            raise InvalidBudgetAmountError(f"Budget amount must be >= 0, got {amount}")

        self.store.set_budget(year, month, amount)
        logger.info("Budget for %04d-%02d set to %s", year, month, amount)

    def get_budget(self, year: int, month: int) -> Optional[Decimal]:
        return self.store.get_budget(year, month)

    def get_snapshot(
        self, year: int, month: int, spent_supplier: Callable[[], Decimal]
    ) -> Optional[BudgetSnapshot]:
        """
        Compare current spend with the budget for (year, month).

        Returns:
            BudgetSnapshot, or None when no budget has been set for the month
            (a zero budget is still a budget)
        """
        validate_month(month)
        amount = self.store.get_budget(year, month)
        if amount is None:
            return None

        spent = Decimal(str(spent_supplier()))
        return BudgetSnapshot(year=year, month=month, amount=amount, spent=spent)
