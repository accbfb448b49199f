"""
Budget snapshot model.
"""

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, computed_field

# Fixed status boundaries (green / yellow / red)
NEAR_RATIO = 0.75
OVER_RATIO = 1.0


class BudgetStatus(str, Enum):
    """Spend status relative to the monthly budget."""

    UNDER = "UNDER"
    NEAR = "NEAR"
    OVER = "OVER"


def classify_ratio(ratio: float) -> BudgetStatus:
    """
    Map a spent/budget ratio to a status.

    0.75 itself already counts as NEAR; anything strictly above 1.0 is OVER.
    """
    if ratio > OVER_RATIO:
        return BudgetStatus.OVER
    if ratio >= NEAR_RATIO:
        return BudgetStatus.NEAR
    return BudgetStatus.UNDER


class BudgetSnapshot(BaseModel):
    """
    Budget vs. actual for one (year, month).

    ``ratio``, ``status`` and ``remaining`` are derived on every access from
    ``amount`` and ``spent``.
    """

    model_config = {"frozen": True}

    year: int
    month: int = Field(ge=1, le=12)
    amount: Decimal
    spent: Decimal

    @computed_field  # type: ignore[prop-decorator]
    @property
    def ratio(self) -> float:
        if self.amount > 0:
            return float(self.spent / self.amount)
        return float("inf") if self.spent > 0 else 0.0

    @computed_field  # type: ignore[prop-decorator]
    @property
    def status(self) -> BudgetStatus:
        return classify_ratio(self.ratio)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def remaining(self) -> Decimal:
        """Budget left to spend; negative once the budget is exceeded."""
        return self.amount - self.spent
