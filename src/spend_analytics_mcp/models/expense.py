"""
Expense record model.
"""

from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from spend_analytics_mcp.models.category import CategoryRef, TagRef


class ExpenseRecord(BaseModel):
    """
    Represents a single expense as returned by the expense backend.

    ``transaction_date`` is interpreted in the viewer's local time zone for
    every month-bucketing operation. Naive timestamps are taken to already be
    local; aware ones are converted before their calendar fields are read.
    """

    model_config = {"frozen": True, "populate_by_name": True}

    # Required fields
    id: int
    amount: Decimal
    transaction_date: datetime = Field(
        validation_alias=AliasChoices("transaction_date", "transactionDate", "date"),
        serialization_alias="transactionDate",
    )

    # Optional fields
    description: Optional[str] = None
    category: Optional[CategoryRef] = None
    tags: List[TagRef] = Field(default_factory=list)

    @field_validator("transaction_date", mode="before")
    @classmethod
    def expand_bare_date(cls, v: Any) -> Any:
        """Treat a bare calendar date as local midnight."""
        if isinstance(v, date) and not isinstance(v, datetime):
            return datetime.combine(v, time.min)
        if isinstance(v, str) and len(v) == 10:
            return datetime.combine(date.fromisoformat(v), time.min)
        return v

    @property
    def tag_ids(self) -> List[int]:
        return [tag.id for tag in self.tags]
