"""
Result models for spend aggregation and category distribution.
"""

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, computed_field

from spend_analytics_mcp.models.expense import ExpenseRecord


class AggregationResult(BaseModel):
    """
    Total spend across every page matching a filter.

    ``complete`` is False when the page walk stopped early because a page
    could not be fetched; ``total`` then covers only pages
    ``0..last_page_processed``.
    """

    model_config = {"frozen": True}

    total: Decimal
    complete: bool
    last_page_processed: int
    total_pages: int = 0
    result_set_changed: bool = False

    @computed_field  # type: ignore[prop-decorator]
    @property
    def partial(self) -> bool:
        """Whether the total must not be presented as authoritative."""
        return not self.complete


class RecordCollection(BaseModel):
    """Records gathered from every page matching a filter."""

    model_config = {"frozen": True}

    records: List[ExpenseRecord] = Field(default_factory=list)
    complete: bool
    last_page_processed: int
    total_pages: int = 0
    result_set_changed: bool = False


class DistributionEntry(BaseModel):
    """Spend for one top-level category (or the Uncategorized bucket)."""

    model_config = {"frozen": True}

    category_id: int
    category_name: str
    total: Decimal
    percentage: float = 0.0


class Distribution(BaseModel):
    """
    Category breakdown of one calendar month's spend.

    Entries are sorted by ``total`` descending, first-seen order on ties.
    """

    model_config = {"frozen": True}

    year: int
    month: int
    entries: List[DistributionEntry] = Field(default_factory=list)
    total_sum: Decimal = Decimal("0")

    @property
    def is_empty(self) -> bool:
        return self.total_sum == 0

    def entry_for(self, category_id: int) -> Optional[DistributionEntry]:
        return next((e for e in self.entries if e.category_id == category_id), None)
