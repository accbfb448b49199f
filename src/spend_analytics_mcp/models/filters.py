"""
Filter criteria for paged expense queries.
"""

from datetime import date, datetime, time
from typing import Any, Dict, FrozenSet, Optional

from pydantic import BaseModel, Field

from spend_analytics_mcp.models.expense import ExpenseRecord


class FilterCriteria(BaseModel):
    """
    Immutable filter for one aggregation run.

    Empty ``category_ids`` / ``tag_ids`` mean no restriction. Date bounds are
    inclusive calendar dates: ``start_date`` from the start of that day,
    ``end_date`` through the end of that day.
    """

    model_config = {"frozen": True, "populate_by_name": True}

    start_date: Optional[date] = Field(default=None, alias="startDate")
    end_date: Optional[date] = Field(default=None, alias="endDate")
    category_ids: FrozenSet[int] = Field(default=frozenset(), alias="categoryIds")
    tag_ids: FrozenSet[int] = Field(default=frozenset(), alias="tagIds")

    def matches(self, record: ExpenseRecord) -> bool:
        """
        Check whether a record satisfies every active filter.

        Category filters match the record's own category id, so selecting a
        main category does not pull in its sub-categories. A tag filter
        matches when any of the record's tags is selected.
        """
        ts = record.transaction_date
        if ts.tzinfo is not None:
            ts = ts.astimezone().replace(tzinfo=None)

        if self.start_date and ts < datetime.combine(self.start_date, time.min):
            return False
        if self.end_date and ts > datetime.combine(self.end_date, time.max):
            return False

        if self.category_ids:
            if record.category is None or record.category.id not in self.category_ids:
                return False

        if self.tag_ids:
            if not any(tag_id in self.tag_ids for tag_id in record.tag_ids):
                return False

        return True

    def to_query_params(self, page: int, size: int) -> Dict[str, Any]:
        """
        Serialize to the paged filter endpoint's query parameters.

        Unset filters are left out entirely; id sets become sorted lists so
        the request is deterministic.
        """
        params: Dict[str, Any] = {}
        if self.start_date:
            params["startDate"] = self.start_date.isoformat()
        if self.end_date:
            params["endDate"] = self.end_date.isoformat()
        if self.category_ids:
            params["categoryIds"] = sorted(self.category_ids)
        if self.tag_ids:
            params["tagIds"] = sorted(self.tag_ids)
        params["page"] = page
        params["size"] = size
        return params
