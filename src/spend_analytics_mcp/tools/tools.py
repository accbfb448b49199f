"""
MCP tool definitions for spend analytics.

Each tool returns plain JSON-serializable dicts for the UI layer.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from spend_analytics_mcp.core.aggregation import AggregationEngine
from spend_analytics_mcp.core.budget import BudgetTracker
from spend_analytics_mcp.core.distribution import distribute
from spend_analytics_mcp.core.geometry import (
    DEFAULT_MAX_SEGMENTS,
    DEFAULT_PALETTE_SIZE,
    angle_at_point,
    build_arcs,
    hit_test,
)
from spend_analytics_mcp.core.source import PagedExpenseSource
from spend_analytics_mcp.models.analytics import Distribution
from spend_analytics_mcp.models.filters import FilterCriteria
from spend_analytics_mcp.utils.date_utils import (
    default_filter_range,
    get_month_range,
    parse_period,
    validate_month,
)

MONTH_TOOLS = (
    "get_category_distribution",
    "get_budget_status",
    "get_spending_chart",
    "locate_chart_category",
)


class SpendAnalyticsTools:
    """Collection of MCP tools over one expense source and budget tracker."""

    def __init__(
        self,
        source: PagedExpenseSource,
        tracker: Optional[BudgetTracker] = None,
        engine: Optional[AggregationEngine] = None,
    ):
        """
        Initialize tools.

        Args:
            source: Paged expense source
            tracker: Budget tracker (in-memory budgets when None)
            engine: Aggregation engine for filtered totals (default page size
                when None); the month-based tools get engines of their own
                with the same page size
        """
        self.source = source
        self.tracker = tracker or BudgetTracker()
        self.engine = engine or AggregationEngine()
        # A new run only supersedes older runs of the same tool
        self.month_engines: Dict[str, AggregationEngine] = {
            tool: AggregationEngine(self.engine.page_size) for tool in MONTH_TOOLS
        }

    async def _month_distribution(
        self, tool: str, year: int, month: int
    ) -> Tuple[Distribution, bool]:
        start, end = get_month_range(year, month)
        collection = await self.month_engines[tool].collect(
            self.source, FilterCriteria(start_date=start, end_date=end)
        )
        return distribute(collection.records, year, month), collection.complete

    async def get_filtered_total(
        self,
        period: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        category_ids: Optional[List[int]] = None,
        tag_ids: Optional[List[int]] = None,
    ) -> Dict[str, Any]:
        """
        Get the exact total spend across every page matching a filter.

        Args:
            period: Period shorthand (this_month, last_30_days, ytd, etc.)
            start_date: Inclusive start date (YYYY-MM-DD)
            end_date: Inclusive end date (YYYY-MM-DD)
            category_ids: Category ids to match (leaf ids)
            tag_ids: Tag ids to match (any)

        Returns:
            Dict with the filter, total, and whether the total is complete.
            Without any date input the range defaults to the current month
            to date.
        """
        start: Optional[date]
        end: Optional[date]
        if period:
            start, end = parse_period(period)
        elif start_date is None and end_date is None:
            start, end = default_filter_range()
        else:
            start = date.fromisoformat(start_date) if start_date else None
            end = date.fromisoformat(end_date) if end_date else None

        criteria = FilterCriteria(
            start_date=start,
            end_date=end,
            category_ids=frozenset(category_ids or []),
            tag_ids=frozenset(tag_ids or []),
        )
        result = await self.engine.aggregate(self.source, criteria)

        return {
            "filter": criteria.model_dump(mode="json", by_alias=True),
            **result.model_dump(mode="json"),
        }

    async def get_category_distribution(self, year: int, month: int) -> Dict[str, Any]:
        """
        Get spend by top-level category for a calendar month.

        Returns:
            Dict with total_sum, entries (largest first) and a complete flag
        """
        distribution, complete = await self._month_distribution(
            "get_category_distribution", year, month
        )
        return {
            **distribution.model_dump(mode="json"),
            "category_count": len(distribution.entries),
            "complete": complete,
        }

    def set_budget(self, year: int, month: int, amount: float) -> Dict[str, Any]:
        """
        Set the budget for a month.

        Raises:
            InvalidBudgetAmountError: If amount is negative
        """
        self.tracker.set_budget(year, month, Decimal(str(amount)))
        return {"year": year, "month": month, "amount": str(self.tracker.get_budget(year, month))}

    async def get_budget_status(
        self, year: Optional[int] = None, month: Optional[int] = None
    ) -> Dict[str, Any]:
        """
        Compare a month's spend with its budget.

        Args:
            year: Calendar year (defaults to the current one)
            month: Calendar month (defaults to the current one)

        Returns:
            Dict with budget_set False when no budget exists, otherwise the
            snapshot (amount, spent, ratio, status, remaining)
        """
        today = datetime.now()
        if year is None:
            year = today.year
        if month is None:
            month = today.month
        validate_month(month)

        if self.tracker.get_budget(year, month) is None:
            return {"year": year, "month": month, "budget_set": False}

        distribution, complete = await self._month_distribution(
            "get_budget_status", year, month
        )
        snapshot = self.tracker.get_snapshot(year, month, lambda: distribution.total_sum)
        return {
            "budget_set": True,
            **snapshot.model_dump(mode="json"),
            "complete": complete,
        }

    async def get_spending_chart(
        self,
        year: int,
        month: int,
        max_segments: int = DEFAULT_MAX_SEGMENTS,
        palette_size: int = DEFAULT_PALETTE_SIZE,
    ) -> Dict[str, Any]:
        """
        Get pie-chart slices for a month's category distribution.

        Returns:
            Dict with the slices (angles in degrees, 0 = 12 o'clock, clockwise)
        """
        distribution, complete = await self._month_distribution(
            "get_spending_chart", year, month
        )
        arcs = build_arcs(distribution.entries, max_segments, palette_size)
        return {
            "year": year,
            "month": month,
            "total_sum": str(distribution.total_sum),
            "segments": [arc.model_dump(mode="json") for arc in arcs],
            "omitted_categories": len(distribution.entries) - len(arcs) if arcs else 0,
            "complete": complete,
        }

    async def locate_chart_category(
        self,
        year: int,
        month: int,
        angle_deg: Optional[float] = None,
        x: Optional[float] = None,
        y: Optional[float] = None,
        center_x: float = 0.0,
        center_y: float = 0.0,
        max_segments: int = DEFAULT_MAX_SEGMENTS,
    ) -> Dict[str, Any]:
        """
        Find which category's slice lies under an angle or pointer position.

        Raises:
            ValueError: If neither an angle nor a point is given
        """
        if angle_deg is None:
            if x is None or y is None:
                raise ValueError("Provide angle_deg, or both x and y")
            angle_deg = angle_at_point(x, y, center_x, center_y)

        distribution, _ = await self._month_distribution(
            "locate_chart_category", year, month
        )
        arcs = build_arcs(distribution.entries, max_segments)
        category_id = hit_test(arcs, angle_deg)
        entry = distribution.entry_for(category_id) if category_id is not None else None

        return {
            "angle_deg": angle_deg,
            "category_id": category_id,
            "category": entry.model_dump(mode="json") if entry else None,
        }


def create_tool_schemas() -> List[Dict[str, Any]]:
    """
    Create MCP tool schemas for all tools.

    Returns:
        List of tool schema definitions
    """
    year_month = {
        "year": {"type": "integer", "description": "Calendar year, e.g. 2026"},
        "month": {
            "type": "integer",
            "description": "Calendar month (1-12)",
            "minimum": 1,
            "maximum": 12,
        },
    }
    return [
        {
            "name": "get_filtered_total",
            "description": (
                "Get the exact total spend across all pages of expenses matching "
                "a filter. Reports whether the total is complete or partial."
            ),
            "inputSchema": {
                "type": "object",
                "properties": {
                    "period": {
                        "type": "string",
                        "description": (
                            "Period shorthand: this_month, last_month, "
                            "last_7_days, last_30_days, last_90_days, ytd, "
                            "this_year, last_year"
                        ),
                    },
                    "start_date": {
                        "type": "string",
                        "description": "Start date (YYYY-MM-DD)",
                        "pattern": r"^\d{4}-\d{2}-\d{2}$",
                    },
                    "end_date": {
                        "type": "string",
                        "description": "End date (YYYY-MM-DD)",
                        "pattern": r"^\d{4}-\d{2}-\d{2}$",
                    },
                    "category_ids": {
                        "type": "array",
                        "items": {"type": "integer"},
                        "description": "Category ids to match",
                    },
                    "tag_ids": {
                        "type": "array",
                        "items": {"type": "integer"},
                        "description": "Tag ids to match (any)",
                    },
                },
            },
        },
        {
            "name": "get_category_distribution",
            "description": (
                "Get a month's spend grouped by top-level category with "
                "percentages, largest first."
            ),
            "inputSchema": {
                "type": "object",
                "properties": dict(year_month),
                "required": ["year", "month"],
            },
        },
        {
            "name": "set_budget",
            "description": "Set the spending budget for a month.",
            "inputSchema": {
                "type": "object",
                "properties": {
                    **year_month,
                    "amount": {
                        "type": "number",
                        "description": "Budget amount (>= 0)",
                        "minimum": 0,
                    },
                },
                "required": ["year", "month", "amount"],
            },
        },
        {
            "name": "get_budget_status",
            "description": (
                "Compare a month's spend with its budget: UNDER, NEAR (75% or "
                "more) or OVER (above 100%). Defaults to the current month."
            ),
            "inputSchema": {
                "type": "object",
                "properties": dict(year_month),
            },
        },
        {
            "name": "get_spending_chart",
            "description": (
                "Get pie-chart slices (start/end angles, color index) for a "
                "month's category distribution."
            ),
            "inputSchema": {
                "type": "object",
                "properties": {
                    **year_month,
                    "max_segments": {
                        "type": "integer",
                        "description": "Maximum number of slices (default: 8)",
                        "default": DEFAULT_MAX_SEGMENTS,
                    },
                    "palette_size": {
                        "type": "integer",
                        "description": "Number of palette colors (default: 8)",
                        "default": DEFAULT_PALETTE_SIZE,
                    },
                },
                "required": ["year", "month"],
            },
        },
        {
            "name": "locate_chart_category",
            "description": (
                "Find the category under an angle (0 = 12 o'clock, clockwise) "
                "or a pointer position on a month's spending chart."
            ),
            "inputSchema": {
                "type": "object",
                "properties": {
                    **year_month,
                    "angle_deg": {"type": "number", "description": "Angle in degrees"},
                    "x": {"type": "number", "description": "Pointer x"},
                    "y": {"type": "number", "description": "Pointer y (grows downwards)"},
                    "center_x": {"type": "number", "description": "Chart center x"},
                    "center_y": {"type": "number", "description": "Chart center y"},
                },
                "required": ["year", "month"],
            },
        },
    ]
