"""
Pydantic models for expense records and spend analytics results.
"""

from spend_analytics_mcp.models.analytics import (
    AggregationResult,
    Distribution,
    DistributionEntry,
    RecordCollection,
)
from spend_analytics_mcp.models.budget import BudgetSnapshot, BudgetStatus
from spend_analytics_mcp.models.category import CategoryRef, TagRef
from spend_analytics_mcp.models.chart import ArcPath, ArcSegment, Point
from spend_analytics_mcp.models.expense import ExpenseRecord
from spend_analytics_mcp.models.filters import FilterCriteria
from spend_analytics_mcp.models.page import Page

__all__ = [
    "AggregationResult",
    "ArcPath",
    "ArcSegment",
    "BudgetSnapshot",
    "BudgetStatus",
    "CategoryRef",
    "Distribution",
    "DistributionEntry",
    "ExpenseRecord",
    "FilterCriteria",
    "Page",
    "Point",
    "RecordCollection",
    "TagRef",
]
