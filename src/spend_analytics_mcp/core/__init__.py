"""
Core spend analytics engine.
"""

from spend_analytics_mcp.core.aggregation import AggregationEngine, CancellationToken
from spend_analytics_mcp.core.budget import (
    BudgetTracker,
    InMemoryBudgetStore,
    JsonFileBudgetStore,
)
from spend_analytics_mcp.core.distribution import (
    UNCATEGORIZED_ID,
    UNCATEGORIZED_NAME,
    distribute,
    month_total,
)
from spend_analytics_mcp.core.exceptions import (
    AggregationSupersededError,
    BudgetDataError,
    ExpenseDataError,
    ExpenseDataNotFoundError,
    InvalidBudgetAmountError,
    SourceUnavailableError,
    SpendAnalyticsError,
)
from spend_analytics_mcp.core.geometry import angle_at_point, arc_path, build_arcs, hit_test
from spend_analytics_mcp.core.loader import load_expenses
from spend_analytics_mcp.core.source import HttpExpenseSource, InMemoryExpenseSource

__all__ = [
    "AggregationEngine",
    "CancellationToken",
    "BudgetTracker",
    "InMemoryBudgetStore",
    "JsonFileBudgetStore",
    "UNCATEGORIZED_ID",
    "UNCATEGORIZED_NAME",
    "distribute",
    "month_total",
    "build_arcs",
    "hit_test",
    "arc_path",
    "angle_at_point",
    "load_expenses",
    "HttpExpenseSource",
    "InMemoryExpenseSource",
    "SpendAnalyticsError",
    "SourceUnavailableError",
    "InvalidBudgetAmountError",
    "AggregationSupersededError",
    "ExpenseDataNotFoundError",
    "ExpenseDataError",
    "BudgetDataError",
]
