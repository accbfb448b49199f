"""
Utility functions for spend analytics.
"""

from spend_analytics_mcp.utils.date_utils import (
    default_filter_range,
    get_month_range,
    in_local_month,
    local_year_month,
    parse_period,
)

__all__ = [
    "default_filter_range",
    "get_month_range",
    "in_local_month",
    "local_year_month",
    "parse_period",
]
