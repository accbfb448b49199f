"""
MCP tools for spend analytics.
"""

from spend_analytics_mcp.tools.tools import SpendAnalyticsTools, create_tool_schemas

__all__ = ["SpendAnalyticsTools", "create_tool_schemas"]
