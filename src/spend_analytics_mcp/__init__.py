"""
Spend analytics: exact filtered totals, category distributions, monthly
budgets and pie-chart geometry, exposed through an MCP server.
"""

__version__ = "0.1.0"
