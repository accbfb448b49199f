"""
MCP server for spend analytics.

Exposes totals, category distributions, budget status and chart geometry
through the Model Context Protocol.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from spend_analytics_mcp.core.aggregation import AggregationEngine
from spend_analytics_mcp.core.budget import BudgetTracker, JsonFileBudgetStore
from spend_analytics_mcp.core.exceptions import SourceUnavailableError, SpendAnalyticsError
from spend_analytics_mcp.core.source import (
    DEFAULT_PAGE_SIZE,
    HttpExpenseSource,
    InMemoryExpenseSource,
)
from spend_analytics_mcp.tools.tools import SpendAnalyticsTools, create_tool_schemas

logger = logging.getLogger(__name__)


class SpendAnalyticsServer:
    """MCP server for spend analytics."""

    def __init__(
        self,
        expenses_file: Optional[Path] = None,
        api_url: Optional[str] = None,
        api_token: Optional[str] = None,
        budgets_file: Optional[Path] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        """
        Initialize the MCP server.

        Args:
            expenses_file: JSON expense export to serve from memory
            api_url: Base URL of the expense backend (used when no file is given)
            api_token: Bearer token for the expense backend
            budgets_file: JSON file for persistent budgets (in-memory when None)
            page_size: Page size used when walking filtered results
        """
        self.expenses_file = expenses_file
        self.source = self._build_source(expenses_file, api_url, api_token)
        store = JsonFileBudgetStore(budgets_file) if budgets_file else None
        self.tools = SpendAnalyticsTools(
            self.source,
            tracker=BudgetTracker(store),
            engine=AggregationEngine(page_size),
        )
        self.server = Server("spend-analytics-mcp")

        # Register handlers
        self._register_handlers()

    @staticmethod
    def _build_source(
        expenses_file: Optional[Path], api_url: Optional[str], api_token: Optional[str]
    ):
        if expenses_file is not None:
            if not expenses_file.exists():
                logger.warning("Expense file not found: %s", expenses_file)
                return None
            return InMemoryExpenseSource.from_file(expenses_file)
        if api_url:
            return HttpExpenseSource(api_url, token=api_token)
        return None

    def is_available(self) -> bool:
        return self.source is not None

    async def dispatch(self, name: str, arguments: dict[str, Any]) -> Any:
        """Route a tool call to its handler."""
        if name == "get_filtered_total":
            return await self.tools.get_filtered_total(**arguments)
        if name == "get_category_distribution":
            return await self.tools.get_category_distribution(**arguments)
        if name == "set_budget":
            return self.tools.set_budget(**arguments)
        if name == "get_budget_status":
            return await self.tools.get_budget_status(**arguments)
        if name == "get_spending_chart":
            return await self.tools.get_spending_chart(**arguments)
        if name == "locate_chart_category":
            return await self.tools.locate_chart_category(**arguments)
        raise LookupError(f"Unknown tool: {name}")

    async def handle_call(self, name: str, arguments: dict[str, Any]) -> list[TextContent]:
        """Handle a tool call and format the response as text content."""
        if not self.is_available():
            error_msg = (
                "Expense data not available. Please provide an expense export "
                "file or the URL of the expense backend."
            )
            return [TextContent(type="text", text=error_msg)]

        if name not in {schema["name"] for schema in create_tool_schemas()}:
            return [TextContent(type="text", text=f"Unknown tool: {name}")]

        try:
            result = await self.dispatch(name, arguments or {})
        except ValueError as e:
            # Validation errors (bad month, negative budget, bad date)
            return [TextContent(type="text", text=f"Error: {str(e)}")]
        except SourceUnavailableError as e:
            logger.warning("Expense source unavailable for %s: %s", name, e)
            return [TextContent(type="text", text=f"Expense source unavailable: {str(e)}")]
        except SpendAnalyticsError as e:
            return [TextContent(type="text", text=f"Error: {str(e)}")]
        except Exception as e:
            logger.exception(f"Error executing tool {name}")
            return [TextContent(type="text", text=f"Error executing tool: {str(e)}")]

        return [TextContent(type="text", text=json.dumps(result, indent=2))]

    def _register_handlers(self) -> None:
        """Register MCP protocol handlers."""

        @self.server.list_tools()
        async def list_tools() -> list[Tool]:
            """List available tools."""
            return [
                Tool(
                    name=schema["name"],
                    description=schema["description"],
                    inputSchema=schema["inputSchema"],
                )
                for schema in create_tool_schemas()
            ]

        @self.server.call_tool()
        async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
            """Handle tool calls."""
            return await self.handle_call(name, arguments)

    async def run(self) -> None:  # pragma: no cover
        """Run the MCP server using stdio transport."""
        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )


async def run_server(**kwargs: Any) -> None:  # pragma: no cover
    """
    Run the spend analytics MCP server.

    Args:
        kwargs: Passed through to SpendAnalyticsServer
    """
    server = SpendAnalyticsServer(**kwargs)
    await server.run()
