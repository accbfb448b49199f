"""
CLI entry point for the spend analytics MCP server.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from spend_analytics_mcp.core.source import DEFAULT_PAGE_SIZE
from spend_analytics_mcp.server import run_server


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Spend Analytics MCP Server - totals, category breakdowns and budgets"
    )
    parser.add_argument(
        "--expenses-file",
        type=Path,
        help="JSON expense export to serve (a list of expenses or a paged response)",
    )
    parser.add_argument(
        "--api-url",
        help="Base URL of the expense backend, used when no expense file is given",
    )
    parser.add_argument(
        "--api-token",
        help="Bearer token for the expense backend",
    )
    parser.add_argument(
        "--budgets-file",
        type=Path,
        help="JSON file for persistent monthly budgets (default: in-memory)",
    )
    parser.add_argument(
        "--page-size",
        type=int,
        default=DEFAULT_PAGE_SIZE,
        help=f"Page size when walking filtered expenses (default: {DEFAULT_PAGE_SIZE})",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser


def main() -> None:
    """Main entry point for the CLI."""
    args = build_parser().parse_args()

    # Configure logging
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,  # MCP uses stdout for protocol, so log to stderr
    )

    # Run the server
    try:
        asyncio.run(
            run_server(
                expenses_file=args.expenses_file,
                api_url=args.api_url,
                api_token=args.api_token,
                budgets_file=args.budgets_file,
                page_size=args.page_size,
            )
        )
    except KeyboardInterrupt:
        logging.info("Server stopped by user")
        sys.exit(0)
    except Exception as e:
        logging.exception(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
