"""
Loader for JSON expense exports.

Accepts either a bare list of expense objects or a paged response body
(an object with a ``content`` list), as produced by the expense backend.
"""

import json
import logging
from pathlib import Path
from typing import Any, List

from pydantic import ValidationError

from spend_analytics_mcp.core.exceptions import ExpenseDataError, ExpenseDataNotFoundError
from spend_analytics_mcp.models.expense import ExpenseRecord

logger = logging.getLogger(__name__)


def parse_expenses(payload: Any) -> List[ExpenseRecord]:
    """
    Validate decoded JSON into expense records.

    Args:
        payload: A list of expense dicts, or a dict with a ``content`` list

    Returns:
        List of ExpenseRecord objects, in payload order

    Raises:
        ExpenseDataError: If the payload shape or any record is invalid
    """
    if isinstance(payload, dict) and "content" in payload:
        payload = payload["content"]

    if not isinstance(payload, list):
        raise ExpenseDataError(
            f"Expected a list of expenses, got {type(payload).__name__}"
        )

    records: List[ExpenseRecord] = []
    for index, item in enumerate(payload):
        try:
            records.append(ExpenseRecord.model_validate(item))
        except ValidationError as e:
            raise ExpenseDataError(f"Invalid expense at index {index}: {e}") from e
    return records


def load_expenses(path: Path) -> List[ExpenseRecord]:
    """
    Load expense records from a JSON file.

    Raises:
        ExpenseDataNotFoundError: If the file does not exist
        ExpenseDataError: If the file is not valid JSON or holds invalid records
    """
    if not path.exists():
        raise ExpenseDataNotFoundError(f"Expense data not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            payload = json.load(f)
    except json.JSONDecodeError as e:
        raise ExpenseDataError(f"Malformed JSON in {path}: {e}") from e

    records = parse_expenses(payload)
    logger.debug("Loaded %d expenses from %s", len(records), path)
    return records
