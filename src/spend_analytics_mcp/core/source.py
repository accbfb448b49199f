"""
Paged expense sources.

A source serves one page of expenses matching a filter per call. Any
transport or server failure is reported as SourceUnavailableError.
"""

import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Protocol

import requests
from pydantic import ValidationError

from spend_analytics_mcp.core.exceptions import SourceUnavailableError
from spend_analytics_mcp.core.loader import load_expenses
from spend_analytics_mcp.models.expense import ExpenseRecord
from spend_analytics_mcp.models.filters import FilterCriteria
from spend_analytics_mcp.models.page import Page

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10


class PagedExpenseSource(Protocol):
    """Anything that can fetch one page of filtered expenses."""

    async def fetch_page(
        self, criteria: FilterCriteria, page_number: int, page_size: int
    ) -> Page[ExpenseRecord]:
        ...


def _sort_key(record: ExpenseRecord) -> tuple:
    ts = record.transaction_date
    if ts.tzinfo is not None:
        ts = ts.astimezone().replace(tzinfo=None)
    return (ts, record.id)


def paginate(
    records: List[ExpenseRecord], page_number: int, page_size: int
) -> Page[ExpenseRecord]:
    """Slice an already filtered and ordered record list into one page."""
    if page_size <= 0:
        raise ValueError(f"Page size must be positive, got {page_size}")
    if page_number < 0:
        raise ValueError(f"Page number must be >= 0, got {page_number}")

    total = len(records)
    total_pages = (total + page_size - 1) // page_size
    start = page_number * page_size
    return Page[ExpenseRecord](
        content=records[start : start + page_size],
        total_elements=total,
        total_pages=total_pages,
        page_number=page_number,
        page_size=page_size,
        is_first=page_number == 0,
        is_last=page_number >= total_pages - 1,
    )


class InMemoryExpenseSource:
    """
    Serves pages from a list of records held in memory.

    Records are ordered newest first (ties by id), which is the order the
    expense backend returns filtered pages in.
    """

    def __init__(self, records: Optional[List[ExpenseRecord]] = None):
        self._records: List[ExpenseRecord] = sorted(
            records or [], key=_sort_key, reverse=True
        )

    @classmethod
    def from_file(cls, path: Path) -> "InMemoryExpenseSource":
        """Build a source from a JSON expense export."""
        return cls(load_expenses(path))

    @property
    def records(self) -> List[ExpenseRecord]:
        return self._records[:]

    def is_available(self) -> bool:
        return True

    async def fetch_page(
        self, criteria: FilterCriteria, page_number: int, page_size: int
    ) -> Page[ExpenseRecord]:
        matching = [r for r in self._records if criteria.matches(r)]
        return paginate(matching, page_number, page_size)


class HttpExpenseSource:
    """
    Fetches pages from the expense backend's paged filter endpoint.

    Requests are blocking, so each one runs in a worker thread to keep the
    event loop responsive.
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        path: str = "/expenses/filter",
        timeout: float = 30,
    ):
        self.base_url = base_url.rstrip("/")
        self.path = path
        self.token = token
        self.timeout = timeout

    @property
    def url(self) -> str:
        return f"{self.base_url}{self.path}"

    def is_available(self) -> bool:
        return bool(self.base_url)

    def _headers(self) -> dict:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _get(self, criteria: FilterCriteria, page_number: int, page_size: int) -> Page[ExpenseRecord]:
        params = criteria.to_query_params(page_number, page_size)
        started = datetime.now()
        try:
            response = requests.get(
                self.url, params=params, headers=self._headers(), timeout=self.timeout
            )
            response.raise_for_status()
            body = response.json()
        except requests.RequestException as e:
            raise SourceUnavailableError(f"Failed to fetch page {page_number}: {e}") from e
        except ValueError as e:
            raise SourceUnavailableError(f"Malformed response for page {page_number}: {e}") from e

        try:
            page = Page[ExpenseRecord].model_validate(body)
        except ValidationError as e:
            raise SourceUnavailableError(f"Unexpected page shape for page {page_number}: {e}") from e

        logger.debug(
            "Fetched page %d (%d items) in %.3fs",
            page_number,
            len(page.content),
            (datetime.now() - started).total_seconds(),
        )
        return page

    async def fetch_page(
        self, criteria: FilterCriteria, page_number: int, page_size: int
    ) -> Page[ExpenseRecord]:
        return await asyncio.to_thread(self._get, criteria, page_number, page_size)
