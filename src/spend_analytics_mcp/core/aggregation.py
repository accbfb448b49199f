"""
Exact aggregation over every page matching a filter.

The engine walks pages 0..totalPages-1 strictly in order and folds each page
into an accumulator. A failed fetch after page 0 stops the walk and the
accumulator is reported as partial. Every run is tagged with a generation
number; starting a new run (or calling ``cancel``) makes older runs stale,
and a stale run stops fetching and never publishes its result.
"""

import logging
from decimal import Decimal
from typing import List, Optional, TypeVar

from spend_analytics_mcp.core.exceptions import (
    AggregationSupersededError,
    SourceUnavailableError,
)
from spend_analytics_mcp.core.source import DEFAULT_PAGE_SIZE, PagedExpenseSource
from spend_analytics_mcp.models.analytics import AggregationResult, RecordCollection
from spend_analytics_mcp.models.expense import ExpenseRecord
from spend_analytics_mcp.models.filters import FilterCriteria
from spend_analytics_mcp.models.page import Page

logger = logging.getLogger(__name__)

A = TypeVar("A", bound="PageAccumulator")


class CancellationToken:
    """Marks one run; becomes cancelled once the engine moves past its generation."""

    def __init__(self, engine: "AggregationEngine", generation: int):
        self._engine = engine
        self.generation = generation

    @property
    def cancelled(self) -> bool:
        return self._engine.generation != self.generation

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            logger.info("Run %d superseded, discarding its result", self.generation)
            raise AggregationSupersededError(
                f"Run {self.generation} superseded by run {self._engine.generation}"
            )


class PageAccumulator:
    """
    Fold state for one page walk.

    Subclasses implement ``_consume`` to absorb a page's content.
    """

    def __init__(self) -> None:
        self.last_page_processed = -1
        self.total_pages = 0
        self.complete = False
        self.result_set_changed = False

    def add(self, page: Page[ExpenseRecord]) -> None:
        self._consume(page.content)
        self.last_page_processed = page.page_number

    def _consume(self, records: List[ExpenseRecord]) -> None:
        raise NotImplementedError


class RunningTotal(PageAccumulator):
    """Accumulates the sum of expense amounts."""

    def __init__(self) -> None:
        super().__init__()
        self.total = Decimal("0")

    def _consume(self, records: List[ExpenseRecord]) -> None:
        self.total += sum((r.amount for r in records), Decimal("0"))

    def result(self) -> AggregationResult:
        return AggregationResult(
            total=self.total,
            complete=self.complete,
            last_page_processed=self.last_page_processed,
            total_pages=self.total_pages,
            result_set_changed=self.result_set_changed,
        )


class RecordCollector(PageAccumulator):
    """Accumulates the records themselves, in page order."""

    def __init__(self) -> None:
        super().__init__()
        self.records: List[ExpenseRecord] = []

    def _consume(self, records: List[ExpenseRecord]) -> None:
        self.records.extend(records)

    def result(self) -> RecordCollection:
        return RecordCollection(
            records=self.records,
            complete=self.complete,
            last_page_processed=self.last_page_processed,
            total_pages=self.total_pages,
            result_set_changed=self.result_set_changed,
        )


class AggregationEngine:
    """
    Sequential page walker with superseding-run semantics.

    Intended for a single event loop: each page fetch is a suspension point,
    and only the most recently started run can publish ``latest_result``.
    """

    def __init__(self, page_size: int = DEFAULT_PAGE_SIZE):
        if page_size <= 0:
            raise ValueError(f"Page size must be positive, got {page_size}")
        self.page_size = page_size
        self._generation = 0
        self._latest_result: Optional[AggregationResult] = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def latest_result(self) -> Optional[AggregationResult]:
        """Result of the newest run that finished without being superseded."""
        return self._latest_result

    def begin_run(self) -> CancellationToken:
        """Start a new generation, invalidating every run in flight."""
        self._generation += 1
        return CancellationToken(self, self._generation)

    def cancel(self) -> None:
        """Invalidate any in-flight run without starting a new one."""
        self._generation += 1
        logger.debug("Cancelled runs up to generation %d", self._generation - 1)

    async def fold(
        self,
        source: PagedExpenseSource,
        criteria: FilterCriteria,
        accumulator: A,
        token: CancellationToken,
    ) -> A:
        """
        Walk every page for ``criteria`` into ``accumulator``.

        A failure fetching page 0 propagates, since there is nothing to
        report yet. Failures on later pages end the walk with
        ``accumulator.complete`` left False.

        Raises:
            SourceUnavailableError: If page 0 cannot be fetched
            AggregationSupersededError: If a newer run started meanwhile
        """
        try:
            first = await source.fetch_page(criteria, 0, self.page_size)
        except SourceUnavailableError:
            token.raise_if_cancelled()
            raise
        token.raise_if_cancelled()

        accumulator.total_pages = first.total_pages
        accumulator.add(first)
        logger.debug(
            "Run %d: page 0/%d, %d items", token.generation, first.total_pages, len(first.content)
        )

        for page_number in range(1, first.total_pages):
            try:
                page = await source.fetch_page(criteria, page_number, self.page_size)
            except SourceUnavailableError as e:
                token.raise_if_cancelled()
                logger.warning(
                    "Run %d stopped at page %d of %d: %s",
                    token.generation,
                    page_number,
                    first.total_pages,
                    e,
                )
                return accumulator
            token.raise_if_cancelled()

            if page.total_pages != first.total_pages:
                accumulator.result_set_changed = True
            accumulator.add(page)
            logger.debug(
                "Run %d: page %d/%d, %d items",
                token.generation,
                page_number,
                first.total_pages,
                len(page.content),
            )

        accumulator.complete = True
        return accumulator

    async def aggregate(
        self, source: PagedExpenseSource, criteria: FilterCriteria
    ) -> AggregationResult:
        """
        Compute the exact total spend across all pages matching ``criteria``.

        Supersedes any run already in flight on this engine.
        """
        token = self.begin_run()
        acc = await self.fold(source, criteria, RunningTotal(), token)
        result = acc.result()
        self._latest_result = result
        if result.partial:
            logger.info(
                "Partial total %s after page %d of %d",
                result.total,
                result.last_page_processed,
                result.total_pages,
            )
        return result

    async def collect(
        self, source: PagedExpenseSource, criteria: FilterCriteria
    ) -> RecordCollection:
        """Gather every record matching ``criteria``, superseding runs in flight."""
        token = self.begin_run()
        acc = await self.fold(source, criteria, RecordCollector(), token)
        return acc.result()
