"""
Unit tests for the aggregation engine.
"""

import asyncio
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional, Set

import pytest

from spend_analytics_mcp.core.aggregation import AggregationEngine
from spend_analytics_mcp.core.exceptions import (
    AggregationSupersededError,
    SourceUnavailableError,
)
from spend_analytics_mcp.models.expense import ExpenseRecord
from spend_analytics_mcp.models.filters import FilterCriteria
from spend_analytics_mcp.models.page import Page


def _records(count: int, page_sum: Decimal, start_id: int) -> List[ExpenseRecord]:
    each = page_sum / count
    return [
        ExpenseRecord(id=start_id + i, amount=each, transaction_date=datetime(2026, 1, 5))
        for i in range(count)
    ]


class ScriptedSource:
    """Serves pre-built pages and records every request."""

    def __init__(
        self,
        page_sizes: List[int],
        page_sums: List[str],
        fail_on: Optional[Set[int]] = None,
        total_pages_override: Optional[Dict[int, int]] = None,
    ):
        self.pages: List[List[ExpenseRecord]] = []
        next_id = 1
        for size, total in zip(page_sizes, page_sums):
            self.pages.append(_records(size, Decimal(total), next_id))
            next_id += size
        self.fail_on = fail_on or set()
        self.total_pages_override = total_pages_override or {}
        self.calls: List[int] = []
        self.gates: Dict[int, asyncio.Event] = {}

    async def fetch_page(
        self, criteria: FilterCriteria, page_number: int, page_size: int
    ) -> Page[ExpenseRecord]:
        self.calls.append(page_number)
        if page_number in self.gates:
            await self.gates[page_number].wait()
        if page_number in self.fail_on:
            raise SourceUnavailableError(f"page {page_number} unavailable")
        content = self.pages[page_number] if page_number < len(self.pages) else []
        total_pages = self.total_pages_override.get(page_number, len(self.pages))
        return Page[ExpenseRecord](
            content=content,
            total_elements=sum(len(p) for p in self.pages),
            total_pages=total_pages,
            page_number=page_number,
            page_size=page_size,
            is_first=page_number == 0,
            is_last=page_number >= total_pages - 1,
        )


@pytest.mark.unit
@pytest.mark.asyncio
async def test_aggregate_walks_all_pages_in_order():
    """Three pages of 10, 10 and 4 records summing to 100, 100 and 40."""
    source = ScriptedSource([10, 10, 4], ["100", "100", "40"])
    engine = AggregationEngine(page_size=10)

    result = await engine.aggregate(source, FilterCriteria())

    assert result.total == Decimal("240")
    assert result.complete is True
    assert result.partial is False
    assert result.last_page_processed == 2
    assert result.total_pages == 3
    assert source.calls == [0, 1, 2]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_aggregate_stops_on_failed_page():
    """A failed page 1 leaves page 0's sum, flagged partial, and page 2 is never requested."""
    source = ScriptedSource([10, 10, 4], ["100", "100", "40"], fail_on={1})
    engine = AggregationEngine(page_size=10)

    result = await engine.aggregate(source, FilterCriteria())

    assert result.total == Decimal("100")
    assert result.complete is False
    assert result.partial is True
    assert result.last_page_processed == 0
    assert source.calls == [0, 1]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_aggregate_failure_on_last_page_keeps_earlier_pages():
    source = ScriptedSource([10, 10, 4], ["100", "100", "40"], fail_on={2})
    result = await AggregationEngine(page_size=10).aggregate(source, FilterCriteria())

    assert result.total == Decimal("200")
    assert result.complete is False
    assert result.last_page_processed == 1


@pytest.mark.unit
@pytest.mark.asyncio
async def test_aggregate_zero_pages_is_complete_zero():
    source = ScriptedSource([], [])
    result = await AggregationEngine().aggregate(source, FilterCriteria())

    assert result.total == Decimal("0")
    assert result.complete is True
    assert source.calls == [0]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_aggregate_single_page():
    source = ScriptedSource([4], ["40"])
    result = await AggregationEngine().aggregate(source, FilterCriteria())

    assert result.total == Decimal("40")
    assert result.complete is True
    assert source.calls == [0]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_first_page_failure_propagates():
    source = ScriptedSource([10, 4], ["100", "40"], fail_on={0})
    engine = AggregationEngine()

    with pytest.raises(SourceUnavailableError):
        await engine.aggregate(source, FilterCriteria())
    assert engine.latest_result is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_stale_first_page_failure_reports_superseded():
    source = ScriptedSource([10, 4], ["100", "40"], fail_on={0})
    source.gates[0] = asyncio.Event()
    engine = AggregationEngine(page_size=10)

    task = asyncio.create_task(engine.aggregate(source, FilterCriteria()))
    while source.calls != [0]:
        await asyncio.sleep(0)

    engine.cancel()
    source.gates[0].set()

    with pytest.raises(AggregationSupersededError):
        await task
    assert engine.latest_result is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_changed_result_set_is_flagged():
    source = ScriptedSource([10, 10, 4], ["100", "100", "40"], total_pages_override={1: 4})
    result = await AggregationEngine(page_size=10).aggregate(source, FilterCriteria())

    assert result.result_set_changed is True
    assert result.complete is True
    assert source.calls == [0, 1, 2]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_negative_amounts_are_summed_literally():
    source = ScriptedSource([2, 1], ["10", "-4"])
    result = await AggregationEngine(page_size=2).aggregate(source, FilterCriteria())

    assert result.total == Decimal("6")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_new_run_supersedes_in_flight_run():
    """A stale run stops fetching and only the newest result is published."""
    slow = ScriptedSource([10, 10, 4], ["100", "100", "40"])
    slow.gates[1] = asyncio.Event()
    fast = ScriptedSource([5], ["55"])
    engine = AggregationEngine(page_size=10)

    stale = asyncio.create_task(
        engine.aggregate(slow, FilterCriteria(category_ids=frozenset({1})))
    )
    while slow.calls != [0, 1]:
        await asyncio.sleep(0)

    winner = await engine.aggregate(fast, FilterCriteria(category_ids=frozenset({2})))
    slow.gates[1].set()

    with pytest.raises(AggregationSupersededError):
        await stale

    assert winner.total == Decimal("55")
    assert engine.latest_result == winner
    assert slow.calls == [0, 1]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_cancel_discards_in_flight_run():
    source = ScriptedSource([10, 4], ["100", "40"])
    source.gates[1] = asyncio.Event()
    engine = AggregationEngine(page_size=10)

    task = asyncio.create_task(engine.aggregate(source, FilterCriteria()))
    while source.calls != [0, 1]:
        await asyncio.sleep(0)

    engine.cancel()
    source.gates[1].set()

    with pytest.raises(AggregationSupersededError):
        await task
    assert engine.latest_result is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_stale_failure_is_not_reported_as_partial():
    source = ScriptedSource([10, 4], ["100", "40"], fail_on={1})
    source.gates[1] = asyncio.Event()
    engine = AggregationEngine(page_size=10)

    task = asyncio.create_task(engine.aggregate(source, FilterCriteria()))
    while source.calls != [0, 1]:
        await asyncio.sleep(0)

    engine.cancel()
    source.gates[1].set()

    with pytest.raises(AggregationSupersededError):
        await task


@pytest.mark.unit
@pytest.mark.asyncio
async def test_collect_gathers_records_in_page_order():
    source = ScriptedSource([2, 2, 1], ["20", "20", "5"])
    collection = await AggregationEngine(page_size=2).collect(source, FilterCriteria())

    assert collection.complete is True
    assert [r.id for r in collection.records] == [1, 2, 3, 4, 5]


@pytest.mark.unit
@pytest.mark.asyncio
async def test_collect_reports_partial_records():
    source = ScriptedSource([2, 2, 1], ["20", "20", "5"], fail_on={2})
    collection = await AggregationEngine(page_size=2).collect(source, FilterCriteria())

    assert collection.complete is False
    assert collection.last_page_processed == 1
    assert len(collection.records) == 4


@pytest.mark.unit
def test_page_size_must_be_positive():
    with pytest.raises(ValueError):
        AggregationEngine(page_size=0)
