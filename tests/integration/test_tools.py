"""
Integration tests for MCP tools over the fixture expense export.
"""

import asyncio
from decimal import Decimal

import pytest
from freezegun import freeze_time

from spend_analytics_mcp.core.aggregation import AggregationEngine
from spend_analytics_mcp.core.exceptions import InvalidBudgetAmountError
from spend_analytics_mcp.core.source import InMemoryExpenseSource
from spend_analytics_mcp.tools.tools import SpendAnalyticsTools, create_tool_schemas


class YieldingSource(InMemoryExpenseSource):
    """In-memory source that suspends on every page, like a network source."""

    async def fetch_page(self, criteria, page_number, page_size):
        await asyncio.sleep(0)
        return await super().fetch_page(criteria, page_number, page_size)


@pytest.fixture
def tools(expenses_file):
    """Create SpendAnalyticsTools over the fixture export."""
    source = InMemoryExpenseSource.from_file(expenses_file)
    return SpendAnalyticsTools(source, engine=AggregationEngine(page_size=3))


@pytest.fixture
def yielding_tools(expenses_file):
    source = YieldingSource(InMemoryExpenseSource.from_file(expenses_file).records)
    return SpendAnalyticsTools(source, engine=AggregationEngine(page_size=2))


@pytest.mark.integration
@pytest.mark.asyncio
async def test_filtered_total_with_dates(tools):
    result = await tools.get_filtered_total(start_date="2026-02-01", end_date="2026-02-28")

    assert Decimal(result["total"]) == Decimal("250.00")
    assert result["complete"] is True
    assert result["partial"] is False
    assert result["filter"]["startDate"] == "2026-02-01"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_filtered_total_with_tags(tools):
    result = await tools.get_filtered_total(
        start_date="2026-01-01", end_date="2026-12-31", tag_ids=[2]
    )
    assert Decimal(result["total"]) == Decimal("80.00")


@pytest.mark.integration
@pytest.mark.asyncio
@freeze_time("2026-01-20")
async def test_filtered_total_defaults_to_month_to_date(tools):
    result = await tools.get_filtered_total()

    # 45.50 + 800.00 + 30.00 + 15.25 + 60.00
    assert Decimal(result["total"]) == Decimal("950.75")
    assert result["filter"]["startDate"] == "2026-01-01"
    assert result["filter"]["endDate"] == "2026-01-20"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_category_distribution(tools):
    result = await tools.get_category_distribution(2026, 1)

    assert Decimal(result["total_sum"]) == Decimal("985.00")
    assert result["complete"] is True
    assert result["category_count"] == 4
    assert [e["category_name"] for e in result["entries"]] == [
        "Housing",
        "Food",
        "Transport",
        "Uncategorized",
    ]
    food = result["entries"][1]
    assert food["category_id"] == 1
    assert Decimal(food["total"]) == Decimal("99.75")
    assert sum(e["percentage"] for e in result["entries"]) == pytest.approx(100.0)


@pytest.mark.integration
@pytest.mark.asyncio
async def test_category_distribution_empty_month(tools):
    result = await tools.get_category_distribution(2026, 6)

    assert result["entries"] == []
    assert Decimal(result["total_sum"]) == Decimal("0")


@pytest.mark.integration
@pytest.mark.asyncio
async def test_budget_status_without_budget(tools):
    result = await tools.get_budget_status(2026, 1)
    assert result == {"year": 2026, "month": 1, "budget_set": False}


@pytest.mark.integration
@pytest.mark.asyncio
async def test_budget_status_near(tools):
    tools.set_budget(2026, 1, 1200)
    result = await tools.get_budget_status(2026, 1)

    assert result["budget_set"] is True
    assert Decimal(result["spent"]) == Decimal("985.00")
    assert result["status"] == "NEAR"
    assert Decimal(result["remaining"]) == Decimal("215.00")


@pytest.mark.integration
@pytest.mark.asyncio
async def test_budget_status_over(tools):
    tools.set_budget(2026, 2, 200)
    result = await tools.get_budget_status(2026, 2)

    assert result["status"] == "OVER"


@pytest.mark.integration
def test_negative_budget_rejected(tools):
    with pytest.raises(InvalidBudgetAmountError):
        tools.set_budget(2026, 1, -10)


@pytest.mark.integration
@pytest.mark.asyncio
async def test_spending_chart(tools):
    result = await tools.get_spending_chart(2026, 2)

    # Housing 200 of 250, Food 50 of 250
    segments = result["segments"]
    assert [s["category_id"] for s in segments] == [2, 1]
    assert segments[0]["start_angle_deg"] == 0.0
    assert segments[0]["end_angle_deg"] == pytest.approx(288.0)
    assert segments[1]["end_angle_deg"] == pytest.approx(360.0)
    assert result["omitted_categories"] == 0


@pytest.mark.integration
@pytest.mark.asyncio
async def test_spending_chart_truncates(tools):
    result = await tools.get_spending_chart(2026, 1, max_segments=2, palette_size=1)

    assert [s["category_name"] for s in result["segments"]] == ["Housing", "Food"]
    assert [s["color_index"] for s in result["segments"]] == [0, 0]
    assert result["omitted_categories"] == 2


@pytest.mark.integration
@pytest.mark.asyncio
async def test_locate_chart_category_by_angle(tools):
    result = await tools.locate_chart_category(2026, 2, angle_deg=300.0)

    assert result["category_id"] == 1
    assert result["category"]["category_name"] == "Food"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_locate_chart_category_by_point(tools):
    # Directly above the center is 0 degrees: Housing
    result = await tools.locate_chart_category(2026, 2, x=0.0, y=-10.0)
    assert result["category_id"] == 2


@pytest.mark.integration
@pytest.mark.asyncio
async def test_locate_chart_category_requires_angle_or_point(tools):
    with pytest.raises(ValueError):
        await tools.locate_chart_category(2026, 2)


@pytest.mark.integration
def test_tool_schemas():
    schemas = create_tool_schemas()
    names = {s["name"] for s in schemas}

    assert names == {
        "get_filtered_total",
        "get_category_distribution",
        "set_budget",
        "get_budget_status",
        "get_spending_chart",
        "locate_chart_category",
    }
    for schema in schemas:
        assert schema["inputSchema"]["type"] == "object"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_different_tools_run_concurrently(yielding_tools):
    """A month breakdown does not cancel a filtered total running alongside it."""
    yielding_tools.set_budget(2026, 1, 1000)

    total, distribution, status, chart = await asyncio.gather(
        yielding_tools.get_filtered_total(start_date="2026-01-01", end_date="2026-01-31"),
        yielding_tools.get_category_distribution(2026, 1),
        yielding_tools.get_budget_status(2026, 1),
        yielding_tools.get_spending_chart(2026, 1),
    )

    assert Decimal(total["total"]) == Decimal("985.00")
    assert total["complete"] is True
    assert Decimal(distribution["total_sum"]) == Decimal("985.00")
    assert status["status"] == "NEAR"
    assert len(chart["segments"]) == 4


@pytest.mark.integration
@pytest.mark.asyncio
async def test_budget_status_rejects_month_zero(tools):
    with pytest.raises(ValueError):
        await tools.get_budget_status(2026, 0)


@pytest.mark.integration
@pytest.mark.asyncio
@freeze_time("2026-02-10")
async def test_budget_status_defaults_to_current_month(tools):
    tools.set_budget(2026, 2, 500)
    result = await tools.get_budget_status()

    assert (result["year"], result["month"]) == (2026, 2)
    assert result["status"] == "UNDER"
