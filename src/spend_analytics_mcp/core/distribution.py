"""
Category distribution of a month's spend.

Spend is bucketed by top-level category: a sub-category's amount rolls up
into its parent's bucket, and expenses without a category land in the
synthetic Uncategorized bucket.
"""

from datetime import tzinfo
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from spend_analytics_mcp.models.analytics import Distribution, DistributionEntry
from spend_analytics_mcp.models.expense import ExpenseRecord
from spend_analytics_mcp.utils.date_utils import in_local_month, validate_month

UNCATEGORIZED_ID = -1
UNCATEGORIZED_NAME = "Uncategorized"


def grouping_key(record: ExpenseRecord) -> Tuple[int, str]:
    """Resolve the (bucket id, display name) a record is counted under."""
    category = record.category
    if category is None:
        return UNCATEGORIZED_ID, UNCATEGORIZED_NAME

    key = category.parent_id if category.parent_id is not None else category.id
    name = category.parent_name if category.parent_name is not None else category.name
    return key, name


def month_total(
    records: Iterable[ExpenseRecord], year: int, month: int, tz: Optional[tzinfo] = None
) -> Decimal:
    """Sum of amounts for records dated in the local calendar month."""
    return sum(
        (r.amount for r in records if in_local_month(r.transaction_date, year, month, tz)),
        Decimal("0"),
    )


def distribute(
    records: Iterable[ExpenseRecord], year: int, month: int, tz: Optional[tzinfo] = None
) -> Distribution:
    """
    Build the category breakdown for one local calendar month.

    Args:
        records: Expense records; not modified
        year: Calendar year
        month: Calendar month (1-12)
        tz: Viewer time zone for aware timestamps (system local when None)

    Returns:
        Distribution sorted by total descending, ties in first-seen order.
        Percentages are 0 when the month has no spend.
    """
    validate_month(month)

    totals: Dict[int, Decimal] = {}
    names: Dict[int, str] = {}
    for record in records:
        if not in_local_month(record.transaction_date, year, month, tz):
            continue
        key, name = grouping_key(record)
        if key not in totals:
            totals[key] = Decimal("0")
            names[key] = name
        totals[key] += record.amount

    # dicts keep insertion order and sorted() is stable, so ties stay first-seen
    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    total_sum = sum((total for _, total in ranked), Decimal("0"))

    entries: List[DistributionEntry] = [
        DistributionEntry(
            category_id=key,
            category_name=names[key],
            total=total,
            percentage=float(total / total_sum * 100) if total_sum != 0 else 0.0,
        )
        for key, total in ranked
    ]
    return Distribution(year=year, month=month, entries=entries, total_sum=total_sum)
