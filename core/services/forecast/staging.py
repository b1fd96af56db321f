from __future__ import annotations

from typing import Iterable, Mapping, Optional, Sequence

from core.services.finance.helpers import to_number
from core.services.forecast.models import StagingTotals
from core.services.forecast.versions import SnapshotItem, item_value

# Edit overlay: item id -> new value, or None to exclude the item; absent ids stay unchanged.
ForecastChanges = Mapping[str, Optional[float]]


def calculate_total_budget(costs: Iterable[SnapshotItem]) -> float:
    return sum(to_number(item_value(item, "budget_cost")) for item in costs or ())


def calculate_total_forecast(
    costs: Iterable[SnapshotItem],
    changes: Optional[ForecastChanges],
    new_entries: Iterable[SnapshotItem],
) -> float:
    changes = changes or {}
    total = 0.0
    for item in costs or ():
        item_id = str(item_value(item, "id"))
        if item_id not in changes:
            total += to_number(item_value(item, "budget_cost"))
            continue
        value = changes[item_id]
        if value is None:
            continue
        total += to_number(value)
    return total + calculate_total_budget(new_entries)


def calculate_change_percentage(change: float, original: float) -> float:
    """Percentage change against the original total; 0 when there is no original total."""
    original = to_number(original)
    if original == 0:
        return 0.0
    return (to_number(change) / original) * 100.0


def calculate_staging_totals(
    costs: Sequence[SnapshotItem],
    changes: Optional[ForecastChanges],
    new_entries: Sequence[SnapshotItem],
) -> StagingTotals:
    changes = changes or {}
    total_budget = calculate_total_budget(costs)
    total_forecast = calculate_total_forecast(costs, changes, new_entries)
    total_change = total_forecast - total_budget
    return StagingTotals(
        total_budget=total_budget,
        total_forecast=total_forecast,
        total_change=total_change,
        change_percentage=calculate_change_percentage(total_change, total_budget),
        modified_count=sum(1 for value in changes.values() if value is not None),
        excluded_count=sum(1 for value in changes.values() if value is None),
        new_entries_count=len(new_entries or ()),
    )


__all__ = [
    "ForecastChanges",
    "calculate_total_budget",
    "calculate_total_forecast",
    "calculate_change_percentage",
    "calculate_staging_totals",
]
