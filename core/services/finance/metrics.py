from __future__ import annotations

from datetime import date
from typing import Iterable, List, Mapping, Optional

from core.models import CostBreakdownCategory, NormalizedLineItem, PoMapping
from core.services.finance.helpers import months_between, safe_divide, to_number
from core.services.finance.models import PLMetrics, ProjectMetrics
from core.services.finance.policy import DEFAULT_FALLBACK_INVOICE_RATIO
from core.services.finance.split import split_mapping

ALL_FILTER = "all"


def _matches(value: Optional[str], wanted: Optional[str]) -> bool:
    if not wanted or wanted == ALL_FILTER:
        return True
    return value == wanted


def filter_categories(
    categories: Iterable[CostBreakdownCategory],
    *,
    cost_line: Optional[str] = None,
    spend_type: Optional[str] = None,
) -> List[CostBreakdownCategory]:
    return [
        row
        for row in categories or ()
        if _matches(row.cost_line, cost_line) and _matches(row.spend_type, spend_type)
    ]


def mappings_for_categories(
    mappings: Iterable[PoMapping],
    categories: Iterable[CostBreakdownCategory],
) -> List[PoMapping]:
    ids = {row.id for row in categories}
    return [mapping for mapping in mappings or () if mapping.cost_breakdown_id in ids]


def months_elapsed(project_start: Optional[date], as_of: date) -> int:
    """Whole months since project start, floored to 1 so burn rate never divides by zero."""
    if project_start is None:
        return 1
    return max(1, months_between(project_start, as_of))


def build_project_metrics(
    *,
    categories: Iterable[CostBreakdownCategory],
    mappings: Iterable[PoMapping],
    line_items: Mapping[str, NormalizedLineItem],
    project_start: Optional[date],
    as_of: date,
    fallback_ratio: float = DEFAULT_FALLBACK_INVOICE_RATIO,
    cost_line: Optional[str] = None,
    spend_type: Optional[str] = None,
) -> ProjectMetrics:
    rows = filter_categories(categories, cost_line=cost_line, spend_type=spend_type)
    if not rows:
        return ProjectMetrics()

    total_budget = sum(to_number(row.budget_cost) for row in rows)
    scoped = mappings_for_categories(mappings, rows)

    actual_spend = 0.0
    invoiced = 0.0
    open_orders = 0.0
    inferred = 0
    resolved: dict[str, NormalizedLineItem] = {}
    for mapping in scoped:
        actual_spend += to_number(mapping.mapped_amount)
        line_item, split = split_mapping(mapping, line_items, fallback_ratio=fallback_ratio)
        invoiced += split.actual
        open_orders += split.future
        if line_item is None:
            inferred += 1
        else:
            resolved[line_item.id] = line_item

    variance = total_budget - actual_spend
    po_ids = {item.po_id for item in resolved.values() if item.po_id}
    return ProjectMetrics(
        total_budget=total_budget,
        actual_spend=actual_spend,
        variance=variance,
        variance_percent=safe_divide(variance, total_budget) * 100.0,
        utilization=safe_divide(actual_spend, total_budget) * 100.0,
        invoiced_amount=invoiced,
        open_orders=open_orders,
        burn_rate=safe_divide(actual_spend, months_elapsed(project_start, as_of)),
        po_count=len(po_ids),
        line_item_count=len(resolved),
        inferred_mapping_count=inferred,
    )


def build_pl_metrics(
    *,
    categories: Iterable[CostBreakdownCategory],
    mappings: Iterable[PoMapping],
    line_items: Mapping[str, NormalizedLineItem],
    fallback_ratio: float = DEFAULT_FALLBACK_INVOICE_RATIO,
    total_budget: Optional[float] = None,
    cost_line: Optional[str] = None,
    spend_type: Optional[str] = None,
) -> PLMetrics:
    """Committed vs recognized P&L; total_budget overrides the baseline sum (e.g. latest forecast)."""
    rows = filter_categories(categories, cost_line=cost_line, spend_type=spend_type)
    if not rows:
        return PLMetrics()

    budget = sum(to_number(row.budget_cost) for row in rows) if total_budget is None else to_number(total_budget)
    committed = 0.0
    actual = 0.0
    future = 0.0
    for mapping in mappings_for_categories(mappings, rows):
        committed += to_number(mapping.mapped_amount)
        _, split = split_mapping(mapping, line_items, fallback_ratio=fallback_ratio)
        actual += split.actual
        future += split.future

    return PLMetrics(
        total_budget=budget,
        total_committed=committed,
        actual_pl_impact=actual,
        future_pl_impact=future,
        pl_gap=committed - actual,
    )


__all__ = [
    "ALL_FILTER",
    "filter_categories",
    "mappings_for_categories",
    "months_elapsed",
    "build_project_metrics",
    "build_pl_metrics",
]
