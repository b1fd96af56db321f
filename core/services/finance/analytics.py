from __future__ import annotations

import re
from typing import Dict, Iterable, List, Mapping, Optional

from core.models import CostBreakdownCategory, NormalizedLineItem, PoMapping, PurchaseOrder
from core.services.finance.helpers import safe_divide, to_number
from core.services.finance.metrics import filter_categories
from core.services.finance.models import CategoryRow, ControlMatrixRow, SupplierPerformanceRow
from core.services.finance.policy import DEFAULT_FALLBACK_INVOICE_RATIO, DEFAULT_ON_TIME_INVOICE_DAYS
from core.services.finance.split import split_mapping

UNCATEGORIZED = "Uncategorized"


def pretty_category_name(value: Optional[str]) -> str:
    text = (value or UNCATEGORIZED).replace("_", " ")
    return re.sub(r"\b\w", lambda match: match.group(0).upper(), text)


def build_control_matrix(
    *,
    categories: Iterable[CostBreakdownCategory],
    mappings: Iterable[PoMapping],
    line_items: Mapping[str, NormalizedLineItem],
    fallback_ratio: float = DEFAULT_FALLBACK_INVOICE_RATIO,
    budget_overrides: Optional[Mapping[str, float]] = None,
    cost_line: Optional[str] = None,
    spend_type: Optional[str] = None,
) -> List[ControlMatrixRow]:
    """
    Budget control matrix by spend type: budget, committed, P&L impact and the gap still open.

    budget_overrides maps cost breakdown id -> forecasted cost for the latest version.
    """
    rows = filter_categories(categories, cost_line=cost_line, spend_type=spend_type)
    overrides = budget_overrides or {}
    buckets: Dict[str, Dict[str, float]] = {}
    category_of: Dict[str, str] = {}
    for row in rows:
        name = row.spend_type or UNCATEGORIZED
        category_of[row.id] = name
        bucket = buckets.setdefault(name, {"budget": 0.0, "committed": 0.0, "actual": 0.0, "future": 0.0})
        bucket["budget"] += to_number(overrides.get(row.id, row.budget_cost))

    for mapping in mappings or ():
        name = category_of.get(mapping.cost_breakdown_id)
        if name is None:
            continue
        bucket = buckets[name]
        bucket["committed"] += to_number(mapping.mapped_amount)
        _, split = split_mapping(mapping, line_items, fallback_ratio=fallback_ratio)
        bucket["actual"] += split.actual
        bucket["future"] += split.future

    out = [
        ControlMatrixRow(
            name=name,
            budget=bucket["budget"],
            committed=bucket["committed"],
            pl_impact=bucket["actual"],
            gap_to_pl=bucket["future"],
        )
        for name, bucket in buckets.items()
    ]
    out.sort(key=lambda row: (-row.budget, row.name.lower()))
    return out


def build_category_breakdown(
    *,
    categories: Iterable[CostBreakdownCategory],
    mappings: Iterable[PoMapping],
) -> List[CategoryRow]:
    """Budget vs committed spend per cost line; lines with no mappings keep committed at 0."""
    budget: Dict[str, float] = {}
    committed: Dict[str, float] = {}
    line_of: Dict[str, str] = {}
    for row in categories or ():
        key = row.cost_line or UNCATEGORIZED
        line_of[row.id] = key
        budget[key] = budget.get(key, 0.0) + to_number(row.budget_cost)
        committed.setdefault(key, 0.0)

    for mapping in mappings or ():
        key = line_of.get(mapping.cost_breakdown_id)
        if key is not None:
            committed[key] += to_number(mapping.mapped_amount)

    return [
        CategoryRow(name=pretty_category_name(key), budget=budget[key], committed=committed[key])
        for key in sorted(budget, key=str.lower)
    ]


def build_supplier_performance(
    *,
    mappings: Iterable[PoMapping],
    line_items: Mapping[str, NormalizedLineItem],
    purchase_orders: Mapping[str, PurchaseOrder],
    fallback_ratio: float = DEFAULT_FALLBACK_INVOICE_RATIO,
    on_time_days: int = DEFAULT_ON_TIME_INVOICE_DAYS,
) -> List[SupplierPerformanceRow]:
    suppliers: Dict[str, Dict[str, float]] = {}
    for mapping in mappings or ():
        line_item, split = split_mapping(mapping, line_items, fallback_ratio=fallback_ratio)
        if line_item is None or not line_item.po_id:
            continue
        po = purchase_orders.get(line_item.po_id)
        if po is None:
            continue

        stats = suppliers.setdefault(
            po.vendor_name,
            {
                "on_time": 0.0,
                "invoiced": 0.0,
                "days_total": 0.0,
                "days_count": 0.0,
                "pl_impact": 0.0,
                "open_value": 0.0,
            },
        )
        if line_item.invoice_date is None:
            stats["open_value"] += split.future
            continue

        stats["pl_impact"] += split.actual
        stats["invoiced"] += 1
        if po.po_creation_date is not None:
            days = (line_item.invoice_date - po.po_creation_date).days
            stats["days_total"] += days
            stats["days_count"] += 1
            if days <= on_time_days:
                stats["on_time"] += 1

    rows = [
        SupplierPerformanceRow(
            supplier_name=name,
            on_time_delivery_rate=safe_divide(stats["on_time"], stats["invoiced"]) * 100.0,
            average_days_to_invoice=safe_divide(stats["days_total"], stats["days_count"]),
            total_pl_impact=stats["pl_impact"],
            open_po_value=stats["open_value"],
        )
        for name, stats in suppliers.items()
    ]
    rows.sort(key=lambda row: (-(row.total_pl_impact + row.open_po_value), row.supplier_name.lower()))
    return rows


__all__ = [
    "UNCATEGORIZED",
    "pretty_category_name",
    "build_control_matrix",
    "build_category_breakdown",
    "build_supplier_performance",
]
