from __future__ import annotations

from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional

from core.models import NormalizedLineItem, PoMapping
from core.services.finance.helpers import (
    add_months,
    month_bounds,
    month_key,
    month_label,
    month_name,
    safe_divide,
    to_number,
)
from core.services.finance.models import BudgetTimelinePoint, PLVelocity, TimelineEntry
from core.services.finance.normalize import any_invoice_tracking
from core.services.finance.policy import DEFAULT_FALLBACK_INVOICE_RATIO, DEFAULT_TIMELINE_HORIZON_MONTHS
from core.services.finance.split import split_mapped_amount


class _MonthBuckets:
    def __init__(self) -> None:
        self._buckets: Dict[str, Dict[str, float]] = {}

    def add(self, anchor: Optional[date], stage: str, amount: float) -> None:
        if anchor is None or amount <= 0:
            return
        bucket = self._buckets.setdefault(month_key(anchor), {"actual": 0.0, "projected": 0.0})
        bucket[stage] += amount

    def sorted_items(self) -> List[tuple[str, Dict[str, float]]]:
        return sorted(self._buckets.items(), key=lambda item: item[0])


def _clamp(value: Optional[date], start: date, end: date) -> Optional[date]:
    if value is None or value < start or value > end:
        return None
    return value


def build_pl_timeline(
    *,
    mappings: Iterable[PoMapping],
    line_items: Mapping[str, NormalizedLineItem],
    start: date,
    end: date,
    fallback_ratio: float = DEFAULT_FALLBACK_INVOICE_RATIO,
) -> List[TimelineEntry]:
    """
    Monthly actual vs projected P&L inside [start, end] with a running total.

    Actual lands on the invoice date (or creation date), projected on the
    supplier promise date, then the invoice date, then the window end. Dates
    outside the window are dropped rather than extrapolated.
    """
    if start > end:
        return []

    tracked = any_invoice_tracking(line_items.values())
    buckets = _MonthBuckets()
    for mapping in mappings or ():
        amount = to_number(mapping.mapped_amount)
        line_item = line_items.get(mapping.po_line_item_id) if mapping.po_line_item_id else None

        if line_item is None:
            # Last-resort placement: nothing known about dates for this mapping.
            inferred_actual = 0.0 if tracked else amount * fallback_ratio
            buckets.add(start, "actual", inferred_actual)
            buckets.add(end, "projected", max(amount - inferred_actual, 0.0))
            continue

        split = split_mapped_amount(amount, line_item, fallback_ratio=fallback_ratio)
        invoice_on = _clamp(line_item.effective_invoice_date, start, end)
        if invoice_on is None:
            invoice_on = _clamp(line_item.created_at, start, end)
        promise_on = _clamp(line_item.effective_promise_date, start, end) or invoice_on or end

        buckets.add(invoice_on, "actual", split.actual)
        buckets.add(promise_on, "projected", split.future)

    timeline: List[TimelineEntry] = []
    cumulative = 0.0
    for key, bucket in buckets.sorted_items():
        year, month = key.split("-")
        cumulative += bucket["actual"] + bucket["projected"]
        timeline.append(
            TimelineEntry(
                month=month_name(int(month)),
                year=int(year),
                actual_pl=bucket["actual"],
                projected_pl=bucket["projected"],
                cumulative=cumulative,
            )
        )
    return timeline


def build_budget_timeline(
    *,
    total_budget: float,
    mappings: Iterable[PoMapping],
    line_items: Mapping[str, NormalizedLineItem],
    as_of: date,
    horizon_months: int = DEFAULT_TIMELINE_HORIZON_MONTHS,
    fallback_ratio: float = DEFAULT_FALLBACK_INVOICE_RATIO,
) -> List[BudgetTimelinePoint]:
    """
    Budget reference line with cumulative invoiced actuals and monthly open promises.

    Only invoiced amounts with an invoice date and open amounts promised on or
    after as_of are placed; the series runs at least horizon_months past as_of.
    """
    invoiced: Dict[str, float] = {}
    promised: Dict[str, float] = {}
    anchors: List[date] = []
    for mapping in mappings or ():
        line_item = line_items.get(mapping.po_line_item_id) if mapping.po_line_item_id else None
        if line_item is None:
            continue
        split = split_mapped_amount(mapping.mapped_amount, line_item, fallback_ratio=fallback_ratio)
        if line_item.invoice_date is not None and split.actual > 0:
            key = month_key(line_item.invoice_date)
            invoiced[key] = invoiced.get(key, 0.0) + split.actual
            anchors.append(line_item.invoice_date)
        promise_on = line_item.promise_date
        if promise_on is not None and promise_on >= as_of and split.future > 0:
            key = month_key(promise_on)
            promised[key] = promised.get(key, 0.0) + split.future
            anchors.append(promise_on)

    if not anchors:
        return []

    _, current, _ = month_bounds(min(anchors))
    _, last, _ = month_bounds(max(max(anchors), add_months(as_of, max(horizon_months, 0))))
    budget = to_number(total_budget)

    points: List[BudgetTimelinePoint] = []
    cumulative_actual = 0.0
    while current <= last:
        key = month_key(current)
        cumulative_actual += invoiced.get(key, 0.0)
        points.append(
            BudgetTimelinePoint(
                month_key=key,
                label=month_label(current),
                budget=budget,
                actual=float(round(cumulative_actual)),
                forecast=float(round(promised.get(key, 0.0))),
            )
        )
        current = add_months(current, 1)
    return points


def build_pl_velocity(timeline: List[TimelineEntry]) -> PLVelocity:
    """Average monthly actual P&L, its half-over-half acceleration (%) and next-month projection."""
    if len(timeline) < 2:
        return PLVelocity()

    total = sum(entry.actual_pl for entry in timeline)
    current_rate = total / len(timeline)

    middle = len(timeline) // 2
    first_half = timeline[:middle]
    second_half = timeline[middle:]
    first_rate = safe_divide(sum(e.actual_pl for e in first_half), len(first_half))
    second_rate = safe_divide(sum(e.actual_pl for e in second_half), len(second_half))

    acceleration = safe_divide(second_rate - first_rate, first_rate) * 100.0
    return PLVelocity(
        current_rate=current_rate,
        acceleration=acceleration,
        projection=current_rate * (1.0 + acceleration / 100.0),
    )


__all__ = ["build_pl_timeline", "build_budget_timeline", "build_pl_velocity"]
