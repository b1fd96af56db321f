from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Tuple

from core.models import HierarchyLevel, Measurement, NO_DATA, NoData


@dataclass(frozen=True)
class ProjectMetrics:
    total_budget: float = 0.0
    actual_spend: float = 0.0
    variance: float = 0.0
    variance_percent: float = 0.0
    utilization: float = 0.0
    invoiced_amount: float = 0.0
    open_orders: float = 0.0
    burn_rate: float = 0.0
    po_count: int = 0
    line_item_count: int = 0
    inferred_mapping_count: int = 0


@dataclass(frozen=True)
class PLMetrics:
    total_budget: float = 0.0
    total_committed: float = 0.0
    actual_pl_impact: float = 0.0
    future_pl_impact: float = 0.0
    pl_gap: float = 0.0


@dataclass(frozen=True)
class CostBreakdownNode:
    id: str
    level: HierarchyLevel
    name: str
    budget: float
    committed_actual: float
    variance: float
    utilization: float
    measurement: Measurement = NO_DATA
    children: Tuple["CostBreakdownNode", ...] = field(default_factory=tuple)

    @property
    def actual(self) -> float:
        return self.committed_actual

    @property
    def has_data(self) -> bool:
        return not isinstance(self.measurement, NoData)

    def iter_leaves(self) -> Iterator["CostBreakdownNode"]:
        if not self.children:
            yield self
            return
        for child in self.children:
            yield from child.iter_leaves()


@dataclass(frozen=True)
class TimelineEntry:
    month: str
    year: int
    actual_pl: float
    projected_pl: float
    cumulative: float

    @property
    def month_key(self) -> str:
        return f"{self.year}-{_MONTH_INDEX.get(self.month, 0):02d}"


@dataclass(frozen=True)
class BudgetTimelinePoint:
    month_key: str
    label: str
    budget: float
    actual: float
    forecast: float


@dataclass(frozen=True)
class PromiseDateRow:
    date: str
    amount: float
    line_item_count: int


@dataclass(frozen=True)
class ControlMatrixRow:
    name: str
    budget: float
    committed: float
    pl_impact: float
    gap_to_pl: float


@dataclass(frozen=True)
class CategoryRow:
    name: str
    budget: float
    committed: float


@dataclass(frozen=True)
class PLVelocity:
    current_rate: float = 0.0
    acceleration: float = 0.0
    projection: float = 0.0


@dataclass(frozen=True)
class SupplierPerformanceRow:
    supplier_name: str
    on_time_delivery_rate: float
    average_days_to_invoice: float
    total_pl_impact: float
    open_po_value: float


_MONTH_INDEX = {
    name: index
    for index, name in enumerate(
        ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"),
        start=1,
    )
}


__all__ = [
    "ProjectMetrics",
    "PLMetrics",
    "CostBreakdownNode",
    "TimelineEntry",
    "BudgetTimelinePoint",
    "PromiseDateRow",
    "ControlMatrixRow",
    "CategoryRow",
    "PLVelocity",
    "SupplierPerformanceRow",
]
