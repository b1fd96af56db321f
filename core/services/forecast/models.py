from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from core.models import ChangeStatus


@dataclass(frozen=True)
class VersionChangeSummary:
    total_change: float = 0.0
    change_percent: float = 0.0
    items_changed: int = 0


@dataclass(frozen=True)
class VersionComparisonRow:
    item_id: str
    cost_line: str
    label: str
    before: float
    after: float
    delta: float
    change_percent: float
    status: ChangeStatus


@dataclass(frozen=True)
class CostLineComparison:
    cost_line: str
    before: float
    after: float
    delta: float
    change_percent: float
    status: ChangeStatus


@dataclass(frozen=True)
class VersionComparison:
    project_id: str
    version_a: int
    version_b: int
    total_a: float
    total_b: float
    total_change: float
    change_percent: float
    added_items: int
    removed_items: int
    changed_items: int
    unchanged_items: int
    rows: List[VersionComparisonRow] = field(default_factory=list)
    cost_lines: List[CostLineComparison] = field(default_factory=list)


@dataclass(frozen=True)
class StagingTotals:
    total_budget: float = 0.0
    total_forecast: float = 0.0
    total_change: float = 0.0
    change_percentage: float = 0.0
    modified_count: int = 0
    excluded_count: int = 0
    new_entries_count: int = 0


__all__ = [
    "VersionChangeSummary",
    "VersionComparisonRow",
    "CostLineComparison",
    "VersionComparison",
    "StagingTotals",
]
