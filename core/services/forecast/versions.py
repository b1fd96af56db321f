from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence

from core.models import ChangeStatus, ForecastItem, VersionStatus
from core.services.finance.helpers import safe_percentage, to_number
from core.services.forecast.models import (
    CostLineComparison,
    VersionChangeSummary,
    VersionComparison,
    VersionComparisonRow,
)

SnapshotItem = ForecastItem | Mapping[str, Any]

_NEW_AGE = timedelta(days=1)
_RECENT_AGE = timedelta(days=7)
_CURRENT_AGE = timedelta(days=30)

_BADGE_VARIANTS = {
    VersionStatus.NEW: "default",
    VersionStatus.RECENT: "secondary",
    VersionStatus.CURRENT: "outline",
    VersionStatus.HISTORICAL: "outline",
}


def item_value(item: SnapshotItem, name: str, default: Any = None) -> Any:
    if isinstance(item, Mapping):
        return item.get(name, default)
    return getattr(item, name, default)


def effective_cost(item: SnapshotItem) -> float:
    """Forecasted cost when one was recorded (even 0), otherwise the budget cost."""
    forecasted = item_value(item, "forecasted_cost")
    if forecasted is not None:
        return to_number(forecasted)
    return to_number(item_value(item, "budget_cost"))


def calculate_version_changes(
    version_number: int,
    snapshots: Optional[Mapping[int, Sequence[SnapshotItem]]],
) -> VersionChangeSummary:
    """
    Net change of ``version_number`` against the version right before it.

    Items only present in the newer version count in full; items that
    disappeared are not subtracted. The percentage is taken against the
    previous version's total and is 0 when that total is not positive.
    """
    if not snapshots or version_number == 0:
        return VersionChangeSummary()

    current = snapshots.get(version_number) or []
    previous = snapshots.get(version_number - 1) or []
    previous_by_id = {str(item_value(item, "id")): item for item in previous}

    total_change = 0.0
    items_changed = 0
    for item in current:
        before = previous_by_id.get(str(item_value(item, "id")))
        if before is None:
            total_change += effective_cost(item)
            items_changed += 1
            continue
        delta = effective_cost(item) - effective_cost(before)
        if delta != 0:
            total_change += delta
            items_changed += 1

    previous_total = sum(effective_cost(item) for item in previous)
    change_percent = (total_change / previous_total) * 100.0 if previous_total > 0 else 0.0
    return VersionChangeSummary(
        total_change=total_change,
        change_percent=change_percent,
        items_changed=items_changed,
    )


def _as_datetime(value: datetime | str) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value).strip().replace("Z", "+00:00"))


def get_version_status(created_at: datetime | str, now: Optional[datetime] = None) -> VersionStatus:
    created = _as_datetime(created_at)
    if now is None:
        now = datetime.now(created.tzinfo)
    elif (now.tzinfo is None) != (created.tzinfo is None):
        # Naive values are read in the zone of the aware one.
        if now.tzinfo is None:
            now = now.replace(tzinfo=created.tzinfo)
        else:
            created = created.replace(tzinfo=now.tzinfo)
    age = now - created
    if age < _NEW_AGE:
        return VersionStatus.NEW
    if age < _RECENT_AGE:
        return VersionStatus.RECENT
    if age < _CURRENT_AGE:
        return VersionStatus.CURRENT
    return VersionStatus.HISTORICAL


def version_badge_variant(status: VersionStatus) -> str:
    return _BADGE_VARIANTS.get(VersionStatus(status), "outline")


def get_change_status(before: Optional[float], after: Optional[float]) -> ChangeStatus:
    before = to_number(before)
    after = to_number(after)
    if before == 0 and after > 0:
        return ChangeStatus.ADDED
    if before > 0 and after == 0:
        return ChangeStatus.REMOVED
    if before == after:
        return ChangeStatus.UNCHANGED
    return ChangeStatus.INCREASED if after > before else ChangeStatus.DECREASED


def _cost_line(item: Optional[SnapshotItem]) -> str:
    if item is None:
        return ""
    return str(item_value(item, "cost_line") or "Unknown")


def _label(item: SnapshotItem, item_id: str) -> str:
    return str(item_value(item, "sub_category") or item_value(item, "spend_type") or item_id)


def _row_status(
    item_a: Optional[SnapshotItem],
    item_b: Optional[SnapshotItem],
    before: float,
    after: float,
) -> ChangeStatus:
    if item_a is None:
        return ChangeStatus.ADDED
    if item_b is None:
        return ChangeStatus.REMOVED
    return get_change_status(before, after)


def compare_snapshots(
    *,
    project_id: str,
    version_a: int,
    items_a: Iterable[SnapshotItem],
    version_b: int,
    items_b: Iterable[SnapshotItem],
    include_unchanged: bool = True,
) -> VersionComparison:
    by_id_a = {str(item_value(item, "id")): item for item in items_a or ()}
    by_id_b = {str(item_value(item, "id")): item for item in items_b or ()}

    all_rows: List[VersionComparisonRow] = []
    line_totals: Dict[str, List[float]] = {}
    for item_id in set(by_id_a) | set(by_id_b):
        item_a = by_id_a.get(item_id)
        item_b = by_id_b.get(item_id)
        before = effective_cost(item_a) if item_a is not None else 0.0
        after = effective_cost(item_b) if item_b is not None else 0.0
        source = item_b if item_b is not None else item_a
        cost_line = _cost_line(source)

        totals = line_totals.setdefault(cost_line, [0.0, 0.0])
        totals[0] += before
        totals[1] += after

        all_rows.append(
            VersionComparisonRow(
                item_id=item_id,
                cost_line=cost_line,
                label=_label(source, item_id),
                before=before,
                after=after,
                delta=after - before,
                change_percent=safe_percentage(after - before, before),
                status=_row_status(item_a, item_b, before, after),
            )
        )

    change_priority = {
        ChangeStatus.ADDED: 0,
        ChangeStatus.REMOVED: 1,
        ChangeStatus.INCREASED: 2,
        ChangeStatus.DECREASED: 2,
        ChangeStatus.UNCHANGED: 3,
    }
    all_rows.sort(key=lambda row: (change_priority[row.status], row.cost_line.lower(), row.label.lower()))

    cost_lines = [
        CostLineComparison(
            cost_line=name,
            before=before,
            after=after,
            delta=after - before,
            change_percent=safe_percentage(after - before, before),
            status=get_change_status(before, after),
        )
        for name, (before, after) in sorted(line_totals.items(), key=lambda entry: entry[0].lower())
    ]

    total_a = sum(row.before for row in all_rows)
    total_b = sum(row.after for row in all_rows)
    rows = (
        all_rows
        if include_unchanged
        else [row for row in all_rows if row.status != ChangeStatus.UNCHANGED]
    )
    return VersionComparison(
        project_id=project_id,
        version_a=version_a,
        version_b=version_b,
        total_a=total_a,
        total_b=total_b,
        total_change=total_b - total_a,
        change_percent=safe_percentage(total_b - total_a, total_a),
        added_items=sum(1 for row in all_rows if row.status == ChangeStatus.ADDED),
        removed_items=sum(1 for row in all_rows if row.status == ChangeStatus.REMOVED),
        changed_items=sum(
            1 for row in all_rows if row.status in (ChangeStatus.INCREASED, ChangeStatus.DECREASED)
        ),
        unchanged_items=sum(1 for row in all_rows if row.status == ChangeStatus.UNCHANGED),
        rows=rows,
        cost_lines=cost_lines,
    )


__all__ = [
    "SnapshotItem",
    "item_value",
    "effective_cost",
    "calculate_version_changes",
    "get_version_status",
    "version_badge_variant",
    "get_change_status",
    "compare_snapshots",
]
