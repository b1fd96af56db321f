from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from core.models import ChangeStatus, ForecastItem, VersionStatus
from core.services.forecast.models import VersionChangeSummary
from core.services.forecast.versions import (
    calculate_version_changes,
    compare_snapshots,
    effective_cost,
    get_change_status,
    get_version_status,
    version_badge_variant,
)

NOW = datetime(2024, 6, 30, 12, 0, 0)


def test_version_changes_net_item_deltas():
    snapshots = {
        0: [{"id": "1", "budget_cost": 1000}, {"id": "2", "budget_cost": 2000}],
        1: [
            {"id": "1", "budget_cost": 1000, "forecasted_cost": 1500},
            {"id": "2", "budget_cost": 2000, "forecasted_cost": 1800},
        ],
    }

    summary = calculate_version_changes(1, snapshots)

    assert summary == VersionChangeSummary(total_change=300.0, change_percent=10.0, items_changed=2)


def test_new_item_counts_in_full():
    snapshots = {
        1: [ForecastItem(id="a", budget_cost=1000), ForecastItem(id="b", budget_cost=2000)],
        2: [
            ForecastItem(id="a", budget_cost=1000),
            ForecastItem(id="b", budget_cost=2000),
            ForecastItem(id="c", budget_cost=0, forecasted_cost=500),
        ],
    }

    summary = calculate_version_changes(2, snapshots)

    assert summary.total_change == 500.0
    assert summary.items_changed == 1
    assert summary.change_percent == pytest.approx(500 / 3000 * 100)


def test_version_zero_or_missing_snapshots_have_no_changes():
    assert calculate_version_changes(0, {0: [{"id": "1", "budget_cost": 10}]}) == VersionChangeSummary()
    assert calculate_version_changes(3, None) == VersionChangeSummary()
    assert calculate_version_changes(3, {}) == VersionChangeSummary()


def test_missing_previous_snapshot_has_zero_percent():
    summary = calculate_version_changes(4, {4: [{"id": "1", "budget_cost": 250}]})

    assert summary.total_change == 250.0
    assert summary.items_changed == 1
    assert summary.change_percent == 0.0


def test_forecasted_zero_is_a_real_value():
    assert effective_cost({"id": "1", "budget_cost": 100, "forecasted_cost": 0}) == 0.0
    assert effective_cost({"id": "1", "budget_cost": 100, "forecasted_cost": None}) == 100.0
    assert ForecastItem(id="1", budget_cost=100, forecasted_cost=0).effective_cost == 0.0


@pytest.mark.parametrize(
    "age, expected",
    [
        (timedelta(0), VersionStatus.NEW),
        (timedelta(hours=23, minutes=59, seconds=59), VersionStatus.NEW),
        (timedelta(days=1), VersionStatus.RECENT),
        (timedelta(days=6), VersionStatus.RECENT),
        (timedelta(days=7), VersionStatus.CURRENT),
        (timedelta(days=29), VersionStatus.CURRENT),
        (timedelta(days=30), VersionStatus.HISTORICAL),
        (timedelta(days=400), VersionStatus.HISTORICAL),
    ],
)
def test_version_status_boundaries(age, expected):
    assert get_version_status(NOW - age, now=NOW) == expected


def test_version_status_accepts_iso_strings_with_timezone():
    now = datetime(2024, 6, 30, 12, 0, tzinfo=timezone.utc)

    assert get_version_status("2024-06-30T02:00:00Z", now=now) == VersionStatus.NEW
    assert get_version_status("2024-06-01T12:00:00+00:00", now=now) == VersionStatus.CURRENT


def test_version_status_mixes_naive_and_aware_timestamps():
    aware_now = datetime(2024, 6, 30, 12, 0, tzinfo=timezone.utc)
    naive_now = datetime(2024, 6, 30, 12, 0)

    assert get_version_status(datetime(2024, 6, 30, 2, 0), now=aware_now) == VersionStatus.NEW
    assert get_version_status("2024-06-25T12:00:00Z", now=naive_now) == VersionStatus.RECENT
    assert get_version_status("2024-05-01T12:00:00+00:00", now=naive_now) == VersionStatus.HISTORICAL


def test_badge_variants():
    assert version_badge_variant(VersionStatus.NEW) == "default"
    assert version_badge_variant(VersionStatus.RECENT) == "secondary"
    assert version_badge_variant("Historical") == "outline"


@pytest.mark.parametrize(
    "before, after, expected",
    [
        (0, 100, ChangeStatus.ADDED),
        (None, 100, ChangeStatus.ADDED),
        (100, 0, ChangeStatus.REMOVED),
        (100, None, ChangeStatus.REMOVED),
        (100, 100, ChangeStatus.UNCHANGED),
        (0, 0, ChangeStatus.UNCHANGED),
        (100, 150, ChangeStatus.INCREASED),
        (150, 100, ChangeStatus.DECREASED),
    ],
)
def test_change_status(before, after, expected):
    assert get_change_status(before, after) == expected


def test_compare_snapshots_tags_rows_and_totals_cost_lines():
    items_a = [
        ForecastItem(id="1", budget_cost=1000, cost_line="engineering", sub_category="Design"),
        ForecastItem(id="2", budget_cost=2000, cost_line="engineering", sub_category="Review"),
        ForecastItem(id="3", budget_cost=500, cost_line="site", sub_category="Fencing"),
    ]
    items_b = [
        ForecastItem(id="1", budget_cost=1000, forecasted_cost=1500, cost_line="engineering", sub_category="Design"),
        ForecastItem(id="2", budget_cost=2000, cost_line="engineering", sub_category="Review"),
        ForecastItem(id="4", budget_cost=0, forecasted_cost=250, cost_line="site", sub_category="Lighting"),
    ]

    comparison = compare_snapshots(project_id="p-1", version_a=0, items_a=items_a, version_b=1, items_b=items_b)

    statuses = {row.item_id: row.status for row in comparison.rows}
    assert statuses == {
        "1": ChangeStatus.INCREASED,
        "2": ChangeStatus.UNCHANGED,
        "3": ChangeStatus.REMOVED,
        "4": ChangeStatus.ADDED,
    }
    assert [row.item_id for row in comparison.rows][:2] == ["4", "3"]
    assert comparison.total_a == 3500.0
    assert comparison.total_b == 3750.0
    assert comparison.total_change == 250.0
    assert comparison.change_percent == pytest.approx(7.14)
    assert (comparison.added_items, comparison.removed_items, comparison.changed_items) == (1, 1, 1)
    assert comparison.unchanged_items == 1

    lines = {line.cost_line: line for line in comparison.cost_lines}
    assert lines["engineering"].before == 3000.0
    assert lines["engineering"].after == 3500.0
    assert lines["engineering"].status == ChangeStatus.INCREASED
    assert lines["site"].delta == -250.0
    assert lines["site"].change_percent == -50.0


def test_compare_snapshots_can_hide_unchanged_rows():
    items = [ForecastItem(id="1", budget_cost=100, cost_line="engineering")]

    comparison = compare_snapshots(
        project_id="p-1",
        version_a=1,
        items_a=items,
        version_b=2,
        items_b=items,
        include_unchanged=False,
    )

    assert comparison.rows == []
    assert comparison.unchanged_items == 1
