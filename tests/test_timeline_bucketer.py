from __future__ import annotations

from datetime import date

import pytest

from core.models import NormalizedLineItem, PoMapping
from core.services.finance.models import PLVelocity, TimelineEntry
from core.services.finance.timeline import build_budget_timeline, build_pl_timeline, build_pl_velocity


def _mapping(line_item_id, amount):
    return PoMapping(mapped_amount=amount, po_line_item_id=line_item_id, cost_breakdown_id="cb-1")


def _summary(timeline):
    return [(entry.month_key, entry.actual_pl, entry.projected_pl, entry.cumulative) for entry in timeline]


def test_timeline_places_actual_on_invoice_and_future_on_promise():
    line_items = {
        "li-1": NormalizedLineItem(
            id="li-1",
            line_value=200,
            invoice_value=120,
            invoice_date=date(2024, 2, 10),
            promise_date=date(2024, 4, 5),
            has_invoice_field=True,
            has_promise_field=True,
        ),
        "li-2": NormalizedLineItem(
            id="li-2",
            line_value=100,
            created_at=date(2024, 1, 15),
            has_invoice_field=True,
        ),
    }

    timeline = build_pl_timeline(
        mappings=[_mapping("li-1", 100), _mapping("li-2", 100)],
        line_items=line_items,
        start=date(2024, 1, 1),
        end=date(2024, 6, 30),
    )

    assert _summary(timeline) == [
        ("2024-01", 0.0, 100.0, 100.0),
        ("2024-02", 60.0, 0.0, 160.0),
        ("2024-04", 0.0, 40.0, 200.0),
    ]
    assert timeline[0].month == "Jan"
    assert timeline[0].year == 2024


def test_dates_outside_the_window_are_dropped_not_extrapolated():
    line_items = {
        "li-1": NormalizedLineItem(
            id="li-1",
            line_value=100,
            invoice_value=100,
            invoice_date=date(2023, 11, 1),
            created_at=date(2023, 10, 1),
            promise_date=date(2024, 9, 1),
            has_invoice_field=True,
            has_promise_field=True,
        ),
    }

    timeline = build_pl_timeline(
        mappings=[_mapping("li-1", 100)],
        line_items=line_items,
        start=date(2024, 1, 1),
        end=date(2024, 6, 30),
    )

    assert timeline == []


def test_missing_promise_falls_back_to_window_end():
    line_items = {"li-1": NormalizedLineItem(id="li-1", line_value=100, has_invoice_field=True)}

    timeline = build_pl_timeline(
        mappings=[_mapping("li-1", 100)],
        line_items=line_items,
        start=date(2024, 1, 1),
        end=date(2024, 6, 30),
    )

    assert _summary(timeline) == [("2024-06", 0.0, 100.0, 100.0)]


def test_unresolved_mapping_without_invoice_tracking_uses_last_resort_placement():
    line_items = {"li-1": NormalizedLineItem(id="li-1", line_value=100, created_at=date(2024, 3, 3))}

    timeline = build_pl_timeline(
        mappings=[_mapping("li-1", 100), _mapping("li-gone", 100)],
        line_items=line_items,
        start=date(2024, 1, 1),
        end=date(2024, 6, 30),
    )

    summary = _summary(timeline)
    assert [row[0] for row in summary] == ["2024-01", "2024-03", "2024-06"]
    assert summary[0][1] == pytest.approx(60.0)
    assert summary[1][1] == pytest.approx(60.0)
    assert summary[1][2] == pytest.approx(40.0)
    assert summary[2][2] == pytest.approx(40.0)
    assert summary[-1][3] == pytest.approx(200.0)


def test_unresolved_mapping_in_tracked_set_is_all_projected():
    line_items = {"li-1": NormalizedLineItem(id="li-1", line_value=100, has_invoice_field=True)}

    timeline = build_pl_timeline(
        mappings=[_mapping("li-gone", 50)],
        line_items=line_items,
        start=date(2024, 1, 1),
        end=date(2024, 6, 30),
    )

    assert _summary(timeline) == [("2024-06", 0.0, 50.0, 50.0)]


def test_inverted_window_or_no_mappings_gives_empty_timeline():
    assert build_pl_timeline(mappings=[], line_items={}, start=date(2024, 1, 1), end=date(2024, 6, 30)) == []
    assert (
        build_pl_timeline(
            mappings=[_mapping("li-gone", 50)],
            line_items={},
            start=date(2024, 6, 30),
            end=date(2024, 1, 1),
        )
        == []
    )


def test_budget_timeline_runs_past_as_of_with_cumulative_actuals():
    line_items = {
        "li-1": NormalizedLineItem(
            id="li-1",
            line_value=100,
            invoice_value=100,
            invoice_date=date(2024, 1, 20),
            promise_date=date(2024, 5, 10),
            has_invoice_field=True,
            has_promise_field=True,
        ),
        "li-2": NormalizedLineItem(
            id="li-2",
            line_value=200,
            promise_date=date(2024, 4, 2),
            has_invoice_field=True,
            has_promise_field=True,
        ),
        "li-3": NormalizedLineItem(
            id="li-3",
            line_value=300,
            promise_date=date(2024, 2, 1),
            has_invoice_field=True,
            has_promise_field=True,
        ),
    }

    points = build_budget_timeline(
        total_budget=1000,
        mappings=[_mapping("li-1", 100), _mapping("li-2", 200), _mapping("li-3", 300)],
        line_items=line_items,
        as_of=date(2024, 3, 15),
        horizon_months=3,
    )

    assert [point.month_key for point in points] == [
        "2024-01",
        "2024-02",
        "2024-03",
        "2024-04",
        "2024-05",
        "2024-06",
    ]
    assert points[0].label == "Jan 2024"
    assert {point.budget for point in points} == {1000.0}
    assert [point.actual for point in points] == [100.0] * 6
    assert [point.forecast for point in points] == [0.0, 0.0, 0.0, 200.0, 0.0, 0.0]


def test_budget_timeline_without_dated_amounts_is_empty():
    points = build_budget_timeline(total_budget=1000, mappings=[], line_items={}, as_of=date(2024, 3, 15))

    assert points == []


def _entry(month, actual):
    return TimelineEntry(month=month, year=2024, actual_pl=actual, projected_pl=0.0, cumulative=0.0)


def test_velocity_compares_halves_of_the_timeline():
    velocity = build_pl_velocity([_entry("Jan", 100), _entry("Feb", 100), _entry("Mar", 200), _entry("Apr", 200)])

    assert velocity.current_rate == pytest.approx(150.0)
    assert velocity.acceleration == pytest.approx(100.0)
    assert velocity.projection == pytest.approx(300.0)


def test_velocity_never_produces_nan():
    assert build_pl_velocity([]) == PLVelocity()
    assert build_pl_velocity([_entry("Jan", 100)]) == PLVelocity()

    velocity = build_pl_velocity([_entry("Jan", 0), _entry("Feb", 100)])
    assert velocity.acceleration == 0.0
    assert velocity.projection == pytest.approx(50.0)
