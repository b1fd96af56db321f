from __future__ import annotations

from datetime import date

import pytest

from core.models import NormalizedLineItem, PoMapping
from core.services.finance.promise import build_promise_buckets, build_promise_schedule


@pytest.fixture
def open_orders():
    line_items = {
        "li-1": NormalizedLineItem(
            id="li-1",
            line_value=200,
            invoice_value=120,
            promise_date=date(2024, 5, 1),
            has_invoice_field=True,
            has_promise_field=True,
        ),
        "li-2": NormalizedLineItem(
            id="li-2",
            line_value=100,
            promise_date=date(2024, 4, 15),
            has_invoice_field=True,
            has_promise_field=True,
        ),
        "li-3": NormalizedLineItem(id="li-3", line_value=100, has_invoice_field=True, has_promise_field=True),
        "li-4": NormalizedLineItem(
            id="li-4",
            line_value=100,
            invoice_value=100,
            promise_date=date(2024, 4, 15),
            has_invoice_field=True,
            has_promise_field=True,
        ),
    }
    mappings = [
        PoMapping(mapped_amount=100, po_line_item_id="li-1", cost_breakdown_id="cb-1"),
        PoMapping(mapped_amount=60, po_line_item_id="li-2", cost_breakdown_id="cb-1"),
        PoMapping(mapped_amount=40, po_line_item_id="li-2", cost_breakdown_id="cb-2"),
        PoMapping(mapped_amount=100, po_line_item_id="li-3", cost_breakdown_id="cb-1"),
        PoMapping(mapped_amount=100, po_line_item_id="li-4", cost_breakdown_id="cb-1"),
        PoMapping(mapped_amount=100, po_line_item_id="li-gone", cost_breakdown_id="cb-1"),
    ]
    return mappings, line_items


def test_promise_buckets_sum_open_amounts_by_date(open_orders):
    mappings, line_items = open_orders

    buckets = build_promise_buckets(mappings=mappings, line_items=line_items)

    assert buckets == {"2024-04-15": 100.0, "2024-05-01": 40.0}
    assert list(buckets) == sorted(buckets)


def test_promise_schedule_counts_mappings_and_truncates(open_orders):
    mappings, line_items = open_orders

    schedule = build_promise_schedule(mappings=mappings, line_items=line_items)
    limited = build_promise_schedule(mappings=mappings, line_items=line_items, limit=1)

    assert [(row.date, row.amount, row.line_item_count) for row in schedule] == [
        ("2024-04-15", 100.0, 2),
        ("2024-05-01", 40.0, 1),
    ]
    assert [row.date for row in limited] == ["2024-04-15"]


def test_line_items_without_promise_tracking_are_skipped():
    line_items = {"li-1": NormalizedLineItem(id="li-1", line_value=100, promise_date=date(2024, 4, 1))}
    mappings = [PoMapping(mapped_amount=100, po_line_item_id="li-1", cost_breakdown_id="cb-1")]

    assert build_promise_buckets(mappings=mappings, line_items=line_items) == {}
    assert build_promise_schedule(mappings=[], line_items={}) == []
