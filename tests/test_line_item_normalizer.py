from __future__ import annotations

import logging
from datetime import date, datetime

import pytest

from core.exceptions import MalformedRecordError
from core.models import KnownInvoice, KnownPromise, UNKNOWN_INVOICE, UNKNOWN_PROMISE
from core.services.finance.normalize import any_invoice_tracking, normalize_line_item, normalize_line_items


def test_normalizer_resolves_first_present_alias():
    item = normalize_line_item(
        {
            "id": "li-1",
            "value": 500,
            "total_value": 900,
            "invoice_value": "120.5",
            "promise_date": "2024-04-10",
            "updated_at": datetime(2024, 2, 1, 8, 0),
            "po_id": "po-1",
        }
    )

    assert item.id == "li-1"
    assert item.line_value == 500.0
    assert item.invoice_value == 120.5
    assert item.promise_date == date(2024, 4, 10)
    assert item.created_at == date(2024, 2, 1)
    assert item.po_id == "po-1"


def test_present_but_null_fields_still_count_as_tracked():
    item = normalize_line_item(
        {"id": "li-1", "line_value": 100, "invoiced_value_usd": None, "supplier_promise_date": None}
    )

    assert item.has_invoice_field is True
    assert item.has_promise_field is True
    assert item.invoice_value == 0.0
    assert item.invoice == KnownInvoice(value=0.0, invoice_date=None)
    assert item.promise == KnownPromise(promise_date=None)


def test_missing_fields_are_unknown_not_zero():
    item = normalize_line_item({"id": 7, "line_value": 100})

    assert item.id == "7"
    assert item.has_invoice_field is False
    assert item.has_promise_field is False
    assert item.invoice is UNKNOWN_INVOICE
    assert item.promise is UNKNOWN_PROMISE


def test_actual_value_feeds_the_invoice_value_without_marking_tracking():
    item = normalize_line_item({"id": "li-1", "line_value": 100, "actual_value": 40})

    assert item.invoice_value == 40.0
    assert item.has_invoice_field is False


def test_unparsable_dates_are_treated_as_absent():
    item = normalize_line_item({"id": "li-1", "invoice_date": "last tuesday", "created_at": "2024-01-09"})

    assert item.invoice_date is None
    assert item.effective_invoice_date == date(2024, 1, 9)


@pytest.mark.parametrize("raw", [{"line_value": 10}, {"id": None}, {"id": "   "}, None])
def test_record_without_id_is_malformed(raw):
    with pytest.raises(MalformedRecordError) as exc:
        normalize_line_item(raw)
    assert exc.value.code == "LINE_ITEM_ID_MISSING"


def test_unsupported_record_type_is_malformed():
    with pytest.raises(MalformedRecordError) as exc:
        normalize_line_item(["li-1", 100])
    assert exc.value.code == "LINE_ITEM_RECORD_INVALID"


def test_batch_skips_malformed_records_and_logs(caplog):
    caplog.set_level(logging.WARNING, logger="core.services.finance.normalize")

    items = normalize_line_items(
        [
            {"id": "a", "line_value": 10},
            {"line_value": 20},
            {"id": "b", "line_value": 30, "invoice_value": 5},
        ]
    )

    assert sorted(items) == ["a", "b"]
    assert any("LINE_ITEM_ID_MISSING" in record.getMessage() for record in caplog.records)
    assert any_invoice_tracking(items.values()) is True


def test_empty_batch_is_empty():
    assert normalize_line_items([]) == {}
    assert any_invoice_tracking([]) is False
