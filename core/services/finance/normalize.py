from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Iterable

from core.exceptions import MalformedRecordError
from core.models import NormalizedLineItem, RawLineItem
from core.services.finance.helpers import parse_date, to_number

logger = logging.getLogger(__name__)

LINE_VALUE_FIELDS = ("line_value", "value", "total_value")
INVOICE_VALUE_FIELDS = (
    "invoiced_value_usd",
    "invoiced_value",
    "invoice_value_usd",
    "invoice_value",
    "actual_value",
)
# actual_value may feed the value, but only these columns mean the source tracks invoicing.
INVOICE_TRACKING_FIELDS = INVOICE_VALUE_FIELDS[:4]
PROMISE_DATE_FIELDS = ("supplier_promise_date", "promise_date")
CREATED_FIELDS = ("created_at", "updated_at")


def _as_mapping(raw: Any) -> Mapping[str, Any]:
    if isinstance(raw, Mapping):
        return raw
    row_mapping = getattr(raw, "_mapping", None)
    if isinstance(row_mapping, Mapping):
        return row_mapping
    raise MalformedRecordError(
        f"Unsupported line item record type: {type(raw).__name__}",
        code="LINE_ITEM_RECORD_INVALID",
    )


def _first_present(record: Mapping[str, Any], fields: Iterable[str]) -> Any:
    for name in fields:
        value = record.get(name)
        if value is not None:
            return value
    return None


def _has_any(record: Mapping[str, Any], fields: Iterable[str]) -> bool:
    return any(name in record for name in fields)


def normalize_line_item(raw: RawLineItem | Any) -> NormalizedLineItem:
    """
    Canonicalize one raw PO line item.

    Field presence (not value) decides has_invoice_field / has_promise_field,
    so a column that exists but is null still counts as tracked.
    """
    if raw is None:
        raise MalformedRecordError("Unable to normalize an empty line item record.", code="LINE_ITEM_ID_MISSING")
    record = _as_mapping(raw)
    item_id = record.get("id")
    if item_id is None or str(item_id).strip() == "":
        raise MalformedRecordError("Unable to normalize PO line item without an id.", code="LINE_ITEM_ID_MISSING")

    po_id = record.get("po_id")
    return NormalizedLineItem(
        id=str(item_id),
        line_value=to_number(_first_present(record, LINE_VALUE_FIELDS)),
        invoice_value=to_number(_first_present(record, INVOICE_VALUE_FIELDS)),
        invoice_date=parse_date(record.get("invoice_date")),
        promise_date=parse_date(_first_present(record, PROMISE_DATE_FIELDS)),
        created_at=parse_date(_first_present(record, CREATED_FIELDS)),
        has_invoice_field=_has_any(record, INVOICE_TRACKING_FIELDS),
        has_promise_field=_has_any(record, PROMISE_DATE_FIELDS),
        po_id=(None if po_id is None else str(po_id)),
    )


def normalize_line_items(raw_records: Iterable[RawLineItem | Any]) -> dict[str, NormalizedLineItem]:
    """Normalize a batch keyed by id; malformed records are logged and skipped."""
    items: dict[str, NormalizedLineItem] = {}
    skipped = 0
    for raw in raw_records or ():
        try:
            normalized = normalize_line_item(raw)
        except MalformedRecordError as exc:
            skipped += 1
            logger.warning("Skipping malformed PO line item record (%s): %s", exc.code, exc)
            continue
        items[normalized.id] = normalized
    if skipped:
        logger.info("Normalized %d PO line items, skipped %d malformed", len(items), skipped)
    return items


def any_invoice_tracking(line_items: Iterable[NormalizedLineItem]) -> bool:
    return any(item.has_invoice_field for item in line_items)


__all__ = [
    "normalize_line_item",
    "normalize_line_items",
    "any_invoice_tracking",
    "LINE_VALUE_FIELDS",
    "INVOICE_VALUE_FIELDS",
    "PROMISE_DATE_FIELDS",
]
