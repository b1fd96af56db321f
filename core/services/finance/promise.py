from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional

from core.models import KnownPromise, NormalizedLineItem, PoMapping
from core.services.finance.models import PromiseDateRow
from core.services.finance.policy import DEFAULT_FALLBACK_INVOICE_RATIO
from core.services.finance.split import split_mapped_amount


def _promised_amounts(
    mappings: Iterable[PoMapping],
    line_items: Mapping[str, NormalizedLineItem],
    fallback_ratio: float,
) -> Dict[str, List[float]]:
    grouped: Dict[str, List[float]] = {}
    for mapping in mappings or ():
        line_item = line_items.get(mapping.po_line_item_id) if mapping.po_line_item_id else None
        if line_item is None:
            continue
        promise = line_item.promise
        if not isinstance(promise, KnownPromise) or promise.promise_date is None:
            # Still part of open orders, just not dateable.
            continue
        future = split_mapped_amount(mapping.mapped_amount, line_item, fallback_ratio=fallback_ratio).future
        if future <= 0:
            continue
        grouped.setdefault(promise.promise_date.isoformat(), []).append(future)
    return grouped


def build_promise_buckets(
    *,
    mappings: Iterable[PoMapping],
    line_items: Mapping[str, NormalizedLineItem],
    fallback_ratio: float = DEFAULT_FALLBACK_INVOICE_RATIO,
) -> Dict[str, float]:
    """ISO promise date -> open (not yet invoiced) amount, in date order."""
    grouped = _promised_amounts(mappings, line_items, fallback_ratio)
    return {key: sum(grouped[key]) for key in sorted(grouped)}


def build_promise_schedule(
    *,
    mappings: Iterable[PoMapping],
    line_items: Mapping[str, NormalizedLineItem],
    fallback_ratio: float = DEFAULT_FALLBACK_INVOICE_RATIO,
    limit: Optional[int] = None,
) -> List[PromiseDateRow]:
    grouped = _promised_amounts(mappings, line_items, fallback_ratio)
    rows = [
        PromiseDateRow(date=key, amount=sum(amounts), line_item_count=len(amounts))
        for key, amounts in sorted(grouped.items())
    ]
    if limit is not None:
        rows = rows[: max(limit, 0)]
    return rows


__all__ = ["build_promise_buckets", "build_promise_schedule"]
