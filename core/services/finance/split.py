from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from core.models import KnownInvoice, NormalizedLineItem, PoMapping
from core.services.finance.helpers import to_number
from core.services.finance.policy import DEFAULT_FALLBACK_INVOICE_RATIO

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PLSplit:
    """A committed amount divided into the part already in P&L and the part still open."""

    actual: float
    future: float
    inferred: bool = False

    @property
    def total(self) -> float:
        return self.actual + self.future


def allocation_ratio(mapped_amount: float, line_value: float) -> float:
    """Share of the line item covered by one mapping, capped at 1 for over-allocations."""
    mapped_amount = to_number(mapped_amount)
    line_value = to_number(line_value)
    safe_line_value = line_value if line_value > 0 else mapped_amount
    if safe_line_value <= 0:
        return 1.0
    return min(mapped_amount / safe_line_value, 1.0)


def inferred_split(mapped_amount: float, fallback_ratio: float = DEFAULT_FALLBACK_INVOICE_RATIO) -> PLSplit:
    mapped_amount = to_number(mapped_amount)
    if mapped_amount <= 0:
        return PLSplit(actual=mapped_amount, future=0.0, inferred=True)
    actual = mapped_amount * fallback_ratio
    return PLSplit(actual=actual, future=mapped_amount - actual, inferred=True)


def split_mapped_amount(
    mapped_amount: float,
    line_item: NormalizedLineItem,
    *,
    fallback_ratio: float = DEFAULT_FALLBACK_INVOICE_RATIO,
) -> PLSplit:
    """
    Split one mapping's committed amount into actual (invoiced) and future P&L.

    With invoice tracking the line item's invoiced value is pro-rated by the
    mapping's allocation ratio; without it the flat fallback ratio applies.
    actual + future always equals the mapped amount.
    """
    mapped_amount = to_number(mapped_amount)
    invoice = line_item.invoice
    if not isinstance(invoice, KnownInvoice):
        return inferred_split(mapped_amount, fallback_ratio)

    if mapped_amount <= 0:
        return PLSplit(actual=mapped_amount, future=0.0)

    ratio = allocation_ratio(mapped_amount, line_item.line_value)
    actual = to_number(invoice.value) * ratio
    # Over-invoiced lines cannot recognize more than was committed to this mapping.
    actual = min(max(actual, 0.0), mapped_amount)
    return PLSplit(actual=actual, future=mapped_amount - actual)


def split_mapping(
    mapping: PoMapping,
    line_items: Mapping[str, NormalizedLineItem],
    *,
    fallback_ratio: float = DEFAULT_FALLBACK_INVOICE_RATIO,
) -> tuple[Optional[NormalizedLineItem], PLSplit]:
    """Resolve a mapping's line item and split it; unresolved mappings fall back to the flat ratio."""
    line_item = line_items.get(mapping.po_line_item_id) if mapping.po_line_item_id else None
    amount = to_number(mapping.mapped_amount)
    if line_item is None:
        logger.debug(
            "Line item %s not resolved for cost breakdown %s; inferring split",
            mapping.po_line_item_id,
            mapping.cost_breakdown_id,
        )
        return None, inferred_split(amount, fallback_ratio)
    return line_item, split_mapped_amount(amount, line_item, fallback_ratio=fallback_ratio)


__all__ = [
    "PLSplit",
    "allocation_ratio",
    "inferred_split",
    "split_mapped_amount",
    "split_mapping",
]
