from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class CostBreakdownCategory:
    """A leaf budget line. The four name fields are the hierarchy keys."""

    id: str
    project_id: str
    business_line: Optional[str]
    cost_line: Optional[str]
    spend_type: Optional[str]
    sub_category: Optional[str]
    budget_cost: float = 0.0


@dataclass
class PoMapping:
    """One committed allocation of (part of) a PO line item to a budget category."""

    mapped_amount: float
    po_line_item_id: Optional[str]
    cost_breakdown_id: str
    id: Optional[str] = None


__all__ = ["CostBreakdownCategory", "PoMapping"]
