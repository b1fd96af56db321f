from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from core.models import (
    NO_DATA,
    CostBreakdownCategory,
    Estimated,
    HierarchyLevel,
    Measured,
    Measurement,
    PoMapping,
)
from core.services.finance.helpers import safe_divide, to_number
from core.services.finance.metrics import filter_categories
from core.services.finance.models import CostBreakdownNode

UNKNOWN_NAME = "Unknown"


@dataclass
class _Branch:
    """Mutable staging node; frozen into a CostBreakdownNode once all leaves are placed."""

    id: str
    level: HierarchyLevel
    name: str
    children: Dict[str, "_Branch"] = field(default_factory=dict)
    leaves: List[CostBreakdownNode] = field(default_factory=list)


def _name(value: Optional[str]) -> str:
    cleaned = (value or "").strip()
    return cleaned or UNKNOWN_NAME


def _utilization(budget: float, actual: float) -> float:
    return safe_divide(actual, budget) * 100.0


def _combine_measurements(children: Sequence[CostBreakdownNode], committed: float) -> Measurement:
    if any(isinstance(child.measurement, Measured) for child in children):
        return Measured(committed)
    estimates = [child.measurement for child in children if isinstance(child.measurement, Estimated)]
    if estimates:
        return Estimated(sum(m.value for m in estimates), basis=estimates[0].basis)
    return NO_DATA


def _leaf(
    row: CostBreakdownCategory,
    committed: Optional[float],
    estimate_ratio: Optional[float],
) -> CostBreakdownNode:
    budget = to_number(row.budget_cost)
    actual = committed or 0.0
    if committed is not None:
        measurement: Measurement = Measured(actual)
    elif estimate_ratio is not None:
        measurement = Estimated(budget * estimate_ratio, basis=f"{estimate_ratio:.0%} of budget")
    else:
        measurement = NO_DATA
    return CostBreakdownNode(
        id=row.id,
        level=HierarchyLevel.SUB_CATEGORY,
        name=_name(row.sub_category),
        budget=budget,
        committed_actual=actual,
        variance=budget - actual,
        utilization=_utilization(budget, actual),
        measurement=measurement,
    )


def _freeze(branch: _Branch) -> CostBreakdownNode:
    if branch.level == HierarchyLevel.SPEND_TYPE:
        children = tuple(branch.leaves)
    else:
        children = tuple(_freeze(child) for child in branch.children.values())
    budget = sum(child.budget for child in children)
    actual = sum(child.committed_actual for child in children)
    return CostBreakdownNode(
        id=branch.id,
        level=branch.level,
        name=branch.name,
        budget=budget,
        committed_actual=actual,
        variance=budget - actual,
        utilization=_utilization(budget, actual),
        measurement=_combine_measurements(children, actual),
        children=children,
    )


def committed_by_category(mappings: Iterable[PoMapping]) -> Dict[str, float]:
    committed: Dict[str, float] = {}
    for mapping in mappings or ():
        committed[mapping.cost_breakdown_id] = committed.get(mapping.cost_breakdown_id, 0.0) + to_number(
            mapping.mapped_amount
        )
    return committed


def build_cost_hierarchy(
    *,
    categories: Iterable[CostBreakdownCategory],
    mappings: Iterable[PoMapping],
    cost_line: Optional[str] = None,
    spend_type: Optional[str] = None,
    estimate_unmapped_ratio: Optional[float] = None,
) -> List[CostBreakdownNode]:
    """
    Business line -> cost line -> spend type -> sub category tree.

    Leaves carry their own budget and full committed amount; every parent is
    summed from its children after all leaves are placed. Categories with no
    mappings are tagged NO_DATA, or Estimated when estimate_unmapped_ratio is
    given; their committed_actual stays 0 either way.
    """
    rows = filter_categories(categories, cost_line=cost_line, spend_type=spend_type)
    if not rows:
        return []

    committed = committed_by_category(mappings)
    rows.sort(
        key=lambda r: (_name(r.business_line), _name(r.cost_line), _name(r.spend_type), _name(r.sub_category))
    )

    roots: Dict[str, _Branch] = {}
    for row in rows:
        bl, cl, st = _name(row.business_line), _name(row.cost_line), _name(row.spend_type)
        business = roots.setdefault(bl, _Branch(id=f"bl_{bl}", level=HierarchyLevel.BUSINESS_LINE, name=bl))
        cost = business.children.setdefault(
            cl, _Branch(id=f"cl_{bl}_{cl}", level=HierarchyLevel.COST_LINE, name=cl)
        )
        spend = cost.children.setdefault(
            st, _Branch(id=f"st_{bl}_{cl}_{st}", level=HierarchyLevel.SPEND_TYPE, name=st)
        )
        spend.leaves.append(_leaf(row, committed.get(row.id), estimate_unmapped_ratio))

    return [_freeze(branch) for branch in roots.values()]


def find_node(nodes: Iterable[CostBreakdownNode], node_id: str) -> Optional[CostBreakdownNode]:
    for node in nodes:
        if node.id == node_id:
            return node
        found = find_node(node.children, node_id)
        if found is not None:
            return found
    return None


__all__ = ["build_cost_hierarchy", "committed_by_category", "find_node", "UNKNOWN_NAME"]
