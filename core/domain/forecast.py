from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class ForecastVersion:
    id: str
    project_id: str
    version_number: int
    created_at: datetime
    reason: str = ""
    created_by: Optional[str] = None


@dataclass(frozen=True)
class ForecastItem:
    """One cost breakdown line as it stood in a given forecast version."""

    id: str
    budget_cost: float = 0.0
    forecasted_cost: Optional[float] = None
    cost_line: Optional[str] = None
    spend_type: Optional[str] = None
    sub_category: Optional[str] = None

    @property
    def effective_cost(self) -> float:
        if self.forecasted_cost is not None:
            return float(self.forecasted_cost)
        return float(self.budget_cost or 0.0)


@dataclass(frozen=True)
class CostBreakdownSnapshot:
    version_number: int
    items: List[ForecastItem] = field(default_factory=list)


__all__ = ["ForecastVersion", "ForecastItem", "CostBreakdownSnapshot"]
