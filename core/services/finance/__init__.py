from .models import (
    BudgetTimelinePoint,
    CategoryRow,
    ControlMatrixRow,
    CostBreakdownNode,
    PLMetrics,
    PLVelocity,
    ProjectMetrics,
    PromiseDateRow,
    SupplierPerformanceRow,
    TimelineEntry,
)
from .policy import ReconciliationPolicy, load_reconciliation_policy
from .service import FinanceService

__all__ = [
    "FinanceService",
    "ReconciliationPolicy",
    "load_reconciliation_policy",
    "ProjectMetrics",
    "PLMetrics",
    "CostBreakdownNode",
    "TimelineEntry",
    "BudgetTimelinePoint",
    "PromiseDateRow",
    "ControlMatrixRow",
    "CategoryRow",
    "PLVelocity",
    "SupplierPerformanceRow",
]
