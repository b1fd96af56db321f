from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional

from core.exceptions import NotFoundError, ValidationError
from core.interfaces import (
    CostBreakdownRepository,
    ForecastRepository,
    PoLineItemRepository,
    PoMappingRepository,
    ProjectRepository,
    PurchaseOrderRepository,
)
from core.models import CostBreakdownCategory, ForecastItem, NormalizedLineItem, PoMapping, Project
from core.services.finance.analytics import (
    build_category_breakdown,
    build_control_matrix,
    build_supplier_performance,
)
from core.services.finance.helpers import add_months, month_bounds, to_number
from core.services.finance.metrics import build_pl_metrics, build_project_metrics, filter_categories
from core.services.finance.models import (
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
from core.services.finance.normalize import normalize_line_items
from core.services.finance.policy import ReconciliationPolicy, load_reconciliation_policy
from core.services.finance.promise import build_promise_buckets, build_promise_schedule
from core.services.finance.rollup import build_cost_hierarchy
from core.services.finance.timeline import build_budget_timeline, build_pl_timeline, build_pl_velocity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _ProjectInputs:
    project: Project
    categories: List[CostBreakdownCategory]
    mappings: List[PoMapping]
    line_items: Dict[str, NormalizedLineItem]


class FinanceService:
    """P&L reconciliation read models over cost breakdowns, PO mappings and line items."""

    def __init__(
        self,
        *,
        project_repo: ProjectRepository,
        cost_breakdown_repo: CostBreakdownRepository,
        mapping_repo: PoMappingRepository,
        line_item_repo: PoLineItemRepository,
        purchase_order_repo: PurchaseOrderRepository,
        forecast_repo: ForecastRepository,
        policy: ReconciliationPolicy | None = None,
    ) -> None:
        self._project_repo: ProjectRepository = project_repo
        self._cost_breakdown_repo: CostBreakdownRepository = cost_breakdown_repo
        self._mapping_repo: PoMappingRepository = mapping_repo
        self._line_item_repo: PoLineItemRepository = line_item_repo
        self._purchase_order_repo: PurchaseOrderRepository = purchase_order_repo
        self._forecast_repo: ForecastRepository = forecast_repo
        self._policy: ReconciliationPolicy = policy or load_reconciliation_policy()

    @property
    def policy(self) -> ReconciliationPolicy:
        return self._policy

    def _require_project(self, project_id: str) -> Project:
        project = self._project_repo.get(project_id)
        if project is None:
            raise NotFoundError("Project not found.", code="PROJECT_NOT_FOUND")
        return project

    def _load(
        self,
        project_id: str,
        *,
        cost_line: Optional[str] = None,
        spend_type: Optional[str] = None,
    ) -> _ProjectInputs:
        project = self._require_project(project_id)
        categories = filter_categories(
            self._cost_breakdown_repo.list_by_project(project_id),
            cost_line=cost_line,
            spend_type=spend_type,
        )
        mappings = (
            self._mapping_repo.list_for_cost_breakdowns([row.id for row in categories]) if categories else []
        )
        line_item_ids = sorted({m.po_line_item_id for m in mappings if m.po_line_item_id})
        raw_items = self._line_item_repo.list_raw_by_ids(line_item_ids) if line_item_ids else []
        line_items = normalize_line_items(raw_items)
        logger.info(
            "Loaded project %s: %d categories, %d mappings, %d/%d line items resolved",
            project_id,
            len(categories),
            len(mappings),
            len(line_items),
            len(line_item_ids),
        )
        return _ProjectInputs(project=project, categories=categories, mappings=mappings, line_items=line_items)

    def _latest_forecast_items(self, project_id: str) -> Optional[List[ForecastItem]]:
        versions = self._forecast_repo.list_versions(project_id)
        if not versions:
            return None
        latest = max(versions, key=lambda v: v.version_number)
        return self._forecast_repo.list_items(latest.id)

    def get_project_metrics(
        self,
        project_id: str,
        *,
        cost_line: Optional[str] = None,
        spend_type: Optional[str] = None,
        as_of: date | None = None,
    ) -> ProjectMetrics:
        as_of = as_of or date.today()
        inputs = self._load(project_id, cost_line=cost_line, spend_type=spend_type)
        return build_project_metrics(
            categories=inputs.categories,
            mappings=inputs.mappings,
            line_items=inputs.line_items,
            project_start=inputs.project.start_date or as_of,
            as_of=as_of,
            fallback_ratio=self._policy.fallback_invoice_ratio,
        )

    def get_pl_metrics(
        self,
        project_id: str,
        *,
        cost_line: Optional[str] = None,
        spend_type: Optional[str] = None,
    ) -> PLMetrics:
        inputs = self._load(project_id, cost_line=cost_line, spend_type=spend_type)
        total_budget: Optional[float] = None
        forecast_items = self._latest_forecast_items(project_id)
        if forecast_items is not None:
            in_scope = {row.id for row in inputs.categories}
            total_budget = sum(item.effective_cost for item in forecast_items if item.id in in_scope)
        return build_pl_metrics(
            categories=inputs.categories,
            mappings=inputs.mappings,
            line_items=inputs.line_items,
            fallback_ratio=self._policy.fallback_invoice_ratio,
            total_budget=total_budget,
        )

    def get_cost_hierarchy(
        self,
        project_id: str,
        *,
        cost_line: Optional[str] = None,
        spend_type: Optional[str] = None,
        estimate_unmapped_ratio: Optional[float] = None,
    ) -> List[CostBreakdownNode]:
        inputs = self._load(project_id, cost_line=cost_line, spend_type=spend_type)
        return build_cost_hierarchy(
            categories=inputs.categories,
            mappings=inputs.mappings,
            estimate_unmapped_ratio=estimate_unmapped_ratio,
        )

    def get_pl_timeline(self, project_id: str, *, start: date, end: date) -> List[TimelineEntry]:
        if start > end:
            raise ValidationError("Timeline start must be on or before its end.", code="TIMELINE_WINDOW_INVALID")
        inputs = self._load(project_id)
        return build_pl_timeline(
            mappings=inputs.mappings,
            line_items=inputs.line_items,
            start=start,
            end=end,
            fallback_ratio=self._policy.fallback_invoice_ratio,
        )

    def get_budget_timeline(self, project_id: str, *, as_of: date | None = None) -> List[BudgetTimelinePoint]:
        as_of = as_of or date.today()
        inputs = self._load(project_id)
        return build_budget_timeline(
            total_budget=sum(to_number(row.budget_cost) for row in inputs.categories),
            mappings=inputs.mappings,
            line_items=inputs.line_items,
            as_of=as_of,
            horizon_months=self._policy.timeline_horizon_months,
            fallback_ratio=self._policy.fallback_invoice_ratio,
        )

    def get_promise_buckets(self, project_id: str) -> Dict[str, float]:
        inputs = self._load(project_id)
        return build_promise_buckets(
            mappings=inputs.mappings,
            line_items=inputs.line_items,
            fallback_ratio=self._policy.fallback_invoice_ratio,
        )

    def get_promise_schedule(self, project_id: str, *, limit: Optional[int] = None) -> List[PromiseDateRow]:
        inputs = self._load(project_id)
        return build_promise_schedule(
            mappings=inputs.mappings,
            line_items=inputs.line_items,
            fallback_ratio=self._policy.fallback_invoice_ratio,
            limit=self._policy.promise_schedule_limit if limit is None else limit,
        )

    def get_financial_control_matrix(
        self,
        project_id: str,
        *,
        cost_line: Optional[str] = None,
        spend_type: Optional[str] = None,
    ) -> List[ControlMatrixRow]:
        inputs = self._load(project_id, cost_line=cost_line, spend_type=spend_type)
        forecast_items = self._latest_forecast_items(project_id)
        overrides = None
        if forecast_items is not None:
            overrides = {item.id: item.effective_cost for item in forecast_items}
        return build_control_matrix(
            categories=inputs.categories,
            mappings=inputs.mappings,
            line_items=inputs.line_items,
            fallback_ratio=self._policy.fallback_invoice_ratio,
            budget_overrides=overrides,
        )

    def get_category_breakdown(self, project_id: str) -> List[CategoryRow]:
        inputs = self._load(project_id)
        return build_category_breakdown(categories=inputs.categories, mappings=inputs.mappings)

    def get_pl_velocity(self, project_id: str, *, as_of: date | None = None, months: int = 3) -> PLVelocity:
        """Velocity over the trailing ``months`` calendar months ending with the month of ``as_of``."""
        as_of = as_of or date.today()
        _, window_start, _ = month_bounds(add_months(as_of, -max(months - 1, 0)))
        _, _, window_end = month_bounds(as_of)
        return build_pl_velocity(self.get_pl_timeline(project_id, start=window_start, end=window_end))

    def get_supplier_performance(self, project_id: str) -> List[SupplierPerformanceRow]:
        inputs = self._load(project_id)
        po_ids = sorted({item.po_id for item in inputs.line_items.values() if item.po_id})
        purchase_orders = {po.id: po for po in self._purchase_order_repo.list_by_ids(po_ids)} if po_ids else {}
        return build_supplier_performance(
            mappings=inputs.mappings,
            line_items=inputs.line_items,
            purchase_orders=purchase_orders,
            fallback_ratio=self._policy.fallback_invoice_ratio,
            on_time_days=self._policy.on_time_invoice_days,
        )


__all__ = ["FinanceService"]
