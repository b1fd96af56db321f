from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy import inspect

from core.models import (
    CostBreakdownCategory,
    ForecastItem,
    ForecastVersion,
    PoMapping,
    Project,
    PurchaseOrder,
)
from infra.db.models import (
    BudgetForecastORM,
    CostBreakdownORM,
    ForecastVersionORM,
    PoLineItemORM,
    PoMappingORM,
    ProjectORM,
    PurchaseOrderORM,
)


def project_from_orm(obj: ProjectORM) -> Project:
    return Project(
        id=obj.id,
        name=obj.name,
        start_date=obj.start_date,
    )


def purchase_order_from_orm(obj: PurchaseOrderORM) -> PurchaseOrder:
    return PurchaseOrder(
        id=obj.id,
        po_number=obj.po_number,
        vendor_name=obj.vendor_name,
        po_creation_date=obj.po_creation_date,
    )


def cost_breakdown_from_orm(obj: CostBreakdownORM) -> CostBreakdownCategory:
    return CostBreakdownCategory(
        id=obj.id,
        project_id=obj.project_id,
        business_line=obj.sub_business_line,
        cost_line=obj.cost_line,
        spend_type=obj.spend_type,
        sub_category=obj.spend_sub_category,
        budget_cost=obj.budget_cost or 0.0,
    )


def po_mapping_from_orm(obj: PoMappingORM) -> PoMapping:
    return PoMapping(
        id=obj.id,
        mapped_amount=obj.mapped_amount or 0.0,
        po_line_item_id=obj.po_line_item_id,
        cost_breakdown_id=obj.cost_breakdown_id,
    )


def line_item_to_raw(obj: PoLineItemORM) -> Dict[str, Any]:
    """Every mapped column by name, nulls included, so column presence survives the trip."""
    return {attr.key: getattr(obj, attr.key) for attr in inspect(obj).mapper.column_attrs}


def forecast_version_from_orm(obj: ForecastVersionORM) -> ForecastVersion:
    return ForecastVersion(
        id=obj.id,
        project_id=obj.project_id,
        version_number=obj.version_number,
        created_at=obj.created_at,
        reason=obj.reason_for_change or "",
        created_by=obj.created_by,
    )


def forecast_item_from_orm(forecast: BudgetForecastORM, category: Optional[CostBreakdownORM]) -> ForecastItem:
    return ForecastItem(
        id=forecast.cost_breakdown_id,
        budget_cost=(category.budget_cost or 0.0) if category is not None else 0.0,
        forecasted_cost=forecast.forecasted_cost,
        cost_line=category.cost_line if category is not None else None,
        spend_type=category.spend_type if category is not None else None,
        sub_category=category.spend_sub_category if category is not None else None,
    )
