# infra/db/repositories.py
from __future__ import annotations
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.interfaces import (
    CostBreakdownRepository,
    ForecastRepository,
    PoLineItemRepository,
    PoMappingRepository,
    ProjectRepository,
    PurchaseOrderRepository,
)
from core.models import (
    CostBreakdownCategory,
    ForecastItem,
    ForecastVersion,
    PoMapping,
    Project,
    PurchaseOrder,
    RawLineItem,
)
from infra.db.mappers import (
    cost_breakdown_from_orm,
    forecast_item_from_orm,
    forecast_version_from_orm,
    line_item_to_raw,
    po_mapping_from_orm,
    project_from_orm,
    purchase_order_from_orm,
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


class SqlAlchemyProjectRepository(ProjectRepository):
    def __init__(self, session: Session):
        self.session = session

    def get(self, project_id: str) -> Optional[Project]:
        obj = self.session.get(ProjectORM, project_id)
        return project_from_orm(obj) if obj else None


class SqlAlchemyCostBreakdownRepository(CostBreakdownRepository):
    def __init__(self, session: Session):
        self.session = session

    def list_by_project(
        self,
        project_id: str,
        cost_line: Optional[str] = None,
        spend_type: Optional[str] = None,
    ) -> List[CostBreakdownCategory]:
        stmt = select(CostBreakdownORM).where(CostBreakdownORM.project_id == project_id)
        if cost_line:
            stmt = stmt.where(CostBreakdownORM.cost_line == cost_line)
        if spend_type:
            stmt = stmt.where(CostBreakdownORM.spend_type == spend_type)
        stmt = stmt.order_by(CostBreakdownORM.id)
        rows = self.session.execute(stmt).scalars().all()
        return [cost_breakdown_from_orm(row) for row in rows]


class SqlAlchemyPoMappingRepository(PoMappingRepository):
    def __init__(self, session: Session):
        self.session = session

    def list_for_cost_breakdowns(self, cost_breakdown_ids: Iterable[str]) -> List[PoMapping]:
        ids = list(cost_breakdown_ids)
        if not ids:
            return []
        stmt = (
            select(PoMappingORM)
            .where(PoMappingORM.cost_breakdown_id.in_(ids))
            .order_by(PoMappingORM.id)
        )
        rows = self.session.execute(stmt).scalars().all()
        return [po_mapping_from_orm(row) for row in rows]


class SqlAlchemyPoLineItemRepository(PoLineItemRepository):
    def __init__(self, session: Session):
        self.session = session

    def list_raw_by_ids(self, line_item_ids: Iterable[str]) -> List[RawLineItem]:
        ids = list(line_item_ids)
        if not ids:
            return []
        rows = self.session.execute(select(PoLineItemORM).where(PoLineItemORM.id.in_(ids))).scalars().all()
        return [line_item_to_raw(row) for row in rows]


class SqlAlchemyPurchaseOrderRepository(PurchaseOrderRepository):
    def __init__(self, session: Session):
        self.session = session

    def list_by_ids(self, po_ids: Iterable[str]) -> List[PurchaseOrder]:
        ids = list(po_ids)
        if not ids:
            return []
        rows = self.session.execute(select(PurchaseOrderORM).where(PurchaseOrderORM.id.in_(ids))).scalars().all()
        return [purchase_order_from_orm(row) for row in rows]


class SqlAlchemyForecastRepository(ForecastRepository):
    def __init__(self, session: Session):
        self.session = session

    def list_versions(self, project_id: str) -> List[ForecastVersion]:
        stmt = (
            select(ForecastVersionORM)
            .where(ForecastVersionORM.project_id == project_id)
            .order_by(ForecastVersionORM.version_number)
        )
        rows = self.session.execute(stmt).scalars().all()
        return [forecast_version_from_orm(row) for row in rows]

    def get_version(self, project_id: str, version_number: int) -> Optional[ForecastVersion]:
        stmt = select(ForecastVersionORM).where(
            ForecastVersionORM.project_id == project_id,
            ForecastVersionORM.version_number == version_number,
        )
        obj = self.session.execute(stmt).scalars().first()
        return forecast_version_from_orm(obj) if obj else None

    def list_items(self, forecast_version_id: str) -> List[ForecastItem]:
        stmt = (
            select(BudgetForecastORM, CostBreakdownORM)
            .join(CostBreakdownORM, BudgetForecastORM.cost_breakdown_id == CostBreakdownORM.id, isouter=True)
            .where(BudgetForecastORM.forecast_version_id == forecast_version_id)
            .order_by(BudgetForecastORM.cost_breakdown_id)
        )
        return [forecast_item_from_orm(forecast, category) for forecast, category in self.session.execute(stmt).all()]


__all__ = [
    "SqlAlchemyProjectRepository",
    "SqlAlchemyCostBreakdownRepository",
    "SqlAlchemyPoMappingRepository",
    "SqlAlchemyPoLineItemRepository",
    "SqlAlchemyPurchaseOrderRepository",
    "SqlAlchemyForecastRepository",
]
