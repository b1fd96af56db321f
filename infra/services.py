from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Session

from core.services.finance import FinanceService, ReconciliationPolicy, load_reconciliation_policy
from core.services.forecast import ForecastService
from infra.db.repositories import (
    SqlAlchemyCostBreakdownRepository,
    SqlAlchemyForecastRepository,
    SqlAlchemyPoLineItemRepository,
    SqlAlchemyPoMappingRepository,
    SqlAlchemyProjectRepository,
    SqlAlchemyPurchaseOrderRepository,
)


@dataclass(frozen=True)
class ServiceGraph:
    session: Session
    policy: ReconciliationPolicy
    finance_service: FinanceService
    forecast_service: ForecastService

    def as_dict(self) -> dict[str, Any]:
        return {
            "session": self.session,
            "policy": self.policy,
            "finance_service": self.finance_service,
            "forecast_service": self.forecast_service,
        }


def build_service_graph(session: Session, policy: ReconciliationPolicy | None = None) -> ServiceGraph:
    policy = policy or load_reconciliation_policy()
    project_repo = SqlAlchemyProjectRepository(session)
    cost_breakdown_repo = SqlAlchemyCostBreakdownRepository(session)
    forecast_repo = SqlAlchemyForecastRepository(session)

    finance_service = FinanceService(
        project_repo=project_repo,
        cost_breakdown_repo=cost_breakdown_repo,
        mapping_repo=SqlAlchemyPoMappingRepository(session),
        line_item_repo=SqlAlchemyPoLineItemRepository(session),
        purchase_order_repo=SqlAlchemyPurchaseOrderRepository(session),
        forecast_repo=forecast_repo,
        policy=policy,
    )
    forecast_service = ForecastService(
        project_repo=project_repo,
        cost_breakdown_repo=cost_breakdown_repo,
        forecast_repo=forecast_repo,
    )
    return ServiceGraph(
        session=session,
        policy=policy,
        finance_service=finance_service,
        forecast_service=forecast_service,
    )


__all__ = ["ServiceGraph", "build_service_graph"]
