# tests/conftest.py
from datetime import date, datetime

import pytest

from core.models import generate_id
from core.services.finance import ReconciliationPolicy
from infra.db.base import Base, build_engine, build_session_factory
from infra.db.models import (
    BudgetForecastORM,
    CostBreakdownORM,
    ForecastVersionORM,
    PoLineItemORM,
    PoMappingORM,
    ProjectORM,
    PurchaseOrderORM,
)
from infra.services import build_service_graph


@pytest.fixture
def session():
    # separate in-memory DB for tests
    engine = build_engine("sqlite:///:memory:")
    TestingSessionLocal = build_session_factory(engine)
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def services(session):
    return build_service_graph(session, policy=ReconciliationPolicy()).as_dict()


class Seeder:
    """Inserts source rows the way the upstream procurement system would have stored them."""

    def __init__(self, session):
        self.session = session

    def _add(self, row):
        self.session.add(row)
        self.session.flush()
        return row.id

    def project(self, name="Plant Upgrade", start_date=date(2024, 1, 1), **extra) -> str:
        return self._add(ProjectORM(id=generate_id(), name=name, start_date=start_date, **extra))

    def category(
        self,
        project_id: str,
        *,
        business_line="Operations",
        cost_line="engineering",
        spend_type="Services",
        sub_category="Design",
        budget_cost=1000.0,
    ) -> str:
        return self._add(
            CostBreakdownORM(
                id=generate_id(),
                project_id=project_id,
                sub_business_line=business_line,
                cost_line=cost_line,
                spend_type=spend_type,
                spend_sub_category=sub_category,
                budget_cost=budget_cost,
            )
        )

    def purchase_order(self, vendor_name="Acme Supplies", po_creation_date=date(2024, 1, 5)) -> str:
        return self._add(
            PurchaseOrderORM(
                id=generate_id(),
                po_number=f"PO-{generate_id()[:6]}",
                vendor_name=vendor_name,
                po_creation_date=po_creation_date,
            )
        )

    def line_item(self, po_id=None, *, line_value=1000.0, **extra) -> str:
        return self._add(PoLineItemORM(id=generate_id(), po_id=po_id, line_value=line_value, **extra))

    def mapping(self, cost_breakdown_id: str, po_line_item_id, mapped_amount: float) -> str:
        return self._add(
            PoMappingORM(
                id=generate_id(),
                cost_breakdown_id=cost_breakdown_id,
                po_line_item_id=po_line_item_id,
                mapped_amount=mapped_amount,
            )
        )

    def forecast_version(
        self,
        project_id: str,
        version_number: int,
        forecasts: dict,
        created_at=None,
        reason="",
    ) -> str:
        version_id = self._add(
            ForecastVersionORM(
                id=generate_id(),
                project_id=project_id,
                version_number=version_number,
                reason_for_change=reason,
                created_at=created_at or datetime(2024, 3, 1, 9, 0),
            )
        )
        for cost_breakdown_id, forecasted_cost in forecasts.items():
            self._add(
                BudgetForecastORM(
                    id=generate_id(),
                    forecast_version_id=version_id,
                    cost_breakdown_id=cost_breakdown_id,
                    forecasted_cost=forecasted_cost,
                )
            )
        return version_id


@pytest.fixture
def seed(session):
    return Seeder(session)
