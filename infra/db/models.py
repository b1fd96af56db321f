# infra/db/models.py
from __future__ import annotations
from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from infra.db.base import Base


class ProjectORM(Base):
    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)


class PurchaseOrderORM(Base):
    __tablename__ = "pos"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    po_number: Mapped[str] = mapped_column(String, nullable=False)
    vendor_name: Mapped[str] = mapped_column(String, nullable=False)
    po_creation_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)


class PoLineItemORM(Base):
    """Invoice columns are nullable: a null value still means the source tracks invoicing."""

    __tablename__ = "po_line_items"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    po_id: Mapped[Optional[str]] = mapped_column(
        String,
        ForeignKey("pos.id", ondelete="CASCADE"),
        nullable=True,
    )
    line_item_number: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    description: Mapped[str] = mapped_column(String, default="")
    line_value: Mapped[float] = mapped_column(Float, default=0.0)
    invoiced_value_usd: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    invoice_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    supplier_promise_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
Index("idx_po_line_items_po_id", PoLineItemORM.po_id)


class CostBreakdownORM(Base):
    __tablename__ = "cost_breakdown"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    project_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )
    sub_business_line: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    cost_line: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    spend_type: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    spend_sub_category: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    budget_cost: Mapped[float] = mapped_column(Float, default=0.0)
Index("idx_cost_breakdown_project_id", CostBreakdownORM.project_id)


class PoMappingORM(Base):
    __tablename__ = "po_mappings"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    # Not a foreign key: a mapping may outlive its line item and must then fall back to the flat ratio.
    po_line_item_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    cost_breakdown_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("cost_breakdown.id", ondelete="CASCADE"),
        nullable=False,
    )
    mapped_amount: Mapped[float] = mapped_column(Float, default=0.0)
Index("idx_po_mappings_cost_breakdown_id", PoMappingORM.cost_breakdown_id)


class ForecastVersionORM(Base):
    __tablename__ = "forecast_versions"
    __table_args__ = (UniqueConstraint("project_id", "version_number", name="uq_forecast_version_number"),)

    id: Mapped[str] = mapped_column(String, primary_key=True)
    project_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
    )
    version_number: Mapped[int] = mapped_column(Integer, nullable=False)
    reason_for_change: Mapped[str] = mapped_column(String, default="")
    created_by: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)


class BudgetForecastORM(Base):
    __tablename__ = "budget_forecasts"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    forecast_version_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("forecast_versions.id", ondelete="CASCADE"),
        nullable=False,
    )
    cost_breakdown_id: Mapped[str] = mapped_column(
        String,
        ForeignKey("cost_breakdown.id", ondelete="CASCADE"),
        nullable=False,
    )
    forecasted_cost: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
Index("idx_budget_forecasts_version_id", BudgetForecastORM.forecast_version_id)
