# core/interfaces.py
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from core.models import (
    CostBreakdownCategory,
    ForecastItem,
    ForecastVersion,
    PoMapping,
    Project,
    PurchaseOrder,
    RawLineItem,
)


class ProjectRepository(ABC):
    @abstractmethod
    def get(self, project_id: str) -> Optional[Project]: ...


class CostBreakdownRepository(ABC):
    @abstractmethod
    def list_by_project(
        self,
        project_id: str,
        cost_line: Optional[str] = None,
        spend_type: Optional[str] = None,
    ) -> List[CostBreakdownCategory]: ...


class PoMappingRepository(ABC):
    @abstractmethod
    def list_for_cost_breakdowns(self, cost_breakdown_ids: Iterable[str]) -> List[PoMapping]: ...


class PoLineItemRepository(ABC):
    """Returns line items as raw column->value records; normalization happens in the engine."""

    @abstractmethod
    def list_raw_by_ids(self, line_item_ids: Iterable[str]) -> List[RawLineItem]: ...


class PurchaseOrderRepository(ABC):
    @abstractmethod
    def list_by_ids(self, po_ids: Iterable[str]) -> List[PurchaseOrder]: ...


class ForecastRepository(ABC):
    @abstractmethod
    def list_versions(self, project_id: str) -> List[ForecastVersion]: ...

    @abstractmethod
    def get_version(self, project_id: str, version_number: int) -> Optional[ForecastVersion]: ...

    @abstractmethod
    def list_items(self, forecast_version_id: str) -> List[ForecastItem]: ...


__all__ = [
    "ProjectRepository",
    "CostBreakdownRepository",
    "PoMappingRepository",
    "PoLineItemRepository",
    "PurchaseOrderRepository",
    "ForecastRepository",
]
