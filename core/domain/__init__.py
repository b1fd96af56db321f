from core.domain.cost import CostBreakdownCategory, PoMapping
from core.domain.enums import ChangeStatus, HierarchyLevel, MeasurementKind, VersionStatus
from core.domain.forecast import CostBreakdownSnapshot, ForecastItem, ForecastVersion
from core.domain.identifiers import generate_id, generate_temp_id, is_temp_id
from core.domain.line_item import (
    UNKNOWN_INVOICE,
    UNKNOWN_PROMISE,
    InvoiceInfo,
    KnownInvoice,
    KnownPromise,
    NormalizedLineItem,
    PromiseInfo,
    RawLineItem,
    UnknownInvoice,
    UnknownPromise,
)
from core.domain.measurement import NO_DATA, Estimated, Measured, Measurement, NoData
from core.domain.project import Project, PurchaseOrder

__all__ = [
    "generate_id",
    "generate_temp_id",
    "is_temp_id",
    "HierarchyLevel",
    "VersionStatus",
    "ChangeStatus",
    "MeasurementKind",
    "Project",
    "PurchaseOrder",
    "CostBreakdownCategory",
    "PoMapping",
    "RawLineItem",
    "NormalizedLineItem",
    "KnownInvoice",
    "UnknownInvoice",
    "KnownPromise",
    "UnknownPromise",
    "UNKNOWN_INVOICE",
    "UNKNOWN_PROMISE",
    "InvoiceInfo",
    "PromiseInfo",
    "ForecastVersion",
    "ForecastItem",
    "CostBreakdownSnapshot",
    "Measured",
    "Estimated",
    "NoData",
    "NO_DATA",
    "Measurement",
]
