from __future__ import annotations

from enum import Enum


class HierarchyLevel(str, Enum):
    BUSINESS_LINE = "business_line"
    COST_LINE = "cost_line"
    SPEND_TYPE = "spend_type"
    SUB_CATEGORY = "sub_category"


class VersionStatus(str, Enum):
    NEW = "New"
    RECENT = "Recent"
    CURRENT = "Current"
    HISTORICAL = "Historical"


class ChangeStatus(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    UNCHANGED = "unchanged"
    INCREASED = "increased"
    DECREASED = "decreased"


class MeasurementKind(str, Enum):
    MEASURED = "MEASURED"
    ESTIMATED = "ESTIMATED"
    NO_DATA = "NO_DATA"


__all__ = ["HierarchyLevel", "VersionStatus", "ChangeStatus", "MeasurementKind"]
