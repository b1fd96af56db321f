from .models import (
    CostLineComparison,
    StagingTotals,
    VersionChangeSummary,
    VersionComparison,
    VersionComparisonRow,
)
from .service import ForecastService

__all__ = [
    "ForecastService",
    "VersionChangeSummary",
    "VersionComparison",
    "VersionComparisonRow",
    "CostLineComparison",
    "StagingTotals",
]
