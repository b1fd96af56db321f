from .finance import FinanceService, ReconciliationPolicy, load_reconciliation_policy
from .forecast import ForecastService

__all__ = [
    "FinanceService",
    "ForecastService",
    "ReconciliationPolicy",
    "load_reconciliation_policy",
]
