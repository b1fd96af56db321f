from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from core.exceptions import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_INVOICE_RATIO = 0.6
DEFAULT_ON_TIME_INVOICE_DAYS = 45
DEFAULT_PROMISE_SCHEDULE_LIMIT = 10
DEFAULT_TIMELINE_HORIZON_MONTHS = 3


@dataclass(frozen=True)
class ReconciliationPolicy:
    """
    Tunables for P&L reconciliation.

    fallback_invoice_ratio is the share of a committed amount assumed to have
    hit P&L when the line item carries no invoice tracking.
    """

    fallback_invoice_ratio: float = DEFAULT_FALLBACK_INVOICE_RATIO
    on_time_invoice_days: int = DEFAULT_ON_TIME_INVOICE_DAYS
    promise_schedule_limit: int = DEFAULT_PROMISE_SCHEDULE_LIMIT
    timeline_horizon_months: int = DEFAULT_TIMELINE_HORIZON_MONTHS

    def __post_init__(self) -> None:
        validate_fallback_ratio(self.fallback_invoice_ratio)
        if self.on_time_invoice_days < 0:
            raise ValidationError("On-time invoice window cannot be negative.", code="ON_TIME_DAYS_INVALID")
        if self.promise_schedule_limit < 0:
            raise ValidationError("Promise schedule limit cannot be negative.", code="PROMISE_LIMIT_INVALID")
        if self.timeline_horizon_months < 0:
            raise ValidationError("Timeline horizon cannot be negative.", code="TIMELINE_HORIZON_INVALID")


def validate_fallback_ratio(ratio: float) -> float:
    if not 0.0 <= float(ratio) <= 1.0:
        raise ValidationError(
            f"Fallback invoice ratio must be between 0 and 1 (got {ratio!r}).",
            code="FALLBACK_RATIO_INVALID",
        )
    return float(ratio)


def _env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r; using %s", name, raw, default)
        return default
    if name == "CM_FALLBACK_INVOICE_RATIO" and not 0.0 <= value <= 1.0:
        logger.warning("Ignoring out-of-range %s=%r; using %s", name, raw, default)
        return default
    return value


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r; using %s", name, raw, default)
        return default
    if value < 0:
        logger.warning("Ignoring negative %s=%r; using %s", name, raw, default)
        return default
    return value


def load_reconciliation_policy() -> ReconciliationPolicy:
    return ReconciliationPolicy(
        fallback_invoice_ratio=_env_float("CM_FALLBACK_INVOICE_RATIO", DEFAULT_FALLBACK_INVOICE_RATIO),
        on_time_invoice_days=_env_int("CM_ON_TIME_INVOICE_DAYS", DEFAULT_ON_TIME_INVOICE_DAYS),
        promise_schedule_limit=_env_int("CM_PROMISE_SCHEDULE_LIMIT", DEFAULT_PROMISE_SCHEDULE_LIMIT),
        timeline_horizon_months=_env_int("CM_TIMELINE_HORIZON_MONTHS", DEFAULT_TIMELINE_HORIZON_MONTHS),
    )


__all__ = [
    "ReconciliationPolicy",
    "load_reconciliation_policy",
    "validate_fallback_ratio",
    "DEFAULT_FALLBACK_INVOICE_RATIO",
    "DEFAULT_ON_TIME_INVOICE_DAYS",
    "DEFAULT_PROMISE_SCHEDULE_LIMIT",
    "DEFAULT_TIMELINE_HORIZON_MONTHS",
]
