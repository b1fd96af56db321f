from __future__ import annotations

import math
from calendar import monthrange
from datetime import date, datetime
from typing import Any, Iterable

_MONTH_NAMES = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def is_valid_number(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    return isinstance(value, (int, float)) and math.isfinite(value)


def to_number(value: Any) -> float:
    """Coerce DB/JSON numerics (Decimal, numeric strings, None) to a finite float, else 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return 0.0
    return numeric if math.isfinite(numeric) else 0.0


def safe_divide(numerator: float, denominator: float) -> float:
    numerator = to_number(numerator)
    denominator = to_number(denominator)
    if denominator == 0:
        return 0.0
    result = numerator / denominator
    return result if math.isfinite(result) else 0.0


def safe_percentage(change: float | None, base: float | None) -> float:
    """
    Percentage of ``change`` relative to ``base``, rounded to 2 decimals.

    A zero base cannot express a ratio, so any non-zero change is reported as
    a full +/-100% move and no change as 0.
    """
    if change is None or base is None:
        return 0.0
    change = to_number(change)
    base = to_number(base)
    if base == 0:
        if change == 0:
            return 0.0
        return 100.0 if change > 0 else -100.0
    return round(safe_divide(change, base) * 100.0, 2)


def safe_sum(values: Iterable[Any]) -> float:
    return float(sum(to_number(value) for value in values))


def is_effectively_equal(lhs: float, rhs: float, tolerance: float = 1e-6) -> bool:
    return abs(lhs - rhs) <= max(tolerance, abs(lhs) * 1e-9)


def format_currency(amount: float | None) -> str:
    if amount is None:
        return "$0"
    value = to_number(amount)
    sign = "-" if round(value) < 0 else ""
    return f"{sign}${abs(value):,.0f}"


def format_compact_currency(amount: float | None) -> str:
    if amount is None:
        return "$0"
    value = to_number(amount)
    magnitude = abs(value)
    sign = "-" if value < 0 else ""
    if magnitude >= 1_000_000:
        return f"{sign}${magnitude / 1_000_000:.1f}M"
    if magnitude >= 1_000:
        return f"{sign}${magnitude / 1_000:.0f}K"
    return format_currency(value)


def format_percentage(value: float | None) -> str:
    if value is None or not is_valid_number(value):
        return "0%"
    prefix = "+" if value > 0 else ""
    return f"{prefix}{value:.1f}%"


def parse_date(value: Any) -> date | None:
    """Dates, datetimes and ISO strings become a ``date``; anything unparsable is treated as absent."""
    if value in (None, ""):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if len(text) < 10:
            return None
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


def month_key(anchor: date) -> str:
    return f"{anchor.year}-{anchor.month:02d}"


def month_name(month: int) -> str:
    if 1 <= month <= 12:
        return _MONTH_NAMES[month - 1]
    return ""


def month_label(anchor: date) -> str:
    return f"{month_name(anchor.month)} {anchor.year}"


def month_bounds(anchor: date) -> tuple[str, date, date]:
    last_day = monthrange(anchor.year, anchor.month)[1]
    start = date(anchor.year, anchor.month, 1)
    end = date(anchor.year, anchor.month, last_day)
    return month_key(anchor), start, end


def add_months(anchor: date, months: int) -> date:
    index = anchor.year * 12 + (anchor.month - 1) + months
    year, month = divmod(index, 12)
    day = min(anchor.day, monthrange(year, month + 1)[1])
    return date(year, month + 1, day)


def months_between(start: date, end: date) -> int:
    """Whole 30-day months elapsed from ``start`` to ``end`` (negative spans count as 0)."""
    days = (end - start).days
    if days <= 0:
        return 0
    return days // 30


__all__ = [
    "is_valid_number",
    "to_number",
    "safe_divide",
    "safe_percentage",
    "safe_sum",
    "is_effectively_equal",
    "format_currency",
    "format_compact_currency",
    "format_percentage",
    "parse_date",
    "month_key",
    "month_name",
    "month_label",
    "month_bounds",
    "add_months",
    "months_between",
]
