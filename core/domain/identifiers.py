from __future__ import annotations

import time
from uuid import uuid4

TEMP_ID_PREFIX = "temp_"


def generate_id() -> str:
    return str(uuid4())


def generate_temp_id() -> str:
    """Id for a draft forecast entry that has not been persisted yet."""
    return f"{TEMP_ID_PREFIX}{int(time.time() * 1000)}_{uuid4().hex[:9]}"


def is_temp_id(value: str | None) -> bool:
    return bool(value) and str(value).startswith(TEMP_ID_PREFIX)


__all__ = ["generate_id", "generate_temp_id", "is_temp_id", "TEMP_ID_PREFIX"]
