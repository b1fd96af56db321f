# core/models.py
from __future__ import annotations

from core.domain import *  # noqa: F401,F403
from core.domain import __all__ as _domain_all

__all__ = list(_domain_all)
