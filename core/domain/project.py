from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass
class Project:
    id: str
    name: str
    start_date: Optional[date] = None


@dataclass
class PurchaseOrder:
    id: str
    po_number: str
    vendor_name: str
    po_creation_date: Optional[date] = None


__all__ = ["Project", "PurchaseOrder"]
