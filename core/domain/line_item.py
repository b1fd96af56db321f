from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping, Optional, Union

RawLineItem = Mapping[str, Any]


@dataclass(frozen=True)
class KnownInvoice:
    value: float
    invoice_date: Optional[date] = None


@dataclass(frozen=True)
class UnknownInvoice:
    """The source schema carries no invoice tracking for this line item."""


@dataclass(frozen=True)
class KnownPromise:
    promise_date: Optional[date] = None


@dataclass(frozen=True)
class UnknownPromise:
    """The source schema carries no supplier promise date for this line item."""


UNKNOWN_INVOICE = UnknownInvoice()
UNKNOWN_PROMISE = UnknownPromise()

InvoiceInfo = Union[KnownInvoice, UnknownInvoice]
PromiseInfo = Union[KnownPromise, UnknownPromise]


@dataclass(frozen=True)
class NormalizedLineItem:
    id: str
    line_value: float
    invoice_value: float = 0.0
    invoice_date: Optional[date] = None
    promise_date: Optional[date] = None
    created_at: Optional[date] = None
    has_invoice_field: bool = False
    has_promise_field: bool = False
    po_id: Optional[str] = None

    @property
    def invoice(self) -> InvoiceInfo:
        if not self.has_invoice_field:
            return UNKNOWN_INVOICE
        return KnownInvoice(value=self.invoice_value, invoice_date=self.invoice_date)

    @property
    def promise(self) -> PromiseInfo:
        if not self.has_promise_field:
            return UNKNOWN_PROMISE
        return KnownPromise(promise_date=self.promise_date)

    @property
    def effective_invoice_date(self) -> Optional[date]:
        return self.invoice_date or self.created_at

    @property
    def effective_promise_date(self) -> Optional[date]:
        return self.promise_date


__all__ = [
    "RawLineItem",
    "KnownInvoice",
    "UnknownInvoice",
    "KnownPromise",
    "UnknownPromise",
    "UNKNOWN_INVOICE",
    "UNKNOWN_PROMISE",
    "InvoiceInfo",
    "PromiseInfo",
    "NormalizedLineItem",
]
