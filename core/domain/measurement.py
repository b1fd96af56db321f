from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from core.domain.enums import MeasurementKind


@dataclass(frozen=True)
class Measured:
    value: float
    kind: MeasurementKind = MeasurementKind.MEASURED


@dataclass(frozen=True)
class Estimated:
    value: float
    basis: str
    kind: MeasurementKind = MeasurementKind.ESTIMATED


@dataclass(frozen=True)
class NoData:
    kind: MeasurementKind = MeasurementKind.NO_DATA

    @property
    def value(self) -> float:
        return 0.0


NO_DATA = NoData()

Measurement = Union[Measured, Estimated, NoData]


__all__ = ["Measured", "Estimated", "NoData", "NO_DATA", "Measurement"]
