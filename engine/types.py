from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class TrackingMode(str, Enum):
    NONE = "none"
    SINGLE_AXIS = "single_axis"
    DUAL_AXIS = "dual_axis"


class Season(str, Enum):
    HIGH = "high"
    LOW = "low"


class Period(str, Enum):
    PEAK = "Peak"
    STANDARD = "Standard"
    OFF_PEAK = "Off-Peak"


SEASONS: tuple[Season, ...] = (Season.HIGH, Season.LOW)
PERIODS: tuple[Period, ...] = (Period.PEAK, Period.STANDARD, Period.OFF_PEAK)


# ---------------------------------------------------------------------------
# Reference records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Location:
    """A named solar resource site.

    ``ghi`` and ``dni`` are daily totals in kWh/m²/day.  ``optimal_tilt`` is
    the fixed-array tilt that maximises annual yield, conventionally the
    absolute latitude.
    """

    key: str
    name: str
    latitude: float
    ghi: float
    dni: float
    optimal_tilt: float

    def __post_init__(self) -> None:
        if self.ghi <= 0 or self.dni <= 0:
            raise ValueError(f"location {self.key!r}: ghi and dni must be positive")
        if not 0.0 <= self.optimal_tilt <= 90.0:
            raise ValueError(f"location {self.key!r}: optimal_tilt must be in [0, 90]")


@dataclass(frozen=True)
class ModuleType:
    key: str
    name: str
    efficiency: float
    description: str = ""


@dataclass(frozen=True)
class ArrayType:
    key: str
    name: str
    modifier: float
    tracking: TrackingMode = TrackingMode.NONE
    description: str = ""

    @property
    def tracks_sun(self) -> bool:
        return self.tracking is not TrackingMode.NONE


# ---------------------------------------------------------------------------
# Irradiance
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HourlyIrradianceData:
    hour: int
    ghi: float  # W/m², mean over the hour
    dni: Optional[float] = None
    dhi: Optional[float] = None


@dataclass(frozen=True)
class ForecastSample:
    """One reading from an irradiance forecast feed.

    Naive timestamps are treated as UTC.
    """

    timestamp: datetime
    ghi: float
    dni: Optional[float] = None
    dhi: Optional[float] = None
