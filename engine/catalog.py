"""Read-only reference data: site presets, equipment catalogs and the
annual TOU hour tables used for rate blending.

Everything here is built once at import time and never mutated.  Engine
functions accept a :class:`Catalog` argument so callers can inject their own
reference data; :data:`DEFAULT_CATALOG` holds the South African presets.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping

from engine.errors import UnknownCatalogKeyError
from engine.types import (
    ArrayType,
    Location,
    ModuleType,
    Period,
    Season,
    TrackingMode,
)


def _index(items: Iterable) -> Mapping:
    return MappingProxyType({item.key: item for item in items})


@dataclass(frozen=True)
class Catalog:
    locations: Mapping[str, Location]
    module_types: Mapping[str, ModuleType]
    array_types: Mapping[str, ArrayType]

    def location(self, key: str) -> Location:
        try:
            return self.locations[key]
        except KeyError:
            raise UnknownCatalogKeyError("location", key) from None

    def module_type(self, key: str) -> ModuleType:
        try:
            return self.module_types[key]
        except KeyError:
            raise UnknownCatalogKeyError("module type", key) from None

    def array_type(self, key: str) -> ArrayType:
        try:
            return self.array_types[key]
        except KeyError:
            raise UnknownCatalogKeyError("array type", key) from None


# ---------------------------------------------------------------------------
# Site and equipment presets
# ---------------------------------------------------------------------------

# GHI and DNI in kWh/m²/day, from PVGIS / NREL long-term means.
LOCATIONS: Mapping[str, Location] = _index(
    [
        Location("johannesburg", "Johannesburg", -26.2, 5.4, 5.9, 26),
        Location("capetown", "Cape Town", -33.9, 5.3, 6.2, 34),
        Location("durban", "Durban", -29.9, 4.9, 5.1, 30),
        Location("pretoria", "Pretoria", -25.7, 5.5, 6.0, 26),
        Location("bloemfontein", "Bloemfontein", -29.1, 5.7, 6.5, 29),
        Location("port_elizabeth", "Port Elizabeth", -33.9, 5.1, 5.7, 34),
        Location("upington", "Upington (Northern Cape)", -28.5, 6.2, 7.3, 29),
        Location("polokwane", "Polokwane", -23.9, 5.6, 6.1, 24),
        Location("nelspruit", "Nelspruit", -25.5, 5.3, 5.6, 26),
        Location("kimberley", "Kimberley", -28.7, 5.9, 6.8, 29),
    ]
)

MODULE_TYPES: Mapping[str, ModuleType] = _index(
    [
        ModuleType("standard", "Standard (Poly/Mono)", 1.0, "Typical crystalline silicon modules"),
        ModuleType("premium", "Premium (High-Eff Mono)", 1.05, "High-efficiency monocrystalline"),
        ModuleType("thinfilm", "Thin Film (CdTe/CIGS)", 0.92, "Better in high temps, lower efficiency"),
    ]
)

ARRAY_TYPES: Mapping[str, ArrayType] = _index(
    [
        ArrayType("fixed_roof", "Fixed (Roof Mount)", 0.98, TrackingMode.NONE,
                  "Roof-mounted, reduced ventilation"),
        ArrayType("fixed_ground", "Fixed (Ground/Open Rack)", 1.0, TrackingMode.NONE,
                  "Ground-mounted with good airflow"),
        ArrayType("tracking_1axis", "1-Axis Tracking", 1.25, TrackingMode.SINGLE_AXIS,
                  "Horizontal N-S axis tracking"),
        ArrayType("tracking_2axis", "2-Axis Tracking", 1.35, TrackingMode.DUAL_AXIS,
                  "Full sun tracking, maximum yield"),
    ]
)

DEFAULT_CATALOG = Catalog(
    locations=LOCATIONS,
    module_types=MODULE_TYPES,
    array_types=ARRAY_TYPES,
)


# ---------------------------------------------------------------------------
# Annual hour tables
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SeasonHours:
    peak: int
    standard: int
    off_peak: int

    @property
    def total(self) -> int:
        return self.peak + self.standard + self.off_peak

    def hours(self, period: Period) -> int:
        if period is Period.PEAK:
            return self.peak
        if period is Period.STANDARD:
            return self.standard
        return self.off_peak


@dataclass(frozen=True)
class HourTable:
    name: str
    high: SeasonHours
    low: SeasonHours

    def season(self, season: Season) -> SeasonHours:
        return self.high if season is Season.HIGH else self.low

    def period_total(self, period: Period) -> int:
        return self.high.hours(period) + self.low.hours(period)

    @property
    def total(self) -> int:
        return self.high.total + self.low.total


# High season is June-August (92 days), low season the remaining 273.
# Weekdays carry 5 Peak, 11 Standard and 8 Off-Peak hours, Saturdays
# 7 Standard and 17 Off-Peak, Sundays are Off-Peak throughout.
ALL_HOURS = HourTable(
    name="all_hours",
    high=SeasonHours(peak=330, standard=817, off_peak=1061),
    low=SeasonHours(peak=975, standard=2418, off_peak=3159),
)

# Six sun hours a day, none of them in a Peak window.  Reference split is
# 92.9 % Standard / 7.1 % Off-Peak in both seasons.
SOLAR_HOURS = HourTable(
    name="solar_hours",
    high=SeasonHours(peak=0, standard=513, off_peak=39),
    low=SeasonHours(peak=0, standard=1521, off_peak=117),
)


# ---------------------------------------------------------------------------
# Weekday TOU map and reference solar curve
# ---------------------------------------------------------------------------

TOU_HOURS: Mapping[Period, frozenset[int]] = MappingProxyType(
    {
        Period.PEAK: frozenset({7, 8, 9, 18, 19}),
        Period.STANDARD: frozenset({6, 10, 11, 12, 13, 14, 15, 16, 17, 20, 21}),
        Period.OFF_PEAK: frozenset({0, 1, 2, 3, 4, 5, 22, 23}),
    }
)

# [start, end) production window per season.
SUNSHINE_HOURS: Mapping[Season, tuple[int, int]] = MappingProxyType(
    {
        Season.LOW: (6, 19),
        Season.HIGH: (7, 17),
    }
)

# Relative PV output per hour of day, 1.0 at solar noon.
SOLAR_CURVE: tuple[float, ...] = (
    0.0, 0.0, 0.0, 0.0, 0.0, 0.05, 0.15, 0.35, 0.55, 0.75, 0.88, 0.95,
    1.0, 0.98, 0.92, 0.82, 0.68, 0.50, 0.30, 0.10, 0.0, 0.0, 0.0, 0.0,
)


def period_for_hour(hour: int) -> Period:
    for period, hours in TOU_HOURS.items():
        if hour in hours:
            return period
    raise ValueError(f"hour must be in [0, 23], got {hour}")
