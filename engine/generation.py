"""Hourly PV generation profile for a representative day.

Produces 24 hourly energy values (kWh) for an array of a given DC capacity,
from one of two sources.

Measured irradiance
-------------------
When a 24-hour GHI profile is available (typically the average of a forecast
feed), each hourly mean irradiance is treated as a one-hour energy dose:

    E[h] = P_dc × (G[h] / 1000) × η

where ``G`` is in W/m², ``P_dc`` in kWp and ``η`` the system efficiency.

Synthetic curve
---------------
Without measured data the day is modelled as a Gaussian centred on solar
noon (12:30), evaluated at each hour's midpoint:

    I[h] = exp(−(h + 0.5 − 12.5)² / 2σ²)

with ``σ = 3.5 h``, widened by 1.5 h for single-axis and 2.5 h for dual-axis
trackers.  Hours outside 05:00-19:59, or where ``I ≤ 0.01``, produce
nothing.  Raw output is ``P_dc × I[h] × η × GHI_day / 6`` and the whole
curve is then rescaled so that it sums to the expected daily yield:

    E_day = P_dc × GHI_day × η × 0.9

The 0.9 is a realistic-yield correction on top of the system efficiency.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Literal, Optional, Sequence

from engine.catalog import DEFAULT_CATALOG, Catalog
from engine.efficiency import system_efficiency
from engine.errors import IrradianceShapeError
from engine.irradiance import HOURS_IN_DAY
from engine.system import PVSystemConfig
from engine.types import ArrayType, HourlyIrradianceData, TrackingMode

log = logging.getLogger(__name__)

ProfileSource = Literal["measured", "synthetic"]

_G_REF = 1000.0  # W/m², converts a one-hour mean to kWh/m²
_PEAK_HOUR = 12.5
_BASE_SIGMA = 3.5
_TRACKING_SIGMA_BONUS = {
    TrackingMode.NONE: 0.0,
    TrackingMode.SINGLE_AXIS: 1.5,
    TrackingMode.DUAL_AXIS: 2.5,
}
_DAYLIGHT_FIRST_HOUR = 5
_DAYLIGHT_LAST_HOUR = 19
_MIN_INTENSITY = 0.01
_PEAK_SUN_HOUR_SPREAD = 6.0
_REALISTIC_YIELD = 0.9


@dataclass(frozen=True)
class GenerationProfile:
    hourly_kwh: list[float]
    source: ProfileSource
    efficiency: float

    @property
    def daily_kwh(self) -> float:
        return sum(self.hourly_kwh)

    @property
    def peak_kwh(self) -> float:
        return max(self.hourly_kwh)


class ProfileGenerator:
    """Build hourly generation profiles against a fixed reference catalog.

    Args:
        catalog: Locations and equipment used to resolve config keys.
    """

    def __init__(self, catalog: Catalog = DEFAULT_CATALOG) -> None:
        self.catalog = catalog

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _check_irradiance(hourly: Sequence[HourlyIrradianceData]) -> dict[int, float]:
        if len(hourly) != HOURS_IN_DAY:
            raise IrradianceShapeError(
                f"hourly irradiance must have {HOURS_IN_DAY} entries, got {len(hourly)}"
            )
        by_hour = {h.hour: h.ghi for h in hourly}
        if sorted(by_hour) != list(range(HOURS_IN_DAY)):
            raise IrradianceShapeError(
                "hourly irradiance must cover hours 0-23 exactly once"
            )
        return by_hour

    @staticmethod
    def _sigma(array: ArrayType) -> float:
        return _BASE_SIGMA + _TRACKING_SIGMA_BONUS[array.tracking]

    @staticmethod
    def _intensity(hour: int, sigma: float) -> float:
        """Gaussian daylight intensity at the midpoint of ``hour``."""
        mid = hour + 0.5
        return math.exp(-((mid - _PEAK_HOUR) ** 2) / (2.0 * sigma * sigma))

    def _measured(
        self,
        capacity_kwp: float,
        efficiency: float,
        hourly: Sequence[HourlyIrradianceData],
    ) -> list[float]:
        by_hour = self._check_irradiance(hourly)
        return [
            max(0.0, capacity_kwp * (by_hour[hour] / _G_REF) * efficiency)
            for hour in range(HOURS_IN_DAY)
        ]

    def _synthetic(
        self,
        config: PVSystemConfig,
        capacity_kwp: float,
        efficiency: float,
    ) -> list[float]:
        location = self.catalog.location(config.location)
        sigma = self._sigma(self.catalog.array_type(config.array_type))

        raw: list[float] = []
        for hour in range(HOURS_IN_DAY):
            intensity = self._intensity(hour, sigma)
            daylight = _DAYLIGHT_FIRST_HOUR <= hour <= _DAYLIGHT_LAST_HOUR
            if daylight and intensity > _MIN_INTENSITY:
                output = capacity_kwp * intensity * efficiency * (location.ghi / _PEAK_SUN_HOUR_SPREAD)
                raw.append(max(0.0, output))
            else:
                raw.append(0.0)

        expected_daily = capacity_kwp * location.ghi * efficiency * _REALISTIC_YIELD
        scale = expected_daily / (sum(raw) or 1.0)
        return [v * scale for v in raw]

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def generate(
        self,
        config: PVSystemConfig,
        capacity_kwp: float,
        hourly_irradiance: Optional[Sequence[HourlyIrradianceData]] = None,
    ) -> GenerationProfile:
        """Return the 24-hour generation profile for ``config``.

        Args:
            config:            PV system configuration.
            capacity_kwp:      DC array capacity (kWp).  Zero is allowed and
                               yields an all-zero profile.
            hourly_irradiance: Optional 24-entry GHI profile (W/m²).  When
                               omitted or empty the synthetic curve is used.

        Returns:
            :class:`GenerationProfile` with one kWh value per hour.

        Raises:
            ValueError:             If ``capacity_kwp`` is negative.
            IrradianceShapeError:   If irradiance is supplied but is not one
                                    entry per hour of day.
            UnknownCatalogKeyError: If a config key is not in the catalog.
        """
        if capacity_kwp < 0:
            raise ValueError("capacity_kwp must not be negative")

        efficiency = system_efficiency(config, self.catalog)

        if hourly_irradiance:
            log.debug("Measured profile for %s (%.1f kWp).", config.location, capacity_kwp)
            hourly = self._measured(capacity_kwp, efficiency, hourly_irradiance)
            return GenerationProfile(hourly, "measured", efficiency)

        log.debug("Synthetic profile for %s (%.1f kWp).", config.location, capacity_kwp)
        hourly = self._synthetic(config, capacity_kwp, efficiency)
        return GenerationProfile(hourly, "synthetic", efficiency)

    def expected_daily_kwh(self, config: PVSystemConfig, capacity_kwp: float) -> float:
        """Target daily yield the synthetic curve is scaled to (kWh)."""
        location = self.catalog.location(config.location)
        efficiency = system_efficiency(config, self.catalog)
        return capacity_kwp * location.ghi * efficiency * _REALISTIC_YIELD


def generate_profile(
    config: PVSystemConfig,
    capacity_kwp: float,
    hourly_irradiance: Optional[Sequence[HourlyIrradianceData]] = None,
    catalog: Catalog = DEFAULT_CATALOG,
) -> GenerationProfile:
    return ProfileGenerator(catalog).generate(config, capacity_kwp, hourly_irradiance)
