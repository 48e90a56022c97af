"""Scalar system efficiency for a PV configuration.

    η = η_module × m_array × η_inverter × (1 − L/100) × f_tilt × f_azimuth

with

    f_tilt    = 1 − (|tilt − |lat|| / 90) × 0.15
    f_azimuth = 1 − (|azimuth| / 180) × 0.25

The geometric factors are a deliberately simple linear approximation: a
tilt 90° away from optimal costs 15 %, a panel facing due south (180° from
true north) costs 25 %.  There is no solar-position or plane-of-array
transposition model behind them.
"""

from __future__ import annotations

from dataclasses import dataclass

from engine.catalog import DEFAULT_CATALOG, Catalog
from engine.system import PVSystemConfig
from engine.types import Location

_MAX_TILT_PENALTY = 0.15
_MAX_AZIMUTH_PENALTY = 0.25


@dataclass(frozen=True)
class EfficiencyBreakdown:
    module: float
    array: float
    inverter: float
    losses: float
    tilt: float
    azimuth: float

    @property
    def total(self) -> float:
        return self.module * self.array * self.inverter * self.losses * self.tilt * self.azimuth


def tilt_factor(tilt: float, location: Location) -> float:
    deviation = abs(tilt - abs(location.latitude))
    return 1.0 - (deviation / 90.0) * _MAX_TILT_PENALTY


def azimuth_factor(azimuth: float) -> float:
    return 1.0 - (abs(azimuth) / 180.0) * _MAX_AZIMUTH_PENALTY


def efficiency_factors(
    config: PVSystemConfig,
    catalog: Catalog = DEFAULT_CATALOG,
) -> EfficiencyBreakdown:
    """Resolve ``config`` against ``catalog`` and return each derating factor.

    Raises:
        UnknownCatalogKeyError: If the location, module type or array type
                                key is not in the catalog.
    """
    location = catalog.location(config.location)
    module = catalog.module_type(config.module_type)
    array = catalog.array_type(config.array_type)

    return EfficiencyBreakdown(
        module=module.efficiency,
        array=array.modifier,
        inverter=config.inverter_efficiency / 100.0,
        losses=1.0 - config.total_loss_percent / 100.0,
        tilt=tilt_factor(config.tilt, location),
        azimuth=azimuth_factor(config.azimuth),
    )


def system_efficiency(config: PVSystemConfig, catalog: Catalog = DEFAULT_CATALOG) -> float:
    return efficiency_factors(config, catalog).total
