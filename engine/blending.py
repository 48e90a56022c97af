"""Blend a seasonal TOU tariff into single per-kWh rates.

Two exposure methodologies are reported, each for the high season, the
low season and the whole year:

* ``all_hours``:   energy drawn around the clock (8,760 h a year).
* ``solar_hours``: energy offset by PV during six daily sun hours
  (2,190 h a year), which never touch a Peak window.

For one season the blended rate is the hour-weighted mean of the per-period
rates,

    r_season = Σ_p hours[p] × rate[p] / Σ_p hours[p]

and the annual figure weights the two seasons by their share of the
methodology's hours.

A period's rate is its energy charge plus the flat unbundled per-kWh
charges: ancillary, electrification/rural and affordability subsidies from
the period's own row, the network charge from the season's Peak row, and
the tariff-level legacy charge.  A slot with no tariff row contributes a
zero rate for its hours, flat charges included.  Missing data therefore
pulls a blend down instead of invalidating it; callers that need strict data
should check :meth:`~engine.tariffs.RateLookup.missing_slots` first.

Tariffs without a TOU structure (a single ``Any`` or ``All Year`` row) blend
to zero on the hour tables.  :func:`blended_rates_for_tariff` then falls back
to that row's combined rate, or to the mean of all rows, for every figure.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal, Optional, Sequence

from engine.catalog import ALL_HOURS, SOLAR_CURVE, SOLAR_HOURS, SUNSHINE_HOURS, HourTable, period_for_hour
from engine.irradiance import HOURS_IN_DAY
from engine.tariffs import (
    RateComponent,
    RateLookup,
    Tariff,
    TariffCharge,
    TariffRate,
    organize_rates,
    rate_component,
    tariff_charge,
)
from engine.types import PERIODS, Period, Season

log = logging.getLogger(__name__)

BlendMethod = Literal["tou", "fixed"]

_FIXED_TIME_OF_USE = "Any"
_FIXED_SEASON = "All Year"

_PERIOD_FLAT_COMPONENTS = (
    RateComponent.ANCILLARY,
    RateComponent.ELECTRIFICATION_RURAL,
    RateComponent.AFFORDABILITY_SUBSIDY,
)


@dataclass(frozen=True)
class SeasonalRates:
    annual: float
    high: float
    low: float


@dataclass(frozen=True)
class BlendedRateResult:
    all_hours: SeasonalRates
    solar_hours: SeasonalRates
    method: BlendMethod = "tou"

    def values(self) -> tuple[float, ...]:
        return (
            self.all_hours.annual,
            self.all_hours.high,
            self.all_hours.low,
            self.solar_hours.annual,
            self.solar_hours.high,
            self.solar_hours.low,
        )


@dataclass(frozen=True)
class PeriodContribution:
    period: Period
    hours: int
    energy_share: float
    rate: float
    contribution: float


@dataclass(frozen=True)
class ProfileWeightedRate:
    season: Season
    rate: float
    total_energy: float
    breakdown: list[PeriodContribution]


# ---------------------------------------------------------------------------
# Per-period rate
# ---------------------------------------------------------------------------


def period_rate(
    lookup: RateLookup,
    season: Season,
    period: Period,
    legacy_per_kwh: float = 0.0,
    vat_inclusive: bool = False,
) -> float:
    """Total per-kWh rate for one season and period, all components included.

    An empty slot is 0.0; flat charges only ride on a slot that has a row.
    """
    row = lookup.get(season, period)
    if row is None:
        return 0.0

    total = legacy_per_kwh + rate_component(row, RateComponent.ENERGY, vat_inclusive)
    for component in _PERIOD_FLAT_COMPONENTS:
        total += rate_component(row, component, vat_inclusive)

    # Network demand is billed off the Peak row and applies to every hour.
    peak_row = lookup.get(season, Period.PEAK)
    if peak_row is not None:
        total += rate_component(peak_row, RateComponent.NETWORK, vat_inclusive)

    return total


# ---------------------------------------------------------------------------
# Hour-weighted blends
# ---------------------------------------------------------------------------


def blend_season(
    lookup: RateLookup,
    table: HourTable,
    season: Season,
    legacy_per_kwh: float = 0.0,
    vat_inclusive: bool = False,
) -> float:
    hours = table.season(season)
    weighted = 0.0
    for period in PERIODS:
        period_hours = hours.hours(period)
        if period_hours == 0:
            continue
        weighted += period_hours * period_rate(lookup, season, period, legacy_per_kwh, vat_inclusive)
    return weighted / (hours.total or 1)


def blend_table(
    lookup: RateLookup,
    table: HourTable,
    legacy_per_kwh: float = 0.0,
    vat_inclusive: bool = False,
) -> SeasonalRates:
    high = blend_season(lookup, table, Season.HIGH, legacy_per_kwh, vat_inclusive)
    low = blend_season(lookup, table, Season.LOW, legacy_per_kwh, vat_inclusive)
    annual = (high * table.high.total + low * table.low.total) / (table.total or 1)
    return SeasonalRates(annual=annual, high=high, low=low)


def calculate_blended_rates(
    lookup: RateLookup,
    legacy_per_kwh: float = 0.0,
    vat_inclusive: bool = False,
    all_hours: HourTable = ALL_HOURS,
    solar_hours: HourTable = SOLAR_HOURS,
) -> BlendedRateResult:
    """Compute the six blended rates (R/kWh) for an organised tariff.

    Args:
        lookup:         Season x period index from
                        :func:`~engine.tariffs.organize_rates`.
        legacy_per_kwh: Tariff-level per-kWh charge added to every period,
                        already resolved for the VAT flag.
        vat_inclusive:  Read the VAT-inclusive stored value of every row
                        component where one exists.
        all_hours:      Around-the-clock hour table.
        solar_hours:    Sun-hours table.
    """
    return BlendedRateResult(
        all_hours=blend_table(lookup, all_hours, legacy_per_kwh, vat_inclusive),
        solar_hours=blend_table(lookup, solar_hours, legacy_per_kwh, vat_inclusive),
    )


# ---------------------------------------------------------------------------
# Fixed-rate tariffs
# ---------------------------------------------------------------------------


def combined_rate(rate: TariffRate, legacy_per_kwh: float = 0.0, vat_inclusive: bool = False) -> float:
    """Every per-kWh component of one row plus the legacy charge."""
    return legacy_per_kwh + sum(rate_component(rate, component, vat_inclusive) for component in RateComponent)


def fixed_rate(
    rates: Sequence[TariffRate],
    legacy_per_kwh: float = 0.0,
    vat_inclusive: bool = False,
) -> Optional[float]:
    """Single per-kWh rate for a tariff with no usable TOU structure.

    The first row labelled ``Any`` time of use or ``All Year`` season wins.
    Without one, the plain mean of every row's combined rate is used.

    Returns:
        The rate, or ``None`` when there are no rows or the mean is not
        positive.
    """
    if not rates:
        return None

    for rate in rates:
        if rate.time_of_use == _FIXED_TIME_OF_USE or rate.season == _FIXED_SEASON:
            return combined_rate(rate, legacy_per_kwh, vat_inclusive)

    mean = sum(combined_rate(r, legacy_per_kwh, vat_inclusive) for r in rates) / len(rates)
    return mean if mean > 0 else None


def blended_rates_for_tariff(
    tariff: Tariff,
    vat_inclusive: bool = False,
    lookup: Optional[RateLookup] = None,
) -> BlendedRateResult:
    """Blend a whole tariff, falling back to a fixed rate when TOU yields nothing.

    Args:
        tariff:        Tariff with its rate rows and tariff-level charges.
        vat_inclusive: Read VAT-inclusive stored values where present.
        lookup:        Already organised rows of ``tariff``; built here when
                       omitted.
    """
    if lookup is None:
        lookup = organize_rates(tariff.rates)
    legacy = tariff_charge(tariff, TariffCharge.LEGACY_PER_KWH, vat_inclusive)

    result = calculate_blended_rates(lookup, legacy, vat_inclusive)
    if any(result.values()):
        return result

    flat = fixed_rate(tariff.rates, legacy, vat_inclusive)
    if flat is None:
        return result

    log.debug("Tariff %r has no TOU blend, using fixed rate %.4f.", tariff.name, flat)
    rates = SeasonalRates(annual=flat, high=flat, low=flat)
    return BlendedRateResult(all_hours=rates, solar_hours=rates, method="fixed")


# ---------------------------------------------------------------------------
# Production-weighted rate
# ---------------------------------------------------------------------------


def profile_weighted_rate(
    lookup: RateLookup,
    season: Season,
    profile: Optional[Sequence[float]] = None,
    legacy_per_kwh: float = 0.0,
    vat_inclusive: bool = False,
) -> ProfileWeightedRate:
    """Effective rate for PV energy over the season's sunshine window.

    Each sunshine hour's weekday TOU rate is weighted by the energy produced
    in that hour.  Solar output peaks in Standard time, so the result
    usually sits below a simple average of the TOU rates.

    Args:
        lookup:  Season x period index.
        season:  Season whose rates and sunshine window to use.
        profile: 24 hourly generation values; any unit, only the shape
                 matters.  Defaults to the reference solar curve.

    Raises:
        ValueError: If ``profile`` does not have 24 values.
    """
    weights = list(profile) if profile is not None else list(SOLAR_CURVE)
    if len(weights) != HOURS_IN_DAY:
        raise ValueError(f"profile must have {HOURS_IN_DAY} values, got {len(weights)}")

    energy = {period: 0.0 for period in PERIODS}
    hours = {period: 0 for period in PERIODS}
    start, end = SUNSHINE_HOURS[season]
    for hour in range(start, end):
        period = period_for_hour(hour)
        energy[period] += max(weights[hour], 0.0)
        hours[period] += 1

    total_energy = sum(energy.values())
    breakdown: list[PeriodContribution] = []
    blended = 0.0
    for period in PERIODS:
        rate = period_rate(lookup, season, period, legacy_per_kwh, vat_inclusive)
        share = energy[period] / total_energy if total_energy > 0 else 0.0
        contribution = share * rate
        blended += contribution
        breakdown.append(
            PeriodContribution(
                period=period,
                hours=hours[period],
                energy_share=share,
                rate=rate,
                contribution=contribution,
            )
        )

    return ProfileWeightedRate(
        season=season,
        rate=blended,
        total_energy=total_energy,
        breakdown=breakdown,
    )
