"""Tariff records and the season x TOU period rate lookup.

Tariff rows arrive with free-text ``season`` and ``time_of_use`` labels.
They are resolved to :class:`~engine.types.Season` and
:class:`~engine.types.Period` once, when the lookup is built; nothing
downstream compares strings.

Season labels match case-insensitively on substring: ``"High"`` or
``"Winter"`` is the high-demand season, ``"Low"`` or ``"Summer"`` the low
one.  A label that matches both (``"Low-High Transition"``) is a data
problem and is flagged rather than guessed at.  Periods match exactly on
``Peak``, ``Standard`` and ``Off-Peak``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Sequence

from engine.errors import AmbiguousSeasonError
from engine.types import PERIODS, SEASONS, Period, Season

log = logging.getLogger(__name__)

_HIGH_MARKERS = ("high", "winter")
_LOW_MARKERS = ("low", "summer")


# ---------------------------------------------------------------------------
# VAT-aware values
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Price:
    """A stored charge with its optional VAT-inclusive counterpart.

    VAT is never computed here; both values come from upstream and
    :meth:`select` only picks one.  When no inclusive value is stored the
    exclusive one is returned for either flag.
    """

    excl_vat: float = 0.0
    incl_vat: Optional[float] = None

    def select(self, vat_inclusive: bool) -> float:
        if vat_inclusive and self.incl_vat is not None:
            return self.incl_vat
        return self.excl_vat


class RateComponent(str, Enum):
    ENERGY = "energy"
    NETWORK = "network"
    ANCILLARY = "ancillary"
    ELECTRIFICATION_RURAL = "electrification_rural"
    AFFORDABILITY_SUBSIDY = "affordability_subsidy"


class TariffCharge(str, Enum):
    FIXED_MONTHLY = "fixed_monthly"
    DEMAND_PER_KVA = "demand_per_kva"
    LEGACY_PER_KWH = "legacy_per_kwh"


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TariffRate:
    """One seasonal TOU row.  All per-kWh components are additive."""

    season: str
    time_of_use: str
    energy: Price = Price()
    network: Price = Price()
    ancillary: Price = Price()
    electrification_rural: Price = Price()
    affordability_subsidy: Price = Price()


@dataclass(frozen=True)
class Tariff:
    name: str
    tariff_type: str = "TOU"
    rates: tuple[TariffRate, ...] = ()
    fixed_monthly_charge: Price = Price()
    demand_charge_per_kva: Price = Price()
    legacy_charge_per_kwh: Price = Price()


_RATE_ACCESSORS: dict[RateComponent, Callable[[TariffRate], Price]] = {
    RateComponent.ENERGY: lambda r: r.energy,
    RateComponent.NETWORK: lambda r: r.network,
    RateComponent.ANCILLARY: lambda r: r.ancillary,
    RateComponent.ELECTRIFICATION_RURAL: lambda r: r.electrification_rural,
    RateComponent.AFFORDABILITY_SUBSIDY: lambda r: r.affordability_subsidy,
}

_TARIFF_ACCESSORS: dict[TariffCharge, Callable[[Tariff], Price]] = {
    TariffCharge.FIXED_MONTHLY: lambda t: t.fixed_monthly_charge,
    TariffCharge.DEMAND_PER_KVA: lambda t: t.demand_charge_per_kva,
    TariffCharge.LEGACY_PER_KWH: lambda t: t.legacy_charge_per_kwh,
}


def rate_component(rate: TariffRate, component: RateComponent, vat_inclusive: bool = False) -> float:
    return _RATE_ACCESSORS[component](rate).select(vat_inclusive)


def tariff_charge(tariff: Tariff, charge: TariffCharge, vat_inclusive: bool = False) -> float:
    return _TARIFF_ACCESSORS[charge](tariff).select(vat_inclusive)


# ---------------------------------------------------------------------------
# Label resolution
# ---------------------------------------------------------------------------


def classify_season(label: str) -> Optional[Season]:
    """Resolve a season label, or ``None`` if it names no season.

    Raises:
        AmbiguousSeasonError: If the label names both seasons.
    """
    text = label.lower()
    is_high = any(marker in text for marker in _HIGH_MARKERS)
    is_low = any(marker in text for marker in _LOW_MARKERS)
    if is_high and is_low:
        raise AmbiguousSeasonError(label)
    if is_high:
        return Season.HIGH
    if is_low:
        return Season.LOW
    return None


def classify_period(label: str) -> Optional[Period]:
    for period in PERIODS:
        if label == period.value:
            return period
    return None


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FlaggedRate:
    rate: TariffRate
    reason: str


@dataclass
class RateLookup:
    """Season x period index over a tariff's rate rows.

    Empty slots are legitimate; blending treats them as zero contribution.
    """

    slots: dict[tuple[Season, Period], TariffRate] = field(default_factory=dict)
    flagged: list[FlaggedRate] = field(default_factory=list)

    def get(self, season: Season, period: Period) -> Optional[TariffRate]:
        return self.slots.get((season, period))

    def missing_slots(self) -> list[tuple[Season, Period]]:
        return [
            (season, period)
            for season in SEASONS
            for period in PERIODS
            if (season, period) not in self.slots
        ]

    @property
    def is_complete(self) -> bool:
        return not self.missing_slots()


def _flag(lookup: RateLookup, rate: TariffRate, reason: str) -> None:
    log.warning(
        "Tariff rate (season=%r, time_of_use=%r) skipped: %s",
        rate.season,
        rate.time_of_use,
        reason,
    )
    lookup.flagged.append(FlaggedRate(rate, reason))


def organize_rates(rates: Sequence[TariffRate]) -> RateLookup:
    """Index ``rates`` by season and period.

    Rows whose labels cannot be resolved, and later duplicates of an already
    filled slot, are recorded in :attr:`RateLookup.flagged` and logged.
    """
    lookup = RateLookup()

    for rate in rates:
        try:
            season = classify_season(rate.season)
        except AmbiguousSeasonError as exc:
            _flag(lookup, rate, str(exc))
            continue

        if season is None:
            _flag(lookup, rate, f"unrecognised season {rate.season!r}")
            continue

        period = classify_period(rate.time_of_use)
        if period is None:
            _flag(lookup, rate, f"unrecognised time of use {rate.time_of_use!r}")
            continue

        if (season, period) in lookup.slots:
            _flag(lookup, rate, f"duplicate row for {season.value}/{period.value}")
            continue

        lookup.slots[(season, period)] = rate

    log.debug(
        "Organised %d tariff rate(s): %d slot(s) filled, %d flagged.",
        len(rates),
        len(lookup.slots),
        len(lookup.flagged),
    )
    return lookup
