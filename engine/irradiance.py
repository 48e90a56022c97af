"""Reduce a multi-day irradiance forecast to one representative day."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Sequence

from engine.types import ForecastSample, HourlyIrradianceData

HOURS_IN_DAY = 24


@dataclass
class _HourAccumulator:
    ghi_sum: float = 0.0
    ghi_count: int = 0
    dni_sum: float = 0.0
    dni_count: int = 0
    dhi_sum: float = 0.0
    dhi_count: int = 0


@dataclass(frozen=True)
class IrradianceSummary:
    peak_ghi: float  # W/m²
    daily_ghi_kwh: float  # kWh/m²/day
    peak_sun_hours: float
    normalized_profile: list[float]


def _utc_hour(ts: datetime) -> int:
    if ts.tzinfo is not None:
        ts = ts.astimezone(timezone.utc)
    return ts.hour


def _mean(total: float, count: int) -> Optional[float]:
    return total / count if count else None


def average_hourly_irradiance(samples: Sequence[ForecastSample]) -> list[HourlyIrradianceData]:
    """Average forecast samples by UTC hour of day.

    Always returns 24 entries ordered by hour.  Hours with no samples have
    ``ghi == 0``.  DNI and DHI are averaged over the samples that report them
    and are ``None`` for hours where none do.
    """
    buckets = [_HourAccumulator() for _ in range(HOURS_IN_DAY)]

    for sample in samples:
        acc = buckets[_utc_hour(sample.timestamp)]
        acc.ghi_sum += sample.ghi
        acc.ghi_count += 1
        if sample.dni is not None:
            acc.dni_sum += sample.dni
            acc.dni_count += 1
        if sample.dhi is not None:
            acc.dhi_sum += sample.dhi
            acc.dhi_count += 1

    return [
        HourlyIrradianceData(
            hour=hour,
            ghi=_mean(acc.ghi_sum, acc.ghi_count) or 0.0,
            dni=_mean(acc.dni_sum, acc.dni_count),
            dhi=_mean(acc.dhi_sum, acc.dhi_count),
        )
        for hour, acc in enumerate(buckets)
    ]


def summarize_irradiance(hourly: Sequence[HourlyIrradianceData]) -> IrradianceSummary:
    """Daily totals for an hourly GHI profile.

    Each hourly value is a one-hour mean in W/m², so the daily sum in Wh/m²
    divided by 1000 is both the daily insolation (kWh/m²) and the number of
    peak sun hours at the 1000 W/m² reference.
    """
    ordered = sorted(hourly, key=lambda h: h.hour)
    ghi = [h.ghi for h in ordered]
    peak = max(ghi, default=0.0)
    daily_kwh = sum(ghi) / 1000.0

    return IrradianceSummary(
        peak_ghi=peak,
        daily_ghi_kwh=daily_kwh,
        peak_sun_hours=daily_kwh,
        normalized_profile=[v / peak if peak > 0 else 0.0 for v in ghi],
    )
