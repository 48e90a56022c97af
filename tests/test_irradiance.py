"""Tests for engine.irradiance: forecast averaging and daily summary."""

from datetime import datetime, timedelta, timezone

import pytest

from engine.irradiance import average_hourly_irradiance, summarize_irradiance
from engine.types import ForecastSample, HourlyIrradianceData


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def ts(day: int, hour: int, minute: int = 0, tz=timezone.utc) -> datetime:
    return datetime(2026, 2, day, hour, minute, tzinfo=tz)


# ---------------------------------------------------------------------------
# average_hourly_irradiance
# ---------------------------------------------------------------------------


def test_empty_feed_gives_24_zero_hours():
    result = average_hourly_irradiance([])
    assert [h.hour for h in result] == list(range(24))
    assert all(h.ghi == 0.0 for h in result)
    assert all(h.dni is None and h.dhi is None for h in result)


def test_same_hour_on_different_days_is_averaged():
    samples = [
        ForecastSample(ts(25, 10), 400.0),
        ForecastSample(ts(26, 10), 600.0),
        ForecastSample(ts(27, 10), 800.0),
    ]
    result = average_hourly_irradiance(samples)
    assert result[10].ghi == pytest.approx(600.0)
    assert result[9].ghi == 0.0
    assert result[11].ghi == 0.0


def test_sub_hourly_samples_share_their_hour():
    samples = [
        ForecastSample(ts(25, 12, 0), 900.0),
        ForecastSample(ts(25, 12, 30), 1000.0),
    ]
    assert average_hourly_irradiance(samples)[12].ghi == pytest.approx(950.0)


def test_offset_timestamps_are_bucketed_by_utc_hour():
    sast = timezone(timedelta(hours=2))
    samples = [ForecastSample(ts(25, 12, tz=sast), 700.0)]
    result = average_hourly_irradiance(samples)
    assert result[10].ghi == pytest.approx(700.0)
    assert result[12].ghi == 0.0


def test_naive_timestamps_are_treated_as_utc():
    samples = [ForecastSample(datetime(2026, 2, 25, 8, 0), 300.0)]
    assert average_hourly_irradiance(samples)[8].ghi == pytest.approx(300.0)


def test_dni_and_dhi_averaged_over_reporting_samples():
    samples = [
        ForecastSample(ts(25, 11), 800.0, dni=600.0, dhi=100.0),
        ForecastSample(ts(26, 11), 600.0, dni=400.0),
    ]
    hour = average_hourly_irradiance(samples)[11]
    assert hour.ghi == pytest.approx(700.0)
    assert hour.dni == pytest.approx(500.0)
    assert hour.dhi == pytest.approx(100.0)


# ---------------------------------------------------------------------------
# summarize_irradiance
# ---------------------------------------------------------------------------


def test_summary_of_flat_daylight():
    hourly = [HourlyIrradianceData(h, 500.0 if 6 <= h <= 17 else 0.0) for h in range(24)]
    summary = summarize_irradiance(hourly)
    assert summary.peak_ghi == 500.0
    assert summary.daily_ghi_kwh == pytest.approx(6.0)
    assert summary.peak_sun_hours == pytest.approx(6.0)
    assert summary.normalized_profile[12] == 1.0
    assert summary.normalized_profile[0] == 0.0


def test_summary_of_dark_day():
    summary = summarize_irradiance([HourlyIrradianceData(h, 0.0) for h in range(24)])
    assert summary.peak_ghi == 0.0
    assert summary.normalized_profile == [0.0] * 24
