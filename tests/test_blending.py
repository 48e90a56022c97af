"""Tests for engine.blending: hour-weighted and production-weighted rates."""

import pytest

from engine.blending import (
    blend_season,
    blended_rates_for_tariff,
    calculate_blended_rates,
    combined_rate,
    fixed_rate,
    period_rate,
    profile_weighted_rate,
)
from engine.catalog import ALL_HOURS, SOLAR_HOURS, HourTable, SeasonHours
from engine.tariffs import Price, RateLookup, Tariff, TariffRate, organize_rates
from engine.types import Period, Season

ENERGY = {
    ("High", "Peak"): 3.0,
    ("High", "Standard"): 1.0,
    ("High", "Off-Peak"): 0.5,
    ("Low", "Peak"): 1.5,
    ("Low", "Standard"): 0.8,
    ("Low", "Off-Peak"): 0.4,
}


def make_rates(scale: float = 1.0, peak_network: float = 0.0, skip=()) -> list[TariffRate]:
    rates = []
    for (season, tou), energy in ENERGY.items():
        if (season, tou) in skip:
            continue
        network = Price(peak_network) if tou == "Peak" else Price()
        rates.append(
            TariffRate(season=season, time_of_use=tou, energy=Price(energy * scale), network=network)
        )
    return rates


def values(result) -> list[float]:
    return list(result.values())


@pytest.fixture
def lookup() -> RateLookup:
    return organize_rates(make_rates())


# ---------------------------------------------------------------------------
# period_rate
# ---------------------------------------------------------------------------


def test_period_rate_sums_components():
    rate = TariffRate(
        season="High",
        time_of_use="Standard",
        energy=Price(1.0),
        network=Price(9.9),
        ancillary=Price(0.01),
        electrification_rural=Price(0.02),
        affordability_subsidy=Price(0.03),
    )
    peak = TariffRate(season="High", time_of_use="Peak", energy=Price(3.0), network=Price(0.2))
    lu = organize_rates([peak, rate])
    # Standard row's own network charge is ignored; the Peak row's applies.
    assert period_rate(lu, Season.HIGH, Period.STANDARD, legacy_per_kwh=0.05) == pytest.approx(
        1.0 + 0.01 + 0.02 + 0.03 + 0.2 + 0.05
    )


def test_period_rate_missing_slot_is_zero():
    peak = TariffRate(season="Low", time_of_use="Peak", energy=Price(1.5), network=Price(0.2))
    lu = organize_rates([peak])
    assert period_rate(lu, Season.LOW, Period.OFF_PEAK, legacy_per_kwh=0.05) == 0.0
    assert period_rate(lu, Season.LOW, Period.PEAK, legacy_per_kwh=0.05) == pytest.approx(1.75)


# ---------------------------------------------------------------------------
# calculate_blended_rates
# ---------------------------------------------------------------------------


def test_all_hours_blend(lookup):
    result = calculate_blended_rates(lookup)
    high = (330 * 3.0 + 817 * 1.0 + 1061 * 0.5) / 2208
    low = (975 * 1.5 + 2418 * 0.8 + 3159 * 0.4) / 6552
    assert result.all_hours.high == pytest.approx(high)
    assert result.all_hours.low == pytest.approx(low)
    assert result.all_hours.annual == pytest.approx((high * 2208 + low * 6552) / 8760)


def test_solar_hours_blend(lookup):
    result = calculate_blended_rates(lookup)
    high = (513 * 1.0 + 39 * 0.5) / 552
    low = (1521 * 0.8 + 117 * 0.4) / 1638
    assert result.solar_hours.high == pytest.approx(high)
    assert result.solar_hours.low == pytest.approx(low)
    assert result.solar_hours.annual == pytest.approx((high * 552 + low * 1638) / 2190)


def test_solar_blend_ignores_peak_energy(lookup):
    cheap = calculate_blended_rates(lookup)
    changed = [
        TariffRate(season=r.season, time_of_use=r.time_of_use, energy=Price(99.0))
        if r.time_of_use == "Peak"
        else r
        for r in make_rates()
    ]
    assert calculate_blended_rates(organize_rates(changed)).solar_hours == cheap.solar_hours


def test_peak_network_charge_reaches_solar_hours(lookup):
    base = calculate_blended_rates(lookup)
    with_network = calculate_blended_rates(organize_rates(make_rates(peak_network=0.2)))
    assert with_network.solar_hours.high == pytest.approx(base.solar_hours.high + 0.2)
    assert with_network.solar_hours.low == pytest.approx(base.solar_hours.low + 0.2)
    assert with_network.all_hours.annual == pytest.approx(base.all_hours.annual + 0.2)


def test_legacy_charge_shifts_every_value(lookup):
    base = values(calculate_blended_rates(lookup))
    shifted = values(calculate_blended_rates(lookup, legacy_per_kwh=0.07))
    assert shifted == pytest.approx([v + 0.07 for v in base])


def test_energy_scaling_is_linear(lookup):
    base = values(calculate_blended_rates(lookup))
    doubled = values(calculate_blended_rates(organize_rates(make_rates(scale=2.5))))
    assert doubled == pytest.approx([v * 2.5 for v in base])


def test_blends_are_bounded_by_period_rates(lookup):
    result = calculate_blended_rates(lookup)
    for v in values(result):
        assert min(ENERGY.values()) <= v <= max(ENERGY.values())


def test_missing_slot_contributes_zero():
    lu = organize_rates(make_rates(skip={("Low", "Off-Peak")}))
    result = calculate_blended_rates(lu)
    assert result.all_hours.low == pytest.approx((975 * 1.5 + 2418 * 0.8) / 6552)
    assert result.solar_hours.low == pytest.approx((1521 * 0.8) / 1638)


def test_empty_lookup_gives_zeros():
    result = calculate_blended_rates(RateLookup())
    assert values(result) == [0.0] * 6


def test_empty_lookup_ignores_legacy_charge():
    result = calculate_blended_rates(organize_rates([]), legacy_per_kwh=0.1)
    assert values(result) == [0.0] * 6


def test_zero_hour_table_is_guarded(lookup):
    empty = HourTable("empty", SeasonHours(0, 0, 0), SeasonHours(0, 0, 0))
    assert blend_season(lookup, empty, Season.HIGH) == 0.0
    result = calculate_blended_rates(lookup, all_hours=empty, solar_hours=SOLAR_HOURS)
    assert result.all_hours.annual == 0.0


def test_default_tables_are_used(lookup):
    explicit = calculate_blended_rates(lookup, all_hours=ALL_HOURS, solar_hours=SOLAR_HOURS)
    assert explicit == calculate_blended_rates(lookup)


# ---------------------------------------------------------------------------
# blended_rates_for_tariff
# ---------------------------------------------------------------------------


def test_blended_rates_for_tariff_reads_vat_values():
    rates = tuple(
        TariffRate(season=r.season, time_of_use=r.time_of_use, energy=Price(r.energy.excl_vat, r.energy.excl_vat * 1.15))
        for r in make_rates()
    )
    tariff = Tariff(name="Homeflex", rates=rates, legacy_charge_per_kwh=Price(0.1, 0.115))
    excl = blended_rates_for_tariff(tariff)
    incl = blended_rates_for_tariff(tariff, vat_inclusive=True)
    assert values(incl) == pytest.approx([v * 1.15 for v in values(excl)])


def test_tou_tariff_reports_tou_method():
    result = blended_rates_for_tariff(Tariff(name="Megaflex", rates=tuple(make_rates())))
    assert result.method == "tou"


# ---------------------------------------------------------------------------
# Fixed-rate tariffs
# ---------------------------------------------------------------------------


def test_flat_tariff_uses_any_row_for_every_value():
    tariff = Tariff(
        name="Businessrate",
        tariff_type="flat",
        rates=(TariffRate(season="All Year", time_of_use="Any", energy=Price(2.0)),),
    )
    result = blended_rates_for_tariff(tariff)
    assert result.method == "fixed"
    assert values(result) == [2.0] * 6


def test_flat_rate_includes_every_component_and_legacy():
    flat = TariffRate(
        season="All Year",
        time_of_use="Any",
        energy=Price(2.0, 2.3),
        network=Price(0.1, 0.115),
        ancillary=Price(0.01),
    )
    tariff = Tariff(name="Businessrate", rates=(flat,), legacy_charge_per_kwh=Price(0.05, 0.0575))
    assert values(blended_rates_for_tariff(tariff)) == pytest.approx([2.16] * 6)
    assert values(blended_rates_for_tariff(tariff, vat_inclusive=True)) == pytest.approx(
        [2.3 + 0.115 + 0.01 + 0.0575] * 6
    )


def test_fixed_rate_marker_on_either_label():
    by_season = [TariffRate(season="All Year", time_of_use="Flat", energy=Price(1.2))]
    by_period = [TariffRate(season="Everyday", time_of_use="Any", energy=Price(1.4))]
    assert fixed_rate(by_season) == pytest.approx(1.2)
    assert fixed_rate(by_period) == pytest.approx(1.4)


def test_fixed_rate_falls_back_to_mean():
    rates = [
        TariffRate(season="Everyday", time_of_use="Day", energy=Price(1.0)),
        TariffRate(season="Everyday", time_of_use="Night", energy=Price(3.0)),
    ]
    assert fixed_rate(rates) == pytest.approx(2.0)
    result = blended_rates_for_tariff(Tariff(name="Daynight", rates=tuple(rates)))
    assert result.method == "fixed"
    assert values(result) == pytest.approx([2.0] * 6)


def test_fixed_rate_none_without_positive_rows():
    assert fixed_rate([]) is None
    assert fixed_rate([TariffRate(season="Everyday", time_of_use="Day")]) is None


def test_empty_tariff_blends_to_zero():
    result = blended_rates_for_tariff(Tariff(name="Empty", legacy_charge_per_kwh=Price(0.1)))
    assert result.method == "tou"
    assert values(result) == [0.0] * 6


def test_combined_rate_sums_all_components():
    rate = TariffRate(
        season="High",
        time_of_use="Peak",
        energy=Price(1.0),
        network=Price(0.2),
        ancillary=Price(0.01),
        electrification_rural=Price(0.02),
        affordability_subsidy=Price(0.03),
    )
    assert combined_rate(rate, legacy_per_kwh=0.04) == pytest.approx(1.3)


# ---------------------------------------------------------------------------
# profile_weighted_rate
# ---------------------------------------------------------------------------


def test_profile_weighted_rate_low_season(lookup):
    result = profile_weighted_rate(lookup, Season.LOW)
    by_period = {c.period: c for c in result.breakdown}

    assert by_period[Period.PEAK].hours == 4
    assert by_period[Period.STANDARD].hours == 9
    assert by_period[Period.OFF_PEAK].hours == 0
    assert result.total_energy == pytest.approx(8.83)
    assert by_period[Period.PEAK].energy_share == pytest.approx(1.95 / 8.83)
    assert result.rate == pytest.approx((1.95 * 1.5 + 6.88 * 0.8) / 8.83)
    assert sum(c.contribution for c in result.breakdown) == pytest.approx(result.rate)


def test_profile_weighted_rate_flat_profile_high_season(lookup):
    # High season window is 07:00-16:59: three Peak hours and seven Standard.
    result = profile_weighted_rate(lookup, Season.HIGH, profile=[1.0] * 24)
    assert result.total_energy == pytest.approx(10.0)
    assert result.rate == pytest.approx((3 * 3.0 + 7 * 1.0) / 10)


def test_profile_weighted_rate_zero_profile(lookup):
    result = profile_weighted_rate(lookup, Season.LOW, profile=[0.0] * 24)
    assert result.total_energy == 0.0
    assert result.rate == 0.0


def test_profile_weighted_rate_rejects_wrong_length(lookup):
    with pytest.raises(ValueError, match="24 values, got 23"):
        profile_weighted_rate(lookup, Season.LOW, profile=[1.0] * 23)
