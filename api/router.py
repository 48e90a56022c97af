from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from api.config import settings
from engine.blending import blended_rates_for_tariff, profile_weighted_rate
from engine.catalog import DEFAULT_CATALOG
from engine.efficiency import efficiency_factors
from engine.errors import UnknownCatalogKeyError
from engine.generation import ProfileGenerator
from engine.irradiance import average_hourly_irradiance, summarize_irradiance
from engine.losses import DEFAULT_LOSSES, SystemLosses
from engine.system import PVSystemConfig
from engine.tariffs import Price, Tariff, TariffCharge, TariffRate, organize_rates, tariff_charge
from engine.types import ForecastSample, HourlyIrradianceData, Season

router = APIRouter()

_generator = ProfileGenerator(DEFAULT_CATALOG)


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class LossesRequest(BaseModel):
    soiling: float = Field(DEFAULT_LOSSES.soiling, ge=0, lt=100)
    shading: float = Field(DEFAULT_LOSSES.shading, ge=0, lt=100)
    snow: float = Field(DEFAULT_LOSSES.snow, ge=0, lt=100)
    mismatch: float = Field(DEFAULT_LOSSES.mismatch, ge=0, lt=100)
    wiring: float = Field(DEFAULT_LOSSES.wiring, ge=0, lt=100)
    connections: float = Field(DEFAULT_LOSSES.connections, ge=0, lt=100)
    light_induced_degradation: float = Field(DEFAULT_LOSSES.light_induced_degradation, ge=0, lt=100)
    nameplate_rating: float = Field(DEFAULT_LOSSES.nameplate_rating, ge=0, lt=100)
    age: float = Field(DEFAULT_LOSSES.age, ge=0, lt=100)
    availability: float = Field(DEFAULT_LOSSES.availability, ge=0, lt=100)


class PVConfigRequest(BaseModel):
    location: str = settings.DEFAULT_LOCATION
    module_type: str = "standard"
    array_type: str = "fixed_roof"
    tilt: float = 26.0
    azimuth: float = 0.0
    dc_ac_ratio: float = 1.3
    inverter_efficiency: float = 96.0
    losses: LossesRequest = LossesRequest()
    ground_coverage_ratio: float = 0.4
    bifacial: bool = False
    albedo: float = 0.2


class HourlyIrradiance(BaseModel):
    hour: int = Field(ge=0, le=23)
    ghi: float
    dni: Optional[float] = None
    dhi: Optional[float] = None


class ForecastSampleRequest(BaseModel):
    timestamp: datetime
    ghi: float
    dni: Optional[float] = None
    dhi: Optional[float] = None


class ProfileRequest(BaseModel):
    config: PVConfigRequest = PVConfigRequest()
    capacity_kwp: float = Field(ge=0)
    hourly_irradiance: Optional[list[HourlyIrradiance]] = None
    forecast: Optional[list[ForecastSampleRequest]] = None


class IrradianceAverageRequest(BaseModel):
    samples: list[ForecastSampleRequest]


class PriceRequest(BaseModel):
    excl_vat: float = 0.0
    incl_vat: Optional[float] = None


class TariffRateRequest(BaseModel):
    season: str
    time_of_use: str
    energy: PriceRequest = PriceRequest()
    network: PriceRequest = PriceRequest()
    ancillary: PriceRequest = PriceRequest()
    electrification_rural: PriceRequest = PriceRequest()
    affordability_subsidy: PriceRequest = PriceRequest()


class TariffRequest(BaseModel):
    name: str
    tariff_type: str = "TOU"
    rates: list[TariffRateRequest] = []
    fixed_monthly_charge: PriceRequest = PriceRequest()
    demand_charge_per_kva: PriceRequest = PriceRequest()
    legacy_charge_per_kwh: PriceRequest = PriceRequest()
    vat_inclusive: Optional[bool] = None


class WeightedRateRequest(BaseModel):
    tariff: TariffRequest
    season: Literal["high", "low"]
    profile: Optional[list[float]] = None


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class LocationResponse(BaseModel):
    key: str
    name: str
    latitude: float
    ghi: float
    dni: float
    optimal_tilt: float


class ModuleTypeResponse(BaseModel):
    key: str
    name: str
    efficiency: float
    description: str


class ArrayTypeResponse(BaseModel):
    key: str
    name: str
    modifier: float
    tracks_sun: bool
    description: str


class EfficiencyResponse(BaseModel):
    total_loss_percent: float
    efficiency: float
    factors: dict[str, float]


class ProfileResponse(BaseModel):
    source: Literal["measured", "synthetic"]
    efficiency: float
    hourly_kwh: list[float]
    daily_kwh: float
    peak_kwh: float


class IrradianceAverageResponse(BaseModel):
    hourly: list[HourlyIrradiance]
    peak_ghi: float
    daily_ghi_kwh: float
    peak_sun_hours: float


class SeasonalRatesResponse(BaseModel):
    annual: float
    high: float
    low: float


class FlaggedRateResponse(BaseModel):
    season: str
    time_of_use: str
    reason: str


class BlendedRatesResponse(BaseModel):
    vat_inclusive: bool
    method: Literal["tou", "fixed"]
    all_hours: SeasonalRatesResponse
    solar_hours: SeasonalRatesResponse
    missing_slots: list[str]
    flagged: list[FlaggedRateResponse]


class PeriodContributionResponse(BaseModel):
    period: str
    hours: int
    energy_share: float
    rate: float
    contribution: float


class WeightedRateResponse(BaseModel):
    season: str
    rate: float
    breakdown: list[PeriodContributionResponse]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _to_config(req: PVConfigRequest) -> PVSystemConfig:
    try:
        return PVSystemConfig(
            location=req.location,
            module_type=req.module_type,
            array_type=req.array_type,
            tilt=req.tilt,
            azimuth=req.azimuth,
            dc_ac_ratio=req.dc_ac_ratio,
            inverter_efficiency=req.inverter_efficiency,
            losses=SystemLosses(**req.losses.model_dump()),
            ground_coverage_ratio=req.ground_coverage_ratio,
            bifacial=req.bifacial,
            albedo=req.albedo,
        )
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


def _to_price(req: PriceRequest) -> Price:
    return Price(excl_vat=req.excl_vat, incl_vat=req.incl_vat)


def _to_tariff(req: TariffRequest) -> Tariff:
    return Tariff(
        name=req.name,
        tariff_type=req.tariff_type,
        rates=tuple(
            TariffRate(
                season=r.season,
                time_of_use=r.time_of_use,
                energy=_to_price(r.energy),
                network=_to_price(r.network),
                ancillary=_to_price(r.ancillary),
                electrification_rural=_to_price(r.electrification_rural),
                affordability_subsidy=_to_price(r.affordability_subsidy),
            )
            for r in req.rates
        ),
        fixed_monthly_charge=_to_price(req.fixed_monthly_charge),
        demand_charge_per_kva=_to_price(req.demand_charge_per_kva),
        legacy_charge_per_kwh=_to_price(req.legacy_charge_per_kwh),
    )


def _to_samples(samples: list[ForecastSampleRequest]) -> list[ForecastSample]:
    return [ForecastSample(timestamp=s.timestamp, ghi=s.ghi, dni=s.dni, dhi=s.dhi) for s in samples]


def _vat_flag(req: TariffRequest) -> bool:
    return settings.VAT_INCLUSIVE_DEFAULT if req.vat_inclusive is None else req.vat_inclusive


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@router.get("/catalog/locations", response_model=list[LocationResponse])
def list_locations():
    """Return every location preset."""
    return [
        LocationResponse(
            key=loc.key,
            name=loc.name,
            latitude=loc.latitude,
            ghi=loc.ghi,
            dni=loc.dni,
            optimal_tilt=loc.optimal_tilt,
        )
        for loc in DEFAULT_CATALOG.locations.values()
    ]


@router.get("/catalog/module-types", response_model=list[ModuleTypeResponse])
def list_module_types():
    return [
        ModuleTypeResponse(key=m.key, name=m.name, efficiency=m.efficiency, description=m.description)
        for m in DEFAULT_CATALOG.module_types.values()
    ]


@router.get("/catalog/array-types", response_model=list[ArrayTypeResponse])
def list_array_types():
    return [
        ArrayTypeResponse(
            key=a.key,
            name=a.name,
            modifier=a.modifier,
            tracks_sun=a.tracks_sun,
            description=a.description,
        )
        for a in DEFAULT_CATALOG.array_types.values()
    ]


@router.post("/pv/efficiency", response_model=EfficiencyResponse)
def pv_efficiency(req: PVConfigRequest):
    """Return the combined loss and scalar system efficiency for a config."""
    config = _to_config(req)
    try:
        factors = efficiency_factors(config, DEFAULT_CATALOG)
    except UnknownCatalogKeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc

    return EfficiencyResponse(
        total_loss_percent=config.total_loss_percent,
        efficiency=factors.total,
        factors={
            "module": factors.module,
            "array": factors.array,
            "inverter": factors.inverter,
            "losses": factors.losses,
            "tilt": factors.tilt,
            "azimuth": factors.azimuth,
        },
    )


@router.post("/pv/profile", response_model=ProfileResponse)
def pv_profile(req: ProfileRequest):
    """Return the 24-hour generation profile for a config and capacity.

    ``hourly_irradiance`` is used as-is when supplied.  Otherwise raw
    ``forecast`` samples, if any, are averaged into one day first.  With
    neither, the synthetic daylight curve is used.
    """
    config = _to_config(req.config)

    hourly: Optional[list[HourlyIrradianceData]] = None
    if req.hourly_irradiance:
        hourly = [HourlyIrradianceData(h.hour, h.ghi, h.dni, h.dhi) for h in req.hourly_irradiance]
    elif req.forecast:
        hourly = average_hourly_irradiance(_to_samples(req.forecast))

    try:
        profile = _generator.generate(config, req.capacity_kwp, hourly)
    except UnknownCatalogKeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return ProfileResponse(
        source=profile.source,
        efficiency=profile.efficiency,
        hourly_kwh=profile.hourly_kwh,
        daily_kwh=profile.daily_kwh,
        peak_kwh=profile.peak_kwh,
    )


@router.post("/irradiance/average", response_model=IrradianceAverageResponse)
def irradiance_average(req: IrradianceAverageRequest):
    """Average forecast samples into one representative UTC day."""
    hourly = average_hourly_irradiance(_to_samples(req.samples))
    summary = summarize_irradiance(hourly)
    return IrradianceAverageResponse(
        hourly=[HourlyIrradiance(hour=h.hour, ghi=h.ghi, dni=h.dni, dhi=h.dhi) for h in hourly],
        peak_ghi=summary.peak_ghi,
        daily_ghi_kwh=summary.daily_ghi_kwh,
        peak_sun_hours=summary.peak_sun_hours,
    )


@router.post("/tariffs/blended-rates", response_model=BlendedRatesResponse)
def blended_rates(req: TariffRequest):
    """Return all-hours and solar-hours blended rates for a tariff.

    Tariffs with no usable TOU rows fall back to a single fixed rate and
    report ``method="fixed"``.
    """
    tariff = _to_tariff(req)
    vat_inclusive = _vat_flag(req)

    lookup = organize_rates(tariff.rates)
    result = blended_rates_for_tariff(tariff, vat_inclusive, lookup)

    return BlendedRatesResponse(
        vat_inclusive=vat_inclusive,
        method=result.method,
        all_hours=SeasonalRatesResponse(**vars(result.all_hours)),
        solar_hours=SeasonalRatesResponse(**vars(result.solar_hours)),
        missing_slots=[f"{season.value}/{period.value}" for season, period in lookup.missing_slots()],
        flagged=[
            FlaggedRateResponse(season=f.rate.season, time_of_use=f.rate.time_of_use, reason=f.reason)
            for f in lookup.flagged
        ],
    )


@router.post("/tariffs/solar-weighted-rate", response_model=WeightedRateResponse)
def solar_weighted_rate(req: WeightedRateRequest):
    """Return the production-weighted rate over one season's sunshine hours."""
    tariff = _to_tariff(req.tariff)
    vat_inclusive = _vat_flag(req.tariff)
    lookup = organize_rates(tariff.rates)
    legacy = tariff_charge(tariff, TariffCharge.LEGACY_PER_KWH, vat_inclusive)

    try:
        weighted = profile_weighted_rate(lookup, Season(req.season), req.profile, legacy, vat_inclusive)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return WeightedRateResponse(
        season=weighted.season.value,
        rate=weighted.rate,
        breakdown=[
            PeriodContributionResponse(
                period=c.period.value,
                hours=c.hours,
                energy_share=c.energy_share,
                rate=c.rate,
                contribution=c.contribution,
            )
            for c in weighted.breakdown
        ],
    )
