from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field

from engine.losses import DEFAULT_LOSSES, LOSS_FIELDS, SystemLosses, total_loss_percent


@dataclass(frozen=True)
class PVSystemConfig:
    """Physical configuration of a PV array.

    ``location``, ``module_type`` and ``array_type`` are catalog keys,
    resolved against a :class:`~engine.catalog.Catalog` at calculation time.

    ``total_loss_percent`` is derived from ``losses`` and cannot be passed
    in.  Use :meth:`with_losses`, :meth:`with_loss` or :meth:`replace` to
    edit a config; each returns a new instance with the total recomputed.
    """

    location: str
    module_type: str
    array_type: str
    tilt: float
    azimuth: float
    dc_ac_ratio: float = 1.3
    inverter_efficiency: float = 96.0
    losses: SystemLosses = DEFAULT_LOSSES
    ground_coverage_ratio: float = 0.4
    bifacial: bool = False
    albedo: float = 0.2
    total_loss_percent: float = field(init=False)

    def __post_init__(self) -> None:
        if not 0.0 <= self.tilt <= 90.0:
            raise ValueError("tilt must be in [0, 90]")
        if not -180.0 <= self.azimuth <= 180.0:
            raise ValueError("azimuth must be in [-180, 180]")
        if self.dc_ac_ratio < 1.0:
            raise ValueError("dc_ac_ratio must be >= 1.0")
        if not 0.0 < self.inverter_efficiency <= 100.0:
            raise ValueError("inverter_efficiency must be in (0, 100]")
        if not 0.0 < self.ground_coverage_ratio <= 1.0:
            raise ValueError("ground_coverage_ratio must be in (0, 1]")
        if not 0.0 <= self.albedo <= 1.0:
            raise ValueError("albedo must be in [0, 1]")

        object.__setattr__(self, "total_loss_percent", total_loss_percent(self.losses))

    def replace(self, **changes) -> PVSystemConfig:
        if "total_loss_percent" in changes:
            raise TypeError("total_loss_percent is derived from losses and cannot be set")
        return dataclasses.replace(self, **changes)

    def with_losses(self, losses: SystemLosses) -> PVSystemConfig:
        return self.replace(losses=losses)

    def with_loss(self, name: str, value: float) -> PVSystemConfig:
        if name not in LOSS_FIELDS:
            raise ValueError(f"unknown loss category {name!r}")
        return self.with_losses(dataclasses.replace(self.losses, **{name: value}))

    def reset_losses(self) -> PVSystemConfig:
        return self.with_losses(DEFAULT_LOSSES)


def default_config() -> PVSystemConfig:
    """The stock configuration: a north-facing roof array in Johannesburg."""
    return PVSystemConfig(
        location="johannesburg",
        module_type="standard",
        array_type="fixed_roof",
        tilt=26.0,
        azimuth=0.0,
    )
