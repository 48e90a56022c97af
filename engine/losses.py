"""System loss composition.

Losses are independent derating factors, so they combine multiplicatively
(the PVWatts convention) rather than by summation:

    retained = Π (1 − p_i / 100)
    total    = (1 − retained) × 100

Two 10 % losses therefore give 19 %, not 20 %.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Iterable, NamedTuple


@dataclass(frozen=True)
class SystemLosses:
    """The ten named loss categories, each a percentage in [0, 100)."""

    soiling: float = 0.0
    shading: float = 0.0
    snow: float = 0.0
    mismatch: float = 0.0
    wiring: float = 0.0
    connections: float = 0.0
    light_induced_degradation: float = 0.0
    nameplate_rating: float = 0.0
    age: float = 0.0
    availability: float = 0.0

    def __post_init__(self) -> None:
        for name in LOSS_FIELDS:
            value = getattr(self, name)
            if not 0.0 <= value < 100.0:
                raise ValueError(f"{name} loss must be in [0, 100), got {value}")

    def values(self) -> list[float]:
        return [getattr(self, name) for name in LOSS_FIELDS]

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


# Composition order; also the order of the loss waterfall.
LOSS_FIELDS: tuple[str, ...] = (
    "soiling",
    "shading",
    "snow",
    "mismatch",
    "wiring",
    "connections",
    "light_induced_degradation",
    "nameplate_rating",
    "age",
    "availability",
)

DEFAULT_LOSSES = SystemLosses(
    soiling=2.0,
    shading=3.0,
    snow=0.0,
    mismatch=2.0,
    wiring=2.0,
    connections=0.5,
    light_induced_degradation=1.5,
    nameplate_rating=1.0,
    age=0.0,
    availability=3.0,
)


class LossStage(NamedTuple):
    name: str
    percent: float
    retained_after: float


def compose_losses(percentages: Iterable[float]) -> float:
    """Fold loss percentages into one combined loss percentage.

    A single loss of 100 % or more zeroes the retained fraction; it never
    goes negative.
    """
    retained = 1.0
    for p in percentages:
        retained *= max(0.0, 1.0 - p / 100.0)
    return (1.0 - retained) * 100.0


def total_loss_percent(losses: SystemLosses) -> float:
    return compose_losses(losses.values())


def loss_breakdown(losses: SystemLosses) -> list[LossStage]:
    """Return the cumulative retained fraction after each loss category."""
    stages: list[LossStage] = []
    retained = 1.0
    for name in LOSS_FIELDS:
        percent = getattr(losses, name)
        retained *= max(0.0, 1.0 - percent / 100.0)
        stages.append(LossStage(name, percent, retained))
    return stages
