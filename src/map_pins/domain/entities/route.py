# domain/entities/route.py
import math
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from map_pins.domain.entities.geography import LatLng


@dataclass
class RouteResult:
    """What a RouteEngine hands back for one origin/target pair."""

    path: list[LatLng]
    total_distance_m: float
    total_time_s: float


@dataclass(frozen=True)
class RouteSummary:
    target_name: str
    distance_km: str  # one decimal, e.g. "12.3"
    eta_minutes: str  # whole minutes, e.g. "15"
    target: LatLng | None = field(default=None, compare=False)

    @classmethod
    def from_result(cls, label: str, result: RouteResult, target: LatLng | None = None):
        # both round half-up, like toFixed/Math.round in map UIs
        km = Decimal(result.total_distance_m / 1000).quantize(Decimal("0.1"), ROUND_HALF_UP)
        minutes = math.floor(result.total_time_s / 60 + 0.5)
        return cls(
            target_name=label,
            distance_km=str(km),
            eta_minutes=str(int(minutes)),
            target=target,
        )

    @property
    def distance_text(self) -> str:
        return f"{self.distance_km} km"

    @property
    def time_text(self) -> str:
        return f"{self.eta_minutes} min"
