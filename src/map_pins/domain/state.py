# map_pins/domain/state.py
from dataclasses import dataclass, field

from map_pins.domain.entities.geography import LatLng, MarkerKey


@dataclass
class SessionState:
    """Mutable per-session facts that belong to no single component."""

    default_center: LatLng
    default_zoom: int = 10
    located_zoom: int = 13
    user_location: LatLng | None = None
    location_error: str | None = None
    # keys confirmed by the user whose name lookup has not come back yet
    pending_adds: set[MarkerKey] = field(default_factory=set)

    @property
    def located(self) -> bool:
        return self.user_location is not None
