# app/events.py
from dataclasses import dataclass, field

from map_pins.domain.entities.geography import LatLng, MarkerKey
from map_pins.domain.entities.route import RouteResult
from map_pins.sim.event import BaseEvent


# Session lifecycle
@dataclass(order=True)
class SessionStarted(BaseEvent):
    pass


@dataclass(order=True)
class LocationFound(BaseEvent):
    lat: float
    lng: float


@dataclass(order=True)
class LocationUnavailable(BaseEvent):
    reason: str


# User input
@dataclass(order=True)
class MapClicked(BaseEvent):
    lat: float
    lng: float


@dataclass(order=True)
class ListItemClicked(BaseEvent):
    lat: float
    lng: float

    @property
    def key(self) -> MarkerKey:
        return (self.lat, self.lng)


@dataclass(order=True)
class OverlayClicked(BaseEvent):
    lat: float
    lng: float

    @property
    def key(self) -> MarkerKey:
        return (self.lat, self.lng)


@dataclass(order=True)
class DeleteClicked(BaseEvent):
    lat: float
    lng: float

    @property
    def key(self) -> MarkerKey:
        return (self.lat, self.lng)


# External-call completions
@dataclass(order=True)
class NameResolved(BaseEvent):
    lat: float
    lng: float
    name: str
    fallback: bool = False  # True when the lookup failed and the sentinel was used


@dataclass(order=True)
class RouteFound(BaseEvent):
    request_id: int  # versioning to make stale completions harmless
    label: str
    target: LatLng = field(compare=False)
    result: RouteResult = field(compare=False)


@dataclass(order=True)
class RoutingError(BaseEvent):
    request_id: int
    label: str
    reason: str | None = None
