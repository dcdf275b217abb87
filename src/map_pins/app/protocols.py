from collections.abc import Callable, Sequence
from typing import Any, Literal, Protocol, runtime_checkable

from map_pins.domain.entities.geography import LatLng
from map_pins.domain.entities.marker import Marker
from map_pins.domain.entities.route import RouteResult, RouteSummary

OverlayHandle = Any  # opaque to everything except the MapView that issued it
RouteHandle = Any
CallKind = Literal["geolocate", "resolve_name", "route"]


# ------------- External collaborators --------------------
@runtime_checkable
class GeoNameResolver(Protocol):
    """
    Responsibilities:
      • Turn coordinates into a human-readable place label.
      • Return a deterministic fallback label when the lookup has no answer.
    May raise NameResolutionFailure on transport errors.
    """

    def resolve(self, lat: float, lng: float) -> str: ...


@runtime_checkable
class RouteEngine(Protocol):
    """
    Responsibilities:
      • Compute a path between two coordinates plus its total distance/time.
    Raises RoutingFailure when no route can be produced.
    """

    def route(self, origin: LatLng, target: LatLng) -> RouteResult: ...


@runtime_checkable
class Geolocator(Protocol):
    """Raises GeolocationUnavailable when the position cannot be determined."""

    def locate(self) -> LatLng: ...


@runtime_checkable
class KeyValueStore(Protocol):
    """
    Durable string storage. `set`/`delete` raise PersistenceFailure when the
    write does not go through.
    """

    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...
    def delete(self, key: str) -> None: ...


@runtime_checkable
class LatencyModel(Protocol):
    """
    Decide after how many session seconds the completion of an external call
    is delivered. `elapsed_s` is the measured wall-clock duration of the call.
    """

    def delay_s(
        self, call: CallKind, *, elapsed_s: float, target: LatLng | None = None
    ) -> float: ...


# ------------- Produced surface --------------------
@runtime_checkable
class UserPrompt(Protocol):
    def confirm(self, message: str) -> bool: ...
    def notify(self, message: str) -> None: ...


@runtime_checkable
class MapView(Protocol):
    """
    The map widget plus the panels around it (saved-marker list, route guide).
    Handles returned by add_overlay/draw_route are only ever passed back to the
    same view.
    """

    def add_overlay(self, marker: Marker, on_click: Callable[[], None]) -> OverlayHandle: ...
    def remove_overlay(self, handle: OverlayHandle) -> None: ...
    def open_popup(self, handle: OverlayHandle) -> None: ...
    def set_view(self, center: LatLng, zoom: int) -> None: ...
    def show_user_location(self, position: LatLng, label: str) -> None: ...
    def draw_route(self, path: Sequence[LatLng]) -> RouteHandle: ...
    def remove_route(self, handle: RouteHandle) -> None: ...
    def show_marker_list(self, markers: Sequence[Marker], highlighted: str | None) -> None: ...
    def show_route_summary(self, summary: RouteSummary | None) -> None: ...
