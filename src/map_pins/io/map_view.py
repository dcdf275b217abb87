# map_pins/io/map_view.py
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from itertools import count

from map_pins.app.protocols import MapView
from map_pins.domain.entities.geography import LatLng, MarkerKey
from map_pins.domain.entities.marker import Marker
from map_pins.domain.entities.route import RouteSummary


@dataclass
class OverlayRecord:
    id: int
    marker: Marker
    popup: str
    on_click: Callable[[], None] = field(repr=False)
    popup_open: bool = False


class HeadlessMapView(MapView):
    """
    In-memory map surface. Keeps what a real widget would show so a session
    can run without a display: overlays, route lines, list and summary panel.
    """

    def __init__(self):
        self._ids = count(1)
        self.overlays: dict[int, OverlayRecord] = {}
        self.routes: dict[int, list[LatLng]] = {}
        self.center: LatLng | None = None
        self.zoom: int | None = None
        self.user_marker: tuple[LatLng, str] | None = None
        self.list_items: list[str] = []
        self.highlighted: str | None = None
        self.summary: RouteSummary | None = None
        # lifetime counters
        self.created = 0
        self.destroyed = 0

    # ------------- overlays --------------------

    def add_overlay(self, marker: Marker, on_click: Callable[[], None]) -> int:
        oid = next(self._ids)
        self.overlays[oid] = OverlayRecord(oid, marker, marker.popup_html(), on_click)
        self.created += 1
        return oid

    def remove_overlay(self, handle: int) -> None:
        if self.overlays.pop(handle, None) is None:
            raise KeyError(f"unknown overlay handle {handle}")
        self.destroyed += 1

    def open_popup(self, handle: int) -> None:
        for rec in self.overlays.values():
            rec.popup_open = rec.id == handle

    def overlay_at(self, key: MarkerKey) -> OverlayRecord | None:
        return next((r for r in self.overlays.values() if r.marker.key == key), None)

    def click_overlay(self, key: MarkerKey) -> None:
        rec = self.overlay_at(key)
        if rec is None:
            raise KeyError(f"no overlay at {key}")
        rec.on_click()

    # ------------- viewport --------------------

    def set_view(self, center: LatLng, zoom: int) -> None:
        self.center, self.zoom = center, zoom

    def show_user_location(self, position: LatLng, label: str) -> None:
        self.user_marker = (position, label)

    # ------------- route --------------------

    def draw_route(self, path: Sequence[LatLng]) -> int:
        rid = next(self._ids)
        self.routes[rid] = list(path)
        return rid

    def remove_route(self, handle: int) -> None:
        self.routes.pop(handle, None)

    def show_route_summary(self, summary: RouteSummary | None) -> None:
        self.summary = summary

    # ------------- list --------------------

    def show_marker_list(self, markers: Sequence[Marker], highlighted: str | None) -> None:
        self.list_items = [m.list_label() for m in markers]
        self.highlighted = highlighted
