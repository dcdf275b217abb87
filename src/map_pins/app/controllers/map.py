# map_pins/app/controllers/map.py
import logging
import time
from collections.abc import Callable

from map_pins.app.controllers.routes import RouteSession
from map_pins.app.events import (
    DeleteClicked,
    ListItemClicked,
    LocationFound,
    LocationUnavailable,
    MapClicked,
    NameResolved,
    OverlayClicked,
    SessionStarted,
)
from map_pins.app.protocols import GeoNameResolver, Geolocator, LatencyModel, MapView, UserPrompt
from map_pins.domain.entities.geography import LatLng, MarkerKey
from map_pins.domain.entities.marker import Marker
from map_pins.domain.errors import (
    DuplicateMarker,
    GeolocationUnavailable,
    NameResolutionFailure,
    PersistenceFailure,
)
from map_pins.domain.overlays import MarkerOverlayIndex
from map_pins.domain.state import SessionState
from map_pins.domain.store import MarkerStore
from map_pins.io.business_events import MarkerDeletedBiz, MarkerSavedBiz
from map_pins.io.recorder import Recorder
from map_pins.services.geocoding import FALLBACK_LABEL

log = logging.getLogger(__name__)

USER_MARKER_LABEL = "You are here!"
DUPLICATE_NOTICE = "This marker already exists!"
WAIT_FOR_LOCATION_NOTICE = "Please wait for your location to be detected"
SAVE_FAILED_NOTICE = "Could not save this marker"
DELETE_FAILED_NOTICE = "Could not delete this marker"


class MapController:
    """
    Turns raw user input into store mutations, overlay reconciliation and
    route requests. All failures stop here: they become a notice or a log line.
    """

    def __init__(
        self,
        state: SessionState,
        store: MarkerStore,
        overlays: MarkerOverlayIndex,
        routes: RouteSession,
        resolver: GeoNameResolver,
        geolocator: Geolocator,
        view: MapView,
        prompt: UserPrompt,
        latency: LatencyModel,
        activate: Callable[[Marker], None],
        recorder: Recorder | None = None,
        clear_route_on_delete: bool = False,
    ):
        self.state = state
        self.store = store
        self.overlays = overlays
        self.routes = routes
        self.resolver = resolver
        self.geolocator = geolocator
        self.view = view
        self.prompt = prompt
        self.latency = latency
        self.activate = activate  # overlay click callback, posts an OverlayClicked
        self.recorder = recorder
        self.clear_route_on_delete = clear_route_on_delete

    # ------------ helpers --------------

    def _sync(self) -> None:
        stats = self.overlays.reconcile(self.store.snapshot(), self.activate)
        if stats.created or stats.destroyed:
            log.debug(
                "overlays reconciled",
                extra={"extra": {"created": stats.created, "destroyed": stats.destroyed}},
            )
        self._refresh_list()

    def _refresh_list(self) -> None:
        highlighted = self.routes.summary.target_name if self.routes.summary else None
        self.view.show_marker_list(self.store.snapshot(), highlighted)

    def _biz(self, cls, t: float, name: str, **kw) -> None:
        if self.recorder:
            self.recorder.emit(cls(run_id=self.recorder.run_id, t=t, name=name, **kw))

    # ------------ startup --------------

    def on_session_started(self, ev: SessionStarted):
        markers = self.store.load()
        log.info("markers loaded", extra={"extra": {"count": len(markers)}})
        self.view.set_view(self.state.default_center, self.state.default_zoom)
        self._sync()

        t0 = time.perf_counter()
        try:
            pos = self.geolocator.locate()
        except GeolocationUnavailable as exc:
            delay = self.latency.delay_s("geolocate", elapsed_s=time.perf_counter() - t0)
            return [LocationUnavailable(t=ev.t + delay, reason=str(exc) or "unavailable")]
        delay = self.latency.delay_s("geolocate", elapsed_s=time.perf_counter() - t0)
        return [LocationFound(t=ev.t + delay, lat=pos.lat, lng=pos.lng)]

    def on_location_found(self, ev: LocationFound):
        pos = LatLng(ev.lat, ev.lng)
        self.state.user_location = pos
        self.state.location_error = None
        self.view.set_view(pos, self.state.located_zoom)
        self.view.show_user_location(pos, USER_MARKER_LABEL)
        return []

    def on_location_unavailable(self, ev: LocationUnavailable):
        # routing stays disabled; adding markers still works
        self.state.location_error = ev.reason
        log.warning("geolocation unavailable", extra={"extra": {"reason": ev.reason}})
        return []

    # ------------ add --------------

    def on_map_click(self, ev: MapClicked):
        key = (ev.lat, ev.lng)
        if self.store.contains(key) or key in self.state.pending_adds:
            self.prompt.notify(DUPLICATE_NOTICE)
            return []
        if not self.prompt.confirm(
            f"Do you want to save this marker at ({ev.lat:.6f}, {ev.lng:.6f})?"
        ):
            return []

        self.state.pending_adds.add(key)
        fallback = False
        t0 = time.perf_counter()
        try:
            name = self.resolver.resolve(ev.lat, ev.lng)
        except NameResolutionFailure as exc:
            log.warning(
                "name lookup failed",
                extra={"extra": {"lat": ev.lat, "lng": ev.lng, "error": str(exc)}},
            )
            name, fallback = FALLBACK_LABEL, True
        delay = self.latency.delay_s(
            "resolve_name", elapsed_s=time.perf_counter() - t0, target=LatLng(ev.lat, ev.lng)
        )
        return [NameResolved(t=ev.t + delay, lat=ev.lat, lng=ev.lng, name=name, fallback=fallback)]

    def on_name_resolved(self, ev: NameResolved):
        self.state.pending_adds.discard((ev.lat, ev.lng))
        marker = Marker(ev.lat, ev.lng, ev.name)
        try:
            self.store.add(marker)
        except DuplicateMarker:
            self.prompt.notify(DUPLICATE_NOTICE)
            return []
        except PersistenceFailure as exc:
            log.error(
                "marker not saved",
                extra={"extra": {"lat": ev.lat, "lng": ev.lng, "error": str(exc)}},
            )
            self.prompt.notify(SAVE_FAILED_NOTICE)
            return []

        self._sync()
        handle = self.overlays.handle_for(marker.key)
        if handle is not None:
            self.view.open_popup(handle)
        self._biz(
            MarkerSavedBiz,
            ev.t,
            "MarkerSaved",
            lat=ev.lat,
            lng=ev.lng,
            label=ev.name,
            fallback_label=ev.fallback,
        )
        return []

    # ------------ route --------------

    def _route_to(self, now: float, key: MarkerKey):
        marker = self.store.get(key)
        if marker is None:
            return []  # deleted since the click was queued
        if not self.state.located:
            self.prompt.notify(WAIT_FOR_LOCATION_NOTICE)
            return []
        out = self.routes.request(now, self.state.user_location, marker.position, marker.name)
        self._refresh_list()
        return out

    def on_list_item_click(self, ev: ListItemClicked):
        return self._route_to(ev.t, ev.key)

    def on_overlay_click(self, ev: OverlayClicked):
        return self._route_to(ev.t, ev.key)

    # ------------ delete --------------

    def on_delete_click(self, ev: DeleteClicked):
        marker = self.store.get(ev.key)
        if marker is None:
            return []
        if not self.prompt.confirm(f"Are you sure you want to delete the marker at {marker.name}?"):
            return []
        try:
            self.store.remove(ev.key)
        except PersistenceFailure as exc:
            log.error(
                "marker not deleted",
                extra={"extra": {"lat": ev.lat, "lng": ev.lng, "error": str(exc)}},
            )
            self.prompt.notify(DELETE_FAILED_NOTICE)
            return []
        self.overlays.remove_one(ev.key)

        if self.clear_route_on_delete and self.routes.target == marker.position:
            self.routes.clear()
        self._refresh_list()
        self._biz(
            MarkerDeletedBiz, ev.t, "MarkerDeleted", lat=ev.lat, lng=ev.lng, label=marker.name
        )
        return []

    # ------------ route panel --------------

    def on_route_settled(self, ev):
        # RouteFound / RoutingError: the highlighted list entry follows the summary panel
        self._refresh_list()
        return []
