# tests/app/test_map_controller.py
import json

from map_pins.app.build import build
from map_pins.app.controllers.map import (
    DELETE_FAILED_NOTICE,
    DUPLICATE_NOTICE,
    SAVE_FAILED_NOTICE,
    USER_MARKER_LABEL,
    WAIT_FOR_LOCATION_NOTICE,
)
from map_pins.app.events import MapClicked
from map_pins.domain.entities.geography import LatLng
from map_pins.domain.entities.marker import Marker
from map_pins.domain.errors import NameResolutionFailure, PersistenceFailure
from map_pins.domain.store import STORAGE_KEY
from map_pins.io.map_view import HeadlessMapView
from map_pins.io.prompt import ScriptedPrompt
from map_pins.services.geocoding import FALLBACK_LABEL, StaticNameResolver
from map_pins.services.geolocation import FixedGeolocator, UnavailableGeolocator
from map_pins.services.latency import FixedLatency
from map_pins.services.storage import MemoryStore

HOME = LatLng(10.3157, 123.8854)
CARCAR = Marker(10.0, 123.0, "Carcar City")
MOALBOAL = Marker(9.9482, 123.3956, "Moalboal")
LABELS = [(CARCAR.lat, CARCAR.lng, CARCAR.name), (MOALBOAL.lat, MOALBOAL.lng, MOALBOAL.name)]


# ---------- fakes ----------


class FailingStore(MemoryStore):
    def __init__(self, initial=None):
        super().__init__(initial)
        self.broken = False

    def set(self, key, value):
        if self.broken:
            raise PersistenceFailure("quota exceeded")
        super().set(key, value)


class DownResolver:
    def resolve(self, lat, lng):
        raise NameResolutionFailure("network down")


# ---------- builder ----------


def build_session(
    *, answers=(), located=True, resolver=None, backend=None, latency=None, session_cfg=None
):
    view = HeadlessMapView()
    prompt = ScriptedPrompt(answers)
    backend = backend if backend is not None else MemoryStore()
    session = build(
        {"session": session_cfg or {}},
        view=view,
        prompt=prompt,
        backend=backend,
        resolver=resolver or StaticNameResolver(LABELS),
        geolocator=FixedGeolocator(HOME.lat, HOME.lng) if located else UnavailableGeolocator(),
        latency=latency or FixedLatency(),
        use_logging=False,
    )
    session.start()
    return session, view, prompt, backend


def biz_names(session):
    return session.recorder.sinks[0].names()


# ---------- startup ----------


def test_startup_centers_on_user():
    session, view, prompt, _ = build_session()
    assert session.user_location == HOME
    assert (view.center, view.zoom) == (HOME, 13)
    assert view.user_marker == (HOME, USER_MARKER_LABEL)
    assert view.list_items == []


def test_startup_without_position_keeps_default_view():
    session, view, prompt, _ = build_session(located=False)
    assert session.user_location is None
    assert (view.center, view.zoom) == (LatLng(10.3157, 123.8854), 10)
    assert view.user_marker is None
    assert session.state.location_error == "geolocation unavailable"


def test_saved_markers_are_drawn_at_startup():
    backend = MemoryStore({STORAGE_KEY: json.dumps([CARCAR.to_record(), MOALBOAL.to_record()])})
    session, view, prompt, _ = build_session(backend=backend)
    assert session.markers() == (CARCAR, MOALBOAL)
    assert session.overlays.keys() == {CARCAR.key, MOALBOAL.key}
    assert view.list_items == [
        "Carcar City (Lat: 10.0000, Lng: 123.0000)",
        "Moalboal (Lat: 9.9482, Lng: 123.3956)",
    ]


# ---------- add / duplicate / delete ----------


def test_add_duplicate_delete_scenario():
    session, view, prompt, backend = build_session()

    session.click_map(10.0, 123.0)
    assert prompt.asked == ["Do you want to save this marker at (10.000000, 123.000000)?"]
    assert session.markers() == (CARCAR,)
    rec = view.overlay_at(CARCAR.key)
    assert rec.popup == "<b>Carcar City</b><br>(10.000000, 123.000000)"
    assert rec.popup_open
    assert view.list_items == ["Carcar City (Lat: 10.0000, Lng: 123.0000)"]

    session.click_map(10.0, 123.0)
    assert prompt.notices == [DUPLICATE_NOTICE]
    assert len(prompt.asked) == 1  # no second confirmation
    assert len(session.markers()) == 1

    session.click_delete(10.0, 123.0)
    assert prompt.asked[-1] == "Are you sure you want to delete the marker at Carcar City?"
    assert session.markers() == ()
    assert len(session.overlays) == 0
    assert view.overlays == {}
    assert view.list_items == []
    assert json.loads(backend.data[STORAGE_KEY]) == []
    assert biz_names(session) == ["MarkerSaved", "MarkerDeleted"]


def test_declined_add_changes_nothing():
    session, view, prompt, backend = build_session(answers=[False])
    session.click_map(10.0, 123.0)
    assert session.markers() == ()
    assert view.overlays == {}
    assert STORAGE_KEY not in backend.data


def test_declined_delete_keeps_marker():
    session, view, prompt, backend = build_session(answers=[True, False])
    session.click_map(10.0, 123.0)
    session.click_delete(10.0, 123.0)
    assert session.markers() == (CARCAR,)
    assert CARCAR.key in session.overlays


def test_name_lookup_failure_uses_fallback_label():
    session, view, prompt, _ = build_session(resolver=DownResolver())
    session.click_map(10.0, 123.0)
    assert session.markers() == (Marker(10.0, 123.0, FALLBACK_LABEL),)
    saved = session.recorder.sinks[0].events[0]
    assert saved.fallback_label is True


def test_adding_works_without_position():
    session, view, prompt, _ = build_session(located=False)
    session.click_map(10.0, 123.0)
    assert session.markers() == (CARCAR,)


def test_double_click_while_lookup_in_flight():
    session, view, prompt, _ = build_session(latency=FixedLatency({"resolve_name": 2.0}))
    t = session.now
    session.submit(MapClicked(t=t, lat=10.0, lng=123.0))
    session.submit(MapClicked(t=t + 0.5, lat=10.0, lng=123.0))
    session.settle()
    assert prompt.notices == [DUPLICATE_NOTICE]
    assert len(prompt.asked) == 1
    assert session.markers() == (CARCAR,)
    assert session.state.pending_adds == set()


def test_failed_save_is_reported():
    backend = FailingStore()
    backend.broken = True
    session, view, prompt, _ = build_session(backend=backend)
    session.click_map(10.0, 123.0)
    assert prompt.notices == [SAVE_FAILED_NOTICE]
    assert session.markers() == ()
    assert view.overlays == {}

    # the key is free again once the failed attempt settled
    backend.broken = False
    session.click_map(10.0, 123.0)
    assert session.markers() == (CARCAR,)


def test_failed_delete_keeps_marker_and_overlay():
    backend = FailingStore()
    session, view, prompt, _ = build_session(backend=backend)
    session.click_map(10.0, 123.0)
    backend.broken = True
    session.click_delete(10.0, 123.0)
    assert prompt.notices == [DELETE_FAILED_NOTICE]
    assert session.markers() == (CARCAR,)
    assert view.overlay_at(CARCAR.key) is not None


def test_delete_of_unknown_marker_is_a_no_op():
    session, view, prompt, _ = build_session()
    session.click_delete(1.0, 2.0)
    assert prompt.asked == []
    assert prompt.notices == []


# ---------- routing ----------


def test_list_click_routes_and_highlights():
    session, view, prompt, _ = build_session()
    session.click_map(10.0, 123.0)
    session.click_list_item(10.0, 123.0)

    assert view.summary.target_name == "Carcar City"
    assert view.summary.distance_text.endswith(" km")
    assert view.summary.time_text.endswith(" min")
    assert view.highlighted == "Carcar City"
    (path,) = view.routes.values()
    assert path[0] == HOME and path[-1] == CARCAR.position


def test_overlay_click_routes():
    session, view, prompt, _ = build_session()
    session.click_map(9.9482, 123.3956)
    session.click_overlay(9.9482, 123.3956)
    assert view.summary.target_name == "Moalboal"
    assert biz_names(session) == ["MarkerSaved", "RouteShown"]


def test_routing_needs_a_position():
    session, view, prompt, _ = build_session(located=False)
    session.click_map(10.0, 123.0)
    session.click_list_item(10.0, 123.0)
    session.click_overlay(10.0, 123.0)
    assert prompt.notices == [WAIT_FOR_LOCATION_NOTICE, WAIT_FOR_LOCATION_NOTICE]
    assert view.routes == {}
    assert view.summary is None


def test_switching_targets_keeps_a_single_route():
    session, view, prompt, _ = build_session()
    session.click_map(10.0, 123.0)
    session.click_map(9.9482, 123.3956)
    session.click_list_item(10.0, 123.0)
    session.click_list_item(9.9482, 123.3956)
    assert len(view.routes) == 1
    assert view.summary.target_name == "Moalboal"
    assert view.highlighted == "Moalboal"


def test_delete_keeps_displayed_route_by_default():
    session, view, prompt, _ = build_session()
    session.click_map(10.0, 123.0)
    session.click_list_item(10.0, 123.0)
    session.click_delete(10.0, 123.0)
    assert session.markers() == ()
    assert view.summary.target_name == "Carcar City"
    assert len(view.routes) == 1


def test_delete_can_clear_route_to_deleted_marker():
    session, view, prompt, _ = build_session(session_cfg={"clear_route_on_delete": True})
    session.click_map(10.0, 123.0)
    session.click_map(9.9482, 123.3956)
    session.click_list_item(10.0, 123.0)

    session.click_delete(9.9482, 123.3956)  # not the routed one
    assert view.summary.target_name == "Carcar City"

    session.click_delete(10.0, 123.0)
    assert view.summary is None
    assert view.routes == {}
    assert view.highlighted is None
