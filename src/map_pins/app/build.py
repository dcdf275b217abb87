# map_pins/app/build.py
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field

from map_pins.app.controllers.map import MapController
from map_pins.app.controllers.routes import RouteSession
from map_pins.app.events import (
    DeleteClicked,
    ListItemClicked,
    MapClicked,
    OverlayClicked,
    SessionStarted,
)
from map_pins.app.protocols import (
    GeoNameResolver,
    Geolocator,
    KeyValueStore,
    LatencyModel,
    MapView,
    RouteEngine,
    UserPrompt,
)
from map_pins.app.wiring import wire
from map_pins.config.models import AppModel
from map_pins.domain.entities.geography import LatLng
from map_pins.domain.entities.marker import Marker
from map_pins.domain.overlays import MarkerOverlayIndex
from map_pins.domain.state import SessionState
from map_pins.domain.store import MarkerStore
from map_pins.io.map_view import HeadlessMapView
from map_pins.io.prompt import ScriptedPrompt
from map_pins.io.recorder import JsonlSink, MemorySink, Recorder
from map_pins.io.session_logging import SessionLogging
from map_pins.runtime.registries import (
    make_geolocator,
    make_latency,
    make_resolver,
    make_route_engine,
    make_store,
)
from map_pins.sim.clock import SessionClock
from map_pins.sim.event import BaseEvent
from map_pins.sim.hooks import NoopHooks
from map_pins.sim.kernel import Kernel


@dataclass
class MapSession:
    """
    Everything one map view needs, built once and handed around explicitly.

    The public entry points serialize on a re-entrant lock so a UI thread and a
    worker thread can both feed events without interleaving a dispatch.
    """

    kernel: Kernel
    clock: SessionClock
    state: SessionState
    store: MarkerStore
    overlays: MarkerOverlayIndex
    routes: RouteSession
    controller: MapController
    view: MapView
    prompt: UserPrompt
    recorder: Recorder
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    @property
    def now(self) -> float:
        return self.kernel.now

    @property
    def user_location(self) -> LatLng | None:
        return self.state.user_location

    def markers(self) -> tuple[Marker, ...]:
        return self.store.snapshot()

    def submit(self, ev: BaseEvent) -> None:
        with self._lock:
            self.kernel.schedule(ev)

    def settle(self, until: float | None = None) -> int:
        """Dispatch queued events (all of them by default)."""
        with self._lock:
            return self.kernel.run(until=until)

    # ------------ interactive helpers --------------

    def _at(self, at: float | None) -> float:
        return self.kernel.now if at is None else at

    def start(self, at: float | None = None) -> int:
        # completions due later (e.g. geolocation) stay queued for the next settle()
        t = self._at(at)
        self.submit(SessionStarted(t=t))
        return self.settle(until=t)

    def click_map(self, lat: float, lng: float, at: float | None = None) -> int:
        self.submit(MapClicked(t=self._at(at), lat=lat, lng=lng))
        return self.settle()

    def click_list_item(self, lat: float, lng: float, at: float | None = None) -> int:
        self.submit(ListItemClicked(t=self._at(at), lat=lat, lng=lng))
        return self.settle()

    def click_delete(self, lat: float, lng: float, at: float | None = None) -> int:
        self.submit(DeleteClicked(t=self._at(at), lat=lat, lng=lng))
        return self.settle()

    def click_overlay(self, lat: float, lng: float) -> int:
        # needs a view that can simulate clicks, e.g. HeadlessMapView
        self.view.click_overlay((lat, lng))
        return self.settle()


def build(
    cfg: AppModel | Mapping | None = None,
    *,
    view: MapView | None = None,
    prompt: UserPrompt | None = None,
    backend: KeyValueStore | None = None,
    resolver: GeoNameResolver | None = None,
    engine: RouteEngine | None = None,
    geolocator: Geolocator | None = None,
    latency: LatencyModel | None = None,
    clock: SessionClock | None = None,
    recorder: Recorder | None = None,
    use_logging: bool = True,
) -> MapSession:
    """Assemble a session from config; keyword overrides replace the configured collaborator."""
    # 0) Validate config
    model = cfg if isinstance(cfg, AppModel) else AppModel.model_validate(cfg or {})

    # 1) Clock & kernel (with hooks)
    clock = clock or SessionClock.start_now()
    hooks = (
        SessionLogging(
            run_id=model.session.run_id,
            clock=clock,
            level=model.log.level,
            debug=model.log.debug,
        )
        if use_logging
        else NoopHooks()
    )
    kernel = Kernel(hooks=hooks)

    if recorder is None:
        if model.log.business_events:
            sinks = [JsonlSink(path=model.log.business_events_path)]
        else:
            sinks = [MemorySink()]
        recorder = Recorder(*sinks, run_id=model.session.run_id)

    # 2) Collaborators (config unless injected)
    view = view or HeadlessMapView()
    prompt = prompt or ScriptedPrompt()
    backend = backend or make_store(model.store)
    resolver = resolver or make_resolver(model.resolver)
    engine = engine or make_route_engine(model.route_engine)
    geolocator = geolocator or make_geolocator(model.geolocator)
    latency = latency or make_latency(model.latency)

    # 3) State & components
    state = SessionState(
        default_center=LatLng(*model.session.default_center),
        default_zoom=model.session.default_zoom,
        located_zoom=model.session.located_zoom,
    )
    store = MarkerStore(backend, key=model.session.storage_key)
    overlays = MarkerOverlayIndex(view)
    routes = RouteSession(engine, view, prompt, latency, recorder=recorder)

    lock = threading.RLock()

    def activate(marker: Marker) -> None:
        # called by the view outside dispatch; queued for the next settle()
        with lock:
            kernel.schedule(OverlayClicked(t=kernel.now, lat=marker.lat, lng=marker.lng))

    controller = MapController(
        state=state,
        store=store,
        overlays=overlays,
        routes=routes,
        resolver=resolver,
        geolocator=geolocator,
        view=view,
        prompt=prompt,
        latency=latency,
        activate=activate,
        recorder=recorder,
        clear_route_on_delete=model.session.clear_route_on_delete,
    )

    # 4) Wiring
    wire(kernel, controller=controller, routes=routes)

    return MapSession(
        kernel=kernel,
        clock=clock,
        state=state,
        store=store,
        overlays=overlays,
        routes=routes,
        controller=controller,
        view=view,
        prompt=prompt,
        recorder=recorder,
        _lock=lock,
    )
