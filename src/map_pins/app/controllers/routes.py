# map_pins/app/controllers/routes.py
import logging
import time

from map_pins.app.events import RouteFound, RoutingError
from map_pins.app.protocols import LatencyModel, MapView, RouteEngine, RouteHandle, UserPrompt
from map_pins.domain.entities.geography import LatLng
from map_pins.domain.entities.route import RouteSummary
from map_pins.domain.errors import RoutingFailure
from map_pins.io.business_events import RouteFailedBiz, RouteShownBiz
from map_pins.io.recorder import Recorder

log = logging.getLogger(__name__)

ROUTE_FAILED_NOTICE = "Could not calculate route to this location"


class RouteSession:
    """
    Owns the single active route: its line on the map and its summary panel.

    Every request bumps request_id. Completions carry the id they were issued
    under and are dropped unless it is still the current one, so the most
    recent request always wins regardless of the order responses come back in.
    """

    def __init__(
        self,
        engine: RouteEngine,
        view: MapView,
        prompt: UserPrompt,
        latency: LatencyModel,
        recorder: Recorder | None = None,
    ):
        self.engine = engine
        self.view = view
        self.prompt = prompt
        self.latency = latency
        self.recorder = recorder
        self.request_id = 0
        self.summary: RouteSummary | None = None
        self._line: RouteHandle | None = None
        self._target: LatLng | None = None  # target of the current request

    @property
    def active(self) -> bool:
        return self.summary is not None

    @property
    def target(self) -> LatLng | None:
        return self._target

    def clear(self) -> None:
        """Remove whatever is displayed and invalidate in-flight requests."""
        self.request_id += 1
        self._target = None
        self._retract()

    def _retract(self) -> None:
        if self._line is not None:
            self.view.remove_route(self._line)
            self._line = None
        if self.summary is not None:
            self.summary = None
            self.view.show_route_summary(None)

    # ------------ requests --------------

    def request(self, now: float, origin: LatLng, target: LatLng, label: str):
        self._retract()
        self.request_id += 1
        self._target = target
        rid = self.request_id

        t0 = time.perf_counter()
        try:
            result = self.engine.route(origin, target)
        except RoutingFailure as exc:
            elapsed = time.perf_counter() - t0
            delay = self.latency.delay_s("route", elapsed_s=elapsed, target=target)
            return [RoutingError(t=now + delay, request_id=rid, label=label, reason=str(exc))]
        elapsed = time.perf_counter() - t0
        delay = self.latency.delay_s("route", elapsed_s=elapsed, target=target)
        return [
            RouteFound(t=now + delay, request_id=rid, label=label, target=target, result=result)
        ]

    # ------------ completions --------------

    def on_route_found(self, ev: RouteFound):
        if ev.request_id != self.request_id:
            log.debug("stale route dropped", extra={"extra": {"request_id": ev.request_id}})
            return []
        self._line = self.view.draw_route(ev.result.path)
        self.summary = RouteSummary.from_result(ev.label, ev.result, target=ev.target)
        self.view.show_route_summary(self.summary)
        if self.recorder:
            self.recorder.emit(
                RouteShownBiz(
                    run_id=self.recorder.run_id,
                    t=ev.t,
                    name="RouteShown",
                    request_id=ev.request_id,
                    label=ev.label,
                    distance_m=ev.result.total_distance_m,
                    time_s=ev.result.total_time_s,
                )
            )
        return []

    def on_routing_error(self, ev: RoutingError):
        if ev.request_id != self.request_id:
            log.debug("stale routing error dropped", extra={"extra": {"request_id": ev.request_id}})
            return []
        # the previous route was already retracted when this request was issued
        self._target = None
        log.warning("routing failed", extra={"extra": {"label": ev.label, "reason": ev.reason}})
        self.prompt.notify(ROUTE_FAILED_NOTICE)
        if self.recorder:
            self.recorder.emit(
                RouteFailedBiz(
                    run_id=self.recorder.run_id,
                    t=ev.t,
                    name="RouteFailed",
                    request_id=ev.request_id,
                    label=ev.label,
                    reason=ev.reason,
                )
            )
        return []
