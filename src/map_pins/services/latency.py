# map_pins/services/latency.py
from map_pins.app.protocols import CallKind, LatencyModel
from map_pins.domain.entities.geography import LatLng


class FixedLatency(LatencyModel):
    """Deterministic delays per call kind; handy for replays and tests."""

    def __init__(self, seconds: dict[str, float] | None = None, default_s: float = 0.0):
        self.seconds = dict(seconds or {})
        self.default_s = default_s

    def delay_s(self, call: CallKind, *, elapsed_s: float, target: LatLng | None = None) -> float:
        return self.seconds.get(call, self.default_s)


class MeasuredLatency(LatencyModel):
    """Deliver completions after the wall-clock time the call actually took."""

    def delay_s(self, call: CallKind, *, elapsed_s: float, target: LatLng | None = None) -> float:
        return max(0.0, elapsed_s)
