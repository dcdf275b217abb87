# sim/kernel.py

import heapq
import time
from collections.abc import Callable, Iterable

from .event import BaseEvent
from .hooks import KernelHooks, NoopHooks

Handler = Callable[[BaseEvent], Iterable[BaseEvent] | None]


class Kernel:
    """
    Cooperative event loop driving one map session.

    Events are ordered by (t, insertion order). A handler runs to completion
    before the next event is popped, so state mutated inside a handler is never
    observed half-done. Handlers hand back follow-up events instead of calling
    each other; completions of external calls arrive this way.
    """

    def __init__(self, hooks: KernelHooks | None = None):
        self._t = 0.0
        self._q: list[tuple[float, int, BaseEvent]] = []
        self._seq = 0
        self._subs: dict[type[BaseEvent], list[Handler]] = {}
        self._hooks = hooks or NoopHooks()

    @property
    def now(self) -> float:
        return self._t

    @property
    def pending(self) -> int:
        return len(self._q)

    def on(self, etype: type[BaseEvent], handler: Handler) -> None:
        self._subs.setdefault(etype, []).append(handler)

    def schedule(self, ev: BaseEvent) -> None:
        if ev.t + 1e-9 < self._t:
            self._hooks.error(ev, reason="scheduled_past", now=self._t)
            raise RuntimeError(f"event scheduled in the past: {ev.t} < now {self._t}")
        self._seq += 1
        heapq.heappush(self._q, (ev.t, self._seq, ev))
        self._hooks.schedule(ev, now=self._t, qsize=len(self._q))

    def _dispatch(self, ev: BaseEvent) -> int:
        handlers = self._subs.get(type(ev), ())
        t1 = time.perf_counter()
        self._hooks.dispatch_start(ev, seq=self._seq, qsize=len(self._q), handlers=len(handlers))
        produced = 0
        for h in handlers:
            try:
                out = h(ev) or ()
            except Exception as exc:
                self._hooks.error(ev, reason="handler_failed", handler=_name(h), error=str(exc))
                raise
            for nxt in out:
                self.schedule(nxt)
                produced += 1
        ms = (time.perf_counter() - t1) * 1000
        self._hooks.dispatch_end(ev, produced=produced, ms=ms)
        return produced

    def run(self, until: float | None = None, max_events: int | None = None) -> int:
        """Dispatch queued events in order; returns how many were processed."""
        t0 = time.perf_counter()
        self._hooks.run_start(until=until, qsize=len(self._q))
        processed = 0
        while self._q and (until is None or self._q[0][0] <= until):
            t, _, ev = heapq.heappop(self._q)
            self._t = max(self._t, t)
            self._dispatch(ev)
            processed += 1
            if max_events and processed >= max_events:
                break
        if until is not None and until > self._t and (max_events is None or processed < max_events):
            self._t = until
        self._hooks.run_end(
            processed=processed,
            last_t=self._t,
            qsize=len(self._q),
            wall_ms=(time.perf_counter() - t0) * 1000,
        )
        return processed


def _name(h: Handler) -> str:
    return getattr(h, "__qualname__", type(h).__name__)
