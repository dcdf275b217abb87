# map_pins/io/session_logging.py
import json
import logging
import sys
from dataclasses import fields, is_dataclass

from map_pins.sim.clock import SessionClock
from map_pins.sim.hooks import NoopHooks


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "msg": record.getMessage(),
            "logger": record.name,
        }
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            payload.update(extra)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(name="map_pins", level="INFO", stream=None) -> logging.Logger:
    """Attach the JSON handler to the package logger once; child loggers propagate to it."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        h = logging.StreamHandler(stream or sys.stderr)
        h.setFormatter(JsonFormatter())
        logger.addHandler(h)
    logger.setLevel(level)
    return logger


class SessionLogging(NoopHooks):
    """
    Kernel hooks that turn dispatch activity into structured log lines.
    User-facing events go out at INFO; queue mechanics only in debug mode.
    """

    USER_FACING = {
        "SessionStarted",
        "LocationFound",
        "LocationUnavailable",
        "MapClicked",
        "NameResolved",
        "ListItemClicked",
        "OverlayClicked",
        "DeleteClicked",
        "RouteFound",
        "RoutingError",
    }
    # bulky payloads that stay out of the log line
    SKIP_FIELDS = {"result"}

    def __init__(
        self,
        run_id: str = "local",
        clock: SessionClock | None = None,
        level: str = "INFO",
        debug: bool = False,
        logger: logging.Logger | None = None,
    ):
        self.run_id, self.clock, self.debug = run_id, clock, debug
        self.log = logger or configure_logging(level=level)
        self._processed = 0

    # --------------- Helpers -----------------------------

    def _emit(self, level: str, msg: str, **extra):
        payload = {"run_id": self.run_id}
        if self.clock and extra.get("t") is not None:
            payload["wall"] = self.clock.to_wall(extra["t"]).isoformat()
        self.log.log(getattr(logging, level), msg, extra={"extra": {**payload, **extra}})

    def _shape_event(self, ev) -> dict:
        base = {"t": getattr(ev, "t", None)}
        if is_dataclass(ev):
            for f in fields(ev):
                if f.name == "t" or f.name in self.SKIP_FIELDS:
                    continue
                base[f.name] = getattr(ev, f.name)
        return base

    # --------------------------------------------------------

    def run_start(self, *, until, qsize):
        if self.debug:
            self._emit("DEBUG", "run_start", until=until, qsize=qsize)

    def run_end(self, *, processed, **extra):
        if self.debug:
            self._emit("DEBUG", "run_end", processed=processed, **extra)

    def schedule(self, ev, *, now, qsize):
        if self.debug:
            payload = {**self._shape_event(ev), "event": type(ev).__name__}
            self._emit("DEBUG", "schedule", **payload, now=now, qsize=qsize)

    def dispatch_start(self, ev, *, seq, qsize, handlers):
        self._processed += 1
        name = type(ev).__name__
        level = "INFO" if name in self.USER_FACING else ("DEBUG" if self.debug else None)
        if level:
            self._emit(level, name, **self._shape_event(ev), seq=seq, handlers=handlers)

    def dispatch_end(self, ev, *, produced, ms):
        if self.debug:
            self._emit("DEBUG", "dispatch_done", event=type(ev).__name__, produced=produced, ms=ms)

    def error(self, ev, *, reason: str, **extra):
        payload = {**self._shape_event(ev), "event": type(ev).__name__, "reason": reason, **extra}
        self._emit("ERROR", "kernel_error", **payload)
