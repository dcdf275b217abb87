# map_pins/io/recorder.py
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Protocol

log = logging.getLogger(__name__)


class Sink(Protocol):
    def write(self, ev) -> None: ...


class JsonlSink:
    """One JSON object per line, appended to `path` or written to `fp` (stderr by default)."""

    def __init__(self, fp=None, path: str | Path | None = None):
        self.fp = fp
        self.path = Path(path) if path else None

    def write(self, ev) -> None:
        line = json.dumps(asdict(ev)) + "\n"
        if self.path is not None:
            with self.path.open("a", encoding="utf-8") as f:
                f.write(line)
            return
        # stdout is reserved for command output
        (self.fp or sys.stderr).write(line)


class MemorySink:
    def __init__(self):
        self.events: list = []

    def write(self, ev) -> None:
        self.events.append(ev)

    def names(self) -> list[str]:
        return [ev.name for ev in self.events]


class Recorder:
    def __init__(self, *sinks: Sink, run_id: str = "local"):
        self.sinks = sinks or (JsonlSink(),)
        self.run_id = run_id

    def emit(self, ev):
        for s in self.sinks:
            try:
                s.write(ev)
            except Exception as exc:  # analytics must never break the session
                log.debug(
                    "sink write failed",
                    extra={"extra": {"sink": type(s).__name__, "error": str(exc)}},
                )
