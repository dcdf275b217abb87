# sim/clock.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

MIN = 60.0


@dataclass(frozen=True)
class SessionClock:
    """Maps session seconds (kernel time) to wall time."""

    epoch: datetime  # wall time of t=0, tz-aware

    @classmethod
    def start_now(cls) -> SessionClock:
        return cls(datetime.now(UTC))

    @classmethod
    def utc_epoch(cls, y: int, m: int, d: int, hh=0, mm=0, ss=0) -> SessionClock:
        return cls(datetime(y, m, d, hh, mm, ss, tzinfo=UTC))

    def to_wall(self, t: float) -> datetime:
        return self.epoch + timedelta(seconds=t)

    def to_session(self, dt: datetime) -> float:
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)
        return (dt - self.epoch).total_seconds()
