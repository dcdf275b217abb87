# tests/sim/test_session_clock.py
from datetime import UTC, datetime

from map_pins.sim.clock import MIN, SessionClock


def test_to_wall_and_back():
    clock = SessionClock.utc_epoch(2025, 1, 1, 8, 0, 0)
    wall = clock.to_wall(90 * MIN)
    assert wall == datetime(2025, 1, 1, 9, 30, 0, tzinfo=UTC)
    assert clock.to_session(wall) == 90 * MIN


def test_naive_datetimes_are_read_as_utc():
    clock = SessionClock.utc_epoch(2025, 1, 1)
    assert clock.to_session(datetime(2025, 1, 1, 0, 1, 0)) == 60.0


def test_start_now_is_tz_aware():
    assert SessionClock.start_now().epoch.tzinfo is not None
