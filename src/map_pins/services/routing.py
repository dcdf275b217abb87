# map_pins/services/routing.py
import logging

import numpy as np
import requests

from map_pins.app.protocols import RouteEngine
from map_pins.domain.entities.geography import LatLng
from map_pins.domain.entities.route import RouteResult
from map_pins.domain.errors import RoutingFailure

log = logging.getLogger(__name__)

EARTH_RADIUS_M = 6_371_000.0


# ------------- geodesy --------------------


def haversine_m(lat1, lng1, lat2, lng2):
    """Great-circle distance in meters; accepts scalars or numpy arrays."""
    p1, p2 = np.radians(lat1), np.radians(lat2)
    dp = p2 - p1
    dl = np.radians(np.asarray(lng2) - np.asarray(lng1))
    a = np.sin(dp / 2) ** 2 + np.cos(p1) * np.cos(p2) * np.sin(dl / 2) ** 2
    return 2 * EARTH_RADIUS_M * np.arcsin(np.sqrt(np.clip(a, 0.0, 1.0)))


def great_circle_path(a: LatLng, b: LatLng, samples: int) -> tuple[np.ndarray, np.ndarray]:
    """`samples` points (endpoints included) along the great circle from a to b."""
    lat1, lng1, lat2, lng2 = np.radians([a.lat, a.lng, b.lat, b.lng])
    d = haversine_m(a.lat, a.lng, b.lat, b.lng) / EARTH_RADIUS_M
    f = np.linspace(0.0, 1.0, samples)
    if d < 1e-12:
        return np.full(samples, a.lat), np.full(samples, a.lng)
    A = np.sin((1 - f) * d) / np.sin(d)
    B = np.sin(f * d) / np.sin(d)
    x = A * np.cos(lat1) * np.cos(lng1) + B * np.cos(lat2) * np.cos(lng2)
    y = A * np.cos(lat1) * np.sin(lng1) + B * np.cos(lat2) * np.sin(lng2)
    z = A * np.sin(lat1) + B * np.sin(lat2)
    lats = np.degrees(np.arctan2(z, np.hypot(x, y)))
    lngs = np.degrees(np.arctan2(y, x))
    # keep the exact endpoints so the line meets both pins
    lats[0], lngs[0], lats[-1], lngs[-1] = a.lat, a.lng, b.lat, b.lng
    return lats, lngs


# ------------- engines --------------------


class StraightLineRouteEngine(RouteEngine):
    """Offline engine: great-circle line at a constant travel speed."""

    def __init__(self, speed_mps: float = 13.9, samples: int = 32):
        if speed_mps <= 0:
            raise ValueError("speed_mps must be > 0")
        self.speed_mps = speed_mps
        self.samples = max(2, samples)

    def route(self, origin: LatLng, target: LatLng) -> RouteResult:
        lats, lngs = great_circle_path(origin, target, self.samples)
        legs = haversine_m(lats[:-1], lngs[:-1], lats[1:], lngs[1:])
        dist = float(np.sum(legs))
        path = [LatLng(float(la), float(lo)) for la, lo in zip(lats, lngs, strict=True)]
        return RouteResult(path=path, total_distance_m=dist, total_time_s=dist / self.speed_mps)


class OSRMRouteEngine(RouteEngine):
    """
    OSRM /route adapter.

    Converts internal (lat, lng) to OSRM's lon,lat ordering and back, and
    normalizes the first returned route into a RouteResult.
    """

    def __init__(
        self,
        base_url: str = "https://router.project-osrm.org",
        profile: str = "driving",
        timeout_s: float = 5.0,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.profile = profile
        self.timeout_s = timeout_s
        self.http = session or requests.Session()

    @staticmethod
    def format_coordinates(points: list[LatLng]) -> str:
        return ";".join(f"{p.lng},{p.lat}" for p in points)

    def route(self, origin: LatLng, target: LatLng) -> RouteResult:
        coords = self.format_coordinates([origin, target])
        url = f"{self.base_url}/route/v1/{self.profile}/{coords}"
        try:
            response = self.http.get(
                url,
                params={"overview": "full", "geometries": "geojson"},
                timeout=self.timeout_s,
            )
            data = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise RoutingFailure(f"OSRM request failed: {exc}") from exc

        if not isinstance(data, dict) or data.get("code") != "Ok":
            msg = data.get("message", "unknown error") if isinstance(data, dict) else "bad payload"
            raise RoutingFailure(f"OSRM error: {msg}")
        try:
            route = data["routes"][0]
            coordinates = route["geometry"]["coordinates"]
            path = [LatLng(float(lat), float(lon)) for lon, lat in coordinates]
            return RouteResult(
                path=path,
                total_distance_m=float(route["distance"]),
                total_time_s=float(route["duration"]),
            )
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise RoutingFailure(f"malformed OSRM route: {exc!r}") from exc
