# map_pins/services/geocoding.py
"""Reverse geocoding adapters: coordinates -> human-readable place label."""

import logging
from collections.abc import Iterable, Mapping

import requests

from map_pins.app.protocols import GeoNameResolver
from map_pins.domain.entities.geography import MarkerKey
from map_pins.domain.errors import NameResolutionFailure

log = logging.getLogger(__name__)

FALLBACK_LABEL = "Unknown Location"

# most specific first
_PLACE_FIELDS = ("town", "city", "village", "municipality")


def format_place_label(address: Mapping[str, str] | None) -> str:
    """
    Build a label like "Carcar, Cebu Philippines" from a Nominatim address block.

    Missing parts are skipped rather than left as empty separators.
    """
    if not address:
        return FALLBACK_LABEL
    place = next((address[f] for f in _PLACE_FIELDS if address.get(f)), FALLBACK_LABEL)
    parts = [place]
    municipality = address.get("municipality")
    if municipality and municipality != place:
        parts.append(municipality)
    region = " ".join(v for v in (address.get("state"), address.get("country")) if v)
    if region:
        parts.append(region)
    return ", ".join(parts)


class NominatimResolver(GeoNameResolver):
    def __init__(
        self,
        base_url: str = "https://nominatim.openstreetmap.org",
        timeout_s: float = 5.0,
        user_agent: str = "map-pins/0.1",
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self.user_agent = user_agent  # Nominatim rejects anonymous clients
        self.http = session or requests.Session()

    def resolve(self, lat: float, lng: float) -> str:
        try:
            response = self.http.get(
                f"{self.base_url}/reverse",
                params={"format": "json", "lat": lat, "lon": lng},
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout_s,
            )
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise NameResolutionFailure(f"reverse lookup failed: {exc}") from exc

        if not isinstance(data, dict):
            raise NameResolutionFailure(f"unexpected payload type {type(data).__name__}")
        address = data.get("address")
        if not isinstance(address, dict):
            # open sea, unmapped area, or an {"error": ...} body
            log.debug("no address in reverse lookup", extra={"extra": {"lat": lat, "lng": lng}})
            return FALLBACK_LABEL
        return format_place_label(address)


class StaticNameResolver(GeoNameResolver):
    """Labels from a fixed table; everything else gets the fallback."""

    def __init__(
        self,
        entries: Iterable[tuple[float, float, str]] = (),
        fallback: str = FALLBACK_LABEL,
    ):
        self.labels: dict[MarkerKey, str] = {(lat, lng): name for lat, lng, name in entries}
        self.fallback = fallback

    def resolve(self, lat: float, lng: float) -> str:
        return self.labels.get((lat, lng), self.fallback)
