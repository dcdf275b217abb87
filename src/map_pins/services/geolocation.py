# map_pins/services/geolocation.py
from map_pins.app.protocols import Geolocator
from map_pins.domain.entities.geography import LatLng
from map_pins.domain.errors import GeolocationUnavailable


class FixedGeolocator(Geolocator):
    def __init__(self, lat: float, lng: float):
        self.position = LatLng(lat, lng)

    def locate(self) -> LatLng:
        return self.position


class UnavailableGeolocator(Geolocator):
    """Stands in for a denied or unsupported position request."""

    def __init__(self, reason: str = "geolocation unavailable"):
        self.reason = reason

    def locate(self) -> LatLng:
        raise GeolocationUnavailable(self.reason)
