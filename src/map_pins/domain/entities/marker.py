# domain/entities/marker.py
from dataclasses import dataclass

from map_pins.domain.entities.geography import LatLng, MarkerKey


@dataclass(frozen=True)
class Marker:
    lat: float
    lng: float
    name: str

    @property
    def key(self) -> MarkerKey:
        return (self.lat, self.lng)

    @property
    def position(self) -> LatLng:
        return LatLng(self.lat, self.lng)

    def popup_html(self) -> str:
        return f"<b>{self.name}</b><br>({self.lat:.6f}, {self.lng:.6f})"

    def list_label(self) -> str:
        return f"{self.name} (Lat: {self.lat:.4f}, Lng: {self.lng:.4f})"

    def to_record(self) -> dict:
        return {"lat": self.lat, "lng": self.lng, "name": self.name}
