from dataclasses import dataclass

# Marker identity: exact (lat, lng) values, no rounding or tolerance.
MarkerKey = tuple[float, float]


@dataclass(frozen=True)
class LatLng:
    lat: float  # degrees, WGS84
    lng: float

    @property
    def key(self) -> MarkerKey:
        return (self.lat, self.lng)

    def __str__(self) -> str:
        return f"({self.lat:.6f}, {self.lng:.6f})"
