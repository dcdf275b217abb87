# domain/errors.py
from map_pins.domain.entities.geography import MarkerKey


class MapPinsError(Exception):
    """Base class for every failure the session knows how to absorb."""


class DuplicateMarker(MapPinsError):
    def __init__(self, key: MarkerKey):
        super().__init__(f"marker already exists at {key}")
        self.key = key


class PersistenceFailure(MapPinsError):
    pass


class CorruptPersistedState(MapPinsError):
    pass


class NameResolutionFailure(MapPinsError):
    pass


class RoutingFailure(MapPinsError):
    pass


class GeolocationUnavailable(MapPinsError):
    pass
