# domain/store.py
import logging

from pydantic import BaseModel, ConfigDict, Field, StrictStr, TypeAdapter, ValidationError

from map_pins.app.protocols import KeyValueStore
from map_pins.domain.entities.geography import MarkerKey
from map_pins.domain.entities.marker import Marker
from map_pins.domain.errors import CorruptPersistedState, DuplicateMarker, PersistenceFailure

log = logging.getLogger(__name__)

STORAGE_KEY = "userLocations"


# ------------- Snapshot codec --------------------


class MarkerRecord(BaseModel):
    model_config = ConfigDict(extra="ignore")
    lat: float = Field(strict=True, allow_inf_nan=False)
    lng: float = Field(strict=True, allow_inf_nan=False)
    name: StrictStr


_SNAPSHOT = TypeAdapter(list[MarkerRecord])


def encode_markers(markers) -> str:
    return _SNAPSHOT.dump_json([MarkerRecord(**m.to_record()) for m in markers]).decode()


def decode_markers(raw: str) -> list[Marker]:
    """Parse a persisted snapshot; raises CorruptPersistedState on anything malformed."""
    try:
        records = _SNAPSHOT.validate_json(raw)
    except ValidationError as exc:
        first = exc.errors()[0]
        raise CorruptPersistedState(
            f"{exc.error_count()} error(s), first at {first['loc']}: {first['msg']}"
        ) from exc
    return [Marker(r.lat, r.lng, r.name) for r in records]


# ------------- Store --------------------


class MarkerStore:
    """
    Owns the canonical marker list and is the only writer of the snapshot.

    Every mutation is persisted before it is committed in memory, so a failed
    write (PersistenceFailure from the backend) leaves the list untouched.
    """

    def __init__(self, backend: KeyValueStore, key: str = STORAGE_KEY):
        self.backend = backend
        self.key = key
        self._markers: tuple[Marker, ...] = ()

    def load(self) -> tuple[Marker, ...]:
        """Read the snapshot once at startup. Never raises on bad data."""
        self._markers = ()
        raw = self.backend.get(self.key)
        if raw is None:
            return self._markers
        try:
            markers = decode_markers(raw)
        except CorruptPersistedState as exc:
            log.warning("discarding corrupt marker snapshot", extra={"extra": {"reason": str(exc)}})
            self._heal(None)
            return self._markers

        unique: dict[MarkerKey, Marker] = {}
        for m in markers:
            unique.setdefault(m.key, m)
        self._markers = tuple(unique.values())
        if len(unique) != len(markers):
            log.warning(
                "dropped duplicate markers from snapshot",
                extra={"extra": {"dropped": len(markers) - len(unique)}},
            )
            self._heal(encode_markers(self._markers))
        return self._markers

    def _heal(self, value: str | None) -> None:
        # best effort: the in-memory list is already correct, the next mutation rewrites it
        try:
            if value is None:
                self.backend.delete(self.key)
            else:
                self.backend.set(self.key, value)
        except PersistenceFailure as exc:
            log.warning("could not rewrite marker snapshot", extra={"extra": {"error": str(exc)}})

    def snapshot(self) -> tuple[Marker, ...]:
        return self._markers

    def get(self, key: MarkerKey) -> Marker | None:
        for m in self._markers:
            if m.key == key:
                return m
        return None

    def contains(self, key: MarkerKey) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._markers)

    def add(self, marker: Marker) -> None:
        if self.contains(marker.key):
            raise DuplicateMarker(marker.key)
        self._commit((*self._markers, marker))

    def remove(self, key: MarkerKey) -> Marker | None:
        target = self.get(key)
        if target is None:
            return None
        self._commit(tuple(m for m in self._markers if m.key != key))
        return target

    def _commit(self, updated: tuple[Marker, ...]) -> None:
        self.backend.set(self.key, encode_markers(updated))  # raises PersistenceFailure
        self._markers = updated
