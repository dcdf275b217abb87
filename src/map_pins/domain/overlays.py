# domain/overlays.py
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from map_pins.app.protocols import MapView, OverlayHandle
from map_pins.domain.entities.geography import MarkerKey
from map_pins.domain.entities.marker import Marker


@dataclass
class OverlayBinding:
    marker: Marker
    handle: OverlayHandle


@dataclass(frozen=True)
class ReconcileStats:
    created: int = 0
    destroyed: int = 0


class MarkerOverlayIndex:
    """
    One live overlay per marker, keyed by the exact (lat, lng) pair.

    reconcile() is a full diff against the authoritative list rather than a
    patch, so after every call the index keys equal the list keys no matter how
    many markers changed in between.
    """

    def __init__(self, view: MapView):
        self.view = view
        self._bindings: dict[MarkerKey, OverlayBinding] = {}

    def __len__(self) -> int:
        return len(self._bindings)

    def __contains__(self, key: MarkerKey) -> bool:
        return key in self._bindings

    def keys(self) -> set[MarkerKey]:
        return set(self._bindings)

    def handle_for(self, key: MarkerKey) -> OverlayHandle | None:
        b = self._bindings.get(key)
        return b.handle if b else None

    def reconcile(
        self, markers: Iterable[Marker], on_activate: Callable[[Marker], None]
    ) -> ReconcileStats:
        wanted = {m.key: m for m in markers}
        created = destroyed = 0

        for key in list(self._bindings):
            b = self._bindings[key]
            # same key with a different name counts as a different marker
            if wanted.get(key) != b.marker:
                self.view.remove_overlay(b.handle)
                del self._bindings[key]
                destroyed += 1

        for key, m in wanted.items():
            if key in self._bindings:
                continue
            handle = self.view.add_overlay(m, on_click=_bind(on_activate, m))
            self._bindings[key] = OverlayBinding(marker=m, handle=handle)
            created += 1

        return ReconcileStats(created=created, destroyed=destroyed)

    def remove_one(self, key: MarkerKey) -> bool:
        b = self._bindings.pop(key, None)
        if b is None:
            return False
        self.view.remove_overlay(b.handle)
        return True


def _bind(on_activate: Callable[[Marker], None], marker: Marker) -> Callable[[], None]:
    def _handler():
        on_activate(marker)

    return _handler
