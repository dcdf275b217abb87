# tests/domain/test_overlay_index.py
import random

from map_pins.domain.entities.marker import Marker
from map_pins.domain.overlays import MarkerOverlayIndex
from map_pins.io.map_view import HeadlessMapView


def _noop(marker):
    pass


def _markers(*coords):
    return [Marker(lat, lng, f"m{i}") for i, (lat, lng) in enumerate(coords)]


def test_reconcile_creates_one_overlay_per_marker():
    view = HeadlessMapView()
    idx = MarkerOverlayIndex(view)
    markers = _markers((10.0, 123.0), (10.5, 123.5))

    stats = idx.reconcile(markers, _noop)
    assert (stats.created, stats.destroyed) == (2, 0)
    assert idx.keys() == {(10.0, 123.0), (10.5, 123.5)}
    assert len(view.overlays) == 2


def test_reconcile_is_idempotent():
    view = HeadlessMapView()
    idx = MarkerOverlayIndex(view)
    markers = _markers((10.0, 123.0), (10.5, 123.5))
    idx.reconcile(markers, _noop)
    handles = {k: idx.handle_for(k) for k in idx.keys()}

    stats = idx.reconcile(markers, _noop)
    assert (stats.created, stats.destroyed) == (0, 0)
    assert {k: idx.handle_for(k) for k in idx.keys()} == handles
    assert view.created == 2 and view.destroyed == 0


def test_reconcile_removes_markers_gone_from_the_list():
    view = HeadlessMapView()
    idx = MarkerOverlayIndex(view)
    a, b = _markers((10.0, 123.0), (10.5, 123.5))
    idx.reconcile([a, b], _noop)

    stats = idx.reconcile([b], _noop)
    assert (stats.created, stats.destroyed) == (0, 1)
    assert a.key not in idx
    assert [r.marker for r in view.overlays.values()] == [b]


def test_renamed_marker_gets_a_fresh_overlay():
    view = HeadlessMapView()
    idx = MarkerOverlayIndex(view)
    idx.reconcile([Marker(10.0, 123.0, "Old")], _noop)
    old = idx.handle_for((10.0, 123.0))

    stats = idx.reconcile([Marker(10.0, 123.0, "New")], _noop)
    assert (stats.created, stats.destroyed) == (1, 1)
    assert idx.handle_for((10.0, 123.0)) != old
    assert view.overlay_at((10.0, 123.0)).popup.startswith("<b>New</b>")


def test_remove_one():
    view = HeadlessMapView()
    idx = MarkerOverlayIndex(view)
    idx.reconcile(_markers((10.0, 123.0)), _noop)

    assert idx.remove_one((10.0, 123.0)) is True
    assert idx.remove_one((10.0, 123.0)) is False
    assert len(idx) == 0
    assert view.overlays == {}


def test_click_reports_the_bound_marker():
    view = HeadlessMapView()
    idx = MarkerOverlayIndex(view)
    clicked = []
    a, b = _markers((10.0, 123.0), (10.5, 123.5))
    idx.reconcile([a, b], clicked.append)

    view.click_overlay(b.key)
    view.click_overlay(a.key)
    assert clicked == [b, a]


def test_index_matches_list_after_random_edits():
    rng = random.Random(7)
    view = HeadlessMapView()
    idx = MarkerOverlayIndex(view)
    pool = [Marker(10.0 + i / 100, 123.0 + i / 100, f"p{i}") for i in range(12)]
    current: list[Marker] = []

    for _ in range(200):
        if current and rng.random() < 0.4:
            current.remove(rng.choice(current))
        else:
            m = rng.choice(pool)
            if m not in current:
                current.append(m)
        idx.reconcile(current, _noop)
        assert idx.keys() == {m.key for m in current}
        assert len(view.overlays) == len(current)
