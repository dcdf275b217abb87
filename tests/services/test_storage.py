# tests/services/test_storage.py
import json

import pytest

from map_pins.domain.errors import PersistenceFailure
from map_pins.domain.store import MarkerStore
from map_pins.services.storage import JsonFileStore, MemoryStore


def test_memory_store():
    s = MemoryStore({"a": "1"})
    s.set("b", "2")
    s.delete("a")
    s.delete("missing")
    assert s.get("a") is None
    assert s.get("b") == "2"
    assert s.writes == 3


def test_json_file_store_round_trip(tmp_path):
    path = tmp_path / "nested" / "store.json"
    s = JsonFileStore(path)
    assert s.get("userLocations") is None

    s.set("userLocations", "[]")
    s.set("other", "x")
    assert JsonFileStore(path).get("userLocations") == "[]"

    s.delete("other")
    assert json.loads(path.read_text()) == {"userLocations": "[]"}
    assert [p.name for p in path.parent.iterdir()] == ["store.json"]  # no temp files left


@pytest.mark.parametrize("content", ["{broken", "[1, 2]"])
def test_unreadable_file_is_moved_aside_not_overwritten(tmp_path, content):
    path = tmp_path / "store.json"
    path.write_text(content)
    s = JsonFileStore(path)
    assert s.get("userLocations") is None

    s.set("userLocations", "[]")
    assert json.loads(path.read_text()) == {"userLocations": "[]"}
    assert (tmp_path / "store.json.corrupt").read_text() == content


def test_other_keys_survive_writes(tmp_path):
    path = tmp_path / "store.json"
    path.write_text(json.dumps({"theme": "dark", "counters": [1, 2]}))
    JsonFileStore(path).set("userLocations", "[]")
    assert json.loads(path.read_text()) == {
        "theme": "dark",
        "counters": [1, 2],
        "userLocations": "[]",
    }


def test_non_string_marker_value_is_healed_by_the_marker_store(tmp_path):
    path = tmp_path / "store.json"
    path.write_text(json.dumps({"userLocations": 5, "theme": "dark"}))
    backend = JsonFileStore(path)
    assert backend.get("userLocations") == "5"

    assert MarkerStore(backend).load() == ()
    assert json.loads(path.read_text()) == {"theme": "dark"}


def test_write_failure_raises_persistence_failure(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")
    s = JsonFileStore(blocker / "store.json")
    with pytest.raises(PersistenceFailure):
        s.set("userLocations", "[]")
