# map_pins/services/storage.py
import json
import logging
import os
import tempfile
from pathlib import Path

from map_pins.app.protocols import KeyValueStore
from map_pins.domain.errors import PersistenceFailure

log = logging.getLogger(__name__)


class MemoryStore(KeyValueStore):
    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})
        self.writes = 0

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value
        self.writes += 1

    def delete(self, key: str) -> None:
        self.data.pop(key, None)
        self.writes += 1


class JsonFileStore(KeyValueStore):
    """
    Key-value pairs kept in one JSON object on disk, the file-backed
    counterpart of browser localStorage.

    Writes go to a temp file in the same directory and are swapped in with
    os.replace, so a crash mid-write leaves the previous file intact. A file
    that cannot be parsed is moved aside to `<name>.corrupt` before the next
    write instead of being overwritten.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    @property
    def quarantine_path(self) -> Path:
        return self.path.with_name(f"{self.path.name}.corrupt")

    def _load(self) -> dict | None:
        """Raw file contents; {} when absent, None when present but unusable."""
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            log.warning(
                "store file unreadable",
                extra={"extra": {"path": str(self.path), "error": str(exc)}},
            )
            return None
        if not isinstance(data, dict):
            log.warning("store file is not an object", extra={"extra": {"path": str(self.path)}})
            return None
        return data

    def _quarantine(self) -> None:
        try:
            os.replace(self.path, self.quarantine_path)
        except FileNotFoundError:
            return
        except OSError as exc:
            raise PersistenceFailure(f"could not move aside {self.path}: {exc}") from exc
        log.warning(
            "unreadable store file moved aside",
            extra={"extra": {"path": str(self.path), "moved_to": str(self.quarantine_path)}},
        )

    def _write_all(self, data: dict) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f)
                os.replace(tmp, self.path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise PersistenceFailure(f"could not write {self.path}: {exc}") from exc

    def get(self, key: str) -> str | None:
        value = (self._load() or {}).get(key)
        if value is None or isinstance(value, str):
            return value
        # hand it back serialized so the caller's own validation can reject and clear it
        return json.dumps(value)

    def set(self, key: str, value: str) -> None:
        data = self._load()
        if data is None:
            self._quarantine()
            data = {}
        data[key] = value
        self._write_all(data)

    def delete(self, key: str) -> None:
        data = self._load()
        if data is None:
            self._quarantine()
            self._write_all({})
            return
        if key in data:
            del data[key]
            self._write_all(data)
