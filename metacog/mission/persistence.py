from abc import ABC, abstractmethod
from pathlib import Path
from threading import RLock
from typing import Any, Dict, Optional, Tuple
import json
import logging
import os

from .snapshot import MissionSnapshot

logger = logging.getLogger(__name__)


SNAPSHOT_KEY = "current-mission-state"


# ----------------------------------------------------------------------
# Key-Value Stores
# ----------------------------------------------------------------------

class KeyValueStore(ABC):
    """Minimal key-value namespace holding JSON-serializable values."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    @abstractmethod
    def put(self, key: str, value: Any) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def clear(self) -> None:
        raise NotImplementedError


class InMemoryStore(KeyValueStore):

    def __init__(self) -> None:
        self._data: Dict[str, Any] = {}
        self._lock = RLock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            value = self._data.get(key)
            # round-trip so callers never share mutable state with the store
            return json.loads(json.dumps(value)) if value is not None else None

    def put(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = json.loads(json.dumps(value))

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._data = {}


class JsonFileStore(KeyValueStore):
    """
    One JSON document on disk holding a single namespace.

    Writes go to a sibling temp file first and are moved into place, so
    a crash mid-write leaves the previous document intact.
    """

    def __init__(self, path) -> None:
        self.path = Path(path)
        self._lock = RLock()

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        with open(self.path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        if self.path.parent and not self.path.parent.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)

        tmp = self.path.with_name(self.path.name + ".tmp")
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f)
        os.replace(tmp, self.path)

    def _read_for_write(self) -> Tuple[Dict[str, Any], bool]:
        """Current document, or an empty one (flagged) if it cannot be parsed."""
        try:
            return self._read(), False
        except ValueError as e:
            logger.warning(
                "[PERSISTENCE] %s is unreadable; starting from an empty document: %s",
                self.path,
                e,
            )
            return {}, True

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            return self._read().get(key)

    def put(self, key: str, value: Any) -> None:
        with self._lock:
            data, _ = self._read_for_write()
            data[key] = value
            self._write(data)

    def delete(self, key: str) -> None:
        with self._lock:
            data, corrupt = self._read_for_write()
            if key in data or corrupt:
                data.pop(key, None)
                self._write(data)

    def clear(self) -> None:
        with self._lock:
            if self.path.exists():
                self._write({})


# ----------------------------------------------------------------------
# Mission Persistence
# ----------------------------------------------------------------------

class MissionPersistence:
    """
    Saves and restores the single mission snapshot.

    Saving is best-effort: a failing store is logged and reported, but
    never stops the mission.
    """

    def __init__(self, store: KeyValueStore, key: str = SNAPSHOT_KEY) -> None:
        self._store = store
        self._key = key

    def save(self, snapshot: MissionSnapshot) -> bool:
        try:
            self._store.put(self._key, snapshot.to_dict())
        except Exception as e:
            logger.warning("[PERSISTENCE] Snapshot save failed: %s", e)
            return False

        logger.info("[PERSISTENCE] State saved (cycle %d)", snapshot.cycle_counter)
        return True

    def load(self) -> Optional[MissionSnapshot]:
        try:
            record = self._store.get(self._key)
        except Exception as e:
            logger.warning("[PERSISTENCE] Snapshot read failed: %s", e)
            return None

        if record is None:
            return None

        try:
            return MissionSnapshot.from_dict(record)
        except (TypeError, ValueError) as e:
            logger.warning("[PERSISTENCE] Ignoring unusable snapshot: %s", e)
            return None

    def exists(self) -> bool:
        try:
            return self._store.get(self._key) is not None
        except Exception as e:
            logger.warning("[PERSISTENCE] Snapshot read failed: %s", e)
            return False

    def clear(self) -> None:
        try:
            self._store.delete(self._key)
        except Exception as e:
            logger.warning("[PERSISTENCE] Snapshot delete failed: %s", e)
        else:
            logger.info("[PERSISTENCE] Snapshot cleared")
