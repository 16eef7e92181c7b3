from dataclasses import dataclass
from threading import RLock
from typing import Any, Dict, List, Optional
import logging

logger = logging.getLogger(__name__)


ARCHITECT_STREAM = "architect"

EMPTY_HISTORY = "No previous steps have been generated. This is the first step."


@dataclass(frozen=True)
class JournalEntry:
    """
    One narrative entry in an agent's output log.

    kind tags the entry for presentation: chaos, meta, peer,
    verification, challenge, intuition, or None for ordinary output.
    """

    id: str
    content: str
    kind: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "content": self.content, "kind": self.kind}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JournalEntry":
        return cls(id=data["id"], content=data.get("content", ""), kind=data.get("kind"))


class MissionJournal:
    """
    Per-agent output logs, plus the architect's own stream.

    Specialists append concurrently during the parallel phase, each to
    its own stream; all access goes through one lock.
    """

    def __init__(self) -> None:
        self._streams: Dict[str, List[JournalEntry]] = {}
        self._counters: Dict[str, int] = {}
        self._lock = RLock()

    def append(self, stream: str, content: str, kind: Optional[str] = None) -> JournalEntry:
        with self._lock:
            n = self._counters.get(stream, 0)
            self._counters[stream] = n + 1

            entry = JournalEntry(id=f"{stream}-log-{n}", content=content, kind=kind)
            self._streams.setdefault(stream, []).append(entry)

        logger.debug("[JOURNAL] %s appended (%s)", entry.id, kind or "output")
        return entry

    def architect(self, content: str, kind: Optional[str] = None) -> JournalEntry:
        return self.append(ARCHITECT_STREAM, content, kind)

    def entries(self, stream: str) -> List[JournalEntry]:
        with self._lock:
            return list(self._streams.get(stream, []))

    def history(self, stream: str, count: int = 3) -> str:
        """The last `count` entries formatted as prompt context."""
        entries = self.entries(stream)
        if not entries:
            return EMPTY_HISTORY

        return "\n".join(
            f"--- PREVIOUS STEP ---\n{entry.content}\n" for entry in entries[-count:]
        )

    def streams(self) -> List[str]:
        with self._lock:
            return list(self._streams.keys())

    def drop(self, stream: str) -> None:
        with self._lock:
            self._streams.pop(stream, None)
            self._counters.pop(stream, None)

    def clear(self) -> None:
        with self._lock:
            self._streams = {}
            self._counters = {}

    # ------------------------------------------------------------------
    # Snapshot Support
    # ------------------------------------------------------------------

    def export(self) -> Dict[str, List[Dict[str, Any]]]:
        with self._lock:
            return {
                stream: [e.to_dict() for e in entries]
                for stream, entries in self._streams.items()
            }

    def load(self, data: Dict[str, List[Dict[str, Any]]]) -> None:
        with self._lock:
            self._streams = {}
            self._counters = {}
            for stream, entries in (data or {}).items():
                restored = [JournalEntry.from_dict(e) for e in entries]
                self._streams[stream] = restored
                self._counters[stream] = len(restored)
