"""
Mission state, its persistence, and the cycle scheduler that drives it.
"""

from .context import MissionContext, DEFAULT_OBJECTIVE, DEFAULT_RESEARCH_VECTOR
from .snapshot import MissionSnapshot, SNAPSHOT_VERSION
from .persistence import (
    KeyValueStore,
    InMemoryStore,
    JsonFileStore,
    MissionPersistence,
    SNAPSHOT_KEY,
)
from .scheduler import CycleScheduler, SchedulerState, SchedulerStateError

__all__ = [
    "MissionContext",
    "DEFAULT_OBJECTIVE",
    "DEFAULT_RESEARCH_VECTOR",
    "MissionSnapshot",
    "SNAPSHOT_VERSION",
    "KeyValueStore",
    "InMemoryStore",
    "JsonFileStore",
    "MissionPersistence",
    "SNAPSHOT_KEY",
    "CycleScheduler",
    "SchedulerState",
    "SchedulerStateError",
]
