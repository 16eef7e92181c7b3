"""
Specialist agents: registry, permanent seeds and output journals.

The specialist phase runner lives in `metacog.agents.specialist`.
"""

from .registry import AgentRegistry, SpecialistAgent, PerformanceMetric
from .journal import MissionJournal, JournalEntry, ARCHITECT_STREAM
from .seeds import SEED_AGENTS, SEED_IDS, SKEPTIC_ID, INTUITIONIST_ID

__all__ = [
    "AgentRegistry",
    "SpecialistAgent",
    "PerformanceMetric",
    "MissionJournal",
    "JournalEntry",
    "ARCHITECT_STREAM",
    "SEED_AGENTS",
    "SEED_IDS",
    "SKEPTIC_ID",
    "INTUITIONIST_ID",
]
