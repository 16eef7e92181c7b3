from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List


SNAPSHOT_VERSION = 1


@dataclass
class MissionSnapshot:
    """
    Versioned, self-contained record of a mission between cycles.

    Everything needed to resume is here except the semantic vectors,
    which are rebuilt from node content on restore.
    """

    nodes: List[Dict[str, Any]] = field(default_factory=list)
    node_counter: int = 0
    cycle_counter: int = 0
    stagnation_counter: int = 0
    objective: str = ""
    research_vector: str = ""
    active_agents: List[str] = field(default_factory=list)
    agent_prompts: Dict[str, str] = field(default_factory=dict)
    agent_metadata: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    agent_metrics: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    focus_history: List[str] = field(default_factory=list)
    journal: Dict[str, List[Dict[str, Any]]] = field(default_factory=dict)
    goal: str = ""
    version: int = SNAPSHOT_VERSION

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MissionSnapshot":
        """
        Raises
        ------
        ValueError
            The record is not a dict or carries an unsupported version.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Snapshot must be a mapping, got {type(data).__name__}")

        version = data.get("version")
        if version != SNAPSHOT_VERSION:
            raise ValueError(f"Unsupported snapshot version: {version!r}")

        return cls(
            nodes=list(data.get("nodes") or []),
            node_counter=int(data.get("node_counter") or 0),
            cycle_counter=int(data.get("cycle_counter") or 0),
            stagnation_counter=int(data.get("stagnation_counter") or 0),
            objective=data.get("objective") or "",
            research_vector=data.get("research_vector") or "",
            active_agents=list(data.get("active_agents") or []),
            agent_prompts=dict(data.get("agent_prompts") or {}),
            agent_metadata=dict(data.get("agent_metadata") or {}),
            agent_metrics=dict(data.get("agent_metrics") or {}),
            focus_history=list(data.get("focus_history") or []),
            journal=dict(data.get("journal") or {}),
            goal=data.get("goal") or "",
        )
