from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Optional, Tuple
from threading import RLock
import logging

from .seeds import SEED_AGENTS, SEED_IDS, seed_by_id

logger = logging.getLogger(__name__)


# ----------------------------------------------------------------------
# Records
# ----------------------------------------------------------------------

@dataclass
class PerformanceMetric:
    """Running tally of the knowledge an agent has been credited with."""

    nodes_created: int = 0
    total_promise: float = 0.0

    @property
    def average(self) -> float:
        if self.nodes_created == 0:
            return 0.0
        return self.total_promise / self.nodes_created

    def record(self, promise_score: float) -> None:
        self.nodes_created += 1
        self.total_promise += promise_score

    def to_dict(self) -> Dict[str, Any]:
        return {"nodes_created": self.nodes_created, "total_promise": self.total_promise}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PerformanceMetric":
        return cls(
            nodes_created=int(data.get("nodes_created", 0)),
            total_promise=float(data.get("total_promise", 0.0)),
        )


@dataclass(frozen=True)
class SpecialistAgent:
    """
    A research agent driven by a mission prompt.

    Attributes
    ----------
    id : str
        Unique agent identifier, e.g. "specialist-1".

    mission_prompt : str
        System prompt defining the agent's behaviour. Replaced (never
        mutated) by the registry when the architect evolves the agent.

    required_tools : tuple of str
        Capability names. Any capability grants access to the
        specialist-side tools during the agent's own step.

    lifespan_cycles : Optional[int]
        Cycles the agent lives for. None means indefinite.

    creation_cycle : int
        Cycle number at deployment.

    reactive : bool
        Reactive agents only run when the architect summons them.
    """

    id: str
    mission_prompt: str
    required_tools: Tuple[str, ...] = field(default_factory=tuple)
    lifespan_cycles: Optional[int] = None
    creation_cycle: int = 0
    title: str = ""
    reactive: bool = False

    @property
    def is_temporary(self) -> bool:
        return self.lifespan_cycles is not None

    @property
    def has_tools(self) -> bool:
        return len(self.required_tools) > 0

    def expired(self, current_cycle: int) -> bool:
        if self.lifespan_cycles is None:
            return False
        return current_cycle - self.creation_cycle >= self.lifespan_cycles

    def metadata(self) -> Dict[str, Any]:
        return {
            "required_tools": list(self.required_tools),
            "lifespan_cycles": self.lifespan_cycles,
            "creation_cycle": self.creation_cycle,
            "title": self.title,
        }

    def to_dict(self) -> Dict[str, Any]:
        data = {"id": self.id, "mission_prompt": self.mission_prompt, "reactive": self.reactive}
        data.update(self.metadata())
        return data


# ----------------------------------------------------------------------
# Registry
# ----------------------------------------------------------------------

class AgentRegistry:
    """
    Authoritative registry of all active specialist agents.

    Iteration order is activation order: seeds first, then agents in
    the order the architect deployed them.
    """

    def __init__(self) -> None:
        self._agents: Dict[str, SpecialistAgent] = {}
        self._metrics: Dict[str, PerformanceMetric] = {}
        self._lock = RLock()
        logger.info("[AGENT REGISTRY] Initialized (empty)")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def deploy(
        self,
        agent_id: str,
        mission_prompt: str,
        required_tools: Iterable[str] = (),
        lifespan_cycles: Optional[int] = None,
        creation_cycle: int = 0,
        title: Optional[str] = None,
        reactive: bool = False,
    ) -> bool:
        """
        Register and activate a new agent with a zeroed metric.

        Returns False, without touching anything, when the id is taken.
        """

        if not agent_id or not isinstance(agent_id, str):
            raise ValueError("Agent must have a valid string id.")

        with self._lock:
            if agent_id in self._agents:
                logger.warning("[AGENT REGISTRY] Agent with id %s already exists", agent_id)
                return False

            self._agents[agent_id] = SpecialistAgent(
                id=agent_id,
                mission_prompt=mission_prompt,
                required_tools=tuple(required_tools or ()),
                lifespan_cycles=lifespan_cycles,
                creation_cycle=creation_cycle,
                title=title or agent_id,
                reactive=reactive,
            )
            self._metrics[agent_id] = PerformanceMetric()

            logger.info(
                "[AGENT REGISTRY] Deployed %s | lifespan=%s | total=%d",
                agent_id,
                lifespan_cycles if lifespan_cycles is not None else "indefinite",
                len(self._agents),
            )
            return True

    def retire(self, agent_id: str, reason: str = "") -> bool:
        """Remove an agent with its prompt, metadata and metric. Idempotent."""

        with self._lock:
            if agent_id not in self._agents:
                logger.debug("[AGENT REGISTRY] retire(%s) ignored: not registered", agent_id)
                return False

            del self._agents[agent_id]
            self._metrics.pop(agent_id, None)

            logger.info("[AGENT REGISTRY] Retired %s | reason=%s", agent_id, reason)
            return True

    def modify_prompt(self, agent_id: str, new_prompt: str) -> bool:

        with self._lock:
            agent = self._agents.get(agent_id)
            if agent is None:
                return False

            self._agents[agent_id] = replace(agent, mission_prompt=new_prompt)
            logger.info("[AGENT REGISTRY] Prompt evolved for %s", agent_id)
            return True

    def check_expirations(self, current_cycle: int) -> List[str]:
        """
        Retire every temporary agent whose lifespan has run out.

        Candidates are collected over the full active list first and
        retired afterwards.
        """

        with self._lock:
            expired = [a for a in self._agents.values() if a.expired(current_cycle)]

            for agent in expired:
                self.retire(
                    agent.id,
                    f"Lifespan of {agent.lifespan_cycles} cycles expired.",
                )

            return [a.id for a in expired]

    # ------------------------------------------------------------------
    # Performance
    # ------------------------------------------------------------------

    def record_contribution(self, agent_id: Optional[str], promise_score: float) -> bool:
        with self._lock:
            metric = self._metrics.get(agent_id) if agent_id else None
            if metric is None:
                return False
            metric.record(promise_score)
            return True

    def metric(self, agent_id: str) -> Optional[PerformanceMetric]:
        with self._lock:
            metric = self._metrics.get(agent_id)
            return PerformanceMetric(metric.nodes_created, metric.total_promise) if metric else None

    def ranking(self) -> List[Dict[str, Any]]:
        """Agents by average promise, best first. Ties keep activation order."""
        with self._lock:
            rows = [
                {"id": agent_id, "avg_promise": round(metric.average, 2)}
                for agent_id, metric in self._metrics.items()
            ]
        return sorted(rows, key=lambda row: -row["avg_promise"])

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get(self, agent_id: str) -> Optional[SpecialistAgent]:
        with self._lock:
            return self._agents.get(agent_id)

    def has(self, agent_id: str) -> bool:
        with self._lock:
            return agent_id in self._agents

    def active_ids(self) -> List[str]:
        with self._lock:
            return list(self._agents.keys())

    def agents(self) -> List[SpecialistAgent]:
        with self._lock:
            return list(self._agents.values())

    def runnable(self) -> List[SpecialistAgent]:
        """Agents taking part in the parallel phase."""
        with self._lock:
            return [a for a in self._agents.values() if not a.reactive]

    def __len__(self) -> int:
        with self._lock:
            return len(self._agents)

    # ------------------------------------------------------------------
    # Seeding
    # ------------------------------------------------------------------

    def seed(self, goal: str) -> None:
        """Deploy the six permanent agents that are not yet present."""
        with self._lock:
            for seed in SEED_AGENTS:
                if seed.id in self._agents:
                    continue
                self.deploy(
                    seed.id,
                    seed.render(goal),
                    required_tools=seed.required_tools,
                    title=seed.title,
                    reactive=seed.reactive,
                )

    def reset(self, goal: str) -> None:
        with self._lock:
            self._agents = {}
            self._metrics = {}
            self.seed(goal)
            logger.info("[AGENT REGISTRY] Reset to seed agents")

    # ------------------------------------------------------------------
    # Snapshot Support
    # ------------------------------------------------------------------

    def export(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "active": list(self._agents.keys()),
                "prompts": {a.id: a.mission_prompt for a in self._agents.values()},
                "metadata": {a.id: a.metadata() for a in self._agents.values()},
                "metrics": {k: m.to_dict() for k, m in self._metrics.items()},
            }

    def load(
        self,
        goal: str,
        active: Optional[List[str]] = None,
        prompts: Optional[Dict[str, str]] = None,
        metadata: Optional[Dict[str, Dict[str, Any]]] = None,
        metrics: Optional[Dict[str, Dict[str, Any]]] = None,
    ) -> None:
        """
        Replace the registry contents from snapshot fields.

        A missing active list falls back to the seed agents; a seed
        without a stored prompt gets its rendered default.
        """

        prompts = prompts or {}
        metadata = metadata or {}
        metrics = metrics or {}

        with self._lock:
            self._agents = {}
            self._metrics = {}

            for agent_id in (active if active is not None else SEED_IDS):
                seed = seed_by_id(agent_id)
                meta = metadata.get(agent_id, {})

                prompt = prompts.get(agent_id)
                if prompt is None:
                    prompt = seed.render(goal) if seed else "Loaded Agent"

                self.deploy(
                    agent_id,
                    prompt,
                    required_tools=meta.get(
                        "required_tools", seed.required_tools if seed else ()
                    ),
                    lifespan_cycles=meta.get("lifespan_cycles"),
                    creation_cycle=int(meta.get("creation_cycle", 0)),
                    title=meta.get("title") or (seed.title if seed else agent_id),
                    reactive=seed.reactive if seed else False,
                )

                if agent_id in metrics:
                    self._metrics[agent_id] = PerformanceMetric.from_dict(metrics[agent_id])

            logger.info("[AGENT REGISTRY] Loaded %d agents from snapshot", len(self._agents))
