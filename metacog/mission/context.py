from typing import Any, Dict, Iterable, List, Optional
import logging

from ..config import MissionConfig
from ..agents.journal import MissionJournal
from ..agents.registry import AgentRegistry
from ..knowledge.graph import KnowledgeGraph
from ..knowledge.nodes import KnowledgeNode
from ..knowledge.semantic_index import SemanticIndex
from ..sandbox.base import CodeSandbox
from ..stability.signals import StagnationTracker, FocusBiasDetector, StrategicSignals
from ..tools.verifier import ProofVerifier
from .snapshot import MissionSnapshot

logger = logging.getLogger(__name__)


DEFAULT_OBJECTIVE = "Awaiting directive from Metacognitive Architect..."
DEFAULT_RESEARCH_VECTOR = "Awaiting strategic plan..."


class MissionContext:
    """
    Single owner of all mutable mission state.

    Tool handlers, the specialist runner and the synthesis step all
    receive this object; nothing else holds mission state.

    Attributes
    ----------
    graph : KnowledgeGraph
    index : SemanticIndex
    agents : AgentRegistry
    journal : MissionJournal
    stagnation : StagnationTracker
    focus : FocusBiasDetector
    objective : str
        Set by the latest DIRECTIVE node.
    research_vector : str
        Highest-promise vector of the latest synthesis.
    cycle : int
        Number of the cycle in progress (or last completed).
    """

    def __init__(
        self,
        config: MissionConfig,
        oracle,
        embedder,
        sandbox: CodeSandbox,
        verifier: Optional[ProofVerifier] = None,
    ) -> None:
        self.config = config
        self.oracle = oracle
        self.sandbox = sandbox
        self.verifier = verifier or ProofVerifier()

        self.graph = KnowledgeGraph()
        self.index = SemanticIndex(embedder)
        self.agents = AgentRegistry()
        self.journal = MissionJournal()
        self.stagnation = StagnationTracker(config.chaos_threshold)
        self.focus = FocusBiasDetector(
            window=config.bias_window,
            threshold=config.bias_threshold,
            display=config.focus_display,
        )
        self._signals = StrategicSignals(self.stagnation, self.focus, self.agents)

        self.objective = DEFAULT_OBJECTIVE
        self.research_vector = DEFAULT_RESEARCH_VECTOR
        self.cycle = 0

        self.agents.seed(config.goal)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def signals(self) -> Dict[str, Any]:
        return self._signals.extract()

    def related_knowledge(self, text: str, k: int = 3) -> List[KnowledgeNode]:
        nodes = (self.graph.get(node_id) for node_id in self.index.query(text, k))
        return [node for node in nodes if node is not None]

    # ------------------------------------------------------------------
    # Agent Lifecycle (registry + journal)
    # ------------------------------------------------------------------

    def deploy_agent(
        self,
        agent_id: str,
        mission_prompt: str,
        required_tools: Iterable[str] = (),
        lifespan_cycles: Optional[int] = None,
        title: Optional[str] = None,
    ) -> bool:
        deployed = self.agents.deploy(
            agent_id,
            mission_prompt,
            required_tools=required_tools,
            lifespan_cycles=lifespan_cycles,
            creation_cycle=self.cycle,
            title=title,
        )

        if deployed:
            lifespan = f"{lifespan_cycles} cycles" if lifespan_cycles else "Indefinite"
            self.journal.append(
                agent_id,
                f"**New Specialist Deployed**\n\n**Mission:** {mission_prompt}\n"
                f"**Lifespan:** {lifespan}",
            )

        return deployed

    def retire_agent(self, agent_id: str, reason: str) -> bool:
        retired = self.agents.retire(agent_id, reason)
        if retired:
            self._note_retirement(agent_id, reason)
        return retired

    def check_expirations(self) -> List[str]:
        lifespans = {
            agent.id: agent.lifespan_cycles
            for agent in self.agents.agents()
            if agent.expired(self.cycle)
        }

        retired = self.agents.check_expirations(self.cycle)
        for agent_id in retired:
            self._note_retirement(agent_id, f"Lifespan of {lifespans.get(agent_id)} cycles expired.")

        return retired

    def _note_retirement(self, agent_id: str, reason: str) -> None:
        self.journal.drop(agent_id)
        self.journal.architect(f"**Agent Retired**\n\n- **ID:** {agent_id}\n- **Reason:** {reason}")

    # ------------------------------------------------------------------
    # Snapshot / Restore / Reset
    # ------------------------------------------------------------------

    def snapshot(self) -> MissionSnapshot:
        agents = self.agents.export()

        return MissionSnapshot(
            nodes=[node.to_dict() for node in self.graph.all()],
            node_counter=self.graph.counter,
            cycle_counter=self.cycle,
            stagnation_counter=self.stagnation.counter,
            objective=self.objective,
            research_vector=self.research_vector,
            active_agents=agents["active"],
            agent_prompts=agents["prompts"],
            agent_metadata=agents["metadata"],
            agent_metrics=agents["metrics"],
            focus_history=list(self.focus.history),
            journal=self.journal.export(),
            goal=self.config.goal,
        )

    def restore(self, snapshot: MissionSnapshot) -> None:
        """
        Replace all state from a snapshot. The semantic index is cleared;
        callers rebuild it with `index.rebuild_all`.
        """

        if snapshot.goal and snapshot.goal != self.config.goal:
            logger.warning(
                "[CONTEXT] Snapshot goal %r differs from configured goal %r; "
                "seed prompts use the configured goal",
                snapshot.goal,
                self.config.goal,
            )

        nodes = []
        for record in snapshot.nodes:
            try:
                nodes.append(KnowledgeNode.from_dict(record))
            except (KeyError, ValueError) as e:
                logger.warning("[CONTEXT] Skipping unreadable node %r: %s", record.get("id"), e)

        self.graph.load_state(nodes, snapshot.node_counter)
        self.index.clear()

        self.agents.load(
            self.config.goal,
            active=snapshot.active_agents or None,
            prompts=snapshot.agent_prompts,
            metadata=snapshot.agent_metadata,
            metrics=snapshot.agent_metrics,
        )
        self.journal.load(snapshot.journal)

        self.cycle = snapshot.cycle_counter
        self.stagnation.counter = snapshot.stagnation_counter
        self.focus.load(snapshot.focus_history)
        self.objective = snapshot.objective or DEFAULT_OBJECTIVE
        self.research_vector = snapshot.research_vector or DEFAULT_RESEARCH_VECTOR

        logger.info(
            "[CONTEXT] Restored | cycle=%d | nodes=%d | agents=%d",
            self.cycle,
            len(self.graph),
            len(self.agents),
        )

    def reset(self) -> None:
        self.graph.clear()
        self.index.clear()
        self.agents.reset(self.config.goal)
        self.journal.clear()
        self.stagnation.reset()
        self.focus.reset()
        self.objective = DEFAULT_OBJECTIVE
        self.research_vector = DEFAULT_RESEARCH_VECTOR
        self.cycle = 0

        logger.info("[CONTEXT] Mission state reset")
