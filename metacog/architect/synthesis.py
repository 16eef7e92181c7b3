from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
import logging

from ..knowledge.nodes import KnowledgeNode, NodeType

logger = logging.getLogger(__name__)


NO_SUMMARY = "No summary provided."


# ----------------------------------------------------------------------
# Payload Model
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class KnowledgeUpdate:
    type: str
    content: str
    relations: Tuple[str, ...] = field(default_factory=tuple)
    created_by: Optional[str] = None


@dataclass(frozen=True)
class ResearchVector:
    description: str
    promise_score: float


@dataclass(frozen=True)
class ArchitectPayload:
    """
    The architect's end-of-cycle synthesis, decoded leniently.

    Malformed sub-entries are dropped with a warning rather than
    failing the whole cycle; only an unparseable document is fatal.
    """

    reflection: Dict[str, Any] = field(default_factory=dict)
    knowledge_update: List[KnowledgeUpdate] = field(default_factory=list)
    strategic_focus: Optional[str] = None
    research_vectors: List[ResearchVector] = field(default_factory=list)
    stagnation_level: Optional[int] = None
    stagnation_justification: str = ""
    summary: str = NO_SUMMARY

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ArchitectPayload":

        updates = []
        for item in _as_list(data.get("knowledge_update")):
            if not isinstance(item, dict) or not item.get("type") or not item.get("content"):
                logger.warning("[SYNTHESIS] Skipping malformed knowledge update: %r", item)
                continue
            updates.append(
                KnowledgeUpdate(
                    type=str(item["type"]),
                    content=str(item["content"]),
                    relations=tuple(r for r in _as_list(item.get("relations")) if isinstance(r, str)),
                    created_by=item.get("created_by") or None,
                )
            )

        planning = data.get("strategic_planning")
        planning = planning if isinstance(planning, dict) else {}

        vectors = []
        for item in _as_list(planning.get("research_vectors")):
            try:
                vectors.append(
                    ResearchVector(
                        description=str(item["description"]),
                        promise_score=float(item["promise_score"]),
                    )
                )
            except (KeyError, TypeError, ValueError):
                logger.warning("[SYNTHESIS] Skipping malformed research vector: %r", item)

        stagnation_level = None
        justification = ""
        assessment = data.get("strategic_assessment")
        if isinstance(assessment, dict):
            try:
                stagnation_level = int(assessment.get("stagnation_level") or 0)
            except (TypeError, ValueError):
                stagnation_level = 0
            justification = str(assessment.get("justification") or "")

        reflection = data.get("metacognitive_reflection")

        return cls(
            reflection=reflection if isinstance(reflection, dict) else {},
            knowledge_update=updates,
            strategic_focus=planning.get("strategic_focus") or None,
            research_vectors=vectors,
            stagnation_level=stagnation_level,
            stagnation_justification=justification,
            summary=str(data.get("synthesis_summary") or NO_SUMMARY),
        )

    # ------------------------------------------------------------------
    # Derived
    # ------------------------------------------------------------------

    def is_terminal(self, marker: str) -> bool:
        return self.summary.strip().startswith(marker)

    def final_proof(self, marker: str) -> str:
        return self.summary.replace(marker, "", 1).strip()

    def best_vector(self) -> Optional[ResearchVector]:
        """Highest promise; the first listed wins a tie."""
        best = None
        for vector in self.research_vectors:
            if best is None or vector.promise_score > best.promise_score:
                best = vector
        return best

    def promise_for(self, content: str, default: float = 0.5) -> float:
        """Promise of the first research vector whose opening text appears in `content`."""
        for vector in self.research_vectors:
            if vector.description and vector.description[:50] in content:
                return vector.promise_score
        return default


def _as_list(value) -> List[Any]:
    return value if isinstance(value, list) else []


# ----------------------------------------------------------------------
# Application
# ----------------------------------------------------------------------

class SynthesisApplier:
    """
    Folds a non-terminal architect payload into the mission state.

    Order: focus history, knowledge nodes (with metric attribution,
    indexing and directive handling), active research vector,
    stagnation counter.
    """

    def apply(self, context, payload: ArchitectPayload) -> List[KnowledgeNode]:

        context.journal.architect(payload.summary)

        if payload.strategic_focus:
            context.focus.record(payload.strategic_focus)

        created = []
        for update in payload.knowledge_update:
            node = self._insert(context, payload, update)
            if node is not None:
                created.append(node)

        best = payload.best_vector()
        if best is not None:
            context.research_vector = best.description

        if payload.stagnation_level is not None:
            context.stagnation.update(payload.stagnation_level)

        logger.info(
            "[SYNTHESIS] Applied | nodes=%d | focus=%s | stagnation=%d",
            len(created),
            payload.strategic_focus,
            context.stagnation.counter,
        )

        return created

    def _insert(self, context, payload: ArchitectPayload, update: KnowledgeUpdate) -> Optional[KnowledgeNode]:

        node_type = NodeType.parse(update.type)
        if node_type is None:
            logger.warning("[SYNTHESIS] Unknown node type '%s' skipped", update.type)
            return None

        promise = payload.promise_for(update.content)

        node = context.graph.create(
            node_type,
            update.content,
            relations=update.relations,
            created_by=update.created_by,
            promise_score=promise,
        )

        context.agents.record_contribution(update.created_by, promise)
        context.index.index_node(node)

        if node_type is NodeType.DIRECTIVE:
            context.objective = node.content

        return node
