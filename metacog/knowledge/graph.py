from dataclasses import replace
from threading import RLock
from typing import Dict, Iterable, List, Optional, Set
import logging

from .nodes import KnowledgeNode, NodeType

logger = logging.getLogger(__name__)


class KnowledgeGraph:
    """
    Append-only knowledge graph shared by the whole mission.

    This class is a *data structure only*: it does not decide what
    gets written. The architect's synthesis step and the formal
    verification tool are the only writers.

    Nodes are immutable and never removed. Ids come from one
    monotonically increasing counter and are never reused, even across
    snapshot restores.
    """

    def __init__(self) -> None:
        self._nodes: Dict[str, KnowledgeNode] = {}
        self._counter: int = 0
        self._lock = RLock()

    # ------------------------------------------------------------------
    # Id Allocation
    # ------------------------------------------------------------------

    @property
    def counter(self) -> int:
        return self._counter

    def allocate_id(self, node_type: NodeType) -> str:
        """Reserve the next id, e.g. ``H7`` for a HYPOTHESIS."""
        with self._lock:
            node_id = f"{node_type.value[0]}{self._counter}"
            self._counter += 1
            return node_id

    # ------------------------------------------------------------------
    # Node Operations
    # ------------------------------------------------------------------

    def insert(self, node: KnowledgeNode) -> None:
        with self._lock:
            if node.id in self._nodes:
                raise ValueError(f"Node '{node.id}' already exists.")
            self._nodes[node.id] = node

        logger.debug("[KNOWLEDGE] Inserted %s (%s)", node.id, node.type.value)

    def create(
        self,
        node_type: NodeType,
        content: str,
        relations: Iterable[str] = (),
        created_by: Optional[str] = None,
        promise_score: float = 0.5,
    ) -> KnowledgeNode:
        """Allocate an id and insert a new node in one step."""
        with self._lock:
            node = KnowledgeNode(
                id=self.allocate_id(node_type),
                type=node_type,
                content=content,
                relations=tuple(relations),
                created_by=created_by,
                promise_score=promise_score,
            )
            self.insert(node)
            return node

    def get(self, node_id: str) -> Optional[KnowledgeNode]:
        with self._lock:
            return self._nodes.get(node_id)

    def has(self, node_id: str) -> bool:
        with self._lock:
            return node_id in self._nodes

    def all(self) -> List[KnowledgeNode]:
        """All nodes in insertion order."""
        with self._lock:
            return list(self._nodes.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._nodes)

    def set_verified(self, node_id: str, verified: bool) -> KnowledgeNode:
        with self._lock:
            node = self._nodes.get(node_id)
            if node is None:
                raise KeyError(f"Node '{node_id}' does not exist.")
            updated = replace(node, verified=bool(verified))
            self._nodes[node_id] = updated

        logger.info("[KNOWLEDGE] %s verified=%s", node_id, verified)
        return updated

    # ------------------------------------------------------------------
    # Derived Invalidation
    # ------------------------------------------------------------------

    def mark_invalidated(self) -> Set[str]:
        """
        Return the ids targeted by a REFUTES or INVALIDATES relation of
        some other node. Recomputed on every call.
        """
        invalidated: Set[str] = set()

        with self._lock:
            for node in self._nodes.values():
                for target in node.targets():
                    if target != node.id:
                        invalidated.add(target)

        return invalidated

    def is_invalidated(self, node_id: str) -> bool:
        return node_id in self.mark_invalidated()

    def to_records(self) -> List[dict]:
        """Node dicts with the derived `invalidated` flag attached."""
        invalidated = self.mark_invalidated()
        records = []
        for node in self.all():
            record = node.to_dict()
            record["invalidated"] = node.id in invalidated
            records.append(record)
        return records

    # ------------------------------------------------------------------
    # Persistence Support
    # ------------------------------------------------------------------

    def load_state(self, nodes: Iterable[KnowledgeNode], counter: int) -> None:
        """
        Replace the entire graph during a snapshot restore.

        The counter never moves below the number of loaded nodes so
        that restored ids cannot be handed out again.
        """
        with self._lock:
            self._nodes = {}
            for node in nodes:
                self._nodes[node.id] = node
            self._counter = max(int(counter or 0), len(self._nodes))

    def clear(self) -> None:
        with self._lock:
            self._nodes = {}
            self._counter = 0
