from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, Optional, Tuple


INVALIDATING_ACTIONS = frozenset({"REFUTES", "INVALIDATES"})


class NodeType(str, Enum):
    THEOREM = "THEOREM"
    HYPOTHESIS = "HYPOTHESIS"
    REFUTATION = "REFUTATION"
    DIRECTIVE = "DIRECTIVE"
    LEMMA = "LEMMA"
    CONCEPT = "CONCEPT"
    ANALOGY = "ANALOGY"
    RESEARCH_VECTOR = "RESEARCH_VECTOR"
    VERIFICATION_SUCCESS = "VERIFICATION_SUCCESS"
    VERIFICATION_FAILURE = "VERIFICATION_FAILURE"
    CODE_EXPERIMENT = "CODE_EXPERIMENT"
    ABSTRACTION = "ABSTRACTION"
    SUB_GOAL = "SUB_GOAL"

    @classmethod
    def parse(cls, value: Any) -> Optional["NodeType"]:
        """Lenient lookup for oracle-provided type names."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


def parse_relation(relation: str) -> Tuple[str, str]:
    """
    Split an ``"ACTION:targetId"`` relation.

    The action is upper-cased; anything after the first colon is the
    target id. A relation without a colon has an empty target.
    """
    action, _, target = relation.partition(":")
    return action.strip().upper(), target.strip()


@dataclass(frozen=True)
class KnowledgeNode:
    """
    Immutable unit of knowledge stored in the mission graph.

    Only `verified` may change after creation, and only through the
    store. Invalidation is never stored here; the graph derives it from
    the relations of the other nodes.
    """

    id: str
    type: NodeType
    content: str
    relations: Tuple[str, ...] = field(default_factory=tuple)
    verified: Optional[bool] = None
    created_by: Optional[str] = None
    promise_score: float = 0.5

    def __post_init__(self):
        object.__setattr__(self, "relations", tuple(self.relations))
        object.__setattr__(
            self,
            "promise_score",
            max(0.0, min(1.0, float(self.promise_score))),
        )

    def targets(self, actions=INVALIDATING_ACTIONS):
        """Yield target ids of relations whose action is in `actions`."""
        for relation in self.relations:
            action, target = parse_relation(relation)
            if action in actions and target:
                yield target

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["type"] = self.type.value
        data["relations"] = list(self.relations)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "KnowledgeNode":
        node_type = NodeType.parse(data.get("type"))
        if node_type is None:
            raise ValueError(f"Unknown node type: {data.get('type')!r}")

        return cls(
            id=data["id"],
            type=node_type,
            content=data.get("content", ""),
            relations=tuple(data.get("relations") or ()),
            verified=data.get("verified"),
            created_by=data.get("created_by"),
            promise_score=data.get("promise_score", 0.5),
        )

    def summary_line(self) -> str:
        return f"[{self.id}] {self.type.value}: {self.content}"
