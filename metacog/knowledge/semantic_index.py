from threading import RLock
from typing import Callable, Iterable, List, Optional, Sequence, Tuple
import logging

import numpy as np

from .nodes import KnowledgeNode

logger = logging.getLogger(__name__)


ProgressCallback = Callable[[int, int], None]


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity of two vectors.

    Returns 0.0 when the lengths differ or either vector has zero
    magnitude.
    """
    vec_a = np.asarray(a, dtype=float)
    vec_b = np.asarray(b, dtype=float)

    if vec_a.shape != vec_b.shape or vec_a.size == 0:
        return 0.0

    mag_a = np.linalg.norm(vec_a)
    mag_b = np.linalg.norm(vec_b)
    if mag_a == 0 or mag_b == 0:
        return 0.0

    return float(np.dot(vec_a, vec_b) / (mag_a * mag_b))


class SemanticIndex:
    """
    In-memory vector index over knowledge nodes.

    Vectors are never persisted; after a snapshot restore the index is
    rebuilt from node content with `rebuild_all`.

    Embedding failures are not errors here: a node that cannot be
    embedded is simply absent from the index.
    """

    def __init__(self, embedder) -> None:
        self._embedder = embedder
        self._entries: List[Tuple[str, np.ndarray]] = []
        self._lock = RLock()

    # ------------------------------------------------------------------
    # Embedding
    # ------------------------------------------------------------------

    def embed(self, text: str) -> Optional[List[float]]:
        if not text or not text.strip():
            return None

        try:
            vector = self._embedder.embed(text)
        except Exception as e:
            logger.warning("[SEMANTIC INDEX] Embedding failed: %s", e)
            return None

        if vector is None or len(vector) == 0:
            return None
        return list(vector)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add(self, node_id: str, vector: Sequence[float]) -> None:
        with self._lock:
            self._entries.append((node_id, np.asarray(vector, dtype=float)))

    def index_node(self, node: KnowledgeNode) -> bool:
        """Embed and add a node. Returns False when it could not be embedded."""
        vector = self.embed(node.content)
        if vector is None:
            logger.debug("[SEMANTIC INDEX] %s left out of index", node.id)
            return False
        self.add(node.id, vector)
        return True

    def clear(self) -> None:
        with self._lock:
            self._entries = []

    def rebuild_all(
        self,
        nodes: Iterable[KnowledgeNode],
        progress: Optional[ProgressCallback] = None,
    ) -> int:
        """
        Clear and re-embed every node sequentially.

        Returns the number of nodes that made it into the index.
        """
        nodes = list(nodes)
        total = len(nodes)
        self.clear()

        logger.info("[SEMANTIC INDEX] Re-indexing knowledge base (0/%d)", total)

        indexed = 0
        for done, node in enumerate(nodes, start=1):
            if self.index_node(node):
                indexed += 1
            if progress is not None:
                progress(done, total)

        logger.info("[SEMANTIC INDEX] Re-indexed %d/%d nodes", indexed, total)
        return indexed

    # ------------------------------------------------------------------
    # Retrieval
    # ------------------------------------------------------------------

    def query(self, text: str, k: int = 3) -> List[str]:
        """Ids of the `k` nearest nodes, most similar first."""
        with self._lock:
            entries = list(self._entries)

        if not entries or k <= 0:
            return []

        query_vector = self.embed(text)
        if query_vector is None:
            return []

        return self.query_vector(query_vector, k, entries)

    def query_vector(self, vector: Sequence[float], k: int = 3, entries=None) -> List[str]:
        if entries is None:
            with self._lock:
                entries = list(self._entries)

        scored = [
            (node_id, cosine_similarity(vector, embedding))
            for node_id, embedding in entries
        ]
        # sorted() is stable, so equal scores keep insertion order
        scored = sorted(scored, key=lambda item: -item[1])
        return [node_id for node_id, _ in scored[:k]]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
