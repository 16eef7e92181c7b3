"""
Shared mission knowledge: the append-only graph and its vector index.
"""

from .nodes import KnowledgeNode, NodeType, parse_relation
from .graph import KnowledgeGraph
from .semantic_index import SemanticIndex, cosine_similarity

__all__ = [
    "KnowledgeNode",
    "NodeType",
    "parse_relation",
    "KnowledgeGraph",
    "SemanticIndex",
    "cosine_similarity",
]
