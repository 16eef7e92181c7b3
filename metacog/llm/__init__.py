"""
Oracle transport layer.

Exposes:
- GenerationClient (abstract interface) and OracleError
- OpenAIClient (remote backend)
- OllamaClient (local backend)
- EmbeddingClient and its OpenAI / Ollama backends
"""

from .client import GenerationClient, OracleError
from .openai_client import OpenAIClient
from .ollama_client import OllamaClient
from .embeddings import EmbeddingClient, OpenAIEmbeddingClient, OllamaEmbeddingClient

__all__ = [
    "GenerationClient",
    "OracleError",
    "OpenAIClient",
    "OllamaClient",
    "EmbeddingClient",
    "OpenAIEmbeddingClient",
    "OllamaEmbeddingClient",
]
