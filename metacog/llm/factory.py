from metacog.config import MissionConfig
from .client import GenerationClient
from .embeddings import EmbeddingClient


def create_oracle(config: MissionConfig) -> GenerationClient:
    """
    Factory for the generation oracle.

    Supported backends:
    - "openai" → OpenAI SDK (any OpenAI-compatible endpoint)
    - "ollama" → local Ollama server
    """

    backend = config.llm_backend

    if backend == "openai":
        from .openai_client import OpenAIClient
        return OpenAIClient(model=config.model) if config.model else OpenAIClient()

    if backend == "ollama":
        from .ollama_client import OllamaClient
        return OllamaClient(model=config.model) if config.model else OllamaClient()

    raise ValueError(f"Unsupported llm_backend: {backend}")


def create_embedder(config: MissionConfig) -> EmbeddingClient:
    """Factory for the embedding oracle."""

    backend = config.embedding_backend
    model = config.embedding_model

    if backend == "openai":
        from .embeddings import OpenAIEmbeddingClient
        return OpenAIEmbeddingClient(model=model) if model else OpenAIEmbeddingClient()

    if backend == "ollama":
        from .embeddings import OllamaEmbeddingClient
        return OllamaEmbeddingClient(model=model) if model else OllamaEmbeddingClient()

    raise ValueError(f"Unsupported embedding_backend: {backend}")
