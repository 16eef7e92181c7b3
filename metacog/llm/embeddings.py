from abc import ABC, abstractmethod
from typing import List, Optional

import requests
from openai import OpenAI, OpenAIError

from .client import OracleError


class EmbeddingClient(ABC):
    """
    Abstract embedding oracle.

    Turns text into a fixed-length vector. Callers in the semantic index
    treat any exception as "no embedding" rather than a fatal error.
    """

    model: str = ""

    @abstractmethod
    def embed(self, text: str) -> List[float]:
        raise NotImplementedError


class OpenAIEmbeddingClient(EmbeddingClient):

    def __init__(
        self,
        model: str = "text-embedding-3-small",
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout_seconds: float = 60,
    ):
        self.model = model
        self.client = OpenAI(api_key=api_key, base_url=base_url, timeout=timeout_seconds)

    def embed(self, text: str) -> List[float]:
        try:
            response = self.client.embeddings.create(model=self.model, input=text)
        except OpenAIError as e:
            raise OracleError(f"OpenAI embedding failed: {e}") from e

        if not response.data:
            raise OracleError("OpenAI embedding returned no vectors")

        return list(response.data[0].embedding)


class OllamaEmbeddingClient(EmbeddingClient):
    """Local embeddings through the Ollama REST API."""

    def __init__(
        self,
        model: str = "nomic-embed-text",
        base_url: str = "http://localhost:11434/api/embeddings",
        timeout_seconds: int = 60,
    ):
        self.model = model
        self.url = base_url
        self.timeout = timeout_seconds

    def embed(self, text: str) -> List[float]:
        try:
            response = requests.post(
                self.url,
                json={"model": self.model, "prompt": text},
                timeout=self.timeout,
                proxies={"http": None, "https": None},
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise OracleError(f"Ollama embedding failed: {e}") from e

        try:
            vector = response.json()["embedding"]
        except (KeyError, ValueError) as e:
            raise OracleError(f"Unexpected Ollama embedding format: {e}") from e

        return list(vector)
