"""
Embedding Providers - text to fixed-length vector

The core consumes embeddings through the one-method Embedder protocol, so
the real model-backed implementation and the deterministic test double are
interchangeable without touching the store or the pipelines.

Implementations:
- OllamaEmbedder: thin wrapper around ollama.Client.embed() (ollama 0.4+)
- HashEmbedder: deterministic SHA-256 based vectors for tests and offline use

Usage:
    from vector_store.embedder import OllamaEmbedder

    embedder = OllamaEmbedder(model="nomic-embed-text", dimension=768)
    vector = embedder.embed("An example text")
"""

import hashlib
import logging
from typing import Optional, Protocol, runtime_checkable

import numpy as np
import ollama

from core.exceptions import InvalidInputError, ProviderFaultError

logger = logging.getLogger(__name__)


@runtime_checkable
class Embedder(Protocol):
    """Capability interface: deterministic text -> vector of fixed length."""

    def embed(self, text: str) -> list[float]:
        ...


class OllamaEmbedder:
    """
    Generates text embeddings using a local Ollama model.

    The embedder connects to a running Ollama instance and uses a specified
    embedding model to convert text into dense vector representations.
    """

    def __init__(
        self,
        model: str = "nomic-embed-text",
        base_url: str = "http://localhost:11434",
        dimension: Optional[int] = None,
    ):
        """
        Initialize the embedder.

        Args:
            model: Ollama model name for embeddings.
            base_url: Ollama API base URL.
            dimension: Expected vector length. When set, any response of a
                different length is reported as a provider fault.
        """
        self.model = model
        self.base_url = base_url
        self.dimension = dimension
        self._client = ollama.Client(host=base_url)

    def embed(self, text: str) -> list[float]:
        """
        Generate an embedding for a single text.

        Raises:
            InvalidInputError: If the text is empty.
            ProviderFaultError: If Ollama is unreachable, the model fails,
                or the vector has the wrong length.
        """
        if not text or not text.strip():
            raise InvalidInputError("Cannot embed empty text")

        try:
            response = self._client.embed(model=self.model, input=text)
            embedding = list(response["embeddings"][0])
        except ollama.ResponseError as e:
            raise ProviderFaultError(
                f"Ollama embedding failed for model '{self.model}'", e
            ) from e
        except Exception as e:
            if "Connection" in type(e).__name__ or "refused" in str(e).lower():
                raise ProviderFaultError(
                    f"Cannot connect to Ollama at {self.base_url}. "
                    f"Is Ollama running? Start it with: ollama serve",
                    e,
                ) from e
            raise ProviderFaultError("Embedding generation failed", e) from e

        if self.dimension is not None and len(embedding) != self.dimension:
            raise ProviderFaultError(
                f"Model '{self.model}' returned {len(embedding)} dimensions, "
                f"expected {self.dimension}"
            )
        return embedding

    def health_check(self) -> dict[str, bool | str]:
        """
        Check if Ollama is running and the embedding model is available.

        Returns:
            Dict with 'healthy' (bool), 'ollama_running' (bool),
            'model_available' (bool), 'model' and 'error' (str, if any).
        """
        result = {
            "healthy": False,
            "ollama_running": False,
            "model_available": False,
            "model": self.model,
            "error": "",
        }

        try:
            models = self._client.list()
            result["ollama_running"] = True

            model_names = [m.model for m in models.models]
            # Match by prefix (e.g., "nomic-embed-text" matches "nomic-embed-text:latest")
            result["model_available"] = any(
                m.startswith(self.model) for m in model_names
            )

            if not result["model_available"]:
                result["error"] = (
                    f"Model '{self.model}' not found. "
                    f"Available: {model_names}. "
                    f"Pull it with: ollama pull {self.model}"
                )
            else:
                result["healthy"] = True

        except Exception as e:
            logger.warning(f"Ollama health check failed: {e}")
            result["error"] = f"Cannot connect to Ollama: {e}"

        return result


class HashEmbedder:
    """
    Deterministic embedder for tests and offline runs.

    The vector is built from a SHA-256 digest stream of the text and
    L2-normalised. Identical texts always map to identical vectors;
    it carries no semantic meaning.
    """

    def __init__(self, dimension: int = 768):
        if dimension <= 0:
            raise InvalidInputError(f"Embedding dimension must be positive, got {dimension}")
        self.dimension = dimension

    def embed(self, text: str) -> list[float]:
        raw = bytearray()
        counter = 0
        while len(raw) < self.dimension:
            raw.extend(hashlib.sha256(f"{counter}:{text}".encode("utf-8")).digest())
            counter += 1

        vector = np.frombuffer(bytes(raw[: self.dimension]), dtype=np.uint8)
        vector = vector.astype(np.float32) / np.float32(127.5) - np.float32(1.0)
        norm = np.linalg.norm(vector)
        if norm > 0:
            vector = vector / norm
        return vector.astype(np.float32).tolist()
