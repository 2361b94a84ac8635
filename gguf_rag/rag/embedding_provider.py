"""
Embedding provider abstraction with local and Ollama backends.

The retrieval core only needs "text in, fixed-length vector out"; which model
runtime produces the vector is decided here. Vectors are returned raw, never
normalized, because ranking uses the unnormalized dot product.
"""

from __future__ import annotations

import hashlib
import logging
from abc import ABC, abstractmethod
from typing import Any, Mapping, Sequence

import httpx
import numpy as np

from gguf_rag.errors import EmbeddingProviderError

LOG = logging.getLogger("rag.embedding_provider")


class EmbeddingProvider(ABC):
    """Abstract interface for text → embedding vector conversion."""

    @abstractmethod
    def embed(self, texts: list[str]) -> list[list[float]]:
        """
        Convert a batch of texts into embedding vectors.

        Returns a list of float vectors, one per input text.
        """
        ...

    @abstractmethod
    def dimension(self) -> int:
        """Return the embedding dimensionality."""
        ...

    def embed_one(self, text: str) -> list[float]:
        """Embed a single text."""
        vectors = self.embed([text])
        if len(vectors) != 1:
            raise EmbeddingProviderError(f"Expected 1 embedding, provider returned {len(vectors)}")
        return vectors[0]

    def close(self) -> None:
        """Release resources. Override if needed."""
        pass


class LocalEmbeddingProvider(EmbeddingProvider):
    """
    Local embedding via sentence-transformers.

    Default model: all-MiniLM-L6-v2 (384 dimensions).
    """

    def __init__(self, model_name: str = "all-MiniLM-L6-v2", device: str | None = None) -> None:
        from sentence_transformers import SentenceTransformer

        self._model_name = model_name
        LOG.info("Loading embedding model: %s", model_name)
        self._model = SentenceTransformer(model_name, device=device)
        self._dim = self._model.get_sentence_embedding_dimension()

    def embed(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        embeddings = self._model.encode(
            texts,
            normalize_embeddings=False,
            show_progress_bar=False,
            convert_to_numpy=True,
        )
        return [e.tolist() for e in embeddings]

    def dimension(self) -> int:
        return self._dim


class OllamaEmbeddingProvider(EmbeddingProvider):
    """
    Embedding backend using a running Ollama server's HTTP API.

    The dimension is learned from the first response unless given up front.
    Transport errors, HTTP errors and malformed payloads are raised as
    EmbeddingProviderError.
    """

    def __init__(
        self,
        model: str = "nomic-embed-text",
        base_url: str = "http://localhost:11434",
        timeout: float = 120.0,
        dim: int | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._model = model
        self._base_url = base_url
        self._dim = dim
        self._client = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)

    def embed(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        try:
            resp = self._client.post("/api/embed", json={"model": self._model, "input": texts})
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPError as exc:
            raise EmbeddingProviderError(f"Ollama embedding request to {self._base_url} failed: {exc}") from exc
        except ValueError as exc:
            raise EmbeddingProviderError(f"Ollama returned invalid JSON: {exc}") from exc

        embeddings = data.get("embeddings") if isinstance(data, dict) else None
        if not isinstance(embeddings, list) or len(embeddings) != len(texts):
            raise EmbeddingProviderError(
                f"Ollama returned {len(embeddings) if isinstance(embeddings, list) else 'no'} embeddings "
                f"for {len(texts)} texts"
            )
        vectors = [[float(x) for x in e] for e in embeddings]
        if self._dim is None:
            self._dim = len(vectors[0])
            LOG.info("Ollama model %s produces %d-dimensional embeddings", self._model, self._dim)
        return vectors

    def dimension(self) -> int:
        if self._dim is None:
            self.embed_one(" ")
        if self._dim is None:
            raise EmbeddingProviderError(f"Could not determine embedding size for {self._model}")
        return self._dim

    def close(self) -> None:
        self._client.close()


class MockEmbeddingProvider(EmbeddingProvider):
    """
    Deterministic embedding provider for testing.

    Texts found in ``table`` get their listed vector; anything else gets a
    pseudo-random vector seeded from the SHA-256 of the text, so identical
    texts always embed identically.
    """

    def __init__(self, dim: int = 8, table: Mapping[str, Sequence[float]] | None = None) -> None:
        self._dim = dim
        self._table = {text: [float(x) for x in vec] for text, vec in (table or {}).items()}
        self._call_count = 0

    def embed(self, texts: list[str]) -> list[list[float]]:
        self._call_count += 1
        return [self._table[t] if t in self._table else self._hash_embed(t) for t in texts]

    def _hash_embed(self, text: str) -> list[float]:
        digest = hashlib.sha256(text.encode("utf-8")).digest()
        seed = int.from_bytes(digest[:8], "little", signed=False)
        rng = np.random.default_rng(seed)
        return rng.standard_normal(self._dim).tolist()

    def dimension(self) -> int:
        return self._dim

    @property
    def call_count(self) -> int:
        return self._call_count


def build_embedding_provider(backend: str = "local", **kwargs: Any) -> EmbeddingProvider:
    """
    Factory: create an EmbeddingProvider of the requested type.

    Args:
        backend: "local", "ollama" or "mock"
        **kwargs: Backend-specific configuration

    Raises:
        ValueError: Unknown backend
    """
    if backend == "local":
        return LocalEmbeddingProvider(**kwargs)
    elif backend == "ollama":
        return OllamaEmbeddingProvider(**kwargs)
    elif backend == "mock":
        return MockEmbeddingProvider(**kwargs)
    else:
        raise ValueError(f"Unknown embedding backend: {backend!r}. Supported: 'local', 'ollama', 'mock'")
