"""
Exhaustive dot-product ranking over an EmbeddingStore.

Every query scores every stored vector; there is no index and nothing is
cached between queries. Scores are raw dot products, so vector magnitude
affects the ranking. Equal scores keep entry order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from gguf_rag.errors import DimensionMismatchError
from gguf_rag.rag.vector_store import EmbeddingStore

LOG = logging.getLogger("rag.ranker")


@dataclass
class ScoredChunk:
    """A ranked chunk with its score and its position in the store."""

    text: str
    score: float
    index: int


def dot_product(a: Sequence[float], b: Sequence[float]) -> float:
    if len(a) != len(b):
        raise DimensionMismatchError(len(a), len(b))
    return float(np.dot(np.asarray(a, dtype=np.float64), np.asarray(b, dtype=np.float64)))


def rank(store: EmbeddingStore, query: Sequence[float], k: int) -> list[ScoredChunk]:
    """
    Score all entries against the query and return the best k, highest first.

    Raises:
        DimensionMismatchError: Query length differs from the store's embedding size.
        ValueError: k is negative.
    """
    if k < 0:
        raise ValueError(f"k must be non-negative, got {k}")

    q = np.asarray(query, dtype=np.float64)
    if store.embedding_size is not None and q.shape[0] != store.embedding_size:
        raise DimensionMismatchError(store.embedding_size, q.shape[0])
    if k == 0 or len(store) == 0:
        return []

    scores = store.matrix() @ q
    # stable sort keeps insertion order among equal scores
    order = np.argsort(-scores, kind="stable")[:k]
    texts = store.texts()

    LOG.debug("Ranked %d entries, returning %d", len(texts), len(order))
    return [ScoredChunk(text=texts[i], score=float(scores[i]), index=int(i)) for i in order]


def top_k(store: EmbeddingStore, query: Sequence[float], k: int) -> list[str]:
    """Texts of the k entries most similar to the query, most similar first."""
    return [scored.text for scored in rank(store, query, k)]
