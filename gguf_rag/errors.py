"""
Exception hierarchy for gguf-rag.

Every failure the retrieval core reports derives from VectorDBError so callers
can catch the whole family at once. Nothing in the core retries; retry policy
belongs to whoever calls it.
"""

from __future__ import annotations


class VectorDBError(Exception):
    """Base exception for vector database errors."""

    pass


class StoreIOError(VectorDBError):
    """A persisted store could not be read, written or replaced."""

    pass


class StoreNotFoundError(VectorDBError):
    """A load was requested but nothing exists at the given location."""

    pass


class DataMismatchError(VectorDBError):
    """Persisted texts and vectors do not line up."""

    pass


class DimensionMismatchError(VectorDBError):
    """A vector's length differs from the store's embedding size."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(f"Vector has {actual} dimensions, expected {expected}")
        self.expected = expected
        self.actual = actual


class EmbeddingProviderError(VectorDBError):
    """An embedding backend failed to produce a vector."""

    pass
