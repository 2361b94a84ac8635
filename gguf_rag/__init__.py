"""
gguf-rag: chat with the author of a body of work.

Documents are cut into fixed-size chunks, each chunk is embedded once, and the
text → vector mapping is kept in SQLite. Questions are answered by handing the
top-k chunks, ranked by raw dot product, to a text generator as context.
"""

from __future__ import annotations

from gguf_rag.errors import (
    DataMismatchError,
    DimensionMismatchError,
    EmbeddingProviderError,
    StoreIOError,
    StoreNotFoundError,
    VectorDBError,
)
from gguf_rag.rag.chunker import chunk_text
from gguf_rag.rag.ranker import rank, top_k
from gguf_rag.rag.vector_store import EmbeddingStore

__version__ = "0.1.0"

__all__ = [
    "DataMismatchError",
    "DimensionMismatchError",
    "EmbeddingProviderError",
    "EmbeddingStore",
    "StoreIOError",
    "StoreNotFoundError",
    "VectorDBError",
    "chunk_text",
    "rank",
    "top_k",
]
