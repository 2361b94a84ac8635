"""
Persistent storage layer for gguf-rag.

Provides:
- SQLiteVectorStore: two-table SQLite persistence for EmbeddingStore
"""

from gguf_rag.storage.sqlite_vector_store import SQLiteVectorStore, load, save

__all__ = [
    "SQLiteVectorStore",
    "load",
    "save",
]
