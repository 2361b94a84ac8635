"""
Shared test fixtures and pytest configuration.

Markers:
    @pytest.mark.embedding    — Requires sentence-transformers model downloadable

Run:
    pytest -m embedding               # only real embedding model tests
    pytest -m "not embedding"         # fast CI
"""

from typing import Optional

import pytest

from gguf_rag.rag.vector_store import EmbeddingStore


def _embedding_model_available() -> bool:
    """Check if all-MiniLM-L6-v2 can be loaded (already cached or downloadable)."""
    try:
        from sentence_transformers import SentenceTransformer

        model = SentenceTransformer("all-MiniLM-L6-v2")
        vec = model.encode(["test"])
        return vec.shape[1] == 384
    except Exception:
        return False


_EMBEDDING_OK: Optional[bool] = None


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "embedding: requires sentence-transformers model available")


def pytest_collection_modifyitems(config, items):
    """Auto-skip tests whose infrastructure requirements are not met."""
    global _EMBEDDING_OK

    if not any("embedding" in item.keywords for item in items):
        return
    if _EMBEDDING_OK is None:
        _EMBEDDING_OK = _embedding_model_available()

    skip_embedding = pytest.mark.skip(reason="Embedding model not available (all-MiniLM-L6-v2)")
    for item in items:
        if "embedding" in item.keywords and not _EMBEDDING_OK:
            item.add_marker(skip_embedding)


@pytest.fixture
def animal_store():
    """Store from the cat/dog/fish scenario."""
    store = EmbeddingStore()
    store.add("cat", [1.0, 0.0])
    store.add("dog", [0.0, 1.0])
    store.add("fish", [0.7, 0.7])
    return store


@pytest.fixture
def basis_store():
    """Store of the orthonormal basis e1, e2, e3."""
    store = EmbeddingStore(embedding_size=3)
    store.add("first", [1.0, 0.0, 0.0])
    store.add("second", [0.0, 1.0, 0.0])
    store.add("third", [0.0, 0.0, 1.0])
    return store
