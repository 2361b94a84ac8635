"""
In-memory embedding store: an insertion-ordered mapping of chunk text to
embedding vector.

By default chunk text is the key, so a repeated chunk keeps a single entry:
the later vector wins and the entry stays where the text first appeared.
With ``dedupe=False`` every insertion is kept as its own entry.

The store is populated once, by ``train`` or ``from_records``, and is only
read afterwards. Ranking lives in rag.ranker and persistence in
storage.sqlite_vector_store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Sequence

import numpy as np

from gguf_rag.errors import DataMismatchError, DimensionMismatchError

LOG = logging.getLogger("rag.vector_store")

EmbedFn = Callable[[str], Sequence[float]]
ProgressFn = Callable[[int, int], None]


def log_progress(current: int, total: int) -> None:
    """Default progress sink."""
    LOG.info("Embedding chunk %d/%d", current, total)


@dataclass(frozen=True, eq=False)
class StoreEntry:
    """A single chunk and its embedding."""

    text: str
    vector: np.ndarray


class EmbeddingStore:
    """
    Ordered chunk-text → embedding mapping.

    All vectors share one length, ``embedding_size``. It is fixed by the
    constructor or, when left as None, by the first vector added.
    """

    def __init__(self, embedding_size: Optional[int] = None, dedupe: bool = True) -> None:
        if embedding_size is not None and embedding_size <= 0:
            raise ValueError(f"embedding_size must be positive, got {embedding_size}")
        self._embedding_size = embedding_size
        self._dedupe = dedupe
        self._texts: list[str] = []
        self._vectors: list[np.ndarray] = []
        self._index: dict[str, int] = {}

    # ── Population ────────────────────────────────────────────────────

    def add(self, text: str, vector: Sequence[float]) -> None:
        """Insert one entry. With dedupe on, an existing text is overwritten in place."""
        arr = self._coerce(vector)
        if self._embedding_size is None:
            self._embedding_size = arr.shape[0]

        if self._dedupe and text in self._index:
            self._vectors[self._index[text]] = arr
            LOG.debug("Duplicate chunk overwritten at position %d", self._index[text])
            return

        self._index.setdefault(text, len(self._texts))
        self._texts.append(text)
        self._vectors.append(arr)

    def train(
        self,
        chunks: Sequence[str],
        embed: EmbedFn,
        progress: Optional[ProgressFn] = log_progress,
    ) -> None:
        """
        Embed every chunk, one call per chunk in input order, and insert it.

        Errors raised by ``embed`` propagate unchanged. Entries are staged
        and only committed once every chunk has been embedded, so a failed
        run leaves the store untouched.
        """
        staged = self._copy()
        total = len(chunks)
        for current, chunk in enumerate(chunks, 1):
            staged.add(chunk, embed(chunk))
            if progress is not None:
                progress(current, total)

        self._embedding_size = staged._embedding_size
        self._texts = staged._texts
        self._vectors = staged._vectors
        self._index = staged._index
        LOG.info("Trained store on %d chunks (%d entries)", total, len(self))

    @classmethod
    def from_records(
        cls,
        texts: Sequence[str],
        flat_vectors: Sequence[float],
        embedding_size: int,
        dedupe: bool = True,
    ) -> "EmbeddingStore":
        """
        Rebuild a store from parallel text rows and a flattened vector sequence.

        Vector k is ``flat_vectors[k*embedding_size:(k+1)*embedding_size]``.

        Raises:
            DataMismatchError: The scalar count is not exactly
                ``len(texts) * embedding_size``.
        """
        if embedding_size <= 0:
            raise ValueError(f"embedding_size must be positive, got {embedding_size}")
        if len(flat_vectors) % embedding_size != 0:
            raise DataMismatchError(
                f"{len(flat_vectors)} stored scalars is not a multiple of embedding size {embedding_size}"
            )
        if len(flat_vectors) // embedding_size != len(texts):
            raise DataMismatchError(
                f"Found {len(flat_vectors) // embedding_size} vectors for {len(texts)} texts"
            )

        flat = np.asarray(flat_vectors, dtype=np.float64)
        store = cls(embedding_size=embedding_size, dedupe=dedupe)
        for k, text in enumerate(texts):
            store.add(text, flat[k * embedding_size : (k + 1) * embedding_size])
        return store

    # ── Read access ───────────────────────────────────────────────────

    @property
    def embedding_size(self) -> Optional[int]:
        return self._embedding_size

    @property
    def dedupe(self) -> bool:
        return self._dedupe

    def __len__(self) -> int:
        return len(self._texts)

    def __contains__(self, text: object) -> bool:
        return text in self._index

    def __iter__(self) -> Iterator[StoreEntry]:
        for text, vector in zip(self._texts, self._vectors):
            yield StoreEntry(text=text, vector=vector)

    def get(self, text: str) -> Optional[np.ndarray]:
        """Vector for a text (its first entry when duplicates are kept)."""
        pos = self._index.get(text)
        return None if pos is None else self._vectors[pos]

    def texts(self) -> list[str]:
        return list(self._texts)

    def vectors(self) -> list[np.ndarray]:
        return list(self._vectors)

    def matrix(self) -> np.ndarray:
        """All vectors stacked in entry order, shape (len(store), embedding_size)."""
        if not self._vectors:
            return np.empty((0, self._embedding_size or 0), dtype=np.float64)
        return np.vstack(self._vectors)

    def to_records(self) -> tuple[list[str], list[float]]:
        """Flatten into (texts, scalars) in entry order, the inverse of from_records."""
        flat: list[float] = []
        for vector in self._vectors:
            flat.extend(vector.tolist())
        return list(self._texts), flat

    # ── Internals ─────────────────────────────────────────────────────

    def _coerce(self, vector: Sequence[float]) -> np.ndarray:
        arr = np.array(vector, dtype=np.float64)
        if arr.ndim != 1:
            raise ValueError(f"Embedding must be one-dimensional, got shape {arr.shape}")
        if self._embedding_size is not None and arr.shape[0] != self._embedding_size:
            raise DimensionMismatchError(self._embedding_size, arr.shape[0])
        arr.setflags(write=False)
        return arr

    def _copy(self) -> "EmbeddingStore":
        clone = EmbeddingStore(embedding_size=self._embedding_size, dedupe=self._dedupe)
        clone._texts = list(self._texts)
        clone._vectors = list(self._vectors)
        clone._index = dict(self._index)
        return clone

    def __repr__(self) -> str:
        return f"EmbeddingStore(entries={len(self)}, embedding_size={self._embedding_size}, dedupe={self._dedupe})"
