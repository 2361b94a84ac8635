"""
Fixed-length text chunking.

A chunk is exactly ``chunk_size`` characters of the source text. Chunks never
overlap and the trailing remainder shorter than ``chunk_size`` is dropped.
"""

from __future__ import annotations

from typing import Iterable


def chunk_text(text: str, chunk_size: int) -> list[str]:
    """
    Split text into consecutive chunks of exactly chunk_size characters.

    Returns an empty list when chunk_size is not positive or exceeds the
    text length.
    """
    if chunk_size <= 0 or chunk_size > len(text):
        return []
    count = len(text) // chunk_size
    return [text[i * chunk_size : (i + 1) * chunk_size] for i in range(count)]


def chunk_documents(texts: Iterable[str], chunk_size: int) -> list[str]:
    """Chunk each text independently and concatenate the results in order."""
    chunks: list[str] = []
    for text in texts:
        chunks.extend(chunk_text(text, chunk_size))
    return chunks
