"""
Retrieval-augmented question answering over an EmbeddingStore.

Build (or load) the store → embed the question → top-k by dot product →
pack the chunks into a prompt → stream the generator's answer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Union

from gguf_rag.errors import StoreNotFoundError
from gguf_rag.ingest.documents import load_chunks
from gguf_rag.rag.embedding_provider import EmbeddingProvider
from gguf_rag.rag.generator import Generator
from gguf_rag.rag.ranker import top_k
from gguf_rag.rag.vector_store import EmbeddingStore, ProgressFn, log_progress
from gguf_rag.storage.sqlite_vector_store import SQLiteVectorStore

LOG = logging.getLogger("rag.search")

PROMPT_TEMPLATE = (
    "Using the text passages below, please answer the user's question in the voice of the author:"
    "\n\n {context} \n\n Question: {question}"
)


@dataclass
class RAGConfig:
    """Configuration for the RAG pipeline."""

    top_k: int = 3
    chunk_size: int = 1024
    dedupe: bool = True


class RAGPipeline:
    """
    Question answering with retrieved passages as context.

    Usage::

        pipeline = RAGPipeline(embedder, generator)
        pipeline.build_or_load("author.db", training_folder="books/")
        for fragment in pipeline.ask("What inspired you?"):
            print(fragment, end="")
    """

    def __init__(
        self,
        embedding_provider: EmbeddingProvider,
        generator: Optional[Generator] = None,
        config: Optional[RAGConfig] = None,
        progress: Optional[ProgressFn] = log_progress,
    ) -> None:
        self._embed = embedding_provider
        self._generator = generator
        self._config = config or RAGConfig()
        self._progress = progress
        self._store: Optional[EmbeddingStore] = None

    @property
    def store(self) -> EmbeddingStore:
        if self._store is None:
            raise RuntimeError("No vector db loaded. Call build_or_load() or use_store() first.")
        return self._store

    def use_store(self, store: EmbeddingStore) -> None:
        self._store = store

    def build_or_load(
        self,
        db_path: Union[str, Path],
        training_folder: Union[str, Path, None] = None,
    ) -> EmbeddingStore:
        """
        Train and save a new store when db_path does not exist yet, otherwise
        load the existing one.

        Raises:
            StoreNotFoundError: db_path is missing and there is no training folder.
        """
        persisted = SQLiteVectorStore(db_path)

        if not persisted.exists() and training_folder and Path(training_folder).is_dir():
            chunks = load_chunks(training_folder, self._config.chunk_size)
            store = EmbeddingStore(embedding_size=self._embed.dimension(), dedupe=self._config.dedupe)
            store.train(chunks, self._embed.embed_one, progress=self._progress)
            persisted.save(store)
            LOG.info("Embedded data saved to %s", persisted.path)
        elif persisted.exists():
            store = persisted.load(self._embed.dimension(), dedupe=self._config.dedupe)
        else:
            raise StoreNotFoundError(f"Vector db not found: {persisted.path}")

        self._store = store
        return store

    def retrieve(self, question: str) -> list[str]:
        """Chunk texts most similar to the question, best first."""
        query = self._embed.embed_one(question)
        return top_k(self.store, query, self._config.top_k)

    @staticmethod
    def pack_context(chunks: list[str]) -> str:
        return "\n".join(chunks)

    @staticmethod
    def build_prompt(question: str, context: str) -> str:
        return PROMPT_TEMPLATE.format(context=context, question=question)

    def ask(self, question: str) -> Iterator[str]:
        """Stream the generator's answer to the question, grounded in retrieved chunks."""
        if self._generator is None:
            raise RuntimeError("RAGPipeline.ask() needs a generator")
        chunks = self.retrieve(question)
        LOG.debug("Retrieved %d chunks for question", len(chunks))
        prompt = self.build_prompt(question, self.pack_context(chunks))
        return self._generator.generate(prompt)
