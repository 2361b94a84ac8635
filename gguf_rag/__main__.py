"""Chat with the author of a body of work. Configured from the environment (see config.settings)."""

from __future__ import annotations

import logging
import sys

from gguf_rag.config.settings import AppConfig
from gguf_rag.errors import VectorDBError
from gguf_rag.rag.embedding_provider import build_embedding_provider
from gguf_rag.rag.generator import build_generator
from gguf_rag.rag.search import RAGConfig, RAGPipeline

LOG = logging.getLogger("gguf_rag")


def main() -> int:
    config = AppConfig.from_env()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    embedder = build_embedding_provider(config.embedding.backend, **config.embedding.provider_kwargs())
    generator = build_generator(config.generator.backend, **config.generator.generator_kwargs())
    pipeline = RAGPipeline(
        embedder,
        generator,
        config=RAGConfig(top_k=config.rag.top_k, chunk_size=config.rag.chunk_size, dedupe=config.rag.dedupe),
    )

    try:
        try:
            pipeline.build_or_load(config.rag.db_path, config.rag.training_folder or None)
        except VectorDBError as exc:
            LOG.error("%s", exc)
            return 1

        print("Ask the author a question")
        for line in sys.stdin:
            question = line.strip()
            if question == "exit":
                break
            if not question:
                continue
            for fragment in pipeline.ask(question):
                print(fragment, end="", flush=True)
            print()
    finally:
        generator.close()
        embedder.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
