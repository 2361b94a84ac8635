"""
Retrieval subsystem: chunking, embedding store, dot-product ranking, and the
question-answering pipeline built on them.

Embedding and generation backends are capabilities (EmbeddingProvider,
Generator); the core does not depend on any model runtime.
"""

from __future__ import annotations
