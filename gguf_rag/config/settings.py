"""Configuration management for gguf-rag.

Loads settings from environment variables with sensible defaults.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class EmbeddingConfig:
    """Embedding backend configuration."""
    backend: str = "local"  # "local", "ollama", "mock"
    model: str = "all-MiniLM-L6-v2"
    ollama_url: str = "http://localhost:11434"
    timeout: float = 120.0

    @classmethod
    def from_env(cls) -> "EmbeddingConfig":
        return cls(
            backend=os.getenv("GGUF_RAG_EMBED_BACKEND", "local"),
            model=os.getenv("GGUF_RAG_EMBED_MODEL", "all-MiniLM-L6-v2"),
            ollama_url=os.getenv("OLLAMA_HOST", "http://localhost:11434"),
            timeout=float(os.getenv("GGUF_RAG_TIMEOUT", "120")),
        )

    def provider_kwargs(self) -> dict:
        if self.backend == "local":
            return {"model_name": self.model}
        if self.backend == "ollama":
            return {"model": self.model, "base_url": self.ollama_url, "timeout": self.timeout}
        return {}


@dataclass
class GeneratorConfig:
    """Generator backend configuration."""
    backend: str = "ollama"  # "ollama", "mock"
    model: str = "llama2"
    ollama_url: str = "http://localhost:11434"
    temperature: float = 0.6
    timeout: float = 120.0

    @classmethod
    def from_env(cls) -> "GeneratorConfig":
        return cls(
            backend=os.getenv("GGUF_RAG_GEN_BACKEND", "ollama"),
            model=os.getenv("GGUF_RAG_GEN_MODEL", "llama2"),
            ollama_url=os.getenv("OLLAMA_HOST", "http://localhost:11434"),
            temperature=float(os.getenv("GGUF_RAG_TEMPERATURE", "0.6")),
            timeout=float(os.getenv("GGUF_RAG_TIMEOUT", "120")),
        )

    def generator_kwargs(self) -> dict:
        if self.backend == "ollama":
            return {
                "model": self.model,
                "base_url": self.ollama_url,
                "temperature": self.temperature,
                "timeout": self.timeout,
            }
        return {}


@dataclass
class RAGSettings:
    """Vector db and retrieval configuration."""
    db_path: str = "./data/vectors.db"
    training_folder: str = ""  # empty = load only
    chunk_size: int = 1024
    top_k: int = 3
    dedupe: bool = True

    @classmethod
    def from_env(cls) -> "RAGSettings":
        return cls(
            db_path=os.getenv("GGUF_RAG_DB_PATH", "./data/vectors.db"),
            training_folder=os.getenv("GGUF_RAG_TRAINING_FOLDER", ""),
            chunk_size=int(os.getenv("GGUF_RAG_CHUNK_SIZE", "1024")),
            top_k=int(os.getenv("GGUF_RAG_TOP_K", "3")),
            dedupe=_env_bool("GGUF_RAG_DEDUPE", True),
        )


@dataclass
class AppConfig:
    """Top-level application configuration."""
    embedding: EmbeddingConfig = field(default_factory=EmbeddingConfig)
    generator: GeneratorConfig = field(default_factory=GeneratorConfig)
    rag: RAGSettings = field(default_factory=RAGSettings)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "AppConfig":
        return cls(
            embedding=EmbeddingConfig.from_env(),
            generator=GeneratorConfig.from_env(),
            rag=RAGSettings.from_env(),
            log_level=os.getenv("GGUF_RAG_LOG_LEVEL", "INFO").upper(),
        )
