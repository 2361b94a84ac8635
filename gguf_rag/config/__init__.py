from gguf_rag.config.settings import AppConfig, EmbeddingConfig, GeneratorConfig, RAGSettings

__all__ = ["AppConfig", "EmbeddingConfig", "GeneratorConfig", "RAGSettings"]
