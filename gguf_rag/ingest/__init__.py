from gguf_rag.ingest.documents import Document, load_chunks, read_folder

__all__ = ["Document", "load_chunks", "read_folder"]
