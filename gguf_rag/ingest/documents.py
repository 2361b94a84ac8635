"""Document source: read .txt and .pdf files from a folder as raw text."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Union

from gguf_rag.rag.chunker import chunk_documents

LOG = logging.getLogger("ingest.documents")

SUPPORTED_SUFFIXES = (".txt", ".pdf")


@dataclass
class Document:
    """Raw text of one file, or of one page for PDFs."""

    source: Path
    text: str
    page: Optional[int] = None  # 1-indexed, PDFs only


def read_text_file(path: Path) -> Document:
    """Read a text file as-is: line endings are kept and undecodable bytes become U+FFFD."""
    with path.open("r", encoding="utf-8", errors="replace", newline="") as f:
        return Document(source=path, text=f.read())


def read_pdf(path: Path) -> Iterator[Document]:
    """Yield one Document per PDF page, extracted with PyMuPDF."""
    import fitz  # PyMuPDF

    doc = fitz.open(path)
    try:
        for page_num in range(doc.page_count):
            yield Document(source=path, text=doc[page_num].get_text(), page=page_num + 1)
    finally:
        doc.close()


def read_folder(folder: Union[str, Path]) -> Iterator[Document]:
    """
    Enumerate the files directly inside folder, in name order, and yield
    their text.

    Plain-text files produce one Document each, PDFs one per page. Other
    files are skipped.

    Raises:
        FileNotFoundError: folder does not exist or is not a directory.
    """
    folder = Path(folder)
    if not folder.is_dir():
        raise FileNotFoundError(f"Training data folder not found: {folder}")

    for path in sorted(p for p in folder.iterdir() if p.is_file()):
        suffix = path.suffix.lower()
        if suffix not in SUPPORTED_SUFFIXES:
            LOG.debug("Skipping unsupported file %s", path)
            continue

        LOG.info("reading %s", path)
        if suffix == ".pdf":
            yield from read_pdf(path)
        else:
            yield read_text_file(path)


def load_chunks(folder: Union[str, Path], chunk_size: int) -> List[str]:
    """Read every document in folder and cut each one into fixed-size chunks."""
    chunks = chunk_documents((document.text for document in read_folder(folder)), chunk_size)
    LOG.info("Collected %d chunks of %d characters from %s", len(chunks), chunk_size, folder)
    return chunks
