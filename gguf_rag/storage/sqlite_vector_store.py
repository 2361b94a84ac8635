"""
SQLite persistence for EmbeddingStore.

Layout: a ``texts`` table with one row per entry and a ``vectors`` table with
``embedding_size`` scalar rows per entry, written in lockstep so vector block k
belongs to text row k. Each vector row also carries ``text_id``, the id of its
text row, and a ``meta`` table records the embedding size. Files that predate
those additions (plain ``texts(id, text)`` / ``vectors(id, vector)``) still load,
purely by position.

Saving never touches the target until the new database is complete: rows are
written in one transaction to a temporary file beside the target, which then
replaces it with os.replace.
"""

from __future__ import annotations

import logging
import os
import sqlite3
import tempfile
from contextlib import closing
from pathlib import Path
from typing import Union

from gguf_rag.errors import DataMismatchError, StoreIOError, StoreNotFoundError
from gguf_rag.rag.vector_store import EmbeddingStore

LOG = logging.getLogger("storage.sqlite_vector_store")

FORMAT_VERSION = "2"

_SCHEMA_SQL = """
CREATE TABLE texts (
    id INTEGER PRIMARY KEY ASC,
    text TEXT NOT NULL
);

CREATE TABLE vectors (
    id INTEGER PRIMARY KEY ASC,
    vector REAL NOT NULL,
    text_id INTEGER NOT NULL REFERENCES texts(id)
);

CREATE TABLE meta (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);

CREATE INDEX idx_vectors_text ON vectors(text_id);
"""

PathLike = Union[str, os.PathLike]


class SQLiteVectorStore:
    """Reads and writes an EmbeddingStore at a fixed database path."""

    def __init__(self, db_path: PathLike) -> None:
        self._db_path = Path(db_path)

    @property
    def path(self) -> Path:
        return self._db_path

    def exists(self) -> bool:
        return self._db_path.is_file()

    # ── Save ──────────────────────────────────────────────────────────

    def save(self, store: EmbeddingStore) -> None:
        """
        Persist the store, replacing any existing file.

        Raises:
            StoreIOError: The database could not be written or the existing
                file could not be replaced. The previous file, if any, is
                left as it was.
        """
        target = self._db_path
        tmp_path: Path | None = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
            os.close(fd)
            tmp_path = Path(tmp_name)

            self._write(tmp_path, store)
            os.replace(tmp_path, target)
            tmp_path = None
        except (sqlite3.Error, OSError) as exc:
            raise StoreIOError(f"Could not save vector db to {target}: {exc}") from exc
        finally:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)

        LOG.info("Saved %d entries (%d dims) to %s", len(store), store.embedding_size or 0, target)

    @staticmethod
    def _write(path: Path, store: EmbeddingStore) -> None:
        with closing(sqlite3.connect(str(path), isolation_level=None)) as conn:
            conn.executescript(_SCHEMA_SQL)
            cur = conn.cursor()
            cur.execute("BEGIN")
            try:
                cur.executemany(
                    "INSERT INTO meta (key, value) VALUES (?, ?)",
                    [
                        ("format_version", FORMAT_VERSION),
                        ("embedding_size", str(store.embedding_size or 0)),
                    ],
                )
                for entry in store:
                    cur.execute("INSERT INTO texts (text) VALUES (?)", (entry.text,))
                    text_id = cur.lastrowid
                    cur.executemany(
                        "INSERT INTO vectors (vector, text_id) VALUES (?, ?)",
                        [(float(x), text_id) for x in entry.vector],
                    )
                cur.execute("COMMIT")
            except BaseException:
                if conn.in_transaction:
                    conn.rollback()
                raise

    # ── Load ──────────────────────────────────────────────────────────

    def load(self, embedding_size: int, dedupe: bool = True) -> EmbeddingStore:
        """
        Load the persisted store, slicing the vector rows into blocks of
        embedding_size in id order.

        Raises:
            StoreNotFoundError: No file at the path.
            DataMismatchError: Vector rows do not line up with text rows.
            StoreIOError: The file is not a readable vector db.
        """
        if not self._db_path.is_file():
            raise StoreNotFoundError(f"Vector db not found: {self._db_path}")

        uri = self._db_path.resolve().as_uri() + "?mode=ro"
        try:
            with closing(sqlite3.connect(uri, uri=True)) as conn:
                tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")}
                vector_columns = {row[1] for row in conn.execute("PRAGMA table_info(vectors)")}
                has_text_ids = "text_id" in vector_columns

                if "meta" in tables:
                    self._check_meta(conn, embedding_size)

                text_rows = conn.execute("SELECT id, text FROM texts ORDER BY id").fetchall()
                if has_text_ids:
                    vector_rows = conn.execute("SELECT vector, text_id FROM vectors ORDER BY id").fetchall()
                else:
                    vector_rows = conn.execute("SELECT vector FROM vectors ORDER BY id").fetchall()
        except sqlite3.Error as exc:
            raise StoreIOError(f"Could not read vector db {self._db_path}: {exc}") from exc

        texts = [row[1] for row in text_rows]
        flat = [float(row[0]) for row in vector_rows]
        store = EmbeddingStore.from_records(texts, flat, embedding_size, dedupe=dedupe)

        if has_text_ids:
            owners = [row[1] for row in vector_rows]
            for k, (text_id, _) in enumerate(text_rows):
                block = owners[k * embedding_size : (k + 1) * embedding_size]
                if any(owner != text_id for owner in block):
                    raise DataMismatchError(f"Vector block {k} does not belong to text row {text_id}")
        else:
            LOG.debug("%s has no text_id column; aligning vectors by position", self._db_path)

        LOG.info("Loaded %d entries from %s", len(store), self._db_path)
        return store

    @staticmethod
    def _check_meta(conn: sqlite3.Connection, embedding_size: int) -> None:
        meta = dict(conn.execute("SELECT key, value FROM meta").fetchall())
        stored = meta.get("embedding_size")
        if stored is None:
            return
        try:
            stored_size = int(stored)
        except ValueError as exc:
            raise DataMismatchError(f"Vector db has a corrupt embedding size: {stored!r}") from exc
        if stored_size not in (0, embedding_size):
            raise DataMismatchError(f"Vector db was written with embedding size {stored}, expected {embedding_size}")


def save(store: EmbeddingStore, path: PathLike) -> None:
    """Persist store at path, replacing any existing file."""
    SQLiteVectorStore(path).save(store)


def load(path: PathLike, embedding_size: int, dedupe: bool = True) -> EmbeddingStore:
    """Load the store persisted at path."""
    return SQLiteVectorStore(path).load(embedding_size, dedupe=dedupe)
