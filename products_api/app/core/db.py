"""
SQLite-backed document store.

This module provides ``DocumentStore``, an explicitly constructed
handle around a single SQLite connection that stores schemaless JSON
documents grouped into named collections.  The handle is created once
at startup, passed to the services that need it and closed on
shutdown; there is no module-level connection.

Every ``Collection`` operation touches exactly one document and runs
under the store lock inside its own transaction, so reads and writes
of a single document are atomic.  Documents are identified by 24
character hexadecimal object ids generated by ``new_object_id``.

The internal tables are created through the same versioned migration
list the rest of the project uses: applied versions are recorded in
the ``migrations`` table and new entries are executed in order.
"""

import json
import logging
import os
import re
import sqlite3
import threading
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional

from .errors import StoreUnavailable

logger = logging.getLogger(__name__)

Document = Dict[str, Any]

MEMORY_URL = ":memory:"

MIGRATIONS: List[tuple] = [
    # Migration 1: document table
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS documents (
            collection TEXT NOT NULL,
            id TEXT NOT NULL,
            body TEXT NOT NULL,
            created_at TEXT NOT NULL,
            PRIMARY KEY (collection, id)
        );
        CREATE INDEX IF NOT EXISTS idx_documents_created_at
            ON documents(collection, created_at);
        """,
    ),
]


# ----------------------------------------------------------------------
# Object ids
# ----------------------------------------------------------------------
_OID_PROCESS_RANDOM = os.urandom(5)
_oid_counter = int.from_bytes(os.urandom(3), "big")
_oid_lock = threading.Lock()


def new_object_id() -> str:
    """Return a new 24 character hexadecimal identifier.

    The 12 underlying bytes are a 4 byte big-endian timestamp in
    seconds, 5 random bytes fixed for the lifetime of the process and
    a 3 byte counter, so ids created by one process sort in creation
    order.
    """
    global _oid_counter
    with _oid_lock:
        _oid_counter = (_oid_counter + 1) % 0x1000000
        counter = _oid_counter
    raw = (
        int(time.time()).to_bytes(4, "big")
        + _OID_PROCESS_RANDOM
        + counter.to_bytes(3, "big")
    )
    return raw.hex()


_OBJECT_ID_PATTERN = re.compile(r"[0-9a-fA-F]{24}")


def is_valid_object_id(value: Any) -> bool:
    """True when ``value`` is exactly 24 hexadecimal characters, in either case."""
    return isinstance(value, str) and _OBJECT_ID_PATTERN.fullmatch(value) is not None


def utc_timestamp() -> str:
    """Current UTC time as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def resolve_database_path(url: str) -> str:
    """Resolve ``url`` to an absolute path unless it names an in-memory DB."""
    if url == MEMORY_URL or os.path.isabs(url):
        return url
    return str(Path(url).resolve())


# ----------------------------------------------------------------------
# Store handle
# ----------------------------------------------------------------------
class DocumentStore:
    """Handle owning the connection to the document database.

    Parameters
    ----------
    url : str
        SQLite database path or ``:memory:``.
    """

    def __init__(self, url: str) -> None:
        self.url = url
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.RLock()

    @property
    def is_connected(self) -> bool:
        return self._conn is not None

    def connect(self) -> "DocumentStore":
        """Open the connection, apply migrations and verify it responds.

        Raises
        ------
        StoreUnavailable
            If the database cannot be opened or initialised.
        """
        if self._conn is not None:
            return self
        path = resolve_database_path(self.url)
        conn: Optional[sqlite3.Connection] = None
        try:
            conn = sqlite3.connect(path, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            self._apply_migrations(conn)
            conn.execute("SELECT 1").fetchone()
        except sqlite3.Error as exc:
            if conn is not None:
                conn.close()
            logger.error("Could not open document store at %s: %s", path, exc)
            raise StoreUnavailable(f"Could not connect to document store: {exc}") from exc
        self._conn = conn
        logger.info("Connected to document store at %s", path)
        return self

    def close(self) -> None:
        with self._lock:
            if self._conn is None:
                return
            self._conn.close()
            self._conn = None
        logger.info("Document store connection closed")

    def __enter__(self) -> "DocumentStore":
        return self.connect()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def collection(self, name: str) -> "Collection":
        return Collection(self, name)

    @staticmethod
    def _apply_migrations(conn: sqlite3.Connection) -> None:
        conn.execute("CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)")
        row = conn.execute("SELECT MAX(version) AS version FROM migrations").fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0
        for version, sql in MIGRATIONS:
            if version > current_version:
                conn.executescript(sql)
                conn.execute("INSERT INTO migrations (version) VALUES (?)", (version,))
                current_version = version
        conn.commit()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """Yield the connection inside a locked transaction.

        Commits on success and rolls back when the body raises.  SQLite
        errors are re-raised as ``StoreUnavailable``; any other
        exception propagates unchanged after the rollback.
        """
        with self._lock:
            if self._conn is None:
                raise StoreUnavailable("Document store is not connected")
            conn = self._conn
            try:
                yield conn
                conn.commit()
            except sqlite3.Error as exc:
                conn.rollback()
                logger.error("Document store query failed: %s", exc)
                raise StoreUnavailable(f"Document store query failed: {exc}") from exc
            except Exception:
                conn.rollback()
                raise


class Collection:
    """Single-document operations over one named collection."""

    def __init__(self, store: DocumentStore, name: str) -> None:
        self.store = store
        self.name = name

    @staticmethod
    def _load(row: sqlite3.Row) -> Document:
        document = json.loads(row["body"])
        document["id"] = row["id"]
        return document

    def _select(self, conn: sqlite3.Connection, document_id: str) -> Optional[sqlite3.Row]:
        return conn.execute(
            "SELECT id, body FROM documents WHERE collection = ? AND id = ?",
            (self.name, document_id),
        ).fetchone()

    def insert_one(self, document: Document) -> Document:
        """Insert ``document`` and return it with generated ``id``, ``createdAt`` and ``updatedAt``."""
        now = utc_timestamp()
        stored = dict(document)
        stored.pop("id", None)
        stored["createdAt"] = now
        stored["updatedAt"] = now
        document_id = new_object_id()
        with self.store.transaction() as conn:
            conn.execute(
                "INSERT INTO documents (collection, id, body, created_at) VALUES (?, ?, ?, ?)",
                (self.name, document_id, json.dumps(stored), now),
            )
        stored["id"] = document_id
        return stored

    def find_all(self) -> List[Document]:
        """Return every document, newest first."""
        with self.store.transaction() as conn:
            rows = conn.execute(
                "SELECT id, body FROM documents WHERE collection = ? ORDER BY created_at DESC, id DESC",
                (self.name,),
            ).fetchall()
        return [self._load(row) for row in rows]

    def find_by_id(self, document_id: str) -> Optional[Document]:
        with self.store.transaction() as conn:
            row = self._select(conn, document_id)
        return self._load(row) if row else None

    def find_one_and_update(
        self,
        document_id: str,
        update: Callable[[Document], Document],
    ) -> Optional[Document]:
        """Atomically replace the fields of one document.

        ``update`` receives the current document and returns the fields
        to store.  If it raises, nothing is written.  ``id`` and
        ``createdAt`` are preserved and ``updatedAt`` is refreshed.
        Returns the post-update document, or ``None`` when no document
        has ``document_id``.
        """
        with self.store.transaction() as conn:
            row = self._select(conn, document_id)
            if row is None:
                return None
            current = self._load(row)
            changes = update(dict(current))
            stored = {k: v for k, v in current.items() if k != "id"}
            stored.update({k: v for k, v in changes.items() if k not in {"id", "createdAt"}})
            stored["updatedAt"] = utc_timestamp()
            conn.execute(
                "UPDATE documents SET body = ? WHERE collection = ? AND id = ?",
                (json.dumps(stored), self.name, document_id),
            )
        stored["id"] = document_id
        return stored

    def find_by_id_and_delete(self, document_id: str) -> Optional[Document]:
        """Delete one document and return it, or ``None`` if absent."""
        with self.store.transaction() as conn:
            row = self._select(conn, document_id)
            if row is None:
                return None
            conn.execute(
                "DELETE FROM documents WHERE collection = ? AND id = ?",
                (self.name, document_id),
            )
        return self._load(row)
