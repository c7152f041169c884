"""Catalog package: read-only access to board and component records.

The compatibility service only depends on the CatalogRepository protocol.
Two implementations ship here:
- CatalogDatabase: SQLite store built from the JSON seed on first use
- InMemoryCatalog: plain dicts, for tests and embedding
"""

import asyncio
import logging
import sqlite3
import threading
from pathlib import Path
from typing import Any, Protocol

from ..config import DB_PATH, SEED_FILE
from ..models import Board, Component
from .connection import build_database
from .lookup import get_board, get_component
from .memory import InMemoryCatalog

logger = logging.getLogger(__name__)

__all__ = [
    "CatalogRepository",
    "CatalogDatabase",
    "InMemoryCatalog",
    "NotFoundError",
    "get_catalog",
    "close_catalog",
]


class NotFoundError(Exception):
    """A board or component reference did not resolve to a catalog record."""

    def __init__(self, kind: str, ref: str):
        self.kind = kind
        self.ref = ref
        super().__init__(f"{kind.capitalize()} not found: {ref!r}")


class CatalogRepository(Protocol):
    """Read-only catalog lookups. ``ref`` is an exact id or a name fragment."""

    async def get_board(self, ref: str) -> Board | None: ...

    async def get_component(self, ref: str) -> Component | None: ...


class CatalogDatabase:
    """SQLite catalog of boards and components.

    Thread safety: check_same_thread=False with reads only.
    The _conn_lock protects lazy initialization of the connection and
    serializes queries coming from worker threads.
    """

    def __init__(self, db_path: Path | None = None, seed_file: Path | None = None):
        self.db_path = db_path or DB_PATH
        self.seed_file = seed_file or SEED_FILE
        self._conn: sqlite3.Connection | None = None
        self._conn_lock = threading.Lock()

    def _ensure_db(self) -> sqlite3.Connection:
        """Ensure database exists, build if missing. Thread-safe."""
        if self._conn is not None:
            return self._conn

        with self._conn_lock:
            # Double-check after acquiring lock
            if self._conn is not None:
                return self._conn

            if not self.db_path.exists():
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
                logger.info(f"Catalog not found at {self.db_path}, building...")
                build_database(self.seed_file, self.db_path)

            conn = sqlite3.connect(self.db_path, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            self._conn = conn
            return conn

    def close(self) -> None:
        """Close database connection. Thread-safe."""
        with self._conn_lock:
            if self._conn:
                self._conn.close()
                self._conn = None

    def find_board(self, ref: str) -> Board | None:
        """Blocking board lookup."""
        conn = self._ensure_db()
        with self._conn_lock:
            return get_board(conn, ref)

    def find_component(self, ref: str) -> Component | None:
        """Blocking component lookup."""
        conn = self._ensure_db()
        with self._conn_lock:
            return get_component(conn, ref)

    async def get_board(self, ref: str) -> Board | None:
        return await asyncio.to_thread(self.find_board, ref)

    async def get_component(self, ref: str) -> Component | None:
        return await asyncio.to_thread(self.find_component, ref)

    def get_stats(self) -> dict[str, Any]:
        """Record counts."""
        conn = self._ensure_db()
        with self._conn_lock:
            boards = conn.execute("SELECT COUNT(*) FROM boards").fetchone()[0]
            components = conn.execute("SELECT COUNT(*) FROM components").fetchone()[0]
        return {"boards": boards, "components": components}


# Global instance with thread safety
_catalog: CatalogDatabase | None = None
_catalog_lock = threading.Lock()


def get_catalog() -> CatalogDatabase:
    """Get or create the global catalog instance (thread-safe)."""
    global _catalog
    if _catalog is None:
        with _catalog_lock:
            # Double-check locking pattern
            if _catalog is None:
                _catalog = CatalogDatabase()
    return _catalog


def close_catalog() -> None:
    """Close the global catalog instance (thread-safe)."""
    global _catalog
    with _catalog_lock:
        if _catalog:
            _catalog.close()
            _catalog = None
