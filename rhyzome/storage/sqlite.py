"""
SQLite implementation of GraphStore.

One connection is shared by every request thread. It is opened with
check_same_thread=False and in autocommit mode, so each operation is a
single statement that SQLite serializes on its own.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from rhyzome.config import MEMORY_DATABASE
from rhyzome.core.models import Relation
from rhyzome.storage.base import (
    GraphStore,
    ReadFailed,
    StorageUnavailable,
    WriteFailed,
)

logger = logging.getLogger(__name__)


SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS nodes (
        id TEXT PRIMARY KEY,
        value TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS relations (
        name TEXT NOT NULL,
        from_id TEXT NOT NULL,
        to_id TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_relations_from_id ON relations (from_id)",
    "CREATE INDEX IF NOT EXISTS idx_relations_name ON relations (name)",
)


class SQLiteGraphStore(GraphStore):
    """Graph store backed by a local SQLite file (or an in-memory database)."""
    
    def __init__(self, conn: sqlite3.Connection, location: str):
        self._conn = conn
        self.location = location
    
    @classmethod
    def open(cls, location: str = MEMORY_DATABASE) -> SQLiteGraphStore:
        """
        Open (creating if needed) the database at `location`.
        
        Schema creation is idempotent, so reopening an existing file is safe.
        
        Raises:
            StorageUnavailable: location can't be opened or initialized
        """
        conn = None
        try:
            if location != MEMORY_DATABASE:
                Path(location).parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(
                location,
                check_same_thread=False,
                isolation_level=None,
            )
            if location != MEMORY_DATABASE:
                conn.execute("PRAGMA journal_mode=WAL")
            for statement in SCHEMA:
                conn.execute(statement)
        except (sqlite3.Error, OSError) as e:
            if conn is not None:
                conn.close()
            logger.error(f"Could not open graph store at {location}: {e}")
            raise StorageUnavailable(f"Cannot open store at {location}: {e}") from e
        
        logger.info(f"Opened graph store at {location}")
        return cls(conn, location)
    
    def close(self) -> None:
        self._conn.close()
        logger.info(f"Closed graph store at {self.location}")
    
    # =========================================================================
    # Internal
    # =========================================================================
    
    def _write(self, sql: str, params: tuple = ()) -> None:
        try:
            self._conn.execute(sql, params)
        except sqlite3.Error as e:
            logger.error(f"Write failed ({sql.split()[0]}): {e}")
            raise WriteFailed(str(e)) from e
    
    def _read(self, sql: str, params: tuple = ()) -> list[tuple]:
        try:
            return self._conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            logger.error(f"Read failed: {e}")
            raise ReadFailed(str(e)) from e
    
    # =========================================================================
    # Nodes
    # =========================================================================
    
    def set_node(self, id: str, value: str) -> None:
        self._write(
            "INSERT INTO nodes (id, value) VALUES (?, ?) "
            "ON CONFLICT (id) DO UPDATE SET value = excluded.value",
            (id, value),
        )
    
    def get_node(self, id: str) -> str | None:
        rows = self._read("SELECT value FROM nodes WHERE id = ?", (id,))
        return rows[0][0] if rows else None
    
    def delete_node(self, id: str) -> None:
        self._write("DELETE FROM nodes WHERE id = ?", (id,))
    
    def all_node_values(self) -> list[str]:
        return [row[0] for row in self._read("SELECT value FROM nodes")]
    
    def all_node_ids(self) -> list[str]:
        return [row[0] for row in self._read("SELECT id FROM nodes")]
    
    # =========================================================================
    # Relations
    # =========================================================================
    
    def create_relation(self, from_id: str, name: str, to_id: str) -> None:
        self._write(
            "INSERT INTO relations (name, from_id, to_id) VALUES (?, ?, ?)",
            (name, from_id, to_id),
        )
    
    def delete_relations_by_name(self, name: str) -> None:
        self._write("DELETE FROM relations WHERE name = ?", (name,))
    
    def query_relations_from(self, from_id: str) -> list[Relation]:
        rows = self._read(
            "SELECT name, from_id, to_id FROM relations WHERE from_id = ?",
            (from_id,),
        )
        return [Relation(name=n, from_id=f, to_id=t) for n, f, t in rows]
    
    def related_ids(self, from_id: str, name: str) -> list[str]:
        rows = self._read(
            "SELECT to_id FROM relations WHERE from_id = ? AND name = ?",
            (from_id, name),
        )
        return [row[0] for row in rows]
