"""
Storage abstractions.

- GraphStore → node table + named relation table
- SQLiteGraphStore → local file or ":memory:"
"""

from rhyzome.storage.base import (
    GraphStore,
    StoreError,
    StorageUnavailable,
    WriteFailed,
    ReadFailed,
    Collections,
)
from rhyzome.storage.sqlite import SQLiteGraphStore


def open_store(location: str) -> GraphStore:
    """Open the graph store at `location` (file path or ":memory:")."""
    return SQLiteGraphStore.open(location)


__all__ = [
    "GraphStore",
    "StoreError",
    "StorageUnavailable",
    "WriteFailed",
    "ReadFailed",
    "Collections",
    "SQLiteGraphStore",
    "open_store",
]
