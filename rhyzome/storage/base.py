"""
Storage abstraction layer.

All node and relation persistence goes through GraphStore. Nothing else in
the application touches the database, and the store knows nothing about
tokens or permissions.

Relation semantics worth remembering:
- duplicates are allowed (append-only edge log)
- ends are not checked against the node table
- delete_relations_by_name() removes the name across ALL origins
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import deque
from typing import Literal

from rhyzome.core.models import Relation


# =============================================================================
# Errors
# =============================================================================


class StoreError(Exception):
    """Base class for storage failures."""
    pass


class StorageUnavailable(StoreError):
    """The store could not be opened or its schema could not be created."""
    pass


class WriteFailed(StoreError):
    """An individual write hit an I/O error."""
    pass


class ReadFailed(StoreError):
    """An individual read hit an I/O error."""
    pass


# =============================================================================
# Collection Names
# =============================================================================


class Collections:
    """Sentinel relations used to enumerate a logical collection."""
    
    MICROBLOG = "microblog"


DEFAULT_TRAVERSAL_RELATION = "related"

TraversalOrder = Literal["depth", "breadth"]


# =============================================================================
# Store Interface
# =============================================================================


class GraphStore(ABC):
    """
    Node table plus a directed, named relation table.
    
    Implementations must be safe to call from several request threads at
    once. Calls are independent: there are no transactions spanning more
    than one operation.
    
    Usable as a context manager; close() runs on every exit path.
    """
    
    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------
    
    @abstractmethod
    def close(self) -> None:
        """Release the underlying storage handle."""
        pass
    
    def __enter__(self) -> GraphStore:
        return self
    
    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
    
    # -------------------------------------------------------------------------
    # Nodes
    # -------------------------------------------------------------------------
    
    @abstractmethod
    def set_node(self, id: str, value: str) -> None:
        """Insert or overwrite a node."""
        pass
    
    @abstractmethod
    def get_node(self, id: str) -> str | None:
        """Get a node's value, or None if there is no such node."""
        pass
    
    @abstractmethod
    def delete_node(self, id: str) -> None:
        """Delete a node. Deleting an absent id is a no-op."""
        pass
    
    @abstractmethod
    def all_node_values(self) -> list[str]:
        """Every stored node value, in no particular order."""
        pass
    
    @abstractmethod
    def all_node_ids(self) -> list[str]:
        """Every stored node id, in no particular order."""
        pass
    
    # -------------------------------------------------------------------------
    # Relations
    # -------------------------------------------------------------------------
    
    @abstractmethod
    def create_relation(self, from_id: str, name: str, to_id: str) -> None:
        """Append a relation. Duplicates are kept."""
        pass
    
    @abstractmethod
    def delete_relations_by_name(self, name: str) -> None:
        """Delete every relation called `name`, whatever its origin."""
        pass
    
    @abstractmethod
    def query_relations_from(self, from_id: str) -> list[Relation]:
        """All relations leaving `from_id`, in no particular order."""
        pass
    
    @abstractmethod
    def related_ids(self, from_id: str, name: str) -> list[str]:
        """Destination ids of the `name` relations leaving `from_id`."""
        pass
    
    # -------------------------------------------------------------------------
    # Traversal
    # -------------------------------------------------------------------------
    
    def traverse(
        self,
        start_id: str,
        relation: str = DEFAULT_TRAVERSAL_RELATION,
        order: TraversalOrder = "depth",
    ) -> list[str]:
        """
        Walk `relation` edges outward from `start_id`.
        
        Returns node ids in visit order, starting with `start_id`. Each id
        is visited once, so cycles terminate.
        
        Args:
            start_id: Where to start (need not be a stored node)
            relation: Relation name to follow
            order: "depth" (stack) or "breadth" (queue)
        """
        if order not in ("depth", "breadth"):
            raise ValueError(f"Unknown traversal order: {order!r}")
        
        visited: list[str] = []
        seen: set[str] = set()
        frontier: deque[str] = deque([start_id])
        
        while frontier:
            node_id = frontier.pop() if order == "depth" else frontier.popleft()
            if node_id in seen:
                continue
            seen.add(node_id)
            visited.append(node_id)
            
            neighbours = self.related_ids(node_id, relation)
            if order == "depth":
                # Reversed so the first neighbour is visited first
                neighbours = list(reversed(neighbours))
            frontier.extend(n for n in neighbours if n not in seen)
        
        return visited
