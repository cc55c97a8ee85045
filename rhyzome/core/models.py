"""
Data model for the graph store and the token ledger.

Nodes travel as (id, value) arguments and relations as plain values
across the storage boundary. Tokens are mutable records owned by the TokenRegistry.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import BaseModel


class Relation(BaseModel):
    """
    A named, directed edge between two node ids.
    
    Relations carry no identifier of their own and the ends are not
    required to reference live nodes.
    """
    
    name: str
    from_id: str
    to_id: str


@dataclass
class Token:
    """
    A single-use, permission-scoped credential.
    
    Starts unused. Flips to used exactly once, inside the registry's
    critical section, and is never deleted.
    """
    
    id: str
    permissions: frozenset[str] = field(default_factory=frozenset)
    used: bool = False
    
    def allows(self, permission: str) -> bool:
        """Can this token still authorize `permission`?"""
        return not self.used and permission in self.permissions
