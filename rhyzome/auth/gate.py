"""
Authorization gate - the one call a mutating route makes before it acts.
"""

from __future__ import annotations

from rhyzome.auth.permissions import Permission
from rhyzome.auth.tokens import TokenRegistry


class AuthorizationGate:
    """
    Checks a presented token against the permission a route needs.
    
    Holds no state of its own; a successful check spends the token.
    """
    
    def __init__(self, registry: TokenRegistry):
        self.registry = registry
    
    def authorize(
        self,
        token_id: str | None,
        required_permission: Permission | str,
    ) -> bool:
        """True if the token was valid for `required_permission` (and is now spent)."""
        if not token_id:
            return False
        return self.registry.validate_and_consume(token_id, required_permission)
