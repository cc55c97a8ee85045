"""
Token registry - the in-memory ledger of single-use tokens.

Tokens live only in process memory and are gone after a restart. That is
intentional: a restart revokes every outstanding token.
"""

from __future__ import annotations

import logging
import threading
from typing import Iterable

from rhyzome.auth.permissions import Permission, permission_name
from rhyzome.core.models import Token
from rhyzome.core.utils import generate_token

logger = logging.getLogger(__name__)


class TokenRegistry:
    """
    Issues tokens and consumes them exactly once.
    
    validate_and_consume() is the only read-modify-write on the ledger and
    runs entirely under one lock, so two requests racing with the same
    token can never both succeed.
    
    Usage:
        registry = TokenRegistry()
        token_id = registry.issue({"create_microblog"})
        registry.validate_and_consume(token_id, "create_microblog")  # True
        registry.validate_and_consume(token_id, "create_microblog")  # False
    """
    
    def __init__(self, token_bytes: int = 32):
        self._tokens: dict[str, Token] = {}
        self._lock = threading.Lock()
        self._token_bytes = token_bytes
    
    def issue(self, permissions: Iterable[Permission | str]) -> str:
        """
        Create a new unused token carrying `permissions`.
        
        Returns:
            The token id. Ids are never reused, including ids of spent tokens.
        """
        granted = frozenset(permission_name(p) for p in permissions)
        
        with self._lock:
            token_id = generate_token(self._token_bytes)
            while token_id in self._tokens:
                token_id = generate_token(self._token_bytes)
            self._tokens[token_id] = Token(id=token_id, permissions=granted)
        
        logger.info(f"Issued token {token_id[:6]}… with permissions {sorted(granted)}")
        return token_id
    
    def validate_and_consume(
        self,
        token_id: str,
        required_permission: Permission | str,
    ) -> bool:
        """
        Spend `token_id` if it is unused and grants `required_permission`.
        
        Returns False (leaving the ledger untouched) for unknown, spent,
        or under-permissioned tokens. Never raises for a bad token.
        """
        required = permission_name(required_permission)
        
        with self._lock:
            token = self._tokens.get(token_id)
            if token is None or not token.allows(required):
                reason = self._rejection_reason(token, required)
                allowed = False
            else:
                token.used = True
                allowed = True
        
        if allowed:
            logger.info(f"Token {token_id[:6]}… consumed for {required}")
        else:
            logger.debug(f"Token rejected for {required}: {reason}")
        return allowed
    
    @staticmethod
    def _rejection_reason(token: Token | None, required: str) -> str:
        if token is None:
            return "unknown token"
        if token.used:
            return "token already used"
        return "missing permission"
    
    # =========================================================================
    # Introspection
    # =========================================================================
    
    def is_used(self, token_id: str) -> bool | None:
        """Whether a token has been spent; None if it was never issued."""
        with self._lock:
            token = self._tokens.get(token_id)
            return None if token is None else token.used
    
    def __contains__(self, token_id: object) -> bool:
        with self._lock:
            return token_id in self._tokens
    
    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)
