"""
Authorization - single-use, permission-scoped tokens.

Design principles:
1. The registry is the only owner of token state
2. Validation and consumption are one atomic step
3. Storage never sees a token
"""

from rhyzome.auth.permissions import Permission, permission_name
from rhyzome.auth.tokens import TokenRegistry
from rhyzome.auth.gate import AuthorizationGate
from rhyzome.auth.policies import enforce, get_bearer_token, get_gate
from rhyzome.auth.routes import router as tokens_router

__all__ = [
    # Core
    "TokenRegistry",
    "AuthorizationGate",
    "Permission",
    "permission_name",
    # FastAPI wiring
    "enforce",
    "get_bearer_token",
    "get_gate",
    # Router
    "tokens_router",
]
