"""
Policies - how route handlers reach the authorization gate.

Routes declare the permission they need and call `enforce()` once the
request body has been validated, so a malformed request never spends a
token:

    @app.post("/microblogs")
    def create_microblog(
        body: CreateMicroblogRequest,
        token: str | None = Depends(get_bearer_token),
        gate: AuthorizationGate = Depends(get_gate),
    ):
        enforce(gate, token, Permission.CREATE_MICROBLOG)
        ...
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from rhyzome.auth.gate import AuthorizationGate
from rhyzome.auth.permissions import Permission, permission_name


# Optional bearer (doesn't fail if no token; the gate decides)
optional_bearer = HTTPBearer(auto_error=False)


def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(optional_bearer),
) -> str | None:
    """Extract the raw token from `Authorization: Bearer <token>`."""
    if not credentials:
        return None
    return credentials.credentials


def get_gate(request: Request) -> AuthorizationGate:
    """The gate built at startup."""
    return request.app.state.gate


def enforce(
    gate: AuthorizationGate,
    token: str | None,
    permission: Permission | str,
) -> None:
    """
    Spend `token` for `permission` or reject the request.
    
    Raises:
        HTTPException(401): token missing, unknown, spent, or lacking permission
    """
    if not gate.authorize(token, permission):
        raise HTTPException(
            status_code=401,
            detail=f"Unauthorized: requires a valid token with '{permission_name(permission)}'",
            headers={"WWW-Authenticate": "Bearer"},
        )
