# =============================================================================
# Token API Routes
# =============================================================================
#
# Endpoints:
#   POST /tokens   - Issue a single-use token (admin password required)
#
# Tokens are held in memory only; restarting the server revokes them all.
#
# =============================================================================

import logging
import secrets

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel, Field

from rhyzome.auth.tokens import TokenRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tokens", tags=["tokens"])


# =============================================================================
# Request/Response Models
# =============================================================================

class IssueTokenRequest(BaseModel):
    password: str
    permissions: list[str] = Field(min_length=1)


class TokenResponse(BaseModel):
    token: str
    permissions: list[str]


# =============================================================================
# Endpoints
# =============================================================================

@router.post("", response_model=TokenResponse)
def issue_token(data: IssueTokenRequest, request: Request):
    """
    Issue a token carrying the requested permissions.
    
    The admin password is the only credential; it is compared in
    constant time.
    """
    settings = request.app.state.settings
    if not secrets.compare_digest(
        data.password.encode("utf-8"),
        settings.admin_password.encode("utf-8"),
    ):
        logger.warning("Token issuance refused: bad admin password")
        raise HTTPException(status_code=401, detail="Invalid admin password")
    
    registry: TokenRegistry = request.app.state.tokens
    token = registry.issue(data.permissions)
    
    return TokenResponse(token=token, permissions=sorted(set(data.permissions)))
