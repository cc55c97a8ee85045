"""
Shared utility functions.
"""

from __future__ import annotations

import secrets
import uuid


def generate_id(prefix: str = "") -> str:
    """
    Generate a unique, URL-safe ID with optional prefix.
    
    Args:
        prefix: Optional prefix (e.g., "mb")
        
    Returns:
        A unique ID like "mb_4f1c0e6a9b7d4c2e8a1f3b5d7c9e0a2b"
    """
    uid = uuid.uuid4().hex
    return f"{prefix}_{uid}" if prefix else uid


def generate_token(nbytes: int = 32) -> str:
    """Generate an unguessable, URL-safe token string."""
    return secrets.token_urlsafe(nbytes)
