"""
Core types shared by storage, auth and the HTTP layer.
"""

from rhyzome.core.models import Relation, Token
from rhyzome.core.utils import generate_id, generate_token

__all__ = [
    "Relation",
    "Token",
    "generate_id",
    "generate_token",
]
