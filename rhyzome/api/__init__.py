"""
HTTP API.
"""

from rhyzome.api.app import create_app

__all__ = ["create_app"]
