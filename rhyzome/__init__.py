"""
rhyzome - a node + relation store over HTTP, guarded by single-use tokens.
"""

__version__ = "0.1.0"
