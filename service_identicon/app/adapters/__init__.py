"""
Adapters package for the Identicon Service.

Contains the HTTP client for the image generation backend. The adapter
encapsulates the base URL, request shape and fixed image size, and maps
every backend failure to ``UpstreamError``.
"""

from .monster_client import MonsterClient

__all__ = ["MonsterClient"]
