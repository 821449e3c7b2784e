"""
Cache package for the Identicon Service.

Provides a Redis-backed image cache. Entries are keyed by identifier,
never expire, and are written once per cold identifier.
"""

from .redis_cache import ImageCache, create_pool

__all__ = ["ImageCache", "create_pool"]
