"""
Resolver package for the Identicon Service.

Implements cache-aside retrieval: serve from the image cache when
possible, otherwise generate through the backend and populate the cache.
"""

from .image_resolver import ImageResolver, ResolvedImage

__all__ = ["ImageResolver", "ResolvedImage"]
