"""
Cache-aside image resolution for the Identicon Service.
"""

import asyncio
from dataclasses import dataclass
from typing import Dict, Optional, TYPE_CHECKING

from shared.logging import get_logger, set_identifier, request_id_var
from shared.errors import CacheError

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector
    from ..adapters.monster_client import MonsterClient
    from ..cache.redis_cache import ImageCache
    from ..identity.deriver import IdentityDeriver

SOURCE_CACHE = "cache"
SOURCE_GENERATOR = "generator"


@dataclass(frozen=True)
class ResolvedImage:
    """Image bytes together with the identifier and where they came from."""

    identifier: str
    content: bytes
    source: str


class ImageResolver:
    """Resolves names to image bytes, generating and caching on a miss.

    Per request the resolver performs one cache read, at most one backend
    call and at most one cache write. Cache failures are logged and treated
    as misses (reads) or ignored (writes); only ``UpstreamError`` from the
    generator reaches the caller.

    With ``single_flight`` enabled, concurrent misses for the same
    identifier share one generation task instead of each calling the
    backend.
    """

    def __init__(
        self,
        deriver: "IdentityDeriver",
        cache: "ImageCache",
        generator: "MonsterClient",
        *,
        single_flight: bool = True,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.deriver = deriver
        self.cache = cache
        self.generator = generator
        self.single_flight = single_flight
        self.metrics = metrics
        self.logger = get_logger("identicon.resolver")
        self._inflight: Dict[str, "asyncio.Task[bytes]"] = {}

    async def resolve(self, name: str) -> bytes:
        """Return the image for ``name``."""
        return (await self.resolve_with_outcome(name)).content

    async def resolve_with_outcome(self, name: str) -> ResolvedImage:
        """Return the image for ``name`` along with its identifier and source."""
        identifier = self.deriver.derive(name)
        set_identifier(identifier)
        return await self._resolve(identifier)

    async def resolve_identifier(self, identifier: str) -> ResolvedImage:
        """Return the image for an identifier that has already been derived."""
        set_identifier(identifier)
        return await self._resolve(identifier)

    def inflight_count(self) -> int:
        """Number of identifiers currently being generated."""
        return len(self._inflight)

    async def _resolve(self, identifier: str) -> ResolvedImage:
        cached = await self._lookup(identifier)
        if cached:
            return ResolvedImage(identifier, cached, SOURCE_CACHE)

        image = await self._generate(identifier)
        return ResolvedImage(identifier, image, SOURCE_GENERATOR)

    async def _lookup(self, identifier: str) -> Optional[bytes]:
        try:
            cached = await self.cache.get(identifier)
        except CacheError as e:
            self.logger.warning("Cache read failed, treating as miss", identifier=identifier, error=str(e))
            self._count("identicon_cache_errors_total", operation="read")
            self._count("identicon_cache_lookups_total", result="error")
            return None

        if cached:
            self.logger.info("Got an image from cache", identifier=identifier)
            self._count("identicon_cache_lookups_total", result="hit")
            return cached

        # An empty cached value is a miss
        self.logger.info("No image in cache, generating a new image", identifier=identifier)
        self._count("identicon_cache_lookups_total", result="miss")
        return None

    async def _generate(self, identifier: str) -> bytes:
        if not self.single_flight:
            return await self._generate_and_store(identifier)

        task = self._inflight.get(identifier)
        if task is None:
            task = asyncio.ensure_future(self._shared_generation(identifier))
            self._inflight[identifier] = task
            task.add_done_callback(lambda done: self._forget(identifier, done))
        else:
            self.logger.debug("Joining in-flight generation", identifier=identifier)

        # Cancelling one waiter must not cancel the shared generation
        return await asyncio.shield(task)

    def _forget(self, identifier: str, task: "asyncio.Task[bytes]") -> None:
        if self._inflight.get(identifier) is task:
            del self._inflight[identifier]
        if not task.cancelled():
            # Mark the outcome retrieved even when every waiter went away
            task.exception()

    async def _shared_generation(self, identifier: str) -> bytes:
        # Shared by every waiter, so not tied to the first caller's request id
        request_id_var.set(None)
        set_identifier(identifier)
        return await self._generate_and_store(identifier)

    async def _generate_and_store(self, identifier: str) -> bytes:
        image = await self.generator.fetch(identifier)

        try:
            await self.cache.set(identifier, image)
        except CacheError as e:
            self.logger.warning("Cache write failed, serving generated image", identifier=identifier, error=str(e))
            self._count("identicon_cache_errors_total", operation="write")

        return image

    def _count(self, metric_name: str, **labels) -> None:
        if self.metrics:
            self.metrics.increment_counter(metric_name, **labels)
