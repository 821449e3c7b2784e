"""
Image generation backend client for the Identicon Service.
"""

import time
from typing import Optional, TYPE_CHECKING

import httpx

from shared.logging import get_logger
from shared.errors import UpstreamError

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


class MonsterClient:
    """Client for fetching generated images from the monster backend."""

    def __init__(
        self,
        generator_url: str,
        size: int = 80,
        timeout: Optional[float] = 10.0,
        *,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.base_url = generator_url.rstrip('/')
        self.size = size
        self.timeout = timeout
        self.metrics = metrics
        self.logger = get_logger("identicon.monster_client")

    async def fetch(self, identifier: str) -> bytes:
        """Generate the image for ``identifier`` and return its full body."""
        url = f"{self.base_url}/monster/{identifier}"
        params = {"size": self.size}
        start = time.perf_counter()
        status = "error"

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, params=params)

            if not response.is_success:
                self.logger.error(
                    "Image generation request failed",
                    url=url,
                    status_code=response.status_code,
                )
                raise UpstreamError(
                    f"Unexpected status {response.status_code}",
                    details={"status_code": response.status_code, "identifier": identifier},
                )

            status = "ok"
            self.logger.debug("Generated image", url=url, size=len(response.content))
            return response.content

        except httpx.HTTPError as e:
            self.logger.error("Image generation backend error", url=url, error=str(e))
            raise UpstreamError(
                str(e) or type(e).__name__,
                details={"identifier": identifier, "error_type": type(e).__name__},
            ) from e

        finally:
            if self.metrics:
                self.metrics.increment_counter("identicon_generations_total", status=status)
                self.metrics.observe_histogram(
                    "identicon_generation_duration_seconds",
                    time.perf_counter() - start,
                )
