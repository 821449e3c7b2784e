"""
Identicon service for Identidock.
"""

from typing import Dict, Optional

from fastapi import Form, Response
from fastapi.responses import HTMLResponse

from shared.base_service import BaseService
from shared.config import ServiceConfig
from shared.errors import ValidationError

from .identity import IdentityDeriver, is_identifier
from .cache import ImageCache, create_pool
from .adapters import MonsterClient
from .resolver import ImageResolver, ResolvedImage
from .pages import render_form_page

IMAGE_MEDIA_TYPE = "image/png"


class IdenticonService(BaseService):
    """Identicon service implementation."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        *,
        cache: Optional[ImageCache] = None,
        generator: Optional[MonsterClient] = None,
    ):
        super().__init__("identicon", 9090, config=config)

        self.deriver = IdentityDeriver(self.config.identity_salt)

        # The pool is created lazily by redis-py; nothing connects until first use
        self.pool = None
        if cache is None:
            self.pool = create_pool(
                self.config.redis_url,
                max_connections=self.config.redis_max_connections,
                timeout=self.config.redis_pool_timeout,
                socket_timeout=self.config.redis_socket_timeout,
            )
            cache = ImageCache(self.pool)
        self.cache = cache

        self.generator = generator or MonsterClient(
            self.config.generator_url,
            size=self.config.image_size,
            timeout=self.config.generator_timeout,
            metrics=self.metrics,
        )

        self.resolver = ImageResolver(
            self.deriver,
            self.cache,
            self.generator,
            single_flight=self.config.single_flight,
            metrics=self.metrics,
        )

        self._setup_identicon_routes()

    def _setup_identicon_routes(self):
        """Set up identicon-specific routes."""

        @self.app.get("/", response_class=HTMLResponse)
        async def default_page():
            """Form page for the default name."""
            self.logger.info("Default request")
            return self._form_page(self.config.default_name)

        @self.app.post("/", response_class=HTMLResponse)
        async def form_page(name: str = Form(...)):
            """Form page for a submitted name."""
            self.logger.info("Form request")
            return self._form_page(name)

        @self.app.get("/monster/{name:path}")
        async def get_identicon(name: str):
            """Image for a name, served from cache or freshly generated."""
            self.logger.info("Get identicon request")
            return self._image_response(await self.resolver.resolve_with_outcome(name))

        @self.app.get("/identicon/{identifier}")
        async def get_identicon_by_identifier(identifier: str):
            """Image for an already derived identifier, as linked from the form page."""
            if not is_identifier(identifier):
                raise ValidationError(
                    "Identifier must be 64 lowercase hex characters",
                    details={"identifier": identifier},
                )
            self.logger.info("Get identicon by identifier request")
            return self._image_response(await self.resolver.resolve_identifier(identifier))

    def _form_page(self, name: str) -> str:
        return render_form_page(name, self.deriver.derive(name))

    @staticmethod
    def _image_response(resolved: ResolvedImage) -> Response:
        return Response(
            content=resolved.content,
            media_type=IMAGE_MEDIA_TYPE,
            headers={"X-Identicon-Source": resolved.source},
        )

    async def start(self):
        """Start identicon service components."""
        await super().start()
        if await self.cache.health_check():
            self.logger.info("Redis cache reachable")
        else:
            # Not fatal: every lookup degrades to a miss until Redis is back
            self.logger.warning("Redis cache unreachable at startup")

    async def stop(self):
        """Stop identicon service components."""
        if self.pool is not None:
            await self.cache.close()
        await super().stop()

    async def _check_dependencies(self) -> Dict[str, str]:
        return {"redis": "ok" if await self.cache.health_check() else "error"}


def create_app(config: Optional[ServiceConfig] = None):
    """Create identicon service application."""
    service = IdenticonService(config)
    return service.app


if __name__ == "__main__":
    service = IdenticonService()
    service.run()
