from __future__ import annotations

import logging
from typing import Optional

from time2eat_offline.agent.events import FetchEvent
from time2eat_offline.agent.routing import DynamicCacheRule
from time2eat_offline.cache.interfaces import CacheStorage
from time2eat_offline.config.models import AgentSettings
from time2eat_offline.core.models import HTTP_SCHEMES, Request, Response, resolve_url
from time2eat_offline.errors import NetworkError
from time2eat_offline.net.interfaces import Network

logger = logging.getLogger(__name__)


class FetchPolicy:
    """
    Cache-first interception of GET requests.

    Cached responses are served without revalidation; a new version tag is the
    only way to refresh precached assets on installed clients.
    """

    def __init__(
        self,
        *,
        config: AgentSettings,
        caches: CacheStorage,
        network: Network,
        rule: Optional[DynamicCacheRule] = None,
    ) -> None:
        self._config = config
        self._caches = caches
        self._network = network
        self._rule = rule or DynamicCacheRule.from_settings(config.dynamic)

    @staticmethod
    def should_intercept(request: Request) -> bool:
        return request.method == "GET" and request.scheme in HTTP_SCHEMES

    async def handle(self, event: FetchEvent) -> Optional[Response]:
        """Return the response for the request, or None to let it pass through untouched."""
        request = event.request
        if not self.should_intercept(request):
            return None

        cached = await self._caches.match(request)
        if cached is not None:
            logger.debug("Serving from cache. url=%s", request.url)
            return cached

        try:
            response = await self._network.fetch(request)
        except NetworkError as e:
            logger.info("Network fetch failed. url=%s error=%s", request.url, e)
            fallback = await self._offline_fallback(request)
            if fallback is None:
                raise
            return fallback

        if response.status != 200 or response.type != "basic":
            return response

        if self._rule.matches(request.url):
            event.wait_until(self._cache_dynamic(request, response.clone()))
        return response

    async def _cache_dynamic(self, request: Request, response: Response) -> None:
        name = self._config.dynamic_cache_name
        try:
            cache = await self._caches.open(name)
            await cache.put(request, response)
        except Exception:
            logger.exception("Failed to cache dynamic content. cache=%s url=%s", name, request.url)
            return
        logger.debug("Cached dynamic content. cache=%s url=%s", name, request.url)

    async def _cached_asset(self, url: str) -> Optional[Response]:
        return await self._caches.match(Request.get(resolve_url(self._config.origin, url)))

    async def _offline_fallback(self, request: Request) -> Optional[Response]:
        accept = request.accept
        if "text/html" in accept:
            cached = await self._cached_asset(self._config.offline_page_url)
            if cached is not None:
                return cached
            return Response.html(self._config.offline_html, url=request.url)
        if "image" in accept:
            cached = await self._cached_asset(self._config.offline_image_url)
            if cached is not None:
                return cached
            return Response.empty(404, url=request.url)
        return None
