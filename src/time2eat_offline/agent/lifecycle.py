from __future__ import annotations

import asyncio
import logging
import re

from time2eat_offline.cache.interfaces import CacheStorage
from time2eat_offline.config.models import AgentSettings
from time2eat_offline.core.models import Request, Response, resolve_url
from time2eat_offline.errors import InstallError, NetworkError
from time2eat_offline.host.interfaces import Clients, Host
from time2eat_offline.net.interfaces import Network

logger = logging.getLogger(__name__)


class CacheLifecycleManager:
    """Precaches the static manifest on install and prunes old generations on activate."""

    def __init__(
        self,
        *,
        config: AgentSettings,
        caches: CacheStorage,
        network: Network,
        clients: Clients,
        host: Host,
    ) -> None:
        self._config = config
        self._caches = caches
        self._network = network
        self._clients = clients
        self._host = host
        # Legacy single-partition names (<prefix>-v<version>) belong to the agent too.
        self._owned_name = re.compile(rf"^{re.escape(config.cache_prefix)}-(?:static-|dynamic-)?v.+$")

    @property
    def current_cache_names(self) -> tuple[str, str]:
        return self._config.static_cache_name, self._config.dynamic_cache_name

    def manifest_requests(self) -> list[Request]:
        return [Request.get(resolve_url(self._config.origin, url)) for url in self._config.static_manifest]

    async def has_static_cache(self) -> bool:
        return await self._caches.has(self._config.static_cache_name)

    def owns_cache(self, name: str) -> bool:
        return bool(self._owned_name.match(name))

    async def on_install(self) -> None:
        static_name = self._config.static_cache_name
        logger.info("Installing agent. version=%s cache=%s", self._config.version, static_name)

        requests = self.manifest_requests()
        results = await asyncio.gather(
            *(self._network.fetch(request) for request in requests),
            return_exceptions=True,
        )

        failed: list[str] = []
        unexpected: Exception | None = None
        entries: list[tuple[Request, Response]] = []
        for request, result in zip(requests, results):
            if isinstance(result, NetworkError):
                logger.error("Failed to fetch manifest URL. url=%s error=%s", request.url, result)
                failed.append(request.url)
            elif isinstance(result, Exception):
                logger.error(
                    "Unexpected error fetching manifest URL. url=%s",
                    request.url,
                    exc_info=(type(result), result, result.__traceback__),
                )
                failed.append(request.url)
                unexpected = unexpected or result
            elif isinstance(result, BaseException):
                raise result
            elif not result.ok:
                logger.error("Manifest URL returned an error status. url=%s status=%s", request.url, result.status)
                failed.append(request.url)
            else:
                entries.append((request, result))

        if failed:
            raise InstallError(failed) from unexpected

        # The partition is only created once every manifest response is in hand.
        existed = await self._caches.has(static_name)
        try:
            cache = await self._caches.open(static_name)
            await cache.put_all(entries)
        except BaseException as e:
            if not existed:
                await self._caches.delete(static_name)
            if isinstance(e, Exception):
                logger.exception("Failed to store static files. cache=%s", static_name)
                raise InstallError([request.url for request, _ in entries]) from e
            raise

        logger.info("Static files cached. cache=%s count=%d", static_name, len(entries))
        await self._host.skip_waiting()

    async def on_activate(self) -> None:
        logger.info("Activating agent. version=%s", self._config.version)
        current = set(self.current_cache_names)
        for name in await self._caches.keys():
            if name in current or not self.owns_cache(name):
                continue
            logger.info("Deleting old cache. name=%s", name)
            await self._caches.delete(name)
        await self._clients.claim()
        logger.info("Agent activated. version=%s", self._config.version)
